"""Application entry point for Coterie membership server."""

from coterie.app import App
from coterie.config import Config
from coterie.logging import setup_logging
from coterie.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
