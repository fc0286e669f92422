from coterie.config import Config
from coterie.core.modules.integration.base import Integration
from coterie.core.modules.integration.discord import DiscordIntegration
from coterie.core.modules.integration.dispatcher import IntegrationDispatcher
from coterie.core.modules.integration.unifi import UnifiIntegration


def build_integrations(config: Config) -> list[Integration]:
    """Instantiate the adapters switched on in configuration."""
    adapters: list[Integration] = []
    if config.discord_enabled:
        adapters.append(DiscordIntegration.from_config(config))
    if config.unifi_enabled:
        adapters.append(UnifiIntegration.from_config(config))
    return adapters


def build_dispatcher(config: Config) -> IntegrationDispatcher:
    return IntegrationDispatcher(build_integrations(config))
