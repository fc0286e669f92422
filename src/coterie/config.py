from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # e.g. mongodb://localhost:27017/coterie
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    cors_origins: list[str] = []

    # Sessions
    session_duration_hours: int = 24
    remember_me_duration_hours: int = 24 * 30
    secure_cookies: bool = True  # Disable only for plain-HTTP local development

    # Periodic session/CSRF cleanup and dues sweep, 0 disables the background task
    maintenance_interval_minutes: int = 60

    # Discord role sync
    discord_enabled: bool = False
    discord_bot_token: str = ""
    discord_guild_id: str = ""
    discord_member_role_id: str = ""
    discord_expired_role_id: str = ""

    # UniFi door access
    unifi_enabled: bool = False
    unifi_controller_url: str = ""
    unifi_api_token: str = ""
    unifi_site_id: str = "default"

    integration_timeout_seconds: float = 10.0

    model_config = {
        "env_file": [".env"],
        "env_prefix": "COTERIE_",
        "extra": "ignore",
    }
