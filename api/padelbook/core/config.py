"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings

from padelbook.core.errors import ConfigurationMissing


class Settings(BaseSettings):
    # App
    app_name: str = "PadelBook"
    debug: bool = True
    secret_key: str = ""
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://padelbook:padelbook@db:5432/padelbook"
    database_echo: bool = False

    # Auth
    access_token_expire_minutes: int = 60 * 24 * 30
    jwt_algorithm: str = "HS256"
    allow_anonymous: bool = True
    initial_auth_token: str | None = None

    # Club
    timezone: str = "Asia/Manila"
    court_count: int = 2
    max_block_slots: int = 4
    max_guests: int = 3

    # Pricing (estimate only, never charged)
    currency: str = "PHP"
    hourly_rate: int = 500
    per_guest_rate: int = 200

    # Email / SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_from: str = "reservations@padelbook.local"
    send_confirmation_emails: bool = False

    model_config = {"env_prefix": "PB_", "env_file": ".env", "extra": "ignore"}


REQUIRED_SETTINGS = ("database_url", "secret_key")


def check_configuration(config: Settings) -> None:
    """Raise ConfigurationMissing if any required setting is empty.

    Called from the app lifespan so a misconfigured service refuses to start.
    """
    missing = [name for name in REQUIRED_SETTINGS if not getattr(config, name)]
    if missing:
        names = ", ".join(f"PB_{name.upper()}" for name in missing)
        raise ConfigurationMissing(f"Missing required configuration: {names}. Check your environment or .env file.")


settings = Settings()
