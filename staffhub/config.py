"""
Application configuration using pydantic-settings.
Loads values from .env file in project root.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database settings
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "staffhub"
    db_user: str = "staffhub"
    db_password: str = ""
    # Full URL wins over the db_* parts when set (e.g. sqlite:// in tests)
    database_url_override: str = Field("", validation_alias="DATABASE_URL")

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    # Credential tokens (Fernet key, base64)
    token_key: str = ""
    token_ttl_seconds: int = 8 * 60 * 60
    operational_roles: list[str] = [
        "ADMIN",
        "MANAGER",
        "SENIOR MANAGER",
        "MANAGING DIRECTOR",
    ]

    # Import engine settings
    import_max_bind_params: int = 60000
    import_dayfirst: bool = False
    default_user_password: str = "Password123!"
    long_term_threshold_days: int = 60
    daily_expense_ratio: float = 0.035

    @property
    def database_url(self) -> str:
        """Generate SQLAlchemy database URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def token_configured(self) -> bool:
        """Check if the credential token key is configured."""
        return bool(self.token_key)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
