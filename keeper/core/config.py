"""Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env file.
Credential-bearing values are ``SecretStr`` so they never end up in
reprs or log lines.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, PostgresDsn, RedisDsn, SecretStr, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-session-signing-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ============ Application Settings ============
    APP_NAME: str = "Secret Keeper"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "testing", "staging", "production"] = "development"

    # ============ Server Settings ============
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # ============ CORS Settings ============
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed to call the API with credentials",
    )

    # ============ Session Settings ============
    SECRET_KEY: SecretStr = Field(
        default=SecretStr(DEFAULT_SECRET_KEY),
        description="Secret key used to sign session tokens",
    )
    SESSION_EXPIRE_MINUTES: int = Field(
        default=60 * 24,
        description="Session lifetime in minutes",
    )
    SESSION_COOKIE_NAME: str = "keeper_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_BACKEND: Literal["redis", "memory"] = Field(
        default="redis",
        description="Where active sessions are registered",
    )

    # ============ Password Hashing ============
    BCRYPT_ROUNDS: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt work factor (log2 rounds)",
    )

    # ============ Database Settings ============
    DATABASE_URL: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL; wins over the POSTGRES_* parts",
    )
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "keeper"
    POSTGRES_PASSWORD: SecretStr = SecretStr("keeper_password")
    POSTGRES_DB: str = "keeper_db"
    DB_AUTO_CREATE: bool = Field(
        default=False,
        description="Create tables on startup instead of relying on Alembic",
    )

    @property
    def database_url(self) -> str:
        """Get the async database connection URL as a string."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD.get_secret_value(),
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # ============ Redis Settings ============
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: SecretStr | None = None
    REDIS_DB: int = 0
    REDIS_MAX_CONNECTIONS: int = 10

    @computed_field  # type: ignore[misc]
    @property
    def REDIS_URL(self) -> str:
        """Construct Redis connection URL."""
        if self.REDIS_PASSWORD:
            return str(
                RedisDsn.build(
                    scheme="redis",
                    password=self.REDIS_PASSWORD.get_secret_value(),
                    host=self.REDIS_HOST,
                    port=self.REDIS_PORT,
                    path=str(self.REDIS_DB),
                )
            )
        return str(
            RedisDsn.build(
                scheme="redis",
                host=self.REDIS_HOST,
                port=self.REDIS_PORT,
                path=str(self.REDIS_DB),
            )
        )

    # ============ Logging Settings ============
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"

    # ============ OAuth Settings ============
    # Google OAuth
    GOOGLE_CLIENT_ID: str = Field(
        default="",
        description="Google OAuth Client ID",
    )

    # Facebook OAuth
    FACEBOOK_APP_ID: str = Field(
        default="",
        description="Facebook App ID",
    )
    FACEBOOK_APP_SECRET: SecretStr = Field(
        default=SecretStr(""),
        description="Facebook App Secret",
    )

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        """Refuse to sign sessions with the shipped key outside development."""
        if self.ENVIRONMENT not in ("development", "testing") and (
            self.SECRET_KEY.get_secret_value() == DEFAULT_SECRET_KEY
        ):
            raise ValueError(f"SECRET_KEY must be set when ENVIRONMENT={self.ENVIRONMENT}")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
