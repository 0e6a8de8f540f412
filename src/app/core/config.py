from enum import Enum

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------
# Base class – reads environment variables AND .env locally
# -----------------------------------------------------------
class BaseConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# -----------------------------------------------------------
# App Info
# -----------------------------------------------------------
class AppSettings(BaseConfig):
    APP_NAME: str = "Calm Breath"
    APP_DESCRIPTION: str | None = "Subscription content platform: videos, audio and guides"
    APP_VERSION: str | None = "0.1.0"
    LICENSE_NAME: str | None = None
    CONTACT_NAME: str | None = None
    CONTACT_EMAIL: str | None = None
    FRONTEND_URL: str = "http://localhost:5173"


# -----------------------------------------------------------
# Cryptography / JWT
# -----------------------------------------------------------
class CryptSettings(BaseConfig):
    SECRET_KEY: SecretStr = SecretStr("secret")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    MIN_PASSWORD_LENGTH: int = 6


# -----------------------------------------------------------
# Database
# -----------------------------------------------------------
class DatabaseSettings(BaseConfig):
    DATABASE_URL: str | None = None  # full URL wins when provided
    POSTGRES_ASYNC_PREFIX: str = "postgresql+asyncpg://"

    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "calm_breath"

    DATABASE_ECHO: bool = False

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # hosted providers hand out plain postgres:// URLs
            if url.startswith("postgres://"):
                url = url.replace("postgres://", self.POSTGRES_ASYNC_PREFIX, 1)
            elif url.startswith("postgresql://"):
                url = url.replace("postgresql://", self.POSTGRES_ASYNC_PREFIX, 1)
            return url

        return (
            f"{self.POSTGRES_ASYNC_PREFIX}"
            f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )


# -----------------------------------------------------------
# First Admin User
# -----------------------------------------------------------
class FirstUserSettings(BaseConfig):
    ADMIN_NAME: str = "admin"
    ADMIN_EMAIL: str = "admin@calmbreath.app"
    ADMIN_PASSWORD: str = "change-me-now"


# -----------------------------------------------------------
# Outgoing email (SMTP)
# -----------------------------------------------------------
class EmailSettings(BaseConfig):
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASS: SecretStr = SecretStr("")
    SMTP_USE_TLS: bool = True
    SMTP_FROM: str = "Calm Breath <noreply@calmbreath.app>"
    FEEDBACK_INBOX: str = "feedback@calmbreath.app"

    @property
    def SMTP_CONFIGURED(self) -> bool:
        return bool(self.SMTP_USER and self.SMTP_PASS.get_secret_value())


# -----------------------------------------------------------
# Email verification codes
# -----------------------------------------------------------
class VerificationSettings(BaseConfig):
    VERIFICATION_CODE_TTL_MINUTES: int = 60
    VERIFICATION_RESEND_COOLDOWN_SECONDS: int = 5 * 60
    VERIFICATION_PURGE_INTERVAL_MINUTES: int = 30


# -----------------------------------------------------------
# Stripe
# -----------------------------------------------------------
class StripeSettings(BaseConfig):
    STRIPE_SECRET_KEY: SecretStr = SecretStr("")
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    STRIPE_PRICE_ID: str = ""
    STRIPE_TIMEOUT_SECONDS: float = 15.0


# -----------------------------------------------------------
# Media storage (uploaded files)
# -----------------------------------------------------------
class StorageSettings(BaseConfig):
    MEDIA_ROOT: str = "media"
    MEDIA_URL_PREFIX: str = "/media"
    MEDIA_PUBLIC_BASE_URL: str = "http://localhost:8000"
    MAX_UPLOAD_SIZE_MB: int = 200


# -----------------------------------------------------------
# CORS
# -----------------------------------------------------------
class CORSSettings(BaseConfig):
    CORS_ALLOWED_ORIGINS: list[str] = ["*"]


# -----------------------------------------------------------
# Logging
# -----------------------------------------------------------
class LoggingSettings(BaseConfig):
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True


# -----------------------------------------------------------
# Environment (local / staging / production)
# -----------------------------------------------------------
class EnvironmentOption(Enum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvironmentSettings(BaseConfig):
    ENVIRONMENT: EnvironmentOption = EnvironmentOption.LOCAL
    SCHEDULER_ENABLED: bool = True


# -----------------------------------------------------------
# Combined Settings
# -----------------------------------------------------------
class Settings(
    AppSettings,
    CryptSettings,
    DatabaseSettings,
    FirstUserSettings,
    EmailSettings,
    VerificationSettings,
    StripeSettings,
    StorageSettings,
    CORSSettings,
    LoggingSettings,
    EnvironmentSettings,
):
    pass


settings = Settings()
