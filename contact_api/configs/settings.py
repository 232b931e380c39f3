"""Application settings and configuration constants.

This module contains application settings, constants, and configuration
values for the contact relay backend.
"""

from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# --- Constants ---
CONTACT_PATH = "/api/contact"
SECURITY_REPORT_PATH = "/api/security-report"
NOT_SPECIFIED = "Not specified"

# Response constants
REQUIRED_FIELDS_ERROR = "Name, email, and message are required"
INVALID_EMAIL_ERROR = "Invalid email format"
RATE_LIMIT_ERROR = "Too many requests, please try again later."
SEND_FAILURE_ERROR = "Failed to send email. Please try again later."
DEFAULT_ERROR_MESSAGE = "An unexpected server error occurred."


class Settings(BaseSettings):
    """Application settings with validation and default values."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Topea Contact API"
    DEBUG: bool = False

    # Environment
    ENVIRONMENT: Literal["development", "production"] = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE: str = "logs/contact_api.log"

    # Email Configuration
    MAIL_SERVER: str = "mail.topea.me"
    MAIL_PORT: int = 465
    MAIL_USERNAME: str = "contact@topea.me"
    MAIL_PASSWORD: SecretStr = SecretStr("")
    MAIL_FROM: str = "contact@topea.me"
    MAIL_SSL_TLS: bool = True
    MAIL_STARTTLS: bool = False
    MAIL_VALIDATE_CERTS: bool = True
    MAIL_TIMEOUT: float = 20.0  # seconds
    CONTACT_RECIPIENT: str = "contact@topea.me"
    COMPANY_NAME: str = "Topea"

    # Rate limiting
    RATE_LIMIT_MAX_REQUESTS: int = 5
    RATE_LIMIT_WINDOW: int = 3600  # 1 hour in seconds
    RATE_LIMIT_SWEEP_INTERVAL: int = 600  # 10 minutes

    # Security monitor
    SECURITY_MAX_EVENTS: int = 10_000
    SECURITY_RETENTION: int = 86400  # 24 hours
    SECURITY_PRUNE_INTERVAL: int = 3600  # 1 hour
    SECURITY_ALERT_WINDOW: int = 3600
    MAX_REQUEST_BYTES: int = 1024 * 1024
    ADMIN_TOKEN: SecretStr | None = None

    # CORS
    CORS_PRODUCTION_ORIGINS: list[str] = ["https://topea.me", "https://www.topea.me"]
    CORS_DEVELOPMENT_ORIGINS: list[str] = [
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
        "http://localhost:4173",  # Vite preview
    ]

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 3001
    WORKERS: int = 1
    SHUTDOWN_TIMEOUT: int = 10  # seconds before in-flight requests are dropped

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """Origins whose requests get an echoed Access-Control-Allow-Origin."""
        if self.is_production:
            return list(self.CORS_PRODUCTION_ORIGINS)
        return [*self.CORS_PRODUCTION_ORIGINS, *self.CORS_DEVELOPMENT_ORIGINS]

    @property
    def mail_configured(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD.get_secret_value())


settings = Settings()


class LimiterConfig(BaseSettings):
    """Configuration for the slowapi limiter guarding the admin endpoints."""

    model_config = SettingsConfigDict(env_prefix="LIMITER_", case_sensitive=False)

    storage_uri: str = "memory://"
    headers_enabled: bool = False
    enabled: bool = True
