"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, signing secret, SMTP credentials)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="shopcart",
        description="MongoDB database name"
    )
    MONGODB_COLLECTION: str = Field(
        default="users",
        description="Collection holding user records and their carts"
    )

    # Session tokens
    JWT_SECRET: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Secret used to sign session tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Session token signing algorithm"
    )
    SESSION_TOKEN_EXPIRY_DAYS: int = Field(
        default=7,
        description="Session token lifetime in days"
    )

    # One-time codes
    OTP_EXPIRY_MINUTES: int = Field(
        default=5,
        description="How long an issued login code stays valid"
    )

    # Outbound email
    SMTP_HOST: Optional[str] = Field(
        default=None,
        description="SMTP server host"
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port"
    )
    SMTP_USERNAME: Optional[str] = Field(
        default=None,
        description="SMTP login user"
    )
    SMTP_PASSWORD: Optional[str] = Field(
        default=None,
        description="SMTP login password (app password for Gmail)"
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Upgrade the SMTP connection with STARTTLS"
    )
    SMTP_TIMEOUT: float = Field(
        default=10.0,
        description="SMTP connection timeout in seconds"
    )
    EMAIL_FROM: Optional[str] = Field(
        default=None,
        description="Sender address for login codes (defaults to SMTP_USERNAME)"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info: ValidationInfo):
        """Ensure signing secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be changed in production environment")
        return v

    @field_validator("SESSION_TOKEN_EXPIRY_DAYS", "OTP_EXPIRY_MINUTES")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def email_sender(self) -> Optional[str]:
        return self.EMAIL_FROM or self.SMTP_USERNAME


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the active settings."""
    return settings


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    if not config.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not config.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    if not config.MONGODB_COLLECTION:
        errors.append("MONGODB_COLLECTION is required")

    if not config.JWT_SECRET:
        errors.append("JWT_SECRET is required")

    # Production-specific validations
    if config.is_production:
        if not config.SMTP_HOST:
            errors.append("SMTP_HOST is required in production")
        if not config.email_sender:
            errors.append("EMAIL_FROM or SMTP_USERNAME is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
