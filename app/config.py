"""Configuration settings for the Talent Onboarding auth service."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    APP_NAME: str = os.getenv("APP_NAME", "Talent Onboarding")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./talent_onboarding.db")

    # JWT
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_SECRET_KEY: str = os.getenv("JWT_ACCESS_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_ACCESS_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_EXPIRE_MINUTES", "15"))
    JWT_REFRESH_SECRET_KEY: str = os.getenv("JWT_REFRESH_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_REFRESH_EXPIRE_MINUTES: int = int(os.getenv("JWT_REFRESH_EXPIRE_MINUTES", str(7 * 24 * 60)))

    # Hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Verification codes
    VERIFICATION_CODE_LENGTH: int = int(os.getenv("VERIFICATION_CODE_LENGTH", "8"))
    VERIFICATION_CODE_EXPIRE_MINUTES: int = int(os.getenv("VERIFICATION_CODE_EXPIRE_MINUTES", "1440"))
    ACCOUNTS_START_ACTIVE: bool = _env_bool("ACCOUNTS_START_ACTIVE", "true")

    # Phone identifiers
    PHONE_COUNTRY_CODE: str = os.getenv("PHONE_COUNTRY_CODE", "+250")
    PHONE_NUMBER_LENGTH: int = int(os.getenv("PHONE_NUMBER_LENGTH", "13"))

    # Email channel
    EMAIL_SERVICE_ENABLED: bool = _env_bool("EMAIL_SERVICE_ENABLED", "false")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "noreply@talent-onboarding.local")

    # SMS channel
    SMS_SERVICE_ENABLED: bool = _env_bool("SMS_SERVICE_ENABLED", "false")
    TWILIO_ACCOUNT_SID: str | None = os.getenv("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN: str | None = os.getenv("TWILIO_AUTH_TOKEN")
    TWILIO_FROM_NUMBER: str | None = os.getenv("TWILIO_FROM_NUMBER")

    # Admin bootstrap
    ADMIN_EMAIL: str | None = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD: str | None = os.getenv("ADMIN_PASSWORD")
    ADMIN_FIRST_NAME: str = os.getenv("ADMIN_FIRST_NAME", "System")
    ADMIN_LAST_NAME: str = os.getenv("ADMIN_LAST_NAME", "Administrator")
    ADMIN_PHONE: str | None = os.getenv("ADMIN_PHONE")

    # Cookies
    COOKIE_SECURE: bool = _env_bool("COOKIE_SECURE", "false")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = _env_bool("DEBUG", "false")

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not os.getenv("JWT_ACCESS_SECRET_KEY"):
            errors.append("JWT_ACCESS_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if not os.getenv("JWT_REFRESH_SECRET_KEY"):
            errors.append("JWT_REFRESH_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.JWT_ACCESS_SECRET_KEY == self.JWT_REFRESH_SECRET_KEY:
            errors.append("Access and refresh tokens share the same secret")
        if self.EMAIL_SERVICE_ENABLED and not self.SMTP_USERNAME:
            errors.append("EMAIL_SERVICE_ENABLED is true but SMTP_USERNAME is not set")
        if self.SMS_SERVICE_ENABLED and not all(
            [self.TWILIO_ACCOUNT_SID, self.TWILIO_AUTH_TOKEN, self.TWILIO_FROM_NUMBER]
        ):
            errors.append("SMS_SERVICE_ENABLED is true but Twilio credentials are incomplete")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
