# Standard library imports
import os
from typing import Final, List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    """

    def __init__(self) -> None:
        # Database Configuration
        self.mongo_uri: Final[str] = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.mongo_database_name: Final[str] = os.getenv("MONGO_DB_NAME", "referral_service")

        # Referral Configuration
        self.referral_code_length: Final[int] = int(os.getenv("REFERRAL_CODE_LENGTH", "6"))
        self.referral_code_max_attempts: Final[int] = int(
            os.getenv("REFERRAL_CODE_MAX_ATTEMPTS", "5")
        )
        self.referral_points_per_referral: Final[int] = int(
            os.getenv("REFERRAL_POINTS_PER_REFERRAL", "1")
        )

        # Number of reverse proxies in front of the app that append to X-Forwarded-For
        self.http_forwarded_count: Final[int] = int(os.getenv("HTTP_FORWARDED_COUNT", "0"))

        # Enrollment email (SMTP) Configuration
        self.enrollment_email_enabled: Final[bool] = _env_bool("ENROLLMENT_EMAIL_ENABLED", "true")
        self.smtp_host: Final[str] = os.getenv("SMTP_HOST", "")
        self.smtp_port: Final[int] = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user: Final[str] = os.getenv("SMTP_USER", "")
        self.smtp_password: Final[str] = os.getenv("SMTP_PASSWORD", "")
        self.smtp_use_tls: Final[bool] = _env_bool("SMTP_USE_TLS", "false")
        self.email_from: Final[str] = os.getenv("EMAIL_FROM", "no-reply@localhost")
        self.email_from_name: Final[str] = os.getenv("EMAIL_FROM_NAME", "Referral Program")
        self.app_base_url: Final[str] = os.getenv("APP_BASE_URL", "http://localhost:3000")

        # HTTP Configuration
        self.cors_origins: Final[List[str]] = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
            ).split(",")
            if origin.strip()
        ]


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
