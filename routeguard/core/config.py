"""Application configuration with validation."""

from enum import Enum
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

from ..exceptions import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_DEFAULT_SECRET = "dev-insecure-key-change-me"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Values come from the environment (or ``.env``); names are matched
    case-insensitively, e.g. ``ROUTES_FILE`` sets ``routes_file``.
    """

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    database_url: str = Field(
        default="sqlite:///./routeguard.db",
        description="Database connection URL"
    )

    # Rule sources
    # ROUTES_FILE: JSON list of route declarations appended after the
    # application's own guarded routes. Empty string = none.
    routes_file: str = Field(
        default=str(_PROJECT_ROOT / "fixtures" / "routes.json"),
        description="Path to the JSON route table"
    )
    menu_dir: str = Field(
        default=str(_PROJECT_ROOT / "fixtures" / "menus"),
        description="Directory holding JSON menu definitions"
    )
    superuser_level: int = Field(
        default=100,
        description="Access level that passes every level-rights check"
    )

    # Authentication
    # AUTH_ENABLED: when False every request runs as an anonymous superuser.
    jwt_secret_key: str = Field(
        default=_DEFAULT_SECRET,
        description="JWT signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    auth_enabled: bool = Field(
        default=False,
        description="Enable JWT authentication (False for development)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """Get CORS origins as a list, refusing the ``*`` wildcard."""
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )
        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def validate_production_config(self) -> None:
        """Refuse insecure settings in production.

        In development this is a no-op; main.py logs warnings instead.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == _DEFAULT_SECRET:
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )
        if not self.auth_enabled:
            errors.append(
                "AUTH_ENABLED is false. Every request would run as superuser."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors),
                source="settings",
            )

    def uses_default_secret(self) -> bool:
        return self.jwt_secret_key == _DEFAULT_SECRET

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
