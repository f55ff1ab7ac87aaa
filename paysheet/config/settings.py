"""
Configuration Management for Paysheet

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Credentials: either a service account JSON file, or the two
    # discrete values taken from it.
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to Google service account credentials JSON"
    )
    client_email: Optional[str] = Field(
        default=None,
        description="Service account client email"
    )
    private_key: Optional[str] = Field(
        default=None,
        description="Service account private key (PEM, literal \\n allowed)"
    )

    # Sheet names within the spreadsheet
    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet holding users"
    )
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet holding transactions"
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for each Sheets API request"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made when opening the spreadsheet"
    )

    @field_validator("credentials_path")
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    @model_validator(mode="after")
    def check_credentials_source(self) -> "GoogleSheetsSettings":
        if not self.credentials_path and not (self.client_email and self.private_key):
            raise ValueError(
                "Either GOOGLE_SHEETS_CREDENTIALS_PATH or both "
                "GOOGLE_SHEETS_CLIENT_EMAIL and GOOGLE_SHEETS_PRIVATE_KEY must be set"
            )
        return self

    @property
    def service_account_info(self) -> dict:
        """Credentials dict built from the discrete secret values."""
        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": (self.private_key or "").replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }


class AuthSettings(BaseSettings):
    """Token signing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # No default: tokens signed with a well-known key can be forged.
    secret: str = Field(
        ...,
        min_length=32,
        description="Secret used to sign access tokens (at least 32 characters)"
    )
    expires_in: str = Field(
        default="7d",
        pattern=r"^\d+[dhms]?$",
        description="Token lifetime, e.g. 7d, 12h, 30m or plain seconds"
    )
    algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )

    @property
    def expires_in_seconds(self) -> int:
        """Token lifetime in seconds."""
        units = {"d": 86400, "h": 3600, "m": 60, "s": 1}
        value = self.expires_in
        if value[-1] in units:
            return int(value[:-1]) * units[value[-1]]
        return int(value)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the structured logger"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (console rendering otherwise)"
    )

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Origin allowed to call the API from a browser"
    )

    storage_backend: Literal["google_sheets", "memory"] = Field(
        default="google_sheets",
        description="Backing store; 'memory' keeps tables in process for local runs"
    )
    registration_enabled: bool = Field(
        default=True,
        description="Allow self-service registration through /api/auth/register"
    )

    # Optional admin account created on startup when missing
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None
    bootstrap_admin_name: str = "Administrator"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the in-memory backend runs
    # without any Google configuration.

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "auth", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
