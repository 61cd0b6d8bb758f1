from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
import secrets
from ..validators.config_validators import to_uppercase, to_lowercase, strip_trailing_slash

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Gateway (fronts the patient, notes and risk services)
    GATEWAY_URL: str = "http://mgateway:9010"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Safe pages used by the recovery orchestrator
    HOME_PATH: str = "/home"
    LIST_PATH: str = "/patients"

    # Signs the session cookie that carries flash messages. Set it in production:
    # the generated default changes on every restart.
    SESSION_SECRET: str = Field(default_factory=lambda: secrets.token_urlsafe(32))

    # Server-rendered views
    TEMPLATES_DIR: Path = PACKAGE_DIR / "templates"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/clientui")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_HTTP_LOGGING: bool = False

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before the Literal check runs, so that
        `LOG_LEVEL=debug` in the environment is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    @field_validator("GATEWAY_URL", mode="before")
    def normalize_gateway_url(cls, v: str | None) -> str | None:
        # httpx joins base_url and request paths; a trailing slash would double up.
        return strip_trailing_slash(v)

    model_config = SettingsConfigDict(
        env_file=str(PACKAGE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# get_settings() takes no arguments and always returns the same settings from the environment,
# so caching it with @lru_cache() avoids re-reading the environment on every request.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
