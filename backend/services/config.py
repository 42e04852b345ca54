"""
Application settings loaded from the process environment
A local .env file next to main.py is honoured for development
"""
import os
import logging
from typing import Optional

import pydantic
import pytz
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_PATH = os.path.join(BACKEND_DIR, ".env")

REQUIRED_FIELDS = ("openai_api_key", "amadeus_api_key", "amadeus_api_secret")


class Settings(BaseSettings):
    """Application settings; field names map to upper-case environment variables"""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Credentials
    openai_api_key: str
    amadeus_api_key: str
    amadeus_api_secret: str

    # Upstreams
    amadeus_api_base: str = "https://test.api.amadeus.com"
    openai_model: str = "gpt-4o-mini"
    exchange_rate_url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    http_timeout_seconds: float = Field(30.0, gt=0)

    # Caching
    token_expiry_buffer_seconds: int = Field(300, gt=0)
    exchange_rate_ttl_seconds: int = Field(3600, gt=0)

    # Chat behaviour
    app_timezone: str = "UTC"
    search_max_results: int = Field(5, gt=0)
    display_limit: int = Field(3, gt=0)

    log_level: str = "INFO"

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def _credential_non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("amadeus_api_base")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("app_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"not a known timezone: {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()


def load_settings(env_file: Optional[str] = ENV_PATH) -> Settings:
    """
    Build Settings from the environment

    A present env_file is loaded first (local dev); variables already set in
    the process environment win over it.

    Raises ConfigurationError listing every missing credential, so a
    misconfigured deployment fails at startup instead of on the first request.
    """
    if env_file and os.path.exists(env_file):
        load_dotenv(dotenv_path=env_file)

    try:
        settings = Settings()
    except pydantic.ValidationError as e:
        errors = e.errors()
        missing = [
            str(error["loc"][0]).upper()
            for error in errors
            if error["loc"] and error["loc"][0] in REQUIRED_FIELDS
        ]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
        invalid = "; ".join(f"{str(error['loc'][0]).upper()}: {error['msg']}" for error in errors if error["loc"])
        raise ConfigurationError(f"Invalid settings: {invalid}")

    logger.info(f"[CONFIG] Loaded settings, Amadeus base URL: {settings.amadeus_api_base}")
    return settings
