"""Environment-driven configuration for the xAI MCP server."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

# ─── Defaults ────────────────────────────────────────────────────────────────

BASE_URL = "https://api.x.ai/v1"
REQUEST_TIMEOUT = 120.0
VIDEO_POLL_INTERVAL = 5.0
VIDEO_POLL_ATTEMPTS = 60

MISSING_KEY_MESSAGE = (
    "XAI_API_KEY is not configured.\n\n"
    "Add your xAI API key to the MCP server entry in your client config:\n\n"
    '  "xai": {\n'
    '    "command": "xai-mcp-server",\n'
    '    "env": {\n'
    '      "XAI_API_KEY": "your-api-key-here"\n'
    "    }\n"
    "  }\n\n"
    "Get your API key at: https://console.x.ai/\n"
    "Then restart your MCP client."
)


class Settings(BaseModel):
    """Immutable process-wide settings, built once at startup."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    api_key: str = Field(..., min_length=1)
    base_url: str = Field(default=BASE_URL)
    request_timeout: float = Field(default=REQUEST_TIMEOUT, gt=0)
    video_poll_interval: float = Field(default=VIDEO_POLL_INTERVAL, ge=0)
    video_poll_attempts: int = Field(default=VIDEO_POLL_ATTEMPTS, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


_ENV_FIELDS = {
    "XAI_BASE_URL": "base_url",
    "XAI_REQUEST_TIMEOUT": "request_timeout",
    "XAI_VIDEO_POLL_INTERVAL": "video_poll_interval",
    "XAI_VIDEO_POLL_ATTEMPTS": "video_poll_attempts",
    "XAI_LOG_LEVEL": "log_level",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Settings: Validated settings.

    Raises:
        ConfigurationError: XAI_API_KEY is unset/blank or a value is malformed.
    """
    env = os.environ if environ is None else environ

    api_key = (env.get("XAI_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError(MISSING_KEY_MESSAGE)

    values = {"api_key": api_key}
    for var, field in _ENV_FIELDS.items():
        raw = env.get(var)
        if raw is not None and raw.strip():
            values[field] = raw

    try:
        return Settings(**values)
    except ValidationError as e:
        bad = ", ".join(
            f"{_env_name(err['loc'][0])}: {err['msg']}" for err in e.errors() if err.get("loc")
        )
        raise ConfigurationError(f"Invalid configuration. {bad}") from e


def _env_name(field: str) -> str:
    for var, name in _ENV_FIELDS.items():
        if name == field:
            return var
    return field
