"""Centralised configuration using pydantic-settings.

Options are read from ``AUTHCOMMONS_``-prefixed environment variables (and a
``.env`` file in the working directory). Consumers call ``get_settings()`` to
obtain a cached, validated instance. Tests construct
``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from authcommons.codes import ResponseCodeView

logger = logging.getLogger(__name__)

_LEVEL_NAMES = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------
class WireConfig(BaseModel):
    """JSON wire format options."""

    response_view: ResponseCodeView = ResponseCodeView.STANDARD
    accept_legacy_data_key: bool = True
    indent: int | None = None


class LogConfig(BaseModel):
    """Logging options used by the command-line tool."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LEVEL_NAMES:
            msg = f"Unknown log level {value!r}; expected one of {sorted(_LEVEL_NAMES)}"
            raise ValueError(msg)
        return upper


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """authcommons settings with .env loading and type validation.

    Environment variables use double-underscore nesting:
    ``AUTHCOMMONS_WIRE__RESPONSE_VIEW``, ``AUTHCOMMONS_LOG__LEVEL``, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHCOMMONS_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    wire: WireConfig = WireConfig()
    log: LogConfig = LogConfig()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()
    logger.debug(
        "Settings loaded: response_view=%s legacy_data_key=%s",
        settings.wire.response_view,
        settings.wire.accept_legacy_data_key,
    )
    return settings
