from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "CHESSRULES_"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Service settings.

    Every field can be set from the environment as ``CHESSRULES_<NAME>``,
    e.g. ``CHESSRULES_PORT=9000``.
    """

    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO", description="Root logging level")
    max_perft_depth: int = Field(default=5, ge=0, le=8, description="Upper bound for /api/perft")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``CHESSRULES_*`` variables.

    Args:
        environ (Optional[Mapping[str, str]]): Source mapping; defaults to
            ``os.environ``.

    Raises:
        pydantic.ValidationError: If a variable does not validate.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = raw
    return Settings(**values)
