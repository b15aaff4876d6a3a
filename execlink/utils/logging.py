from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
_LEVEL_ENV_VARS = ("EXECLINK_LOG_LEVEL",)
_DEBUG_FLAGS = ("EXECLINK_DEBUG_LOGGING", "EXECLINK_DEBUG")
WIRE_LEVEL_ENV = "EXECLINK_WIRE_LOG_LEVEL"
WIRE_LOGGER = "execlink.adapters"


def _coerce_level(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    upper = text.upper()
    candidate = logging.getLevelName(upper)
    if isinstance(candidate, int):
        return candidate
    return fallback


def _env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_env_level() -> Optional[int]:
    for var in _LEVEL_ENV_VARS:
        value = os.getenv(var)
        if value:
            return _coerce_level(value, logging.INFO)
    if any(_env_truthy(os.getenv(flag)) for flag in _DEBUG_FLAGS):
        return logging.DEBUG
    return None


def configure_root(default_level: int | str = logging.INFO) -> int:
    """
    Configure the root logger with a compact format.

    Environment overrides:
      - EXECLINK_LOG_LEVEL: explicit log level
      - EXECLINK_DEBUG_LOGGING / EXECLINK_DEBUG: truthy -> DEBUG
      - EXECLINK_WIRE_LOG_LEVEL: level for the execlink.adapters loggers only
    """
    fallback = (
        _coerce_level(default_level, logging.INFO)
        if isinstance(default_level, str)
        else int(default_level)
    )
    env_level = _resolve_env_level()
    effective = env_level if env_level is not None else fallback

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    root.setLevel(effective)
    apply_wire_level()
    return effective


def apply_preferences(debug_enabled: bool) -> int:
    """
    Update root log level from persisted settings while honoring env overrides.
    Returns the effective level after the update.
    """
    env_level = _resolve_env_level()
    level = env_level if env_level is not None else (logging.DEBUG if debug_enabled else logging.INFO)
    logging.getLogger().setLevel(level)
    return level


def apply_wire_level() -> Optional[int]:
    """Set the socket adapters' logger from EXECLINK_WIRE_LOG_LEVEL.

    Per-connection events in ``execlink.adapters`` are noisy during port
    scans; this lets them be raised or lowered without touching the root
    level. Returns the level applied, or None when the variable is unset.
    """
    value = os.getenv(WIRE_LEVEL_ENV)
    if not value or not value.strip():
        logging.getLogger(WIRE_LOGGER).setLevel(logging.NOTSET)
        return None
    level = _coerce_level(value, logging.INFO)
    logging.getLogger(WIRE_LOGGER).setLevel(level)
    return level


def env_requests_debug() -> bool:
    """Return True if environment variables force DEBUG logging."""
    env_level = _resolve_env_level()
    if env_level is None:
        return False
    return env_level <= logging.DEBUG
