"""Small helpers for env-first configuration.

Every config dataclass in the project reads the environment through these
functions so that unset, blank and malformed values all fall back to the
default in the same way.
"""

from __future__ import annotations

import os
from typing import Optional

_TRUTHY = {"1", "true", "yes", "y", "on"}
_FALSY = {"0", "false", "no", "n", "off"}


def _raw(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_str(name: str, default: str) -> str:
    value = _raw(name)
    return default if value is None else value


def env_optional_str(*names: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first non-blank value among ``names``."""
    for name in names:
        value = _raw(name)
        if value is not None:
            return value
    return default


def env_bool(name: str, default: bool) -> bool:
    value = _raw(name)
    if value is None:
        return default
    value = value.lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def env_int(name: str, default: int) -> int:
    value = _raw(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    value = _raw(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default
