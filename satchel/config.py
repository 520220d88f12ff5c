"""
Satchel - Session configuration.

The application loads configuration however it likes; Satchel consumes a
plain mapping and normalises it into a SessionConfig. Cookie options are
carried through untouched for the HTTP layer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from .faults import SessionConfigFault


# Option names accepted in camelCase as well as snake_case.
_KEY_ALIASES = {
    "cookieName": "cookie_name",
    "clearWithBrowser": "clear_with_browser",
}

_AGE_UNITS = {
    "ms": 0.001,
    "s": 1,
    "sec": 1,
    "m": 60,
    "min": 60,
    "h": 3600,
    "hr": 3600,
    "d": 86400,
    "w": 604800,
}

_AGE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$", re.IGNORECASE)


@dataclass
class SessionConfig:
    """
    Session store configuration.

    Attributes:
        driver: Registry name of the storage backend
        age: Expiry as seconds or a duration string ("2h", "30m")
        cookie_name: Cookie carrying the session id (HTTP layer)
        enabled: Whether sessions are enabled (HTTP layer)
        clear_with_browser: Session cookie lifetime (HTTP layer)
        cookie: Cookie options, passed through untouched
        file: File driver options (``location`` is required)
        redis: Redis driver options
        extra: Options blocks for any other registered driver
    """

    driver: str = "memory"
    age: Union[int, float, str] = "2h"
    cookie_name: str = "satchel-session"
    enabled: bool = True
    clear_with_browser: bool = False
    cookie: Dict[str, Any] = field(default_factory=dict)
    file: Dict[str, Any] = field(default_factory=dict)
    redis: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def age_seconds(self) -> int:
        """``age`` converted to whole seconds."""
        return parse_age(self.age)

    def driver_options(self, name: str | None = None) -> Dict[str, Any]:
        """Options block for ``name`` (defaults to the configured driver)."""
        name = name or self.driver
        if name in ("file", "redis"):
            return getattr(self, name)
        options = self.extra.get(name, {})
        return options if isinstance(options, dict) else {}


def build_session_config(config_dict: Mapping[str, Any]) -> SessionConfig:
    """
    Build SessionConfig from dictionary (e.g., from the app's config loader).

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        SessionConfig instance
    """
    data = {_KEY_ALIASES.get(key, key): value for key, value in config_dict.items()}
    known = {
        "driver", "age", "cookie_name", "enabled", "clear_with_browser",
        "cookie", "file", "redis", "extra",
    }
    extra = dict(data.get("extra") or {})
    extra.update({key: value for key, value in data.items() if key not in known})

    defaults = SessionConfig()
    config = SessionConfig(
        driver=data.get("driver", defaults.driver),
        age=data.get("age", defaults.age),
        cookie_name=data.get("cookie_name", defaults.cookie_name),
        enabled=data.get("enabled", defaults.enabled),
        clear_with_browser=data.get("clear_with_browser", defaults.clear_with_browser),
        cookie=dict(data.get("cookie") or {}),
        file=dict(data.get("file") or {}),
        redis=dict(data.get("redis") or {}),
        extra=extra,
    )

    if not isinstance(config.driver, str) or not config.driver:
        raise SessionConfigFault("Session \"driver\" must be a non-empty string")

    return config


def parse_age(age: Union[int, float, str]) -> int:
    """
    Convert a session age to whole seconds.

    Numbers are seconds. Strings are a number with an optional unit
    (ms, s, m, h, d, w).

    Example:
        >>> parse_age("2h")
        7200
        >>> parse_age(90)
        90
    """
    if isinstance(age, bool):
        raise SessionConfigFault(f"Invalid session age: {age!r}")

    if isinstance(age, (int, float)):
        seconds = age
    elif isinstance(age, str):
        match = _AGE_PATTERN.match(age)
        if not match:
            raise SessionConfigFault(f"Invalid session age: {age!r}")
        amount, unit = match.groups()
        unit = unit.lower() or "s"
        if unit not in _AGE_UNITS:
            raise SessionConfigFault(f"Invalid session age unit '{unit}' in {age!r}")
        seconds = float(amount) * _AGE_UNITS[unit]
    else:
        raise SessionConfigFault(f"Invalid session age: {age!r}")

    if seconds < 0:
        raise SessionConfigFault(f"Session age cannot be negative: {age!r}")

    return int(seconds)
