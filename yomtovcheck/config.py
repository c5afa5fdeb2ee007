"""
Runtime settings.

Defaults match the University of Pennsylvania (America/New_York, ZIP 19104).
Every value can be overridden from the environment and then from the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from yomtovcheck.errors import ErrorPolicy, UnrecognizedTimeZoneError

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_ZIP = "19104"
DEFAULT_PAD_DAYS = 7
DEFAULT_TIMEOUT = 30


def resolve_zone(name: str) -> ZoneInfo:
    """
    Look up an IANA zone name. Raises UnrecognizedTimeZoneError if unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise UnrecognizedTimeZoneError(f"Unrecognized time zone {name!r}") from e


@dataclass(frozen=True)
class Settings:
    timezone: str = DEFAULT_TIMEZONE
    zip_code: str = DEFAULT_ZIP
    pad_days: int = DEFAULT_PAD_DAYS
    policy: ErrorPolicy = ErrorPolicy.STRICT
    timeout: float = DEFAULT_TIMEOUT

    @property
    def zone(self) -> ZoneInfo:
        return resolve_zone(self.timezone)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            timezone=env.get("YOMTOVCHECK_TZ", DEFAULT_TIMEZONE),
            zip_code=env.get("YOMTOVCHECK_ZIP", DEFAULT_ZIP),
            pad_days=int(env.get("YOMTOVCHECK_PAD_DAYS", str(DEFAULT_PAD_DAYS))),
            policy=ErrorPolicy(env.get("YOMTOVCHECK_POLICY", ErrorPolicy.STRICT.value).strip().lower()),
            timeout=float(env.get("YOMTOVCHECK_TIMEOUT", str(DEFAULT_TIMEOUT))),
        )
