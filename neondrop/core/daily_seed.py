"""
Daily Seed
==========

The daily package handed to a session by the daily-content service, plus the
date-hash fallback used when that service has no seed to offer.

Every player on the same calendar date gets the same seed, which is what makes
FLOAT sequences (and therefore scores) comparable across players.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Mapping, Optional, Union

from neondrop.core.errors import ConfigurationError


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value > INT32_MAX else value


def validate_seed(seed: Any) -> int:
    """
    Check that a seed is a usable signed 32-bit integer.

    Raises:
        ConfigurationError: If the seed is missing, not an integer, or out of range.
    """
    if seed is None:
        raise ConfigurationError("Daily seed is missing")
    # bool is an int subclass but never a meaningful seed
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ConfigurationError(f"Daily seed must be an integer, got {type(seed).__name__}")
    if not INT32_MIN <= seed <= INT32_MAX:
        raise ConfigurationError(f"Daily seed {seed} is outside the signed 32-bit range")
    return int(seed)


def hash_date_key(date_key: str) -> int:
    """
    Deterministic 32-bit string hash of a date key.

    Same date string always gives the same non-negative seed.
    """
    h = 0
    for ch in date_key:
        h = to_int32((h << 5) - h + ord(ch))
    return abs(h) & INT32_MAX


@dataclass(frozen=True)
class DailyPackage:
    """One calendar day's seed as supplied by the daily-content service."""
    date: str
    seed: int

    def __post_init__(self):
        if not isinstance(self.date, str) or not self.date:
            raise ConfigurationError(f"Daily package date must be a non-empty string, got {self.date!r}")
        validate_seed(self.seed)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "DailyPackage":
        """
        Build a package from a {date, seed} mapping.

        Raises:
            ConfigurationError: If the mapping is absent or incomplete.
        """
        if data is None:
            raise ConfigurationError("Daily package is missing")
        if "seed" not in data:
            raise ConfigurationError("Daily package has no seed")
        return cls(date=str(data.get("date", "")), seed=data["seed"])

    @classmethod
    def for_date(cls, day: Union[str, date_type]) -> "DailyPackage":
        """Fallback package whose seed is the hash of the ISO date string."""
        date_key = day.isoformat() if isinstance(day, date_type) else str(day)
        return cls(date=date_key, seed=hash_date_key(date_key))


def coerce_daily_package(package: Union[DailyPackage, Mapping[str, Any], None]) -> DailyPackage:
    """Accept either a DailyPackage or a raw mapping."""
    if isinstance(package, DailyPackage):
        return package
    return DailyPackage.from_mapping(package)
