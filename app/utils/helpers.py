"""Utility helper functions for cleaning spreadsheet cell values."""
import math
from datetime import datetime, timezone
from typing import Any

import pandas as pd


def is_blank(value: Any) -> bool:
    """Return True for None, NaN/NaT and whitespace-only strings.

    Example:
        >>> is_blank("  ")
        True
        >>> is_blank(0)
        False
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def clean_text(value: Any) -> str | None:
    """Trim a cell value to a string, or None when the cell is blank.

    Numeric cells from spreadsheets are rendered without a trailing ``.0``
    so that batch numbers such as ``1001`` survive the round trip.

    Example:
        >>> clean_text("  Paracetamol ")
        'Paracetamol'
        >>> clean_text(1001.0)
        '1001'
    """
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_utc_datetime(value: Any) -> datetime | None:
    """Parse a date/time cell into a timezone-aware UTC datetime.

    Naive values are taken to be UTC. Raises ValueError when the value
    cannot be parsed as a date.

    Example:
        >>> to_utc_datetime("2026-01-01").isoformat()
        '2026-01-01T00:00:00+00:00'
    """
    if is_blank(value):
        return None
    if isinstance(value, str):
        value = value.strip()
    timestamp = pd.Timestamp(value)
    if timestamp is pd.NaT:
        raise ValueError(f"Invalid date: {value!r}")
    if timestamp.tzinfo is None:
        timestamp = timestamp.tz_localize(timezone.utc)
    else:
        timestamp = timestamp.tz_convert(timezone.utc)
    return timestamp.to_pydatetime()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
