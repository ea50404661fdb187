"""Timezone utilities for B3 (America/Sao_Paulo) market time."""

from datetime import datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

BRT_TZ = pytz.timezone("America/Sao_Paulo")


def now_brt() -> datetime:
    """Return current time in America/Sao_Paulo timezone."""
    return datetime.now(BRT_TZ)


def to_brt(dt: datetime) -> datetime:
    """Convert a datetime to America/Sao_Paulo timezone."""
    if dt.tzinfo is None:
        # Assume naive datetime is already local market time
        return BRT_TZ.localize(dt)
    return dt.astimezone(BRT_TZ)


def parse_datetime_brt(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in America/Sao_Paulo timezone.

    Backend timestamps are ISO-8601 with a trailing ``Z``; strings without a
    timezone are assumed to be local market time.
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or BRT_TZ
        dt = tz.localize(dt)
    return to_brt(dt)
