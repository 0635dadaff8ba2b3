"""
Data Normalization Utilities

This module provides helpers for normalizing skill names and parsing the
loosely-typed timestamps and due dates that come from upstream stores.
None of these functions raise on bad data: unparseable values become None.
"""

import datetime
import numbers
import unicodedata
from typing import Any, Optional

import pandas as pd


def normalize_skill_name(name: Any) -> str:
    """
    Normalize a skill name for case-insensitive matching.

    Performs the following normalizations:
    1. Converts to string
    2. Converts full-width to half-width characters (NFKC)
    3. Strips leading/trailing whitespace
    4. Lower-cases

    Args:
        name: Skill name in any format

    Returns:
        Normalized name. Returns empty string for NA values.

    Examples:
        >>> normalize_skill_name(" React.js ")
        'react.js'
        >>> normalize_skill_name("ＳＱＬ")
        'sql'
    """
    if name is None:
        return ""
    if isinstance(name, float) and pd.isna(name):
        return ""

    name_str = unicodedata.normalize("NFKC", str(name))
    return name_str.strip().lower()


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse an activity timestamp into a UTC pandas Timestamp.

    Accepts datetimes, dates, ISO-like strings and numeric epoch values
    (milliseconds). Timezone-naive values are treated as UTC.

    Args:
        value: Raw timestamp value

    Returns:
        UTC Timestamp, or None when the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (pd.Timestamp, datetime.datetime, datetime.date)):
            ts = pd.Timestamp(value)
        elif isinstance(value, numbers.Real):
            if pd.isna(value):
                return None
            ts = pd.to_datetime(value, unit="ms", utc=True)
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            ts = pd.to_datetime(stripped, errors="coerce", utc=True)
        else:
            return None
    except (ValueError, TypeError, OverflowError):
        return None

    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def parse_date(value: Any) -> Optional[datetime.date]:
    """
    Parse a target due date.

    Returns:
        The calendar date, or None when missing or unparseable
    """
    ts = parse_timestamp(value)
    if ts is None:
        return None
    return ts.date()
