"""
Datetime utility functions.
Provides timezone-aware "now" and match date parsing.
"""

from datetime import date, datetime
from typing import Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def parse_match_date(date_input: Union[str, date, None]) -> date:
    """
    Parse a reported match date into a real calendar date.

    Accepts ISO ("2025-06-14") or US ("6/14/2025", "06/14/2025") strings, or a
    date object which is returned unchanged.

    Args:
        date_input: Raw date value from the match report

    Returns:
        The parsed date

    Raises:
        ValueError: If the value is empty or is not a real calendar date
            (e.g. "2025-02-30")

    Examples:
        >>> parse_match_date("2025-06-14")
        datetime.date(2025, 6, 14)
        >>> parse_match_date("6/14/2025")
        datetime.date(2025, 6, 14)
    """
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input

    if date_input is None:
        raise ValueError("Match date is required")
    if not isinstance(date_input, str):
        raise ValueError(f"Expected string or date, got {type(date_input)}")

    date_str = date_input.strip()
    if not date_str:
        raise ValueError("Match date is required")

    # Try ISO format first (YYYY-MM-DD)
    if "-" in date_str and len(date_str) == 10 and date_str[4] == "-":
        return datetime.strptime(date_str, "%Y-%m-%d").date()

    # Try US format with slashes (M/D/YYYY or MM/DD/YYYY)
    if "/" in date_str:
        parts = date_str.split("/")
        if len(parts) == 3 and len(parts[2]) == 4:
            month, day, year = (int(part) for part in parts)
            return date(year, month, day)

    raise ValueError(f"Unrecognized date format: {date_str!r}")
