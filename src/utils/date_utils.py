"""Helpers for date normalization."""

from datetime import date, datetime


def coerce_date(value) -> date | None:
    """Normalize a date-like value to a date.

    Args:
        value: date, datetime, ISO string (YYYY-MM-DD), or None.

    Returns:
        date | None: Normalized date.

    Raises:
        ValueError: If a string value is not an ISO date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


__all__ = ["coerce_date"]
