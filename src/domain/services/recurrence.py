"""Next-occurrence computation for recurring transactions."""

import calendar
from datetime import date, timedelta

from src.domain.constants import RECURRENCE_FREQUENCIES
from src.domain.errors import ValidationError


_DAY_STEPS = {
    "daily": 1,
    "weekly": 7,
    "biweekly": 14,
}

_MONTH_STEPS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}


def compute_next_occurrence(
    frequency: str,
    from_date: date,
    anchor: date | None = None,
) -> date:
    """Return the occurrence following from_date for a frequency.

    Month-based frequencies keep the day of month and clamp it to the last
    day of the target month (January 31 monthly gives February 28 or 29).
    With an anchor, occurrences are counted in whole periods from the
    anchor, so a schedule started on the 31st returns to the 31st after a
    short month instead of staying on the clamped day.

    Args:
        frequency: One of RECURRENCE_FREQUENCIES.
        from_date: Date of the current occurrence.
        anchor: Optional first date of the schedule.

    Returns:
        date: Date of the next occurrence.

    Raises:
        ValidationError: If the frequency is unknown.
    """
    if frequency not in RECURRENCE_FREQUENCIES:
        raise ValidationError(
            f"Invalid frequency: {frequency}",
            "INVALID_FREQUENCY",
        )
    if frequency in _DAY_STEPS:
        days = _DAY_STEPS[frequency]
        if anchor is None or anchor > from_date:
            return from_date + timedelta(days=days)
        periods = (from_date - anchor).days // days + 1
        return anchor + timedelta(days=periods * days)
    step = _MONTH_STEPS[frequency]
    if anchor is None or anchor > from_date:
        return _add_months(from_date, step)
    elapsed = (
        (from_date.year - anchor.year) * 12 + from_date.month - anchor.month
    )
    periods = elapsed // step
    candidate = _add_months(anchor, periods * step)
    while candidate <= from_date:
        periods += 1
        candidate = _add_months(anchor, periods * step)
    return candidate


def _add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def format_frequency(frequency: str) -> str:
    """Return a human label for a frequency."""
    if frequency == "biweekly":
        return "Bi-weekly"
    return frequency.capitalize()


__all__ = ["compute_next_occurrence", "format_frequency"]
