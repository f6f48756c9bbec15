"""Calendar month names used as billing-period keys."""

from enum import Enum


class Month(str, Enum):
    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"


MONTHS: list[str] = [m.value for m in Month]


def month_index(month: str) -> int:
    """Zero-based position of ``month`` in the calendar, or -1 if unknown."""
    try:
        return MONTHS.index(month)
    except ValueError:
        return -1
