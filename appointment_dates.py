"""Appointment date parsing.

Bookings used to store the day as display text in several formats. All of
them are parsed into a ``date`` on the way in so the database only holds
real dates.
"""
import calendar
import re
from datetime import date, datetime

# yyyy-MM-dd, "April 18th, 2025", "April 18, 2025"
SQL_FORMAT = "%Y-%m-%d"
MEDIUM_FORMAT = "%B %d, %Y"
_ORDINAL = re.compile(r"(\d{1,2})(st|nd|rd|th)\b", re.IGNORECASE)


def _ordinal(day: int) -> str:
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def parse_appointment_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date required")
    text = " ".join(value.strip().split())
    try:
        return datetime.strptime(text[:10], SQL_FORMAT).date()
    except ValueError:
        pass
    stripped = _ORDINAL.sub(r"\1", text)
    for fmt in (MEDIUM_FORMAT, "%B %d %Y", "%b %d, %Y"):
        try:
            return datetime.strptime(stripped, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date: {value}")


def date_variants(day: date) -> list:
    return [
        day.strftime(SQL_FORMAT),
        f"{day.strftime('%B')} {_ordinal(day.day)}, {day.year}",
        f"{day.strftime('%B')} {day.day}, {day.year}",
    ]


def same_day(a, b) -> bool:
    try:
        return parse_appointment_date(a) == parse_appointment_date(b)
    except ValueError:
        return False


def display_date(day: date) -> str:
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def add_months(day: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of a shorter month."""
    index = day.month - 1 + months
    year, month = day.year + index // 12, index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))
