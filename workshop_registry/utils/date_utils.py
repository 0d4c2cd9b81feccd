"""Date and time utility functions."""
from datetime import date, datetime
from typing import Optional


def format_registration_date(day: Optional[date] = None) -> str:
    """
    Format a registration date the way Indian English locales print it.

    Args:
        day: Date to format (defaults to today)

    Returns:
        Date string without zero padding (e.g., "5/1/2026")
    """
    day = day or date.today()
    return f"{day.day}/{day.month}/{day.year}"


def format_export_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format the timestamp stored in a JSON backup.

    Args:
        moment: Point in time (defaults to now)

    Returns:
        Timestamp string (e.g., "18/10/2026, 3:04:05 pm")
    """
    moment = moment or datetime.now()
    hour = moment.hour % 12 or 12
    suffix = "am" if moment.hour < 12 else "pm"
    return (
        f"{format_registration_date(moment.date())}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"
    )


def file_date_stamp(moment: Optional[datetime] = None) -> str:
    """Return the YYYY-MM-DD stamp used in download file names."""
    moment = moment or datetime.now()
    return moment.strftime("%Y-%m-%d")
