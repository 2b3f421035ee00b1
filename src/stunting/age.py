"""
Age calculation utilities.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[date]:
    """Parse an ISO date/datetime string or date object. Returns None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def calculate_age(birth_date: DateLike, today: DateLike = None) -> int:
    """
    Calculate age in whole months.

    Months are counted as (year difference * 12 + month difference), minus one
    when the day-of-month of the birth date has not been reached yet in the
    current month. The result is never negative.

    Args:
        birth_date: Birth date as ISO string, date or datetime.
        today: Reference date (defaults to the current date).

    Returns:
        Age in months. Empty or unparseable birth dates return 0, so callers
        must validate the birth date before relying on the age.
    """
    birth = parse_date(birth_date)
    if birth is None:
        if birth_date:
            logging.warning(f"Unparseable birth date {birth_date!r} - age set to 0 months")
        return 0

    reference = parse_date(today) if today is not None else date.today()
    if reference is None:
        raise ValueError(f"Invalid reference date: {today!r}")

    months = (reference.year - birth.year) * 12 + (reference.month - birth.month)
    if reference.day < birth.day:
        months -= 1
    return max(0, months)


def describe_age(age_months: int) -> str:
    """Human readable age, e.g. '2 tahun 3 bulan' or '9 bulan'."""
    years, months = divmod(int(age_months), 12)
    if years > 0:
        return f"{years} tahun {months} bulan"
    return f"{months} bulan"
