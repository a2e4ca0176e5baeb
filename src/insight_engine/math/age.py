"""Age and age-category derivation from birth dates.

Cycling categories use the age reached during the calendar year, i.e. the
age on January 1st counted as reference year minus birth year.
"""

from __future__ import annotations

from datetime import date

from insight_engine.models.enums import UNKNOWN_CATEGORY

_MAX_PLAUSIBLE_AGE = 120


def parse_birth_date(birth_date: date | str | None) -> date | None:
    """Parse a ``date`` or ISO ``YYYY-MM-DD`` string; None if malformed."""
    if isinstance(birth_date, date):
        return birth_date
    if not isinstance(birth_date, str):
        return None
    parts = birth_date.strip().split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        return None


def exact_age(birth_date: date | str | None, as_of: date | None = None) -> int | None:
    """Completed years on *as_of* (default today), or None if implausible."""
    born = parse_birth_date(birth_date)
    if born is None:
        return None
    today = as_of or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    if age < 0 or age > _MAX_PLAUSIBLE_AGE:
        return None
    return age


def age_category(birth_date: date | str | None, as_of: date | None = None) -> str:
    """Age category: U19 (≤18 on Jan 1), U23 (≤22), Senior, or "N/A".

    Args:
        birth_date: Birth date as ``date`` or ISO string.
        as_of: Reference date; its year decides the Jan 1 cut-off.
            Defaults to today.
    """
    born = parse_birth_date(birth_date)
    today = as_of or date.today()
    if born is None or exact_age(born, today) is None:
        return UNKNOWN_CATEGORY

    age_on_jan_1 = today.year - born.year
    if age_on_jan_1 <= 18:
        return "U19"
    if age_on_jan_1 <= 22:
        return "U23"
    return "Senior"


def season_age(birth_date: date | str | None, season: int) -> int | None:
    """Age reached during *season* (season year minus birth year)."""
    born = parse_birth_date(birth_date)
    if born is None:
        return None
    return season - born.year
