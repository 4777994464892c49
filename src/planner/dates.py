"""Calendar helpers for planning weeks and quarters.

Every planning week is identified by its ISO Monday. Working days are
numbered 1 (Monday) to 5 (Friday).
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

from django.utils import timezone

from planner.exceptions import PlanValidationError

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MIN_YEAR, MAX_YEAR = 2000, 2100


def iso_monday(value: date) -> date:
    """Monday of the ISO week containing *value* (Sunday rolls back six days)."""
    if isinstance(value, datetime):
        value = value.date()
    return value - timedelta(days=value.weekday())


def current_week() -> date:
    return iso_monday(timezone.localdate())


def quarter_of(value: date) -> tuple[int, int]:
    return (value.month - 1) // 3 + 1, value.year


def current_quarter() -> tuple[int, int]:
    return quarter_of(timezone.localdate())


def quarter_bounds(quarter: int, year: int) -> tuple[date, date]:
    """First and last calendar day of the quarter."""
    if quarter not in (1, 2, 3, 4):
        raise PlanValidationError("Le trimestre doit etre compris entre 1 et 4.")
    if not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise PlanValidationError(f"L'annee doit etre comprise entre {MIN_YEAR} et {MAX_YEAR}.")
    start = date(year, (quarter - 1) * 3 + 1, 1)
    if quarter == 4:
        end = date(year, 12, 31)
    else:
        end = date(year, quarter * 3 + 1, 1) - timedelta(days=1)
    return start, end


def quarter_weeks(quarter: int, year: int) -> list[date]:
    """Every Monday falling between the first and last day of the quarter, inclusive."""
    start, end = quarter_bounds(quarter, year)
    monday = start + timedelta(days=(7 - start.weekday()) % 7)
    weeks = []
    while monday <= end:
        weeks.append(monday)
        monday += timedelta(days=7)
    return weeks


def week_label(monday: date) -> str:
    """Display label for the Monday-Friday span, e.g. ``"6 Jan – 10 Jan"``."""
    friday = monday + timedelta(days=4)
    return (
        f"{monday.day} {MONTH_ABBR[monday.month - 1]} – "
        f"{friday.day} {MONTH_ABBR[friday.month - 1]}"
    )


def working_day(value: date) -> int:
    """Working-day number for *value*; Saturday clamps to Friday, Sunday to Monday."""
    weekday = value.isoweekday()
    if weekday == 6:
        return 5
    if weekday == 7:
        return 1
    return weekday


def parse_week(value, *, default_current: bool = True) -> date:
    """Normalise a ``YYYY-MM-DD`` string or date to its ISO Monday."""
    if value in (None, ""):
        if default_current:
            return current_week()
        raise PlanValidationError("La semaine est obligatoire.")
    if isinstance(value, date):
        return iso_monday(value)
    try:
        parsed = date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise PlanValidationError(f"Semaine invalide: {value!r} (format attendu AAAA-MM-JJ).")
    return iso_monday(parsed)


def parse_day(value, *, field: str = "day_of_week") -> int:
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise PlanValidationError(f"{field} doit etre un entier entre 1 et 5.")
    if not 1 <= day <= 5:
        raise PlanValidationError(f"{field} doit etre un entier entre 1 et 5.")
    return day
