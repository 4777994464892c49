"""Due-date scheduling from store grade and visit history.

Grade A stores are expected every 6 weeks (two visits a quarter); grade B
and C stores every 12 weeks (one visit a quarter).
"""
from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from datetime import date, timedelta

from django.conf import settings


@dataclass(frozen=True)
class GradeRule:
    interval_days: int
    visits_per_quarter: int

    @property
    def interval(self) -> timedelta:
        return timedelta(days=self.interval_days)


def grade_rule(grade: str | None) -> GradeRule | None:
    """Revisit cadence for *grade*; ungraded stores are never scheduled."""
    if grade == "A":
        return GradeRule(settings.PLANNER_GRADE_A_INTERVAL_DAYS, 2)
    if grade in ("B", "C"):
        return GradeRule(settings.PLANNER_GRADE_BC_INTERVAL_DAYS, 1)
    return None


def days_overdue(grade: str | None, last_visit: date | None, today: date) -> int | None:
    """Days past the revisit interval (negative when not yet due).

    Returns ``None`` for never-visited stores, which rank ahead of all others.
    """
    rule = grade_rule(grade)
    if rule is None or last_visit is None:
        return None
    return (today - last_visit).days - rule.interval_days


def is_overdue(grade: str | None, last_visit: date | None, today: date) -> bool:
    """True once the grade interval has fully elapsed since the last visit, or it never happened."""
    if grade_rule(grade) is None:
        return False
    overdue = days_overdue(grade, last_visit, today)
    return overdue is None or overdue >= 0


def due_dates(
    grade: str | None,
    *,
    quarter_start: date,
    quarter_end: date,
    visits_in_quarter: list[date],
    last_visit: date | None,
) -> list[date]:
    """Zero, one or two due dates for what remains of the quarter.

    *visits_in_quarter* must be chronologically sorted; *last_visit* is the
    most recent visit before the quarter started.
    """
    rule = grade_rule(grade)
    if rule is None:
        return []
    done = len(visits_in_quarter)
    if done >= rule.visits_per_quarter:
        return []

    dues = []
    if done == 0:
        first = quarter_start if last_visit is None else max(quarter_start, last_visit + rule.interval)
        if first <= quarter_end:
            dues.append(first)
            if rule.visits_per_quarter > 1:
                second = first + rule.interval
                if second <= quarter_end:
                    dues.append(second)
    else:
        following = visits_in_quarter[-1] + rule.interval
        if following <= quarter_end:
            dues.append(following)
    return dues


def target_week(due: date, weeks: list[date]) -> date | None:
    """First quarter Monday on or after *due*."""
    index = bisect_left(weeks, due)
    if index >= len(weeks):
        return None
    return weeks[index]


def due_weeks(
    grade: str | None,
    *,
    weeks: list[date],
    quarter_start: date,
    quarter_end: date,
    visits_in_quarter: list[date],
    last_visit: date | None,
) -> list[date]:
    """Distinct target weeks for the store's remaining due dates."""
    targets = []
    for due in due_dates(
        grade,
        quarter_start=quarter_start,
        quarter_end=quarter_end,
        visits_in_quarter=visits_in_quarter,
        last_visit=last_visit,
    ):
        week = target_week(due, weeks)
        if week is not None and week not in targets:
            targets.append(week)
    return targets


def is_covered(grade: str | None, visits_done: int) -> bool:
    rule = grade_rule(grade)
    return rule is not None and visits_done >= rule.visits_per_quarter
