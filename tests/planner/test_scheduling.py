from datetime import date, timedelta

from planner.dates import quarter_weeks
from planner.scheduling import (
    days_overdue,
    due_dates,
    due_weeks,
    grade_rule,
    is_covered,
    is_overdue,
    target_week,
)

TODAY = date(2025, 5, 14)
Q_START, Q_END = date(2025, 1, 1), date(2025, 3, 31)
WEEKS = quarter_weeks(1, 2025)


def _due(grade, *, visits=(), last=None):
    return due_dates(
        grade,
        quarter_start=Q_START,
        quarter_end=Q_END,
        visits_in_quarter=list(visits),
        last_visit=last,
    )


def test_grade_rules():
    assert grade_rule("A").interval_days == 42
    assert grade_rule("A").visits_per_quarter == 2
    assert grade_rule("B").interval_days == 84
    assert grade_rule("C").visits_per_quarter == 1
    assert grade_rule(None) is None


def test_grade_a_visited_50_days_ago_is_due():
    assert is_overdue("A", TODAY - timedelta(days=50), TODAY)


def test_grade_b_visited_50_days_ago_is_not_due_until_day_84():
    assert not is_overdue("B", TODAY - timedelta(days=50), TODAY)
    assert not is_overdue("B", TODAY - timedelta(days=83), TODAY)
    assert is_overdue("B", TODAY - timedelta(days=84), TODAY)


def test_never_visited_is_overdue_and_ungraded_never_is():
    assert is_overdue("C", None, TODAY)
    assert days_overdue("C", None, TODAY) is None
    assert not is_overdue(None, None, TODAY)


def test_days_overdue():
    assert days_overdue("A", TODAY - timedelta(days=43), TODAY) == 1
    assert days_overdue("B", TODAY - timedelta(days=90), TODAY) == 6


def test_never_visited_grade_a_gets_two_due_dates():
    assert _due("A") == [date(2025, 1, 1), date(2025, 2, 12)]


def test_first_due_is_clamped_to_quarter_start():
    assert _due("B", last=date(2024, 6, 1)) == [Q_START]


def test_first_due_follows_last_visit_interval():
    assert _due("B", last=date(2024, 12, 1)) == [date(2025, 2, 23)]
    assert _due("A", last=date(2024, 12, 20)) == [date(2025, 1, 31), date(2025, 3, 14)]


def test_due_after_quarter_end_is_dropped():
    assert _due("B", last=date(2025, 1, 10)) == []
    assert _due("A", last=date(2025, 2, 10)) == [date(2025, 3, 24)]


def test_grade_a_with_one_visit_in_quarter():
    assert _due("A", visits=[date(2025, 2, 17)]) == [date(2025, 3, 31)]
    assert _due("A", visits=[date(2025, 2, 18)]) == []


def test_fully_covered_store_has_no_due_dates():
    assert _due("B", visits=[date(2025, 1, 15)]) == []
    assert _due("A", visits=[date(2025, 1, 6), date(2025, 2, 20)]) == []
    assert is_covered("B", 1)
    assert not is_covered("A", 1)


def test_target_week_is_first_monday_on_or_after_due():
    assert target_week(date(2025, 1, 1), WEEKS) == date(2025, 1, 6)
    assert target_week(date(2025, 1, 6), WEEKS) == date(2025, 1, 6)
    assert target_week(date(2025, 3, 31), WEEKS) == date(2025, 3, 31)
    assert target_week(date(2025, 4, 1), WEEKS) is None


def test_due_weeks_maps_each_due_date():
    weeks = due_weeks(
        "A",
        weeks=WEEKS,
        quarter_start=Q_START,
        quarter_end=Q_END,
        visits_in_quarter=[],
        last_visit=None,
    )
    assert weeks == [date(2025, 1, 6), date(2025, 2, 17)]
