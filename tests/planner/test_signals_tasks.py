import uuid
from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from planner.dates import current_quarter, quarter_weeks
from planner.models import PlanItem, PlanItemStatus
from planner.tasks import generate_quarter_for_rep, regenerate_current_quarter


@pytest.mark.django_db
def test_recorded_visit_completes_the_week_item(rep_user, make_store, make_visit, this_monday, django_capture_on_commit_callbacks):
    store = make_store()
    planned = PlanItem.objects.create(
        rep=rep_user, store=store, planned_week=this_monday, day_of_week=1, position=1,
    )

    with django_capture_on_commit_callbacks(execute=True):
        visit = make_visit(store)

    planned.refresh_from_db()
    assert planned.status == PlanItemStatus.COMPLETED
    assert PlanItem.objects.count() == 1
    assert visit.visited_at is not None


@pytest.mark.django_db
def test_recorded_visit_creates_completed_item(rep_user, make_store, make_visit, django_capture_on_commit_callbacks):
    store = make_store()

    with django_capture_on_commit_callbacks(execute=True):
        make_visit(store, on=date(2025, 2, 22))

    item = PlanItem.objects.get(store=store)
    assert item.rep == rep_user
    assert (item.planned_week, item.day_of_week) == (date(2025, 2, 17), 5)
    assert item.status == PlanItemStatus.COMPLETED


@pytest.mark.django_db
def test_visit_reconciliation_waits_for_commit(make_store, make_visit, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        make_visit(make_store(), on=date(2025, 2, 18))

    assert len(callbacks) == 1
    assert not PlanItem.objects.exists()


@pytest.mark.django_db
def test_generate_quarter_for_rep_task(rep_user, make_store):
    make_store(grade="B")

    result = generate_quarter_for_rep.apply(kwargs={"rep_id": str(rep_user.pk), "quarter": 1, "year": 2025}).get()

    assert result["generated"] == 1
    assert PlanItem.objects.get().planned_week == date(2025, 1, 6)


@pytest.mark.django_db
def test_generate_quarter_for_unknown_rep(db):
    result = generate_quarter_for_rep.apply(kwargs={"rep_id": str(uuid.uuid4()), "quarter": 1, "year": 2025}).get()
    assert result is None


@pytest.mark.django_db
def test_nightly_regeneration_covers_active_reps(rep_user, other_rep, manager_user, make_store):
    make_store(grade="B")
    make_store(grade="C", rep=other_rep)

    queued = regenerate_current_quarter()

    assert queued == 2
    quarter, year = current_quarter()
    weeks = quarter_weeks(quarter, year)
    assert PlanItem.objects.filter(planned_week__in=weeks).values("rep").distinct().count() == 2
    assert not PlanItem.objects.filter(rep=manager_user).exists()


@pytest.mark.django_db
def test_nightly_regeneration_can_be_disabled(settings, rep_user, make_store):
    settings.PLANNER_NIGHTLY_REGENERATION = False
    make_store(grade="B")

    assert regenerate_current_quarter() == 0
    assert not PlanItem.objects.exists()


@pytest.mark.django_db
def test_generate_call_plans_command(rep_user, other_rep, make_store):
    make_store(grade="A")
    make_store(grade="B", rep=other_rep)
    out = StringIO()

    call_command("generate_call_plans", quarter=1, year=2025, stdout=out)

    output = out.getvalue()
    assert "rep@test.com: 2 suggestions" in output
    assert "rep2@test.com: 1 suggestions" in output
    assert "2025-Q1: 3 suggestions pour 2 representant(s)." in output


@pytest.mark.django_db
def test_generate_call_plans_for_one_rep(rep_user, other_rep, make_store):
    make_store(grade="B")
    make_store(grade="B", rep=other_rep)

    call_command("generate_call_plans", rep_email="REP@test.com", quarter=1, year=2025, stdout=StringIO())

    assert set(PlanItem.objects.values_list("rep", flat=True)) == {rep_user.pk}


@pytest.mark.django_db
@pytest.mark.parametrize(
    "kwargs",
    [
        {"quarter": 1},
        {"quarter": 5, "year": 2025},
        {"quarter": 1, "year": 1999},
        {"rep_email": "inconnu@test.com", "quarter": 1, "year": 2025},
    ],
)
def test_generate_call_plans_rejects_bad_options(kwargs):
    with pytest.raises(CommandError):
        call_command("generate_call_plans", stdout=StringIO(), **kwargs)
