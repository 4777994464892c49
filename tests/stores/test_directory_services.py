from datetime import date

import pytest

from stores.services import find_stores_by_query, list_active_graded_stores
from visits.services import last_visit_before, visits_by_store, visits_in_range


@pytest.mark.django_db
def test_graded_stores_exclude_prospects_inactive_and_ungraded(rep_user, other_rep, make_store):
    eligible = make_store(grade="C")
    make_store(grade=None)
    make_store(is_prospect=True)
    make_store(is_active=False)
    make_store(rep=other_rep)

    assert list(list_active_graded_stores(rep_user)) == [eligible]


@pytest.mark.django_db
def test_graded_stores_carry_last_visit(rep_user, make_store, make_visit):
    store = make_store()
    make_visit(store, on=date(2025, 1, 10))
    latest = make_visit(store, on=date(2025, 3, 2))

    row = list_active_graded_stores(rep_user).get()

    assert row.last_visit_at == latest.visited_at


@pytest.mark.django_db
def test_store_search_respects_limit(rep_user, make_store):
    for _ in range(3):
        make_store()
    assert len(find_stores_by_query(rep_user, "", limit=2)) == 2



@pytest.mark.django_db
def test_visit_range_helpers(make_store, make_visit):
    store = make_store()
    make_visit(store, on=date(2024, 12, 20))
    make_visit(store, on=date(2025, 2, 5))
    make_visit(store, on=date(2025, 1, 1))
    make_visit(store, on=date(2025, 3, 31))

    rows = visits_in_range([store.pk], date(2025, 1, 1), date(2025, 3, 31))

    assert len(rows) == 3
    assert visits_by_store([store.pk], date(2025, 1, 1), date(2025, 3, 31)) == {
        store.pk: [date(2025, 1, 1), date(2025, 2, 5), date(2025, 3, 31)],
    }
    assert last_visit_before([store.pk], date(2025, 1, 1)) == {store.pk: date(2024, 12, 20)}
