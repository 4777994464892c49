from datetime import date, timedelta

import pytest

from planner.models import PlanItem, PlanItemStatus, WeeklySubmission

BASE = "/api/v1/planner"


@pytest.fixture
def plan_item(rep_user, make_store, this_monday):
    def _make(store=None, *, day=1, position=1, week=None, status=PlanItemStatus.SUGGESTED, rep=None):
        return PlanItem.objects.create(
            rep=rep or rep_user,
            store=store or make_store(),
            planned_week=week or this_monday,
            day_of_week=day,
            position=position,
            status=status,
        )

    return _make


@pytest.mark.django_db
def test_planner_requires_authentication(api_client):
    response = api_client.get(f"{BASE}/week/")
    assert response.status_code in (401, 403)


@pytest.mark.django_db
def test_week_view_groups_by_day(rep_client, plan_item, this_monday):
    plan_item(day=2)

    response = rep_client.get(f"{BASE}/week/", {"week": (this_monday + timedelta(days=3)).isoformat()})

    assert response.status_code == 200
    payload = response.json()
    assert payload["week"] == this_monday.isoformat()
    assert set(payload["days"]) == {"1", "2", "3", "4", "5"}
    assert len(payload["days"]["2"]) == 1
    assert payload["days"]["2"][0]["status"] == "suggested"


@pytest.mark.django_db
def test_week_view_rejects_bad_week(rep_client):
    response = rep_client.get(f"{BASE}/week/", {"week": "hier"})
    assert response.status_code == 400


@pytest.mark.django_db
def test_rep_cannot_read_another_reps_week(rep_client, other_rep):
    response = rep_client.get(f"{BASE}/week/", {"rep_id": str(other_rep.pk)})
    assert response.status_code == 403


@pytest.mark.django_db
def test_manager_reads_a_reps_week(manager_client, rep_user, plan_item):
    plan_item(day=4)
    response = manager_client.get(f"{BASE}/week/", {"rep_id": str(rep_user.pk)})
    assert response.status_code == 200
    assert response.json()["rep_id"] == str(rep_user.pk)
    assert len(response.json()["days"]["4"]) == 1


@pytest.mark.django_db
def test_quarter_view(rep_client):
    response = rep_client.get(f"{BASE}/quarter/", {"quarter": 1, "year": 2025})
    assert response.status_code == 200
    payload = response.json()
    assert payload["quarter"] == 1
    assert len(payload["weeks"]) == 13
    assert payload["weeks"][0]["label"] == "6 Jan – 10 Jan"


@pytest.mark.django_db
def test_quarter_view_rejects_invalid_quarter(rep_client):
    response = rep_client.get(f"{BASE}/quarter/", {"quarter": 7, "year": 2025})
    assert response.status_code == 400


@pytest.mark.django_db
@pytest.mark.parametrize("year", [0, 99999])
def test_quarter_view_rejects_out_of_range_year(rep_client, year):
    response = rep_client.get(f"{BASE}/quarter/", {"quarter": 1, "year": year})
    assert response.status_code == 400


@pytest.mark.django_db
def test_add_item(rep_client, make_store, this_monday):
    store = make_store()

    response = rep_client.post(
        f"{BASE}/items/",
        {"store_id": str(store.pk), "day_of_week": 3, "notes": "nouveau"},
        format="json",
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["store_id"] == str(store.pk)
    assert payload["planned_week"] == this_monday.isoformat()
    assert (payload["day_of_week"], payload["position"]) == (3, 1)


@pytest.mark.django_db
def test_add_item_outside_territory(rep_client, make_store, other_rep):
    store = make_store(rep=other_rep)
    response = rep_client.post(f"{BASE}/items/", {"store_id": str(store.pk), "day_of_week": 1}, format="json")
    assert response.status_code == 403


@pytest.mark.django_db
def test_add_item_validates_day(rep_client, make_store):
    response = rep_client.post(
        f"{BASE}/items/", {"store_id": str(make_store().pk), "day_of_week": 6}, format="json",
    )
    assert response.status_code == 400


@pytest.mark.django_db
def test_list_items_is_scoped_to_the_rep(rep_client, plan_item, make_store, other_rep):
    mine = plan_item()
    plan_item(make_store(rep=other_rep), rep=other_rep)

    response = rep_client.get(f"{BASE}/items/")

    assert response.status_code == 200
    assert [row["id"] for row in response.json()["results"]] == [str(mine.pk)]


@pytest.mark.django_db
def test_manager_lists_one_reps_items(manager_client, rep_user, other_rep, plan_item, make_store):
    mine = plan_item()
    plan_item(make_store(rep=other_rep), rep=other_rep)

    response = manager_client.get(f"{BASE}/items/", {"rep_id": str(rep_user.pk)})

    assert response.status_code == 200
    assert [row["id"] for row in response.json()["results"]] == [str(mine.pk)]


@pytest.mark.django_db
def test_item_list_rejects_malformed_rep_id(manager_client):
    response = manager_client.get(f"{BASE}/items/", {"rep_id": "not-a-uuid"})
    assert response.status_code == 400


@pytest.mark.django_db
def test_rep_cannot_list_another_reps_items(rep_client, other_rep):
    response = rep_client.get(f"{BASE}/items/", {"rep_id": str(other_rep.pk)})
    assert response.status_code == 403


@pytest.mark.django_db
def test_patch_item(rep_client, plan_item):
    item = plan_item()

    response = rep_client.patch(
        f"{BASE}/items/{item.pk}/",
        {"status": "confirmed", "confirmed_time": "09:00"},
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert response.json()["confirmed_time"] == "09:00"


@pytest.mark.django_db
def test_patch_week_conflict_returns_409(rep_client, plan_item, make_store, this_monday):
    store = make_store()
    item = plan_item(store)
    other = plan_item(store, week=this_monday + timedelta(days=7))

    response = rep_client.patch(
        f"{BASE}/items/{item.pk}/",
        {"planned_week": (this_monday + timedelta(days=7)).isoformat()},
        format="json",
    )

    assert response.status_code == 409
    assert response.json()["conflicting_item_id"] == str(other.pk)


@pytest.mark.django_db
def test_patch_illegal_transition_returns_400(rep_client, plan_item):
    item = plan_item(status=PlanItemStatus.COMPLETED)
    response = rep_client.patch(f"{BASE}/items/{item.pk}/", {"status": "suggested"}, format="json")
    assert response.status_code == 400


@pytest.mark.django_db
def test_patch_unknown_item_returns_404(rep_client):
    response = rep_client.patch(
        f"{BASE}/items/00000000-0000-0000-0000-000000000000/", {"notes": "x"}, format="json",
    )
    assert response.status_code == 404


@pytest.mark.django_db
def test_patch_other_reps_item_returns_403(rep_client, plan_item, make_store, other_rep):
    item = plan_item(make_store(rep=other_rep), rep=other_rep)
    response = rep_client.patch(f"{BASE}/items/{item.pk}/", {"notes": "x"}, format="json")
    assert response.status_code == 403


@pytest.mark.django_db
def test_delete_item(rep_client, plan_item):
    item = plan_item()
    response = rep_client.delete(f"{BASE}/items/{item.pk}/")
    assert response.status_code == 204
    assert not PlanItem.objects.exists()


@pytest.mark.django_db
def test_reorder_item(rep_client, plan_item):
    plan_item(position=1)
    second = plan_item(position=2)

    response = rep_client.post(f"{BASE}/items/{second.pk}/reorder/", {"direction": "up"}, format="json")

    assert response.status_code == 200
    assert response.json()["position"] == 1


@pytest.mark.django_db
def test_generate_week(rep_client, make_store, this_monday):
    make_store()

    response = rep_client.post(f"{BASE}/generate/", {}, format="json")

    assert response.status_code == 200
    payload = response.json()
    assert payload["scope"] == "week"
    assert payload["inserted"] == 1
    assert PlanItem.objects.get().planned_week == this_monday


@pytest.mark.django_db
def test_generate_quarter(rep_client, make_store):
    make_store(grade="B")

    response = rep_client.post(
        f"{BASE}/generate/", {"scope": "quarter", "quarter": 1, "year": 2025}, format="json",
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["scope"] == "quarter"
    assert payload["generated"] == 1
    assert PlanItem.objects.get().planned_week == date(2025, 1, 6)


@pytest.mark.django_db
def test_generate_requires_quarter_and_year_together(rep_client):
    response = rep_client.post(f"{BASE}/generate/", {"scope": "quarter", "quarter": 2}, format="json")
    assert response.status_code == 400


@pytest.mark.django_db
def test_move_day(rep_client, plan_item, this_monday):
    plan_item(day=1, position=1)
    plan_item(day=1, position=2)

    response = rep_client.post(
        f"{BASE}/move-day/",
        {
            "from_week": this_monday.isoformat(),
            "from_day": 1,
            "to_week": this_monday.isoformat(),
            "to_day": 5,
        },
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["moved"] == 2
    assert set(PlanItem.objects.values_list("day_of_week", flat=True)) == {5}


@pytest.mark.django_db
def test_submit_week(rep_client, rep_user, this_monday):
    first = rep_client.post(f"{BASE}/submit/", {}, format="json")
    second = rep_client.post(f"{BASE}/submit/", {"week": this_monday.isoformat()}, format="json")

    assert first.status_code == second.status_code == 200
    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert first.json()["submitted_at"] == second.json()["submitted_at"]
    assert WeeklySubmission.objects.filter(rep=rep_user).count() == 1


@pytest.mark.django_db
def test_team_view_for_managers_only(rep_client, manager_client, rep_user):
    assert rep_client.get(f"{BASE}/team/").status_code == 403

    response = manager_client.get(f"{BASE}/team/")
    assert response.status_code == 200
    assert [row["rep_id"] for row in response.json()["reps"]] == [str(rep_user.pk)]


@pytest.mark.django_db
def test_store_search(rep_client, make_store):
    make_store("Tabac de la gare")
    make_store("Presse centrale")

    response = rep_client.get(f"{BASE}/stores/", {"q": "gare"})

    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["Tabac de la gare"]


@pytest.mark.django_db
def test_week_export_csv(rep_client, plan_item, make_store, this_monday):
    plan_item(make_store("Magasin CSV"), day=2)

    response = rep_client.get(f"{BASE}/week-export/")

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    assert f"plan_{this_monday.isoformat()}.csv" in response["Content-Disposition"]
    content = response.content.decode("utf-8-sig")
    assert content.splitlines()[0] == "Jour,Ordre,Magasin,Grade,Code postal,Statut,Heure,Notes"
    assert "Magasin CSV" in content
