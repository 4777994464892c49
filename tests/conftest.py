from datetime import datetime, time, timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from planner.dates import iso_monday
from stores.models import Store
from visits.models import Visit


def local_noon(day):
    """Aware datetime at noon local time, clear of any midnight/DST edge."""
    return timezone.make_aware(datetime.combine(day, time(12, 0)))


@pytest.fixture
def rep_user(db):
    return User.objects.create_user(
        email="rep@test.com",
        password="testpass123",
        first_name="Rep",
        last_name="Terrain",
        role=User.Role.REP,
    )


@pytest.fixture
def other_rep(db):
    return User.objects.create_user(
        email="rep2@test.com",
        password="testpass123",
        first_name="Autre",
        last_name="Rep",
        role=User.Role.REP,
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email="manager@test.com",
        password="testpass123",
        first_name="Manager",
        last_name="User",
        role=User.Role.MANAGER,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def rep_client(rep_user):
    client = APIClient()
    client.force_authenticate(user=rep_user)
    return client


@pytest.fixture
def manager_client(manager_user):
    client = APIClient()
    client.force_authenticate(user=manager_user)
    return client


@pytest.fixture
def this_monday():
    return iso_monday(timezone.localdate())


@pytest.fixture
def make_store(db, rep_user):
    counter = {"n": 0}

    def _make(name=None, *, grade="A", state="NSW", postcode="2000", rep=rep_user, **extra):
        counter["n"] += 1
        return Store.objects.create(
            name=name or f"Magasin {counter['n']:03d}",
            grade=grade,
            state=state,
            postcode=postcode,
            rep=rep,
            **extra,
        )

    return _make


@pytest.fixture
def make_visit(db):
    def _make(store, *, days_ago=None, on=None, rep=None):
        if on is None:
            on = timezone.localdate() - timedelta(days=days_ago or 0)
        return Visit.objects.create(
            store=store,
            rep=rep or store.rep,
            visited_at=local_noon(on),
        )

    return _make
