import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from api.v1.permissions import IsManagerCapable, IsPlannerUser


class DummyView:
    pass


class DummyRequest:
    def __init__(self, user, method="GET"):
        self.user = user
        self.method = method


@pytest.mark.django_db
def test_planner_user_allows_reps_and_managers(rep_user, manager_user):
    permission = IsPlannerUser()
    assert permission.has_permission(DummyRequest(rep_user), DummyView())
    assert permission.has_permission(DummyRequest(manager_user), DummyView())


@pytest.mark.django_db
def test_planner_user_denies_anonymous_and_inactive(rep_user):
    permission = IsPlannerUser()
    assert not permission.has_permission(DummyRequest(AnonymousUser()), DummyView())

    rep_user.is_active = False
    assert not permission.has_permission(DummyRequest(rep_user), DummyView())


@pytest.mark.django_db
def test_manager_capable_roles(rep_user, manager_user):
    permission = IsManagerCapable()
    assert not permission.has_permission(DummyRequest(rep_user), DummyView())
    assert permission.has_permission(DummyRequest(manager_user), DummyView())

    executive = User.objects.create_user(
        email="exec@test.com", password="testpass123", first_name="Dir", last_name="Co",
        role=User.Role.EXECUTIVE,
    )
    assert permission.has_permission(DummyRequest(executive), DummyView())


@pytest.mark.django_db
def test_superuser_is_manager_capable(rep_user):
    rep_user.is_superuser = True
    assert IsManagerCapable().has_permission(DummyRequest(rep_user), DummyView())
