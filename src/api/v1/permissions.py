"""Custom DRF permissions for the call planner API."""
from rest_framework.permissions import BasePermission


class IsPlannerUser(BasePermission):
    """Authenticated, active users with a planning role (reps and managers)."""

    message = "Acces reserve aux representants et managers."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_active and getattr(user, "role", None))


class IsManagerCapable(BasePermission):
    """Allow access to managers, executives, admins and superusers."""

    message = "Reserve aux managers."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "has_manager_capability", False))
