"""Cross-app services shared by the planner and its collaborators."""
from __future__ import annotations

from typing import Any

from core.middleware import get_current_user
from core.models import AuditLog


def create_audit_log(
    actor,
    rep,
    action: str,
    entity_type: str,
    entity_id: str,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
) -> AuditLog:
    """Create and return a new :class:`~core.models.AuditLog` entry.

    When *actor* is ``None`` the authenticated user of the current request
    (if any) is recorded instead.
    """
    if actor is None:
        actor = get_current_user()
    return AuditLog.objects.create(
        actor=actor,
        rep=rep,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=before,
        after_json=after,
    )
