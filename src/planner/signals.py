"""Signals: reconcile plan items when a real visit is recorded."""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from visits.models import Visit

logger = logging.getLogger("callplan")


def _queue_reconcile(visit_id) -> None:
    def _dispatch() -> None:
        from planner.engine import reconcile_visit

        try:
            visit = Visit.objects.select_related("rep").get(pk=visit_id)
            reconcile_visit(visit)
        except Visit.DoesNotExist:
            logger.debug("Visit %s vanished before reconciliation", visit_id)
        except Exception as exc:
            # Never let reconciliation break the visit write.
            logger.error("Visit reconciliation failed for visit=%s: %s", visit_id, exc, exc_info=True)

    # Run after commit so the reconciliation reads the committed visit.
    transaction.on_commit(_dispatch)


@receiver(post_save, sender=Visit, dispatch_uid="planner_visit_reconcile")
def visit_post_save(sender, instance, created, **kwargs):
    if kwargs.get("raw"):
        return
    if not instance.rep_id:
        return
    _queue_reconcile(instance.pk)
