"""Celery tasks for the call planner."""
from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings
from django.db import DatabaseError

logger = logging.getLogger("callplan")


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def generate_quarter_for_rep(self, *, rep_id: str, quarter: int, year: int):
    """Regenerate one rep's quarter plan; retried when the rep's lock is busy."""
    from accounts.models import User
    from planner.engine import QuarterPlanGenerator

    try:
        rep = User.objects.get(pk=rep_id)
    except User.DoesNotExist:
        logger.warning("generate_quarter_for_rep: unknown rep %s", rep_id)
        return None

    try:
        result = QuarterPlanGenerator(rep).generate(quarter, year, wait=False)
    except DatabaseError as exc:
        logger.exception("generate_quarter_for_rep failed for rep=%s", rep_id)
        raise self.retry(exc=exc)

    if result is None:
        # Lock held by a manual run; try again shortly.
        raise self.retry(countdown=30)
    return {
        "rep_id": str(rep_id),
        "generated": result.generated,
        "reconciled": result.reconciled,
        "errors": result.errors,
    }


@shared_task
def regenerate_current_quarter():
    """
    Scheduled nightly (Celery Beat). Regenerate the current quarter for every
    active rep; each rep runs as its own task.
    """
    from accounts.models import User
    from planner.dates import current_quarter

    if not settings.PLANNER_NIGHTLY_REGENERATION:
        logger.debug("regenerate_current_quarter: disabled")
        return 0

    quarter, year = current_quarter()
    rep_ids = list(User.objects.active_reps().values_list("pk", flat=True))
    queued = 0
    for rep_id in rep_ids:
        try:
            generate_quarter_for_rep.delay(rep_id=str(rep_id), quarter=quarter, year=year)
            queued += 1
        except Exception as exc:
            logger.warning("Quarter regeneration dispatch failed for rep=%s: %s", rep_id, exc, exc_info=True)
    logger.info("Queued quarter regeneration %s-Q%s for %d reps", year, quarter, queued)
    return queued
