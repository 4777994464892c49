"""Read services over the visit log."""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time

from django.db.models import Max
from django.utils import timezone

from visits.models import Visit


def _start_of_day(value: date) -> datetime:
    return timezone.make_aware(datetime.combine(value, time.min))


def _end_of_day(value: date) -> datetime:
    return timezone.make_aware(datetime.combine(value, time.max))


def visits_in_range(store_ids, start: date, end: date) -> list[dict]:
    """Visits for *store_ids* between *start* and *end* (both inclusive), oldest first."""
    rows = (
        Visit.objects
        .filter(
            store_id__in=list(store_ids),
            visited_at__gte=_start_of_day(start),
            visited_at__lte=_end_of_day(end),
        )
        .order_by("visited_at", "pk")
        .values("store_id", "visited_at")
    )
    return list(rows)


def visits_by_store(store_ids, start: date, end: date) -> dict:
    """Group :func:`visits_in_range` per store as chronologically sorted local dates."""
    grouped = defaultdict(list)
    for row in visits_in_range(store_ids, start, end):
        grouped[row["store_id"]].append(timezone.localtime(row["visited_at"]).date())
    return dict(grouped)


def last_visit_before(store_ids, before: date) -> dict:
    """Most recent visit date strictly before *before*, per store."""
    rows = (
        Visit.objects
        .filter(store_id__in=list(store_ids), visited_at__lt=_start_of_day(before))
        .values("store_id")
        .annotate(last_visit=Max("visited_at"))
    )
    return {row["store_id"]: timezone.localtime(row["last_visit"]).date() for row in rows}
