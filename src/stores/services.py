"""Read services exposed by the store directory to the call planner."""
from __future__ import annotations

from django.conf import settings
from django.db.models import F, Max, QuerySet

from stores.models import Store


def territory_stores(rep) -> QuerySet[Store]:
    """Active, non-prospect stores assigned to *rep*, annotated with ``last_visit_at``."""
    return (
        Store.objects
        .filter(rep=rep, is_active=True, is_prospect=False)
        .annotate(last_visit_at=Max("visits__visited_at"))
    )


def list_active_graded_stores(rep) -> QuerySet[Store]:
    """Stores eligible for call planning: active, non-prospect and graded A/B/C."""
    return territory_stores(rep).filter(grade__in=Store.Grade.values).order_by("pk")


def find_stores_by_query(rep, query: str = "", limit: int | None = None) -> QuerySet[Store]:
    """Name search across the rep's territory, used for manual plan additions."""
    if limit is None:
        limit = settings.PLANNER_STORE_SEARCH_LIMIT
    qs = territory_stores(rep)
    query = (query or "").strip()
    if query:
        qs = qs.filter(name__icontains=query)
    return qs.order_by(F("grade").asc(nulls_last=True), "name")[:limit]
