"""Geographic day clustering.

Stores are grouped by ``(state, postcode prefix)`` so that a day's calls
stay within one area. This approximates a sensible driving route without
geocoding.
"""
from __future__ import annotations

from itertools import groupby

from django.conf import settings

GRADE_RANK = {"A": 0, "B": 1, "C": 2}
UNKNOWN_STATE = "ZZZ"
POSTCODE_PREFIX_LENGTH = 3


def cluster_key(store) -> tuple[str, str]:
    return (store.state or UNKNOWN_STATE, (store.postcode or "")[:POSTCODE_PREFIX_LENGTH])


def _route_order(store):
    return (store.postcode or "", GRADE_RANK.get(store.grade, 3))


def day_capacity(max_per_day: int | None = None, days: int | None = None) -> int:
    max_per_day = max_per_day or settings.PLANNER_MAX_STORES_PER_DAY
    days = days or settings.PLANNER_WORKING_DAYS
    return max_per_day * days


def cluster_into_days(stores, *, max_per_day: int | None = None, days: int | None = None) -> list[list]:
    """Partition *stores* into working-day buckets.

    Clusters are filled in key order, each day taking up to *max_per_day*
    stores before moving on. The last day absorbs anything beyond total
    capacity so that no store is lost; callers cap their input when they
    need a hard limit. Each day ends up sorted by full postcode.
    """
    max_per_day = max_per_day or settings.PLANNER_MAX_STORES_PER_DAY
    days = days or settings.PLANNER_WORKING_DAYS

    ordered = sorted(stores, key=cluster_key)
    buckets = [[] for _ in range(days)]
    day_index = 0
    for _key, group in groupby(ordered, key=cluster_key):
        for store in sorted(group, key=_route_order):
            if len(buckets[day_index]) >= max_per_day and day_index < days - 1:
                day_index += 1
            buckets[day_index].append(store)

    for bucket in buckets:
        bucket.sort(key=lambda store: store.postcode or "")
    return buckets
