"""Plan generation engine for the call planner.

Core design principles:
- Generators only ever delete or insert ``suggested`` items; confirmed,
  completed and skipped items are committed work and are never overwritten
- Uniqueness of (rep, store, week) is enforced by the database; inserts use
  ON CONFLICT DO NOTHING and reconciliation uses ON CONFLICT DO UPDATE
- Each run holds the rep's advisory lock for the whole transaction
- A failing batch insert is retried row by row so one bad row never aborts
  the rest of the run
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Max
from django.utils import timezone

from planner.clustering import GRADE_RANK, cluster_into_days, day_capacity
from planner.dates import iso_monday, quarter_bounds, quarter_weeks, working_day
from planner.locks import acquire_rep_lock
from planner.models import PlanItem, PlanItemStatus
from planner.scheduling import days_overdue, due_weeks, is_covered, is_overdue
from stores.services import list_active_graded_stores
from visits.services import last_visit_before, visits_by_store, visits_in_range

logger = logging.getLogger("callplan")


@dataclass
class WeekGenerationResult:
    """Counters for one single-week generation run."""

    week: date
    overdue_total: int = 0
    removed: int = 0
    inserted: int = 0
    skipped: int = 0
    deferred: int = 0
    errors: int = 0
    message: str = ""


@dataclass
class QuarterGenerationResult:
    """Counters for one quarter-wide generation run."""

    quarter: int
    year: int
    weeks: list[date] = field(default_factory=list)
    removed: int = 0
    reconciled: int = 0
    generated: int = 0
    weeks_planned: int = 0
    stores_total: int = 0
    covered: int = 0
    short: int = 0
    unscheduled: int = 0
    errors: int = 0
    message: str = ""


def _local_date(value) -> date | None:
    if value is None:
        return None
    return timezone.localtime(value).date()


def _bucket_max_positions(rep, weeks) -> dict:
    """Current max ``position`` per (week, day) for *rep* across *weeks*."""
    rows = (
        PlanItem.objects.in_weeks(rep, weeks)
        .values("planned_week", "day_of_week")
        .annotate(max_position=Max("position"))
    )
    return {(row["planned_week"], row["day_of_week"]): row["max_position"] or 0 for row in rows}


def _items_from_buckets(rep, week, buckets, offsets) -> list[PlanItem]:
    items = []
    for day_index, bucket in enumerate(buckets):
        day = day_index + 1
        base = offsets.get((week, day), 0)
        for slot, store in enumerate(bucket, start=1):
            items.append(
                PlanItem(
                    rep=rep,
                    store=store,
                    planned_week=week,
                    day_of_week=day,
                    position=base + slot,
                    status=PlanItemStatus.SUGGESTED,
                )
            )
    return items


def insert_suggested(items: list[PlanItem]) -> int:
    """Insert *items*, ignoring uniqueness conflicts. Returns the number of failed rows."""
    if not items:
        return 0
    try:
        with transaction.atomic():
            PlanItem.objects.bulk_create(items, ignore_conflicts=True)
        return 0
    except DatabaseError:
        logger.warning("Bulk insert of %s plan items failed, retrying row by row", len(items))

    errors = 0
    for item in items:
        try:
            with transaction.atomic():
                PlanItem.objects.bulk_create([item], ignore_conflicts=True)
        except DatabaseError:
            errors += 1
            logger.warning(
                "Plan item insert failed for store=%s week=%s",
                item.store_id,
                item.planned_week,
                exc_info=True,
            )
    return errors


def upsert_completed(items: list[PlanItem]) -> int:
    """Upsert *items* as completed, overriding status, day and position on conflict.

    Returns the number of failed rows.
    """
    if not items:
        return 0
    options = {
        "update_conflicts": True,
        "unique_fields": ["rep", "store", "planned_week"],
        "update_fields": ["status", "day_of_week", "position", "updated_at"],
    }
    try:
        with transaction.atomic():
            PlanItem.objects.bulk_create(items, **options)
        return 0
    except DatabaseError:
        logger.warning("Bulk reconciliation of %s items failed, retrying row by row", len(items))

    errors = 0
    for item in items:
        try:
            with transaction.atomic():
                PlanItem.objects.bulk_create([item], **options)
        except DatabaseError:
            errors += 1
            logger.warning(
                "Reconciliation failed for store=%s week=%s",
                item.store_id,
                item.planned_week,
                exc_info=True,
            )
    return errors


def build_completed_items(rep, visits) -> list[PlanItem]:
    """Completed plan items for *visits* (rows with ``store_id`` and ``visited_at``).

    One item per (store, week); when a store was visited several times in
    the same week the latest visit decides the day. Items already sitting on
    the right day keep their position, others are appended to their day.
    """
    latest = {}
    for visit in visits:
        local_day = _local_date(visit["visited_at"])
        key = (visit["store_id"], iso_monday(local_day))
        if key not in latest or local_day > latest[key]:
            latest[key] = local_day
    if not latest:
        return []

    weeks = {week for _store_id, week in latest}
    existing = {
        (row["store_id"], row["planned_week"]): row
        for row in PlanItem.objects.in_weeks(rep, weeks)
        .filter(store_id__in={store_id for store_id, _week in latest})
        .values("store_id", "planned_week", "day_of_week", "position")
    }
    offsets = _bucket_max_positions(rep, weeks)

    items = []
    for (store_id, week), visit_day in sorted(latest.items(), key=lambda kv: (kv[0][1], kv[1], str(kv[0][0]))):
        day = working_day(visit_day)
        current = existing.get((store_id, week))
        if current and current["day_of_week"] == day:
            position = current["position"]
        else:
            offsets[(week, day)] = offsets.get((week, day), 0) + 1
            position = offsets[(week, day)]
        items.append(
            PlanItem(
                rep=rep,
                store_id=store_id,
                planned_week=week,
                day_of_week=day,
                position=position,
                status=PlanItemStatus.COMPLETED,
            )
        )
    return items


class WeekPlanGenerator:
    """Suggest calls for one rep-week from the currently overdue stores."""

    def __init__(self, rep, *, today: date | None = None) -> None:
        self.rep = rep
        self.today = today or timezone.localdate()

    def overdue_stores(self) -> list:
        """Overdue graded stores, never-visited first then most overdue first."""
        overdue = []
        for store in list_active_graded_stores(self.rep):
            last_visit = _local_date(store.last_visit_at)
            if is_overdue(store.grade, last_visit, self.today):
                store.days_overdue = days_overdue(store.grade, last_visit, self.today)
                overdue.append(store)

        def sort_key(store):
            if store.days_overdue is None:
                return (0, 0, store.pk)
            return (1, -store.days_overdue, store.pk)

        overdue.sort(key=sort_key)
        return overdue

    @transaction.atomic
    def generate(self, week) -> WeekGenerationResult:
        week = iso_monday(week)
        result = WeekGenerationResult(week=week)
        acquire_rep_lock(self.rep.pk)

        overdue = self.overdue_stores()
        result.overdue_total = len(overdue)
        result.removed, _ = PlanItem.objects.for_week(self.rep, week).suggested().delete()

        if not overdue:
            result.message = "Aucun magasin en retard."
            self._log(result)
            return result

        planned = set(PlanItem.objects.for_week(self.rep, week).values_list("store_id", flat=True))
        fresh = [store for store in overdue if store.pk not in planned]
        result.skipped = len(overdue) - len(fresh)
        cap = settings.PLANNER_WEEK_CANDIDATE_CAP
        result.deferred = max(0, len(fresh) - cap)
        fresh = fresh[:cap]

        if not fresh:
            result.message = "Tous les magasins en retard sont deja planifies."
            self._log(result)
            return result

        buckets = cluster_into_days(fresh)
        items = _items_from_buckets(self.rep, week, buckets, _bucket_max_positions(self.rep, [week]))

        before = PlanItem.objects.for_week(self.rep, week).count()
        result.errors = insert_suggested(items)
        result.inserted = PlanItem.objects.for_week(self.rep, week).count() - before
        result.skipped += len(items) - result.inserted - result.errors
        self._log(result)
        return result

    def _log(self, result: WeekGenerationResult) -> None:
        logger.info(
            "Week plan generated rep=%s week=%s overdue=%s inserted=%s skipped=%s deferred=%s errors=%s",
            self.rep.pk,
            result.week,
            result.overdue_total,
            result.inserted,
            result.skipped,
            result.deferred,
            result.errors,
        )


class QuarterPlanGenerator:
    """Reconcile real visits and suggest the remaining due calls for a quarter."""

    def __init__(self, rep) -> None:
        self.rep = rep

    def generate(self, quarter: int, year: int, *, wait: bool = True) -> QuarterGenerationResult | None:
        """Regenerate the rep's quarter plan.

        Returns None when ``wait`` is False and another run already holds the
        rep's lock.
        """
        weeks = quarter_weeks(quarter, year)
        q_start, q_end = quarter_bounds(quarter, year)
        result = QuarterGenerationResult(quarter=quarter, year=year, weeks=weeks)

        with transaction.atomic():
            if not acquire_rep_lock(self.rep.pk, wait=wait):
                return None

            result.removed, _ = PlanItem.objects.in_weeks(self.rep, weeks).suggested().delete()

            stores = list(list_active_graded_stores(self.rep))
            result.stores_total = len(stores)
            if not stores:
                result.message = "Aucun magasin classe."
                self._log(result)
                return result

            store_ids = [store.pk for store in stores]

            completed = build_completed_items(self.rep, visits_in_range(store_ids, q_start, q_end))
            result.errors += upsert_completed(completed)
            result.reconciled = len(completed)

            in_quarter = visits_by_store(store_ids, q_start, q_end)
            previous = last_visit_before(store_ids, q_start)
            committed = set(
                PlanItem.objects.in_weeks(self.rep, weeks)
                .committed()
                .values_list("store_id", "planned_week")
            )

            week_buckets = defaultdict(list)
            for store in stores:
                done = in_quarter.get(store.pk, [])
                if is_covered(store.grade, len(done)):
                    result.covered += 1
                else:
                    result.short += 1
                for week in due_weeks(
                    store.grade,
                    weeks=weeks,
                    quarter_start=q_start,
                    quarter_end=q_end,
                    visits_in_quarter=done,
                    last_visit=previous.get(store.pk),
                ):
                    if (store.pk, week) in committed:
                        continue
                    week_buckets[week].append(store)

            offsets = _bucket_max_positions(self.rep, weeks)
            capacity = day_capacity()
            items = []
            for week in weeks:
                candidates = week_buckets.get(week)
                if not candidates:
                    continue
                if len(candidates) > capacity:
                    candidates = sorted(candidates, key=lambda s: (GRADE_RANK.get(s.grade, 3), s.pk))
                    result.unscheduled += len(candidates) - capacity
                    candidates = candidates[:capacity]
                items.extend(_items_from_buckets(self.rep, week, cluster_into_days(candidates), offsets))
                result.weeks_planned += 1

            before = PlanItem.objects.in_weeks(self.rep, weeks).suggested().count()
            result.errors += insert_suggested(items)
            result.generated = PlanItem.objects.in_weeks(self.rep, weeks).suggested().count() - before

        self._log(result)
        return result

    def _log(self, result: QuarterGenerationResult) -> None:
        logger.info(
            "Quarter plan generated rep=%s quarter=%s-Q%s reconciled=%s generated=%s "
            "weeks=%s covered=%s short=%s unscheduled=%s errors=%s",
            self.rep.pk,
            result.year,
            result.quarter,
            result.reconciled,
            result.generated,
            result.weeks_planned,
            result.covered,
            result.short,
            result.unscheduled,
            result.errors,
        )


def reconcile_visit(visit) -> PlanItem | None:
    """Mark the visit's rep-week item for the store as completed, creating it if needed."""
    if visit.rep_id is None:
        return None
    with transaction.atomic():
        acquire_rep_lock(visit.rep_id)
        rows = [{"store_id": visit.store_id, "visited_at": visit.visited_at}]
        items = build_completed_items(visit.rep, rows)
        if upsert_completed(items):
            return None
    week = iso_monday(_local_date(visit.visited_at))
    logger.info("Visit reconciled rep=%s store=%s week=%s", visit.rep_id, visit.store_id, week)
    return PlanItem.objects.filter(rep_id=visit.rep_id, store_id=visit.store_id, planned_week=week).first()


