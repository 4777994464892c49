"""Business logic for the call planner.

All writes for a rep take the rep's advisory lock inside the transaction
and re-check that the acting user owns the rep or holds the manager
capability.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from core.services import create_audit_log
from planner.dates import parse_day, parse_week, quarter_weeks, week_label
from planner.engine import QuarterPlanGenerator, WeekPlanGenerator
from planner.exceptions import (
    IllegalTransition,
    PlanConflict,
    PlanItemNotFound,
    PlanValidationError,
    TerritoryForbidden,
)
from planner.locks import acquire_rep_lock
from planner.models import PlanItem, PlanItemStatus, WeeklySubmission, can_transition
from stores.models import Store
from stores.services import find_stores_by_query

logger = logging.getLogger("callplan")

NEVER_VISITED_DAYS = 365
STATUS_KEYS = [choice.value for choice in PlanItemStatus]


@dataclass
class MoveDayResult:
    moved: int = 0
    skipped: int = 0
    message: str = ""


# ---------------------------------------------------------------------------
# Access helpers
# ---------------------------------------------------------------------------


def is_manager(user) -> bool:
    return bool(getattr(user, "has_manager_capability", False))


def resolve_rep(actor, rep_id=None):
    """Rep targeted by a request: the actor, or another rep for managers only."""
    if rep_id in (None, "") or str(rep_id) == str(actor.pk):
        return actor
    if not is_manager(actor):
        raise TerritoryForbidden("Vous ne pouvez planifier que pour vous-meme.")
    User = get_user_model()
    try:
        return User.objects.get(pk=rep_id, is_active=True)
    except (User.DoesNotExist, ValueError, DjangoValidationError):
        raise PlanValidationError("Representant introuvable.")


def get_item_for_actor(actor, item_id, *, for_update: bool = False) -> PlanItem:
    qs = PlanItem.objects.select_related("store", "rep")
    if for_update:
        qs = qs.select_for_update(of=("self",))
    try:
        item = qs.get(pk=item_id)
    except (PlanItem.DoesNotExist, ValueError, DjangoValidationError):
        raise PlanItemNotFound()
    if not is_manager(actor) and item.rep_id != actor.pk:
        raise TerritoryForbidden()
    return item


def _snapshot(item: PlanItem) -> dict:
    return {
        "store_id": str(item.store_id),
        "planned_week": item.planned_week.isoformat(),
        "day_of_week": item.day_of_week,
        "position": item.position,
        "status": item.status,
        "confirmed_time": item.confirmed_time,
        "notes": item.notes,
    }


def days_since(last_visit_at, now=None) -> int:
    if last_visit_at is None:
        return NEVER_VISITED_DAYS
    now = now or timezone.now()
    return max(0, (now - last_visit_at).days)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def generate_week_plan(actor, rep, week=None):
    week = parse_week(week)
    result = WeekPlanGenerator(rep).generate(week)
    create_audit_log(
        actor=actor,
        rep=rep,
        action="planner.generate.week",
        entity_type="PlanWeek",
        entity_id=week.isoformat(),
        after={"inserted": result.inserted, "skipped": result.skipped, "errors": result.errors},
    )
    return result


def generate_quarter_plan(actor, rep, quarter: int, year: int):
    result = QuarterPlanGenerator(rep).generate(quarter, year)
    create_audit_log(
        actor=actor,
        rep=rep,
        action="planner.generate.quarter",
        entity_type="PlanQuarter",
        entity_id=f"{year}-Q{quarter}",
        after={
            "generated": result.generated,
            "reconciled": result.reconciled,
            "weeks_planned": result.weeks_planned,
            "errors": result.errors,
        },
    )
    return result


# ---------------------------------------------------------------------------
# Item lifecycle
# ---------------------------------------------------------------------------


@transaction.atomic
def add_item(actor, rep, *, store_id, day_of_week, week=None, notes: str = "") -> PlanItem:
    """Add a store to the rep's week, merging into an existing item for that week."""
    if not store_id:
        raise PlanValidationError("store_id est obligatoire.")
    if day_of_week in (None, ""):
        raise PlanValidationError("day_of_week est obligatoire.")
    day = parse_day(day_of_week)
    week = parse_week(week)
    notes = (notes or "").strip()

    try:
        store = Store.objects.get(pk=store_id)
    except (Store.DoesNotExist, ValueError, DjangoValidationError):
        raise PlanValidationError("Magasin introuvable.")
    if not is_manager(actor) and store.rep_id != rep.pk:
        raise TerritoryForbidden("Ce magasin n'appartient pas a votre territoire.")

    acquire_rep_lock(rep.pk)
    existing = (
        PlanItem.objects.select_for_update()
        .filter(rep=rep, store=store, planned_week=week)
        .first()
    )
    if existing is not None:
        before = _snapshot(existing)
        update_fields = ["notes", "updated_at"]
        if not existing.is_completed and existing.day_of_week != day:
            existing.position = PlanItem.objects.next_position(rep, week, day, exclude_pk=existing.pk)
            existing.day_of_week = day
            update_fields += ["day_of_week", "position"]
        existing.notes = notes
        existing.save(update_fields=update_fields)
        item = existing
        create_audit_log(
            actor=actor,
            rep=rep,
            action="planner.item.merge",
            entity_type="PlanItem",
            entity_id=item.pk,
            before=before,
            after=_snapshot(item),
        )
        return item

    PlanItem.objects.bulk_create(
        [
            PlanItem(
                rep=rep,
                store=store,
                planned_week=week,
                day_of_week=day,
                position=PlanItem.objects.next_position(rep, week, day),
                status=PlanItemStatus.SUGGESTED,
                notes=notes,
            )
        ],
        update_conflicts=True,
        unique_fields=["rep", "store", "planned_week"],
        update_fields=["day_of_week", "position", "notes", "updated_at"],
    )
    item = PlanItem.objects.select_related("store").get(rep=rep, store=store, planned_week=week)
    create_audit_log(
        actor=actor,
        rep=rep,
        action="planner.item.add",
        entity_type="PlanItem",
        entity_id=item.pk,
        after=_snapshot(item),
    )
    logger.info("Plan item added rep=%s store=%s week=%s day=%s", rep.pk, store.pk, week, day)
    return item


@transaction.atomic
def update_item(actor, item_id, changes: dict) -> PlanItem:
    """Apply a partial update to a plan item.

    Only keys present in *changes* are touched. Moving to another week
    fails with :class:`PlanConflict` when the store is already planned
    there; moving without an explicit ``position`` appends to the
    destination day.
    """
    item = get_item_for_actor(actor, item_id, for_update=True)
    acquire_rep_lock(item.rep_id)
    before = _snapshot(item)
    update_fields = ["updated_at"]

    if "status" in changes and changes["status"] is not None:
        status = changes["status"]
        if status not in STATUS_KEYS:
            raise PlanValidationError(f"Statut invalide: {status!r}.")
        if not can_transition(item.status, status):
            raise IllegalTransition(
                f"Transition {item.status} -> {status} non autorisee."
            )
        if status != item.status:
            item.status = status
            update_fields.append("status")

    target_week = item.planned_week
    if changes.get("planned_week") not in (None, ""):
        target_week = parse_week(changes["planned_week"], default_current=False)
    target_day = item.day_of_week
    if changes.get("day_of_week") not in (None, ""):
        target_day = parse_day(changes["day_of_week"])

    moving = target_week != item.planned_week or target_day != item.day_of_week
    if moving and item.status == PlanItemStatus.COMPLETED:
        raise PlanValidationError("Une visite realisee ne peut pas etre deplacee.")

    if target_week != item.planned_week:
        conflict = (
            PlanItem.objects.filter(rep_id=item.rep_id, store_id=item.store_id, planned_week=target_week)
            .exclude(pk=item.pk)
            .values_list("pk", flat=True)
            .first()
        )
        if conflict is not None:
            raise PlanConflict(conflicting_item_id=conflict)

    if changes.get("position") not in (None, ""):
        try:
            position = int(changes["position"])
        except (TypeError, ValueError):
            raise PlanValidationError("position doit etre un entier positif.")
        if position < 1:
            raise PlanValidationError("position doit etre un entier positif.")
        item.position = position
        update_fields.append("position")
    elif moving:
        item.position = PlanItem.objects.next_position(
            item.rep_id, target_week, target_day, exclude_pk=item.pk
        )
        update_fields.append("position")

    if moving:
        item.planned_week = target_week
        item.day_of_week = target_day
        update_fields += ["planned_week", "day_of_week"]

    if "confirmed_time" in changes:
        item.confirmed_time = (changes["confirmed_time"] or "").strip()
        update_fields.append("confirmed_time")
    if "notes" in changes:
        item.notes = (changes["notes"] or "").strip()
        update_fields.append("notes")

    try:
        with transaction.atomic():
            item.save(update_fields=update_fields)
    except IntegrityError:
        conflict = (
            PlanItem.objects.filter(rep_id=item.rep_id, store_id=item.store_id, planned_week=item.planned_week)
            .exclude(pk=item.pk)
            .values_list("pk", flat=True)
            .first()
        )
        raise PlanConflict(conflicting_item_id=conflict)

    create_audit_log(
        actor=actor,
        rep=item.rep,
        action="planner.item.update",
        entity_type="PlanItem",
        entity_id=item.pk,
        before=before,
        after=_snapshot(item),
    )
    return item


@transaction.atomic
def delete_item(actor, item_id) -> None:
    item = get_item_for_actor(actor, item_id, for_update=True)
    acquire_rep_lock(item.rep_id)
    before = _snapshot(item)
    rep = item.rep
    pk = item.pk
    item.delete()
    create_audit_log(
        actor=actor,
        rep=rep,
        action="planner.item.delete",
        entity_type="PlanItem",
        entity_id=pk,
        before=before,
    )


@transaction.atomic
def reorder_item(actor, item_id, direction: str) -> PlanItem:
    """Swap the item's position with its neighbour in the same day."""
    if direction not in ("up", "down"):
        raise PlanValidationError("direction doit valoir 'up' ou 'down'.")
    item = get_item_for_actor(actor, item_id)
    acquire_rep_lock(item.rep_id)

    siblings = list(
        PlanItem.objects.select_for_update()
        .for_day(item.rep_id, item.planned_week, item.day_of_week)
        .order_by("position", "created_at", "pk")
    )
    now = timezone.now()
    positions = [sibling.position for sibling in siblings]
    if len(set(positions)) != len(positions):
        # Duplicate positions make a swap ambiguous; renumber the day first.
        for number, sibling in enumerate(siblings, start=1):
            sibling.position = number
            sibling.updated_at = now
        PlanItem.objects.bulk_update(siblings, ["position", "updated_at"])

    index = next(i for i, sibling in enumerate(siblings) if sibling.pk == item.pk)
    neighbour_index = index - 1 if direction == "up" else index + 1
    if neighbour_index < 0 or neighbour_index >= len(siblings):
        return siblings[index]

    current, neighbour = siblings[index], siblings[neighbour_index]
    current.position, neighbour.position = neighbour.position, current.position
    current.updated_at = neighbour.updated_at = now
    PlanItem.objects.bulk_update([current, neighbour], ["position", "updated_at"])

    create_audit_log(
        actor=actor,
        rep=item.rep,
        action="planner.item.reorder",
        entity_type="PlanItem",
        entity_id=item.pk,
        after={"direction": direction, "position": current.position},
    )
    return current


@transaction.atomic
def move_day(actor, rep, *, from_week, from_day, to_week, to_day) -> MoveDayResult:
    """Move every item of one day to another, appending after the destination's items.

    Items whose store is already planned in the destination week, and
    completed items, stay where they are and are counted as skipped.
    """
    if any(value in (None, "") for value in (from_week, from_day, to_week, to_day)):
        raise PlanValidationError("from_week, from_day, to_week et to_day sont obligatoires.")
    from_week = parse_week(from_week, default_current=False)
    to_week = parse_week(to_week, default_current=False)
    from_day = parse_day(from_day, field="from_day")
    to_day = parse_day(to_day, field="to_day")

    result = MoveDayResult()
    if from_week == to_week and from_day == to_day:
        result.message = "Meme jour, rien a deplacer."
        return result

    acquire_rep_lock(rep.pk)
    items = list(
        PlanItem.objects.select_for_update()
        .for_day(rep, from_week, from_day)
        .order_by("position", "created_at", "pk")
    )
    if not items:
        result.message = "Aucune visite dans le jour source."
        return result

    taken = set()
    if to_week != from_week:
        taken = set(PlanItem.objects.for_week(rep, to_week).values_list("store_id", flat=True))

    next_position = PlanItem.objects.next_position(rep, to_week, to_day)
    now = timezone.now()
    to_move = []
    for item in items:
        if item.is_completed or item.store_id in taken:
            result.skipped += 1
            continue
        item.planned_week = to_week
        item.day_of_week = to_day
        item.position = next_position
        item.updated_at = now
        next_position += 1
        to_move.append(item)

    fields = ["planned_week", "day_of_week", "position", "updated_at"]
    try:
        with transaction.atomic():
            PlanItem.objects.bulk_update(to_move, fields)
        result.moved = len(to_move)
    except IntegrityError:
        logger.warning("Bulk day move failed for rep=%s, retrying item by item", rep.pk)
        for item in to_move:
            try:
                with transaction.atomic():
                    item.save(update_fields=fields)
                result.moved += 1
            except IntegrityError:
                result.skipped += 1

    create_audit_log(
        actor=actor,
        rep=rep,
        action="planner.day.move",
        entity_type="PlanDay",
        entity_id=f"{from_week.isoformat()}:{from_day}",
        before={"week": from_week.isoformat(), "day": from_day},
        after={
            "week": to_week.isoformat(),
            "day": to_day,
            "moved": result.moved,
            "skipped": result.skipped,
        },
    )
    logger.info(
        "Day moved rep=%s %s/%s -> %s/%s moved=%s skipped=%s",
        rep.pk, from_week, from_day, to_week, to_day, result.moved, result.skipped,
    )
    return result


def submit_week(actor, rep, week=None) -> tuple[WeeklySubmission, bool]:
    """Flag the rep's week as submitted. Re-submitting keeps the first ``submitted_at``."""
    week = parse_week(week)
    try:
        with transaction.atomic():
            submission, created = WeeklySubmission.objects.get_or_create(
                rep=rep,
                week_start=week,
                defaults={"submitted_at": timezone.now()},
            )
    except IntegrityError:
        submission, created = WeeklySubmission.objects.get(rep=rep, week_start=week), False

    if created:
        create_audit_log(
            actor=actor,
            rep=rep,
            action="planner.week.submit",
            entity_type="WeeklySubmission",
            entity_id=submission.pk,
            after={"week_start": week.isoformat()},
        )
    return submission, created


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


def _status_counts():
    aggregates = {"total": Count("id")}
    for status in STATUS_KEYS:
        aggregates[status] = Count("id", filter=Q(status=status))
    return aggregates


def week_items(rep, week: date):
    return (
        PlanItem.objects.for_week(rep, week)
        .select_related("store")
        .annotate(last_visit_at=Max("store__visits__visited_at"))
        .order_by("day_of_week", "position", "created_at")
    )


def get_week(rep, week=None) -> dict:
    """Rep's plan for one week, grouped by working day."""
    week = parse_week(week)
    now = timezone.now()
    days = {day: [] for day in range(1, 6)}
    for item in week_items(rep, week):
        store = item.store
        days[item.day_of_week].append(
            {
                "id": str(item.pk),
                "store_id": str(store.pk),
                "store_name": store.name,
                "grade": store.grade,
                "is_prospect": store.is_prospect,
                "state": store.state,
                "postcode": store.postcode,
                "channel_type": store.channel_type,
                "day_of_week": item.day_of_week,
                "position": item.position,
                "status": item.status,
                "confirmed_time": item.confirmed_time,
                "notes": item.notes,
                "last_visit": item.last_visit_at.isoformat() if item.last_visit_at else None,
                "days_since_visit": days_since(item.last_visit_at, now),
            }
        )
    return {
        "week": week.isoformat(),
        "label": week_label(week),
        "rep_id": str(rep.pk),
        "submitted": WeeklySubmission.objects.filter(rep=rep, week_start=week).exists(),
        "days": days,
    }


def get_quarter_summary(rep, quarter: int, year: int) -> dict:
    """Per-week status counts for every week of the quarter."""
    weeks = quarter_weeks(quarter, year)
    counts = {
        row["planned_week"]: row
        for row in PlanItem.objects.in_weeks(rep, weeks)
        .values("planned_week")
        .annotate(**_status_counts())
    }
    submitted = set(
        WeeklySubmission.objects.filter(rep=rep, week_start__in=weeks).values_list("week_start", flat=True)
    )
    rows = []
    for week in weeks:
        row = counts.get(week, {})
        entry = {
            "week": week.isoformat(),
            "label": week_label(week),
            "submitted": week in submitted,
            "total": row.get("total", 0),
        }
        for status in STATUS_KEYS:
            entry[status] = row.get(status, 0)
        rows.append(entry)
    return {"quarter": quarter, "year": year, "rep_id": str(rep.pk), "weeks": rows}


def get_team_week(actor, week=None) -> dict:
    """Submission flag and status counts per active rep. Managers only."""
    if not is_manager(actor):
        raise TerritoryForbidden("Reserve aux managers.")
    week = parse_week(week)
    User = get_user_model()
    reps = list(User.objects.active_reps().order_by("last_name", "first_name", "email"))
    counts = {
        row["rep_id"]: row
        for row in PlanItem.objects.filter(planned_week=week, rep__in=reps)
        .values("rep_id")
        .annotate(**_status_counts())
    }
    submitted = set(
        WeeklySubmission.objects.filter(week_start=week, rep__in=reps).values_list("rep_id", flat=True)
    )
    rows = []
    for rep in reps:
        row = counts.get(rep.pk, {})
        entry = {
            "rep_id": str(rep.pk),
            "rep_name": rep.get_full_name() or rep.email,
            "submitted": rep.pk in submitted,
            "total": row.get("total", 0),
        }
        for status in STATUS_KEYS:
            entry[status] = row.get(status, 0)
        rows.append(entry)
    return {"week": week.isoformat(), "label": week_label(week), "reps": rows}


def search_stores(rep, query: str = "") -> list[dict]:
    now = timezone.now()
    return [
        {
            "id": str(store.pk),
            "name": store.name,
            "grade": store.grade,
            "state": store.state,
            "postcode": store.postcode,
            "channel_type": store.channel_type,
            "last_visit": store.last_visit_at.isoformat() if store.last_visit_at else None,
            "days_since_visit": days_since(store.last_visit_at, now),
        }
        for store in find_stores_by_query(rep, query)
    ]


EXPORT_COLUMNS = [
    ("day_of_week", "Jour"),
    ("position", "Ordre"),
    ("store_name", "Magasin"),
    ("grade", "Grade"),
    ("postcode", "Code postal"),
    ("status", "Statut"),
    ("confirmed_time", "Heure"),
    ("notes", "Notes"),
]


def week_export_rows(rep, week=None) -> list[dict]:
    week = parse_week(week)
    return [
        {
            "day_of_week": item.day_of_week,
            "position": item.position,
            "store_name": item.store.name,
            "grade": item.store.grade or "",
            "postcode": item.store.postcode,
            "status": item.get_status_display(),
            "confirmed_time": item.confirmed_time,
            "notes": item.notes,
        }
        for item in week_items(rep, week)
    ]
