"""Models for the call planner: plan items and weekly submissions."""
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Max

from core.models import TimeStampedModel


class PlanItemStatus(models.TextChoices):
    SUGGESTED = "suggested", "Suggere"
    CONFIRMED = "confirmed", "Confirme"
    COMPLETED = "completed", "Realise"
    SKIPPED = "skipped", "Saute"


# Manual status changes allowed from each state. Same-status updates are no-ops.
ALLOWED_TRANSITIONS = {
    PlanItemStatus.SUGGESTED: {
        PlanItemStatus.CONFIRMED, PlanItemStatus.COMPLETED, PlanItemStatus.SKIPPED,
    },
    PlanItemStatus.CONFIRMED: {
        PlanItemStatus.SUGGESTED, PlanItemStatus.COMPLETED, PlanItemStatus.SKIPPED,
    },
    PlanItemStatus.COMPLETED: {
        PlanItemStatus.CONFIRMED, PlanItemStatus.SKIPPED,
    },
    PlanItemStatus.SKIPPED: {
        PlanItemStatus.SUGGESTED, PlanItemStatus.CONFIRMED, PlanItemStatus.COMPLETED,
    },
}


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


class PlanItemQuerySet(models.QuerySet):
    def for_week(self, rep, week):
        return self.filter(rep=rep, planned_week=week)

    def for_day(self, rep, week, day):
        return self.filter(rep=rep, planned_week=week, day_of_week=day)

    def in_weeks(self, rep, weeks):
        return self.filter(rep=rep, planned_week__in=list(weeks))

    def suggested(self):
        return self.filter(status=PlanItemStatus.SUGGESTED)

    def committed(self):
        return self.exclude(status=PlanItemStatus.SUGGESTED)

    def next_position(self, rep, week, day, exclude_pk=None) -> int:
        qs = self.for_day(rep, week, day)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        return (qs.aggregate(m=Max("position"))["m"] or 0) + 1


class PlanItem(TimeStampedModel):
    """One scheduled, completed or skipped call on a store for a rep-week."""

    rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="plan_items",
        verbose_name="representant",
    )
    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="plan_items",
        verbose_name="magasin",
    )
    planned_week = models.DateField("semaine (lundi)")
    day_of_week = models.PositiveSmallIntegerField("jour (1=lundi)")
    position = models.PositiveIntegerField("position", default=1)
    status = models.CharField(
        "statut",
        max_length=20,
        choices=PlanItemStatus.choices,
        default=PlanItemStatus.SUGGESTED,
        db_index=True,
    )
    confirmed_time = models.CharField("heure confirmee", max_length=20, blank=True, default="")
    notes = models.TextField("notes", blank=True, default="")

    objects = PlanItemQuerySet.as_manager()

    class Meta:
        ordering = ["planned_week", "day_of_week", "position"]
        verbose_name = "Visite planifiee"
        verbose_name_plural = "Visites planifiees"
        constraints = [
            models.UniqueConstraint(
                fields=["rep", "store", "planned_week"],
                name="uniq_plan_item_rep_store_week",
            ),
            models.CheckConstraint(
                condition=models.Q(day_of_week__gte=1, day_of_week__lte=5),
                name="plan_item_day_of_week_range",
            ),
        ]
        indexes = [
            models.Index(fields=["rep", "planned_week", "day_of_week"], name="plan_item_bucket_idx"),
            models.Index(fields=["rep", "planned_week", "status"], name="plan_item_status_idx"),
        ]

    def __str__(self):
        return f"{self.store} - {self.planned_week} J{self.day_of_week} #{self.position}"

    @property
    def is_completed(self) -> bool:
        return self.status == PlanItemStatus.COMPLETED


class WeeklySubmission(TimeStampedModel):
    """Marks a rep's week plan as submitted. Advisory: items stay editable."""

    rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="weekly_submissions",
        verbose_name="representant",
    )
    week_start = models.DateField("semaine (lundi)")
    submitted_at = models.DateTimeField("soumis le")

    class Meta:
        ordering = ["-week_start"]
        verbose_name = "Soumission hebdomadaire"
        verbose_name_plural = "Soumissions hebdomadaires"
        constraints = [
            models.UniqueConstraint(
                fields=["rep", "week_start"],
                name="uniq_weekly_submission_rep_week",
            ),
        ]

    def __str__(self):
        return f"{self.rep} - {self.week_start}"
