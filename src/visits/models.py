"""Append-only log of real store visits."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Visit(TimeStampedModel):
    """A visit (or phone call) actually performed by a rep at a store."""

    class VisitType(models.TextChoices):
        VISIT = "VISIT", "Visite"
        PHONE = "PHONE", "Appel"

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="visits",
        verbose_name="magasin",
    )
    rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="visits",
        verbose_name="representant",
    )
    visited_at = models.DateTimeField("date de visite", db_index=True)
    visit_type = models.CharField(
        "type", max_length=20, choices=VisitType.choices, default=VisitType.VISIT,
    )
    note = models.TextField("note", blank=True, default="")

    class Meta:
        ordering = ["-visited_at"]
        verbose_name = "Visite"
        verbose_name_plural = "Visites"
        constraints = [
            models.UniqueConstraint(
                fields=["store", "rep", "visited_at"],
                name="uniq_visit_store_rep_instant",
            ),
        ]
        indexes = [
            models.Index(fields=["store", "visited_at"], name="visit_store_date_idx"),
        ]

    def __str__(self):
        return f"{self.store} @ {self.visited_at:%Y-%m-%d}"
