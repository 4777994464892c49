"""Models for the store directory (retail accounts visited by field reps)."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Store(TimeStampedModel):
    """A retail account assigned to a rep's territory.

    ``grade`` is maintained by the grading job and drives the revisit
    cadence used by the call planner; ``state`` and ``postcode`` drive the
    geographic day clustering.
    """

    class Grade(models.TextChoices):
        A = "A", "A - toutes les 6 semaines"
        B = "B", "B - toutes les 12 semaines"
        C = "C", "C - toutes les 12 semaines"

    name = models.CharField("nom", max_length=255)
    external_ref = models.CharField(
        "reference externe", max_length=255, blank=True, default="", db_index=True,
    )
    rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="territory_stores",
        verbose_name="representant",
    )
    grade = models.CharField(
        "grade", max_length=1, choices=Grade.choices, null=True, blank=True, db_index=True,
    )
    channel_type = models.CharField("canal", max_length=100, blank=True, default="")
    state = models.CharField("etat", max_length=50, blank=True, default="", db_index=True)
    postcode = models.CharField("code postal", max_length=10, blank=True, default="", db_index=True)
    is_prospect = models.BooleanField("prospect", default=False)
    is_active = models.BooleanField("actif", default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Magasin"
        verbose_name_plural = "Magasins"
        indexes = [
            models.Index(fields=["rep", "is_active", "is_prospect"], name="store_territory_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.grade or '-'})"
