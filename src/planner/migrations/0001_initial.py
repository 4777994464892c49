import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("stores", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PlanItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("planned_week", models.DateField(verbose_name="semaine (lundi)")),
                ("day_of_week", models.PositiveSmallIntegerField(verbose_name="jour (1=lundi)")),
                ("position", models.PositiveIntegerField(default=1, verbose_name="position")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("suggested", "Suggere"),
                            ("confirmed", "Confirme"),
                            ("completed", "Realise"),
                            ("skipped", "Saute"),
                        ],
                        db_index=True,
                        default="suggested",
                        max_length=20,
                        verbose_name="statut",
                    ),
                ),
                (
                    "confirmed_time",
                    models.CharField(blank=True, default="", max_length=20, verbose_name="heure confirmee"),
                ),
                ("notes", models.TextField(blank=True, default="", verbose_name="notes")),
                (
                    "rep",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="plan_items",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="representant",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="plan_items",
                        to="stores.store",
                        verbose_name="magasin",
                    ),
                ),
            ],
            options={
                "verbose_name": "Visite planifiee",
                "verbose_name_plural": "Visites planifiees",
                "ordering": ["planned_week", "day_of_week", "position"],
                "indexes": [
                    models.Index(fields=["rep", "planned_week", "day_of_week"], name="plan_item_bucket_idx"),
                    models.Index(fields=["rep", "planned_week", "status"], name="plan_item_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("rep", "store", "planned_week"),
                        name="uniq_plan_item_rep_store_week",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("day_of_week__gte", 1), ("day_of_week__lte", 5)),
                        name="plan_item_day_of_week_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WeeklySubmission",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("week_start", models.DateField(verbose_name="semaine (lundi)")),
                ("submitted_at", models.DateTimeField(verbose_name="soumis le")),
                (
                    "rep",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="weekly_submissions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="representant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Soumission hebdomadaire",
                "verbose_name_plural": "Soumissions hebdomadaires",
                "ordering": ["-week_start"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("rep", "week_start"),
                        name="uniq_weekly_submission_rep_week",
                    ),
                ],
            },
        ),
    ]
