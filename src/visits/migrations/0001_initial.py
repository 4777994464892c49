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
            name="Visit",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("visited_at", models.DateTimeField(db_index=True, verbose_name="date de visite")),
                (
                    "visit_type",
                    models.CharField(
                        choices=[("VISIT", "Visite"), ("PHONE", "Appel")],
                        default="VISIT",
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                ("note", models.TextField(blank=True, default="", verbose_name="note")),
                (
                    "rep",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visits",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="representant",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visits",
                        to="stores.store",
                        verbose_name="magasin",
                    ),
                ),
            ],
            options={
                "verbose_name": "Visite",
                "verbose_name_plural": "Visites",
                "ordering": ["-visited_at"],
                "indexes": [
                    models.Index(fields=["store", "visited_at"], name="visit_store_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("store", "rep", "visited_at"),
                        name="uniq_visit_store_rep_instant",
                    ),
                ],
            },
        ),
    ]
