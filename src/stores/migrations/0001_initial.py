import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Store",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, verbose_name="nom")),
                (
                    "external_ref",
                    models.CharField(blank=True, db_index=True, default="", max_length=255, verbose_name="reference externe"),
                ),
                (
                    "grade",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("A", "A - toutes les 6 semaines"),
                            ("B", "B - toutes les 12 semaines"),
                            ("C", "C - toutes les 12 semaines"),
                        ],
                        db_index=True,
                        max_length=1,
                        null=True,
                        verbose_name="grade",
                    ),
                ),
                ("channel_type", models.CharField(blank=True, default="", max_length=100, verbose_name="canal")),
                ("state", models.CharField(blank=True, db_index=True, default="", max_length=50, verbose_name="etat")),
                (
                    "postcode",
                    models.CharField(blank=True, db_index=True, default="", max_length=10, verbose_name="code postal"),
                ),
                ("is_prospect", models.BooleanField(default=False, verbose_name="prospect")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="actif")),
                (
                    "rep",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="territory_stores",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="representant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Magasin",
                "verbose_name_plural": "Magasins",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["rep", "is_active", "is_prospect"], name="store_territory_idx"),
                ],
            },
        ),
    ]
