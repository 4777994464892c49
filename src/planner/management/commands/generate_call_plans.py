"""Regenerate quarter call plans for one rep or every active rep."""
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from accounts.models import User
from planner.dates import current_quarter, quarter_bounds
from planner.engine import QuarterPlanGenerator
from planner.exceptions import PlanValidationError


class Command(BaseCommand):
    help = "Regenere les plans de visites trimestriels (tous les representants actifs par defaut)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--rep",
            dest="rep_email",
            default="",
            help="Adresse e-mail d'un representant (defaut: tous les representants actifs).",
        )
        parser.add_argument("--quarter", type=int, default=None, help="Trimestre 1-4.")
        parser.add_argument("--year", type=int, default=None, help="Annee du trimestre.")

    def handle(self, *args, **options):
        quarter, year = options["quarter"], options["year"]
        if (quarter is None) != (year is None):
            raise CommandError("--quarter et --year doivent etre fournis ensemble.")
        if quarter is None:
            quarter, year = current_quarter()
        try:
            quarter_bounds(quarter, year)
        except PlanValidationError as exc:
            raise CommandError(exc.message)

        if options["rep_email"]:
            reps = list(User.objects.filter(email__iexact=options["rep_email"]))
            if not reps:
                raise CommandError(f"Representant introuvable: {options['rep_email']}")
        else:
            reps = list(User.objects.active_reps().order_by("email"))

        total = 0
        for rep in reps:
            result = QuarterPlanGenerator(rep).generate(quarter, year)
            total += result.generated
            self.stdout.write(
                f"{rep.email}: {result.generated} suggestions, {result.reconciled} visites "
                f"rapprochees, {result.covered} couverts, {result.short} a completer"
            )

        self.stdout.write(
            self.style.SUCCESS(f"{year}-Q{quarter}: {total} suggestions pour {len(reps)} representant(s).")
        )
