"""
Run one lead distribution batch from the shell.

Usage:
    python manage.py distribute_leads
    python manage.py distribute_leads --verbose-results  # one line per lead
"""
from django.core.management.base import BaseCommand

from dialer.services.distribution import distribute_leads


class Command(BaseCommand):
    help = "Assign every eligible lead to an idle agent, oldest lead first"

    def add_arguments(self, parser):
        parser.add_argument(
            "--verbose-results", action="store_true",
            help="Print the outcome for every lead in the batch",
        )

    def handle(self, *args, **options):
        results = distribute_leads()

        if options["verbose_results"]:
            for r in results:
                if r.success:
                    self.stdout.write(f"  {r.lead_id} -> {r.agent_id}")
                else:
                    self.stdout.write(f"  {r.lead_id} unassigned ({r.reason})")

        assigned = sum(1 for r in results if r.success)
        if not results:
            self.stdout.write("No eligible leads in the queue.")
            return

        self.stdout.write(self.style.SUCCESS(
            f"Distribution complete: {assigned} assigned, {len(results) - assigned} unassigned "
            f"of {len(results)} eligible."
        ))
