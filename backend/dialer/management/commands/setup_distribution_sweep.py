"""
Management command to register the periodic lead distribution sweep with django-q.

Usage:
    python manage.py setup_distribution_sweep

This creates (or updates) a Schedule entry that runs run_distribution_sweep()
every DISTRIBUTION_SWEEP_MINUTES. Safe to run multiple times — it uses update_or_create.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule


class Command(BaseCommand):
    help = "Register the periodic lead distribution sweep task with django-q"

    def handle(self, *args, **options):
        minutes = settings.DISTRIBUTION_SWEEP_MINUTES
        schedule, created = Schedule.objects.update_or_create(
            name="lead_distribution_sweep",
            defaults={
                "func": "dialer.services.distribution.run_distribution_sweep",
                "schedule_type": Schedule.MINUTES,
                "minutes": minutes,
                "repeats": -1,  # run forever
            },
        )
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(
            f"{verb} periodic task: {schedule.name} (every {minutes} minute(s))"
        ))
