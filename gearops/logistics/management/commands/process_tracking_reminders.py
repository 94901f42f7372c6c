"""
Django management command for the daily courier tracking follow-up.
Run it from cron, e.g. `python manage.py process_tracking_reminders`.
"""
from django.core.management.base import BaseCommand
from gearops.logistics.services import process_tracking_reminders


class Command(BaseCommand):
    help = 'Remind clients who chose courier delivery to add a tracking number'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would happen without updating bookings',
        )

    def handle(self, *args, **options):
        dry_run = options.get('dry_run', False)
        if dry_run:
            self.stdout.write(self.style.WARNING("Dry run: no bookings will be updated"))

        result = process_tracking_reminders(dry_run=dry_run)

        self.stdout.write(self.style.SUCCESS(f"Reminders: {result['reminded']}"))
        self.stdout.write(f"Flagged for follow-up: {result['flagged']}")
        self.stdout.write(f"Skipped (no client email): {result['skipped']}")
