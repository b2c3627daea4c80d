"""
Management command to roll the generation window of recurring series.

Run daily (cron / Render job) so every active series always has its
sessions materialized for the next RECURRENCE_HORIZON_DAYS days.

Usage:
    python manage.py extend_recurring_sessions
    python manage.py extend_recurring_sessions --date 2025-01-31
"""

from datetime import date

from django.core.management.base import BaseCommand

from apps.scheduling.services import extend_all_series


class Command(BaseCommand):
    help = 'Generate missing sessions for every active recurring series'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=date.fromisoformat,
            help='Reference date (YYYY-MM-DD) instead of today',
        )

    def handle(self, *args, **options):
        result = extend_all_series(today=options['date'])

        self.stdout.write(self.style.SUCCESS(
            f"Extended {result['series']} series, {result['sessions_created']} session(s) created."
        ))
