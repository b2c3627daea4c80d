"""
Management command to flag pending payments past their due date.

Usage:
    python manage.py mark_overdue_payments
"""

from django.core.management.base import BaseCommand

from apps.payments.services import mark_overdue_payments


class Command(BaseCommand):
    help = 'Mark pending payments whose due date has passed as overdue'

    def handle(self, *args, **options):
        updated = mark_overdue_payments()

        if updated == 0:
            self.stdout.write(self.style.SUCCESS('No payments became overdue.'))
            return

        self.stdout.write(self.style.SUCCESS(f'{updated} payment(s) marked overdue.'))
