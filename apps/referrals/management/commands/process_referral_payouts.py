"""
Management command to run the monthly referral payout batch.

Sends one Asaas transfer (PIX or TED) per eligible referrer for all
commissions past their approval deadline.

Usage:
    python manage.py process_referral_payouts
    python manage.py process_referral_payouts --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from apps.referrals.services import ReferralsServiceError, process_payouts


class Command(BaseCommand):
    help = 'Pay referral commissions whose approval period has ended'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be paid without changing or transferring anything',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        try:
            summary = process_payouts(dry_run=dry_run)
        except ReferralsServiceError as e:
            raise CommandError(str(e))

        if summary['processed'] == 0:
            self.stdout.write(self.style.SUCCESS('No payouts due.'))
            return

        for result in summary['results']:
            line = f"  - {result['referrer_email']}: {result['status']}"
            if result.get('reason'):
                line += f" ({result['reason']})"
            if result.get('amount') is not None:
                line += f" R$ {result['amount'] / 100:.2f}"
            self.stdout.write(line)

        if dry_run:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        self.stdout.write(self.style.SUCCESS(
            f"\n{summary['paid']} paid, {summary['failed']} failed, "
            f"{summary['skipped']} skipped, {summary['cancelled']} payout(s) cancelled."
        ))
