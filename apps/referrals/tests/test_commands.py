from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError


@pytest.mark.django_db
class TestProcessReferralPayoutsCommand:

    def test_nothing_due(self, settings):
        settings.ASAAS_API_KEY = 'key'
        out = StringIO()

        call_command('process_referral_payouts', stdout=out)

        assert 'No payouts due.' in out.getvalue()

    def test_dry_run(self, settings, make_payout):
        settings.ASAAS_API_KEY = 'key'
        make_payout(6000)
        out = StringIO()

        call_command('process_referral_payouts', '--dry-run', stdout=out)

        output = out.getvalue()
        assert 'partner@example.com: would_pay R$ 60.00' in output
        assert '--dry-run mode' in output

    def test_missing_api_key(self, settings):
        settings.ASAAS_API_KEY = ''

        with pytest.raises(CommandError):
            call_command('process_referral_payouts')
