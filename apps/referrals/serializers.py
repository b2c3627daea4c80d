from rest_framework import serializers

from .models import Referral, ReferralPayout, PayoutStatus


class PayoutFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PayoutStatus.choices, required=False)


class ProcessPayoutsSerializer(serializers.Serializer):
    dry_run = serializers.BooleanField(default=False)


class ReferralSerializer(serializers.ModelSerializer):
    referred_name = serializers.CharField(source='referred.get_display_name', read_only=True)

    class Meta:
        model = Referral
        fields = [
            'id',
            'referred_name',
            'status',
            'subscription_plan',
            'commission_rate',
            'commission_amount_cents',
            'first_payment_at',
            'created_at',
        ]
        read_only_fields = fields


class ReferralPayoutSerializer(serializers.ModelSerializer):
    amount = serializers.SerializerMethodField()

    class Meta:
        model = ReferralPayout
        fields = [
            'id',
            'amount_cents',
            'amount',
            'currency',
            'status',
            'period_start',
            'period_end',
            'approval_deadline',
            'referred_user_name',
            'referred_plan',
            'installment',
            'installment_number',
            'paid_at',
            'payment_method',
            'failure_reason',
            'created_at',
        ]
        read_only_fields = fields

    def get_amount(self, obj):
        return f"{obj.amount_cents / 100:.2f}"


class MonthlyHistorySerializer(serializers.Serializer):
    month = serializers.CharField()
    paid_cents = serializers.IntegerField()


class ReferralStatsSerializer(serializers.Serializer):
    referral_code = serializers.CharField()
    is_partner = serializers.BooleanField()
    referrals = serializers.DictField(child=serializers.IntegerField())
    balances = serializers.DictField(child=serializers.IntegerField())
    monthly_history = MonthlyHistorySerializer(many=True)
    recent_payouts = ReferralPayoutSerializer(many=True)
