from decimal import Decimal
from rest_framework import serializers
from core.validation import (
    Variant, UpdateRequiresFieldsMixin, VariantErrorsMixin, VariantPayloadMixin, validate_variant
)
from .models import Donation, Expense, FinanceReport

DONATION_VARIANTS = {
    Donation.CASH: Variant(
        required=('cash_details',),
        forbidden=('in_kind_details',),
        messages={
            ('cash_details', 'required'): "cash_details is required for Cash donations",
            ('in_kind_details', 'forbidden'): "in_kind_details should not be provided for Cash donations",
        },
    ),
    Donation.IN_KIND: Variant(
        required=('in_kind_details',),
        forbidden=('cash_details',),
        messages={
            ('in_kind_details', 'required'): "in_kind_details is required for InKind donations",
            ('cash_details', 'forbidden'): "cash_details should not be provided for InKind donations",
        },
    ),
}


class CashDetailsSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))


class InKindDetailsSerializer(serializers.Serializer):
    estimated_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(min_length=3, max_length=500)
    category = serializers.CharField(max_length=100)


class DonationSerializer(VariantErrorsMixin, VariantPayloadMixin, UpdateRequiresFieldsMixin,
                         serializers.ModelSerializer):
    variant_fields = ('cash_details', 'in_kind_details')

    cash_details = CashDetailsSerializer(required=False, allow_null=True)
    in_kind_details = InKindDetailsSerializer(required=False, allow_null=True)

    class Meta:
        model = Donation
        fields = [
            'id', 'donation_type', 'source', 'program', 'date',
            'cash_details', 'in_kind_details', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'source': {'min_length': 2},
            'program': {'min_length': 2},
        }

    def check_variant(self, data):
        if self.instance is not None and 'donation_type' not in data:
            # Type unchanged: only guard against the payload of the other type
            validate_variant(data, 'donation_type', DONATION_VARIANTS,
                             tag=self.instance.donation_type, check_required=False)
        else:
            validate_variant(data, 'donation_type', DONATION_VARIANTS)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        self.check_variant(attrs)
        return attrs

    def _apply_type(self, instance):
        instance.clear_other_payload()
        instance.save()
        return instance

    def create(self, validated_data):
        return self._apply_type(super().create(validated_data))

    def update(self, instance, validated_data):
        return self._apply_type(super().update(instance, validated_data))


class ExpenseSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))

    class Meta:
        model = Expense
        fields = ['id', 'category', 'amount', 'description', 'date', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'category': {'min_length': 2},
        }


class FinanceReportSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    income = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.00'), required=False)
    expenses = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.00'), required=False)
    project_title = serializers.CharField(source='project.title', read_only=True)

    class Meta:
        model = FinanceReport
        fields = [
            'id', 'project', 'project_title', 'income', 'expenses', 'balance',
            'description', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'balance', 'created_at', 'updated_at']


class FinanceSummarySerializer(serializers.Serializer):
    cash_total = serializers.DecimalField(max_digits=16, decimal_places=2)
    in_kind_total = serializers.DecimalField(max_digits=16, decimal_places=2)
    donations_total = serializers.DecimalField(max_digits=16, decimal_places=2)
    expenses_total = serializers.DecimalField(max_digits=16, decimal_places=2)
    net = serializers.DecimalField(max_digits=16, decimal_places=2)
    donation_count = serializers.IntegerField()
    expense_count = serializers.IntegerField()
