"""Serializers for donations."""

from decimal import Decimal

from rest_framework import serializers

from apps.donations.constants import DEFAULT_PAYMENT_GATEWAY, PAYMENT_GATEWAY_MAX_LENGTH
from apps.donations.models import Donation
from apps.projects.constants import AMOUNT_DECIMAL_PLACES, AMOUNT_MAX_DIGITS


class DonationSerializer(serializers.ModelSerializer):
    """Read shape of a ledger entry."""

    projectId = serializers.UUIDField(source="project_id", read_only=True)
    amount = serializers.DecimalField(
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        read_only=True,
    )
    formattedAmount = serializers.CharField(source="formatted_amount", read_only=True)
    paymentGateway = serializers.CharField(source="payment_gateway", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Donation
        fields = [
            "id",
            "projectId",
            "amount",
            "formattedAmount",
            "paymentGateway",
            "createdAt",
        ]
        read_only_fields = fields


class DonationCreateSerializer(serializers.Serializer):
    """Validates a donation submission before anything touches storage."""

    projectId = serializers.UUIDField(
        source="project_id",
        error_messages={
            "required": "projectId is required",
            "null": "projectId is required",
            "invalid": "projectId must be a valid UUID",
        },
    )
    amount = serializers.DecimalField(
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        min_value=Decimal("0.01"),
        error_messages={
            "required": "amount is required",
            "null": "amount is required",
            "min_value": "amount must be a positive number greater than 0",
        },
    )
    paymentGateway = serializers.CharField(
        source="payment_gateway",
        max_length=PAYMENT_GATEWAY_MAX_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
        default=DEFAULT_PAYMENT_GATEWAY,
        error_messages={
            "max_length": f"paymentGateway must be less than {PAYMENT_GATEWAY_MAX_LENGTH} characters",
        },
    )

    def validate_paymentGateway(self, value):
        """Blank or missing gateways fall back to the default label."""
        if value is None or not str(value).strip():
            return DEFAULT_PAYMENT_GATEWAY
        return value
