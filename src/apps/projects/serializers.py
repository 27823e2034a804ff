"""Serializers for projects."""

from decimal import Decimal

from rest_framework import serializers

from apps.projects.constants import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    CURRENT_AMOUNT_MAX_DIGITS,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from apps.projects.models import Project


class ProjectSerializer(serializers.ModelSerializer):
    """Read shape of a project, including its funded total."""

    goalAmount = serializers.DecimalField(
        source="goal_amount",
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        read_only=True,
    )
    currentAmount = serializers.DecimalField(
        source="current_amount",
        max_digits=CURRENT_AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        read_only=True,
    )
    progressPercentage = serializers.IntegerField(source="progress_percentage", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Project
        fields = [
            "id",
            "title",
            "description",
            "goalAmount",
            "currentAmount",
            "progressPercentage",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class ProjectCreateSerializer(serializers.Serializer):
    """Input shape for the administrative create path."""

    title = serializers.CharField(max_length=TITLE_MAX_LENGTH, trim_whitespace=True)
    description = serializers.CharField(max_length=DESCRIPTION_MAX_LENGTH, trim_whitespace=True)
    goalAmount = serializers.DecimalField(
        source="goal_amount",
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        min_value=Decimal("0.01"),
    )
