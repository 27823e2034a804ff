from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.core.money import format_amount
from apps.donations.constants import DEFAULT_PAYMENT_GATEWAY, PAYMENT_GATEWAY_MAX_LENGTH
from apps.projects.constants import AMOUNT_DECIMAL_PLACES, AMOUNT_MAX_DIGITS
from apps.projects.models import Project


class Donation(models.Model):
    """One immutable funding event. Rows are appended, never edited."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="donations")
    amount = models.DecimalField(
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    payment_gateway = models.CharField(max_length=PAYMENT_GATEWAY_MAX_LENGTH, default=DEFAULT_PAYMENT_GATEWAY)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="donation_created_idx"),
            models.Index(fields=["project", "-created_at"], name="donation_project_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="donation_amount_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.formatted_amount} to {self.project_id} via {self.payment_gateway}"

    @property
    def formatted_amount(self) -> str:
        return format_amount(Decimal(self.amount))
