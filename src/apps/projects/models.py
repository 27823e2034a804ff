from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.projects.constants import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    CURRENT_AMOUNT_MAX_DIGITS,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)


class Project(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    description = models.CharField(max_length=DESCRIPTION_MAX_LENGTH)
    goal_amount = models.DecimalField(
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    # Materialized running sum of donations; only the aggregate updater writes it.
    current_amount = models.DecimalField(
        max_digits=CURRENT_AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["title"], name="project_title_idx"),
            models.Index(fields=["-created_at"], name="project_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(goal_amount__gt=0), name="project_goal_amount_positive"),
            models.CheckConstraint(
                condition=models.Q(current_amount__gte=0),
                name="project_current_amount_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.current_amount}/{self.goal_amount})"

    @property
    def progress_percentage(self) -> int:
        if not self.goal_amount:
            return 0
        ratio = Decimal(self.current_amount) / Decimal(self.goal_amount) * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def is_fully_funded(self) -> bool:
        return Decimal(self.current_amount) >= Decimal(self.goal_amount)
