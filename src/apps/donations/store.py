"""Entity store: every read and write of projects and donations goes through here.

The store is bound to one database alias and handed to each service
explicitly. Storage failures surface as ``PersistenceError`` after being
logged with the operation name and identifiers involved.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction
from django.db.models import Avg, Count, F, Sum
from django.utils import timezone

from apps.core.contracts.errors import PersistenceError, ValidationError, flatten_field_errors
from apps.core.money import ZERO, to_amount
from apps.core.observability import METRICS
from apps.donations.filters import DonationFilter
from apps.donations.models import Donation
from apps.projects.models import Project

LOGGER = logging.getLogger("donation_tracker")


def coerce_uuid(value: object) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None


def _format_context(context: Mapping[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in context.items())


@dataclass(frozen=True)
class DonationAggregate:
    count: int
    sum: Decimal
    avg: Decimal


class EntityStore:
    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self._using = using

    @property
    def using(self) -> str:
        return self._using

    @contextmanager
    def _operation(self, operation: str, message: str, **context: Any) -> Iterator[None]:
        start = time.perf_counter()
        failed = False
        try:
            yield
        # sqlite reports a value that does not fit its column as InvalidOperation.
        except (DatabaseError, InvalidOperation) as exc:
            failed = True
            LOGGER.error(
                "store_operation_failed operation=%s %s error=%s",
                operation,
                _format_context(context),
                exc,
            )
            raise PersistenceError(message, operation=operation, context=context) from exc
        finally:
            METRICS.observe_db(operation, (time.perf_counter() - start) * 1000, failed=failed)

    def _projects(self):
        return Project.objects.using(self._using)

    def _donations(self):
        return Donation.objects.using(self._using)

    def ping(self) -> bool:
        start = time.perf_counter()
        try:
            with connections[self._using].cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError:
            METRICS.observe_db("ping", (time.perf_counter() - start) * 1000, failed=True)
            return False
        METRICS.observe_db("ping", (time.perf_counter() - start) * 1000)
        return True

    # Projects

    def list_projects(self) -> list[Project]:
        with self._operation("list_projects", "Failed to retrieve projects"):
            return list(self._projects().order_by("-created_at"))

    def find_project_by_id(self, project_id: object) -> Project | None:
        key = coerce_uuid(project_id)
        if key is None:
            return None
        with self._operation("find_project", "Failed to retrieve project", project_id=key):
            return self._projects().filter(pk=key).first()

    def create_project(self, *, title: str, description: str, goal_amount: Decimal) -> Project:
        with self._operation("create_project", "Failed to create project", title=title):
            with transaction.atomic(using=self._using):
                return self._projects().create(
                    title=title,
                    description=description,
                    goal_amount=goal_amount,
                    current_amount=ZERO,
                )

    def delete_project(self, project_id: object) -> bool:
        key = coerce_uuid(project_id)
        if key is None:
            return False
        with self._operation("delete_project", "Failed to delete project", project_id=key):
            _, deleted = self._projects().filter(pk=key).delete()
        return deleted.get(Project._meta.label, 0) > 0

    def atomic_increment_project_amount(self, project_id: object, delta: Decimal) -> Project | None:
        """Add ``delta`` to the stored total in one UPDATE statement.

        The addition happens inside the database (``current_amount + delta``),
        so concurrent increments to the same row serialize on the row lock and
        none of them is lost. Returns the refreshed row, or None when the
        project does not exist.
        """
        key = coerce_uuid(project_id)
        if key is None:
            return None
        with self._operation(
            "increment_project_amount",
            "Failed to update project amount",
            project_id=key,
            delta=delta,
        ):
            with transaction.atomic(using=self._using):
                updated = self._projects().filter(pk=key).update(
                    current_amount=F("current_amount") + delta,
                    updated_at=timezone.now(),
                )
                if not updated:
                    return None
                return self._projects().get(pk=key)

    def set_project_amount(self, project_id: object, value: Decimal) -> Project | None:
        key = coerce_uuid(project_id)
        if key is None:
            return None
        with self._operation("set_project_amount", "Failed to update project amount", project_id=key, value=value):
            with transaction.atomic(using=self._using):
                updated = self._projects().filter(pk=key).update(current_amount=value, updated_at=timezone.now())
                if not updated:
                    return None
                return self._projects().get(pk=key)

    # Donations

    def insert_donation(self, *, project_id: object, amount: Decimal, payment_gateway: str) -> Donation:
        key = coerce_uuid(project_id)
        if key is None:
            raise PersistenceError(
                "Failed to create donation",
                operation="insert_donation",
                context={"project_id": project_id},
            )
        with self._operation("insert_donation", "Failed to create donation", project_id=key, amount=amount):
            with transaction.atomic(using=self._using):
                return self._donations().create(project_id=key, amount=amount, payment_gateway=payment_gateway)

    def find_donation_by_id(self, donation_id: object) -> Donation | None:
        key = coerce_uuid(donation_id)
        if key is None:
            return None
        with self._operation("find_donation", "Failed to retrieve donation", donation_id=key):
            return self._donations().filter(pk=key).first()

    def delete_donation(self, donation_id: object) -> bool:
        key = coerce_uuid(donation_id)
        if key is None:
            return False
        with self._operation("delete_donation", "Failed to delete donation", donation_id=key):
            deleted, _ = self._donations().filter(pk=key).delete()
        return deleted > 0

    def query_donations(
        self,
        *,
        project_id: object | None = None,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Donation]:
        queryset = self._donations()
        if project_id is not None:
            key = coerce_uuid(project_id)
            if key is None:
                return []
            queryset = queryset.filter(project_id=key)
        if filters:
            filterset = DonationFilter(filters, queryset=queryset)
            if not filterset.is_valid():
                raise ValidationError("Invalid donation filters", details=flatten_field_errors(filterset.errors))
            queryset = filterset.qs
        queryset = queryset.order_by("-created_at")
        if limit is not None:
            queryset = queryset[offset : offset + limit]
        elif offset:
            queryset = queryset[offset:]
        with self._operation("query_donations", "Failed to retrieve donations", project_id=project_id):
            return list(queryset)

    def aggregate_donations(self, project_id: object | None = None) -> DonationAggregate:
        queryset = self._donations()
        if project_id is not None:
            key = coerce_uuid(project_id)
            if key is None:
                return DonationAggregate(0, ZERO, ZERO)
            queryset = queryset.filter(project_id=key)
        with self._operation("aggregate_donations", "Failed to calculate donation statistics", project_id=project_id):
            row = queryset.aggregate(count=Count("id"), total=Sum("amount"), average=Avg("amount"))
        count = int(row["count"] or 0)
        if not count:
            return DonationAggregate(0, ZERO, ZERO)
        return DonationAggregate(count, to_amount(row["total"]), to_amount(row["average"]))
