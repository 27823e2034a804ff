"""Donation submission: validate, resolve the project, record, then aggregate.

A run walks ``RECEIVED -> VALIDATED -> PROJECT_RESOLVED -> DONATION_PERSISTED
-> AGGREGATE_UPDATED -> COMPLETED`` and may be ``ABORTED`` from any state that
is not terminal. Nothing is written before ``PROJECT_RESOLVED``.

By default the ledger write and the aggregate write are separate. If the
aggregate write fails the donation stays on the ledger and the caller gets a
``PersistenceError``; ``reconcile_totals`` repairs the drift. With
``atomic_writes`` both writes share one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from django.db import transaction

from apps.core.contracts.errors import NotFoundError, PersistenceError, ValidationError, flatten_field_errors
from apps.donations.models import Donation
from apps.donations.serializers import DonationCreateSerializer
from apps.donations.services.aggregates import AggregateUpdater
from apps.donations.services.ledger import DonationLedger
from apps.donations.store import EntityStore
from apps.projects.models import Project

LOGGER = logging.getLogger("donation_tracker")


class WorkflowState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    PROJECT_RESOLVED = "project_resolved"
    DONATION_PERSISTED = "donation_persisted"
    AGGREGATE_UPDATED = "aggregate_updated"
    COMPLETED = "completed"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({WorkflowState.COMPLETED, WorkflowState.ABORTED})

_NEXT_STATE = {
    WorkflowState.RECEIVED: WorkflowState.VALIDATED,
    WorkflowState.VALIDATED: WorkflowState.PROJECT_RESOLVED,
    WorkflowState.PROJECT_RESOLVED: WorkflowState.DONATION_PERSISTED,
    WorkflowState.DONATION_PERSISTED: WorkflowState.AGGREGATE_UPDATED,
    WorkflowState.AGGREGATE_UPDATED: WorkflowState.COMPLETED,
}


class InvalidTransition(RuntimeError):
    pass


@dataclass
class DonationRun:
    """State history of one submission."""

    state: WorkflowState = WorkflowState.RECEIVED
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.RECEIVED])
    abort_reason: str = ""
    project_id: Any = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: WorkflowState) -> None:
        if _NEXT_STATE.get(self.state) != target:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self._move(target)

    def abort(self, reason: str) -> None:
        if self.finished:
            raise InvalidTransition(f"{self.state.value} -> {WorkflowState.ABORTED.value}")
        self.abort_reason = reason
        self._move(WorkflowState.ABORTED)

    def _move(self, target: WorkflowState) -> None:
        LOGGER.debug(
            "donation_workflow_transition project_id=%s from=%s to=%s",
            self.project_id,
            self.state.value,
            target.value,
        )
        self.state = target
        self.history.append(target)


@dataclass(frozen=True)
class DonationReceipt:
    donation: Donation
    project: Project
    run: DonationRun


class DonationWorkflow:
    def __init__(
        self,
        store: EntityStore,
        *,
        ledger: DonationLedger | None = None,
        aggregates: AggregateUpdater | None = None,
        atomic_writes: bool = False,
    ) -> None:
        self._store = store
        self._ledger = ledger or DonationLedger(store)
        self._aggregates = aggregates or AggregateUpdater(store)
        self._atomic_writes = atomic_writes

    def submit(self, payload: Mapping[str, Any]) -> DonationReceipt:
        run = DonationRun()

        serializer = DonationCreateSerializer(data=dict(payload or {}))
        if not serializer.is_valid():
            details = flatten_field_errors(serializer.errors)
            run.abort("validation_failed")
            LOGGER.info("donation_rejected reason=validation details=%s", "; ".join(details))
            raise ValidationError("Invalid donation request", details=details)
        data = serializer.validated_data
        project_id = data["project_id"]
        run.project_id = project_id
        run.advance(WorkflowState.VALIDATED)

        project = self._store.find_project_by_id(project_id)
        if project is None:
            run.abort("project_not_found")
            LOGGER.info("donation_rejected reason=project_not_found project_id=%s", project_id)
            raise NotFoundError(f"Project with ID {project_id} not found")
        run.advance(WorkflowState.PROJECT_RESOLVED)

        if self._atomic_writes:
            with transaction.atomic(using=self._store.using):
                donation, updated = self._write(run, data)
        else:
            donation, updated = self._write(run, data)

        run.advance(WorkflowState.COMPLETED)
        LOGGER.info(
            "donation_completed donation_id=%s project_id=%s amount=%s current_amount=%s",
            donation.pk,
            project_id,
            donation.amount,
            updated.current_amount,
        )
        return DonationReceipt(donation=donation, project=updated, run=run)

    def _write(self, run: DonationRun, data: Mapping[str, Any]) -> tuple[Donation, Project]:
        try:
            donation = self._ledger.append(data["project_id"], data["amount"], data.get("payment_gateway"))
        except PersistenceError:
            run.abort("donation_write_failed")
            raise
        run.advance(WorkflowState.DONATION_PERSISTED)

        try:
            updated = self._aggregates.apply_donation(data["project_id"], donation.amount)
        except PersistenceError as exc:
            run.abort("aggregate_write_failed")
            self._log_partial(donation, exc)
            raise PersistenceError(
                "Failed to update project amount",
                operation="apply_donation",
                context={"donation_id": donation.pk, "project_id": data["project_id"]},
            ) from exc
        if updated is None:
            run.abort("project_vanished")
            self._log_partial(donation, None)
            raise PersistenceError(
                "Failed to update project amount",
                operation="apply_donation",
                context={"donation_id": donation.pk, "project_id": data["project_id"]},
            )
        run.advance(WorkflowState.AGGREGATE_UPDATED)
        return donation, updated

    def _log_partial(self, donation: Donation, exc: Exception | None) -> None:
        LOGGER.error(
            "donation_aggregate_failed donation_id=%s project_id=%s amount=%s rolled_back=%s error=%s",
            donation.pk,
            donation.project_id,
            donation.amount,
            self._atomic_writes,
            exc or "project_not_found",
        )
