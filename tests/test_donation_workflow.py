from __future__ import annotations

import uuid
from decimal import Decimal
from unittest import mock

import pytest

from apps.core.contracts.errors import NotFoundError, PersistenceError, ValidationError
from apps.donations.models import Donation
from apps.donations.services.workflow import DonationRun, DonationWorkflow, InvalidTransition, WorkflowState
from apps.projects.models import Project

pytestmark = pytest.mark.django_db

MISSING = object()


def test_run_walks_states_in_order() -> None:
    run = DonationRun()
    run.advance(WorkflowState.VALIDATED)

    with pytest.raises(InvalidTransition):
        run.advance(WorkflowState.DONATION_PERSISTED)

    run.abort("test")
    assert run.finished
    assert run.history == [WorkflowState.RECEIVED, WorkflowState.VALIDATED, WorkflowState.ABORTED]
    with pytest.raises(InvalidTransition):
        run.abort("again")


def test_submit_end_to_end(store, make_project) -> None:
    project = make_project(goal="10000.00", current="2500.00")
    workflow = DonationWorkflow(store)

    receipt = workflow.submit({"projectId": str(project.pk), "amount": 100, "paymentGateway": "PayPal"})

    assert receipt.donation.amount == Decimal("100.00")
    assert receipt.donation.payment_gateway == "PayPal"
    assert receipt.project.current_amount == Decimal("2600.00")
    assert receipt.run.state is WorkflowState.COMPLETED
    assert receipt.run.history == [
        WorkflowState.RECEIVED,
        WorkflowState.VALIDATED,
        WorkflowState.PROJECT_RESOLVED,
        WorkflowState.DONATION_PERSISTED,
        WorkflowState.AGGREGATE_UPDATED,
        WorkflowState.COMPLETED,
    ]

    second = workflow.submit({"projectId": str(project.pk), "amount": "8000"})
    assert second.project.current_amount == Decimal("10000.00")
    assert second.donation.payment_gateway == "Direct"


@pytest.mark.parametrize(
    "payload",
    [
        {"projectId": MISSING, "amount": 10},
        {"projectId": None, "amount": 10},
        {"projectId": "not-a-uuid", "amount": 10},
        {"amount": 0},
        {"amount": -5},
        {"amount": "abc"},
        {"amount": "10.001"},
        {"paymentGateway": "x" * 51, "amount": 10},
    ],
)
def test_invalid_payloads_write_nothing(store, make_project, payload) -> None:
    project = make_project(current="100.00")
    payload = {"projectId": str(project.pk), **payload}
    payload = {key: value for key, value in payload.items() if value is not MISSING}

    with pytest.raises(ValidationError) as excinfo:
        DonationWorkflow(store).submit(payload)

    assert excinfo.value.details
    assert Donation.objects.count() == 0
    assert Project.objects.get(pk=project.pk).current_amount == Decimal("100.00")


def test_missing_amount_reports_field(store, make_project) -> None:
    project = make_project()
    with pytest.raises(ValidationError) as excinfo:
        DonationWorkflow(store).submit({"projectId": str(project.pk)})
    assert "amount: amount is required" in excinfo.value.details


def test_unknown_project_is_not_found(store) -> None:
    missing = uuid.uuid4()

    with pytest.raises(NotFoundError) as excinfo:
        DonationWorkflow(store).submit({"projectId": str(missing), "amount": 10})

    assert str(missing) in excinfo.value.message
    assert Donation.objects.count() == 0


def test_aggregate_failure_keeps_donation_by_default(store, make_project) -> None:
    project = make_project()
    failure = PersistenceError("Failed to update project amount", operation="increment_project_amount")

    with mock.patch.object(store, "atomic_increment_project_amount", side_effect=failure):
        with pytest.raises(PersistenceError) as excinfo:
            DonationWorkflow(store).submit({"projectId": str(project.pk), "amount": 10})

    assert excinfo.value.message == "Failed to update project amount"
    assert excinfo.value.__cause__ is failure
    assert Donation.objects.filter(project_id=project.pk).count() == 1
    assert Project.objects.get(pk=project.pk).current_amount == Decimal("0.00")


def test_vanished_project_is_a_persistence_error(store, make_project) -> None:
    project = make_project()

    with mock.patch.object(store, "atomic_increment_project_amount", return_value=None):
        with pytest.raises(PersistenceError):
            DonationWorkflow(store).submit({"projectId": str(project.pk), "amount": 10})

    assert Donation.objects.count() == 1


def test_atomic_writes_roll_back_donation(store, make_project) -> None:
    project = make_project()
    failure = PersistenceError("Failed to update project amount", operation="increment_project_amount")

    with mock.patch.object(store, "atomic_increment_project_amount", side_effect=failure):
        with pytest.raises(PersistenceError):
            DonationWorkflow(store, atomic_writes=True).submit({"projectId": str(project.pk), "amount": 10})

    assert Donation.objects.count() == 0
