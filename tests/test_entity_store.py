from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from unittest import mock

import pytest
from django.db import DatabaseError

from apps.core.contracts.errors import PersistenceError, ValidationError
from apps.donations.models import Donation
from apps.projects.models import Project

pytestmark = pytest.mark.django_db


def test_create_and_find_project(store, make_project) -> None:
    project = make_project(goal="5000.00")

    found = store.find_project_by_id(project.pk)
    assert found is not None
    assert found.goal_amount == Decimal("5000.00")
    assert found.current_amount == Decimal("0.00")

    assert store.find_project_by_id(str(project.pk)) is not None
    assert store.find_project_by_id(uuid.uuid4()) is None
    assert store.find_project_by_id("not-a-uuid") is None


def test_list_projects_newest_first(store, make_project) -> None:
    first = make_project(title="First")
    second = make_project(title="Second")

    ids = [project.pk for project in store.list_projects()]
    assert ids.index(second.pk) < ids.index(first.pk)


def test_atomic_increment_adds_in_database(store, make_project) -> None:
    project = make_project(current="2500.00")

    updated = store.atomic_increment_project_amount(project.pk, Decimal("100.00"))

    assert updated is not None
    assert updated.current_amount == Decimal("2600.00")
    assert Project.objects.get(pk=project.pk).current_amount == Decimal("2600.00")
    assert updated.updated_at >= project.updated_at


def test_atomic_increment_missing_project_returns_none(store) -> None:
    assert store.atomic_increment_project_amount(uuid.uuid4(), Decimal("1.00")) is None
    assert store.atomic_increment_project_amount("garbage", Decimal("1.00")) is None


def test_set_project_amount(store, make_project) -> None:
    project = make_project(goal="100.00", current="40.00")

    updated = store.set_project_amount(project.pk, Decimal("100.00"))
    assert updated.current_amount == Decimal("100.00")
    assert store.set_project_amount(uuid.uuid4(), Decimal("1.00")) is None


def test_insert_and_delete_donation(store, make_project) -> None:
    project = make_project()

    donation = store.insert_donation(project_id=project.pk, amount=Decimal("25.00"), payment_gateway="PayPal")
    assert store.find_donation_by_id(donation.pk).payment_gateway == "PayPal"

    assert store.delete_donation(donation.pk) is True
    assert store.delete_donation(donation.pk) is False
    assert store.delete_donation("nope") is False


# Foreign keys are checked at commit, so this needs real commits.
@pytest.mark.django_db(transaction=True)
def test_insert_donation_for_missing_project_raises_persistence_error(store) -> None:
    with pytest.raises(PersistenceError) as excinfo:
        store.insert_donation(project_id=uuid.uuid4(), amount=Decimal("5.00"), payment_gateway="Direct")
    assert excinfo.value.operation == "insert_donation"
    assert Donation.objects.count() == 0


def test_insert_donation_rejects_malformed_project_id(store) -> None:
    with pytest.raises(PersistenceError):
        store.insert_donation(project_id="bad", amount=Decimal("5.00"), payment_gateway="Direct")


def test_database_errors_become_persistence_errors(store, make_project) -> None:
    project = make_project()
    with mock.patch.object(Project.objects, "using", side_effect=DatabaseError("disk I/O error")):
        with pytest.raises(PersistenceError) as excinfo:
            store.find_project_by_id(project.pk)
    assert excinfo.value.message == "Failed to retrieve project"
    assert excinfo.value.context["project_id"] == project.pk


def test_out_of_range_decimal_becomes_persistence_error(store, make_project) -> None:
    project = make_project()
    with mock.patch.object(Project.objects, "using", side_effect=InvalidOperation()):
        with pytest.raises(PersistenceError) as excinfo:
            store.atomic_increment_project_amount(project.pk, Decimal("1.00"))
    assert excinfo.value.operation == "increment_project_amount"
    assert isinstance(excinfo.value.__cause__, InvalidOperation)


def test_query_donations_ordering_and_paging(store, make_project) -> None:
    project = make_project()
    other = make_project(title="Other")
    for amount in ("1.00", "2.00", "3.00"):
        store.insert_donation(project_id=project.pk, amount=Decimal(amount), payment_gateway="Direct")
    store.insert_donation(project_id=other.pk, amount=Decimal("9.00"), payment_gateway="Stripe")

    mine = store.query_donations(project_id=project.pk)
    assert [donation.amount for donation in mine] == [Decimal("3.00"), Decimal("2.00"), Decimal("1.00")]

    page = store.query_donations(limit=2, offset=1)
    assert len(page) == 2

    assert store.query_donations(project_id="bad") == []


def test_query_donations_filters(store, make_project) -> None:
    project = make_project()
    store.insert_donation(project_id=project.pk, amount=Decimal("10.00"), payment_gateway="PayPal")
    store.insert_donation(project_id=project.pk, amount=Decimal("500.00"), payment_gateway="Stripe")

    paypal = store.query_donations(filters={"paymentGateway": "paypal"})
    assert [donation.amount for donation in paypal] == [Decimal("10.00")]

    large = store.query_donations(filters={"minAmount": "100"})
    assert [donation.payment_gateway for donation in large] == ["Stripe"]

    with pytest.raises(ValidationError):
        store.query_donations(filters={"minAmount": "lots"})


def test_aggregate_donations(store, make_project) -> None:
    project = make_project(goal="100000.00")
    assert store.aggregate_donations() == store.aggregate_donations(project.pk)
    empty = store.aggregate_donations(project.pk)
    assert (empty.count, empty.sum, empty.avg) == (0, Decimal("0.00"), Decimal("0.00"))

    for amount in ("10.00", "20.00", "20.00"):
        store.insert_donation(project_id=project.pk, amount=Decimal(amount), payment_gateway="Direct")

    aggregate = store.aggregate_donations(project.pk)
    assert aggregate.count == 3
    assert aggregate.sum == Decimal("50.00")
    assert aggregate.avg == Decimal("16.67")


def test_delete_project_cascades_to_donations(store, make_project) -> None:
    project = make_project()
    store.insert_donation(project_id=project.pk, amount=Decimal("5.00"), payment_gateway="Direct")

    assert store.delete_project(project.pk) is True
    assert Donation.objects.count() == 0
    assert store.delete_project(project.pk) is False


def test_ping(store) -> None:
    assert store.ping() is True
