from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from django.test import Client

from apps.core.contracts.errors import ValidationError
from apps.projects.services import ProjectCatalog

pytestmark = pytest.mark.django_db


def test_list_projects(client: Client, make_project) -> None:
    older = make_project(title="Older")
    newer = make_project(title="Newer", current="10.00")

    response = client.get("/api/v1/projects")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [item["id"] for item in body["items"]] == [str(newer.pk), str(older.pk)]
    first = body["items"][0]
    assert set(first) == {
        "id",
        "title",
        "description",
        "goalAmount",
        "currentAmount",
        "progressPercentage",
        "createdAt",
        "updatedAt",
    }
    assert first["currentAmount"] == "10.00"


def test_project_detail(client: Client, make_project) -> None:
    project = make_project(goal="15000.00", current="5200.00")

    response = client.get(f"/api/v1/projects/{project.pk}")

    assert response.status_code == 200
    assert response.json()["goalAmount"] == "15000.00"
    assert response.json()["progressPercentage"] == 35


@pytest.mark.parametrize("project_id", [str(uuid.uuid4()), "not-a-uuid"])
def test_project_detail_not_found(client: Client, project_id: str) -> None:
    response = client.get(f"/api/v1/projects/{project_id}")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "not_found"
    assert body["message"] == f"Project with ID {project_id} not found"


def test_project_donations(client: Client, store, make_project) -> None:
    project = make_project()
    store.insert_donation(project_id=project.pk, amount=Decimal("12.50"), payment_gateway="Stripe")

    response = client.get(f"/api/v1/projects/{project.pk}/donations")

    assert response.status_code == 200
    body = response.json()
    assert body["projectId"] == str(project.pk)
    assert [item["amount"] for item in body["items"]] == ["12.50"]
    assert client.get(f"/api/v1/projects/{uuid.uuid4()}/donations").status_code == 404


def test_catalog_create_validates_and_trims(store) -> None:
    catalog = ProjectCatalog(store)

    project = catalog.create({"title": "  Trees  ", "description": "Plant trees", "goalAmount": "500"})
    assert project.title == "Trees"
    assert project.current_amount == Decimal("0.00")
    assert catalog.get(project.pk) is not None
    assert [item.pk for item in catalog.all()] == [project.pk]

    with pytest.raises(ValidationError):
        catalog.create({"title": "", "description": "x", "goalAmount": "500"})
    with pytest.raises(ValidationError):
        catalog.create({"title": "x" * 101, "description": "x", "goalAmount": "500"})
    with pytest.raises(ValidationError):
        catalog.create({"title": "Zero goal", "description": "x", "goalAmount": "0"})

    assert catalog.delete(project.pk) is True
    assert catalog.get(project.pk) is None
