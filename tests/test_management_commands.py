from __future__ import annotations

import json
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from apps.donations.models import Donation
from apps.projects.models import Project

pytestmark = pytest.mark.django_db


def _totals() -> dict[str, Decimal]:
    return {project.title: project.current_amount for project in Project.objects.all()}


def test_seed_projects_applies_sample_donations() -> None:
    out = StringIO()
    call_command("seed_projects", stdout=out)

    assert Project.objects.count() == 3
    assert Donation.objects.count() == 5
    assert _totals() == {
        "Clean Water Initiative": Decimal("2500.00"),
        "Education for All": Decimal("8750.00"),
        "Wildlife Conservation": Decimal("5200.00"),
    }
    assert "Seeding complete" in out.getvalue()


def test_seed_projects_is_idempotent_and_clear_resets() -> None:
    call_command("seed_projects", stdout=StringIO())
    call_command("seed_projects", stdout=StringIO())
    assert Project.objects.count() == 3
    assert Donation.objects.count() == 5

    call_command("seed_projects", "--clear", stdout=StringIO())
    assert Project.objects.count() == 3
    assert Donation.objects.count() == 5


def test_reconcile_totals_reports_and_applies(store, make_project) -> None:
    drifted = make_project(title="Drifted", goal="1000.00")
    capped = make_project(title="Capped", goal="50.00")
    store.insert_donation(project_id=drifted.pk, amount=Decimal("120.00"), payment_gateway="Direct")
    store.insert_donation(project_id=capped.pk, amount=Decimal("80.00"), payment_gateway="Direct")
    store.set_project_amount(capped.pk, Decimal("50.00"))

    report = StringIO()
    call_command("reconcile_totals", "--format", "json", stdout=report)
    rows = json.loads(report.getvalue())["drift"]
    assert rows == [
        {
            "projectId": str(drifted.pk),
            "title": "Drifted",
            "stored": "0.00",
            "expected": "120.00",
            "applied": False,
        }
    ]
    assert Project.objects.get(pk=drifted.pk).current_amount == Decimal("0.00")

    applied = StringIO()
    call_command("reconcile_totals", "--apply", stdout=applied)
    assert "Fixed Drifted" in applied.getvalue()
    assert Project.objects.get(pk=drifted.pk).current_amount == Decimal("120.00")

    clean = StringIO()
    call_command("reconcile_totals", stdout=clean)
    assert "All project totals match the ledger." in clean.getvalue()
