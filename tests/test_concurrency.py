from __future__ import annotations

import threading
from decimal import Decimal

import pytest
from django.db import connections

from apps.donations.models import Donation
from apps.donations.services.workflow import DonationWorkflow
from apps.donations.store import EntityStore
from apps.projects.models import Project

pytestmark = pytest.mark.django_db(transaction=True)

WORKERS = 8
DONATIONS_PER_WORKER = 5


def _run_concurrently(target, count: int) -> list[Exception]:
    errors: list[Exception] = []
    barrier = threading.Barrier(count)

    def worker(index: int) -> None:
        try:
            barrier.wait()
            target(index)
        except Exception as exc:
            errors.append(exc)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=120)
    return errors


def test_concurrent_donations_sum_exactly(make_project) -> None:
    project = make_project(goal="1000000.00")

    def donate(index: int) -> None:
        workflow = DonationWorkflow(EntityStore())
        for _ in range(DONATIONS_PER_WORKER):
            workflow.submit({"projectId": str(project.pk), "amount": "10.00"})

    errors = _run_concurrently(donate, WORKERS)

    assert errors == []
    total = Decimal("10.00") * WORKERS * DONATIONS_PER_WORKER
    assert Donation.objects.filter(project_id=project.pk).count() == WORKERS * DONATIONS_PER_WORKER
    assert Project.objects.get(pk=project.pk).current_amount == total


def test_concurrent_overshoot_is_clamped_to_goal(make_project) -> None:
    project = make_project(goal="100.00", current="90.00")

    def donate(index: int) -> None:
        DonationWorkflow(EntityStore()).submit({"projectId": str(project.pk), "amount": "5.00"})

    errors = _run_concurrently(donate, WORKERS)

    assert errors == []
    assert Donation.objects.filter(project_id=project.pk).count() == WORKERS
    assert Project.objects.get(pk=project.pk).current_amount == Decimal("100.00")
