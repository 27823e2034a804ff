from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from apps.donations.store import EntityStore

LOGGER = logging.getLogger("donation_tracker")


@dataclass(frozen=True)
class TotalDrift:
    project_id: object
    title: str
    stored: Decimal
    expected: Decimal
    applied: bool = False

    @property
    def delta(self) -> Decimal:
        return self.expected - self.stored


def reconcile_project_totals(store: EntityStore, *, apply: bool = False) -> list[TotalDrift]:
    """Compare each project's stored total with ``min(goal, ledger sum)``.

    Returns one record per project whose total drifted. With ``apply`` the
    expected value is written back.
    """
    drifts: list[TotalDrift] = []
    for project in store.list_projects():
        ledger_sum = store.aggregate_donations(project.pk).sum
        expected = min(Decimal(project.goal_amount), ledger_sum)
        stored = Decimal(project.current_amount)
        if stored == expected:
            continue

        applied = False
        if apply:
            applied = store.set_project_amount(project.pk, expected) is not None
        LOGGER.warning(
            "aggregate_drift project_id=%s stored=%s expected=%s applied=%s",
            project.pk,
            stored,
            expected,
            applied,
        )
        drifts.append(
            TotalDrift(project_id=project.pk, title=project.title, stored=stored, expected=expected, applied=applied)
        )
    return drifts
