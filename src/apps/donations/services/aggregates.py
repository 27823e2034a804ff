"""Keeps ``Project.current_amount`` in step with the ledger.

``apply_donation`` is two writes. The first is the atomic increment, performed
by the database so that concurrent donations to one project never overwrite
each other. The second, only when the increment overshot ``goal_amount``, sets
the total back to exactly the goal. Because every increment is positive, any
observed total above the goal means the true total is above it too, so writing
the goal back can never discard another donation's contribution. The clamp is
not atomic with the increment, and it is idempotent.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from apps.core.contracts.errors import ConsistencyWarning
from apps.core.observability import METRICS
from apps.donations.services.ledger import normalize_amount
from apps.donations.store import EntityStore
from apps.projects.models import Project

LOGGER = logging.getLogger("donation_tracker")


class AggregateUpdater:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def apply_donation(self, project_id: object, amount: object) -> Project | None:
        """Add ``amount`` to the project's total, capped at its goal.

        Returns the post-update project, or None if the project no longer
        exists. Storage failures propagate as ``PersistenceError``.
        """
        delta = normalize_amount(amount)
        LOGGER.debug("aggregate_increment project_id=%s delta=%s", project_id, delta)
        project = self._store.atomic_increment_project_amount(project_id, delta)
        if project is None:
            LOGGER.warning("aggregate_project_missing project_id=%s delta=%s", project_id, delta)
            return None

        project = self._enforce_ceiling(project)
        if project is None:
            return None

        LOGGER.info(
            "aggregate_updated project_id=%s current_amount=%s goal_amount=%s",
            project.pk,
            project.current_amount,
            project.goal_amount,
        )
        return project

    def clamp(self, project_id: object) -> Project | None:
        project = self._store.find_project_by_id(project_id)
        if project is None:
            return None
        return self._enforce_ceiling(project)

    def _enforce_ceiling(self, project: Project) -> Project | None:
        current = Decimal(project.current_amount)
        ceiling = Decimal(project.goal_amount)
        if current <= ceiling:
            return project

        warning = ConsistencyWarning(project.pk, current, ceiling)
        LOGGER.warning("%s", warning)
        METRICS.observe_clamp()
        return self._store.set_project_amount(project.pk, ceiling)
