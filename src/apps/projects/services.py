from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from apps.core.contracts.errors import ValidationError, flatten_field_errors
from apps.donations.store import EntityStore
from apps.projects.models import Project
from apps.projects.serializers import ProjectCreateSerializer

LOGGER = logging.getLogger("donation_tracker")


class ProjectCatalog:
    """Read access to projects plus the administrative create/delete path."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def all(self) -> list[Project]:
        return self._store.list_projects()

    def get(self, project_id: object) -> Project | None:
        return self._store.find_project_by_id(project_id)

    def create(self, payload: Mapping[str, Any]) -> Project:
        serializer = ProjectCreateSerializer(data=dict(payload))
        if not serializer.is_valid():
            raise ValidationError("Invalid project", details=flatten_field_errors(serializer.errors))
        data = serializer.validated_data
        project = self._store.create_project(
            title=data["title"],
            description=data["description"],
            goal_amount=data["goal_amount"],
        )
        LOGGER.info("project_created project_id=%s goal_amount=%s", project.pk, project.goal_amount)
        return project

    def delete(self, project_id: object) -> bool:
        deleted = self._store.delete_project(project_id)
        LOGGER.info("project_delete project_id=%s deleted=%s", project_id, deleted)
        return deleted
