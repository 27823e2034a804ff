from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods

from apps.core.contracts.errors import DonationTrackerError, NotFoundError
from apps.core.responses import api_json, error_response
from apps.donations.serializers import DonationSerializer
from apps.donations.services.ledger import DonationLedger
from apps.donations.store import EntityStore
from apps.projects.serializers import ProjectSerializer
from apps.projects.services import ProjectCatalog


@require_http_methods(["GET"])
def project_collection_endpoint(request: HttpRequest) -> JsonResponse:
    catalog = ProjectCatalog(EntityStore())
    try:
        projects = catalog.all()
    except DonationTrackerError as exc:
        return error_response(request, exc)
    items = ProjectSerializer(projects, many=True).data
    return api_json({"items": items, "count": len(items)})


@require_http_methods(["GET"])
def project_detail_endpoint(request: HttpRequest, project_id: str) -> JsonResponse:
    catalog = ProjectCatalog(EntityStore())
    try:
        project = catalog.get(project_id)
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found")
    except DonationTrackerError as exc:
        return error_response(request, exc)
    return api_json(ProjectSerializer(project).data)


@require_http_methods(["GET"])
def project_donations_endpoint(request: HttpRequest, project_id: str) -> JsonResponse:
    store = EntityStore()
    try:
        project = ProjectCatalog(store).get(project_id)
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found")
        donations = DonationLedger(store).list_for_project(project.pk)
    except DonationTrackerError as exc:
        return error_response(request, exc)
    items = DonationSerializer(donations, many=True).data
    return api_json({"projectId": str(project.pk), "items": items, "count": len(items)})
