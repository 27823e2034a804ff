from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.contracts.errors import DonationTrackerError, NotFoundError, ValidationError
from apps.core.responses import api_error, api_json, error_response, parse_json_body
from apps.core.security.rate_limit import rate_limited
from apps.donations.constants import RATE_LIMIT_MESSAGE
from apps.donations.serializers import DonationSerializer
from apps.donations.services.ledger import DonationLedger, normalize_page
from apps.donations.services.statistics import DonationStatistics
from apps.donations.services.workflow import DonationWorkflow
from apps.donations.store import EntityStore, coerce_uuid
from apps.projects.serializers import ProjectSerializer

LOGGER = logging.getLogger("donation_tracker")

FILTER_PARAMS = ("projectId", "paymentGateway", "minAmount", "maxAmount")


@csrf_exempt
@require_http_methods(["POST"])
@rate_limited("donate", message=RATE_LIMIT_MESSAGE)
def donate_endpoint(request: HttpRequest) -> JsonResponse:
    try:
        body = parse_json_body(request)
    except (ValueError, UnicodeDecodeError) as exc:
        LOGGER.info("donation_rejected reason=invalid_body error=%s", exc)
        return api_error(
            request,
            code="validation_error",
            message="Request body must be a JSON object",
            status=400,
            details=(f"body: {exc}",),
        )

    workflow = DonationWorkflow(EntityStore(), atomic_writes=settings.ATOMIC_DONATION_WRITES)
    try:
        receipt = workflow.submit(body)
    except DonationTrackerError as exc:
        return error_response(request, exc)

    return api_json(
        {
            "donation": DonationSerializer(receipt.donation).data,
            "project": ProjectSerializer(receipt.project).data,
        },
        status=201,
    )


@require_http_methods(["GET"])
def donation_collection_endpoint(request: HttpRequest) -> JsonResponse:
    limit, offset = normalize_page(request.GET.get("limit"), request.GET.get("offset"))
    filters = {key: request.GET[key] for key in FILTER_PARAMS if request.GET.get(key, "").strip()}
    try:
        donations = DonationLedger(EntityStore()).list_all(limit, offset, filters)
    except DonationTrackerError as exc:
        return error_response(request, exc)
    items = DonationSerializer(donations, many=True).data
    return api_json({"items": items, "count": len(items), "limit": limit, "offset": offset})


@require_http_methods(["GET"])
def donation_stats_endpoint(request: HttpRequest) -> JsonResponse:
    raw_project_id = request.GET.get("projectId", "").strip()
    project_id = None
    try:
        if raw_project_id:
            project_id = coerce_uuid(raw_project_id)
            if project_id is None:
                raise ValidationError("Invalid projectId", details=("projectId: must be a valid UUID",))
        stats = DonationStatistics(EntityStore()).stats(project_id)
    except DonationTrackerError as exc:
        return error_response(request, exc)
    payload = stats.to_dict()
    if project_id is not None:
        payload["projectId"] = str(project_id)
    return api_json(payload)


@csrf_exempt
@require_http_methods(["DELETE"])
def donation_delete_endpoint(request: HttpRequest, donation_id: str) -> HttpResponse:
    try:
        if not DonationLedger(EntityStore()).delete(donation_id):
            raise NotFoundError(f"Donation with ID {donation_id} not found")
    except DonationTrackerError as exc:
        return error_response(request, exc)
    return HttpResponse(status=204)
