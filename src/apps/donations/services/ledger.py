from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from apps.core.contracts.errors import PersistenceError, ValidationError
from apps.core.money import ZERO, to_amount
from apps.donations.constants import (
    DEFAULT_PAGE_LIMIT,
    DEFAULT_PAYMENT_GATEWAY,
    MAX_PAGE_LIMIT,
    PAYMENT_GATEWAY_MAX_LENGTH,
)
from apps.donations.models import Donation
from apps.donations.store import EntityStore

LOGGER = logging.getLogger("donation_tracker")


def normalize_payment_gateway(value: object) -> str:
    if value is None:
        return DEFAULT_PAYMENT_GATEWAY
    if not isinstance(value, str):
        raise ValidationError("Invalid payment gateway", details=("paymentGateway: must be a string",))
    gateway = value.strip()
    if not gateway:
        return DEFAULT_PAYMENT_GATEWAY
    if len(gateway) > PAYMENT_GATEWAY_MAX_LENGTH:
        raise ValidationError(
            "Invalid payment gateway",
            details=(f"paymentGateway: must be at most {PAYMENT_GATEWAY_MAX_LENGTH} characters",),
        )
    return gateway


def normalize_amount(value: object) -> Decimal:
    try:
        amount = to_amount(value)
    except ValueError as exc:
        raise ValidationError("Invalid amount", details=(f"amount: {exc}",)) from exc
    if amount <= ZERO:
        raise ValidationError("Invalid amount", details=("amount: must be greater than 0",))
    return amount


def normalize_page(limit: object = None, offset: object = None) -> tuple[int, int]:
    try:
        page_limit = int(str(limit).strip()) if limit not in (None, "") else DEFAULT_PAGE_LIMIT
    except ValueError:
        page_limit = DEFAULT_PAGE_LIMIT
    try:
        page_offset = int(str(offset).strip()) if offset not in (None, "") else 0
    except ValueError:
        page_offset = 0
    return max(1, min(page_limit, MAX_PAGE_LIMIT)), max(0, page_offset)


class DonationLedger:
    """Append-only record of donations.

    The ledger records funding events and nothing else; project totals are the
    aggregate updater's business.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def append(self, project_id: object, amount: object, payment_gateway: object = None) -> Donation:
        value = normalize_amount(amount)
        gateway = normalize_payment_gateway(payment_gateway)
        LOGGER.info("donation_append project_id=%s amount=%s payment_gateway=%s", project_id, value, gateway)
        try:
            donation = self._store.insert_donation(project_id=project_id, amount=value, payment_gateway=gateway)
        except PersistenceError:
            LOGGER.error("donation_append_failed project_id=%s amount=%s", project_id, value)
            raise
        LOGGER.info("donation_created donation_id=%s project_id=%s", donation.pk, project_id)
        return donation

    def get(self, donation_id: object) -> Donation | None:
        return self._store.find_donation_by_id(donation_id)

    def list_for_project(self, project_id: object) -> list[Donation]:
        donations = self._store.query_donations(project_id=project_id)
        LOGGER.debug("donations_for_project project_id=%s count=%s", project_id, len(donations))
        return donations

    def list_all(
        self,
        limit: object = None,
        offset: object = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Donation]:
        page_limit, page_offset = normalize_page(limit, offset)
        return self._store.query_donations(filters=filters, limit=page_limit, offset=page_offset)

    def delete(self, donation_id: object) -> bool:
        LOGGER.info("donation_delete donation_id=%s", donation_id)
        deleted = self._store.delete_donation(donation_id)
        if not deleted:
            LOGGER.warning("donation_delete_missing donation_id=%s", donation_id)
        return deleted
