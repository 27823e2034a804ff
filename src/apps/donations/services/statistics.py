from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from apps.donations.store import EntityStore

LOGGER = logging.getLogger("donation_tracker")


@dataclass(frozen=True)
class DonationStats:
    total_donations: int
    total_amount: Decimal
    average_donation: Decimal

    def to_dict(self) -> dict[str, object]:
        return {
            "totalDonations": self.total_donations,
            "totalAmount": f"{self.total_amount:.2f}",
            "averageDonation": f"{self.average_donation:.2f}",
        }


class DonationStatistics:
    """Count, sum and mean of committed donations, computed by the database."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def stats(self, project_id: object | None = None) -> DonationStats:
        aggregate = self._store.aggregate_donations(project_id)
        result = DonationStats(
            total_donations=aggregate.count,
            total_amount=aggregate.sum,
            average_donation=aggregate.avg,
        )
        LOGGER.debug(
            "donation_stats project_id=%s total_donations=%s total_amount=%s average_donation=%s",
            project_id,
            result.total_donations,
            result.total_amount,
            result.average_donation,
        )
        return result
