from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ApiErrorPayload:
    code: str
    message: str
    request_id: str
    details: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


class DonationTrackerError(Exception):
    """Base class for failures the API maps onto a client-facing status."""

    status = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.details = tuple(details)


class ValidationError(DonationTrackerError):
    """Malformed input. Raised before anything reaches storage."""

    status = 400
    code = "validation_error"


class NotFoundError(DonationTrackerError):
    status = 404
    code = "not_found"


class PersistenceError(DonationTrackerError):
    """The entity store rejected or failed a read or write."""

    status = 500
    code = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.context = dict(context or {})


class ConsistencyWarning(UserWarning):
    """An aggregate overshot its ceiling and was clamped back to it."""

    def __init__(self, project_id: object, observed: object, ceiling: object) -> None:
        super().__init__(
            f"aggregate_clamped project_id={project_id} observed={observed} ceiling={ceiling}"
        )
        self.project_id = project_id
        self.observed = observed
        self.ceiling = ceiling


def flatten_field_errors(errors: Mapping[str, Any], prefix: str = "") -> tuple[str, ...]:
    """Turn serializer/form error mappings into ``"field: message"`` lines."""
    lines: list[str] = []
    for field, messages in errors.items():
        name = f"{prefix}{field}"
        if isinstance(messages, Mapping):
            lines.extend(flatten_field_errors(messages, prefix=f"{name}."))
            continue
        if isinstance(messages, (str, bytes)):
            messages = [messages]
        for message in messages:
            lines.append(f"{name}: {message}")
    return tuple(lines)
