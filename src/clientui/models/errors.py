"""
Classified error model.

A failed gateway call is normalized into exactly one `ClassifiedError`. The kind
is a closed enum and the payload that only some kinds carry (field errors,
parse-failure detail) lives on the same frozen value, so callers dispatch on
`error.kind` instead of on exception subclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """The closed set of failure kinds the client knows how to recover from."""

    ENTITY_NOT_FOUND = "entity_not_found"
    DEPENDENT_COLLECTION_EMPTY = "dependent_collection_empty"
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNCLASSIFIED = "unclassified"


# Status a backend is expected to answer with for each kind.
# SERVICE_UNAVAILABLE keeps whatever 5xx was observed, UNCLASSIFIED whatever was supplied.
KIND_TO_STATUS: dict[ErrorKind, int] = {
    ErrorKind.ENTITY_NOT_FOUND: 404,
    ErrorKind.DEPENDENT_COLLECTION_EMPTY: 404,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
}


def http_status_for(kind: ErrorKind, supplied: int | None = None) -> int:
    """
    Return the HTTP status matching `kind`.

    - SERVICE_UNAVAILABLE: the supplied status when it is a 5xx, else 503.
    - UNCLASSIFIED: the supplied status (500 when nothing was supplied).
    - every other kind: its fixed status.
    """
    if kind is ErrorKind.SERVICE_UNAVAILABLE:
        if supplied is not None and supplied >= 500:
            return supplied
        return KIND_TO_STATUS[kind]
    if kind is ErrorKind.UNCLASSIFIED:
        return supplied if supplied is not None else 500
    return KIND_TO_STATUS[kind]


@dataclass(frozen=True)
class FieldError:
    """One `(field, message)` pair reported by a backend validation failure."""

    field: str
    message: str


@dataclass(frozen=True)
class ClassifiedError:
    """
    Normalized, immutable representation of a failed remote call.

    - kind: the ErrorKind
    - http_status: the status observed on the wire
    - message: user-facing message (safe to display)
    - source_operation: the operation key of the call that failed
    - field_errors: VALIDATION_FAILED only; empty for every other kind
    - parse_error: set when the body should have been structured but was not
      (VALIDATION_FAILED, CONFLICT)
    - raw_body: the response body verbatim, None when it could not be read
    """

    kind: ErrorKind
    http_status: int
    message: str
    source_operation: str
    field_errors: tuple[FieldError, ...] = ()
    parse_error: str | None = None
    raw_body: str | None = field(default=None, repr=False)

    @property
    def is_parsed(self) -> bool:
        return self.parse_error is None

    def errors_by_field(self) -> dict[str, str]:
        """Field -> message mapping for templates; a repeated field keeps its last message."""
        return {fe.field: fe.message for fe in self.field_errors}

    def to_payload(self) -> dict[str, Any]:
        """
        JSON-serializable summary for structured logs.

        The raw body is left out on purpose: backend bodies can echo patient data.
        """
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "status": self.http_status,
            "expected_status": http_status_for(self.kind, self.http_status),
            "message": self.message,
            "operation": self.source_operation,
        }
        if self.field_errors:
            payload["fields"] = [fe.field for fe in self.field_errors]
        if self.parse_error:
            payload["parse_error"] = self.parse_error
        return payload


__all__ = [
    "ErrorKind",
    "KIND_TO_STATUS",
    "http_status_for",
    "FieldError",
    "ClassifiedError",
]
