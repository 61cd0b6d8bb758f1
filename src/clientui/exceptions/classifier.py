"""
Failure classifier: (status code, raw body, operation key) -> ClassifiedError.

Status first, body second. Transport severity (5xx) always wins regardless of the
body, so a misleading body can never turn an infrastructure failure into something
the orchestrator would try to repair. Body inspection is only used:

  - 404: to tell "patient does not exist" from "patient has no notes". A structured
    `{"code": ...}` body is preferred; otherwise the body text is sniffed.
  - 400: to extract `[{"field": ..., "defaultMessage": ...}]` validation pairs.
  - 409: to extract the `{"error": ...}` message.

`classify()` never raises. It holds no state, so it is safe to call from any thread
and equal inputs always produce equal values.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from clientui.models.beans import ValidationErrorDetail
from clientui.models.errors import ClassifiedError, ErrorKind, FieldError

from .base import ClassifiableFailure

logger = logging.getLogger(__name__)

# =================================================================================================================
# User-facing messages
# =================================================================================================================

NOTES_EMPTY_MESSAGE = "The patient's notes are empty."
PATIENT_NOT_FOUND_MESSAGE = "The requested patient does not exist."
RESOURCE_NOT_FOUND_PREFIX = "Resource not found: "
CONFLICT_DEFAULT_MESSAGE = "Conflict detected."
SERVICE_UNAVAILABLE_MESSAGE = "A required service is currently unavailable. Please try again later."
INTERNAL_ERROR_TEMPLATE = "A service encountered an internal error (status {status}). Please try again later."
INCORRECT_REQUEST_PREFIX = "Incorrect request: "

# Structured 404 codes a backend may send as {"code": "..."}.
STRUCTURED_NOT_FOUND_CODES = {
    "notes_empty": ErrorKind.DEPENDENT_COLLECTION_EMPTY,
    "patient_not_found": ErrorKind.ENTITY_NOT_FOUND,
    "not_found": ErrorKind.ENTITY_NOT_FOUND,
}

_VALIDATION_BODY = TypeAdapter(list[ValidationErrorDetail])


# =================================================================================================================
# Body helpers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _load_json_object(raw_body: str | None) -> tuple[dict | None, str | None]:
    """
    Parse `raw_body` as a JSON object.

    Returns (mapping, None) on success, (None, reason) otherwise.
    """
    if raw_body is None:
        return None, "empty response body"
    try:
        data = json.loads(raw_body)
    except (ValueError, RecursionError) as exc:
        return None, str(exc)
    if not isinstance(data, dict):
        return None, f"expected a JSON object, got {type(data).__name__}"
    return data, None


# =================================================================================================================
# Per-status classifiers
# =================================================================================================================

def _classify_not_found(raw_body: str | None, operation_key: str) -> ClassifiedError:
    data, _ = _load_json_object(raw_body)
    code = data.get("code") if data else None
    structured_kind = STRUCTURED_NOT_FOUND_CODES.get(code) if isinstance(code, str) else None

    if structured_kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY:
        return ClassifiedError(ErrorKind.DEPENDENT_COLLECTION_EMPTY, 404, NOTES_EMPTY_MESSAGE,
                               operation_key, raw_body=raw_body)
    if structured_kind is ErrorKind.ENTITY_NOT_FOUND:
        message = PATIENT_NOT_FOUND_MESSAGE if code == "patient_not_found" else RESOURCE_NOT_FOUND_PREFIX + operation_key
        return ClassifiedError(ErrorKind.ENTITY_NOT_FOUND, 404, message, operation_key, raw_body=raw_body)

    # Fallback: the services answer 404 with free text. "notes"/"empty" is checked before
    # "patient", so a body mentioning both is read as an empty notes collection.
    normalized = (raw_body or "").lower()

    if _match_any(normalized, ["notes", "empty"]):
        return ClassifiedError(ErrorKind.DEPENDENT_COLLECTION_EMPTY, 404, NOTES_EMPTY_MESSAGE,
                               operation_key, raw_body=raw_body)

    if "patient" in normalized:
        return ClassifiedError(ErrorKind.ENTITY_NOT_FOUND, 404, PATIENT_NOT_FOUND_MESSAGE,
                               operation_key, raw_body=raw_body)

    return ClassifiedError(ErrorKind.ENTITY_NOT_FOUND, 404, RESOURCE_NOT_FOUND_PREFIX + operation_key,
                           operation_key, raw_body=raw_body)


def _classify_validation(raw_body: str | None, operation_key: str) -> ClassifiedError:
    if raw_body is None:
        parse_error = "empty response body"
    else:
        try:
            details = _VALIDATION_BODY.validate_json(raw_body)
        except ValidationError as exc:
            parse_error = f"{exc.error_count()} validation error(s) reading field errors: {exc.errors()[0]['msg']}"
        else:
            field_errors = tuple(FieldError(d.field, d.default_message) for d in details)
            fields = ", ".join(fe.field for fe in field_errors) or "none reported"
            return ClassifiedError(
                ErrorKind.VALIDATION_FAILED,
                400,
                f"Validation failed for field(s): {fields}",
                operation_key,
                field_errors=field_errors,
                raw_body=raw_body,
            )

    logger.info("classifier.unparsable_validation_body", extra={"operation": operation_key})
    return ClassifiedError(
        ErrorKind.VALIDATION_FAILED,
        400,
        INCORRECT_REQUEST_PREFIX + (raw_body or ""),
        operation_key,
        parse_error=parse_error,
        raw_body=raw_body,
    )


def _classify_conflict(raw_body: str | None, operation_key: str) -> ClassifiedError:
    data, parse_error = _load_json_object(raw_body)
    if data is None:
        logger.info("classifier.unparsable_conflict_body", extra={"operation": operation_key})
        return ClassifiedError(ErrorKind.CONFLICT, 409, CONFLICT_DEFAULT_MESSAGE, operation_key,
                               parse_error=parse_error, raw_body=raw_body)

    message = data.get("error")
    if message is None or message == "":
        message = CONFLICT_DEFAULT_MESSAGE
    return ClassifiedError(ErrorKind.CONFLICT, 409, str(message), operation_key, raw_body=raw_body)


def _classify_server_error(status_code: int, raw_body: str | None, operation_key: str) -> ClassifiedError:
    if status_code == 503:
        message = SERVICE_UNAVAILABLE_MESSAGE
    else:
        message = INTERNAL_ERROR_TEMPLATE.format(status=status_code)
    return ClassifiedError(ErrorKind.SERVICE_UNAVAILABLE, status_code, message, operation_key, raw_body=raw_body)


# =================================================================================================================
# Public API
# =================================================================================================================

def classify(status_code: int, raw_body: str | None, operation_key: str) -> ClassifiedError:
    """
    Classify a failed remote call into a ClassifiedError.

    Args:
        status_code: HTTP status of the failed call.
        raw_body: response body, or None when it could not be read.
        operation_key: key of the operation that failed (used in generic messages).

    Returns:
        A ClassifiedError with exactly one ErrorKind.
    """
    if status_code >= 500:
        error = _classify_server_error(status_code, raw_body, operation_key)
    elif status_code == 404:
        error = _classify_not_found(raw_body, operation_key)
    elif status_code == 400:
        error = _classify_validation(raw_body, operation_key)
    elif status_code == 409:
        error = _classify_conflict(raw_body, operation_key)
    else:
        error = ClassifiedError(
            ErrorKind.UNCLASSIFIED,
            status_code,
            raw_body if raw_body else f"Unexpected response status {status_code}",
            operation_key,
            raw_body=raw_body,
        )
        logger.warning("classifier.unclassified_status", extra={"status": status_code, "operation": operation_key})

    logger.debug("classifier.classified", extra={"error": error.to_payload()})
    return error


def classify_failure(failure: ClassifiableFailure) -> ClassifiedError:
    """Convenience wrapper for a ClassifiableFailure raised by the gateway client."""
    return classify(failure.status_code, failure.raw_body, failure.operation_key)


__all__ = [
    "classify",
    "classify_failure",
    "NOTES_EMPTY_MESSAGE",
    "PATIENT_NOT_FOUND_MESSAGE",
    "CONFLICT_DEFAULT_MESSAGE",
    "SERVICE_UNAVAILABLE_MESSAGE",
    "INTERNAL_ERROR_TEMPLATE",
]
