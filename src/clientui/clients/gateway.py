"""
Gateway client.

Blocking httpx client for the gateway that fronts the patient, notes and risk
services. It implements `FacetProvider` plus the write operations the pages use.

Every call is attempted exactly once. Failures surface as `ClassifiableFailure`:

| What happened                       | status_code | raw_body             |
| ----------------------------------- | ----------- | -------------------- |
| non-2xx response                    | response    | body text (or None)  |
| timeout / connection error          | 503         | None                 |
| 2xx with a body we cannot decode    | response    | body text            |

so the classifier sees one uniform shape, and transport problems land in the
SERVICE_UNAVAILABLE bucket like any other 5xx.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from clientui.config.settings import Settings
from clientui.core.logging.filters import get_request_id
from clientui.core.logging.middleware import REQUEST_ID_HEADER
from clientui.exceptions.base import ClassifiableFailure
from clientui.models.beans import Note, Patient, RiskLevel

from .facets import Operation

logger = logging.getLogger(__name__)

_PATIENT = TypeAdapter(Patient)
_PATIENT_LIST = TypeAdapter(list[Patient])
_RISK = TypeAdapter(RiskLevel)
_NOTE_LIST = TypeAdapter(list[Note])

# status reported for failures that never produced a response
TRANSPORT_FAILURE_STATUS = 503


def _propagate_request_id(request: httpx.Request) -> None:
    """httpx request hook: forward the current page request id to the backends."""
    rid = get_request_id()
    if rid and REQUEST_ID_HEADER not in request.headers:
        request.headers[REQUEST_ID_HEADER] = rid


def _read_body(response: httpx.Response) -> str | None:
    # A body that cannot be read is reported as None; the status alone still classifies.
    try:
        response.read()
        return response.text or None
    except (httpx.HTTPError, UnicodeDecodeError):
        logger.debug("gateway.unreadable_body", extra={"status": response.status_code}, exc_info=True)
        return None


class GatewayClient:
    """
    Client for the gateway routes:

      GET  /mpatient/patients          list patients
      GET  /mpatient/patient/{id}      one patient
      POST /mpatient/patient           add patient
      PUT  /mpatient/patient/{id}      update patient
      GET  /mnotes/notes/{patId}       notes of a patient
      POST /mnotes/notes               add note
      GET  /mrisk/risk/{patId}         risk level of a patient
    """

    def __init__(self, client: httpx.Client):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "GatewayClient":
        client = httpx.Client(
            base_url=settings.GATEWAY_URL,
            timeout=httpx.Timeout(settings.GATEWAY_TIMEOUT_SECONDS),
            transport=transport,
            event_hooks={"request": [_propagate_request_id]},
            headers={"Accept": "application/json"},
        )
        return cls(client)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---------------------------------------------------------------------------------------------------------
    # Transport
    # ---------------------------------------------------------------------------------------------------------

    def _send(self, operation: Operation, method: str, url: str, json: Any = None) -> httpx.Response:
        try:
            response = self._client.request(method, url, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("gateway.timeout", extra={"operation": operation.value, "url": url})
            raise ClassifiableFailure(TRANSPORT_FAILURE_STATUS, None, operation.value) from exc
        except httpx.TransportError as exc:
            logger.warning(
                "gateway.transport_error",
                extra={"operation": operation.value, "url": url, "error": type(exc).__name__},
            )
            raise ClassifiableFailure(TRANSPORT_FAILURE_STATUS, None, operation.value) from exc

        if response.is_success:
            return response

        body = _read_body(response)
        logger.info(
            "gateway.error_response",
            extra={"operation": operation.value, "status": response.status_code},
        )
        raise ClassifiableFailure(response.status_code, body, operation.value)

    def _decode(self, operation: Operation, response: httpx.Response, adapter: TypeAdapter):
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            logger.warning(
                "gateway.undecodable_body",
                extra={"operation": operation.value, "errors": exc.error_count()},
            )
            raise ClassifiableFailure(response.status_code, response.text or None, operation.value) from exc

    # ---------------------------------------------------------------------------------------------------------
    # FacetProvider
    # ---------------------------------------------------------------------------------------------------------

    def fetch_entity(self, entity_id: int) -> Patient:
        response = self._send(Operation.GET_PATIENT, "GET", f"/mpatient/patient/{entity_id}")
        return self._decode(Operation.GET_PATIENT, response, _PATIENT)

    def fetch_dependents(self, entity_id: int) -> list[Note]:
        response = self._send(Operation.LIST_NOTES, "GET", f"/mnotes/notes/{entity_id}")
        if not response.content:
            # the notes service answers an empty body for a patient without notes
            return []
        return self._decode(Operation.LIST_NOTES, response, _NOTE_LIST)

    def fetch_derived(self, entity_id: int) -> RiskLevel:
        response = self._send(Operation.GET_RISK, "GET", f"/mrisk/risk/{entity_id}")
        return self._decode(Operation.GET_RISK, response, _RISK)

    # ---------------------------------------------------------------------------------------------------------
    # Page operations
    # ---------------------------------------------------------------------------------------------------------

    def list_patients(self) -> list[Patient]:
        response = self._send(Operation.LIST_PATIENTS, "GET", "/mpatient/patients")
        return self._decode(Operation.LIST_PATIENTS, response, _PATIENT_LIST)

    def add_patient(self, patient: Patient) -> None:
        self._send(Operation.ADD_PATIENT, "POST", "/mpatient/patient", json=patient.to_wire())

    def update_patient(self, entity_id: int, patient: Patient) -> None:
        self._send(Operation.UPDATE_PATIENT, "PUT", f"/mpatient/patient/{entity_id}", json=patient.to_wire())

    def add_note(self, note: Note) -> None:
        self._send(Operation.ADD_NOTE, "POST", "/mnotes/notes", json=note.to_wire())


__all__ = ["GatewayClient", "TRANSPORT_FAILURE_STATUS"]
