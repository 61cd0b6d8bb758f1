# clientui/web/pages.py
"""
Page routes.

Every route that talks to the gateway does it inside `page_action(ctx)`, where `ctx`
says which patient the page is about, what the user submitted and which view to
redraw. A failed call leaves the block as `PageActionFailed`; the registered
exception handler takes it from there.

Form values the client cannot parse never reach the gateway. They are turned into a
VALIDATION_FAILED error and recovered like a backend 400, so the page is rebuilt
the same way in both cases.

Flash messages are popped from the session by the pages that display them.

Routes are plain `def`: the gateway client blocks, FastAPI runs them in its thread pool.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from starlette.responses import Response

from clientui.clients.facets import Operation
from clientui.clients.gateway import GatewayClient
from clientui.core.dependencies import get_gateway, get_orchestrator, get_render_sink
from clientui.exceptions.base import ClassifiableFailure, PageActionFailed
from clientui.models.beans import UNDEFINED_RISK, Note, Patient
from clientui.models.errors import ClassifiedError, ErrorKind, FieldError
from clientui.models.page import PageContext
from clientui.recovery.orchestrator import RecoveryOrchestrator
from clientui.web.render import SUCCESS, RenderSink, apply_outcome, pop_flashes, push_flash

logger = logging.getLogger(__name__)

router = APIRouter()

HOME_VIEW = "home"
LIST_VIEW = "list"
UPDATE_VIEW = "update"
ADD_VIEW = "add"

NOTE_ADDED = "Note successfully added"
PATIENT_ADDED = "Patient successfully added"
PATIENT_UPDATED = "Patient successfully updated"
INVALID_FIELDS_PREFIX = "Invalid value for field(s): "


@contextmanager
def page_action(ctx: PageContext) -> Iterator[PageContext]:
    """Attach `ctx` to any gateway failure raised inside the block."""
    try:
        yield ctx
    except ClassifiableFailure as failure:
        raise PageActionFailed(failure, ctx) from failure


def _see_other(request: Request, path: str, success: str | None = None) -> RedirectResponse:
    push_flash(request, success, SUCCESS)
    return RedirectResponse(path, status_code=303)


def _patient_form(
    lastname: str = Form(""),
    firstname: str = Form(""),
    dateofbirth: str = Form(""),
    gender: str = Form(""),
    address: str = Form(""),
    phone: str = Form(""),
) -> dict[str, str]:
    return {
        "lastname": lastname,
        "firstname": firstname,
        "dateofbirth": dateofbirth,
        "gender": gender,
        "address": address,
        "phone": phone,
    }


def _parse_patient(form: dict[str, str], entity_id: int | None = None) -> tuple[Patient, dict[str, str]]:
    """
    Build the patient draft from the form.

    A value the client cannot even parse (a malformed date) is reported as a field
    error. The draft then holds the submitted strings unvalidated, so the user gets
    back exactly what they typed. Everything else is left for the backend to validate.
    """
    try:
        return Patient(id=entity_id, **form), {}
    except ValidationError as exc:
        errors = {str(err["loc"][0]): err["msg"] for err in exc.errors() if err["loc"]}
        return Patient.model_construct(id=entity_id, **form), errors


def _rejected_locally(operation: Operation, errors: dict[str, str]) -> ClassifiedError:
    """The VALIDATION_FAILED error a backend would have answered for these fields."""
    return ClassifiedError(
        kind=ErrorKind.VALIDATION_FAILED,
        http_status=400,
        message=INVALID_FIELDS_PREFIX + ", ".join(errors),
        source_operation=operation.value,
        field_errors=tuple(FieldError(name, message) for name, message in errors.items()),
    )


def _recover_locally(
    request: Request,
    error: ClassifiedError,
    ctx: PageContext,
    orchestrator: RecoveryOrchestrator,
    gateway: GatewayClient,
    sink: RenderSink,
) -> Response:
    outcome = orchestrator.recover(error, ctx, gateway)
    logger.info(
        "Rejected form for %s -> %s",
        request.url.path,
        outcome.state.value,
        extra={"error": error.to_payload(), "recovery_state": outcome.state.value},
    )
    return apply_outcome(sink, request, outcome)


# ---------------------------------------------------------------------------------------------------------------
# Home
# ---------------------------------------------------------------------------------------------------------------

@router.get("/")
def index() -> RedirectResponse:
    return RedirectResponse("/home", status_code=303)


@router.get("/home")
def home(request: Request, sink: RenderSink = Depends(get_render_sink)) -> Response:
    return sink.render(request, HOME_VIEW, {"currentPage": HOME_VIEW, **pop_flashes(request)})


# ---------------------------------------------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------------------------------------------

@router.get("/patients")
def list_patients(
    request: Request,
    gateway: GatewayClient = Depends(get_gateway),
    sink: RenderSink = Depends(get_render_sink),
) -> Response:
    flashes = pop_flashes(request)
    with page_action(PageContext(target_view=LIST_VIEW, fallback_view=LIST_VIEW)):
        patients = gateway.list_patients()
    return sink.render(request, LIST_VIEW, {"patients": patients, "currentPage": LIST_VIEW, **flashes})


@router.get("/update/{entity_id}")
def show_patient(
    request: Request,
    entity_id: int,
    gateway: GatewayClient = Depends(get_gateway),
    sink: RenderSink = Depends(get_render_sink),
) -> Response:
    flashes = pop_flashes(request)
    with page_action(PageContext(entity_id=entity_id, target_view=UPDATE_VIEW, fallback_view=LIST_VIEW)):
        patient = gateway.fetch_entity(entity_id)
        notes = gateway.fetch_dependents(entity_id)
        risk = gateway.fetch_derived(entity_id)

    return sink.render(
        request,
        UPDATE_VIEW,
        {
            "entity": patient,
            "dependents": notes,
            "derived": risk.risk_level or UNDEFINED_RISK,
            "draftInput": None,
            "currentPage": UPDATE_VIEW,
            **flashes,
        },
    )


@router.post("/update/{entity_id}/addnotes")
def add_note(
    request: Request,
    entity_id: int,
    note: str = Form(""),
    gateway: GatewayClient = Depends(get_gateway),
) -> Response:
    draft = Note(pat_id=entity_id, note=note)
    ctx = PageContext(entity_id=entity_id, draft_input=draft, target_view=UPDATE_VIEW, fallback_view=LIST_VIEW)
    with page_action(ctx):
        patient = gateway.fetch_entity(entity_id)
        gateway.add_note(draft.model_copy(update={"patient": patient.lastname}))

    logger.info("Note added", extra={"entity_id": entity_id})
    return _see_other(request, f"/update/{entity_id}", NOTE_ADDED)


@router.post("/update/{entity_id}/updatepatient")
def update_patient(
    request: Request,
    entity_id: int,
    form: dict[str, str] = Depends(_patient_form),
    gateway: GatewayClient = Depends(get_gateway),
    orchestrator: RecoveryOrchestrator = Depends(get_orchestrator),
    sink: RenderSink = Depends(get_render_sink),
) -> Response:
    draft, local_errors = _parse_patient(form, entity_id)
    ctx = PageContext(entity_id=entity_id, draft_input=draft, target_view=UPDATE_VIEW, fallback_view=LIST_VIEW)

    if local_errors:
        error = _rejected_locally(Operation.UPDATE_PATIENT, local_errors)
        return _recover_locally(request, error, ctx, orchestrator, gateway, sink)

    with page_action(ctx):
        gateway.update_patient(entity_id, draft)

    logger.info("Patient updated", extra={"entity_id": entity_id})
    return _see_other(request, f"/update/{entity_id}", PATIENT_UPDATED)


# ---------------------------------------------------------------------------------------------------------------
# Add patient
# ---------------------------------------------------------------------------------------------------------------

@router.get("/add")
def add_form(request: Request, sink: RenderSink = Depends(get_render_sink)) -> Response:
    return sink.render(request, ADD_VIEW, {"draftInput": Patient(), "currentPage": ADD_VIEW})


@router.post("/add/addPatient")
def add_patient(
    request: Request,
    form: dict[str, str] = Depends(_patient_form),
    gateway: GatewayClient = Depends(get_gateway),
    orchestrator: RecoveryOrchestrator = Depends(get_orchestrator),
    sink: RenderSink = Depends(get_render_sink),
) -> Response:
    draft, local_errors = _parse_patient(form)
    ctx = PageContext(draft_input=draft, target_view=ADD_VIEW, fallback_view=LIST_VIEW)

    if local_errors:
        error = _rejected_locally(Operation.ADD_PATIENT, local_errors)
        return _recover_locally(request, error, ctx, orchestrator, gateway, sink)

    with page_action(ctx):
        gateway.add_patient(draft)

    logger.info("Patient added")
    return _see_other(request, "/patients", PATIENT_ADDED)


__all__ = ["router", "page_action"]
