"""
Recovery orchestrator.

Turns a classified failure into something the user can look at: the page they were
on (re-rendered with fresh data and their draft), the list view, or a redirect to
a safe page with a flash message.

Rules are evaluated in order, first match wins:

    1. SERVICE_UNAVAILABLE              -> redirect home, nothing re-fetched
    2. listing query, no entity id      -> list view, empty collection + error
    3. entity operation, no entity id   -> redirect home ("No patient ID found in query.")
       creation operation               -> straight to 5 with an empty detail model
    4. entity id present                -> re-fetch entity, dependents, derived (once each)
         - re-fetch SERVICE_UNAVAILABLE -> rule 1 with the new error
         - dependents/derived "empty"   -> [] / "Undefined"
         - any other re-fetch failure   -> redirect list, detail page abandoned
    5. interpret the original error against the rebuilt model; an error that cannot
       be shown on the page (unparsable body, unclassified status) redirects home

Only SERVICE_UNAVAILABLE (original or from the re-fetch) ends ESCALATED. A redirect
home from step 5 ends RECOVERED.

A recovery is a single pass. Re-fetch failures are never recovered recursively.
"""

import logging
from typing import Any

from clientui.clients.facets import FacetProvider, OperationScope, scope_of
from clientui.exceptions.base import ClassifiableFailure
from clientui.exceptions.classifier import classify_failure
from clientui.models.beans import UNDEFINED_RISK
from clientui.models.errors import ClassifiedError, ErrorKind
from clientui.models.page import PageContext, RecoveredModel, RecoveryState, Redirect, RenderView

logger = logging.getLogger(__name__)

NO_CONTEXT_MESSAGE = "No patient ID found in query."
ABANDONED_PREFIX = "Error retrieving patient data: "
UNPARSABLE_VALIDATION_PREFIX = "Error processing response status: "
UNPARSABLE_CONFLICT_PREFIX = "Conflict detected (unexpected format): "

# Model keys
ENTITY = "entity"
DEPENDENTS = "dependents"
DERIVED = "derived"
DRAFT_INPUT = "draftInput"
CURRENT_PAGE = "currentPage"
ERRORS = "errors"
ERROR = "error"
COLLECTION = "patients"


class _RefetchFailed(Exception):
    """Internal: a facet re-fetch failed; carries the classified re-fetch error."""

    def __init__(self, error: ClassifiedError):
        super().__init__(error.message)
        self.error = error


class RecoveryOrchestrator:
    """
    Stateless apart from the two paths it redirects to, so one instance can serve
    every request.
    """

    def __init__(self, home_path: str = "/home", list_path: str = "/patients"):
        self.home_path = home_path
        self.list_path = list_path

    # ---------------------------------------------------------------------------------------------------------
    # Entry point
    # ---------------------------------------------------------------------------------------------------------

    def recover(self, error: ClassifiedError, ctx: PageContext, facets: FacetProvider) -> RecoveredModel:
        if error.kind is ErrorKind.SERVICE_UNAVAILABLE:
            return self._escalate(error)

        scope = scope_of(error.source_operation)

        if scope is OperationScope.LISTING and ctx.entity_id is None:
            logger.info("recovery.list_fallback", extra={"error": error.to_payload()})
            return RenderView(
                ctx.fallback_view,
                {COLLECTION: [], CURRENT_PAGE: ctx.fallback_view, ERROR: error.message},
                state=RecoveryState.LIST_FALLBACK,
            )

        if ctx.entity_id is None:
            if scope is OperationScope.CREATION:
                model = {ENTITY: None, DEPENDENTS: [], DERIVED: UNDEFINED_RISK,
                         DRAFT_INPUT: ctx.draft_input, CURRENT_PAGE: ctx.target_view}
                return self._interpret(error, ctx, model)
            logger.warning("recovery.no_context", extra={"error": error.to_payload()})
            return Redirect(self.home_path, NO_CONTEXT_MESSAGE, state=RecoveryState.NO_CONTEXT)

        try:
            model = self._rebuild(ctx, facets)
        except _RefetchFailed as exc:
            if exc.error.kind is ErrorKind.SERVICE_UNAVAILABLE:
                return self._escalate(exc.error)
            logger.warning(
                "recovery.abandoned",
                extra={"error": error.to_payload(), "refetch_error": exc.error.to_payload(),
                       "entity_id": ctx.entity_id},
            )
            return Redirect(self.list_path, ABANDONED_PREFIX + exc.error.message, state=RecoveryState.ABANDONED)

        return self._interpret(error, ctx, model)

    # ---------------------------------------------------------------------------------------------------------
    # Steps
    # ---------------------------------------------------------------------------------------------------------

    def _escalate(self, error: ClassifiedError) -> Redirect:
        logger.error("recovery.escalated", extra={"error": error.to_payload()})
        return Redirect(self.home_path, error.message, state=RecoveryState.ESCALATED)

    def _rebuild(self, ctx: PageContext, facets: FacetProvider) -> dict[str, Any]:
        """Re-fetch the three facets in order. All or nothing."""
        entity_id = ctx.entity_id

        try:
            entity = facets.fetch_entity(entity_id)
        except ClassifiableFailure as failure:
            raise _RefetchFailed(classify_failure(failure)) from failure

        dependents = self._fetch_optional(facets.fetch_dependents, entity_id, [])
        derived = self._fetch_optional(facets.fetch_derived, entity_id, None)
        derived_level = derived.risk_level if derived is not None else UNDEFINED_RISK

        return {
            ENTITY: entity,
            DEPENDENTS: dependents,
            DERIVED: derived_level,
            DRAFT_INPUT: ctx.draft_input,
            CURRENT_PAGE: ctx.target_view,
        }

    @staticmethod
    def _fetch_optional(fetch, entity_id: int, empty):
        # A patient without notes answers 404 "notes empty"; that is an empty facet, not a failure.
        try:
            return fetch(entity_id)
        except ClassifiableFailure as failure:
            refetch_error = classify_failure(failure)
            if refetch_error.kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY:
                return empty
            raise _RefetchFailed(refetch_error) from failure

    def _interpret(self, error: ClassifiedError, ctx: PageContext, model: dict[str, Any]) -> RecoveredModel:
        if error.kind is ErrorKind.VALIDATION_FAILED:
            if not error.is_parsed:
                return self._give_up(error, UNPARSABLE_VALIDATION_PREFIX + error.parse_error)
            return RenderView(ctx.target_view, {**model, ERRORS: error.errors_by_field()})

        if error.kind is ErrorKind.CONFLICT:
            if not error.is_parsed:
                return self._give_up(error, UNPARSABLE_CONFLICT_PREFIX + error.parse_error)
            return RenderView(ctx.target_view, {**model, ERROR: error.message})

        if error.kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY:
            return RenderView(ctx.target_view, {**model, ERROR: error.message})

        return self._give_up(error, f"Error {error.http_status}: {error.message}")

    def _give_up(self, error: ClassifiedError, message: str) -> Redirect:
        logger.warning("recovery.redirect_home", extra={"error": error.to_payload()})
        return Redirect(self.home_path, message, state=RecoveryState.RECOVERED)


_default = RecoveryOrchestrator()


def recover(error: ClassifiedError, ctx: PageContext, facets: FacetProvider) -> RecoveredModel:
    """Recover with the default home (`/home`) and list (`/patients`) paths."""
    return _default.recover(error, ctx, facets)


__all__ = [
    "RecoveryOrchestrator",
    "recover",
    "NO_CONTEXT_MESSAGE",
    "ABANDONED_PREFIX",
    "UNPARSABLE_VALIDATION_PREFIX",
    "UNPARSABLE_CONFLICT_PREFIX",
]
