# clientui/api/v1/error_handlers.py
"""
FastAPI exception handlers that turn failed page actions into pages.

How it fits together:
    - Page routes run their gateway calls inside `page_action(ctx)`; a failed call
      surfaces as `PageActionFailed(failure, ctx)`.
    - The handler classifies the failure, asks the recovery orchestrator what to show,
      and hands the outcome to the render sink (template or 303 redirect).
    - A bare `ClassifiableFailure` (a gateway call made outside `page_action`) is
      recovered with a context that only knows the home and list views.

The handlers are plain `def`: recovery re-fetches facets with the blocking gateway
client, so Starlette runs them in its thread pool.
"""

import logging

from fastapi import FastAPI, Request
from starlette.responses import Response

from clientui.core.dependencies import get_gateway, get_orchestrator, get_render_sink
from clientui.exceptions.base import ClassifiableFailure, PageActionFailed
from clientui.exceptions.classifier import classify_failure
from clientui.models.page import PageContext
from clientui.web.render import apply_outcome

logger = logging.getLogger(__name__)


def _recover(request: Request, failure: ClassifiableFailure, ctx: PageContext) -> Response:
    error = classify_failure(failure)
    outcome = get_orchestrator(request).recover(error, ctx, get_gateway(request))
    logger.info(
        "Recovered %s %s -> %s",
        request.method,
        request.url.path,
        outcome.state.value,
        extra={"error": error.to_payload(), "recovery_state": outcome.state.value},
    )
    return apply_outcome(get_render_sink(request), request, outcome)


def page_action_failed_handler(request: Request, exc: PageActionFailed) -> Response:
    """A failed remote call inside a page action, with the page's context."""
    return _recover(request, exc.failure, exc.context)


def classifiable_failure_handler(request: Request, exc: ClassifiableFailure) -> Response:
    """
    A failed remote call without page context. Nothing identifies the page, so only
    the service-unavailable, list-fallback and redirect branches can apply.
    """
    logger.warning("ClassifiableFailure outside a page action for %s %s: %s", request.method, request.url.path, exc)
    return _recover(request, exc, PageContext())


# Helper to register all handlers on an app (call this from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PageActionFailed, page_action_failed_handler)
    app.add_exception_handler(ClassifiableFailure, classifiable_failure_handler)
