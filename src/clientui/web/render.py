# clientui/web/render.py
"""
Render sink: turns a RecoveredModel into an HTTP response.

- RenderView -> `<view_name>.html` rendered with Jinja2 (Starlette's Jinja2Templates)
- Redirect   -> 303 See Other to `path`, the message stored as a flash in the session

Flash messages live in the signed session cookie (Starlette `SessionMiddleware`) and
are popped by the next page that renders, so they show exactly once and cannot be
forged through a link.
"""

from typing import Any, Protocol

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from clientui.models.page import RecoveredModel, Redirect, RenderView

FLASH_KEY = "flash"

# flash categories, also the template variables that display them
ERROR = "error"
SUCCESS = "success"


def push_flash(request: Request, message: str | None, category: str = ERROR) -> None:
    if message:
        request.session.setdefault(FLASH_KEY, {})[category] = message


def pop_flashes(request: Request) -> dict[str, str]:
    """Remove and return the pending flash messages, keyed by category."""
    return request.session.pop(FLASH_KEY, None) or {}


class RenderSink(Protocol):
    def render(self, request: Request, view_name: str, model: dict[str, Any]) -> Response: ...

    def redirect(
        self, request: Request, path: str, flash_message: str | None = None, category: str = ERROR
    ) -> Response: ...


class TemplateRenderSink:
    def __init__(self, templates: Jinja2Templates):
        self.templates = templates

    def render(self, request: Request, view_name: str, model: dict[str, Any]) -> Response:
        return self.templates.TemplateResponse(request, f"{view_name}.html", model)

    def redirect(
        self, request: Request, path: str, flash_message: str | None = None, category: str = ERROR
    ) -> Response:
        push_flash(request, flash_message, category)
        return RedirectResponse(path, status_code=303)


def apply_outcome(sink: RenderSink, request: Request, outcome: RecoveredModel) -> Response:
    """Hand a recovery outcome to the sink."""
    if isinstance(outcome, Redirect):
        return sink.redirect(request, outcome.path, outcome.flash_message)
    if isinstance(outcome, RenderView):
        return sink.render(request, outcome.view_name, outcome.model)
    raise TypeError(f"Unknown recovery outcome: {type(outcome).__name__}")


__all__ = [
    "RenderSink",
    "TemplateRenderSink",
    "apply_outcome",
    "push_flash",
    "pop_flashes",
    "FLASH_KEY",
    "ERROR",
    "SUCCESS",
]
