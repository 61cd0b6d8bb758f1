"""
Page context and recovery outcomes.

`PageContext` is built by a page action before its remote call and travels as a
plain value (never as request state). `RenderView` / `Redirect` are the two shapes
a recovery can end in; `RecoveredModel` is their union.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class RecoveryState(str, Enum):
    """
    States of a single recovery pass. START is initial, RECOVERING is the facet
    re-fetch, every other state is terminal. Nothing transitions back to START.

    ESCALATED means a service was unavailable (5xx) and only that. Interpreted
    errors end RECOVERED, including those that redirect home with a message.
    """

    START = "start"
    ESCALATED = "escalated"
    LIST_FALLBACK = "list_fallback"
    NO_CONTEXT = "no_context"
    RECOVERING = "recovering"
    RECOVERED = "recovered"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self not in (RecoveryState.START, RecoveryState.RECOVERING)


@dataclass(frozen=True)
class PageContext:
    """
    Minimal state needed to redraw a page after a failed remote call.

    - entity_id: id of the patient the page is about, None for list/add pages
    - draft_input: what the user submitted (form bean), kept so it survives the failure
    - target_view: view to re-render when recovery succeeds
    - fallback_view: list view used when a listing query fails
    """

    entity_id: int | None = None
    draft_input: Any | None = None
    target_view: str = "home"
    fallback_view: str = "list"


@dataclass(frozen=True)
class RenderView:
    view_name: str
    model: dict[str, Any] = field(default_factory=dict)
    state: RecoveryState = RecoveryState.RECOVERED


@dataclass(frozen=True)
class Redirect:
    path: str
    flash_message: str
    state: RecoveryState = RecoveryState.ESCALATED


RecoveredModel = Union[RenderView, Redirect]


__all__ = ["RecoveryState", "PageContext", "RenderView", "Redirect", "RecoveredModel"]
