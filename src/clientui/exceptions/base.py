"""
Exceptions raised by the client's remote-call layer.

Two levels, mirroring how the failure travels:

- `ClassifiableFailure`: what the gateway client raises for any failed call. It is
  raw transport data (status, body, operation key) and carries no interpretation.
  `exceptions.classifier.classify()` turns it into a `ClassifiedError`.
- `PageActionFailed`: a `ClassifiableFailure` wrapped together with the
  `PageContext` of the page action that was running. This is what the registered
  FastAPI handler receives, so the context reaches the recovery orchestrator as an
  explicit value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clientui.models.page import PageContext


class ClientUIError(Exception):
    """Base exception for the client."""


class ClassifiableFailure(ClientUIError):
    """
    A remote call that did not succeed.

    - status_code: HTTP status observed (503 is used for timeouts and connection errors)
    - raw_body: response body, None when there was none or it could not be read
    - operation_key: which call failed (see clients.facets.Operation)
    """

    def __init__(self, status_code: int, raw_body: str | None, operation_key: str):
        super().__init__(f"{operation_key} failed with status {status_code}")
        self.status_code = status_code
        self.raw_body = raw_body
        self.operation_key = operation_key

    def __str__(self) -> str:
        # keep bodies out of str(): it ends up in tracebacks and logs
        return f"{self.operation_key} failed with status {self.status_code}"


class PageActionFailed(ClientUIError):
    """A failed remote call together with the page context it happened in."""

    def __init__(self, failure: ClassifiableFailure, context: PageContext):
        super().__init__(str(failure))
        self.failure = failure
        self.context = context


__all__ = ["ClientUIError", "ClassifiableFailure", "PageActionFailed"]
