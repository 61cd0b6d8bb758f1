# src/clientui/core/logging/filters.py
"""
Logging filters

Request ID filter, redaction filter and the contextvar helpers behind them.

Every page request gets a request id (see middleware.py). The same id is sent on
each gateway call made while rendering that page (see clients/gateway.py), so a
failed recovery can be traced across the client and the backend services.

- `set_request_id()` / `reset_request_id()` / `get_request_id()` wrap a
  `contextvars.ContextVar`, which survives `await` boundaries and is copied into
  the worker thread that runs a sync FastAPI route.
- `RequestIdFilter` guarantees `record.request_id` exists, so `%(request_id)s`
  never raises KeyError. The sentinel "-" marks records emitted outside a request.
- `RedactFilter` masks attributes whose name looks like a credential.

Both filters always return True: they annotate records, they never drop them.
"""

import logging
from logging import LogRecord
import contextvars


# Default is None to indicate "no request id set".
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context and return the token to allow reset.

    Returns:
        token: contextvar.Token which can be passed to reset_request_id(token)
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token):
    """
    Reset the contextvar to the previously saved token returned by set_request_id().
    """
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    """
    Retrieve the current context's request id, or None if no id has been set.
    """
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Logging filter that guarantees every LogRecord has a `request_id` attribute.

    Precedence:
      * record.request_id (explicitly passed via `extra=`)
      * the contextvar value (set by RequestIDMiddleware)
      * the sentinel "-"
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Mask record attributes that carry credentials (passed through `extra=`)."""

    SENSITIVE = {
        "password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "cookie",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
