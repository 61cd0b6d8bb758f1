# src/clientui/core/logging/middleware.py
"""
Request ID middleware for the client.

Each page request gets an id: the incoming `X-Request-ID` header when it looks
sane (the gateway sets one), otherwise a fresh UUID4. The id is stored in the
request-id contextvar for the RequestIdFilter and the gateway client, and echoed
on the response. Redirect responses produced by page recovery carry it too, so
the flash message a user sees can be matched to the failure that caused it.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# upstream ids are trusted only when short and free of control characters
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Starlette / FastAPI middleware that sets a request id for each incoming request.
    """

    async def dispatch(self, request: Request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)

        try:
            # exceptions propagate to the registered handlers; the finally block
            # still resets the contextvar
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
