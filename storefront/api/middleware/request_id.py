import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[a-zA-Z0-9\-_.]{1,128}$")

# Read by the JSON log formatter.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _resolve_request_id(request: Request) -> str:
    client_id = request.headers.get(REQUEST_ID_HEADER)
    if client_id and _REQUEST_ID_RE.match(client_id):
        return client_id
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _resolve_request_id(request)
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
