"""Request ID middleware (raw ASGI).

Takes the caller's request id header when it is a short token of
alphanumerics, '-' and '_', otherwise mints a UUID. The id is bound to the
logging context for the request, stored on request.state for the exception
handlers, and echoed on the response.
"""

import re
import uuid
from typing import Any, Awaitable, Callable

from membership_api.shared.telemetry.logging import bind_request_id, reset_request_id

ASGIApp = Callable[[dict, Callable, Callable], Awaitable[None]]

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def resolve_request_id(headers: list[tuple[bytes, bytes]], header_name: str) -> str:
    """Return the caller's id from headers if usable in log lines, else a new UUID."""
    wanted = header_name.lower().encode("latin-1")
    for name, value in headers:
        if name.lower() == wanted:
            candidate = value.decode("latin-1").strip()
            if _VALID_REQUEST_ID.match(candidate):
                return candidate
            break
    return str(uuid.uuid4())


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        self.app = app
        self.header_name = header_name
        self._encoded_name = header_name.lower().encode("latin-1")

    async def __call__(self, scope: dict[str, Any], receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(scope.get("headers", []), self.header_name)
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (self._encoded_name, request_id.encode("latin-1")),
                ]
            await send(message)

        token = bind_request_id(request_id)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            reset_request_id(token)
