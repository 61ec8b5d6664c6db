"""
ASGI middleware for the categorization gateway.

CorrelationIdMiddleware binds one correlation ID per request (taken from the
x-correlation-id header or freshly generated) and echoes it back.
ErrorBoundaryMiddleware converts anything the routes did not handle into the
gateway's {"error", "code"} JSON body with status 500.
"""

import json
import traceback

from autocat.logging_config import (
    CORRELATION_HEADER,
    generate_correlation_id,
    get_correlation_id,
    get_logger,
    is_production,
    reset_correlation_id,
    set_correlation_id,
)

logger = get_logger("middleware")

_HEADER = CORRELATION_HEADER.encode("latin-1")


class CorrelationIdMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers", [])).get(_HEADER, b"")
        cid = incoming.decode("latin-1") or generate_correlation_id()

        async def send_with_header(message):
            if message["type"] == "http.response.start":
                headers = [*message.get("headers", []), (_HEADER, cid.encode("latin-1"))]
                message = {**message, "headers": headers}
            await send(message)

        token = set_correlation_id(cid)
        try:
            await self.app(scope, receive, send_with_header)
        finally:
            reset_correlation_id(token)


class ErrorBoundaryMiddleware:
    """Last-resort handler for unexpected exceptions.

    Outside production the body also carries the exception text and trace.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            cid = get_correlation_id()
            body = {"error": "Internal server error", "code": "INTERNAL_ERROR", "correlationId": cid}
            if not is_production():
                body["error"] = str(exc)
                body["stackTrace"] = traceback.format_exc()

            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [(b"content-type", b"application/json")],
            })
            await send({"type": "http.response.body", "body": json.dumps(body).encode("utf-8")})
