"""
HTTP middleware applied to every route.

Registered in `api/main.py` so that they run in this order, outermost first:
1. ContentTypeMiddleware  - JSON responses always carry `charset=UTF-8`
2. RequestLoggingMiddleware - one log line per request
3. DeadlineMiddleware     - bounds handler time and cancels the handler on expiry

These are plain ASGI middleware (not BaseHTTPMiddleware) so that cancelling the
wrapped app cancels the route handler and any database call it is awaiting.
"""

from __future__ import annotations

import asyncio
import logging
import time

from starlette.datastructures import MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


class ContentTypeMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_content_type(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                # Bodiless responses (e.g. 204) and non-JSON media are left alone.
                if headers.get("content-type", "").startswith("application/json"):
                    headers["content-type"] = JSON_CONTENT_TYPE
            await send(message)

        await self.app(scope, receive, send_with_content_type)


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            logger.info(
                "request method=%s path=%s status=%s duration_ms=%.1f",
                scope.get("method"),
                scope.get("path"),
                status_code,
                (time.perf_counter() - started) * 1000,
            )


class DeadlineMiddleware:
    """
    Give each request at most `timeout_s` seconds.

    On expiry the handler is cancelled and, if nothing was sent yet, the client
    gets 503. A write that was cancelled must be treated as not committed.
    """

    def __init__(self, app: ASGIApp, timeout_s: float = 15.0) -> None:
        self.app = app
        self.timeout_s = timeout_s

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_tracking), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "request_deadline_exceeded method=%s path=%s timeout_s=%s",
                scope.get("method"),
                scope.get("path"),
                self.timeout_s,
            )
            if response_started:
                return
            response = JSONResponse(
                {"detail": "Request deadline exceeded."},
                status_code=503,
            )
            await response(scope, receive, send)
