"""
Bookshelf — Request Deadline Middleware
========================================

What:  Bounds the total time spent handling one request.
How:   Plain ASGI middleware that runs the downstream app under
       asyncio.wait_for. On expiry the handler (and any database await
       inside it) is cancelled and, if nothing has been sent yet, the client
       gets the generic 500 envelope.
"""

import asyncio
import logging
from typing import Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bookshelf.config import settings
from bookshelf.middleware.request_id import request_id_var
from bookshelf.responses import INTERNAL_ERROR_MESSAGE, error_response

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """
    Per-request deadline.

    Args:
        timeout: Seconds allowed per request (default: settings.request_timeout)
    """

    def __init__(self, app: ASGIApp, timeout: Optional[float] = None):
        self.app = app
        self.timeout = timeout if timeout is not None else settings.request_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "[%s] %s %s exceeded the %.1fs request deadline",
                request_id_var.get(""),
                scope.get("method", ""),
                scope.get("path", ""),
                self.timeout,
            )
            if not response_started:
                response = error_response(500, INTERNAL_ERROR_MESSAGE)
                await response(scope, receive, send)
