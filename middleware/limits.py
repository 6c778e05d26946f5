"""
Request size and concurrency limiting middleware. Webhook batches are bounded in size before they are decoded, and the number of requests in flight is capped so a burst of webhook deliveries cannot starve the read endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class _TooLarge(Exception):
    def __init__(self, max_bytes: int) -> None:
        super().__init__(f"Request body exceeds {max_bytes} bytes")
        self.max_bytes = max_bytes


def _too_large_response() -> JSONResponse:
    return JSONResponse({"detail": "Request body too large"}, status_code=413)


class RequestSizeLimitMiddleware:

    def __init__(self, app, max_bytes: int = 1_048_576) -> None:
        self.app = app
        self.max_bytes = int(max_bytes)
        self.rejected = 0

    async def __call__(self, scope, receive, send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        content_length = None
        for key, value in scope.get("headers", []):
            if key.decode("latin-1").lower() == "content-length":
                content_length = value.decode("latin-1")
                break
        if content_length:
            try:
                if int(content_length) > self.max_bytes:
                    self.rejected += 1
                    logger.warning(
                        "request_size_rejected total=%s path=%s content_length=%s max_bytes=%s",
                        self.rejected, scope.get("path"), content_length, self.max_bytes,
                    )
                    await _too_large_response()(scope, receive, send)
                    return
            except ValueError:
                logger.warning("Invalid content-length header value: %r", content_length)

        received = 0
        response_started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message.get("type") == "http.request":
                received += len(message.get("body") or b"")
                if received > self.max_bytes:
                    raise _TooLarge(self.max_bytes)
            return message

        async def tracking_send(message):
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except _TooLarge:
            self.rejected += 1
            logger.warning("request_size_rejected total=%s path=%s streamed", self.rejected, scope.get("path"))
            if not response_started:
                await _too_large_response()(scope, receive, send)


class ConcurrencyLimitMiddleware:

    def __init__(
        self,
        app,
        max_concurrent: int = 200,
        acquire_timeout: float = 1.0,
    ) -> None:
        self.app = app
        self._max_concurrent = int(max_concurrent)
        self._timeout = float(acquire_timeout)
        self._sem: Optional[asyncio.Semaphore] = None
        self.busy = 0

    def _get_semaphore(self) -> asyncio.Semaphore:
        # created lazily so it binds to the server's running loop
        if self._sem is None:
            self._sem = asyncio.Semaphore(self._max_concurrent)
        return self._sem

    async def __call__(self, scope, receive, send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        sem = self._get_semaphore()
        try:
            await asyncio.wait_for(sem.acquire(), timeout=self._timeout)
        except asyncio.TimeoutError:
            self.busy += 1
            logger.warning("concurrency_limit_busy total=%s timeout=%s", self.busy, self._timeout)
            resp = JSONResponse({"detail": "Server busy, please retry"}, status_code=503)
            await resp(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        finally:
            sem.release()
