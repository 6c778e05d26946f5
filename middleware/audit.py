"""
Request audit logging and security header enforcement for the AlertKeeper service.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import logging
import time

from fastapi import Request

logger = logging.getLogger("alertkeeper.access")


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    client = request.client.host if request.client else "-"
    logger.info(
        "%s %s %s %s %s %dms",
        client,
        request.method,
        request.url.path,
        request.headers.get("user-agent", "-"),
        response.status_code,
        elapsed_ms,
    )
    return response


async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cache-Control", "no-store")
    return response
