"""
Entrypoint for the AlertKeeper alert ingestion and silence reconciliation service.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from contextlib import asynccontextmanager

import uvloop
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import config, constants
from database import connection_test, dispose_database, ensure_database_exists, init_database, init_db
from middleware.audit import request_logging_middleware, security_headers_middleware
from middleware.error_handlers import (
    alerting_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from middleware.limits import ConcurrencyLimitMiddleware, RequestSizeLimitMiddleware
from routers.observability import alerts
from services.alerting.errors import AlertingError

asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("alertkeeper")

if config.DB_AUTO_CREATE:
    ensure_database_exists(config.DATABASE_URL)
init_database(config.DATABASE_URL, config.LOG_LEVEL == "debug")
if not connection_test():
    raise RuntimeError("Failed to connect to the alert database")
init_db()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("AlertKeeper listening on %s:%s", config.HOST, config.PORT)
    yield
    if alerts.ingestion_pipeline.pending:
        logger.info("Waiting for %d in-flight alerts to be stored", alerts.ingestion_pipeline.pending)
        await alerts.ingestion_pipeline.drain()
    await alerts.alertmanager_service.aclose()
    dispose_database()
    logger.info("AlertKeeper stopped")


app = FastAPI(
    title="AlertKeeper",
    description="Alertmanager webhook ingestion and silence reconciliation",
    version="1.0.0",
    docs_url="/docs" if config.ENABLE_API_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_API_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_API_DOCS else None,
    lifespan=lifespan,
)

app.middleware("http")(security_headers_middleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AlertingError, alerting_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.middleware("http")
async def require_auth_token(request: Request, call_next):
    allowed_paths = {"/health", "/ready"}
    if config.ENABLE_API_DOCS:
        allowed_paths.update({"/docs", "/redoc", "/openapi.json"})
    if not config.AUTH_TOKEN or request.url.path in allowed_paths:
        return await call_next(request)
    auth_header = request.headers.get("Authorization", "")
    provided = auth_header[len("Bearer "):].strip() if auth_header.startswith("Bearer ") else ""
    if not provided or not secrets.compare_digest(provided, config.AUTH_TOKEN):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": "Unauthorized"})
    return await call_next(request)


app.middleware("http")(request_logging_middleware)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=config.MAX_REQUEST_BYTES)
app.add_middleware(
    ConcurrencyLimitMiddleware,
    max_concurrent=config.MAX_CONCURRENT_REQUESTS,
    acquire_timeout=config.CONCURRENCY_ACQUIRE_TIMEOUT,
)

app.include_router(alerts.webhook_router)
app.include_router(alerts.router)


@app.get("/health")
async def health() -> dict:
    return {"status": constants.STATUS_HEALTHY, "service": "alertkeeper"}


@app.get("/ready")
async def ready():
    checks = {"database": connection_test()}
    ok = all(checks.values())
    payload = {"status": "ready" if ok else "not_ready", "checks": checks}
    if not ok:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
    return payload


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT, loop="uvloop", log_level=config.LOG_LEVEL)
