"""
Configuration management for the application, loading settings from environment variables with support for defaults, type conversion, and validation. This module defines a `Config` class that encapsulates all configuration options for the service, including server settings, the Prometheus and Alertmanager endpoints, the shared bearer token, outbound HTTP tuning, and the parameters used to assemble the storage backend connection string. Only recognised options are read and defaults apply when a variable is absent.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
import os
from typing import Optional

from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = {"critical", "error", "warning", "info", "debug"}


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _env_name() -> str:
    return (os.getenv("APP_ENV") or os.getenv("ENVIRONMENT") or "development").strip().lower()


def _is_production_env() -> bool:
    return _env_name() in {"prod", "production"}


def build_database_url(
    driver: str,
    host: str,
    port: Optional[int],
    user: Optional[str],
    password: Optional[str],
    database: str,
    sslmode: Optional[str] = None,
    connect_timeout: Optional[int] = None,
) -> str:
    query = {}
    backend = driver.split("+", 1)[0]
    if sslmode and backend in {"postgresql", "redshift"}:
        query["sslmode"] = sslmode
    if connect_timeout and backend in {"postgresql", "redshift"}:
        query["connect_timeout"] = str(connect_timeout)
    url = URL.create(
        drivername=driver,
        username=user or None,
        password=password or None,
        host=host or None,
        port=port,
        database=database or None,
        query=query,
    )
    return url.render_as_string(hide_password=False)


class Config:
    def __init__(self) -> None:
        self.APP_ENV: str = _env_name()
        self.IS_PRODUCTION: bool = _is_production_env()

        # Server configuration
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "5000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").strip().lower()
        self.ENABLE_API_DOCS: bool = _to_bool(os.getenv("ENABLE_API_DOCS"), default=not self.IS_PRODUCTION)

        # Shared bearer token; empty disables the guard outside production
        self.AUTH_TOKEN: str = os.getenv("AUTH_TOKEN", "").strip()

        # Service URLs
        self.PROMETHEUS_URL: str = os.getenv("PROMETHEUS_URL", "http://localhost:9090")
        self.ALERTMANAGER_URL: str = os.getenv("ALERTMANAGER_URL", "http://localhost:9093")

        # Request settings
        self.DEFAULT_TIMEOUT: float = float(os.getenv("DEFAULT_TIMEOUT", "15.0"))
        self.HTTP_CONNECT_TIMEOUT: float = float(os.getenv("HTTP_CONNECT_TIMEOUT", "5.0"))

        # Shared upstream HTTP client pool tuning
        self.HTTP_CLIENT_MAX_CONNECTIONS: int = int(os.getenv("HTTP_CLIENT_MAX_CONNECTIONS", "100"))
        self.HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS: int = int(os.getenv("HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS", "20"))
        self.HTTP_CLIENT_KEEPALIVE_EXPIRY: float = float(os.getenv("HTTP_CLIENT_KEEPALIVE_EXPIRY", "30"))

        # Database
        self.DB_DRIVER: str = os.getenv("DB_DRIVER", "postgresql+psycopg2")
        self.DB_HOST: str = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432").strip()
        self.DB_PORT: Optional[int] = int(db_port) if db_port else None
        self.DB_USER: str = os.getenv("DB_USER", "alertkeeper")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "alertkeeper")
        self.DB_SSLMODE: str = os.getenv("DB_SSLMODE", "prefer")
        self.DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
        self.DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
        self.DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
        self.DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))
        self.DB_AUTO_CREATE: bool = _to_bool(os.getenv("DB_AUTO_CREATE"), default=False)
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or build_database_url(
            self.DB_DRIVER,
            self.DB_HOST,
            self.DB_PORT,
            self.DB_USER,
            self.DB_PASSWORD,
            self.DB_NAME,
            sslmode=self.DB_SSLMODE,
            connect_timeout=self.DB_CONNECT_TIMEOUT,
        )

        # Request protection / backpressure
        self.MAX_REQUEST_BYTES: int = int(os.getenv("MAX_REQUEST_BYTES", "1048576"))
        self.MAX_CONCURRENT_REQUESTS: int = int(os.getenv("MAX_CONCURRENT_REQUESTS", "200"))
        self.CONCURRENCY_ACQUIRE_TIMEOUT: float = float(os.getenv("CONCURRENCY_ACQUIRE_TIMEOUT", "1.0"))

        self.validate()

    def validate(self) -> None:
        if self.LOG_LEVEL not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"Unsupported LOG_LEVEL '{self.LOG_LEVEL}'. Allowed values: {sorted(_VALID_LOG_LEVELS)}"
            )

        if not 0 < self.PORT < 65536:
            raise ValueError("PORT must be between 1 and 65535")

        if self.IS_PRODUCTION and not self.AUTH_TOKEN:
            raise ValueError("AUTH_TOKEN must be configured in production")
        if not self.AUTH_TOKEN:
            logger.warning("AUTH_TOKEN is not set; API endpoints are unauthenticated.")

        for name in ("PROMETHEUS_URL", "ALERTMANAGER_URL"):
            value = getattr(self, name)
            if not value.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL")

        if self.DEFAULT_TIMEOUT <= 0 or self.HTTP_CONNECT_TIMEOUT <= 0:
            raise ValueError("DEFAULT_TIMEOUT and HTTP_CONNECT_TIMEOUT must be greater than 0")
        if self.MAX_REQUEST_BYTES <= 0:
            raise ValueError("MAX_REQUEST_BYTES must be greater than 0")
        if self.MAX_CONCURRENT_REQUESTS <= 0:
            raise ValueError("MAX_CONCURRENT_REQUESTS must be greater than 0")


class Constants:
    STATUS_HEALTHY: str = "healthy"
    STATUS_SUCCESS: str = "success"

config = Config()
constants = Constants()
