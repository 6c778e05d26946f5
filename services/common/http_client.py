"""
Outbound HTTP client for the monitoring sources. Every request made to Prometheus or Alertmanager goes through one pooled client whose connect, read, write, and pool waits are bounded, so a stalled upstream cannot hold an API request open indefinitely.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Dict, Optional

import httpx
from config import config

USER_AGENT = "alertkeeper/1.0"


def _default_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if extra:
        headers.update(extra)
    return headers


def create_async_client(
    timeout_seconds: float,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=_default_headers(headers),
        timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, config.HTTP_CONNECT_TIMEOUT)),
        limits=httpx.Limits(
            max_connections=config.HTTP_CLIENT_MAX_CONNECTIONS,
            max_keepalive_connections=config.HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=config.HTTP_CLIENT_KEEPALIVE_EXPIRY,
        ),
        follow_redirects=False,
    )
