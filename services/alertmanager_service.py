"""
Service for managing interactions with the monitoring sources, providing functions to retrieve firing alerts from Prometheus, list silences from Alertmanager, classify firing alerts as silenced or unsilenced, and create or delete silences. The service owns the shared outbound HTTP client; the actual operations live in the alerting ops modules and receive this service as their first argument.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import logging
from typing import List, Optional, Tuple

import httpx

from config import config
from middleware.resilience import with_timeout
from models.alerting.alerts import FiringAlert
from models.alerting.silences import Silence
from services.common.http_client import create_async_client
from services.alerting.errors import SourceUnavailable
from services.alerting.silence_matching import partition_alerts
from services.alerting.source_ops import fetch_firing_alerts, fetch_silences
from services.alerting.silences_ops import create_silence, delete_silence

logger = logging.getLogger(__name__)


class AlertManagerService:
    def __init__(
        self,
        prometheus_url: str = config.PROMETHEUS_URL,
        alertmanager_url: str = config.ALERTMANAGER_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = config.DEFAULT_TIMEOUT,
    ):
        self.prometheus_url = prometheus_url.rstrip("/")
        self.alertmanager_url = alertmanager_url.rstrip("/")
        self.timeout = timeout
        self._client = client or create_async_client(self.timeout)
        self.logger = logger

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_firing_alerts(self) -> List[FiringAlert]:
        return await with_timeout(self.timeout, error=SourceUnavailable)(fetch_firing_alerts)(self)

    async def fetch_silences(self) -> List[Silence]:
        return await with_timeout(self.timeout, error=SourceUnavailable)(fetch_silences)(self)

    async def classify_firing_alerts(self) -> Tuple[List[FiringAlert], List[FiringAlert]]:
        """Return (unsilenced, silenced) firing alerts.

        Both feeds are fetched concurrently; either failing raises SourceUnavailable.
        """
        firing, silences = await asyncio.gather(self.fetch_firing_alerts(), self.fetch_silences())
        unsilenced, silenced = partition_alerts(firing, silences)
        self.logger.debug(
            "Classified %d firing alerts: %d unsilenced, %d silenced",
            len(firing), len(unsilenced), len(silenced),
        )
        return unsilenced, silenced

    async def get_unsilenced_alerts(self) -> List[FiringAlert]:
        unsilenced, _ = await self.classify_firing_alerts()
        return unsilenced

    async def get_silenced_alerts(self) -> List[FiringAlert]:
        _, silenced = await self.classify_firing_alerts()
        return silenced

    async def create_silence(self, silence: Silence) -> Optional[str]:
        return await create_silence(self, silence)

    async def delete_silence(self, silence_id: str) -> None:
        await delete_silence(self, silence_id)
