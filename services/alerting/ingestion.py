"""
Ingestion pipeline for Alertmanager webhook notifications. A batch is decoded strictly, then every alert in it is handed to the alert store as an independent background task. The webhook caller is acknowledged once the tasks are scheduled; storage outcomes are only logged. Delivery is at-least-once and best effort, and the store's fingerprint upsert is the only point where concurrent writes for the same alert converge.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import logging
from typing import Iterable, Set, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from models.alerting.alerts import WebhookAlert
from models.alerting.requests import AlertmanagerPayload
from services.alerting.errors import InvalidPayload, StorageError
from services.storage.alerts import AlertStore

logger = logging.getLogger(__name__)


def decode_payload(raw: Union[bytes, str]) -> AlertmanagerPayload:
    try:
        return AlertmanagerPayload.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Rejected webhook payload: %s", exc.errors(include_url=False))
        raise InvalidPayload("invalid JSON payload") from exc


class IngestionPipeline:
    def __init__(self, store: AlertStore):
        self._store = store
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, alerts: Iterable[WebhookAlert]) -> int:
        count = 0
        for alert in alerts:
            task = asyncio.create_task(self._process(alert), name=f"ingest-{alert.fingerprint}")
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
            count += 1
        logger.info("Dispatched %d alerts for storage", count)
        return count

    async def _process(self, alert: WebhookAlert) -> None:
        try:
            await run_in_threadpool(self._store.upsert, alert)
        except StorageError as exc:
            logger.error("Failed to save alert %s (%s): %s", alert.alert_name, alert.fingerprint, exc)
            return
        logger.info("Completed processing alert: %s", alert.alert_name)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Ingestion task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Ingestion task %s failed unexpectedly", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        """Wait for every in-flight ingestion task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
