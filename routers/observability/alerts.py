"""
Router for alert endpoints: the Alertmanager webhook that feeds the alert store, the stored alert listing, the firing alert views split by silence state, and silence creation and deletion.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Request
from fastapi.concurrency import run_in_threadpool

from config import constants
from middleware.error_handlers import handle_route_errors
from models.alerting.alerts import FiringAlert, StoredAlert
from models.alerting.silences import Silence
from services.alertmanager_service import AlertManagerService
from services.alerting.ingestion import IngestionPipeline, decode_payload
from services.storage.alerts import AlertStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["alerts"])
webhook_router = APIRouter(tags=["alertmanager-webhooks"])

alert_store = AlertStore()
ingestion_pipeline = IngestionPipeline(alert_store)
alertmanager_service = AlertManagerService()


@webhook_router.post("/alerts")
@handle_route_errors()
async def alert_webhook(request: Request) -> dict:
    payload = decode_payload(await request.body())
    logger.info("Received webhook payload with %d alerts from %s", len(payload.alerts), payload.receiver or "-")
    ingestion_pipeline.dispatch(payload.alerts)
    return {"status": constants.STATUS_SUCCESS}


@router.get("/alerts", response_model=List[StoredAlert])
@handle_route_errors(server_error_detail="failed to retrieve alerts")
async def list_stored_alerts():
    return await run_in_threadpool(alert_store.list_alerts)


@router.get("/alerts/firing", response_model=List[FiringAlert])
@handle_route_errors(server_error_detail="Error fetching firing alerts")
async def get_firing_alerts():
    return await alertmanager_service.get_unsilenced_alerts()


@router.get("/alerts/silences", response_model=List[FiringAlert])
@handle_route_errors(server_error_detail="Error fetching silenced alerts")
async def get_silenced_alerts():
    return await alertmanager_service.get_silenced_alerts()


@router.get("/silences", response_model=List[Silence])
@handle_route_errors(server_error_detail="Error fetching silences")
async def get_silences():
    return await alertmanager_service.fetch_silences()


@router.post("/alerts/silences")
@handle_route_errors(server_error_detail="Error creating silence")
async def create_silence(silence: Silence = Body(...)) -> dict:
    await alertmanager_service.create_silence(silence)
    return {"status": constants.STATUS_SUCCESS}


@router.delete("/alerts/silences")
@router.delete("/alerts/silences/")
@handle_route_errors()
async def delete_silence_without_id() -> dict:
    await alertmanager_service.delete_silence("")
    return {"status": constants.STATUS_SUCCESS}


@router.delete("/alerts/silences/{silence_id}")
@handle_route_errors(server_error_detail="Error deleting silence")
async def delete_silence(silence_id: str) -> dict:
    await alertmanager_service.delete_silence(silence_id)
    return {"status": constants.STATUS_SUCCESS}
