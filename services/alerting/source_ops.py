"""
Read operations against the monitoring sources: the alerts Prometheus currently evaluates and the silences Alertmanager holds. Failures are raised as SourceUnavailable rather than reported as an empty result, so callers never mistake an outage for "nothing is firing".

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, List

import httpx
from pydantic import ValidationError

from models.alerting.alerts import AlertStatus, FiringAlert
from models.alerting.silences import Silence
from services.alerting.errors import SourceUnavailable


async def _get_json(service, url: str, what: str) -> Any:
    try:
        response = await service._client.get(url)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        service.logger.error("Error fetching %s: %s", what, exc)
        raise SourceUnavailable(f"failed to fetch {what}: {exc}") from exc
    except ValueError as exc:
        service.logger.error("Malformed %s response: %s", what, exc)
        raise SourceUnavailable(f"malformed {what} response: {exc}") from exc


async def fetch_firing_alerts(service) -> List[FiringAlert]:
    payload = await _get_json(service, f"{service.prometheus_url}/api/v1/alerts", "firing alerts")
    try:
        raw_alerts = payload["data"]["alerts"]
        alerts = [FiringAlert.model_validate(item) for item in raw_alerts or []]
    except (KeyError, TypeError, ValidationError) as exc:
        service.logger.error("Unexpected alerts payload shape: %s", exc)
        raise SourceUnavailable(f"malformed firing alerts response: {exc}") from exc
    return [alert for alert in alerts if alert.state == AlertStatus.FIRING.value]


async def fetch_silences(service) -> List[Silence]:
    payload = await _get_json(service, f"{service.alertmanager_url}/api/v2/silences", "silences")
    # v1 wraps the list in {"status": ..., "data": [...]}
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        service.logger.error("Unexpected silences payload type: %s", type(payload).__name__)
        raise SourceUnavailable("malformed silences response: expected a list")
    try:
        return [Silence.model_validate(item) for item in payload]
    except ValidationError as exc:
        service.logger.error("Invalid silence in response: %s", exc)
        raise SourceUnavailable(f"malformed silences response: {exc}") from exc
