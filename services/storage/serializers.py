"""
Serializers for the alert store, converting between webhook alerts, database column values, and the stored alert API model. Label and annotation maps are kept as JSON text in the database and timestamps are kept in one canonical form: naive UTC truncated to whole seconds.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.alerting.alerts import StoredAlert, WebhookAlert
from services.alerting.errors import DecodeError, StorageError

logger = logging.getLogger(__name__)

CANONICAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def from_storage_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.strptime(value, CANONICAL_TIME_FORMAT)
        except ValueError as exc:
            raise DecodeError(f"failed to parse stored timestamp {value!r}") from exc
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def encode_map(value: Dict[str, str], field: str) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise StorageError(f"failed to marshal {field}: {exc}") from exc


def decode_map(raw: Optional[str], field: str, fingerprint: str) -> Dict[str, str]:
    if raw is None or raw == "":
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"failed to parse {field} JSON for alert {fingerprint}: {exc}") from exc
    if not isinstance(parsed, dict):
        raise DecodeError(f"{field} for alert {fingerprint} is not a JSON object")
    return {str(k): str(v) for k, v in parsed.items()}


def alert_to_row_values(alert: WebhookAlert) -> Dict[str, Any]:
    return {
        "fingerprint": alert.fingerprint,
        "status": str(alert.status),
        "alert_name": alert.alert_name,
        "start_time": to_storage_time(alert.starts_at),
        "end_time": to_storage_time(alert.ends_at),
        "generator_url": alert.generator_url,
        "labels": encode_map(alert.labels, "labels"),
        "annotations": encode_map(alert.annotations, "annotations"),
    }


def row_to_pydantic(row) -> StoredAlert:
    payload = {
        "id": row.id,
        "fingerprint": row.fingerprint,
        "alert_name": row.alert_name,
        "status": row.status,
        "labels": decode_map(row.labels, "labels", row.fingerprint),
        "annotations": decode_map(row.annotations, "annotations", row.fingerprint),
        "start_time": from_storage_time(row.start_time),
        "end_time": from_storage_time(row.end_time),
        "generatorURL": row.generator_url,
    }
    return StoredAlert.model_validate(payload)
