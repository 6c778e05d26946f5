"""
Module defines Pydantic models for alert data structures used in the API layer: alerts delivered by the Alertmanager webhook, alerts as persisted by the alert store, and alerts reported as firing by Prometheus.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime
from typing import Dict, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DESC_CURRENT_STATUS_ALERT = "Current status of the alert"
DESC_KEY_VALUE_PAIRS_IDENTIFY_ALERT = "Key-value pairs that identify the alert"
DESC_ADDITIONAL_INFO_ALERT = "Additional information about the alert"
DESC_TIME_ALERT_STARTED_FIRING = "Time when the alert started firing"
DESC_TIME_ALERT_STOPPED_FIRING = "Time when the alert stopped firing"
DESC_URL_ALERT_GENERATOR = "URL of the alert generator"
DESC_UNIQUE_IDENTIFIER_ALERT = "Stable identifier of the alert label combination"
DESC_STORAGE_IDENTITY = "Storage-assigned identity"
DESC_ALERT_NAME = "Value of the alertname label"
DESC_CURRENT_STATE_ALERT = "Current state of the alert"
DESC_TIME_ALERT_ACTIVE = "Time when the alert became active"
DESC_ALERT_VALUE = "Sample value that triggered the alert"

ALERTNAME_LABEL = "alertname"


class AlertStatus(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


class WebhookAlert(BaseModel):
    status: AlertStatus = Field(..., description=DESC_CURRENT_STATUS_ALERT)
    labels: Dict[str, str] = Field(..., description=DESC_KEY_VALUE_PAIRS_IDENTIFY_ALERT)
    annotations: Dict[str, str] = Field(default_factory=dict, description=DESC_ADDITIONAL_INFO_ALERT)
    starts_at: datetime = Field(..., alias="startsAt", description=DESC_TIME_ALERT_STARTED_FIRING)
    ends_at: Optional[datetime] = Field(None, alias="endsAt", description=DESC_TIME_ALERT_STOPPED_FIRING)
    generator_url: str = Field("", alias="generatorURL", description=DESC_URL_ALERT_GENERATOR)
    fingerprint: str = Field(..., min_length=1, description=DESC_UNIQUE_IDENTIFIER_ALERT)

    model_config = ConfigDict(populate_by_name=True, extra="forbid", use_enum_values=True)

    @field_validator("labels")
    @classmethod
    def _require_alertname(cls, labels: Dict[str, str]) -> Dict[str, str]:
        if not labels.get(ALERTNAME_LABEL):
            raise ValueError("labels must include a non-empty alertname")
        return labels

    @field_validator("ends_at")
    @classmethod
    def _drop_zero_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Alertmanager sends 0001-01-01T00:00:00Z while an alert is still firing
        if value is not None and value.year <= 1:
            return None
        return value

    @property
    def alert_name(self) -> str:
        return self.labels[ALERTNAME_LABEL]


class StoredAlert(BaseModel):
    id: int = Field(..., description=DESC_STORAGE_IDENTITY)
    fingerprint: str = Field(..., description=DESC_UNIQUE_IDENTIFIER_ALERT)
    alert_name: str = Field(..., description=DESC_ALERT_NAME)
    status: str = Field(..., description=DESC_CURRENT_STATUS_ALERT)
    labels: Dict[str, str] = Field(default_factory=dict, description=DESC_KEY_VALUE_PAIRS_IDENTIFY_ALERT)
    annotations: Dict[str, str] = Field(default_factory=dict, description=DESC_ADDITIONAL_INFO_ALERT)
    start_time: datetime = Field(..., description=DESC_TIME_ALERT_STARTED_FIRING)
    end_time: Optional[datetime] = Field(None, description=DESC_TIME_ALERT_STOPPED_FIRING)
    generator_url: Optional[str] = Field(None, alias="generatorURL", description=DESC_URL_ALERT_GENERATOR)

    model_config = ConfigDict(populate_by_name=True)


class FiringAlert(BaseModel):
    labels: Dict[str, str] = Field(default_factory=dict, description=DESC_KEY_VALUE_PAIRS_IDENTIFY_ALERT)
    annotations: Dict[str, str] = Field(default_factory=dict, description=DESC_ADDITIONAL_INFO_ALERT)
    state: str = Field(..., description=DESC_CURRENT_STATE_ALERT)
    active_at: Optional[str] = Field(None, alias="activeAt", description=DESC_TIME_ALERT_ACTIVE)
    value: Optional[str] = Field(None, description=DESC_ALERT_VALUE)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
