"""
Request models for alerting-related API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.alerting.alerts import WebhookAlert


class AlertmanagerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    receiver: str = ""
    status: str = ""
    alerts: List[WebhookAlert] = Field(default_factory=list)
    group_labels: Dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: Dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: Dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field("", alias="externalURL")
    version: str = ""
    group_key: str = Field("", alias="groupKey")
    truncated_alerts: Optional[int] = Field(None, alias="truncatedAlerts")
