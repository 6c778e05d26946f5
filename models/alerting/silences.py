"""
Module defines Pydantic models for Alertmanager silences and their label matchers used in the API layer.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

# Description constants
DESC_LABEL_NAME_MATCH = "Label name to match"
DESC_VALUE_MATCH_AGAINST = "Value to match against"
DESC_VALUE_IS_REGEX = "Whether the value is a regular expression"
DESC_MATCH_EQUAL_VALUES = "Whether to match equal values"
DESC_UNIQUE_IDENTIFIER_SILENCE = "Unique identifier for the silence"
DESC_MATCHERS_DEFINE_SILENCE = "Matchers that define which alerts to silence"
DESC_TIME_SILENCE_STARTS = "Time when the silence starts"
DESC_TIME_SILENCE_ENDS = "Time when the silence ends"
DESC_USER_CREATED_SILENCE = "User who created the silence"
DESC_COMMENT_EXPLAINING_SILENCE = "Comment explaining the silence"
DESC_CURRENT_STATUS_SILENCE = "Current status of the silence"
DESC_SILENCE_STATE = "State of the silence"
DESC_TIME_SILENCE_UPDATED = "Time when the silence was last updated"

# Fields owned by Alertmanager and never submitted on create
_SERVER_OWNED_FIELDS = {"status", "updated_at"}


class SilenceState(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"


class Matcher(BaseModel):
    name: str = Field(..., description=DESC_LABEL_NAME_MATCH)
    value: str = Field(..., description=DESC_VALUE_MATCH_AGAINST)
    is_regex: bool = Field(False, alias="isRegex", description=DESC_VALUE_IS_REGEX)
    is_equal: bool = Field(False, alias="isEqual", description=DESC_MATCH_EQUAL_VALUES)

    model_config = ConfigDict(populate_by_name=True)


class SilenceStatus(BaseModel):
    state: str = Field(..., description=DESC_SILENCE_STATE)


class Silence(BaseModel):
    id: Optional[str] = Field(None, description=DESC_UNIQUE_IDENTIFIER_SILENCE)
    matchers: List[Matcher] = Field(..., description=DESC_MATCHERS_DEFINE_SILENCE)
    starts_at: str = Field(..., alias="startsAt", description=DESC_TIME_SILENCE_STARTS)
    ends_at: str = Field(..., alias="endsAt", description=DESC_TIME_SILENCE_ENDS)
    created_by: str = Field("", alias="createdBy", description=DESC_USER_CREATED_SILENCE)
    comment: str = Field("", description=DESC_COMMENT_EXPLAINING_SILENCE)
    status: Optional[SilenceStatus] = Field(None, description=DESC_CURRENT_STATUS_SILENCE)
    updated_at: Optional[str] = Field(None, alias="updatedAt", description=DESC_TIME_SILENCE_UPDATED)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_active(self) -> bool:
        return self.status is not None and self.status.state == SilenceState.ACTIVE.value

    def to_postable(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude=_SERVER_OWNED_FIELDS)
