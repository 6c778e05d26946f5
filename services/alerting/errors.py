"""
Error taxonomy for alert ingestion, storage, source access, and silence lifecycle operations.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Optional


class AlertingError(Exception):
    """Base class for every error raised by the alerting core."""


class InvalidPayload(AlertingError):
    """Client supplied data that does not decode against the expected schema."""


class SilenceIDNotFound(AlertingError):
    def __init__(self, message: str = "silence ID is required") -> None:
        super().__init__(message)


class SourceUnavailable(AlertingError):
    """Prometheus or Alertmanager could not be reached or returned an unusable response."""


class StorageError(AlertingError):
    """The alert store failed to read or write."""


class DecodeError(AlertingError):
    """A stored or upstream JSON document could not be decoded."""


class _UpstreamRejected(AlertingError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
        detail = message
        if status_code is not None:
            detail = f"{detail}, status code: {status_code}"
        if body:
            detail = f"{detail}, response: {body}"
        super().__init__(detail)
        self.status_code = status_code
        self.body = body


class SilenceCreateFailed(_UpstreamRejected):
    pass


class SilenceDeleteFailed(_UpstreamRejected):
    pass
