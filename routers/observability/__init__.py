"""
Routers for observability-related endpoints: alert ingestion, stored alerts, firing alert classification, and silences.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from .alerts import router as alerts_router, webhook_router as alerts_webhook_router

__all__ = [
    "alerts_router",
    "alerts_webhook_router",
]
