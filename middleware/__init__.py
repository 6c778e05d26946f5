"""
Middleware components for AlertKeeper API.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from .resilience import with_timeout
from .limits import RequestSizeLimitMiddleware, ConcurrencyLimitMiddleware
from .audit import request_logging_middleware, security_headers_middleware

__all__ = [
    "with_timeout",
    "RequestSizeLimitMiddleware",
    "ConcurrencyLimitMiddleware",
    "request_logging_middleware",
    "security_headers_middleware",
]
