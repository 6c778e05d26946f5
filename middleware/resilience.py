"""
Resilience decorators for outbound service calls.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import logging
from functools import wraps
from typing import Awaitable, Callable, Optional, TypeVar, ParamSpec

from config import config

logger = logging.getLogger(__name__)

P = ParamSpec('P')
T = TypeVar('T')


def with_timeout(
    timeout: float = config.DEFAULT_TIMEOUT,
    error: Optional[Callable[[str], Exception]] = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
            except asyncio.TimeoutError as exc:
                logger.error("Timeout after %ss for %s", timeout, func.__name__)
                if error is None:
                    raise
                raise error(f"{func.__name__} timed out after {timeout}s") from exc

        return wrapper
    return decorator
