"""Bounded retry with exponential backoff for outgoing calls."""
from __future__ import annotations

import logging
import random
import time
from functools import wraps
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)


def retry(
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
):
    """Retry the wrapped call on ``exceptions``; re-raise after the last attempt."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = getattr(func, "__name__", type(func).__name__)

        @wraps(func)
        def wrapped(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    if attempt >= max_attempts - 1:
                        raise
                    delay = min(max_delay, base_delay * (2 ** attempt))
                    if delay:
                        delay = delay + random.uniform(0, delay / 2)
                    logger.warning(
                        "%s failed (attempt %s/%s), retrying: %s",
                        name,
                        attempt + 1,
                        max_attempts,
                        exc,
                    )
                    if delay:
                        sleep(delay)

        return wrapped

    return decorator
