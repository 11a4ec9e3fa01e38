"""Common utility functions."""

import time
from typing import Any, Callable


def get_value(obj: Any, key: str) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


class Deadline:
    """Wall-clock budget for a run, measured on a monotonic clock."""

    def __init__(self, seconds: float | None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = None if not seconds or seconds <= 0 else clock() + seconds

    def remaining(self) -> float | None:
        """Seconds left, or None when there is no limit."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0
