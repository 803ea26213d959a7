"""A thread-safe single-value cache with an absolute expiry time."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class ExpiringCache(Generic[T]):
    """Holds one value until a given moment, read through a clock."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._value: Optional[T] = None
        self._expires_at: Optional[datetime] = None

    def get(self) -> Optional[T]:
        """Return the cached value, or None once it has expired or was never set."""
        with self._lock:
            if self._expires_at is not None and self._clock() < self._expires_at:
                return self._value
            return None

    def set(self, value: T, expires_at: datetime) -> None:
        """Store a value that stays valid until ``expires_at``."""
        with self._lock:
            self._value = value
            self._expires_at = expires_at

    def expires_at(self) -> Optional[datetime]:
        """The moment the current value expires, or None if nothing was stored."""
        with self._lock:
            return self._expires_at