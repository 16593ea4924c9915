"""Token bucket no bloqueante.

Sin timers en segundo plano: la recarga se calcula de forma perezosa en cada
`take()` a partir del tiempo transcurrido.
"""

from __future__ import annotations

import threading
import time
from typing import Callable


class TokenBucket:
    """Capacidad `capacity`, recarga `rate` tokens/segundo."""

    def __init__(
        self,
        capacity: int = 6,
        rate: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if rate <= 0:
            raise ValueError("rate must be > 0")
        self._capacity = capacity
        self._rate = rate
        self._clock = clock
        self._tokens = float(capacity)
        self._last = clock()
        self._lock = threading.Lock()

    @property
    def available(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last
        if elapsed > 0:
            self._tokens = min(float(self._capacity), self._tokens + elapsed * self._rate)
            self._last = now

    def take(self, cost: int = 1) -> bool:
        """Consume `cost` tokens si hay; nunca espera."""

        with self._lock:
            self._refill()
            if self._tokens >= cost:
                self._tokens -= cost
                return True
            return False
