"""
Round-Robin Endpoint Selection

Per-service rotation counters shared by every caller of one client. The
selection index is recomputed against the endpoint list passed on each call,
so rotation stays fair as the topology changes without being sticky.
"""

import builtins
import threading
from collections.abc import Sequence

from .core import Endpoint

# After the counter wraps from 2**32 - 1 to 0 the next index is N - 1, which
# breaks the rotation once per 2**32 selections unless N divides 2**32 (for
# N = 3 the same endpoint is picked twice in a row).
COUNTER_MODULUS = 2**32


class RotationCounter:
    """Unsigned 32-bit counter with an atomic increment."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        """Increment and return the new value, wrapping on overflow."""
        with self._lock:
            self._value = (self._value + 1) % COUNTER_MODULUS
            return self._value


class RotationTable:
    """Mapping from service name to its rotation counter.

    Counters are created lazily on first selection and are never evicted.
    Safe to share between threads and asyncio tasks.
    """

    def __init__(self) -> None:
        self._counters: builtins.dict[str, RotationCounter] = {}
        self._lock = threading.Lock()

    def _counter_for(self, service_name: str) -> RotationCounter:
        counter = self._counters.get(service_name)
        if counter is None:
            with self._lock:
                counter = self._counters.setdefault(service_name, RotationCounter())
        return counter

    def select_next(
        self, service_name: str, endpoints: Sequence[Endpoint]
    ) -> Endpoint | None:
        """Select the next endpoint for a service in round-robin order.

        Returns None when ``endpoints`` is empty.
        """
        if not endpoints:
            return None

        index = self._counter_for(service_name).increment()
        # counter starts at 1 after the first increment, indices start at 0
        return endpoints[(index - 1) % len(endpoints)]

    def counter(self, service_name: str) -> int:
        """Current counter value for a service (0 if never selected)."""
        counter = self._counters.get(service_name)
        return counter.value if counter else 0

    def __len__(self) -> int:
        return len(self._counters)

    def __contains__(self, service_name: object) -> bool:
        return service_name in self._counters
