"""
Fixed-window admission limiter.

Each admission key owns one :class:`RateWindowEntry`. A request at time ``t``:

- resets the entry to ``count=1`` and ``window_end=t+window`` when there is
  no entry or ``t`` is past ``window_end`` (admitted);
- increments the count when it is below ``max_requests`` (admitted);
- is rejected otherwise.

Up to twice the nominal rate can pass across a window boundary. Entries live
in process memory and are never evicted.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass


Clock = Callable[[], float]


@dataclass(slots=True)
class RateWindowEntry:
    """
    Counter for one admission key.

    :ivar count: Requests admitted in the current window (``<= max_requests``).
    :ivar window_end: Clock reading at which the window closes.
    """

    count: int
    window_end: float


class FixedWindowLimiter:
    """
    Per-key fixed-window counter guarded by a single lock.

    :param max_requests: Admissions allowed per window (``>= 1``).
    :param window: Window length in seconds (``> 0``).
    :param clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Clock = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.max_requests = max_requests
        self.window = float(window)
        self._clock = clock
        self._entries: dict[str, RateWindowEntry] = {}
        self._lock = threading.Lock()

    def admit(self, key: str) -> bool:
        """Return ``True`` when the request identified by ``key`` may proceed."""
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None or now > entry.window_end:
                self._entries[key] = RateWindowEntry(count=1, window_end=now + self.window)
                return True
            if entry.count < self.max_requests:
                entry.count += 1
                return True
            return False

    def peek(self, key: str) -> RateWindowEntry | None:
        """Return a copy of the entry for ``key`` (diagnostics and tests)."""
        with self._lock:
            entry = self._entries.get(key)
            return None if entry is None else RateWindowEntry(entry.count, entry.window_end)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AdmissionLimiters(Mapping[str, FixedWindowLimiter]):
    """
    Named limiters built once at application startup.

    Route decorators look limiters up by name (``"register"``, ``"login"``).
    Unknown names raise ``KeyError`` so a typo fails loudly on first use.
    """

    def __init__(self, limiters: Mapping[str, FixedWindowLimiter] | None = None) -> None:
        self._limiters: dict[str, FixedWindowLimiter] = dict(limiters or {})

    @classmethod
    def from_rules(
        cls, rules: Mapping[str, tuple[int, int]], clock: Clock = time.monotonic
    ) -> AdmissionLimiters:
        """Build limiters from ``{name: (max_requests, window_seconds)}``."""
        return cls(
            {
                name: FixedWindowLimiter(max_requests, window, clock)
                for name, (max_requests, window) in rules.items()
            }
        )

    def __getitem__(self, name: str) -> FixedWindowLimiter:
        return self._limiters[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._limiters)

    def __len__(self) -> int:
        return len(self._limiters)
