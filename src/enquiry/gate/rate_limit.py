"""Per-key submission rate limiting.

Policy: at most one submission per ``min_interval_seconds`` from a key and
at most ``max_per_window`` submissions per window.  The window resets once
``now - window_started_at`` exceeds the window size.

``RateLimiter`` only touches state through the ``RateStore`` capability
(get / put-if-absent / compare-and-swap), so the read-then-write for one
request is atomic per key: two concurrent submissions from the same key
cannot both observe the same counters and both pass.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from typing import Protocol

import structlog

from enquiry.domain.models import GateDecision, RateState
from enquiry.domain.types import GateRejectionKind

logger = structlog.get_logger()

RATE_LIMITED_MESSAGE = "Too many submissions. Please wait before trying again."

# Bounded optimistic retries; contention on one key means a burst anyway.
_MAX_CAS_ATTEMPTS = 8


class RateStore(Protocol):
    """Keyed storage for ``RateState`` with atomic conditional writes."""

    def get(self, key: str) -> RateState | None:
        """Return the current state for ``key``, or ``None``."""
        ...

    def put_if_absent(self, key: str, state: RateState) -> bool:
        """Store ``state`` only if ``key`` has no state.  Return True on success."""
        ...

    def compare_and_swap(self, key: str, expected: RateState, new: RateState) -> bool:
        """Replace ``expected`` with ``new`` atomically.  Return True on success."""
        ...


class InMemoryRateStore:
    """Process-local ``RateStore`` guarded by a single lock.

    Suitable for a single worker process.  ``discard_idle`` lets the owner
    drop keys whose window has long expired so the map does not grow forever.
    """

    def __init__(self) -> None:
        self._states: dict[str, RateState] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> RateState | None:
        with self._lock:
            return self._states.get(key)

    def put_if_absent(self, key: str, state: RateState) -> bool:
        with self._lock:
            if key in self._states:
                return False
            self._states[key] = state
            return True

    def compare_and_swap(self, key: str, expected: RateState, new: RateState) -> bool:
        with self._lock:
            if self._states.get(key) != expected:
                return False
            self._states[key] = new
            return True

    def discard_idle(self, older_than: float) -> int:
        """Remove states whose window started before ``older_than``.

        Returns:
            The number of keys removed.
        """
        with self._lock:
            stale = [k for k, s in self._states.items() if s.window_started_at < older_than]
            for key in stale:
                del self._states[key]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)


class RateLimiter:
    """Apply the submission-frequency policy to one key per call.

    Args:
        store: Where per-key ``RateState`` lives.
        min_interval_seconds: Minimum spacing between accepted submissions.
        max_per_window: Maximum accepted submissions per window.
        window_seconds: Window size.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        store: RateStore,
        min_interval_seconds: int = 60,
        max_per_window: int = 5,
        window_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._min_interval = min_interval_seconds
        self._max_per_window = max_per_window
        self._window = window_seconds
        self._clock = clock

    def check(self, key: str) -> GateDecision:
        """Admit or reject one submission attempt from ``key``.

        An admitted attempt is counted immediately; a rejected attempt leaves
        the stored state untouched.

        Args:
            key: Session id or client IP.

        Returns:
            ``GateDecision`` with ``retry_after_seconds`` set on rejection.
        """
        now = self._clock()
        for _ in range(_MAX_CAS_ATTEMPTS):
            current = self._store.get(key)
            decision, new_state = self._evaluate(current, now)
            if new_state is None:
                return decision
            if current is None:
                if self._store.put_if_absent(key, new_state):
                    return decision
            elif self._store.compare_and_swap(key, current, new_state):
                return decision

        logger.warning("rate_state_contention", attempts=_MAX_CAS_ATTEMPTS)
        return GateDecision.reject(
            GateRejectionKind.RATE_LIMITED,
            RATE_LIMITED_MESSAGE,
            retry_after_seconds=self._min_interval,
        )

    def _evaluate(
        self, current: RateState | None, now: float
    ) -> tuple[GateDecision, RateState | None]:
        """Return the decision and the state to store (``None`` = no write)."""
        if current is None or now - current.window_started_at > self._window:
            fresh = RateState(last_submission_at=now, window_count=1, window_started_at=now)
            return GateDecision.allow(), fresh

        since_last = now - current.last_submission_at
        if since_last < self._min_interval:
            retry_after = math.ceil(self._min_interval - since_last)
            return self._reject(retry_after), None

        if current.window_count >= self._max_per_window:
            retry_after = math.ceil(current.window_started_at + self._window - now)
            return self._reject(retry_after), None

        updated = RateState(
            last_submission_at=now,
            window_count=current.window_count + 1,
            window_started_at=current.window_started_at,
        )
        return GateDecision.allow(), updated

    @staticmethod
    def _reject(retry_after: int) -> GateDecision:
        return GateDecision.reject(
            GateRejectionKind.RATE_LIMITED,
            RATE_LIMITED_MESSAGE,
            retry_after_seconds=max(1, retry_after),
        )
