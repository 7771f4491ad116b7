from __future__ import annotations

from ..core.constants import DEFAULT_BACKOFF_INITIAL_SECONDS, DEFAULT_BACKOFF_MAX_SECONDS


class Backoff:
    """Exponential delay schedule: initial, initial*factor, ... capped at maximum."""

    def __init__(
        self,
        initial: float = DEFAULT_BACKOFF_INITIAL_SECONDS,
        factor: float = 2.0,
        maximum: float = DEFAULT_BACKOFF_MAX_SECONDS,
    ):
        if initial <= 0 or factor < 1 or maximum < initial:
            raise ValueError("invalid backoff parameters")
        self._initial = float(initial)
        self._factor = float(factor)
        self._maximum = float(maximum)
        self._failures = 0

    @property
    def failures(self) -> int:
        return self._failures

    def next_delay(self) -> float:
        delay = min(self._initial * (self._factor ** min(self._failures, 64)), self._maximum)
        self._failures += 1
        return delay

    def reset(self) -> None:
        self._failures = 0
