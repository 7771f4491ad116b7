from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import PunchState


@dataclass(frozen=True)
class PunchEvent:
    """One punch recorded by the terminal, with its instant already in UTC."""

    subject_id: str
    instant: datetime
    raw_state: PunchState = PunchState.UNKNOWN

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.subject_id, self.instant)


@dataclass(frozen=True)
class NormalizedTime:
    instant: datetime
    civil_day: str


@dataclass(frozen=True)
class DeviceUser:
    """User record stored on the terminal."""

    subject_id: str
    name: str
    uid: int | None = None
