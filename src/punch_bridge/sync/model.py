from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import OutcomeStatus
from ..sessions.model import Intent


@dataclass(frozen=True)
class PunchOutcome:
    """What happened to one punch after it went through the bridge."""

    status: OutcomeStatus
    subject_id: str
    instant: datetime
    employee_id: Optional[int] = None
    intent: Optional[Intent] = None
    session_id: Optional[int] = None
    error: Optional[str] = None
    retryable: bool = False


@dataclass
class SyncReport:
    """Read-model for one ingestion cycle."""

    source: str
    outcomes: list[PunchOutcome] = field(default_factory=list)
    skipped_non_today: int = 0

    def add(self, outcome: PunchOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def counts(self) -> dict[str, int]:
        counter = Counter(o.status.value for o in self.outcomes)
        return dict(counter)

    @property
    def retryable_failures(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.FAILED and o.retryable)

    @property
    def writes(self) -> int:
        return sum(
            1
            for o in self.outcomes
            if o.status in (OutcomeStatus.CREATED, OutcomeStatus.CLOSED, OutcomeStatus.CREATED_AND_CLOSED)
        )

    def as_dict(self) -> dict:
        return {
            "source": self.source,
            "punches": len(self.outcomes),
            "skipped_non_today": self.skipped_non_today,
            "writes": self.writes,
            "retryable_failures": self.retryable_failures,
            "counts": self.counts,
        }
