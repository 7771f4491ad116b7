from __future__ import annotations

from collections import defaultdict
from typing import Callable, Hashable, Iterable, Optional

from .model import PunchEvent
from .normalizer import TimeNormalizer


class SessionBatcher:
    """Collapse a poll batch into one (first, last) pair per key.

    Only used when per-punch reconciliation is not wanted; the pair loses
    every punch in between, and with it any extra sessions of the day.
    """

    def batch(
        self,
        punches: Iterable[PunchEvent],
        window_key: Optional[Callable[[PunchEvent], Hashable]] = None,
    ) -> dict[Hashable, tuple[PunchEvent, PunchEvent]]:
        key_of = window_key or (lambda p: p.subject_id)

        grouped: dict[Hashable, list[PunchEvent]] = defaultdict(list)
        for punch in punches:
            grouped[key_of(punch)].append(punch)

        out: dict[Hashable, tuple[PunchEvent, PunchEvent]] = {}
        for key, items in grouped.items():
            # Ties on instant are broken by state so the pair does not depend on arrival order.
            items.sort(key=lambda p: (p.instant, p.raw_state.value))
            out[key] = (items[0], items[-1])
        return out

    def batch_by_day(
        self,
        punches: Iterable[PunchEvent],
        normalizer: TimeNormalizer,
    ) -> dict[Hashable, tuple[PunchEvent, PunchEvent]]:
        return self.batch(punches, window_key=lambda p: (p.subject_id, normalizer.civil_day(p.instant)))
