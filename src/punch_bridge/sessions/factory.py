from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.enums import BatchPolicy
from .strategies.base import BatchStrategy
from .strategies.strict_strategy import StrictBatchStrategy
from .strategies.synthesizing_strategy import SynthesizingBatchStrategy

logger = logging.getLogger(__name__)


@dataclass
class BatchStrategyFactory:
    """Factory Pattern: choose how a punch pair is written.

    Every shipped repository (Odoo, MySQL, memory) supports session lookup,
    so in production the synthesizing strategy is selected only by
    ``BATCH_POLICY=synthesize``. The lookup-unavailable fallback covers
    third-party repositories that set ``supports_lookup = False``.
    """

    policy: BatchPolicy = BatchPolicy.STRICT

    def for_batch(self, *, lookup_available: bool) -> BatchStrategy:
        if self.policy == BatchPolicy.STRICT and lookup_available:
            return StrictBatchStrategy()

        if self.policy == BatchPolicy.STRICT:
            logger.warning("Backend has no session lookup; synthesizing [first, last] sessions")
        return SynthesizingBatchStrategy()
