from __future__ import annotations

from typing import Optional

from ...core.enums import PunctualityStatus
from .base import PunctualityStrategy, StatusDecision


class IncomingStrategy(PunctualityStrategy):
    """Shift not started yet (or still inside the grace window)."""

    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        return StatusDecision(status=PunctualityStatus.INCOMING, is_on_time=False)
