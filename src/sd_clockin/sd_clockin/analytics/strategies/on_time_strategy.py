from __future__ import annotations

from typing import Optional

from ...core.enums import PunctualityStatus
from .base import PunctualityStrategy, StatusDecision


class OnTimeStrategy(PunctualityStrategy):
    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        return StatusDecision(status=PunctualityStatus.ON_TIME, is_on_time=True)
