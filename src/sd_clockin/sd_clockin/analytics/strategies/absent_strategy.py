from __future__ import annotations

from typing import Optional

from ...core.enums import PunctualityStatus
from .base import PunctualityStrategy, StatusDecision


class AbsentStrategy(PunctualityStrategy):
    """No clock-in and the shift can no longer be made on time."""

    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        return StatusDecision(status=PunctualityStatus.ABSENT, is_on_time=False)
