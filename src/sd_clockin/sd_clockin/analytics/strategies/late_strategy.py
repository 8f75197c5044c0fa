from __future__ import annotations

from typing import Optional

from ...core.enums import PunctualityStatus
from .base import PunctualityStrategy, StatusDecision


class LateStrategy(PunctualityStrategy):
    """Late clock-in."""

    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        minutes = (clock_in or shift_start) - shift_start
        return StatusDecision(status=PunctualityStatus.LATE, is_on_time=False, note=f"{minutes} min late")
