from __future__ import annotations

from typing import Optional

from ...core.enums import PunctualityStatus
from .base import PunctualityStrategy, StatusDecision


class EarlyStrategy(PunctualityStrategy):
    """Clocked in well before the shift; still counts as on time."""

    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        minutes = shift_start - (clock_in or shift_start)
        return StatusDecision(status=PunctualityStatus.EARLY, is_on_time=True, note=f"{minutes} min early")
