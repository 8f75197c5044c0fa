from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.constants import PUNCTUALITY_GRACE_MINUTES
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import PunctualityStrategy
from .strategies.early_strategy import EarlyStrategy
from .strategies.incoming_strategy import IncomingStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class PunctualityStrategyFactory:
    """Factory Pattern: choose the strategy for a shift based on timing rules."""

    grace_minutes: int = PUNCTUALITY_GRACE_MINUTES

    def for_clock_in(self, *, shift_start: int, clock_in: int) -> PunctualityStrategy:
        diff = clock_in - shift_start
        if diff < -self.grace_minutes:
            return EarlyStrategy()
        if diff <= self.grace_minutes:
            return OnTimeStrategy()
        return LateStrategy()

    def for_missing_clock_in(self, *, shift_start: int, day: date, today: date, now_minutes: int) -> PunctualityStrategy:
        if day == today:
            if now_minutes - shift_start <= self.grace_minutes:
                return IncomingStrategy()
            return AbsentStrategy()
        if day < today:
            return AbsentStrategy()
        return IncomingStrategy()
