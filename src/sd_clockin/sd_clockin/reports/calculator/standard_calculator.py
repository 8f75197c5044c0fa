from __future__ import annotations

from ...core.constants import MAX_SESSION_HOURS
from ..model import SessionRow
from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Clock-out minus clock-in. Open or implausibly long sessions count 0."""

    def worked_minutes(self, row: SessionRow) -> int:
        if not row.clock_out:
            return 0
        minutes = int((row.clock_out - row.clock_in).total_seconds() // 60)
        if minutes <= 0 or minutes >= MAX_SESSION_HOURS * 60:
            return 0
        return minutes
