from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import PunctualityStatus


@dataclass(frozen=True)
class StatusDecision:
    status: PunctualityStatus
    is_on_time: bool
    note: Optional[str] = None


class PunctualityStrategy(ABC):
    """Strategy Pattern: encapsulate how a scheduled shift is classified.

    ``shift_start`` and ``clock_in`` are minutes since local midnight;
    ``clock_in`` is ``None`` when nobody clocked in for the shift.
    """

    @abstractmethod
    def decide(self, *, shift_start: int, clock_in: Optional[int]) -> StatusDecision:
        raise NotImplementedError
