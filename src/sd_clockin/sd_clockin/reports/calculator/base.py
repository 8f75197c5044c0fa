from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import SessionRow


class HoursCalculator(ABC):
    """Strategy for turning a session into worked minutes."""

    @abstractmethod
    def worked_minutes(self, row: SessionRow) -> int:
        raise NotImplementedError
