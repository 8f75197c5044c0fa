from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import CheckInType


@dataclass(frozen=True)
class CheckIn:
    """A single clock-in or clock-out event.

    ``timestamp`` is naive UTC when read from storage; analytics work on
    copies converted to local wall-clock time.
    """

    checkin_id: int
    student_id: int
    term_id: int
    type: CheckInType
    timestamp: datetime
    is_manual: bool = False
    is_auto_clock_out: bool = False
