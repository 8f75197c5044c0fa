from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..checkins.model import CheckIn
from ..core.enums import CurrentStatus, StudentRole


@dataclass(frozen=True)
class Student:
    """Domain entity: a student worker identified by their card."""

    student_id: int
    name: str
    card_id: str
    role: StudentRole
    is_active: bool = True


@dataclass(frozen=True)
class StudentTermView:
    """Read-model for the dashboard: a student plus live status in a term."""

    student: Student
    current_status: CurrentStatus
    today_actual: Optional[datetime] = None
    expected_start: Optional[str] = None
    expected_end: Optional[str] = None
    weekly_schedule: dict = field(default_factory=dict)
    clock_entries: Sequence[CheckIn] = ()
