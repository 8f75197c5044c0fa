from __future__ import annotations

from enum import Enum


class StudentRole(str, Enum):
    """Roles a student worker can hold at the desk."""

    STUDENT_LEAD = "Student Lead"
    ASSISTANT = "Assistant"


class CheckInType(str, Enum):
    IN = "in"
    OUT = "out"


class ShiftStatus(str, Enum):
    """Lifecycle of a daily shift record."""

    SCHEDULED = "scheduled"
    STARTED = "started"
    COMPLETED = "completed"
    MISSED = "missed"


class ShiftSource(str, Enum):
    MANUAL = "manual"
    RECURRING = "recurring"


class PunctualityStatus(str, Enum):
    """Outcome of matching a scheduled shift against clock entries."""

    EARLY = "early"
    ON_TIME = "on-time"
    LATE = "late"
    ABSENT = "absent"
    INCOMING = "incoming"


class CurrentStatus(str, Enum):
    """Live status shown on the dashboard for a student."""

    PRESENT = "present"
    CLOCKED_OUT = "clocked_out"
    ABSENT = "absent"
    INCOMING = "incoming"
    OFF = "off"


class DayStatus(str, Enum):
    DAY_OFF = "day-off"
    NOT_SCHEDULED = "not-scheduled"
    ABSENT = "absent"
    UNSCHEDULED_WORK = "unscheduled-work"
    NO_CLOCK_OUT = "no-clock-out"
    COMPLETED = "completed"


class PunctualityPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    TERM = "term"
