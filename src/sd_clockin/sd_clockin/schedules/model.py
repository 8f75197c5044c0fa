from __future__ import annotations

from dataclasses import dataclass, field

from ..core.constants import DEFAULT_TIMEZONE, WEEKDAYS


def empty_availability() -> dict[str, list[str]]:
    return {day: [] for day in WEEKDAYS}


@dataclass(frozen=True)
class Schedule:
    """Weekly availability of one student in one term.

    ``availability`` maps monday..friday to normalized "HH:MM-HH:MM" blocks.
    """

    schedule_id: int
    student_id: int
    term_id: int
    availability: dict = field(default_factory=empty_availability)
    timezone: str = DEFAULT_TIMEZONE
