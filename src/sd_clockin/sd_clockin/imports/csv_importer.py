"""Turn a Teams shift export into weekly availability per student.

Columns: Name, Email, Role, StartDate (MM/DD/YYYY), StartTime, EndDate,
EndTime, ... The earliest start date in the file is taken to be a Monday.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.constants import WEEKDAYS
from ..core.exceptions import ValidationError
from ..schedules.model import empty_availability
from ..schedules.parser import normalize_time_block

logger = logging.getLogger(__name__)

_WEEK = WEEKDAYS + ("saturday", "sunday")
_MIN_COLUMNS = 7


@dataclass(frozen=True)
class ShiftRow:
    name: str
    start_date: str
    start_time: str
    end_date: str
    end_time: str


@dataclass
class ImportedSchedule:
    name: str
    availability: dict = field(default_factory=empty_availability)


@dataclass(frozen=True)
class MatchedSchedule:
    student_id: Optional[int]
    student_name: str
    csv_name: str
    availability: dict
    matched: bool


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line; quoted fields may contain commas and "" escapes."""
    return next(csv.reader([line]), [])


def parse_row(line: str) -> Optional[ShiftRow]:
    if line.strip().lower().startswith("name"):
        return None

    parts = parse_csv_line(line)
    if len(parts) < _MIN_COLUMNS:
        logger.warning("CSV row has insufficient columns (%s): %s", len(parts), line)
        return None

    name = parts[0].strip()
    start_date, start_time = parts[3].strip(), parts[4].strip()
    end_date, end_time = parts[5].strip(), parts[6].strip()

    if not name:
        logger.warning("Skipping row with empty name")
        return None
    if not start_date or not end_date:
        logger.warning("Skipping row with missing dates: %s", line)
        return None
    if not start_time or not end_time:
        logger.warning("Skipping row with missing times: %s", line)
        return None

    return ShiftRow(name=name, start_date=start_date, start_time=start_time, end_date=end_date, end_time=end_time)


def parse_us_date(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value.strip(), "%m/%d/%Y").date()
    except ValueError:
        return None


def find_earliest_date(rows: Iterable[ShiftRow]) -> Optional[date]:
    earliest: Optional[date] = None
    for row in rows:
        d = parse_us_date(row.start_date)
        if d is None:
            logger.warning("Skipping invalid start date: %s", row.start_date)
            continue
        if earliest is None or d < earliest:
            earliest = d
    return earliest


def weekday_from_monday(day: date, monday: date) -> str:
    return _WEEK[(day - monday).days % 7]


def aggregate_schedules(rows: Sequence[ShiftRow]) -> list[ImportedSchedule]:
    monday = find_earliest_date(rows)
    if monday is None:
        return []
    logger.info("Using reference Monday date: %s", monday.isoformat())

    by_name: dict[str, ImportedSchedule] = {}
    for row in rows:
        student = by_name.setdefault(row.name.strip().lower(), ImportedSchedule(name=row.name))

        day = parse_us_date(row.start_date)
        if day is None:
            continue
        weekday = weekday_from_monday(day, monday)
        if weekday not in WEEKDAYS:
            continue

        block = f"{row.start_time}-{row.end_time}"
        try:
            normalized = normalize_time_block(block)
        except ValidationError as e:
            logger.warning("Skipping invalid time block for %s: %s (%s)", row.name, block, e)
            continue
        if normalized not in student.availability[weekday]:
            student.availability[weekday].append(normalized)

    for student in by_name.values():
        for blocks in student.availability.values():
            blocks.sort()

    return list(by_name.values())


def parse_teams_csv(content: str) -> list[ImportedSchedule]:
    rows = []
    for line in (content or "").split("\n"):
        line = line.strip()
        if not line:
            continue
        row = parse_row(line)
        if row:
            rows.append(row)
    return aggregate_schedules(rows)


def first_name(full_name: str) -> str:
    parts = full_name.strip().split()
    return parts[0].lower() if parts else ""


def match_students_by_name(schedules: Sequence[ImportedSchedule], students: Sequence) -> list[MatchedSchedule]:
    """Match on first name, case-insensitively. ``students`` need ``student_id`` and ``name``."""

    out: list[MatchedSchedule] = []
    for schedule in schedules:
        target = first_name(schedule.name)
        student = next((s for s in students if first_name(s.name) == target), None)
        out.append(
            MatchedSchedule(
                student_id=student.student_id if student else None,
                student_name=student.name if student else schedule.name,
                csv_name=schedule.name,
                availability=schedule.availability,
                matched=student is not None,
            )
        )
    return out
