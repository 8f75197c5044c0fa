"""Availability block parsing.

Admins type blocks like "9-5", "12:30 pm - 5 pm" or "9:00-17:00"; everything
is stored as "HH:MM-HH:MM" in 24-hour time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..core.constants import WEEKDAYS
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"(\d+)(?::(\d+))?")
_BLOCK_SPLIT_RE = re.compile(r"\s*[-–—]\s*")


@dataclass(frozen=True)
class ParsedTimeBlock:
    start: str
    end: str
    original: str


def convert_to_24_hour(value: str) -> str:
    """Convert "5 PM" -> "17:00", "12:30 pm" -> "12:30", "9" -> "09:00".

    A bare hour from 1 to 7 with no minutes and no AM/PM is read as afternoon.
    """

    cleaned = value.strip().lower()
    has_am = "am" in cleaned
    has_pm = "pm" in cleaned

    m = _TIME_RE.search(cleaned)
    if not m:
        raise ValidationError(f"Invalid time format: {value}")

    hours = int(m.group(1))
    minutes = int(m.group(2)) if m.group(2) else 0

    if hours > 23:
        raise ValidationError(f"Invalid hour: {hours}")
    if minutes > 59:
        raise ValidationError(f"Invalid minutes: {minutes}")

    if has_am or has_pm:
        if hours == 12 and has_am:
            hours = 0
        elif hours != 12 and has_pm:
            hours += 12
    elif 1 <= hours <= 7 and not m.group(2):
        hours += 12

    return f"{hours:02d}:{minutes:02d}"


def _hhmm_to_minutes(value: str) -> int:
    h, m = value.split(":")
    return int(h) * 60 + int(m)


def parse_time_block(block: str) -> ParsedTimeBlock:
    cleaned = (block or "").strip()
    if not cleaned:
        raise ValidationError("Empty time block")

    parts = _BLOCK_SPLIT_RE.split(cleaned)
    if len(parts) != 2:
        raise ValidationError(
            f'Invalid time block format: {block}. Expected format like "9-5" or "9 AM - 5 PM"'
        )

    try:
        start = convert_to_24_hour(parts[0])
        end = convert_to_24_hour(parts[1])
    except ValidationError as e:
        raise ValidationError(f'Failed to parse time block "{block}": {e}')

    if _hhmm_to_minutes(end) <= _hhmm_to_minutes(start):
        raise ValidationError(
            f'Failed to parse time block "{block}": End time ({end}) must be after start time ({start})'
        )

    return ParsedTimeBlock(start=start, end=end, original=cleaned)


def normalize_time_block(block: str) -> str:
    parsed = parse_time_block(block)
    return f"{parsed.start}-{parsed.end}"


def normalize_schedule_blocks(blocks: Iterable[str]) -> list[str]:
    out: list[str] = []
    for block in blocks or []:
        block = str(block).strip()
        if not block:
            continue
        try:
            out.append(normalize_time_block(block))
        except ValidationError as e:
            logger.warning('Skipping invalid time block "%s": %s', block, e)
    return out


def normalize_schedule(availability: Optional[Mapping[str, Iterable[str]]]) -> dict[str, list[str]]:
    availability = availability or {}
    return {day: normalize_schedule_blocks(availability.get(day) or []) for day in WEEKDAYS}


def format_time_block_for_display(block: str) -> str:
    """Render "09:00-17:00" as "9:00 AM - 5:00 PM"."""

    parts = block.split("-")
    if len(parts) != 2:
        return block

    def _fmt(value: str) -> str:
        hour_s, _, minute = value.partition(":")
        hour = int(hour_s)
        period = "PM" if hour >= 12 else "AM"
        if hour == 0:
            hour = 12
        elif hour > 12:
            hour -= 12
        return f"{hour}:{minute or '00'} {period}"

    return f"{_fmt(parts[0])} - {_fmt(parts[1])}"
