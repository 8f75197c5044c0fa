"""Reconcile a weekly availability schedule with raw clock entries.

All datetimes handled here are naive local wall-clock times; callers
convert stored UTC timestamps before calling in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from ..checkins.model import CheckIn
from ..common.time_utils import date_to_minutes, format_timestamp_to_display, time_to_minutes
from ..core.constants import (
    DEFAULT_SHIFT_LENGTH,
    EARLY_CLOCK_IN_WINDOW,
    EXPECTED_ARRIVAL_WINDOW,
    LATE_CLOCK_OUT_WINDOW,
    SHIFT_END_LOOKBACK,
)
from ..core.enums import CheckInType, PunctualityStatus
from .factory import PunctualityStrategyFactory
from .schedule_utils import (
    ShiftTime,
    aggregate_consecutive_shifts,
    get_schedule_for_date,
    parse_schedule_blocks,
)

Availability = Optional[Mapping[str, Sequence[str]]]

EXPECTED = "expected"
PRESENT = "present"
ABSENT = "absent"


@dataclass(frozen=True)
class MatchedShift:
    shift: ShiftTime
    status: PunctualityStatus
    is_on_time: bool
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    clock_in_at: Optional[datetime] = None
    clock_out_at: Optional[datetime] = None
    note: Optional[str] = None


def _entries_for_day(entries: Sequence[CheckIn], day: date, type_: Optional[CheckInType] = None) -> list[CheckIn]:
    out = [
        e
        for e in entries
        if e.timestamp.date() == day and (type_ is None or e.type == type_)
    ]
    out.sort(key=lambda e: e.timestamp)
    return out


def _entry_key(entry: CheckIn):
    return entry.checkin_id or entry.timestamp


def match_clock_entries_to_shifts(
    availability: Availability,
    entries: Sequence[CheckIn],
    day: date,
    *,
    now: datetime,
    factory: Optional[PunctualityStrategyFactory] = None,
) -> list[MatchedShift]:
    """Pair each expected shift of ``day`` with at most one clock-in and clock-out.

    A clock-in may come up to an hour before the shift and no later than its
    end. The clock-out must follow the clock-in and precede the next shift,
    or fall within an hour after the end of the last one.
    """

    factory = factory or PunctualityStrategyFactory()
    shifts = aggregate_consecutive_shifts(parse_schedule_blocks(get_schedule_for_date(availability, day)))

    clock_ins = _entries_for_day(entries, day, CheckInType.IN)
    clock_outs = _entries_for_day(entries, day, CheckInType.OUT)
    used_ins: set = set()
    used_outs: set = set()

    matched: list[MatchedShift] = []
    for shift in shifts:
        start = shift.start_minutes
        end = shift.end_minutes if shift.end else start + DEFAULT_SHIFT_LENGTH

        clock_in = next(
            (
                e
                for e in clock_ins
                if _entry_key(e) not in used_ins
                and start - EARLY_CLOCK_IN_WINDOW <= date_to_minutes(e.timestamp) <= end
            ),
            None,
        )

        if clock_in is None:
            strategy = factory.for_missing_clock_in(
                shift_start=start, day=day, today=now.date(), now_minutes=date_to_minutes(now)
            )
            decision = strategy.decide(shift_start=start, clock_in=None)
            matched.append(MatchedShift(shift=shift, status=decision.status, is_on_time=decision.is_on_time))
            continue

        used_ins.add(_entry_key(clock_in))
        next_shift = next((s for s in shifts if s.start_minutes > start), None)

        def _closes(entry: CheckIn) -> bool:
            if _entry_key(entry) in used_outs or entry.timestamp <= clock_in.timestamp:
                return False
            minutes = date_to_minutes(entry.timestamp)
            if next_shift is not None:
                return minutes < next_shift.start_minutes
            return minutes <= end + LATE_CLOCK_OUT_WINDOW

        clock_out = next((e for e in clock_outs if _closes(e)), None)
        if clock_out is not None:
            used_outs.add(_entry_key(clock_out))

        in_minutes = date_to_minutes(clock_in.timestamp)
        decision = factory.for_clock_in(shift_start=start, clock_in=in_minutes).decide(
            shift_start=start, clock_in=in_minutes
        )
        matched.append(
            MatchedShift(
                shift=shift,
                status=decision.status,
                is_on_time=decision.is_on_time,
                clock_in=format_timestamp_to_display(clock_in.timestamp),
                clock_out=format_timestamp_to_display(clock_out.timestamp) if clock_out else None,
                clock_in_at=clock_in.timestamp,
                clock_out_at=clock_out.timestamp if clock_out else None,
                note=decision.note,
            )
        )

    return matched


def is_currently_clocked_in(entries: Sequence[CheckIn], day: date) -> bool:
    open_ins = 0
    for entry in _entries_for_day(entries, day):
        if entry.type == CheckInType.IN:
            open_ins += 1
        elif open_ins > 0:
            open_ins -= 1
    return open_ins > 0


def get_upcoming_shifts(
    availability: Availability,
    now: datetime,
    hours_ahead: int = 2,
    minutes_after_start: int = 10,
) -> list[ShiftTime]:
    """Shifts starting within ``hours_ahead`` or started at most ``minutes_after_start`` ago."""

    now_minutes = date_to_minutes(now)
    upcoming: list[ShiftTime] = []
    for shift in parse_schedule_blocks(get_schedule_for_date(availability, now.date())):
        start = shift.start_minutes
        until = start - now_minutes
        if until < 0:
            until += 24 * 60
        since = now_minutes - start if start <= now_minutes else -1

        if 0 <= until <= hours_ahead * 60 or 0 <= since <= minutes_after_start:
            upcoming.append(shift)
    return upcoming


def _split_block(block: str) -> Optional[tuple[str, str]]:
    parts = block.split("-")
    if len(parts) < 2 or not parts[0].strip() or not parts[1].strip():
        return None
    return parts[0].strip(), parts[1].strip()


def calculate_shift_end(
    availability: Availability, now: datetime, clock_in: datetime
) -> tuple[Optional[str], Optional[str]]:
    """Start and end of the block a clock-in most likely belongs to.

    The block must satisfy ``start - 4h <= clock_in <= end``; among those the
    one whose start is closest to the clock-in wins.
    """

    clock_in_minutes = date_to_minutes(clock_in)
    best: Optional[tuple[int, str, str]] = None

    for block in get_schedule_for_date(availability, now.date()):
        pair = _split_block(block)
        if not pair:
            continue
        start, end = pair
        start_minutes, end_minutes = time_to_minutes(start), time_to_minutes(end)
        if start_minutes - SHIFT_END_LOOKBACK <= clock_in_minutes <= end_minutes:
            distance = abs(clock_in_minutes - start_minutes)
            if best is None or distance < best[0]:
                best = (distance, start, end)

    if best is None:
        return None, None
    return best[1], best[2]


def check_expected_arrival(availability: Availability, now: datetime) -> Optional[tuple[str, str]]:
    now_minutes = date_to_minutes(now)
    for block in get_schedule_for_date(availability, now.date()):
        pair = _split_block(block)
        if not pair:
            continue
        until = time_to_minutes(pair[0]) - now_minutes
        if 0 <= until <= EXPECTED_ARRIVAL_WINDOW:
            return pair
    return None


def today_status(matched: Sequence[MatchedShift]) -> str:
    """Single status for the day: the first attended shift wins."""

    for m in matched:
        if m.clock_in:
            return m.status.value
    if any(m.status == PunctualityStatus.INCOMING for m in matched):
        return PunctualityStatus.INCOMING.value
    if any(m.status == PunctualityStatus.ABSENT for m in matched):
        return PunctualityStatus.ABSENT.value
    return EXPECTED


def current_status(availability: Availability, entries: Sequence[CheckIn], day: date) -> str:
    if is_currently_clocked_in(entries, day):
        return PRESENT
    if get_schedule_for_date(availability, day):
        return EXPECTED
    return ABSENT
