"""Close shifts left open at the end of the day.

Weekdays at 17:30 local time every shift still ``started`` for today gets an
``out`` entry stamped 17:20. The job runs at most once per local day.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, time
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..checkins.repository import CheckInRepository
from ..common.cache import Cache
from ..common.datetime_utils import date_key, local_day_bounds, now_utc, to_local, to_utc
from ..common.time_utils import format_minutes_to_time
from ..core.constants import AUTO_CLOCK_OUT_RUN_AT, AUTO_CLOCK_OUT_STAMP, DEFAULT_TIMEZONE
from ..core.enums import CheckInType, ShiftStatus
from ..shifts.repository import ShiftRepository

logger = logging.getLogger(__name__)


def auto_clock_out_note() -> str:
    hour, minute = AUTO_CLOCK_OUT_STAMP
    return f"Auto clock-out at {format_minutes_to_time(hour * 60 + minute, uppercase=True)}"


class AutoClockOutJob:
    def __init__(
        self,
        shifts: ShiftRepository,
        checkins: CheckInRepository,
        cache: Optional[Cache] = None,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._shifts = shifts
        self._checkins = checkins
        self._cache = cache
        self._timezone = timezone
        self._clock = clock
        self._lock = threading.Lock()
        self.last_run_date_key: Optional[str] = None

    def perform(self) -> int:
        """Clock out every open shift of today. Returns how many were closed."""

        now_local = to_local(self._clock(), self._timezone)
        today = now_local.date()
        if today.weekday() >= 5:
            return 0

        stamp = to_utc(datetime.combine(today, time(*AUTO_CLOCK_OUT_STAMP)), self._timezone)
        day_start, _ = local_day_bounds(today, self._timezone)
        note = auto_clock_out_note()

        processed = 0
        for shift in self._shifts.list_by_date(today, status=ShiftStatus.STARTED):
            latest = self._checkins.list(
                student_id=shift.student_id, term_id=shift.term_id, start=day_start, limit=1
            )
            if latest and latest[0].type == CheckInType.OUT:
                continue

            self._checkins.create(
                student_id=shift.student_id,
                term_id=shift.term_id,
                type=CheckInType.OUT,
                timestamp=stamp,
                is_manual=True,
                is_auto_clock_out=True,
            )
            self._shifts.update(
                shift_id=shift.shift_id,
                status=ShiftStatus.COMPLETED,
                actual_start=shift.actual_start,
                actual_end=stamp,
                notes=f"{shift.notes} | {note}" if shift.notes else note,
            )
            if self._cache is not None:
                self._cache.invalidate_student(shift.student_id, shift.term_id)
            processed += 1

        return processed

    def run_if_needed(self, reason: str) -> Optional[int]:
        """Run once per local weekday, at the scheduled minute or on startup after it."""

        with self._lock:
            now_local = to_local(self._clock(), self._timezone)
            if now_local.weekday() >= 5:
                return None

            key = date_key(now_local.date())
            if self.last_run_date_key == key:
                return None

            due = (now_local.hour, now_local.minute) >= AUTO_CLOCK_OUT_RUN_AT
            if reason == "startup" and not due:
                return None

            processed = self.perform()
            self.last_run_date_key = key
            logger.info("Auto clock-out executed (%s): processed %s shift(s)", reason, processed)
            return processed

    def scheduled_run(self) -> None:
        try:
            self.run_if_needed("scheduled")
        except Exception:
            logger.exception("Auto clock-out failed")


def start_scheduler(job: AutoClockOutJob, *, timezone: str = DEFAULT_TIMEZONE) -> BackgroundScheduler:
    hour, minute = AUTO_CLOCK_OUT_RUN_AT
    scheduler = BackgroundScheduler(
        timezone=timezone,
        job_defaults={"coalesce": True, "misfire_grace_time": 3600},
    )
    scheduler.add_job(
        job.scheduled_run,
        "cron",
        day_of_week="mon-fri",
        hour=hour,
        minute=minute,
        id="auto_clock_out",
        replace_existing=True,
    )
    scheduler.start()

    try:
        job.run_if_needed("startup")
    except Exception:
        logger.exception("Auto clock-out startup check failed")
    return scheduler
