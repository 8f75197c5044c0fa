"""camelCase JSON shapes for domain objects.

Stored timestamps are UTC and carry a ``Z`` suffix. Analytics values are
already local wall-clock time and are emitted without an offset.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..admin_users.model import AdminUser
from ..analytics import student_metrics, team_metrics
from ..analytics.shift_matching import MatchedShift
from ..checkins.model import CheckIn
from ..schedules.model import Schedule
from ..students.model import Student, StudentTermView
from ..terms.model import Term
from .datetime_utils import format_date, format_timestamp


def _local(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


def student_to_dict(s: Student) -> dict:
    return {
        "id": s.student_id,
        "name": s.name,
        "cardId": s.card_id,
        "role": s.role.value,
        "isActive": s.is_active,
    }


def checkin_to_dict(c: CheckIn) -> dict:
    return {
        "id": c.checkin_id,
        "studentId": c.student_id,
        "termId": c.term_id,
        "type": c.type.value,
        "timestamp": format_timestamp(c.timestamp),
        "isManual": c.is_manual,
        "isAutoClockOut": c.is_auto_clock_out,
    }


def student_term_view_to_dict(v: StudentTermView) -> dict:
    return {
        **student_to_dict(v.student),
        "currentStatus": v.current_status.value,
        "todayActual": format_timestamp(v.today_actual),
        "expectedStartShift": v.expected_start,
        "expectedEndShift": v.expected_end,
        "weeklySchedule": v.weekly_schedule,
        "clockEntries": [checkin_to_dict(c) for c in v.clock_entries],
    }


def term_to_dict(t: Term) -> dict:
    return {
        "id": t.term_id,
        "name": t.name,
        "startDate": format_date(t.start_date),
        "endDate": format_date(t.end_date),
        "year": t.year,
        "isActive": t.is_active,
        "daysOff": [
            {"startDate": format_date(d.start_date), "endDate": format_date(d.end_date), "notes": d.notes or ""}
            for d in t.days_off
        ],
        "notes": t.notes or "",
    }


def schedule_to_dict(s: Schedule) -> dict:
    return {
        "id": s.schedule_id or None,
        "studentId": s.student_id,
        "termId": s.term_id,
        "availability": s.availability,
        "timezone": s.timezone,
    }


def admin_user_to_dict(a: AdminUser) -> dict:
    return {
        "id": a.admin_user_id,
        "email": a.email,
        "name": a.name or "",
        "role": a.role,
        "isAdmin": a.is_admin,
        "isActive": a.is_active,
        "lastLoginAt": format_timestamp(a.last_login_at),
        "createdAt": format_timestamp(a.created_at),
        "updatedAt": format_timestamp(a.updated_at),
    }


def matched_shift_to_dict(m: MatchedShift) -> dict:
    return {
        "shift": {"start": m.shift.start, "end": m.shift.end, "original": m.shift.original},
        "status": m.status.value,
        "isOnTime": m.is_on_time,
        "clockIn": m.clock_in,
        "clockOut": m.clock_out,
        "clockInAt": _local(m.clock_in_at),
        "clockOutAt": _local(m.clock_out_at),
        "note": m.note,
    }


def day_to_dict(d: Optional[student_metrics.DayBreakdown]) -> Optional[dict]:
    if d is None:
        return None
    return {
        "date": format_date(d.day),
        "dayName": d.day_name,
        "expectedShifts": d.expected_shifts,
        "actualShifts": [
            {
                "start": a.start,
                "end": a.end,
                "hours": a.hours,
                "clockInId": a.clock_in_id,
                "clockInAt": _local(a.clock_in_at),
                "clockOutId": a.clock_out_id,
                "clockOutAt": _local(a.clock_out_at),
            }
            for a in d.actual_shifts
        ],
        "expectedHours": d.expected_hours,
        "actualHours": d.actual_hours,
        "status": d.status.value,
        "isDayOff": d.is_day_off,
    }


def student_report_to_dict(r) -> dict:
    p = r.punctuality
    return {
        "student": student_to_dict(r.student),
        "term": term_to_dict(r.term),
        "metrics": {"expectedHours": r.expected_hours, "actualHours": r.actual_hours},
        "punctuality": {
            "onTime": p.on_time,
            "early": p.early,
            "late": p.late,
            "notScheduled": p.not_scheduled,
            "percentage": p.percentage,
        },
        "weekly": [
            {
                "weekNum": w.week_num,
                "startDate": format_date(w.start_date),
                "endDate": format_date(w.end_date),
                "expectedHours": w.expected_hours,
                "actualHours": w.actual_hours,
                "shifts": w.shifts,
            }
            for w in r.weekly
        ],
        "daily": [day_to_dict(d) for d in r.daily],
        "weeks": [
            {
                "weekNum": w.week_num,
                "startDate": format_date(w.start_date),
                "endDate": format_date(w.end_date),
                "days": [day_to_dict(d) for d in w.days],
            }
            for w in r.weeks
        ],
        "months": [
            {
                "monthName": m.month_name,
                "monthYear": m.month_year,
                "totalExpected": m.total_expected,
                "totalActual": m.total_actual,
                "calendarWeeks": [[format_date(d.day) if d else None for d in week] for week in m.calendar_weeks],
            }
            for m in r.months
        ],
        "todayShifts": [matched_shift_to_dict(m) for m in r.today_shifts],
    }


def term_report_to_dict(r) -> dict:
    s: team_metrics.TermStats = r.stats
    return {
        "term": term_to_dict(r.term),
        "stats": {
            "totalStaff": s.total_staff,
            "avgPunctuality": round(s.avg_punctuality, 1),
            "totalManual": s.total_manual,
            "autoClockOuts": s.auto_clock_outs,
            "totalClockOuts": s.total_clock_outs,
            "autoClockOutRate": round(s.auto_clock_out_rate, 1),
            "totalHours": s.total_hours,
            "avgHoursPerPerson": s.avg_hours_per_person,
        },
        "punctuality": {
            period: {
                "startDate": format_date(start),
                "endDate": format_date(end),
                "onTime": p.on_time,
                "late": p.late,
                "early": p.early,
            }
            for period, (start, end, p) in r.period_punctuality.items()
        },
        "weeklyHours": [
            {"week": w.week, "startDate": format_date(w.start_date), "hours": w.hours} for w in r.weekly_hours
        ],
    }


def hourly_to_dict(h: team_metrics.HourlyStaffing) -> dict:
    return {"hour": h.hour, "expected": h.expected, "actual": h.actual}


def overview_row_to_dict(o: team_metrics.OverviewRow) -> dict:
    return {
        "studentId": o.student_id,
        "name": o.name,
        "schedule": o.schedule,
        "clockIn": o.clock_in,
        "todayStatus": o.today_status,
        "currentStatus": o.current_status,
        "lastEntry": _local(o.last_entry),
    }
