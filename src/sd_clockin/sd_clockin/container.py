from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .admin_users.mysql_admin_user_repository import MySQLAdminUserRepository
from .admin_users.service import AdminUserService
from .analytics.factory import PunctualityStrategyFactory
from .analytics.service import AnalyticsService
from .auth.microsoft import MicrosoftAuthConfig
from .checkins.mysql_checkin_repository import MySQLCheckInRepository
from .checkins.service import CheckInService
from .common.cache import Cache
from .core.constants import DEFAULT_TIMEZONE, PUNCTUALITY_GRACE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .imports.service import ImportService
from .jobs.auto_clock_out import AutoClockOutJob
from .reports.service import CheckInReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .terms.mysql_term_repository import MySQLTermRepository
from .terms.service import TermService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    cache: Cache
    timezone: str
    microsoft_auth: MicrosoftAuthConfig

    students_repo: MySQLStudentRepository
    terms_repo: MySQLTermRepository
    schedules_repo: MySQLScheduleRepository
    checkins_repo: MySQLCheckInRepository
    shifts_repo: MySQLShiftRepository
    admin_users_repo: MySQLAdminUserRepository

    student_service: StudentService
    term_service: TermService
    schedule_service: ScheduleService
    checkin_service: CheckInService
    import_service: ImportService
    admin_user_service: AdminUserService
    analytics_service: AnalyticsService
    checkin_report_service: CheckInReportService
    auto_clock_out_job: AutoClockOutJob


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    redis_url: Optional[str] = None,
    microsoft_auth: Optional[MicrosoftAuthConfig] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    cache = Cache(redis_url)

    students_repo = MySQLStudentRepository(conn)
    terms_repo = MySQLTermRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    checkins_repo = MySQLCheckInRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    admin_users_repo = MySQLAdminUserRepository(conn)

    student_service = StudentService(students_repo, schedules_repo, checkins_repo, shifts_repo, timezone=timezone)
    term_service = TermService(terms_repo)
    schedule_service = ScheduleService(schedules_repo, students_repo, terms_repo, default_timezone=timezone)
    checkin_service = CheckInService(checkins_repo, students_repo, terms_repo, shifts_repo, timezone=timezone)
    import_service = ImportService(students_repo, schedules_repo, terms_repo, timezone=timezone)
    admin_user_service = AdminUserService(admin_users_repo)
    analytics_service = AnalyticsService(
        students_repo,
        terms_repo,
        schedules_repo,
        checkins_repo,
        timezone=timezone,
        strategy_factory=PunctualityStrategyFactory(grace_minutes=PUNCTUALITY_GRACE_MINUTES),
    )
    checkin_report_service = CheckInReportService(checkins_repo, students_repo, terms_repo, timezone=timezone)
    auto_clock_out_job = AutoClockOutJob(shifts_repo, checkins_repo, cache, timezone=timezone)

    return Container(
        conn=conn,
        cache=cache,
        timezone=timezone,
        microsoft_auth=microsoft_auth or MicrosoftAuthConfig(),
        students_repo=students_repo,
        terms_repo=terms_repo,
        schedules_repo=schedules_repo,
        checkins_repo=checkins_repo,
        shifts_repo=shifts_repo,
        admin_users_repo=admin_users_repo,
        student_service=student_service,
        term_service=term_service,
        schedule_service=schedule_service,
        checkin_service=checkin_service,
        import_service=import_service,
        admin_user_service=admin_user_service,
        analytics_service=analytics_service,
        checkin_report_service=checkin_report_service,
        auto_clock_out_job=auto_clock_out_job,
    )
