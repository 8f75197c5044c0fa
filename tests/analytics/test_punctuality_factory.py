from datetime import date

from src.sd_clockin.sd_clockin.analytics.factory import PunctualityStrategyFactory
from src.sd_clockin.sd_clockin.analytics.strategies.absent_strategy import AbsentStrategy
from src.sd_clockin.sd_clockin.analytics.strategies.early_strategy import EarlyStrategy
from src.sd_clockin.sd_clockin.analytics.strategies.incoming_strategy import IncomingStrategy
from src.sd_clockin.sd_clockin.analytics.strategies.late_strategy import LateStrategy
from src.sd_clockin.sd_clockin.analytics.strategies.on_time_strategy import OnTimeStrategy
from src.sd_clockin.sd_clockin.core.enums import PunctualityStatus

NINE_AM = 9 * 60


def test_clock_in_within_grace_is_on_time():
    factory = PunctualityStrategyFactory()

    assert isinstance(factory.for_clock_in(shift_start=NINE_AM, clock_in=NINE_AM + 10), OnTimeStrategy)
    assert isinstance(factory.for_clock_in(shift_start=NINE_AM, clock_in=NINE_AM - 10), OnTimeStrategy)


def test_clock_in_outside_grace_is_early_or_late():
    factory = PunctualityStrategyFactory()

    assert isinstance(factory.for_clock_in(shift_start=NINE_AM, clock_in=NINE_AM - 11), EarlyStrategy)
    assert isinstance(factory.for_clock_in(shift_start=NINE_AM, clock_in=NINE_AM + 11), LateStrategy)


def test_custom_grace_window():
    factory = PunctualityStrategyFactory(grace_minutes=5)

    assert isinstance(factory.for_clock_in(shift_start=NINE_AM, clock_in=NINE_AM + 6), LateStrategy)


def test_decisions_carry_notes():
    early = EarlyStrategy().decide(shift_start=NINE_AM, clock_in=NINE_AM - 25)
    late = LateStrategy().decide(shift_start=NINE_AM, clock_in=NINE_AM + 17)

    assert (early.status, early.is_on_time, early.note) == (PunctualityStatus.EARLY, True, "25 min early")
    assert (late.status, late.is_on_time, late.note) == (PunctualityStatus.LATE, False, "17 min late")


def test_missing_clock_in_depends_on_day_and_time():
    factory = PunctualityStrategyFactory()
    today = date(2026, 9, 21)

    def pick(day, now_minutes):
        return factory.for_missing_clock_in(shift_start=NINE_AM, day=day, today=today, now_minutes=now_minutes)

    assert isinstance(pick(today, NINE_AM - 60), IncomingStrategy)
    assert isinstance(pick(today, NINE_AM + 10), IncomingStrategy)
    assert isinstance(pick(today, NINE_AM + 11), AbsentStrategy)
    assert isinstance(pick(date(2026, 9, 18), 0), AbsentStrategy)
    assert isinstance(pick(date(2026, 9, 22), 23 * 60), IncomingStrategy)
