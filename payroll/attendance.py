"""
출퇴근 기록 집계 (AttendanceAggregator)

한 달치 출퇴근 row를 기본/연장/야간/휴일 근무시간과 주차별 근무시간으로 묶는다.
"""

import math
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional

from payroll.models import (
    EXCLUDED_ATTENDANCE_STATUSES,
    AttendanceRecord,
    AttendanceStatus,
    AttendanceSummary,
    WeeklyHours,
)
from payroll.rounding import round_hours
from payroll.settings import PAYROLL_UTC_OFFSET_HOURS, WeekGrouping

# 법정 1일 근로시간 (계약서의 소정근로시간과 무관)
STATUTORY_DAILY_HOURS = 8

# 주휴수당 지급 기준 주간 근무시간
WEEKLY_HOLIDAY_PAY_MIN_HOURS = 15

NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6

LOCAL_TZ = timezone(timedelta(hours=PAYROLL_UTC_OFFSET_HOURS))

# 고정 공휴일 (월, 일) - 음력 공휴일·대체공휴일은 extra_holidays로 넘겨야 함
FIXED_HOLIDAYS = {
    (1, 1),  # 신정
    (3, 1),  # 삼일절
    (5, 5),  # 어린이날
    (6, 6),  # 현충일
    (8, 15),  # 광복절
    (10, 3),  # 개천절
    (10, 9),  # 한글날
    (12, 25),  # 성탄절
}


#step1. 근무시간 / 야간시간 계산

def is_night_hour(hour: int) -> bool:
    """22:00 ~ 06:00 사이의 시각인지"""
    return hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR


def is_korean_holiday(day: date) -> bool:
    return (day.month, day.day) in FIXED_HOLIDAYS


def _to_local(moment: datetime) -> datetime:
    """시간대 없는 값은 현지 시각으로 보고, 있는 값은 현지 시각으로 변환"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=LOCAL_TZ)
    return moment.astimezone(LOCAL_TZ)


def calculate_night_hours(check_in: datetime, check_out: datetime) -> float:
    """
    출근~퇴근 구간을 정시 단위로 잘라가며 야간 시간대에 걸친 부분만 더한다.
    20:30 출근 → 20:30~21:00, 21:00~22:00, 22:00~23:00 ... 처럼 걸어가므로
    자정을 넘기는 근무와 정각이 아닌 출퇴근 시각도 분 단위로 반영된다.
    """
    current = _to_local(check_in)
    end = _to_local(check_out)

    night = timedelta()
    while current < end:
        next_hour = current.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
        slot_end = min(next_hour, end)
        if is_night_hour(current.hour):
            night += slot_end - current
        current = slot_end

    return round_hours(night.total_seconds() / 3600)


def calculate_work_hours(check_in: datetime, check_out: datetime, break_minutes: int = 0) -> float:
    minutes = (_to_local(check_out) - _to_local(check_in)).total_seconds() / 60
    return round_hours(max(0, minutes - break_minutes) / 60)


def parse_shift(work_date: date, start: str, end: str):
    """
    "09:00", "18:00" 같은 문자열 근무시간을 실제 datetime 구간으로 바꾼다.
    퇴근 시각이 출근보다 이르면 자정을 넘긴 근무로 보고 다음날로 처리.
    """
    fmt = "%H:%M"
    check_in = datetime.combine(work_date, datetime.strptime(start, fmt).time())
    check_out = datetime.combine(work_date, datetime.strptime(end, fmt).time())

    if check_out < check_in:
        check_out += timedelta(days=1)

    return check_in, check_out


#step2. 출퇴근 기록 한 건 만들기

def build_attendance_record(
    work_date: date,
    check_in: datetime,
    check_out: datetime,
    break_minutes: int = 0,
    status: AttendanceStatus = AttendanceStatus.NORMAL,
    extra_holidays: Iterable[date] = (),
) -> AttendanceRecord:
    """
    실제 출퇴근 시각으로 하루치 근무 row를 만든다.
    - 연장근무: 8시간 초과분
    - 야간근무: 22:00 ~ 06:00 겹치는 시간
    - 휴일근무: 공휴일(또는 extra_holidays)에 일한 시간 전체
    """
    work_hours = calculate_work_hours(check_in, check_out, break_minutes)
    holiday = is_korean_holiday(work_date) or work_date in set(extra_holidays)

    return AttendanceRecord(
        work_date=work_date,
        work_hours=work_hours,
        overtime_hours=round_hours(max(0, work_hours - STATUTORY_DAILY_HOURS)),
        night_hours=calculate_night_hours(check_in, check_out),
        holiday_hours=work_hours if holiday else 0,
        actual_check_in=check_in,
        actual_check_out=check_out,
        status=status,
    )


#step3. 주차 계산

def calendar_week_of_month(day: date) -> int:
    """
    달력 기준 주차 (일요일 시작). 1일이 토요일이면 1일 하루만 1주차가 된다.
    ISO 주차가 아니므로 월 경계 주는 앞뒤 달로 쪼개진다.
    """
    first_weekday = (day.replace(day=1).weekday() + 1) % 7  # 일=0, 월=1, ..., 토=6
    return math.ceil((day.day + first_weekday) / 7)


def rolling_week_of_month(day: date) -> int:
    """1~7일 1주차, 8~14일 2주차 ... 처럼 1일부터 7일씩 끊는다."""
    return (day.day - 1) // 7 + 1


def week_number(day: date, grouping: WeekGrouping = WeekGrouping.CALENDAR_WEEK_OF_MONTH) -> int:
    if grouping == WeekGrouping.ROLLING_7_DAY:
        return rolling_week_of_month(day)
    return calendar_week_of_month(day)


#step4. 한달치 집계

def is_payable(record: AttendanceRecord) -> bool:
    """결근(ABSENT), 승인 전 무단출근(UNSCHEDULED)은 급여 계산에서 제외"""
    return record.status not in EXCLUDED_ATTENDANCE_STATUSES


def summarize(
    records: Iterable[AttendanceRecord],
    grouping: WeekGrouping = WeekGrouping.CALENDAR_WEEK_OF_MONTH,
) -> AttendanceSummary:
    rows: List[AttendanceRecord] = [r for r in records if is_payable(r)]

    total_hours = 0.0
    regular_hours = 0.0
    overtime_hours = 0.0
    night_hours = 0.0
    holiday_hours = 0.0
    weekly = defaultdict(float)

    for row in rows:
        total_hours += row.work_hours
        regular_hours += min(row.work_hours, STATUTORY_DAILY_HOURS)
        overtime_hours += row.overtime_hours
        night_hours += row.night_hours
        holiday_hours += row.holiday_hours
        weekly[week_number(row.work_date, grouping)] += row.work_hours

    breakdown = []
    for number in sorted(weekly):
        hours = round_hours(weekly[number])
        breakdown.append(
            WeeklyHours(
                week_number=number,
                hours=hours,
                has_weekly_holiday_pay=hours >= WEEKLY_HOLIDAY_PAY_MIN_HOURS,
            )
        )

    return AttendanceSummary(
        work_days=len(rows),
        total_hours=round_hours(total_hours),
        regular_hours=round_hours(regular_hours),
        overtime_hours=round_hours(overtime_hours),
        night_hours=round_hours(night_hours),
        holiday_hours=round_hours(holiday_hours),
        weekly_hours_breakdown=breakdown,
    )


def month_dates(year: int, month: int, weekdays: Optional[Iterable[int]] = None) -> List[date]:
    """해당 월의 날짜 목록. weekdays(월=0 ... 일=6)를 주면 그 요일만."""
    wanted = set(weekdays) if weekdays is not None else None
    day = date(year, month, 1)
    result = []
    while day.month == month:
        if wanted is None or day.weekday() in wanted:
            result.append(day)
        day += timedelta(days=1)
    return result
