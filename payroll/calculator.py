"""
시급 환산 및 수당 계산 (HourlyRateCalculator, AllowanceEngine)

연장/야간/휴일/주휴수당은 월급제라도 항상 시급 기준으로 계산한다.
모든 금액은 항목별로 원 단위 반올림 후 합산한다.
"""

from payroll.models import AllowanceBreakdown, AttendanceSummary, BaseSalaryType, Contract, LaborLawVersion
from payroll.rounding import won

STANDARD_WEEKLY_HOURS = 40
WEEKLY_PAID_HOLIDAY_HOURS = 8  # 주휴 1일 = 8시간
WEEKS_PER_MONTH = 4.345  # 365 / 7 / 12

# 월 소정근로시간: (40 + 8) × 4.345 = 208.56 → 209시간
MONTHLY_WORK_HOURS = round((STANDARD_WEEKLY_HOURS + WEEKLY_PAID_HOLIDAY_HOURS) * WEEKS_PER_MONTH)


#step1. 시급 환산

def hourly_rate(contract: Contract) -> float:
    """
    계약 유형별 시급 환산 (반올림하지 않음, 시간과 곱할 때 반올림)
    - 시급제: 그대로
    - 일급제: 일급 / 1일 소정근로시간
    - 월급제: 월급 / 209시간
    그 외 유형은 계약서 검증(InvalidContractError)에서 이미 걸러진다.
    """
    config = contract.salary_config
    amount = config.base_salary_amount

    if config.base_salary_type == BaseSalaryType.HOURLY:
        return amount
    if config.base_salary_type == BaseSalaryType.DAILY:
        return amount / contract.standard_hours_per_day
    return amount / MONTHLY_WORK_HOURS


#step2. 기본급

def calculate_base_salary(contract: Contract, regular_hours: float, rate: float) -> int:
    config = contract.salary_config

    if config.base_salary_type == BaseSalaryType.MONTHLY:
        return config.base_salary_amount
    if config.base_salary_type == BaseSalaryType.DAILY:
        # 일급 × 근무일수 (기본 근무시간 / 1일 소정근로시간)
        return won(config.base_salary_amount, regular_hours / contract.standard_hours_per_day)
    return won(rate, regular_hours)


#step3. 가산 수당

def calculate_overtime_pay(hours: float, rate: float, multiplier: float = 1.5) -> int:
    """연장근로수당 (기본 1.5배)"""
    if hours <= 0:
        return 0
    return won(rate, multiplier, hours)


def calculate_night_pay(hours: float, rate: float, multiplier: float = 0.5) -> int:
    """야간근로수당 - 기본급 위에 0.5배만 가산"""
    if hours <= 0:
        return 0
    return won(rate, multiplier, hours)


def calculate_holiday_pay(hours: float, rate: float, multiplier: float = 1.5) -> int:
    if hours <= 0:
        return 0
    return won(rate, multiplier, hours)


def calculate_weekly_holiday_pay(weekly_hours: float, rate: float, standard_daily_hours: float = 8) -> int:
    """
    주휴수당
    주 15시간 미만이면 0, 이상이면 (주간 근무시간 / 40) × 1일 소정근로시간 × 시급.
    주 40시간 이상은 하루치(비율 1)로 상한.
    """
    if weekly_hours < 15:
        return 0
    ratio = min(weekly_hours / STANDARD_WEEKLY_HOURS, 1)
    return won(rate, standard_daily_hours, ratio)


#step4. 수당 합산

def compute_allowances(
    contract: Contract,
    rate: float,
    summary: AttendanceSummary,
    law: LaborLawVersion,
) -> AllowanceBreakdown:
    allowances = contract.salary_config.allowances

    base_salary = calculate_base_salary(contract, summary.regular_hours, rate)

    overtime_pay = (
        calculate_overtime_pay(summary.overtime_hours, rate, law.overtime_rate) if allowances.overtime else 0
    )
    night_pay = calculate_night_pay(summary.night_hours, rate, law.night_rate) if allowances.night else 0
    holiday_pay = (
        calculate_holiday_pay(summary.holiday_hours, rate, law.holiday_rate) if allowances.holiday else 0
    )

    weekly_holiday_pay = 0
    if allowances.weekly_holiday_pay:
        for week in summary.weekly_hours_breakdown:
            if week.has_weekly_holiday_pay:
                weekly_holiday_pay += calculate_weekly_holiday_pay(
                    week.hours, rate, contract.standard_hours_per_day
                )

    total_gross_pay = (
        base_salary
        + overtime_pay
        + night_pay
        + holiday_pay
        + weekly_holiday_pay
        + allowances.meal
        + allowances.transport
        + allowances.position
    )

    return AllowanceBreakdown(
        base_salary=base_salary,
        overtime_pay=overtime_pay,
        night_pay=night_pay,
        holiday_pay=holiday_pay,
        weekly_holiday_pay=weekly_holiday_pay,
        meal_allowance=allowances.meal,
        transport_allowance=allowances.transport,
        position_allowance=allowances.position,
        total_gross_pay=total_gross_pay,
    )


#step5. 기타

def is_below_minimum_wage(rate: float, law: LaborLawVersion) -> bool:
    """환산 시급이 법정 최저시급에 못 미치는지"""
    return rate < law.minimum_wage_hourly


def calculate_severance_pay(average_monthly_pay: int, total_work_days: int) -> int:
    """
    퇴직금 추정치
    1년(365일) 미만 근무는 0, 이상이면 30일분 평균임금 × (근무일수 / 365)
    """
    if total_work_days < 365:
        return 0
    daily_pay = average_monthly_pay / 30
    return won(daily_pay, 30, total_work_days / 365)
