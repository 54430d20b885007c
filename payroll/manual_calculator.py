from payroll.assembler import build_salary
from payroll.attendance import build_attendance_record, month_dates, parse_shift
from payroll.labor_law import DEFAULT_LABOR_LAW
from payroll.models import Contract, LaborLawVersion
from payroll.settings import PayrollPolicy

PAY_TYPES = {"시급": "HOURLY", "일급": "DAILY", "월급": "MONTHLY"}

WEEKDAYS = {"월": 0, "화": 1, "수": 2, "목": 3, "금": 4, "토": 5, "일": 6}

# taxOption별 공제 항목
TAX_OPTIONS = {
    "none": {"national_pension": False, "health_insurance": False, "employment_insurance": False, "income_tax": False},
    "insurance": {"national_pension": True, "health_insurance": True, "employment_insurance": True, "income_tax": False},
    "all": {"national_pension": True, "health_insurance": True, "employment_insurance": True, "income_tax": True},
}


def calculate_manual_pay(
    data: dict,
    law: LaborLawVersion = DEFAULT_LABOR_LAW,
    policy: PayrollPolicy = PayrollPolicy(),
) -> dict:
    """
    사용자가 입력한 근무 패턴(요일, 출퇴근 시각)으로 한 달 급여를 미리 계산.
    실제 출퇴근 기록 대신 해당 월의 근무 요일마다 같은 시간 근무했다고 가정한다.
    """
    # 1. 입력값으로 가상 계약서 만들기
    contract = Contract(
        id="manual",
        staff_id="manual",
        salary_config={
            "base_salary_type": PAY_TYPES[data["payType"]],
            "base_salary_amount": data["payAmount"],
            "allowances": {
                "night": data.get("nightWork", True),
                "weekly_holiday_pay": data.get("includeWeeklyAllowance", True),
                "meal": data.get("mealAllowance", 0),
                "transport": data.get("transportAllowance", 0),
            },
        },
        deduction_config={**TAX_OPTIONS[data.get("taxOption", "all")], "dependents": data.get("dependents", 1)},
        standard_hours_per_day=data.get("standardHoursPerDay", 8),
    )

    # 2. 해당 월 근무 요일마다 출퇴근 기록 생성
    weekdays = [WEEKDAYS[d] for d in data["workingDays"]]
    records = []
    for day in month_dates(data["year"], data["month"], weekdays):
        check_in, check_out = parse_shift(day, data["startTime"], data["endTime"])
        records.append(build_attendance_record(day, check_in, check_out, data.get("breakMinutes", 0)))

    # 3. 실제 급여 계산과 같은 로직으로 계산
    salary = build_salary("manual", data["year"], data["month"], contract, records, law, policy)

    return {
        "basePay": salary.base_salary,
        "overtimePay": salary.overtime_pay,
        "nightPay": salary.night_pay,
        "holidayPay": salary.holiday_pay,
        "weeklyAllowance": salary.weekly_holiday_pay,
        "grossPay": salary.total_gross_pay,
        "tax": salary.total_deductions,
        "netPay": salary.net_pay,
        "workDays": salary.work_days,
        "totalHours": salary.total_hours,
        "hourlyRate": salary.hourly_rate,
        "belowMinimumWage": salary.below_minimum_wage,
    }
