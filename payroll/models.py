"""
급여 계산에 쓰이는 도메인 모델 (pydantic)

Supabase에서 읽어온 row(dict)는 전부 여기 모델로 검증한 뒤에 계산 단계로 넘긴다.
계산 코드 안에서 dict.get("...") 으로 기본값을 맞추는 일이 없도록 하기 위함.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_LABOR_LAW_ID = "default"


class LaborLawStatus(str, Enum):
    DRAFT = "DRAFT"
    VERIFIED = "VERIFIED"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class LaborLawVersion(BaseModel):
    """근로기준법 버전별 요율 (DRAFT 이후로는 수정 불가)"""

    model_config = ConfigDict(frozen=True)

    id: str
    version: str = ""
    effective_date: date
    minimum_wage_hourly: int
    overtime_rate: float
    night_rate: float
    holiday_rate: float
    national_pension_rate: float
    health_insurance_rate: float
    long_term_care_rate: float
    employment_insurance_rate: float
    status: LaborLawStatus = LaborLawStatus.ACTIVE

    @property
    def is_default(self) -> bool:
        return self.id == DEFAULT_LABOR_LAW_ID


class BaseSalaryType(str, Enum):
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"


class AllowanceConfig(BaseModel):
    """수당 설정. 명시적으로 false가 아니면 지급."""

    overtime: bool = Field(True, validation_alias=AliasChoices("overtime", "overtime_allowance"))
    night: bool = Field(True, validation_alias=AliasChoices("night", "night_allowance"))
    holiday: bool = Field(True, validation_alias=AliasChoices("holiday", "holiday_allowance"))
    weekly_holiday_pay: bool = True
    meal: int = Field(0, validation_alias=AliasChoices("meal", "meal_allowance"))
    transport: int = Field(0, validation_alias=AliasChoices("transport", "transport_allowance"))
    position: int = Field(0, validation_alias=AliasChoices("position", "position_allowance"))

    @field_validator("overtime", "night", "holiday", "weekly_holiday_pay", mode="before")
    @classmethod
    def _null_flag_means_enabled(cls, value):
        return True if value is None else value

    @field_validator("meal", "transport", "position", mode="before")
    @classmethod
    def _null_amount_means_zero(cls, value):
        return 0 if value is None else value


class _SalaryConfigBase(BaseModel):
    base_salary_amount: int = Field(ge=0)
    allowances: AllowanceConfig = Field(default_factory=AllowanceConfig)
    payment_date: int = 10

    @field_validator("allowances", mode="before")
    @classmethod
    def _null_allowances(cls, value):
        return {} if value is None else value


class HourlySalary(_SalaryConfigBase):
    base_salary_type: Literal["HOURLY"] = "HOURLY"


class DailySalary(_SalaryConfigBase):
    base_salary_type: Literal["DAILY"] = "DAILY"


class MonthlySalary(_SalaryConfigBase):
    base_salary_type: Literal["MONTHLY"] = "MONTHLY"


SalaryConfig = Annotated[
    Union[HourlySalary, DailySalary, MonthlySalary],
    Field(discriminator="base_salary_type"),
]


class DeductionConfig(BaseModel):
    """공제 설정. 명시적으로 false가 아니면 공제."""

    national_pension: bool = True
    health_insurance: bool = True
    employment_insurance: bool = True
    income_tax: bool = True
    dependents: int = Field(1, ge=0)  # 부양가족 수 (본인 포함)

    @field_validator("national_pension", "health_insurance", "employment_insurance", "income_tax", mode="before")
    @classmethod
    def _null_flag_means_enabled(cls, value):
        return True if value is None else value


_SALARY_CONFIG_KEYS = {
    "baseSalaryType": "base_salary_type",
    "baseSalaryAmount": "base_salary_amount",
    "paymentDate": "payment_date",
}


class Contract(BaseModel):
    id: str
    staff_id: str
    company_id: Optional[str] = None
    status: str = "ACTIVE"
    salary_config: SalaryConfig
    deduction_config: DeductionConfig = Field(default_factory=DeductionConfig)
    standard_hours_per_week: float = Field(40, gt=0)
    standard_hours_per_day: float = Field(8, gt=0)

    @field_validator("salary_config", mode="before")
    @classmethod
    def _normalize_salary_config(cls, value):
        # 예전 계약서는 camelCase 키, 소문자 타입('hourly')으로 저장돼 있음
        if not isinstance(value, dict):
            return value
        config = dict(value)
        for camel, snake in _SALARY_CONFIG_KEYS.items():
            if camel in config and snake not in config:
                config[snake] = config.pop(camel)
        salary_type = config.get("base_salary_type") or BaseSalaryType.HOURLY.value
        config["base_salary_type"] = str(salary_type).upper()
        return config

    @field_validator("deduction_config", mode="before")
    @classmethod
    def _null_deductions(cls, value):
        return {} if value is None else value

    @field_validator("standard_hours_per_week", "standard_hours_per_day", mode="before")
    @classmethod
    def _null_hours(cls, value, info):
        if value is None:
            return 40 if info.field_name == "standard_hours_per_week" else 8
        return value


class AttendanceStatus(str, Enum):
    NORMAL = "NORMAL"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    ABSENT = "ABSENT"
    VACATION = "VACATION"
    UNSCHEDULED = "UNSCHEDULED"  # 스케줄 없는 출근, 관리자 승인 전
    OVERTIME = "OVERTIME"  # UNSCHEDULED 승인 후


# 급여 집계에서 빠지는 출근 상태
EXCLUDED_ATTENDANCE_STATUSES = (AttendanceStatus.ABSENT, AttendanceStatus.UNSCHEDULED)


class AttendanceRecord(BaseModel):
    work_date: date
    work_hours: float = 0
    overtime_hours: float = 0
    night_hours: float = 0
    holiday_hours: float = 0
    actual_check_in: Optional[datetime] = None
    actual_check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = AttendanceStatus.NORMAL

    @field_validator("work_hours", "overtime_hours", "night_hours", "holiday_hours", mode="before")
    @classmethod
    def _null_hours(cls, value):
        return 0 if value is None else value


class WeeklyHours(BaseModel):
    week_number: int
    hours: float
    has_weekly_holiday_pay: bool


class AttendanceSummary(BaseModel):
    work_days: int = 0
    total_hours: float = 0
    regular_hours: float = 0
    overtime_hours: float = 0
    night_hours: float = 0
    holiday_hours: float = 0
    weekly_hours_breakdown: List[WeeklyHours] = Field(default_factory=list)


class AllowanceBreakdown(BaseModel):
    base_salary: int = 0
    overtime_pay: int = 0
    night_pay: int = 0
    holiday_pay: int = 0
    weekly_holiday_pay: int = 0
    meal_allowance: int = 0
    transport_allowance: int = 0
    position_allowance: int = 0
    total_gross_pay: int = 0


class DeductionBreakdown(BaseModel):
    national_pension: int = 0
    health_insurance: int = 0
    long_term_care: int = 0
    employment_insurance: int = 0
    income_tax: int = 0
    local_income_tax: int = 0
    total_deductions: int = 0


class SalaryStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"


# 재계산이 허용되지 않는 상태
LOCKED_SALARY_STATUSES = (SalaryStatus.CONFIRMED, SalaryStatus.PAID)

# 재계산 결과로 덮어쓸 수 있는 상태 (확정 가능한 상태이기도 함)
EDITABLE_SALARY_STATUSES = (SalaryStatus.DRAFT, SalaryStatus.PENDING)


class SalaryCalculation(AllowanceBreakdown, DeductionBreakdown):
    """월 급여 계산 결과 (staff_id, year, month 당 1건)"""

    id: Optional[str] = None
    staff_id: str
    company_id: Optional[str] = None
    year: int
    month: int

    net_pay: int = 0

    # 근무 정보
    hourly_rate: float = 0
    work_days: int = 0
    total_hours: float = 0
    regular_hours: float = 0
    overtime_hours: float = 0
    night_hours: float = 0
    holiday_hours: float = 0
    weekly_hours_breakdown: List[WeeklyHours] = Field(default_factory=list)

    # 적용된 근로기준법
    labor_law_version: str = ""
    used_default_labor_law: bool = False
    below_minimum_wage: bool = False

    status: SalaryStatus = SalaryStatus.DRAFT
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    paid_at: Optional[datetime] = None

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_SALARY_STATUSES
