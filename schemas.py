from pydantic import BaseModel, Field
from typing import List, Literal

# 00:00 ~ 23:59
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CalculateSalaryInput(BaseModel):
    staffId: str
    year: int = Field(..., ge=2000)
    month: int = Field(..., ge=1, le=12)
    save: bool = False  # True면 DRAFT 상태로 salaries 테이블에 저장


class BulkCalculateInput(BaseModel):
    companyId: str
    year: int = Field(..., ge=2000)
    month: int = Field(..., ge=1, le=12)
    save: bool = False


class ConfirmSalaryInput(BaseModel):
    confirmedBy: str


class ManualPayInput(BaseModel):
    payType: Literal["시급", "일급", "월급"]
    payAmount: int = Field(..., ge=0)

    year: int = Field(..., ge=2000)
    month: int = Field(..., ge=1, le=12)
    workingDays: List[Literal["월", "화", "수", "목", "금", "토", "일"]]  # 예: ["월", "화", "수"]
    startTime: str = Field(..., pattern=TIME_PATTERN)  # 예: "09:00"
    endTime: str = Field(..., pattern=TIME_PATTERN)  # 자정 넘기면 다음날로 계산
    breakMinutes: int = Field(0, ge=0)
    standardHoursPerDay: float = Field(8, gt=0)

    includeWeeklyAllowance: bool = True
    nightWork: bool = True
    mealAllowance: int = 0
    transportAllowance: int = 0
    taxOption: Literal["none", "insurance", "all"] = "all"
    dependents: int = Field(1, ge=0)


class SeveranceInput(BaseModel):
    averageMonthlyPay: int = Field(..., ge=0)  # 최근 3개월 평균 월급
    totalWorkDays: int = Field(..., ge=0)  # 입사일부터 퇴사일까지 일수
