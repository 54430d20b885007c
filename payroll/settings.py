import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv

# .env 파일을 불러와서 환경변수 등록
load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 근로기준법 캐시 유지 시간 (초)
LABOR_LAW_CACHE_TTL_SECONDS = int(os.getenv("LABOR_LAW_CACHE_TTL_SECONDS", "3600"))

# 야간근무 판정 기준 시간대 (UTC 기준 시차, 한국은 +9)
PAYROLL_UTC_OFFSET_HOURS = int(os.getenv("PAYROLL_UTC_OFFSET_HOURS", "9"))


class InsuranceBase(str, Enum):
    """4대보험 부과 기준 금액"""

    GROSS = "GROSS"  # 총 지급액 전체
    GROSS_MINUS_NON_TAXABLE = "GROSS_MINUS_NON_TAXABLE"  # 식대·교통비(비과세) 제외


class WeekGrouping(str, Enum):
    """주휴수당 판정을 위한 주차 구분 방식"""

    CALENDAR_WEEK_OF_MONTH = "CALENDAR_WEEK_OF_MONTH"  # 달력 기준 N주차 (일요일 시작)
    ROLLING_7_DAY = "ROLLING_7_DAY"  # 1일부터 7일 단위로 끊음


@dataclass(frozen=True)
class PayrollPolicy:
    """
    회사마다 해석이 갈리는 급여 정책을 명시적으로 모아둔 설정값.
    기본값은 총 지급액 기준 보험료, 고소득자 제외 없음, 달력 주차.
    """

    insurance_base: InsuranceBase = InsuranceBase.GROSS
    high_earner_exemption: bool = False
    high_earner_ceiling: int = 5_530_000
    week_grouping: WeekGrouping = WeekGrouping.CALENDAR_WEEK_OF_MONTH


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_policy() -> PayrollPolicy:
    """환경변수에서 급여 정책을 읽어온다. 잘못된 값이면 ValueError."""
    return PayrollPolicy(
        insurance_base=InsuranceBase(os.getenv("PAYROLL_INSURANCE_BASE", InsuranceBase.GROSS.value)),
        high_earner_exemption=_env_bool("PAYROLL_HIGH_EARNER_EXEMPTION", False),
        high_earner_ceiling=int(os.getenv("PAYROLL_HIGH_EARNER_CEILING", "5530000")),
        week_grouping=WeekGrouping(
            os.getenv("PAYROLL_WEEK_GROUPING", WeekGrouping.CALENDAR_WEEK_OF_MONTH.value)
        ),
    )
