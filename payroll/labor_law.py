"""
근로기준법 요율 조회 (RateResolver)

계산 기준일에 유효한 ACTIVE 버전 중 effective_date가 가장 최근인 것을 사용한다.
조회 결과는 1시간 동안 메모리에 캐시하며, 그 사이 법령이 바뀌어도 즉시 반영되지 않는다.
조회에 실패하면 DEFAULT_LABOR_LAW로 계산을 계속하고, 결과의 used_default_labor_law로 표시된다.
"""

import logging
import time
from datetime import date
from typing import Callable, Iterable, Optional

from payroll.models import DEFAULT_LABOR_LAW_ID, LaborLawStatus, LaborLawVersion
from payroll.settings import LABOR_LAW_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

# 2025년 기준 최저시급
DEFAULT_MINIMUM_WAGE = 10030

# 4대보험 요율 (2025년 기준)
INSURANCE_RATES = {
    "national_pension": 0.045,  # 국민연금 4.5%
    "health_insurance": 0.03545,  # 건강보험 3.545%
    "long_term_care": 0.1281,  # 장기요양보험 (건보의 12.81%)
    "employment_insurance": 0.009,  # 고용보험 0.9%
}

# 수당 배율
ALLOWANCE_RATES = {
    "overtime": 1.5,  # 연장근로 150%
    "night": 0.5,  # 야간근로 50% 가산
    "holiday": 1.5,  # 휴일근로 150%
}

# 조회 실패 시 사용하는 기본 근로기준법
DEFAULT_LABOR_LAW = LaborLawVersion(
    id=DEFAULT_LABOR_LAW_ID,
    version="2025.01",
    effective_date=date(2025, 1, 1),
    minimum_wage_hourly=DEFAULT_MINIMUM_WAGE,
    overtime_rate=ALLOWANCE_RATES["overtime"],
    night_rate=ALLOWANCE_RATES["night"],
    holiday_rate=ALLOWANCE_RATES["holiday"],
    national_pension_rate=INSURANCE_RATES["national_pension"],
    health_insurance_rate=INSURANCE_RATES["health_insurance"],
    long_term_care_rate=INSURANCE_RATES["long_term_care"],
    employment_insurance_rate=INSURANCE_RATES["employment_insurance"],
    status=LaborLawStatus.ACTIVE,
)


def select_active_version(versions: Iterable[LaborLawVersion], as_of: date) -> Optional[LaborLawVersion]:
    """ACTIVE 상태이면서 effective_date <= as_of 인 버전 중 가장 최근 것"""
    candidates = [
        v for v in versions
        if v.status == LaborLawStatus.ACTIVE and v.effective_date <= as_of
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda v: v.effective_date)


class RateResolver:
    def __init__(
        self,
        store,
        ttl_seconds: float = LABOR_LAW_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._today = today
        self._cached: Optional[LaborLawVersion] = None
        self._cached_for: Optional[date] = None
        self._cached_at = 0.0

    def get_labor_law(self, as_of: Optional[date] = None) -> LaborLawVersion:
        as_of = as_of or self._today()

        if (
            self._cached is not None
            and self._cached_for == as_of
            and self._clock() - self._cached_at < self.ttl_seconds
        ):
            return self._cached

        try:
            law = self.store.get_active_labor_law(as_of)
        except Exception:
            logger.warning("Labor law lookup failed for %s; using default %s", as_of, DEFAULT_LABOR_LAW.version,
                           exc_info=True)
            return DEFAULT_LABOR_LAW

        if law is None:
            logger.warning("No ACTIVE labor law effective on %s; using default %s", as_of, DEFAULT_LABOR_LAW.version)
            return DEFAULT_LABOR_LAW

        self._cached = law
        self._cached_for = as_of
        self._cached_at = self._clock()
        return law

    def invalidate(self) -> None:
        self._cached = None
        self._cached_for = None
