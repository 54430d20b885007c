"""
월 급여 계산 (SalaryAssembler)

근로기준법 조회 → 시급 환산 → 근무시간 집계 → 수당 → 공제 순으로 계산하고
확정(CONFIRMED) / 지급(PAID) 상태 변경을 관리한다.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from payroll.attendance import summarize
from payroll.calculator import compute_allowances, hourly_rate, is_below_minimum_wage
from payroll.datastore import PayrollDataStore
from payroll.deductions import compute_deductions
from payroll.errors import (
    ContractNotFoundError,
    InvalidStatusTransitionError,
    SalaryLockedError,
    SalaryNotFoundError,
)
from payroll.labor_law import RateResolver
from payroll.models import (
    EDITABLE_SALARY_STATUSES,
    AttendanceRecord,
    Contract,
    LaborLawVersion,
    SalaryCalculation,
    SalaryStatus,
)
from payroll.settings import PayrollPolicy

logger = logging.getLogger(__name__)

CONFIRMABLE_STATUSES = EDITABLE_SALARY_STATUSES


@dataclass
class BulkFailure:
    staff_id: str
    error: str


@dataclass
class BulkCalculationResult:
    calculations: List[SalaryCalculation] = field(default_factory=list)
    failures: List[BulkFailure] = field(default_factory=list)


def build_salary(
    staff_id: str,
    year: int,
    month: int,
    contract: Contract,
    attendance: List[AttendanceRecord],
    law: LaborLawVersion,
    policy: PayrollPolicy = PayrollPolicy(),
) -> SalaryCalculation:
    """
    (계약서, 출퇴근 기록, 근로기준법) 만으로 결정되는 순수 계산.
    같은 입력이면 항상 같은 결과가 나온다.
    """
    rate = hourly_rate(contract)
    summary = summarize(attendance, policy.week_grouping)
    allowances = compute_allowances(contract, rate, summary, law)
    deductions = compute_deductions(contract, allowances, law, policy)

    return SalaryCalculation(
        staff_id=staff_id,
        company_id=contract.company_id,
        year=year,
        month=month,
        **allowances.model_dump(),
        **deductions.model_dump(),
        net_pay=allowances.total_gross_pay - deductions.total_deductions,
        hourly_rate=rate,
        **summary.model_dump(),
        labor_law_version=law.version,
        used_default_labor_law=law.is_default,
        below_minimum_wage=is_below_minimum_wage(rate, law),
        status=SalaryStatus.DRAFT,
    )


class SalaryAssembler:
    def __init__(
        self,
        store: PayrollDataStore,
        policy: PayrollPolicy = PayrollPolicy(),
        resolver: Optional[RateResolver] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.policy = policy
        self.resolver = resolver or RateResolver(store)
        self._now = now

    def calculate_monthly_salary(self, staff_id: str, year: int, month: int) -> SalaryCalculation:
        existing = self.store.find_salary(staff_id, year, month)
        if existing is not None and existing.is_locked:
            raise SalaryLockedError(staff_id, year, month, existing.status.value)

        law = self.resolver.get_labor_law()

        contract = self.store.get_active_contract(staff_id)
        if contract is None:
            raise ContractNotFoundError(staff_id)

        attendance = self.store.get_attendance(staff_id, year, month)

        calculation = build_salary(staff_id, year, month, contract, attendance, law, self.policy)
        if existing is not None:
            calculation = calculation.model_copy(update={"id": existing.id})

        if calculation.used_default_labor_law:
            logger.warning("Salary for %s %d-%02d computed with default labor law", staff_id, year, month)
        if calculation.below_minimum_wage:
            logger.warning(
                "Hourly rate %.0f for %s is below minimum wage %d",
                calculation.hourly_rate, staff_id, law.minimum_wage_hourly,
            )
        logger.info(
            "Calculated salary for %s %d-%02d: gross=%d deductions=%d net=%d",
            staff_id, year, month,
            calculation.total_gross_pay, calculation.total_deductions, calculation.net_pay,
        )
        return calculation

    def calculate_and_save(self, staff_id: str, year: int, month: int) -> SalaryCalculation:
        calculation = self.calculate_monthly_salary(staff_id, year, month)
        return self.store.save_salary(calculation)

    def bulk_report(self, company_id: str, year: int, month: int, save: bool = False) -> BulkCalculationResult:
        """직원별로 실패해도 나머지는 계속 계산한다."""
        result = BulkCalculationResult()

        for staff_id in self.store.list_active_staff(company_id):
            try:
                if save:
                    calculation = self.calculate_and_save(staff_id, year, month)
                else:
                    calculation = self.calculate_monthly_salary(staff_id, year, month)
            except Exception as e:
                logger.exception("Failed to calculate salary for staff %s", staff_id)
                result.failures.append(BulkFailure(staff_id=staff_id, error=str(e)))
                continue
            result.calculations.append(calculation)

        logger.info(
            "Bulk salary %s %d-%02d: %d succeeded, %d failed",
            company_id, year, month, len(result.calculations), len(result.failures),
        )
        return result

    def calculate_bulk_salaries(
        self, company_id: str, year: int, month: int, save: bool = False
    ) -> List[SalaryCalculation]:
        return self.bulk_report(company_id, year, month, save=save).calculations

    def confirm_salary(self, salary_id: str, confirmed_by: str) -> SalaryCalculation:
        salary = self._get_salary(salary_id)
        if salary.status not in CONFIRMABLE_STATUSES:
            raise InvalidStatusTransitionError(salary_id, salary.status.value, SalaryStatus.CONFIRMED.value)

        # 조회 이후 다른 요청이 먼저 상태를 바꿨다면 저장소가 InvalidStatusTransitionError를 낸다
        updated = self.store.update_salary_status(
            salary_id,
            SalaryStatus.CONFIRMED,
            expected=CONFIRMABLE_STATUSES,
            confirmed_by=confirmed_by,
            confirmed_at=self._now(),
        )
        logger.info("Salary %s confirmed by %s", salary_id, confirmed_by)
        return updated

    def mark_as_paid(self, salary_id: str) -> SalaryCalculation:
        salary = self._get_salary(salary_id)
        if salary.status != SalaryStatus.CONFIRMED:
            raise InvalidStatusTransitionError(salary_id, salary.status.value, SalaryStatus.PAID.value)

        updated = self.store.update_salary_status(
            salary_id, SalaryStatus.PAID, expected=(SalaryStatus.CONFIRMED,), paid_at=self._now()
        )
        logger.info("Salary %s marked as paid", salary_id)
        return updated

    def _get_salary(self, salary_id: str) -> SalaryCalculation:
        salary = self.store.get_salary(salary_id)
        if salary is None:
            raise SalaryNotFoundError(salary_id)
        return salary
