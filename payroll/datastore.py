"""
급여 계산에 필요한 데이터 조회/저장 창구 (PayrollDataStore)

SalaryAssembler는 이 인터페이스만 알고, 실제 저장소는 생성자에서 주입받는다.
- SupabaseDataStore: 운영용 (contracts, attendances, labor_law_versions, users, salaries 테이블)
- InMemoryDataStore: 테스트 / 로컬 실행용
"""

import calendar
import logging
import threading
import uuid
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from payroll.attendance import is_payable
from payroll.errors import (
    InvalidContractError,
    InvalidStatusTransitionError,
    SalaryLockedError,
    SalaryNotFoundError,
)
from payroll.labor_law import select_active_version
from payroll.models import (
    EDITABLE_SALARY_STATUSES,
    AttendanceRecord,
    Contract,
    LaborLawVersion,
    SalaryCalculation,
    SalaryStatus,
)

logger = logging.getLogger(__name__)

# 급여 일괄 계산 대상 역할
PAYROLL_ROLES = ("staff", "manager", "store_manager", "team_leader")

# salaries 테이블 컬럼
SALARY_COLUMNS = (
    "staff_id", "company_id", "year", "month",
    "base_salary", "overtime_pay", "night_pay", "holiday_pay", "weekly_holiday_pay",
    "meal_allowance", "transport_allowance", "position_allowance", "total_gross_pay",
    "national_pension", "health_insurance", "long_term_care", "employment_insurance",
    "income_tax", "local_income_tax", "total_deductions", "net_pay",
    "work_days", "total_hours", "status", "confirmed_at", "confirmed_by", "paid_at",
)


class PayrollDataStore(Protocol):
    def get_active_contract(self, staff_id: str) -> Optional[Contract]: ...

    def get_attendance(self, staff_id: str, year: int, month: int) -> List[AttendanceRecord]: ...

    def get_active_labor_law(self, as_of: date) -> Optional[LaborLawVersion]: ...

    def list_active_staff(self, company_id: str) -> List[str]: ...

    def find_salary(self, staff_id: str, year: int, month: int) -> Optional[SalaryCalculation]: ...

    def get_salary(self, salary_id: str) -> Optional[SalaryCalculation]: ...

    def save_salary(self, calculation: SalaryCalculation) -> SalaryCalculation:
        """DRAFT/PENDING이면 덮어쓰고, 없으면 새로 저장. 확정·지급된 row가 있으면 SalaryLockedError."""
        ...

    def update_salary_status(
        self,
        salary_id: str,
        status: SalaryStatus,
        expected: Optional[Iterable[SalaryStatus]] = None,
        **stamps,
    ) -> SalaryCalculation:
        """현재 상태가 expected 중 하나일 때만 변경. 아니면 InvalidStatusTransitionError."""
        ...


def parse_contract(row: dict) -> Contract:
    try:
        return Contract.model_validate(row)
    except ValidationError as e:
        raise InvalidContractError(f"Invalid contract {row.get('id')}: {e}") from e


def month_range(year: int, month: int):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class SupabaseDataStore:
    def __init__(self, client):
        self.client = client

    def get_active_contract(self, staff_id: str) -> Optional[Contract]:
        response = (
            self.client.table("contracts")
            .select("*")
            .eq("staff_id", staff_id)
            .eq("status", "ACTIVE")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_contract(response.data[0])

    def get_attendance(self, staff_id: str, year: int, month: int) -> List[AttendanceRecord]:
        start, end = month_range(year, month)
        response = (
            self.client.table("attendances")
            .select("*")
            .eq("staff_id", staff_id)
            .gte("work_date", start.isoformat())
            .lte("work_date", end.isoformat())
            .order("work_date")
            .execute()
        )
        records = [AttendanceRecord.model_validate(row) for row in response.data or []]
        # status가 NULL인 row까지 남기려고 SQL NOT IN 대신 여기서 거른다
        return [r for r in records if is_payable(r)]

    def get_active_labor_law(self, as_of: date) -> Optional[LaborLawVersion]:
        response = (
            self.client.table("labor_law_versions")
            .select("*")
            .lte("effective_date", as_of.isoformat())
            .eq("status", "ACTIVE")
            .order("effective_date", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return LaborLawVersion.model_validate(response.data[0])

    def list_active_staff(self, company_id: str) -> List[str]:
        response = (
            self.client.table("users")
            .select("id")
            .eq("company_id", company_id)
            .eq("status", "ACTIVE")
            .in_("role", list(PAYROLL_ROLES))
            .execute()
        )
        return [row["id"] for row in response.data or []]

    def find_salary(self, staff_id: str, year: int, month: int) -> Optional[SalaryCalculation]:
        response = (
            self.client.table("salaries")
            .select("*")
            .eq("staff_id", staff_id)
            .eq("year", year)
            .eq("month", month)
            .limit(1)
            .execute()
        )
        return self._to_salary(response.data[0]) if response.data else None

    def get_salary(self, salary_id: str) -> Optional[SalaryCalculation]:
        response = self.client.table("salaries").select("*").eq("id", salary_id).limit(1).execute()
        return self._to_salary(response.data[0]) if response.data else None

    def save_salary(self, calculation: SalaryCalculation) -> SalaryCalculation:
        row = calculation.model_dump(mode="json", include=set(SALARY_COLUMNS))

        # DRAFT/PENDING row만 덮어쓴다. 확정·지급된 row는 조건에 걸리지 않아 그대로 남음
        response = (
            self.client.table("salaries")
            .update(row)
            .eq("staff_id", calculation.staff_id)
            .eq("year", calculation.year)
            .eq("month", calculation.month)
            .in_("status", [s.value for s in EDITABLE_SALARY_STATUSES])
            .execute()
        )
        if not response.data:
            existing = self.find_salary(calculation.staff_id, calculation.year, calculation.month)
            if existing is not None:
                raise SalaryLockedError(
                    calculation.staff_id, calculation.year, calculation.month, existing.status.value
                )
            # (staff_id, year, month) unique 제약이 동시 insert를 막는다
            response = self.client.table("salaries").insert(row).execute()

        return calculation.model_copy(update={"id": response.data[0]["id"]})

    def update_salary_status(
        self,
        salary_id: str,
        status: SalaryStatus,
        expected: Optional[Iterable[SalaryStatus]] = None,
        **stamps,
    ) -> SalaryCalculation:
        update = {"status": status.value}
        for key, value in stamps.items():
            update[key] = value.isoformat() if hasattr(value, "isoformat") else value

        query = self.client.table("salaries").update(update).eq("id", salary_id)
        if expected is not None:
            query = query.in_("status", [s.value for s in expected])
        response = query.execute()

        if not response.data:
            current = self.get_salary(salary_id)
            if current is None:
                raise SalaryNotFoundError(salary_id)
            raise InvalidStatusTransitionError(salary_id, current.status.value, status.value)
        return self._to_salary(response.data[0])

    @staticmethod
    def _to_salary(row: dict) -> SalaryCalculation:
        # 계산 전 생성된 row는 합계 컬럼이 NULL일 수 있음
        return SalaryCalculation.model_validate({k: v for k, v in row.items() if v is not None})


class InMemoryDataStore:
    def __init__(self):
        self.contracts: List[Contract] = []
        self.attendance: Dict[str, List[AttendanceRecord]] = {}
        self.labor_laws: List[LaborLawVersion] = []
        self.users: List[dict] = []
        self.salaries: Dict[str, SalaryCalculation] = {}
        self._lock = threading.Lock()

    # 테스트 데이터 등록용

    def add_contract(self, contract) -> Contract:
        if isinstance(contract, dict):
            contract = parse_contract(contract)
        self.contracts.append(contract)
        return contract

    def add_attendance(self, staff_id: str, records: List[AttendanceRecord]) -> None:
        self.attendance.setdefault(staff_id, []).extend(records)

    def add_labor_law(self, law: LaborLawVersion) -> None:
        self.labor_laws.append(law)

    def add_user(self, user_id: str, company_id: str, role: str = "staff", status: str = "ACTIVE") -> None:
        self.users.append({"id": user_id, "company_id": company_id, "role": role, "status": status})

    # PayrollDataStore

    def get_active_contract(self, staff_id: str) -> Optional[Contract]:
        for contract in reversed(self.contracts):
            if contract.staff_id == staff_id and contract.status == "ACTIVE":
                return contract
        return None

    def get_attendance(self, staff_id: str, year: int, month: int) -> List[AttendanceRecord]:
        start, end = month_range(year, month)
        return [
            r for r in self.attendance.get(staff_id, [])
            if start <= r.work_date <= end and is_payable(r)
        ]

    def get_active_labor_law(self, as_of: date) -> Optional[LaborLawVersion]:
        return select_active_version(self.labor_laws, as_of)

    def list_active_staff(self, company_id: str) -> List[str]:
        return [
            u["id"] for u in self.users
            if u["company_id"] == company_id and u["status"] == "ACTIVE" and u["role"] in PAYROLL_ROLES
        ]

    def find_salary(self, staff_id: str, year: int, month: int) -> Optional[SalaryCalculation]:
        return self._find(staff_id, year, month)

    def _find(self, staff_id: str, year: int, month: int) -> Optional[SalaryCalculation]:
        for salary in self.salaries.values():
            if (salary.staff_id, salary.year, salary.month) == (staff_id, year, month):
                return salary
        return None

    def get_salary(self, salary_id: str) -> Optional[SalaryCalculation]:
        return self.salaries.get(salary_id)

    def save_salary(self, calculation: SalaryCalculation) -> SalaryCalculation:
        with self._lock:
            existing = self._find(calculation.staff_id, calculation.year, calculation.month)
            if existing is not None and existing.status not in EDITABLE_SALARY_STATUSES:
                raise SalaryLockedError(
                    calculation.staff_id, calculation.year, calculation.month, existing.status.value
                )
            salary_id = existing.id if existing else str(uuid.uuid4())
            saved = calculation.model_copy(update={"id": salary_id})
            self.salaries[salary_id] = saved
            return saved

    def update_salary_status(
        self,
        salary_id: str,
        status: SalaryStatus,
        expected: Optional[Iterable[SalaryStatus]] = None,
        **stamps,
    ) -> SalaryCalculation:
        with self._lock:
            salary = self.salaries.get(salary_id)
            if salary is None:
                raise SalaryNotFoundError(salary_id)
            if expected is not None and salary.status not in tuple(expected):
                raise InvalidStatusTransitionError(salary_id, salary.status.value, status.value)
            updated = salary.model_copy(update={"status": status, **stamps})
            self.salaries[salary_id] = updated
        logger.debug("Salary %s -> %s", salary_id, status.value)
        return updated
