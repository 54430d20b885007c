class PayrollError(Exception):
    """급여 계산 파이프라인의 모든 예외의 부모 클래스"""


class ContractNotFoundError(PayrollError):
    def __init__(self, staff_id: str):
        super().__init__(f"Active contract not found for staff {staff_id}")
        self.staff_id = staff_id


class InvalidContractError(PayrollError):
    """계약서의 salary_config / deduction_config 형식이 잘못된 경우"""


class SalaryNotFoundError(PayrollError):
    def __init__(self, salary_id: str):
        super().__init__(f"Salary record {salary_id} not found")
        self.salary_id = salary_id


class InvalidStatusTransitionError(PayrollError):
    def __init__(self, salary_id: str, current: str, target: str):
        super().__init__(f"Salary {salary_id} cannot move from {current} to {target}")
        self.salary_id = salary_id
        self.current = current
        self.target = target


class SalaryLockedError(PayrollError):
    """확정(CONFIRMED) 또는 지급(PAID)된 급여를 다시 계산하려는 경우"""

    def __init__(self, staff_id: str, year: int, month: int, status: str):
        super().__init__(
            f"Salary for staff {staff_id} {year}-{month:02d} is already {status}; recalculation rejected"
        )
        self.staff_id = staff_id
        self.year = year
        self.month = month
        self.status = status
