"""
4대보험 및 소득세 공제 계산 (DeductionEngine)
"""

from payroll.models import AllowanceBreakdown, Contract, DeductionBreakdown, LaborLawVersion
from payroll.rounding import won
from payroll.settings import InsuranceBase, PayrollPolicy

# 간이세액표 근사치: (월 총지급액 상한, 세율). 누진 합산이 아니라 구간 하나의 세율을 전체에 적용
INCOME_TAX_BRACKETS = (
    (1_060_000, 0.0),
    (1_500_000, 0.06),
    (3_000_000, 0.15),
    (4_500_000, 0.24),
    (8_800_000, 0.35),
)
TOP_INCOME_TAX_RATE = 0.38

DEPENDENT_DEDUCTION = 150_000  # 부양가족 1인당 공제액
LOCAL_INCOME_TAX_RATE = 0.1  # 지방소득세 = 소득세의 10%


def income_tax_rate(gross_pay: int) -> float:
    for ceiling, rate in INCOME_TAX_BRACKETS:
        if gross_pay <= ceiling:
            return rate
    return TOP_INCOME_TAX_RATE


def calculate_income_tax(gross_pay: int, dependents: int = 1):
    """(소득세, 지방소득세)"""
    taxable = max(0, gross_pay - dependents * DEPENDENT_DEDUCTION)
    income_tax = won(taxable, income_tax_rate(gross_pay))
    return income_tax, won(income_tax, LOCAL_INCOME_TAX_RATE)


def insurance_base(allowances: AllowanceBreakdown, policy: PayrollPolicy) -> int:
    if policy.insurance_base == InsuranceBase.GROSS_MINUS_NON_TAXABLE:
        return allowances.total_gross_pay - allowances.meal_allowance - allowances.transport_allowance
    return allowances.total_gross_pay


def compute_deductions(
    contract: Contract,
    allowances: AllowanceBreakdown,
    law: LaborLawVersion,
    policy: PayrollPolicy = PayrollPolicy(),
) -> DeductionBreakdown:
    config = contract.deduction_config
    gross = allowances.total_gross_pay
    base = insurance_base(allowances, policy)

    # 고소득자 국민연금·건강보험 제외 (정책 설정 시에만)
    exempt = policy.high_earner_exemption and base > policy.high_earner_ceiling

    national_pension = 0
    if config.national_pension and not exempt:
        national_pension = won(base, law.national_pension_rate)

    health_insurance = 0
    long_term_care = 0
    if config.health_insurance and not exempt:
        health_insurance = won(base, law.health_insurance_rate)
        # 장기요양보험은 총급여가 아니라 건강보험료에 요율을 곱한다
        long_term_care = won(health_insurance, law.long_term_care_rate)

    employment_insurance = 0
    if config.employment_insurance:
        employment_insurance = won(base, law.employment_insurance_rate)

    income_tax = local_income_tax = 0
    if config.income_tax:
        income_tax, local_income_tax = calculate_income_tax(gross, config.dependents)

    return DeductionBreakdown(
        national_pension=national_pension,
        health_insurance=health_insurance,
        long_term_care=long_term_care,
        employment_insurance=employment_insurance,
        income_tax=income_tax,
        local_income_tax=local_income_tax,
        total_deductions=(
            national_pension
            + health_insurance
            + long_term_care
            + employment_insurance
            + income_tax
            + local_income_tax
        ),
    )
