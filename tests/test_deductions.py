import pytest

from payroll.deductions import calculate_income_tax, compute_deductions, income_tax_rate, insurance_base
from payroll.labor_law import DEFAULT_LABOR_LAW
from payroll.models import AllowanceBreakdown
from payroll.settings import InsuranceBase, PayrollPolicy


def gross(amount, **extra):
    return AllowanceBreakdown(base_salary=amount, total_gross_pay=amount, **extra)


@pytest.mark.parametrize(
    "amount, rate",
    [
        (1_060_000, 0.0),
        (1_060_001, 0.06),
        (1_500_000, 0.06),
        (3_000_000, 0.15),
        (4_500_000, 0.24),
        (8_800_000, 0.35),
        (8_800_001, 0.38),
    ],
)
def test_income_tax_rate_brackets(amount, rate):
    assert income_tax_rate(amount) == rate


def test_income_tax_applies_single_bracket():
    assert calculate_income_tax(1_750_000, 1) == (240_000, 24_000)
    assert calculate_income_tax(9_000_000, 1) == (3_363_000, 336_300)


def test_income_tax_dependents():
    assert calculate_income_tax(1_750_000, 3) == (195_000, 19_500)
    assert calculate_income_tax(1_200_000, 10) == (0, 0)
    assert calculate_income_tax(1_000_000, 1) == (0, 0)


def test_four_insurances(make_contract):
    result = compute_deductions(make_contract(), gross(2_000_000), DEFAULT_LABOR_LAW)

    assert result.national_pension == 90_000
    assert result.health_insurance == 70_900
    assert result.employment_insurance == 18_000


def test_long_term_care_compounds_on_health_insurance(make_contract):
    result = compute_deductions(make_contract(), gross(2_000_000), DEFAULT_LABOR_LAW)
    # 70,900 × 12.81% (총급여 × 12.81%가 아님)
    assert result.long_term_care == 9_082


def test_total_is_sum_of_items(make_contract):
    result = compute_deductions(make_contract(), gross(2_000_000), DEFAULT_LABOR_LAW)
    assert result.total_deductions == (
        result.national_pension
        + result.health_insurance
        + result.long_term_care
        + result.employment_insurance
        + result.income_tax
        + result.local_income_tax
    )


def test_opt_outs(make_contract):
    contract = make_contract(deductions={"national_pension": False, "health_insurance": False, "income_tax": False})
    result = compute_deductions(contract, gross(2_000_000), DEFAULT_LABOR_LAW)

    assert result.national_pension == 0
    assert result.health_insurance == 0
    assert result.long_term_care == 0
    assert result.income_tax == 0
    assert result.local_income_tax == 0
    assert result.employment_insurance == 18_000
    assert result.total_deductions == 18_000


def test_null_flags_mean_enabled(make_contract):
    contract = make_contract(deductions={"national_pension": None})
    assert contract.deduction_config.national_pension is True


def test_insurance_base_excludes_non_taxable_when_configured(make_contract):
    allowances = gross(2_000_000, meal_allowance=200_000)
    allowances = allowances.model_copy(update={"total_gross_pay": 2_200_000})
    policy = PayrollPolicy(insurance_base=InsuranceBase.GROSS_MINUS_NON_TAXABLE)

    assert insurance_base(allowances, PayrollPolicy()) == 2_200_000
    assert insurance_base(allowances, policy) == 2_000_000

    result = compute_deductions(make_contract(), allowances, DEFAULT_LABOR_LAW, policy)
    assert result.national_pension == 90_000
    # 소득세는 항상 총 지급액 기준
    assert result.income_tax == 307_500


def test_high_earner_exemption(make_contract):
    allowances = gross(6_000_000)

    default = compute_deductions(make_contract(), allowances, DEFAULT_LABOR_LAW)
    assert default.national_pension == 270_000

    policy = PayrollPolicy(high_earner_exemption=True)
    exempt = compute_deductions(make_contract(), allowances, DEFAULT_LABOR_LAW, policy)
    assert exempt.national_pension == 0
    assert exempt.health_insurance == 0
    assert exempt.long_term_care == 0
    assert exempt.employment_insurance == 54_000
    assert exempt.income_tax > 0


def test_high_earner_exemption_below_ceiling(make_contract):
    policy = PayrollPolicy(high_earner_exemption=True)
    result = compute_deductions(make_contract(), gross(5_530_000), DEFAULT_LABOR_LAW, policy)
    assert result.national_pension == 248_850
