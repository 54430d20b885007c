from datetime import date, datetime, timezone

import pytest

from payroll.assembler import SalaryAssembler
from payroll.attendance import month_dates
from payroll.datastore import InMemoryDataStore, parse_contract
from payroll.labor_law import RateResolver
from payroll.models import AttendanceRecord

TODAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def contract_row(staff_id="s1", salary_type="HOURLY", amount=10000, allowances=None, deductions=None, **extra):
    row = {
        "id": f"c-{staff_id}",
        "staff_id": staff_id,
        "company_id": "company-1",
        "status": "ACTIVE",
        "salary_config": {
            "base_salary_type": salary_type,
            "base_salary_amount": amount,
            "allowances": allowances or {},
        },
        "deduction_config": deductions or {},
        "standard_hours_per_week": 40,
        "standard_hours_per_day": 8,
    }
    row.update(extra)
    return row


def workday_rows(year=2026, month=3, days=20, overtime_days=5, overtime_hours=2):
    """평일 days일 × 8시간, 앞의 overtime_days일은 overtime_hours 만큼 연장"""
    rows = []
    for i, day in enumerate(month_dates(year, month, weekdays=range(5))[:days]):
        extra = overtime_hours if i < overtime_days else 0
        rows.append(AttendanceRecord(work_date=day, work_hours=8 + extra, overtime_hours=extra))
    return rows


@pytest.fixture
def make_contract():
    def _make(**kwargs):
        return parse_contract(contract_row(**kwargs))
    return _make


@pytest.fixture
def store():
    return InMemoryDataStore()


@pytest.fixture
def assembler(store):
    resolver = RateResolver(store, today=lambda: TODAY)
    return SalaryAssembler(store, resolver=resolver, now=lambda: NOW)
