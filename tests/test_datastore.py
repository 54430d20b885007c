from datetime import date
from types import SimpleNamespace

import pytest

from payroll.datastore import InMemoryDataStore, SupabaseDataStore, month_range, parse_contract
from payroll.errors import InvalidContractError, InvalidStatusTransitionError, SalaryLockedError, SalaryNotFoundError
from payroll.models import AttendanceRecord, AttendanceStatus, BaseSalaryType, SalaryCalculation, SalaryStatus

from conftest import contract_row


def test_parse_contract_accepts_legacy_salary_config():
    row = contract_row()
    row["salary_config"] = {"baseSalaryType": "monthly", "baseSalaryAmount": 2_500_000, "allowances": None}
    row["deduction_config"] = None
    row["standard_hours_per_day"] = None

    contract = parse_contract(row)

    assert contract.salary_config.base_salary_type == BaseSalaryType.MONTHLY
    assert contract.salary_config.base_salary_amount == 2_500_000
    assert contract.salary_config.allowances.overtime is True
    assert contract.deduction_config.income_tax is True
    assert contract.deduction_config.dependents == 1
    assert contract.standard_hours_per_day == 8


def test_parse_contract_defaults_type_to_hourly():
    row = contract_row()
    row["salary_config"] = {"base_salary_amount": 10030}
    assert parse_contract(row).salary_config.base_salary_type == BaseSalaryType.HOURLY


@pytest.mark.parametrize(
    "salary_config",
    [
        {"base_salary_type": "WEEKLY", "base_salary_amount": 500_000},
        {"base_salary_type": "HOURLY", "base_salary_amount": -1},
        {"base_salary_type": "HOURLY"},
    ],
)
def test_parse_contract_rejects_invalid_config(salary_config):
    row = contract_row()
    row["salary_config"] = salary_config
    with pytest.raises(InvalidContractError):
        parse_contract(row)


def test_month_range():
    assert month_range(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_range(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))


def test_in_memory_attendance_filters_month_and_status():
    store = InMemoryDataStore()
    store.add_attendance(
        "s1",
        [
            AttendanceRecord(work_date=date(2026, 2, 28), work_hours=8),
            AttendanceRecord(work_date=date(2026, 3, 2), work_hours=8),
            AttendanceRecord(work_date=date(2026, 3, 3), work_hours=8, status=AttendanceStatus.ABSENT),
            AttendanceRecord(work_date=date(2026, 3, 4), work_hours=8, status=None),
            AttendanceRecord(work_date=date(2026, 4, 1), work_hours=8),
        ],
    )

    rows = store.get_attendance("s1", 2026, 3)
    assert [r.work_date for r in rows] == [date(2026, 3, 2), date(2026, 3, 4)]


def test_in_memory_active_contract_and_staff():
    store = InMemoryDataStore()
    store.add_contract(contract_row("s1", status="TERMINATED"))
    assert store.get_active_contract("s1") is None

    store.add_contract(contract_row("s1", amount=12000))
    assert store.get_active_contract("s1").salary_config.base_salary_amount == 12000

    store.add_user("s1", "company-1")
    store.add_user("s2", "company-1", role="owner")
    store.add_user("s3", "company-1", status="INACTIVE")
    store.add_user("s4", "company-2")
    assert store.list_active_staff("company-1") == ["s1"]


def test_in_memory_save_is_keyed_by_staff_and_month():
    store = InMemoryDataStore()
    first = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=100))
    second = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=200))

    assert first.id == second.id
    assert len(store.salaries) == 1
    assert store.get_salary(first.id).net_pay == 200


def test_in_memory_update_unknown_salary():
    with pytest.raises(SalaryNotFoundError):
        InMemoryDataStore().update_salary_status("missing", SalaryStatus.CONFIRMED)


class FakeQuery:
    """postgrest 체인(update/insert/select → eq/in_ → execute)을 리스트 위에서 흉내낸다"""

    def __init__(self, rows, op="select", payload=None):
        self.rows = rows
        self.op = op
        self.payload = payload
        self.filters = []

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def limit(self, n):
        return self

    def execute(self):
        if self.op == "insert":
            row = dict(self.payload, id=f"row-{len(self.rows) + 1}")
            self.rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [row for row in self.rows if all(f(row) for f in self.filters)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakeTable:
    def __init__(self):
        self.rows = []

    def select(self, *columns):
        return FakeQuery(self.rows)

    def update(self, payload):
        return FakeQuery(self.rows, "update", payload)

    def insert(self, payload):
        return FakeQuery(self.rows, "insert", payload)


class FakeClient:
    def __init__(self):
        self.tables = {}

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())


def test_supabase_save_inserts_then_updates_draft():
    client = FakeClient()
    store = SupabaseDataStore(client)

    first = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=100))
    second = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=200))

    rows = client.tables["salaries"].rows
    assert first.id == second.id
    assert len(rows) == 1
    assert rows[0]["net_pay"] == 200


def test_supabase_save_never_overwrites_confirmed_row():
    client = FakeClient()
    store = SupabaseDataStore(client)
    saved = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=100))
    store.update_salary_status(
        saved.id, SalaryStatus.CONFIRMED, expected=(SalaryStatus.DRAFT,), confirmed_by="admin-1"
    )

    with pytest.raises(SalaryLockedError):
        store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3, net_pay=999))

    row = client.tables["salaries"].rows[0]
    assert row["status"] == "CONFIRMED"
    assert row["confirmed_by"] == "admin-1"
    assert row["net_pay"] == 100


def test_supabase_status_update_checks_current_status():
    store = SupabaseDataStore(FakeClient())
    saved = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3))
    store.update_salary_status(saved.id, SalaryStatus.CONFIRMED, expected=(SalaryStatus.DRAFT,))

    with pytest.raises(InvalidStatusTransitionError):
        store.update_salary_status(saved.id, SalaryStatus.CONFIRMED, expected=(SalaryStatus.DRAFT,))

    with pytest.raises(SalaryNotFoundError):
        store.update_salary_status("missing", SalaryStatus.PAID, expected=(SalaryStatus.CONFIRMED,))


def test_in_memory_save_rejects_locked_record():
    store = InMemoryDataStore()
    saved = store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3))
    store.update_salary_status(saved.id, SalaryStatus.PAID)

    with pytest.raises(SalaryLockedError):
        store.save_salary(SalaryCalculation(staff_id="s1", year=2026, month=3))
