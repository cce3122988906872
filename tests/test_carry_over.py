import pytest
from datetime import date
from types import SimpleNamespace

from hrleave.schemas.year_end import BalanceProjection, EmployeeProjection, QuotaPolicy
from hrleave.services.rollover import (
    evaluate_carry_over,
    is_tenure_eligible,
    project_balances,
    summarize_carry_over,
)


def _row(leave_type="VACATION", entitlement=10.0, used=3.0, remaining=7.0):
    return SimpleNamespace(leave_type=leave_type, entitlement=entitlement, used=used, remaining=remaining)


VACATION_POLICY = {"VACATION": QuotaPolicy(default_days=10, allow_carry_over=True, max_carry_over_days=5)}


@pytest.mark.parametrize("remaining,allow,cap,expected", [
    (7, True, 5, 5),
    (3, True, 5, 3),
    (7, False, 5, 0),
    (-2, True, 5, 0),
    (None, True, 5, 0),
    (4, True, None, 0),
    (4, True, -1, 0),
])
def test_evaluate_carry_over(remaining, allow, cap, expected):
    assert evaluate_carry_over(remaining, allow, cap) == expected


def test_carry_over_never_exceeds_cap():
    for remaining in [0, 0.5, 4.5, 5, 5.5, 12, 100]:
        carry = evaluate_carry_over(remaining, True, 5)
        assert 0 <= carry <= 5


def test_projection_with_capped_carry_over():
    """10 day quota, 7 remaining, cap 5 -> carry 5, new total 15."""
    [proj] = project_balances([_row()], VACATION_POLICY, to_year=2025)
    assert proj.carry_over == 5
    assert proj.new_entitlement == 10
    assert proj.new_total == 15
    assert proj.current_remaining == 7


def test_projection_forfeits_surplus_without_carry_over():
    quotas = {"VACATION": QuotaPolicy(default_days=10, allow_carry_over=False, max_carry_over_days=5)}
    [proj] = project_balances([_row()], quotas, to_year=2025)
    assert proj.carry_over == 0
    assert proj.new_total == 10


def test_projection_clamps_negative_remaining():
    [proj] = project_balances([_row(used=12, remaining=-2)], VACATION_POLICY, to_year=2025)
    assert proj.carry_over == 0
    assert proj.new_total == 10


def test_projection_without_quota_row_uses_zero_policy():
    [proj] = project_balances([_row(leave_type="TRAINING")], VACATION_POLICY, to_year=2025)
    assert proj.carry_over == 0
    assert proj.new_entitlement == 0
    assert proj.new_total == 0


def test_projection_of_empty_source_is_empty():
    assert project_balances([], VACATION_POLICY, to_year=2025) == []


def test_tenure_gate():
    assert is_tenure_eligible(date(2023, 6, 1), 2025, 2)
    assert not is_tenure_eligible(date(2024, 6, 1), 2025, 2)
    assert is_tenure_eligible(None, 2025, 2)
    assert is_tenure_eligible(date(2025, 1, 1), 2025, 0)


def test_projection_skips_types_below_min_tenure():
    quotas = {
        "VACATION": QuotaPolicy(default_days=10, allow_carry_over=True, max_carry_over_days=5, min_tenure_years=1),
        "SICK": QuotaPolicy(default_days=30),
    }
    rows = [_row(), _row(leave_type="SICK", entitlement=30, used=2, remaining=28)]
    projections = project_balances(rows, quotas, to_year=2025, start_date=date(2025, 1, 1))
    assert [p.leave_type for p in projections] == ["SICK"]


def _employee(user_id, *carry):
    return EmployeeProjection(
        user_id=user_id,
        employee_id=f"E{user_id}",
        first_name="A",
        last_name="B",
        balances=[
            BalanceProjection(
                leave_type=leave_type,
                current_entitlement=0,
                current_used=0,
                current_remaining=0,
                carry_over=amount,
                new_entitlement=0,
                new_total=amount,
            )
            for leave_type, amount in carry
        ],
    )


def test_summary_groups_by_type_and_keeps_zero_totals():
    employees = [
        _employee(1, ("VACATION", 5), ("SICK", 0)),
        _employee(2, ("VACATION", 2.5)),
        _employee(3),
    ]
    assert summarize_carry_over(employees) == {"VACATION": 7.5, "SICK": 0}
