import pytest
from datetime import date
from sqlalchemy import select

from hrleave.core.exceptions import InsufficientBalanceError, NotFoundError, QuotaNotFoundError
from hrleave.models.leave_balance import BalanceOrigin, LeaveBalance
from hrleave.models.leave_quota import LeaveQuotaSetting
from hrleave.services.leave_balance import LeaveBalanceService
from hrleave.services.rollover import YearEndService
from hrleave.utils.dates import split_days_by_year


def _row(db_session, user_id, leave_type, year):
    db_session.expire_all()
    return db_session.execute(
        select(LeaveBalance).where(
            LeaveBalance.user_id == user_id,
            LeaveBalance.leave_type == leave_type,
            LeaveBalance.year == year,
        )
    ).scalar_one_or_none()


def test_split_days_skips_weekends_and_holidays():
    # Mon 2024-12-30 .. Fri 2025-01-03, New Year's Day off
    per_year = split_days_by_year(date(2024, 12, 30), date(2025, 1, 3), holidays=[date(2025, 1, 1)])
    assert per_year == {2024: 2.0, 2025: 2.0}


def test_split_days_half_day_single_day():
    assert split_days_by_year(date(2025, 1, 6), date(2025, 1, 6), half_day=True) == {2025: 0.5}
    # half_day only applies to a single working day
    assert split_days_by_year(date(2025, 1, 6), date(2025, 1, 7), half_day=True) == {2025: 2.0}


def test_split_days_weekend_only_is_empty():
    assert split_days_by_year(date(2025, 1, 4), date(2025, 1, 5)) == {}


def test_split_days_rejects_inverted_range():
    with pytest.raises(ValueError):
        split_days_by_year(date(2025, 1, 7), date(2025, 1, 6))


def test_get_employee_balances_fills_placeholders(db_session, quotas, employee, add_balance):
    add_balance(employee, "VACATION", 2025, entitlement=6, used=1)

    balances = LeaveBalanceService(db_session).get_employee_balances(employee.id, 2025)

    assert len(balances) == len(quotas)
    by_type = {b.leave_type: b for b in balances}
    assert by_type["VACATION"].origin == BalanceOrigin.PROVISIONED.value
    assert by_type["SICK"].origin == BalanceOrigin.PLACEHOLDER.value
    assert by_type["SICK"].entitlement == 30
    assert by_type["SICK"].is_auto_created
    assert [b.leave_type for b in balances] == sorted(by_type)


def test_get_employee_balances_unknown_user(db_session, quotas):
    with pytest.raises(NotFoundError):
        LeaveBalanceService(db_session).get_employee_balances(9999, 2025)


def test_reserve_usage_deducts_existing_row(db_session, quotas, employee, add_balance):
    add_balance(employee, "VACATION", 2025, entitlement=6, used=1)

    LeaveBalanceService(db_session).reserve_usage(employee.id, "VACATION", 2025, 2)
    db_session.commit()

    row = _row(db_session, employee.id, "VACATION", 2025)
    assert (row.used, row.remaining) == (3, 3)


def test_reserve_usage_creates_placeholder_for_unrolled_year(db_session, quotas, employee):
    LeaveBalanceService(db_session).reserve_usage(employee.id, "VACATION", 2026, 1)
    db_session.commit()

    row = _row(db_session, employee.id, "VACATION", 2026)
    assert row.origin == BalanceOrigin.PLACEHOLDER.value
    assert (row.entitlement, row.used, row.remaining) == (6, 1, 5)


def test_reserve_usage_insufficient_balance(db_session, quotas, employee, add_balance):
    add_balance(employee, "PERSONAL", 2025, entitlement=3, used=3)

    with pytest.raises(InsufficientBalanceError) as exc:
        LeaveBalanceService(db_session).reserve_usage(employee.id, "PERSONAL", 2025, 1)
    assert exc.value.details["remaining"] == 0


def test_reserve_usage_without_quota(db_session, employee):
    with pytest.raises(QuotaNotFoundError):
        LeaveBalanceService(db_session).reserve_usage(employee.id, "TRAINING", 2025, 1)


def test_reserve_usage_ignores_unmetered_types(db_session, quotas, employee):
    assert LeaveBalanceService(db_session).reserve_usage(employee.id, "OTHER", 2025, 5) is None
    assert _row(db_session, employee.id, "OTHER", 2025) is None


def test_reserve_leave_across_years(db_session, quotas, employee, add_balance):
    add_balance(employee, "VACATION", 2024, entitlement=6, used=0)

    per_year = LeaveBalanceService(db_session).reserve_leave(
        employee.id, "VACATION", date(2024, 12, 30), date(2025, 1, 3), holidays=[date(2025, 1, 1)]
    )

    assert per_year == {2024: 2.0, 2025: 2.0}
    assert _row(db_session, employee.id, "VACATION", 2024).remaining == 4
    next_year = _row(db_session, employee.id, "VACATION", 2025)
    assert next_year.origin == BalanceOrigin.PLACEHOLDER.value
    assert next_year.used == 2


def test_reserve_leave_is_all_or_nothing(db_session, quotas, employee, add_balance):
    add_balance(employee, "VACATION", 2024, entitlement=6, used=0)
    add_balance(employee, "VACATION", 2025, entitlement=1, used=0)

    with pytest.raises(InsufficientBalanceError):
        LeaveBalanceService(db_session).reserve_leave(
            employee.id, "VACATION", date(2024, 12, 30), date(2025, 1, 3)
        )

    assert _row(db_session, employee.id, "VACATION", 2024).used == 0
    assert _row(db_session, employee.id, "VACATION", 2025).used == 0


def test_early_usage_survives_rollover(db_session, quotas, employee, add_balance):
    """Usage booked on next year's placeholder before the rollover is kept by it."""
    vacation = db_session.execute(
        select(LeaveQuotaSetting).where(LeaveQuotaSetting.leave_type == "VACATION")
    ).scalar_one()
    vacation.default_days, vacation.max_carry_over_days = 10, 5
    db_session.commit()
    add_balance(employee, "VACATION", 2024, entitlement=10, used=3)
    LeaveBalanceService(db_session).reserve_leave(employee.id, "VACATION", date(2025, 1, 6), date(2025, 1, 7))

    preview = YearEndService(db_session).compute_preview(2024)
    assert preview.next_year_all_auto_created is True
    YearEndService(db_session).execute_rollover(2024)

    row = _row(db_session, employee.id, "VACATION", 2025)
    assert (row.entitlement, row.carry_over, row.used, row.remaining) == (10, 5, 2, 13)
    assert row.origin == BalanceOrigin.ROLLOVER.value
