"""
Leave balance lookups and deductions.

Rows created here for a year that has not been rolled over yet are tagged
PLACEHOLDER, which is what lets the year-end rollover overwrite them later.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select

from hrleave.core.exceptions import AppException, InsufficientBalanceError, NotFoundError, QuotaNotFoundError
from hrleave.models.leave_balance import BalanceOrigin, LeaveBalance
from hrleave.models.leave_quota import LeaveQuotaSetting, LeaveType
from hrleave.models.user import User
from hrleave.services.base import BaseService
from hrleave.utils.dates import split_days_by_year

# Leave types that are recorded without a balance check
UNMETERED_LEAVE_TYPES = {LeaveType.OTHER.value}


class LeaveBalanceService(BaseService):

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("Employee not found")
        return user

    def _get_balance(self, user_id: int, leave_type: str, year: int) -> Optional[LeaveBalance]:
        return self.db.execute(
            select(LeaveBalance).where(
                LeaveBalance.user_id == user_id,
                LeaveBalance.leave_type == leave_type,
                LeaveBalance.year == year,
            )
        ).scalar_one_or_none()

    def _create_placeholder(self, user_id: int, leave_type: str, year: int, default_days: float) -> LeaveBalance:
        row = LeaveBalance(
            user_id=user_id,
            leave_type=leave_type,
            year=year,
            entitlement=default_days,
            used=0.0,
            remaining=default_days,
            carry_over=0.0,
            origin=BalanceOrigin.PLACEHOLDER.value,
        )
        self.db.add(row)
        self.db.flush()
        self.log_info(f"Auto-created {leave_type} balance for user {user_id} in {year}")
        return row

    def get_employee_balances(self, user_id: int, year: int) -> List[LeaveBalance]:
        """Balances for a year, filling in placeholders for quota types the user has no row for."""
        self.get_user(user_id)
        rows = self.db.execute(
            select(LeaveBalance)
            .where(LeaveBalance.user_id == user_id, LeaveBalance.year == year)
        ).scalars().all()

        existing_types = {row.leave_type for row in rows}
        quotas = self.db.execute(select(LeaveQuotaSetting)).scalars().all()
        missing = [q for q in quotas if q.leave_type not in existing_types]
        if missing:
            try:
                for quota in missing:
                    self._create_placeholder(user_id, quota.leave_type, year, quota.default_days or 0.0)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            rows = self.db.execute(
                select(LeaveBalance)
                .where(LeaveBalance.user_id == user_id, LeaveBalance.year == year)
            ).scalars().all()

        return sorted(rows, key=lambda r: r.leave_type)

    def reserve_usage(self, user_id: int, leave_type: str, year: int, amount: float) -> Optional[LeaveBalance]:
        """
        Book `amount` days against the user's balance for `year`.

        A missing row is auto-created from the quota default as a placeholder.
        Does not commit; the caller owns the transaction.
        """
        if leave_type in UNMETERED_LEAVE_TYPES:
            return None

        row = self._get_balance(user_id, leave_type, year)
        if row is None:
            quota = self.db.execute(
                select(LeaveQuotaSetting).where(LeaveQuotaSetting.leave_type == leave_type)
            ).scalar_one_or_none()
            if quota is None:
                raise QuotaNotFoundError(leave_type)
            row = self._create_placeholder(user_id, leave_type, year, quota.default_days or 0.0)

        remaining = row.remaining or 0.0
        if remaining < amount:
            raise InsufficientBalanceError(year, leave_type, remaining, amount)

        row.used = (row.used or 0.0) + amount
        row.remaining = remaining - amount
        self.db.flush()
        return row

    def reserve_leave(
        self,
        user_id: int,
        leave_type: str,
        start: date,
        end: date,
        holidays: Iterable[date] = (),
        half_day: bool = False,
    ) -> Dict[int, float]:
        """
        Deduct a (possibly cross-year) leave from each year's balance.

        All years are booked in one transaction: either every year is deducted
        or none is.
        """
        self.get_user(user_id)
        per_year = split_days_by_year(start, end, holidays, half_day)
        if not per_year:
            raise AppException("The selected dates contain no working days", error_code="NO_WORKING_DAYS")
        try:
            for year, amount in sorted(per_year.items()):
                self.reserve_usage(user_id, leave_type, year, amount)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return per_year
