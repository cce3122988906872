"""
Year-End Leave Rollover

Finalizes one year's leave balances into the next year's starting balances.

- evaluate_carry_over / project_balances are pure and shared by preview and
  execute, so the two can never disagree about what a rollover produces.
- YearEndService wraps them with the bulk reads (preview) and the
  per-employee writes (execute).

Rules:
- carry-over never exceeds the leave type's cap and never carries a negative
  remaining balance; types without carry-over forfeit the surplus.
- next year's entitlement resets to the policy default.
- a target year holding rows other than system placeholders is never
  overwritten unless the caller forces it.
"""
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import and_, case, func, select

from hrleave.core.exceptions import TargetYearFinalizedError
from hrleave.models.leave_balance import BalanceOrigin, LeaveBalance
from hrleave.models.leave_quota import LeaveQuotaSetting
from hrleave.models.user import User
from hrleave.schemas.year_end import (
    BalanceProjection,
    EmployeeProjection,
    QuotaPolicy,
    RolloverError,
    RolloverPreview,
    RolloverResult,
    RolloverSummary,
    TargetYearStatus,
)
from hrleave.services.base import BaseService

logger = logging.getLogger(__name__)

# Policy applied to leave types that have balances but no quota row
DEFAULT_QUOTA = QuotaPolicy(default_days=0.0, allow_carry_over=False, max_carry_over_days=0.0, min_tenure_years=0)


def evaluate_carry_over(remaining: Optional[float], allow_carry_over: bool, max_carry_over_days: Optional[float]) -> float:
    """
    Days carried into the next year for one balance.

    0 when the policy forbids carry-over; otherwise the non-negative remaining
    balance clamped to [0, max_carry_over_days].
    """
    if not allow_carry_over:
        return 0.0
    candidate = max(remaining or 0.0, 0.0)
    cap = max(max_carry_over_days or 0.0, 0.0)
    return min(candidate, cap)


def is_tenure_eligible(start_date: Optional[date], to_year: int, min_tenure_years: int) -> bool:
    """Years of service are counted as of the target year; unknown start dates are eligible."""
    if not min_tenure_years or start_date is None:
        return True
    return to_year - start_date.year >= min_tenure_years


def project_balances(
    source_rows: Iterable[LeaveBalance],
    quotas: Dict[str, QuotaPolicy],
    to_year: int,
    start_date: Optional[date] = None,
) -> List[BalanceProjection]:
    """Project one employee's source-year balance rows into target-year balances."""
    projections = []
    for row in source_rows:
        quota = quotas.get(row.leave_type, DEFAULT_QUOTA)
        if not is_tenure_eligible(start_date, to_year, quota.min_tenure_years):
            continue

        carry_over = evaluate_carry_over(row.remaining, quota.allow_carry_over, quota.max_carry_over_days)
        new_entitlement = quota.default_days
        projections.append(BalanceProjection(
            leave_type=row.leave_type,
            current_entitlement=row.entitlement or 0.0,
            current_used=row.used or 0.0,
            current_remaining=row.remaining or 0.0,
            carry_over=carry_over,
            new_entitlement=new_entitlement,
            new_total=new_entitlement + carry_over,
        ))
    return projections


def summarize_carry_over(employees: Iterable[EmployeeProjection]) -> Dict[str, float]:
    """Total carry-over per leave type. Every projected type is reported, zero totals included."""
    totals: Dict[str, float] = {}
    for emp in employees:
        for bal in emp.balances:
            totals[bal.leave_type] = totals.get(bal.leave_type, 0.0) + bal.carry_over
    return {leave_type: round(total, 2) for leave_type, total in totals.items()}


class YearEndService(BaseService):
    """Preview and execute the year-end rollover against the database."""

    def load_quota_settings(self) -> Dict[str, QuotaPolicy]:
        rows = self.db.execute(select(LeaveQuotaSetting).order_by(LeaveQuotaSetting.leave_type)).scalars().all()
        return {
            row.leave_type: QuotaPolicy(
                default_days=row.default_days or 0.0,
                allow_carry_over=bool(row.allow_carry_over),
                max_carry_over_days=row.max_carry_over_days or 0.0,
                min_tenure_years=row.min_tenure_years or 0,
            )
            for row in rows
        }

    def target_year_status(self, to_year: int) -> TargetYearStatus:
        placeholder = case((LeaveBalance.origin == BalanceOrigin.PLACEHOLDER.value, 1), else_=0)
        total, auto_created = self.db.execute(
            select(func.count(LeaveBalance.id), func.coalesce(func.sum(placeholder), 0))
            .where(LeaveBalance.year == to_year)
        ).one()
        return TargetYearStatus(total_rows=total or 0, auto_created_rows=auto_created or 0)

    def project_population(self, from_year: int, quotas: Dict[str, QuotaPolicy]) -> List[EmployeeProjection]:
        """
        One pass over all active employees joined to their from_year balances,
        grouped by employee and projected into from_year + 1.
        """
        to_year = from_year + 1
        rows = self.db.execute(
            select(User, LeaveBalance)
            .outerjoin(LeaveBalance, and_(LeaveBalance.user_id == User.id, LeaveBalance.year == from_year))
            .where(User.is_active.is_(True))
            .order_by(User.employee_code, LeaveBalance.leave_type)
        ).all()

        grouped: Dict[int, Tuple[User, List[LeaveBalance]]] = {}
        for user, balance in rows:
            _, balances = grouped.setdefault(user.id, (user, []))
            if balance is not None:
                balances.append(balance)

        return [
            EmployeeProjection(
                user_id=user.id,
                employee_id=user.employee_code,
                first_name=user.first_name,
                last_name=user.last_name,
                department=user.department,
                company=user.company,
                balances=project_balances(balances, quotas, to_year, user.start_date),
            )
            for user, balances in grouped.values()
        ]

    def compute_preview(self, from_year: int) -> RolloverPreview:
        to_year = from_year + 1
        quotas = self.load_quota_settings()
        employees = self.project_population(from_year, quotas)
        status = self.target_year_status(to_year)

        return RolloverPreview(
            from_year=from_year,
            to_year=to_year,
            next_year_exists=status.exists,
            next_year_auto_created_count=status.auto_created_rows,
            next_year_all_auto_created=status.all_auto_created,
            employees=employees,
            summary=RolloverSummary(
                total_employees=len(employees),
                carry_over_by_type=summarize_carry_over(employees),
            ),
            quota_settings=quotas,
        )

    def execute_rollover(self, from_year: int, force_overwrite: bool = False) -> RolloverResult:
        """
        Write from_year + 1 balances for every active employee.

        Each employee is committed separately: a failure is recorded in the
        result and the batch moves on, leaving already committed employees intact.
        """
        to_year = from_year + 1
        status = self.target_year_status(to_year)
        if status.exists and not status.all_auto_created and not force_overwrite:
            raise TargetYearFinalizedError(to_year, status.total_rows, status.auto_created_rows)

        quotas = self.load_quota_settings()
        employees = self.project_population(from_year, quotas)
        # The bulk read opened a transaction; end it so each employee starts clean
        self.db.commit()

        self.log_info(
            f"Year-end rollover {from_year} -> {to_year} started",
            employees=len(employees),
            force_overwrite=force_overwrite,
            existing_rows=status.total_rows,
        )

        processed = 0
        errors: List[RolloverError] = []
        for emp in employees:
            try:
                self._write_employee_balances(emp, to_year)
                self.db.commit()
                processed += 1
            except Exception as e:
                self.db.rollback()
                logger.exception(f"Year-end rollover failed for employee {emp.employee_id}")
                errors.append(RolloverError(
                    user_id=emp.user_id,
                    employee_id=emp.employee_id,
                    message=str(e) or "Processing failed",
                ))

        self.log_info(
            f"Year-end rollover {from_year} -> {to_year} finished",
            processed=processed,
            failed=len(errors),
        )
        return RolloverResult(
            from_year=from_year,
            to_year=to_year,
            total_employees=len(employees),
            employees_processed=processed,
            errors=errors,
        )

    def _write_employee_balances(self, emp: EmployeeProjection, to_year: int):
        """
        Insert or overwrite one employee's target-year rows.

        Existing rows reaching this point are placeholders or the caller forced
        an overwrite (the guard in execute_rollover rejects anything else).
        Usage already booked on them is kept.

        Target-year rows with no projection are left over from an earlier run
        or an early booking: unused ones are deleted, used ones keep their
        usage against a zero entitlement.
        """
        existing = {
            row.leave_type: row
            for row in self.db.execute(
                select(LeaveBalance).where(LeaveBalance.user_id == emp.user_id, LeaveBalance.year == to_year)
            ).scalars()
        }

        for proj in emp.balances:
            row = existing.pop(proj.leave_type, None)
            if row is not None:
                used = row.used or 0.0
                row.entitlement = proj.new_entitlement
                row.carry_over = proj.carry_over
                row.remaining = proj.new_total - used
                row.origin = BalanceOrigin.ROLLOVER.value
            else:
                self.db.add(LeaveBalance(
                    user_id=emp.user_id,
                    leave_type=proj.leave_type,
                    year=to_year,
                    entitlement=proj.new_entitlement,
                    used=0.0,
                    remaining=proj.new_total,
                    carry_over=proj.carry_over,
                    origin=BalanceOrigin.ROLLOVER.value,
                ))

        for row in existing.values():
            used = row.used or 0.0
            if used > 0:
                row.entitlement = 0.0
                row.carry_over = 0.0
                row.remaining = -used
                row.origin = BalanceOrigin.ROLLOVER.value
            else:
                self.db.delete(row)
        self.db.flush()
