from typing import Dict, List, Tuple

from sqlalchemy import func, select

from hrleave.models.leave_quota import LeaveQuotaSetting, LeaveType
from hrleave.schemas.leave import LeaveQuotaUpdate
from hrleave.services.base import BaseService

# Seed values for a fresh database: (default_days, allow_carry_over, max_carry_over_days, min_tenure_years)
DEFAULT_QUOTAS: Dict[LeaveType, Tuple[float, bool, float, int]] = {
    LeaveType.VACATION: (6.0, True, 6.0, 1),
    LeaveType.SICK: (30.0, False, 0.0, 0),
    LeaveType.PERSONAL: (3.0, False, 0.0, 0),
    LeaveType.MATERNITY: (98.0, False, 0.0, 0),
    LeaveType.MILITARY: (60.0, False, 0.0, 0),
    LeaveType.ORDINATION: (15.0, False, 0.0, 2),
    LeaveType.STERILIZATION: (0.0, False, 0.0, 0),
    LeaveType.TRAINING: (30.0, False, 0.0, 0),
    LeaveType.OTHER: (0.0, False, 0.0, 0),
}


def _snapshot(row: LeaveQuotaSetting) -> dict:
    return {
        "leaveType": row.leave_type,
        "defaultDays": row.default_days,
        "allowCarryOver": row.allow_carry_over,
        "maxCarryOverDays": row.max_carry_over_days,
        "minTenureYears": row.min_tenure_years,
    }


class LeaveQuotaService(BaseService):

    def list_settings(self) -> List[LeaveQuotaSetting]:
        return self.db.execute(select(LeaveQuotaSetting).order_by(LeaveQuotaSetting.leave_type)).scalars().all()

    def seed_defaults(self) -> int:
        """Insert the default quota rows when the table is empty. Returns the number of rows created."""
        count = self.db.execute(select(func.count(LeaveQuotaSetting.id))).scalar_one()
        if count:
            return 0
        try:
            for leave_type, (days, carry, max_carry, tenure) in DEFAULT_QUOTAS.items():
                self.db.add(LeaveQuotaSetting(
                    leave_type=leave_type.value,
                    default_days=days,
                    allow_carry_over=carry,
                    max_carry_over_days=max_carry,
                    min_tenure_years=tenure,
                ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.log_info(f"Seeded {len(DEFAULT_QUOTAS)} default leave quota settings")
        return len(DEFAULT_QUOTAS)

    def update_setting(self, leave_type: LeaveType, payload: LeaveQuotaUpdate) -> Tuple[LeaveQuotaSetting, dict, dict]:
        """
        Apply a partial update; creates the row when the leave type has none.
        Returns the row with its before/after snapshots for the audit trail.
        """
        row = self.db.execute(
            select(LeaveQuotaSetting).where(LeaveQuotaSetting.leave_type == leave_type.value)
        ).scalar_one_or_none()
        if row is None:
            row = LeaveQuotaSetting(
                leave_type=leave_type.value,
                default_days=0.0,
                allow_carry_over=False,
                max_carry_over_days=0.0,
                min_tenure_years=0,
            )
            self.db.add(row)
            before = {}
        else:
            before = _snapshot(row)

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)

        try:
            self.db.commit()
            self.db.refresh(row)
        except Exception:
            self.db.rollback()
            raise
        return row, before, _snapshot(row)
