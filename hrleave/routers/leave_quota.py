from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from hrleave.database import get_db
from hrleave.models.leave_quota import LeaveType
from hrleave.models.user import User
from hrleave.routers.auth_deps import require_hr_or_staff
from hrleave.schemas.leave import LeaveQuotaResponse, LeaveQuotaUpdate
from hrleave.services.audit import AuditService
from hrleave.services.leave_quota import LeaveQuotaService

router = APIRouter(prefix="/hr/leave-quotas", tags=["leave-quotas"])


@router.get("", response_model=List[LeaveQuotaResponse])
def list_leave_quotas(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr_or_staff()),
):
    return LeaveQuotaService(db).list_settings()


@router.put("/{leave_type}", response_model=LeaveQuotaResponse)
def update_leave_quota(
    leave_type: LeaveType,
    payload: LeaveQuotaUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr_or_staff()),
):
    """Update a leave type's default entitlement and carry-over policy."""
    row, before, after = LeaveQuotaService(db).update_setting(leave_type, payload)

    AuditService.log(
        db,
        action="UPDATE_SETTINGS",
        target_table="leave_quota_settings",
        user_id=current_user.id,
        target_id=row.id,
        old_value=before or None,
        new_value=after,
        ip_address=request.client.host if request.client else None,
    )
    return row
