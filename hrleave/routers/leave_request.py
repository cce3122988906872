from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from hrleave.database import get_db
from hrleave.models.user import User
from hrleave.routers.auth_deps import get_current_user
from hrleave.schemas.leave import LeaveRequestCreate, LeaveRequestResponse
from hrleave.services.audit import AuditService
from hrleave.services.leave_balance import LeaveBalanceService

router = APIRouter(prefix="/leave", tags=["leave"])


@router.post("/request", response_model=LeaveRequestResponse)
def request_leave(
    payload: LeaveRequestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Book leave for the current user.
    A leave spanning New Year is deducted from both years' balances; a year
    that has not been rolled over yet gets a placeholder balance.
    """
    days_by_year = LeaveBalanceService(db).reserve_leave(
        current_user.id,
        payload.leave_type.value,
        payload.start_date,
        payload.end_date,
        half_day=payload.is_half_day,
    )

    AuditService.log(
        db,
        action="CREATE_LEAVE_REQUEST",
        target_table="leave_balances",
        user_id=current_user.id,
        new_value={
            "leaveType": payload.leave_type.value,
            "startDate": payload.start_date.isoformat(),
            "endDate": payload.end_date.isoformat(),
            "isHalfDay": payload.is_half_day,
            "reason": payload.reason,
            "daysByYear": {str(year): days for year, days in days_by_year.items()},
        },
        ip_address=request.client.host if request.client else None,
    )

    return LeaveRequestResponse(
        user_id=current_user.id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=sum(days_by_year.values()),
        days_by_year=days_by_year,
    )
