from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hrleave.core.exceptions import AccessDeniedError
from hrleave.database import get_db
from hrleave.models.user import User
from hrleave.routers.auth_deps import get_current_user
from hrleave.schemas.leave import EmployeeBalanceResponse, LeaveBalanceResponse
from hrleave.services.leave_balance import LeaveBalanceService

router = APIRouter(prefix="/hr/employee-balance", tags=["leave-balance"])


@router.get("/{user_id}", response_model=EmployeeBalanceResponse)
def get_employee_balance(
    user_id: int,
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Leave balances of one employee for a year (default: current year).
    HR and admins can view anyone; other users only themselves.
    """
    if not current_user.is_hr and current_user.id != user_id:
        raise AccessDeniedError("You can only view your own leave balances")

    service = LeaveBalanceService(db)
    employee = service.get_user(user_id)
    target_year = year if year is not None else date.today().year
    balances = service.get_employee_balances(user_id, target_year)

    return EmployeeBalanceResponse(
        user_id=employee.id,
        employee_id=employee.employee_code,
        full_name=employee.full_name,
        department=employee.department,
        company=employee.company,
        year=target_year,
        balances=[LeaveBalanceResponse.model_validate(b) for b in balances],
    )
