from datetime import date
from pydantic import ConfigDict, Field, model_validator
from typing import Dict, List, Optional
from hrleave.core.schemas import CamelModel
from hrleave.models.leave_quota import LeaveType


class LeaveBalanceResponse(CamelModel):
    id: int
    leave_type: str
    year: int
    entitlement: float
    used: float
    remaining: float
    carry_over: float
    origin: str
    is_auto_created: bool

    model_config = ConfigDict(from_attributes=True)


class EmployeeBalanceResponse(CamelModel):
    user_id: int
    employee_id: str
    full_name: str
    department: Optional[str] = None
    company: Optional[str] = None
    year: int
    balances: List[LeaveBalanceResponse]


class LeaveQuotaResponse(CamelModel):
    leave_type: str
    default_days: float
    allow_carry_over: bool
    max_carry_over_days: float
    min_tenure_years: int

    model_config = ConfigDict(from_attributes=True)


class LeaveQuotaUpdate(CamelModel):
    default_days: Optional[float] = Field(None, ge=0)
    allow_carry_over: Optional[bool] = None
    max_carry_over_days: Optional[float] = Field(None, ge=0)
    min_tenure_years: Optional[int] = Field(None, ge=0)


class LeaveRequestCreate(CamelModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    is_half_day: bool = False
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class LeaveRequestResponse(CamelModel):
    user_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: float
    days_by_year: Dict[int, float]
