from pydantic import Field
from typing import Dict, List, Optional
from hrleave.core.schemas import CamelModel


class QuotaPolicy(CamelModel):
    default_days: float = 0.0
    allow_carry_over: bool = False
    max_carry_over_days: float = 0.0
    min_tenure_years: int = 0


class BalanceProjection(CamelModel):
    leave_type: str
    current_entitlement: float
    current_used: float
    current_remaining: float
    carry_over: float
    new_entitlement: float
    new_total: float


class EmployeeProjection(CamelModel):
    user_id: int
    employee_id: str
    first_name: str
    last_name: str
    department: Optional[str] = None
    company: Optional[str] = None
    balances: List[BalanceProjection] = []


class RolloverSummary(CamelModel):
    total_employees: int
    carry_over_by_type: Dict[str, float]


class TargetYearStatus(CamelModel):
    total_rows: int = 0
    auto_created_rows: int = 0

    @property
    def exists(self) -> bool:
        return self.total_rows > 0

    @property
    def all_auto_created(self) -> bool:
        return self.total_rows > 0 and self.auto_created_rows == self.total_rows


class RolloverPreview(CamelModel):
    from_year: int
    to_year: int
    next_year_exists: bool
    next_year_auto_created_count: int
    next_year_all_auto_created: bool
    employees: List[EmployeeProjection]
    summary: RolloverSummary
    quota_settings: Dict[str, QuotaPolicy]


class RolloverError(CamelModel):
    user_id: int
    employee_id: str
    message: str


class RolloverResult(CamelModel):
    from_year: int
    to_year: int
    total_employees: int
    employees_processed: int
    errors: List[RolloverError] = []


class YearEndExecuteRequest(CamelModel):
    from_year: int = Field(..., ge=1900, le=9998)
    force_overwrite: bool = False


class YearEndExecuteStats(CamelModel):
    from_year: int
    to_year: int
    total_employees: int
    success: int
    errors: int


class YearEndExecuteResponse(CamelModel):
    success: bool
    message: str
    stats: YearEndExecuteStats
    error_details: List[RolloverError] = []
