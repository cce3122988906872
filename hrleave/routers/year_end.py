from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
import logging
from hrleave.core.config import settings
from hrleave.core.limiter import limiter
from hrleave.core.schemas import ApiResponse
from hrleave.database import get_db
from hrleave.models.user import User
from hrleave.routers.auth_deps import require_hr, require_hr_or_staff
from hrleave.schemas.year_end import YearEndExecuteRequest, YearEndExecuteResponse, YearEndExecuteStats
from hrleave.services.audit import AuditService
from hrleave.services.rollover import YearEndService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hr/year-end", tags=["year-end"])


@router.get("/preview")
def preview_year_end(
    from_year: Optional[int] = Query(None, alias="fromYear", ge=1900, le=9998),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    """
    Preview year-end processing: what each employee would carry into next year.
    Read-only.
    """
    year = from_year if from_year is not None else date.today().year
    preview = YearEndService(db).compute_preview(year)
    return ApiResponse.ok(preview).to_dict()


@router.post("/execute", response_model=YearEndExecuteResponse)
@limiter.limit(lambda: settings.year_end_rate_limit)
def execute_year_end(
    request: Request,
    payload: YearEndExecuteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr_or_staff()),
):
    """
    Create next year's balances with carry-over.
    Fails with TARGET_YEAR_FINALIZED when next year already holds non-placeholder rows
    and forceOverwrite is not set.
    """
    result = YearEndService(db).execute_rollover(payload.from_year, payload.force_overwrite)

    AuditService.log(
        db,
        action="YEAR_END_PROCESS",
        target_table="leave_balances",
        user_id=current_user.id,
        new_value={
            "fromYear": result.from_year,
            "toYear": result.to_year,
            "successCount": result.employees_processed,
            "errorCount": len(result.errors),
            "forceOverwrite": payload.force_overwrite,
        },
        ip_address=request.client.host if request.client else None,
    )

    if result.errors:
        message = f"Year-end processing completed with {len(result.errors)} error(s)"
    else:
        message = "Year-end processing completed"

    return YearEndExecuteResponse(
        success=True,
        message=message,
        stats=YearEndExecuteStats(
            from_year=result.from_year,
            to_year=result.to_year,
            total_employees=result.total_employees,
            success=result.employees_processed,
            errors=len(result.errors),
        ),
        error_details=result.errors,
    )
