from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hrleave.database import get_db
from hrleave.models.audit_log import AuditLog
from hrleave.routers.auth_deps import require_hr
from hrleave.schemas.audit import AuditLogResponse

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_hr())]
)


@router.get("/audit-logs", response_model=List[AuditLogResponse])
def get_audit_logs(
    db: Session = Depends(get_db),
    action: Optional[str] = Query(None, description="Filter by action (e.g. 'YEAR_END_PROCESS')"),
    target_table: Optional[str] = Query(None, alias="targetTable", description="Filter by target table"),
    user_id: Optional[int] = Query(None, alias="userId", description="Filter by acting user ID"),
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
):
    """
    Get audit logs, newest first. READ-ONLY.
    """
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action == action)
    if target_table:
        query = query.filter(AuditLog.target_table == target_table)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)

    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()
