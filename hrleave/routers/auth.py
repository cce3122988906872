from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging
from hrleave.core.exceptions import AccessDeniedError, AuthenticationError
from hrleave.database import get_db
from hrleave.models.user import User
from hrleave.services import auth as auth_service
from hrleave.services.audit import AuditService
from hrleave.schemas.auth import LoginRequest, Token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    # JSON LoginRequest instead of form-data for frontend compatibility
    ip_address = request.client.host if request.client else None
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        AuditService.log(
            db,
            action="FAILED_LOGIN",
            target_table="users",
            user_id=user.id if user else None,
            new_value={"email": login_data.email, "reason": "invalid_credentials"},
            ip_address=ip_address,
        )
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        raise AccessDeniedError("User is inactive")

    access_token = auth_service.create_access_token(data={
        "sub": user.email,
        "role": user.role.value,
        "user_id": user.id,
        "type": "access",
    })

    AuditService.log(
        db,
        action="LOGIN",
        target_table="users",
        user_id=user.id,
        target_id=user.id,
        ip_address=ip_address,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
            "employee_id": user.employee_code,
        }
    }
