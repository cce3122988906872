from typing import Any, Dict, Optional


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )


class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )


class TargetYearFinalizedError(AppException):
    """Raised when a rollover would clobber a target year that already holds non-placeholder rows."""
    def __init__(self, to_year: int, total_rows: int, placeholder_rows: int):
        super().__init__(
            message=(
                f"Leave balances for {to_year} already exist. "
                f"Re-run with forceOverwrite=true to process the year again."
            ),
            status_code=400,
            error_code="TARGET_YEAR_FINALIZED",
            details={
                "toYear": to_year,
                "existingRows": total_rows,
                "autoCreatedRows": placeholder_rows,
            }
        )


class InsufficientBalanceError(AppException):
    def __init__(self, year: int, leave_type: str, remaining: float, requested: float):
        super().__init__(
            message=(
                f"Insufficient {leave_type} balance for {year} "
                f"(remaining {remaining:g} days, requested {requested:g} days)"
            ),
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details={"year": year, "leaveType": leave_type, "remaining": remaining, "requested": requested}
        )


class QuotaNotFoundError(AppException):
    def __init__(self, leave_type: str):
        super().__init__(
            message=f"No quota setting found for leave type {leave_type}",
            status_code=400,
            error_code="QUOTA_NOT_FOUND"
        )
