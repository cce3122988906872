# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, leave_quota, leave_balance, audit_log

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .leave_quota import LeaveQuotaSetting, LeaveType
from .leave_balance import LeaveBalance, BalanceOrigin
from .audit_log import AuditLog

__all__ = [
    "User",
    "UserRole",
    "LeaveQuotaSetting",
    "LeaveType",
    "LeaveBalance",
    "BalanceOrigin",
    "AuditLog",
]
