"""
User / employee model.
Every employee is a user account; HR and admins are users with elevated roles.
"""
from sqlalchemy import Column, Integer, String, Enum, Date, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hrleave.database import Base


class UserRole(str, enum.Enum):
    """
    - ADMIN: System administrator
    - HR: Human resources, owns leave policy and year-end processing
    - MANAGER: Department head (approves subordinates' leave)
    - EMPLOYEE: Self-service access
    """
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String(32), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    department = Column(String, nullable=True)
    company = Column(String, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)
    # Employees in the HR department without the HR role may still run HR batch jobs
    is_hr_staff = Column(Boolean, default=False, nullable=False)

    start_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    leave_balances = relationship("LeaveBalance", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.employee_code} ({self.role.value})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_hr(self) -> bool:
        """Check if user may manage HR data."""
        return self.role in [UserRole.HR, UserRole.ADMIN]
