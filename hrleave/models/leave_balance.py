from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrleave.database import Base
import enum


class BalanceOrigin(str, enum.Enum):
    PROVISIONED = "PROVISIONED"  # Created by HR or employee provisioning
    ROLLOVER = "ROLLOVER"        # Written by a year-end execute
    PLACEHOLDER = "PLACEHOLDER"  # Created by the system before the year was rolled over (auto-created)


class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "leave_type", "year", name="uq_leave_balance_user_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    entitlement = Column(Float, default=0.0, nullable=False)
    used = Column(Float, default=0.0, nullable=False)
    remaining = Column(Float, default=0.0, nullable=False)
    carry_over = Column(Float, default=0.0, nullable=False)  # Carried in from the prior year
    origin = Column(String, default=BalanceOrigin.PROVISIONED.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="leave_balances")

    @property
    def is_auto_created(self) -> bool:
        return self.origin == BalanceOrigin.PLACEHOLDER.value
