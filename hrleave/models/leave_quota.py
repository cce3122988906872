from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from sqlalchemy.sql import func
from hrleave.database import Base
import enum


class LeaveType(str, enum.Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    MILITARY = "MILITARY"
    ORDINATION = "ORDINATION"
    STERILIZATION = "STERILIZATION"
    TRAINING = "TRAINING"
    OTHER = "OTHER"


class LeaveQuotaSetting(Base):
    """Per leave-type policy. One row per leave type."""
    __tablename__ = "leave_quota_settings"

    id = Column(Integer, primary_key=True, index=True)
    leave_type = Column(String, unique=True, index=True, nullable=False)
    default_days = Column(Float, default=0.0, nullable=False)
    allow_carry_over = Column(Boolean, default=False, nullable=False)
    max_carry_over_days = Column(Float, default=0.0, nullable=False)  # Only meaningful when carry-over is allowed
    min_tenure_years = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
