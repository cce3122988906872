from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[int]
    action: str
    target_table: Optional[str]
    target_id: Optional[int]
    old_value: Optional[Any]
    new_value: Optional[Any]
    ip_address: Optional[str]
    timestamp: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
