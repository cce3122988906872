from typing import Any, Optional
from hrleave.services.base import BaseService
from hrleave.models.audit_log import AuditLog


def _sanitize(obj: Any) -> Any:
    """Make nested Pydantic models JSON-column friendly."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        target_table: Optional[str],
        user_id: Optional[int],
        target_id: Optional[int] = None,
        old_value: Optional[dict] = None,
        new_value: Optional[dict] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """
        Append an audit entry and commit it.

        Callers invoke this after their own work has been committed, so the entry
        lands in its own transaction. A failure here is logged and swallowed:
        auditing must never break the operation it describes.
        """
        try:
            entry = AuditLog(
                action=action,
                target_table=target_table,
                target_id=target_id,
                user_id=user_id,
                old_value=_sanitize(old_value),
                new_value=_sanitize(new_value),
                ip_address=ip_address,
            )
            self.db.add(entry)
            self.db.commit()
            return entry
        except Exception as e:
            self.db.rollback()
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None

    # Static wrapper for call sites that only hold a session
    @staticmethod
    def log(db, *args, **kwargs):
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
