from typing import Any, Optional
from sqlalchemy.exc import SQLAlchemyError

from hrdesk.services.base import BaseService
from hrdesk.models.audit_log import AuditLog


def _sanitize(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        details: Optional[dict] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None,
    ) -> Optional[AuditLog]:
        """
        Stage an append-only audit entry in the caller's transaction.
        It is committed (or rolled back) together with the audited change.
        """
        try:
            db_log = AuditLog(
                company_id=self.company_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                details=_sanitize(details),
                before_state=_sanitize(before_state),
                after_state=_sanitize(after_state),
            )
            self.db.add(db_log)
            self.db.flush()
            return db_log
        except SQLAlchemyError as e:
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            raise

    @staticmethod
    def log(db, company_id: Optional[int], *args, **kwargs):
        return AuditService(db, company_id).log_action(*args, **kwargs)
