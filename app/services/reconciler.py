"""
Orphan reconciler for identity-linked records.

Auth accounts and sessions reference users by a plain id. When a user row
disappears through a path that does not clean up after it, those records are
left dangling; this module finds and removes them.

Full-table scan with no pagination: a manual maintenance action, not
something to call from a request-latency-sensitive path.
"""
import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from app.models.audit import AuditActionType
from app.models.domain import AuthAccount, AuthSession, User
from app.services.audit_log import AuditLogStore
from app.services.authorization import AuthorizationGate, Identity

logger = logging.getLogger(__name__)


class OrphanReconciler:

    def __init__(self, db: Session):
        self.db = db
        self.gate = AuthorizationGate(db)
        self.audit = AuditLogStore(db)

    def cleanup_orphaned_auth_records(self, identity: Optional[Identity]) -> int:
        """
        Delete accounts and sessions whose user no longer exists. Admin only.

        Each delete commits on its own: a failure partway leaves the records
        already removed gone, and a re-run simply skips them. Rows that vanish
        mid-scan (removed by another transaction) are skipped, not counted.
        Writes one auth_cleanup audit entry and returns the number removed.
        """
        admin = self.gate.require_admin(identity)
        admin_id = admin.id

        cleaned_count = 0
        for model in (AuthAccount, AuthSession):
            rows = self.db.query(model.id, model.user_id).order_by(model.id).all()
            for record_id, user_id in rows:
                if self.db.get(User, user_id) is not None:
                    continue
                deleted = self.db.query(model).filter(
                    model.id == record_id
                ).delete(synchronize_session=False)
                self.db.commit()
                cleaned_count += deleted

        self.audit.append(
            user_id=admin_id,
            action_type=AuditActionType.AUTH_CLEANUP,
            details=f"Cleaned up {cleaned_count} orphaned auth records",
            performed_by=admin_id
        )

        logger.warning("Auth cleanup by user %s removed %d orphaned records", admin_id, cleaned_count)
        return cleaned_count

    def list_auth_accounts(self) -> List[Dict]:
        """Every auth account with whether its user still exists."""
        report = []
        for account in self.db.query(AuthAccount).order_by(AuthAccount.id).all():
            user = self.db.get(User, account.user_id)
            report.append({
                "account_id": account.id,
                "user_id": account.user_id,
                "user_exists": user is not None,
                "user_email": user.email if user else None,
            })
        return report
