"""Dispatch checklist guard: the checklist may never become empty."""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.models.audit import AuditActionType
from app.models.domain import ChecklistItem
from app.services.audit_log import AuditLogStore
from app.services.authorization import AuthorizationGate, Identity
from app.services.errors import EntityNotFound, LastItemProtected

logger = logging.getLogger(__name__)


class ChecklistService:

    def __init__(self, db: Session):
        self.db = db
        self.gate = AuthorizationGate(db)
        self.audit = AuditLogStore(db)

    def remove_item(self, identity: Optional[Identity], item_id: int) -> None:
        """
        Delete a checklist item. Admin only.

        Refuses with LastItemProtected when at most one item remains.
        """
        admin = self.gate.require_admin(identity)

        item = self.db.get(ChecklistItem, item_id)
        if item is None:
            raise EntityNotFound(f"Checklist item {item_id} not found")

        if self.db.query(ChecklistItem).count() <= 1:
            raise LastItemProtected(
                "Cannot delete the last checklist item. At least one item must remain."
            )

        label = item.label
        try:
            self.db.delete(item)
            self.audit.append(
                user_id=admin.id,
                action_type=AuditActionType.CHECKLIST_ITEM_DELETED,
                details=f"Deleted checklist item '{label}'",
                performed_by=admin.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Checklist item %s deleted by admin %s", item_id, admin.id)
