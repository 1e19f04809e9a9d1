"""
Audit log model.

Append-only record of sensitive actions: deletion workflow transitions,
cleanups, role changes. Rows are never edited; the only removal path is the
admin-only bulk wipe in AuditLogStore.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text
from app.database import Base


class AuditLogEntry(Base):
    """
    Immutable audit event.

    Invariants:
    - Once written, never edited
    - Never deleted individually
    - id increases with insertion order and is the "most recent" ordering key
    """
    __tablename__ = "audit_log_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)  # Subject of the event
    action_type = Column(String, nullable=False, index=True)
    details = Column(Text, nullable=False, default="")
    performed_by = Column(Integer, nullable=True)  # NULL for system-initiated events
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class AuditActionType:
    """Action tags written by this package. action_type itself stays free-form."""
    # Deletion workflow
    DELETION_REQUESTED = "deletion_requested"
    DELETION_APPROVED = "deletion_approved"
    DELETION_REJECTED = "deletion_rejected"
    ENTITY_DELETED = "entity_deleted"

    # Maintenance
    AUTH_CLEANUP = "auth_cleanup"

    # User administration
    USER_APPROVED = "user_approved"
    ROLE_CHANGED = "role_changed"
    USER_DELETED = "user_deleted"

    CHECKLIST_ITEM_DELETED = "checklist_item_deleted"
