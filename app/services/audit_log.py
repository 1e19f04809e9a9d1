"""
Audit log store: append, filtered listing, and the admin bulk wipe.

Listing takes the most recent `limit` entries first and filters afterwards.
A filter can therefore return fewer rows than `limit` even when older
matching entries exist.
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union
from sqlalchemy.orm import Session
from app.models.audit import AuditLogEntry
from app.models.domain import User
from app.models.enums import DateRange
from app.services.authorization import AuthorizationGate, Identity
from app.services.errors import parse_choice

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = int(os.getenv("AUDIT_LOG_DEFAULT_LIMIT", "50"))

ALL_ACTIONS = "all"


@dataclass
class AuditLogRecord:
    """An entry joined with its subject and performer (None when the user is gone)."""
    entry: AuditLogEntry
    user: Optional[User]
    performed_by_user: Optional[User]


def date_range_cutoff(
    date_range: Union[DateRange, str, None],
    now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Earliest creation time (naive UTC, like the stored column) kept by a date range.

    "today" starts at local midnight of `now`; "7days" and "30days" reach back
    a fixed number of days. Returns None when nothing should be filtered.
    A naive `now` is read as local time.
    """
    if date_range is None:
        return None
    date_range = parse_choice(DateRange, date_range)
    if date_range == DateRange.ALL:
        return None

    now = (now or datetime.now()).astimezone()

    if date_range == DateRange.TODAY:
        cutoff = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif date_range == DateRange.LAST_7_DAYS:
        cutoff = now - timedelta(days=7)
    else:
        cutoff = now - timedelta(days=30)

    return cutoff.astimezone(timezone.utc).replace(tzinfo=None)


class AuditLogStore:
    """Append-only access to audit_log_entries."""

    def __init__(self, db: Session):
        self.db = db
        self.gate = AuthorizationGate(db)

    def append(
        self,
        user_id: Optional[int],
        action_type: str,
        details: str,
        performed_by: Optional[int] = None,
        commit: bool = True
    ) -> AuditLogEntry:
        """
        Insert an entry. Never touches existing rows.

        With commit=False the entry joins the caller's open transaction and is
        written when the caller commits.
        """
        entry = AuditLogEntry(
            user_id=user_id,
            action_type=action_type,
            details=details,
            performed_by=performed_by
        )
        self.db.add(entry)
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        else:
            self.db.flush()

        logger.info("Audit %s: subject=%s performed_by=%s", action_type, user_id, performed_by)
        return entry

    def list_entries(
        self,
        limit: Optional[int] = None,
        action_type: Optional[str] = None,
        user_id: Optional[int] = None,
        date_range: Union[DateRange, str, None] = None,
        now: Optional[datetime] = None
    ) -> List[AuditLogRecord]:
        """
        Most recent entries, filtered and joined with user records.

        Order of operations:
        1. Take the `limit` newest entries (default 50, also used for limit < 1)
        2. Drop those not matching action_type ("all" = any), user_id, date_range
        3. Attach subject and performer users
        """
        if limit is None or limit < 1:
            limit = DEFAULT_LIMIT

        entries = self.db.query(AuditLogEntry).order_by(
            AuditLogEntry.id.desc()
        ).limit(limit).all()

        if action_type and action_type != ALL_ACTIONS:
            entries = [e for e in entries if e.action_type == action_type]

        if user_id is not None:
            entries = [e for e in entries if e.user_id == user_id]

        cutoff = date_range_cutoff(date_range, now)
        if cutoff is not None:
            entries = [e for e in entries if e.created_at >= cutoff]

        return [
            AuditLogRecord(
                entry=e,
                user=self._get_user(e.user_id),
                performed_by_user=self._get_user(e.performed_by)
            )
            for e in entries
        ]

    def wipe_all(self, identity: Optional[Identity]) -> int:
        """
        Delete every entry. Admin only and irreversible.

        Not written to the audit log itself; the application log records who
        did it and how many entries went.
        """
        admin = self.gate.require_admin(identity)

        count = self.db.query(AuditLogEntry).delete(synchronize_session=False)
        self.db.commit()

        logger.warning("Audit log wiped by user %s: %d entries deleted", admin.id, count)
        return count

    def _get_user(self, user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        return self.db.get(User, user_id)
