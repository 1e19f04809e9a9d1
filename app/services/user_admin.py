"""Admin actions on user accounts. Every change is audited."""
import logging
from typing import Optional, Union
from sqlalchemy.orm import Session
from app.models.audit import AuditActionType
from app.models.domain import AuthAccount, AuthSession, User
from app.models.enums import Role
from app.services.audit_log import AuditLogStore
from app.services.authorization import AuthorizationGate, Identity
from app.services.errors import Forbidden, UserNotFound, parse_choice

logger = logging.getLogger(__name__)


class UserAdministration:

    def __init__(self, db: Session):
        self.db = db
        self.gate = AuthorizationGate(db)
        self.audit = AuditLogStore(db)

    def approve_user(
        self,
        identity: Optional[Identity],
        user_id: int,
        role: Union[Role, str]
    ) -> User:
        """Let a signed-up user in with the given role."""
        admin = self.gate.require_admin(identity)
        role = parse_choice(Role, role)
        user = self._get_user(user_id)

        try:
            user.is_approved = True
            user.role = role
            self.audit.append(
                user_id=user.id,
                action_type=AuditActionType.USER_APPROVED,
                details=f"User approved with role: {role.value}",
                performed_by=admin.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def update_role(
        self,
        identity: Optional[Identity],
        user_id: int,
        role: Union[Role, str]
    ) -> User:
        """
        Change another user's role.

        Invariants:
        - Admins cannot change their own role
        - The role must be one of the Role values
        """
        admin = self.gate.require_admin(identity)
        role = parse_choice(Role, role)

        if admin.id == user_id:
            raise Forbidden("Cannot change your own role")

        user = self._get_user(user_id)
        old_role = user.role.value if user.role else None

        try:
            user.role = role
            self.audit.append(
                user_id=user.id,
                action_type=AuditActionType.ROLE_CHANGED,
                details=f"Role changed from {old_role} to {role.value}",
                performed_by=admin.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)

        logger.info("User %s role changed from %s to %s by admin %s", user_id, old_role, role.value, admin.id)
        return user

    def delete_user(self, identity: Optional[Identity], user_id: int) -> None:
        """Remove a user together with their auth accounts and sessions."""
        admin = self.gate.require_admin(identity)

        if admin.id == user_id:
            raise Forbidden("Cannot delete your own account")

        user = self._get_user(user_id)
        label = user.email or user.name or "Unknown"

        try:
            for model in (AuthAccount, AuthSession):
                self.db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
            self.db.delete(user)
            self.audit.append(
                user_id=admin.id,
                action_type=AuditActionType.USER_DELETED,
                details=f"Deleted user and associated auth records: {label}",
                performed_by=admin.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("User %s deleted by admin %s", user_id, admin.id)

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFound()
        return user
