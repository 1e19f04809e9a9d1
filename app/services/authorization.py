"""Authorization gate consulted before every privileged operation."""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session
from app.models.domain import User
from app.models.enums import Role
from app.services.errors import Forbidden, Unauthenticated, UserNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """What the identity provider hands us for the current caller."""
    subject: str
    email: str


class AuthorizationGate:
    """
    Resolves identities to users and checks the admin role.

    Nothing is cached: every check re-reads the user row so a role change
    made by another request is honoured immediately.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_user(self, identity: Optional[Identity]) -> User:
        if identity is None:
            raise Unauthenticated()

        user = self.db.query(User).filter(User.email == identity.email).first()
        if user is None:
            raise UserNotFound()
        return user

    def require_admin(self, identity: Optional[Identity]) -> User:
        """Return the resolved user, or raise Forbidden unless they are an admin."""
        user = self.resolve_user(identity)
        if user.role != Role.ADMIN:
            logger.warning("Refused admin-only action for user %s (role=%s)", user.id, user.role)
            raise Forbidden()
        return user

    def is_admin(self, identity: Optional[Identity]) -> bool:
        return self.resolve_user(identity).role == Role.ADMIN
