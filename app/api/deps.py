"""Request-scoped dependencies shared by the routes."""
from typing import Optional
from fastapi import Header
from app.services.authorization import Identity


def get_identity(
    x_user_email: Optional[str] = Header(None),
    x_user_subject: Optional[str] = Header(None)
) -> Optional[Identity]:
    """
    Resolve the current caller from headers set by the upstream identity provider.

    Returns None when the request carries no identity; the services decide
    whether that is acceptable.
    """
    if not x_user_email:
        return None
    return Identity(subject=x_user_subject or x_user_email, email=x_user_email)
