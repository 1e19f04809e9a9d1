"""Deletion request model - the reviewable stand-in for a protected delete."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, Enum as SQLEnum
from app.database import Base
from app.models.enums import DeletionStatus, EntityType


class DeletionRequest(Base):
    """
    A request to delete a protected entity, pending admin review.

    Invariants:
    - Created as Pending
    - Leaves Pending exactly once, to Approved or Rejected (both terminal)
    - entity_name is a snapshot taken at request time
    - Never deleted; the table is the permanent review history
    """
    __tablename__ = "deletion_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    entity_type = Column(SQLEnum(EntityType), nullable=False, index=True)
    entity_id = Column(String, nullable=False, index=True)  # Reference only, not a foreign key
    entity_name = Column(String, nullable=False)
    status = Column(SQLEnum(DeletionStatus), nullable=False, default=DeletionStatus.PENDING, index=True)
    requested_by = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Set once, by the resolution step
    reviewed_by = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
