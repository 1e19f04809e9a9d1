"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from app.models.enums import DeletionStatus, EntityType, Role
from app.services.audit_log import AuditLogRecord
from app.services.deletion_requests import DeletionRequestRecord


# User schemas
class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str]
    role: Optional[Role]


class UserResponse(UserSummary):
    is_approved: bool
    created_at: datetime


class RoleUpdate(BaseModel):
    role: Role


def _summary(user) -> Optional[UserSummary]:
    return UserSummary.model_validate(user) if user is not None else None


# Deletion request schemas
class DeletionIntent(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class DeletionRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    entity_type: EntityType
    entity_id: str
    entity_name: str
    status: DeletionStatus
    requested_by: int
    reason: Optional[str]
    created_at: datetime
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    rejection_reason: Optional[str]


class DeletionRequestDetail(DeletionRequestResponse):
    """A request with the users behind it; either may be gone."""
    requested_by_user: Optional[UserSummary] = None
    reviewed_by_user: Optional[UserSummary] = None

    @classmethod
    def from_record(cls, record: DeletionRequestRecord) -> "DeletionRequestDetail":
        base = DeletionRequestResponse.model_validate(record.request)
        return cls(
            **base.model_dump(),
            requested_by_user=_summary(record.requested_by_user),
            reviewed_by_user=_summary(record.reviewed_by_user)
        )


class DeletionOutcomeResponse(BaseModel):
    """deleted=True: the entity is gone. deleted=False: request holds the pending review."""
    deleted: bool
    request: Optional[DeletionRequestResponse] = None


class RejectionCreate(BaseModel):
    rejection_reason: Optional[str] = Field(None, max_length=500)


# Audit log schemas
class AuditLogEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int]
    action_type: str
    details: str
    performed_by: Optional[int]
    created_at: datetime
    user: Optional[UserSummary] = None
    performed_by_user: Optional[UserSummary] = None

    @classmethod
    def from_record(cls, record: AuditLogRecord) -> "AuditLogEntryResponse":
        entry = record.entry
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            action_type=entry.action_type,
            details=entry.details,
            performed_by=entry.performed_by,
            created_at=entry.created_at,
            user=_summary(record.user),
            performed_by_user=_summary(record.performed_by_user)
        )


class CountResponse(BaseModel):
    count: int


class AuthAccountReport(BaseModel):
    account_id: int
    user_id: int
    user_exists: bool
    user_email: Optional[str]


# Error response
class ErrorResponse(BaseModel):
    """Body returned for every refused action."""
    detail: str
    error: str
