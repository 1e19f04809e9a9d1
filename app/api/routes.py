"""API routes for the deletion-approval workflow and the audit trail.

Refusals raised by the services (WorkflowError subclasses) are not caught
here; the handler registered in app.main turns them into HTTP errors.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.api.deps import get_identity
from app.models.enums import DateRange, DeletionStatus, EntityType
from app.services.audit_log import AuditLogStore
from app.services.authorization import AuthorizationGate, Identity
from app.services.checklist import ChecklistService
from app.services.deletion_requests import DeletionRequestRegistry
from app.services.reconciler import OrphanReconciler
from app.services.user_admin import UserAdministration
from app.api.schemas import (
    AuditLogEntryResponse,
    AuthAccountReport,
    CountResponse,
    DeletionIntent,
    DeletionOutcomeResponse,
    DeletionRequestDetail,
    DeletionRequestResponse,
    ErrorResponse,
    RejectionCreate,
    RoleUpdate,
    UserResponse
)

router = APIRouter()

REFUSALS = {
    401: {"model": ErrorResponse, "description": "No identity"},
    403: {"model": ErrorResponse, "description": "Not an admin"},
    404: {"model": ErrorResponse, "description": "Unknown user, entity or request"},
}


# Deletion workflow endpoints
@router.post("/entities/{entity_type}/{entity_id}/delete", response_model=DeletionOutcomeResponse, responses=REFUSALS)
def delete_entity(
    entity_type: EntityType,
    entity_id: int,
    intent: Optional[DeletionIntent] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """
    Ask for an entity to be deleted.

    Admins delete immediately. Everyone else gets a pending deletion request
    and the entity stays untouched until an admin approves it.
    """
    registry = DeletionRequestRegistry(db)
    outcome = registry.delete_or_request(
        identity,
        entity_type,
        entity_id,
        reason=intent.reason if intent else None
    )
    return DeletionOutcomeResponse(
        deleted=outcome.deleted,
        request=DeletionRequestResponse.model_validate(outcome.request) if outcome.request else None
    )


@router.get("/deletion-requests", response_model=List[DeletionRequestDetail])
def list_deletion_requests(
    status_filter: Optional[DeletionStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """List deletion requests with requester and reviewer details."""
    AuthorizationGate(db).resolve_user(identity)
    records = DeletionRequestRegistry(db).list_requests(status_filter)
    return [DeletionRequestDetail.from_record(r) for r in records]


@router.get("/deletion-requests/pending", response_model=List[DeletionRequestResponse])
def list_pending_requests(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Review queue."""
    AuthorizationGate(db).resolve_user(identity)
    return DeletionRequestRegistry(db).list_pending()


@router.get("/deletion-requests/by-type/{entity_type}", response_model=List[DeletionRequestResponse])
def list_requests_by_type(
    entity_type: EntityType,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    AuthorizationGate(db).resolve_user(identity)
    return DeletionRequestRegistry(db).list_by_entity_type(entity_type)


@router.post("/deletion-requests/{request_id}/approve", response_model=DeletionRequestResponse, responses={
    **REFUSALS,
    409: {"model": ErrorResponse, "description": "Request already resolved"}
})
def approve_deletion_request(
    request_id: int,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Approve a pending request. The entity is deleted in the same transaction."""
    return DeletionRequestRegistry(db).approve(request_id, identity)


@router.post("/deletion-requests/{request_id}/reject", response_model=DeletionRequestResponse, responses={
    **REFUSALS,
    409: {"model": ErrorResponse, "description": "Request already resolved"}
})
def reject_deletion_request(
    request_id: int,
    rejection: Optional[RejectionCreate] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Reject a pending request. The entity is left alone."""
    return DeletionRequestRegistry(db).reject(
        request_id,
        identity,
        rejection_reason=rejection.rejection_reason if rejection else None
    )


# Audit log endpoints
@router.get("/audit-logs", response_model=List[AuditLogEntryResponse])
def list_audit_logs(
    limit: Optional[int] = Query(None, ge=1),
    action_type: Optional[str] = None,
    user_id: Optional[int] = None,
    date_range: Optional[DateRange] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """
    Most recent audit entries.

    `limit` bounds the read before filtering, so filters apply to the newest
    `limit` entries only.
    """
    AuthorizationGate(db).resolve_user(identity)
    records = AuditLogStore(db).list_entries(
        limit=limit,
        action_type=action_type,
        user_id=user_id,
        date_range=date_range
    )
    return [AuditLogEntryResponse.from_record(r) for r in records]


@router.delete("/audit-logs", response_model=CountResponse, responses=REFUSALS)
def wipe_audit_logs(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Delete the whole audit log. Admin only, irreversible."""
    return CountResponse(count=AuditLogStore(db).wipe_all(identity))


# Maintenance endpoints
@router.post("/admin/auth-cleanup", response_model=CountResponse, responses=REFUSALS)
def cleanup_orphaned_auth_records(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Remove auth accounts and sessions whose user no longer exists."""
    return CountResponse(count=OrphanReconciler(db).cleanup_orphaned_auth_records(identity))


@router.get("/admin/auth-accounts", response_model=List[AuthAccountReport], responses=REFUSALS)
def list_auth_accounts(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    AuthorizationGate(db).require_admin(identity)
    return OrphanReconciler(db).list_auth_accounts()


# User administration endpoints
@router.post("/users/{user_id}/approve", response_model=UserResponse, responses=REFUSALS)
def approve_user(
    user_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    return UserAdministration(db).approve_user(identity, user_id, role_data.role)


@router.put("/users/{user_id}/role", response_model=UserResponse, responses=REFUSALS)
def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Change another user's role. Admins cannot change their own."""
    return UserAdministration(db).update_role(identity, user_id, role_data.role)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, responses=REFUSALS)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    UserAdministration(db).delete_user(identity, user_id)


# Checklist endpoints
@router.delete("/checklist/{item_id}", status_code=status.HTTP_204_NO_CONTENT, responses={
    **REFUSALS,
    409: {"model": ErrorResponse, "description": "Last checklist item"}
})
def delete_checklist_item(
    item_id: int,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_identity)
):
    """Delete a checklist item. The last remaining item cannot be deleted."""
    ChecklistService(db).remove_item(identity, item_id)
