"""
Deletion request registry.

Protected deletions by non-admins never execute directly: they become
Pending requests that an admin approves or rejects. All transitions go
through here.

State machine:
    Pending -> Approved   (entity deleted, terminal)
    Pending -> Rejected   (entity untouched, terminal)
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union
from sqlalchemy.orm import Session
from app.database import Base
from app.models.audit import AuditActionType
from app.models.deletion import DeletionRequest
from app.models.domain import InventoryCategory, InventoryItem, Service, User, Vendor
from app.models.enums import DeletionStatus, EntityType, Role
from app.services.audit_log import AuditLogStore
from app.services.authorization import AuthorizationGate, Identity
from app.services.errors import EntityNotFound, InvalidInput, InvalidState, parse_choice

logger = logging.getLogger(__name__)

# Table behind each protected entity type
ENTITY_MODELS = {
    EntityType.SERVICE: Service,
    EntityType.VENDOR: Vendor,
    EntityType.INVENTORY_CATEGORY: InventoryCategory,
    EntityType.INVENTORY: InventoryItem,
}


@dataclass
class DeletionOutcome:
    """Result of a delete intent: either deleted outright or queued for review."""
    deleted: bool
    request: Optional[DeletionRequest] = None


@dataclass
class DeletionRequestRecord:
    """A request joined with its requester and reviewer (None when the user is gone)."""
    request: DeletionRequest
    requested_by_user: Optional[User]
    reviewed_by_user: Optional[User]


class DeletionRequestRegistry:
    """Creates, resolves and lists deletion requests."""

    def __init__(self, db: Session):
        self.db = db
        self.gate = AuthorizationGate(db)
        self.audit = AuditLogStore(db)

    def request_deletion(
        self,
        entity_type: Union[EntityType, str],
        entity_id: Union[int, str],
        requested_by: int,
        reason: Optional[str] = None
    ) -> DeletionRequest:
        """
        Queue a deletion for review. The entity itself is not touched.

        Not idempotent: two calls for the same entity give two Pending requests.
        """
        entity_type = parse_choice(EntityType, entity_type)
        entity = self._load_entity(entity_type, entity_id)

        request = DeletionRequest(
            entity_type=entity_type,
            entity_id=str(entity.id),
            entity_name=entity.name,  # Snapshot - must survive renames and the delete itself
            status=DeletionStatus.PENDING,
            requested_by=requested_by,
            reason=reason
        )
        try:
            self.db.add(request)
            self.db.flush()
            self.audit.append(
                user_id=requested_by,
                action_type=AuditActionType.DELETION_REQUESTED,
                details=f"Requested deletion of {entity_type.value} '{entity.name}'",
                performed_by=requested_by,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(request)

        logger.info(
            "Deletion request %s created for %s %s by user %s",
            request.id, entity_type.value, request.entity_id, requested_by
        )
        return request

    def delete_or_request(
        self,
        identity: Optional[Identity],
        entity_type: Union[EntityType, str],
        entity_id: Union[int, str],
        reason: Optional[str] = None
    ) -> DeletionOutcome:
        """
        Entry point for a caller who wants an entity gone.

        Admins delete immediately (audited). Everyone else gets a Pending request.
        """
        user = self.gate.resolve_user(identity)
        if user.role != Role.ADMIN:
            request = self.request_deletion(entity_type, entity_id, user.id, reason)
            return DeletionOutcome(deleted=False, request=request)

        entity_type = parse_choice(EntityType, entity_type)
        entity = self._load_entity(entity_type, entity_id)
        name = entity.name
        try:
            self.db.delete(entity)
            self.audit.append(
                user_id=user.id,
                action_type=AuditActionType.ENTITY_DELETED,
                details=f"Deleted {entity_type.value} '{name}'",
                performed_by=user.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Admin %s deleted %s %s directly", user.id, entity_type.value, entity_id)
        return DeletionOutcome(deleted=True)

    def resolve_request(
        self,
        request_id: int,
        decision: Union[DeletionStatus, str],
        identity: Optional[Identity],
        rejection_reason: Optional[str] = None
    ) -> DeletionRequest:
        """
        Approve or reject a Pending request. Admin only.

        Invariants:
        - Only Pending requests can be resolved; anything else is InvalidState
        - The status patch, the entity delete and the audit entry commit together
        - The patch is conditional on status still being Pending, so a
          concurrent second resolution loses with InvalidState
        """
        reviewer = self.gate.require_admin(identity)

        decision = parse_choice(DeletionStatus, decision)
        if decision == DeletionStatus.PENDING:
            raise InvalidInput("Decision must be approved or rejected")

        request = self.db.get(DeletionRequest, request_id)
        if request is None:
            raise EntityNotFound(f"Deletion request {request_id} not found")

        if request.status != DeletionStatus.PENDING:
            raise InvalidState("Request has already been processed")

        requested_by = request.requested_by
        entity_type = request.entity_type
        entity_id = request.entity_id
        entity_name = request.entity_name

        try:
            updated = self.db.query(DeletionRequest).filter(
                DeletionRequest.id == request_id,
                DeletionRequest.status == DeletionStatus.PENDING
            ).update(
                {
                    DeletionRequest.status: decision,
                    DeletionRequest.reviewed_by: reviewer.id,
                    DeletionRequest.reviewed_at: datetime.utcnow(),
                    DeletionRequest.rejection_reason: (
                        rejection_reason if decision == DeletionStatus.REJECTED else None
                    ),
                },
                synchronize_session=False
            )
            if updated != 1:
                raise InvalidState("Request has already been processed")

            if decision == DeletionStatus.APPROVED:
                entity = self._load_entity(entity_type, entity_id)
                self.db.delete(entity)
                action_type = AuditActionType.DELETION_APPROVED
                details = f"Approved deletion of {entity_type.value} '{entity_name}'"
            else:
                action_type = AuditActionType.DELETION_REJECTED
                details = f"Rejected deletion of {entity_type.value} '{entity_name}'"
                if rejection_reason:
                    details += f": {rejection_reason}"

            self.audit.append(
                user_id=requested_by,
                action_type=action_type,
                details=details,
                performed_by=reviewer.id,
                commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(request)
        logger.info("Deletion request %s %s by admin %s", request_id, decision.value, reviewer.id)
        return request

    def approve(self, request_id: int, identity: Optional[Identity]) -> DeletionRequest:
        return self.resolve_request(request_id, DeletionStatus.APPROVED, identity)

    def reject(
        self,
        request_id: int,
        identity: Optional[Identity],
        rejection_reason: Optional[str] = None
    ) -> DeletionRequest:
        return self.resolve_request(
            request_id, DeletionStatus.REJECTED, identity, rejection_reason=rejection_reason
        )

    def list_pending(self) -> List[DeletionRequest]:
        """Review queue, newest first."""
        return self.db.query(DeletionRequest).filter(
            DeletionRequest.status == DeletionStatus.PENDING
        ).order_by(DeletionRequest.id.desc()).all()

    def list_by_entity_type(self, entity_type: Union[EntityType, str]) -> List[DeletionRequest]:
        return self.db.query(DeletionRequest).filter(
            DeletionRequest.entity_type == parse_choice(EntityType, entity_type)
        ).order_by(DeletionRequest.id.desc()).all()

    def list_requests(
        self,
        status: Union[DeletionStatus, str, None] = None
    ) -> List[DeletionRequestRecord]:
        """All requests (optionally one status), joined with requester and reviewer."""
        query = self.db.query(DeletionRequest)
        if status is not None:
            query = query.filter(DeletionRequest.status == parse_choice(DeletionStatus, status))

        return [
            DeletionRequestRecord(
                request=r,
                requested_by_user=self.db.get(User, r.requested_by),
                reviewed_by_user=self.db.get(User, r.reviewed_by) if r.reviewed_by else None
            )
            for r in query.order_by(DeletionRequest.id.desc()).all()
        ]

    def _load_entity(self, entity_type: EntityType, entity_id: Union[int, str]) -> Base:
        model = ENTITY_MODELS[entity_type]
        try:
            pk = int(entity_id)
        except (TypeError, ValueError):
            raise EntityNotFound(f"{entity_type.value} {entity_id} not found")

        entity = self.db.get(model, pk)
        if entity is None:
            raise EntityNotFound(f"{entity_type.value} {entity_id} not found")
        return entity
