"""Enums for the approvals core - the closed sets of values stored in the database."""
from enum import Enum


class Role(str, Enum):
    """Roles a user can hold. Unapproved users have no role at all."""
    ADMIN = "admin"
    CONTENT = "content"
    RESEARCH_DEVELOPMENT = "research_development"
    OPERATIONS = "operations"
    INVENTORY = "inventory"


class DeletionStatus(str, Enum):
    """Pending is the only non-terminal status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EntityType(str, Enum):
    """Record kinds whose deletion goes through the approval workflow."""
    SERVICE = "service"
    VENDOR = "vendor"
    INVENTORY_CATEGORY = "inventoryCategory"
    INVENTORY = "inventory"


class DateRange(str, Enum):
    """Time windows accepted by the audit log listing."""
    TODAY = "today"
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    ALL = "all"
