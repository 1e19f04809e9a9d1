"""Domain records the approvals core reads, references and deletes.

Plain CRUD on these tables lives elsewhere; only the columns the workflow
needs (a display name, an owner) are modelled here.
"""
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Float, Integer, String
from app.database import Base
from app.models.enums import Role


class User(Base):
    """
    A back-office user, resolved from the identity provider by email.

    Invariants:
    - role is one of the closed Role values, or NULL until the user is approved
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    role = Column(SQLEnum(Role), nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AuthAccount(Base):
    """Identity-provider credential linked to a user.

    user_id is deliberately not a foreign key: accounts can outlive their user.
    """
    __tablename__ = "auth_accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    provider = Column(String, nullable=False, default="email-otp")
    provider_account_id = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AuthSession(Base):
    """Login session linked to a user. Same orphaning rules as AuthAccount."""
    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Service(Base):
    """Service provider (laser cutting, printing...)."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    service_type = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    organization = Column(String, nullable=True)
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class InventoryCategory(Base):
    __tablename__ = "inventory_categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    value = Column(String, nullable=False, unique=True)
    category_type = Column(String, nullable=False)  # raw_material | pre_processed
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String, nullable=True)
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ChecklistItem(Base):
    """
    Dispatch checklist entry.

    Invariants:
    - The checklist always keeps at least one item
    """
    __tablename__ = "dispatch_checklist"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    label = Column(String, nullable=False)
