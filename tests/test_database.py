"""Tests for schema setup and input refusals shared by the services."""
import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool
from app.database import init_db, make_engine
from app.models.enums import DateRange, Role
from app.services.errors import InvalidInput, WorkflowError, parse_choice


class TestInitDb:

    def test_creates_every_approvals_table(self):
        engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)

        init_db(engine)

        tables = set(inspect(engine).get_table_names())
        assert {"users", "deletion_requests", "audit_log_entries"} <= tables

    def test_is_idempotent(self):
        engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)

        init_db(engine)
        init_db(engine)

        assert "deletion_requests" in inspect(engine).get_table_names()

    def test_sqlite_url_builds_sqlite_engine(self, tmp_path):
        engine = make_engine(f"sqlite:///{tmp_path / 'approvals.db'}")

        assert engine.dialect.name == "sqlite"
        engine.dispose()


class TestParseChoice:

    def test_accepts_members_and_their_values(self):
        assert parse_choice(Role, "admin") == Role.ADMIN
        assert parse_choice(DateRange, DateRange.TODAY) == DateRange.TODAY

    def test_refuses_anything_else_with_400(self):
        with pytest.raises(InvalidInput) as excinfo:
            parse_choice(Role, "superuser")

        assert isinstance(excinfo.value, WorkflowError)
        assert excinfo.value.status_code == 400
        assert "superuser" in excinfo.value.message
