"""API tests: refusals map to status codes, the workflow runs end to end over HTTP."""
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database import get_db
from app.models.domain import ChecklistItem, Service
from app.services.errors import WorkflowError


@pytest.fixture
def client(db_session):
    """Test client whose requests share the test database session."""
    def get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = get_db_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(admin_user):
    return {"X-User-Email": admin_user.email}


@pytest.fixture
def member_headers(member_user):
    return {"X-User-Email": member_user.email}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestDeletionEndpoints:

    def test_member_delete_creates_pending_request(self, client, db_session, member_headers, sample_service):
        response = client.post(
            f"/api/entities/service/{sample_service.id}/delete",
            json={"reason": "Duplicate entry"},
            headers=member_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["deleted"] is False
        assert body["request"]["status"] == "pending"
        assert body["request"]["entity_name"] == "Laser Cutting Co"
        assert body["request"]["reason"] == "Duplicate entry"
        assert db_session.get(Service, sample_service.id) is not None

    def test_approve_then_second_decision_conflicts(
        self, client, db_session, admin_headers, member_headers, sample_service
    ):
        service_id = sample_service.id
        created = client.post(f"/api/entities/service/{service_id}/delete", headers=member_headers).json()
        request_id = created["request"]["id"]

        approved = client.post(f"/api/deletion-requests/{request_id}/approve", headers=admin_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert db_session.get(Service, service_id) is None

        again = client.post(f"/api/deletion-requests/{request_id}/reject", headers=admin_headers)
        assert again.status_code == 409
        assert again.json()["error"] == "InvalidState"

    def test_member_cannot_approve(self, client, member_headers, sample_service):
        created = client.post(f"/api/entities/service/{sample_service.id}/delete", headers=member_headers).json()

        response = client.post(
            f"/api/deletion-requests/{created['request']['id']}/approve",
            headers=member_headers
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_missing_identity_is_401(self, client, sample_service):
        response = client.post(f"/api/entities/service/{sample_service.id}/delete")
        assert response.status_code == 401

    def test_unknown_entity_is_404(self, client, member_headers):
        response = client.post("/api/entities/vendor/404/delete", headers=member_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "EntityNotFound"

    def test_unknown_entity_type_is_422(self, client, member_headers):
        response = client.post("/api/entities/spaceship/1/delete", headers=member_headers)
        assert response.status_code == 422

    def test_list_requests_with_users(self, client, admin_headers, member_headers, member_user, sample_service):
        created = client.post(f"/api/entities/service/{sample_service.id}/delete", headers=member_headers).json()
        client.post(
            f"/api/deletion-requests/{created['request']['id']}/reject",
            json={"rejection_reason": "Still used"},
            headers=admin_headers
        )

        rejected = client.get("/api/deletion-requests", params={"status": "rejected"}, headers=admin_headers).json()
        assert len(rejected) == 1
        assert rejected[0]["rejection_reason"] == "Still used"
        assert rejected[0]["requested_by_user"]["email"] == member_user.email
        assert rejected[0]["reviewed_by_user"]["role"] == "admin"

        assert client.get("/api/deletion-requests/pending", headers=admin_headers).json() == []
        by_type = client.get("/api/deletion-requests/by-type/service", headers=admin_headers).json()
        assert len(by_type) == 1


class TestAuditEndpoints:

    def test_list_filters_by_action_type(self, client, member_headers, sample_service):
        client.post(f"/api/entities/service/{sample_service.id}/delete", headers=member_headers)

        response = client.get(
            "/api/audit-logs",
            params={"action_type": "deletion_requested", "date_range": "today"},
            headers=member_headers
        )

        assert response.status_code == 200
        logs = response.json()
        assert len(logs) == 1
        assert logs[0]["user"]["email"] == "ops@example.com"

    def test_invalid_date_range_is_422(self, client, member_headers):
        response = client.get("/api/audit-logs", params={"date_range": "fortnight"}, headers=member_headers)
        assert response.status_code == 422

    def test_wipe_requires_admin(self, client, admin_headers, member_headers, sample_service):
        client.post(f"/api/entities/service/{sample_service.id}/delete", headers=member_headers)

        assert client.delete("/api/audit-logs", headers=member_headers).status_code == 403

        response = client.delete("/api/audit-logs", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"count": 1}
        assert client.get("/api/audit-logs", headers=admin_headers).json() == []


class TestAdminEndpoints:

    def test_auth_cleanup(self, client, admin_headers):
        assert client.post("/api/admin/auth-cleanup", headers=admin_headers).json() == {"count": 0}

    def test_role_update_rejects_unknown_role(self, client, admin_headers, member_user):
        response = client.put(
            f"/api/users/{member_user.id}/role",
            json={"role": "superuser"},
            headers=admin_headers
        )
        assert response.status_code == 422

    def test_role_update(self, client, admin_headers, member_user):
        response = client.put(
            f"/api/users/{member_user.id}/role",
            json={"role": "content"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "content"

    def test_last_checklist_item_conflicts(self, client, db_session, admin_headers):
        item = ChecklistItem(name="kits_packed", label="Kits packed")
        db_session.add(item)
        db_session.commit()

        response = client.delete(f"/api/checklist/{item.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "LastItemProtected"


class TestErrorHandlers:

    def test_only_workflow_errors_are_mapped(self):
        """Plain ValueErrors (pydantic ValidationError included) stay server errors."""
        assert WorkflowError in app.exception_handlers
        assert ValueError not in app.exception_handlers
