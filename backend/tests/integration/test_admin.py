"""Integration tests for admin user management and the audit trail."""

import pytest
from tests.conftest import auth_headers, create_user, submit_manuscript, token_for

from pressroom.models import UserRole


@pytest.mark.asyncio
class TestUserManagement:
    """Tests for direct role and status edits."""

    async def test_update_role(self, client, test_session, admin_token):
        user = await create_user(test_session, "writer@pressroom.org", UserRole.USER)

        response = await client.patch(
            f"/api/v1/admin/users/{user.id}/role",
            json={"role": "moderator"},
            headers=auth_headers(admin_token),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "moderator"

    async def test_admin_cannot_demote_self(self, client, admin_user, admin_token):
        response = await client.patch(
            f"/api/v1/admin/users/{admin_user.id}/role",
            json={"role": "user"},
            headers=auth_headers(admin_token),
        )

        assert response.status_code == 403

    async def test_suspended_user_is_locked_out(self, client, test_session, admin_token):
        user = await create_user(test_session, "spammer@pressroom.org", UserRole.USER)
        token = token_for(user)

        response = await client.patch(
            f"/api/v1/admin/users/{user.id}/status",
            json={"status": "suspended"},
            headers=auth_headers(admin_token),
        )
        me = await client.get("/api/v1/auth/me", headers=auth_headers(token))

        assert response.status_code == 200
        assert response.json()["status"] == "suspended"
        assert me.status_code == 401

    async def test_list_users_by_role(self, client, admin_token, editors):
        response = await client.get(
            "/api/v1/admin/users", params={"role": "editor"}, headers=auth_headers(admin_token)
        )

        assert {u["id"] for u in response.json()} == {e.id for e in editors}

    async def test_non_admin_rejected(self, client, chief_token, editors):
        response = await client.patch(
            f"/api/v1/admin/users/{editors[0].id}/role",
            json={"role": "user"},
            headers=auth_headers(chief_token),
        )

        assert response.status_code == 403


@pytest.mark.asyncio
class TestRequirements:
    """Tests for calls for submissions."""

    async def test_create_and_list_open(self, client, admin_token, author_token):
        created = await client.post(
            "/api/v1/admin/requirements",
            json={"title": "Coastal resilience", "topic": "Climate", "subject_area": "Planning"},
            headers=auth_headers(admin_token),
        )
        await client.post(
            "/api/v1/admin/requirements",
            json={"title": "Closed call", "is_active": False},
            headers=auth_headers(admin_token),
        )

        open_calls = await client.get(
            "/api/v1/submissions/requirements", headers=auth_headers(author_token)
        )
        all_calls = await client.get("/api/v1/admin/requirements", headers=auth_headers(admin_token))

        assert created.status_code == 201
        assert created.json()["submissions_count"] == 0
        assert [r["title"] for r in open_calls.json()] == ["Coastal resilience"]
        assert len(all_calls.json()) == 2

    async def test_deactivate_closes_requirement(
        self, client, admin_token, author_token, requirement
    ):
        response = await client.patch(
            f"/api/v1/admin/requirements/{requirement.id}",
            json={"is_active": False, "topic": "Transport"},
            headers=auth_headers(admin_token),
        )
        open_calls = await client.get(
            "/api/v1/submissions/requirements", headers=auth_headers(author_token)
        )
        submission = await client.post(
            "/api/v1/submissions",
            json={"title": "T", "abstract": "A", "kind": "manuscript", "requirement_id": requirement.id},
            headers=auth_headers(author_token),
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["topic"] == "Transport"
        assert response.json()["title"] == requirement.title
        assert open_calls.json() == []
        assert submission.status_code == 400

    async def test_update_missing_requirement(self, client, admin_token):
        response = await client.patch(
            "/api/v1/admin/requirements/999",
            json={"is_active": False},
            headers=auth_headers(admin_token),
        )

        assert response.status_code == 404

    async def test_delete_unused_requirement(self, client, admin_token, requirement):
        response = await client.delete(
            f"/api/v1/admin/requirements/{requirement.id}", headers=auth_headers(admin_token)
        )
        listing = await client.get("/api/v1/admin/requirements", headers=auth_headers(admin_token))

        assert response.status_code == 200
        assert response.json()["deleted_id"] == requirement.id
        assert listing.json() == []

    async def test_requirement_with_submissions_cannot_be_deleted(
        self, client, admin_token, author_token, requirement
    ):
        await submit_manuscript(client, author_token, requirement.id)

        response = await client.delete(
            f"/api/v1/admin/requirements/{requirement.id}", headers=auth_headers(admin_token)
        )

        assert response.status_code == 409
        assert "deactivate it instead" in response.json()["detail"]

    async def test_requirement_edits_are_admin_only(self, client, chief_token, requirement):
        response = await client.patch(
            f"/api/v1/admin/requirements/{requirement.id}",
            json={"is_active": False},
            headers=auth_headers(chief_token),
        )

        assert response.status_code == 403


@pytest.mark.asyncio
class TestAuditTrail:
    """Tests for listing audit entries."""

    async def test_assignment_trail(
        self, client, admin_token, chief_token, chief_user, author_token, requirement, editors
    ):
        sub = await submit_manuscript(client, author_token, requirement.id)
        await client.post("/api/v1/chief-editor/auto-assign", headers=auth_headers(chief_token))

        response = await client.get(
            f"/api/v1/audit/resource/submission/{sub['id']}", headers=auth_headers(admin_token)
        )

        actions = [entry["action"] for entry in response.json()]
        assert actions == ["SUBMISSION_ASSIGNED", "SUBMISSION_CREATED"]
        assigned = response.json()[0]
        assert assigned["actor_id"] == chief_user.id
        assert assigned["actor_role"] == "chiefeditor"

    async def test_filter_by_action(self, client, admin_token, author_token, requirement):
        await submit_manuscript(client, author_token, requirement.id, "A")
        await submit_manuscript(client, author_token, requirement.id, "B")

        response = await client.get(
            "/api/v1/audit",
            params={"action": "SUBMISSION_CREATED"},
            headers=auth_headers(admin_token),
        )

        assert len(response.json()) == 2

    async def test_audit_is_admin_only(self, client, chief_token):
        response = await client.get("/api/v1/audit", headers=auth_headers(chief_token))

        assert response.status_code == 403
