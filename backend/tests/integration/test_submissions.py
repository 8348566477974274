"""Integration tests for submission intake and deletion."""

import pytest
from tests.conftest import auth_headers, create_user, submit_manuscript, token_for

from pressroom.core.exceptions import StoreUnavailable
from pressroom.models import AuditLog, Requirement, UserRole
from pressroom.services.store import EntityStore
from sqlmodel import select


async def submit_paper(client, token, draft=True):
    response = await client.post(
        "/api/v1/submissions",
        json={
            "title": "Density and affordability",
            "abstract": "Housing supply study",
            "kind": "research-paper",
            "draft": draft,
            "file": {"url": "https://files.test/p.pdf", "filename": "p.pdf", "file_size": 2048},
        },
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestSubmit:
    """Tests for creating submissions."""

    async def test_manuscript_snapshot_and_counter(
        self, client, test_session, author_token, author_user, requirement, notifier
    ):
        data = await submit_manuscript(client, author_token, requirement.id)

        assert data["status"] == "pending"
        assert data["author_email"] == author_user.email
        assert data["author_name"] == "Author"
        assert data["assigned_editor_id"] is None
        await test_session.refresh(requirement)
        assert requirement.submissions_count == 1
        assert notifier.events_named("submission:new")[0]["channel"] == "admin:dashboard"

    async def test_manuscript_needs_requirement(self, client, author_token):
        response = await client.post(
            "/api/v1/submissions",
            json={"title": "T", "abstract": "A", "kind": "manuscript"},
            headers=auth_headers(author_token),
        )

        assert response.status_code == 400

    async def test_inactive_requirement(self, client, test_session, author_token, requirement):
        requirement.is_active = False
        test_session.add(requirement)
        await test_session.commit()

        response = await client.post(
            "/api/v1/submissions",
            json={"title": "T", "abstract": "A", "kind": "manuscript", "requirement_id": requirement.id},
            headers=auth_headers(author_token),
        )

        assert response.status_code == 400
        assert "no longer accepting" in response.json()["detail"]

    async def test_draft_paper_then_complete(self, client, author_token, notifier):
        paper = await submit_paper(client, author_token)
        assert paper["status"] == "draft"
        assert paper["file_name"] == "p.pdf"
        assert notifier.events_named("submission:new") == []

        response = await client.post(
            f"/api/v1/submissions/{paper['id']}/complete", headers=auth_headers(author_token)
        )
        again = await client.post(
            f"/api/v1/submissions/{paper['id']}/complete", headers=auth_headers(author_token)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert again.status_code == 409

    async def test_draft_paper_stays_out_of_the_pool(
        self, client, author_token, chief_token, editors
    ):
        await submit_paper(client, author_token)

        response = await client.post(
            "/api/v1/chief-editor/auto-assign", headers=auth_headers(chief_token)
        )

        assert response.json()["assigned"] == 0

    async def test_only_author_completes(self, client, test_session, author_token):
        paper = await submit_paper(client, author_token)
        other = await create_user(test_session, "other@pressroom.org", UserRole.USER)

        response = await client.post(
            f"/api/v1/submissions/{paper['id']}/complete", headers=auth_headers(token_for(other))
        )

        assert response.status_code == 403

    async def test_manuscripts_cannot_be_drafts(self, client, author_token, requirement):
        response = await client.post(
            "/api/v1/submissions",
            json={
                "title": "T",
                "abstract": "A",
                "kind": "manuscript",
                "requirement_id": requirement.id,
                "draft": True,
            },
            headers=auth_headers(author_token),
        )

        assert response.status_code == 400


@pytest.mark.asyncio
class TestVisibility:
    """Who can read a submission."""

    async def test_author_and_stranger(self, client, test_session, author_token, requirement):
        sub = await submit_manuscript(client, author_token, requirement.id)
        stranger = await create_user(test_session, "stranger@pressroom.org", UserRole.USER)

        mine = await client.get(f"/api/v1/submissions/{sub['id']}", headers=auth_headers(author_token))
        theirs = await client.get(
            f"/api/v1/submissions/{sub['id']}", headers=auth_headers(token_for(stranger))
        )
        listing = await client.get("/api/v1/submissions/mine", headers=auth_headers(author_token))

        assert mine.status_code == 200
        assert theirs.status_code == 403
        assert [s["id"] for s in listing.json()] == [sub["id"]]


@pytest.mark.asyncio
class TestDelete:
    """Tests for the admin delete cascade."""

    async def test_delete_decrements_counter(
        self, client, test_session, admin_token, author_token, requirement
    ):
        sub = await submit_manuscript(client, author_token, requirement.id)

        response = await client.delete(
            f"/api/v1/admin/submissions/{sub['id']}", headers=auth_headers(admin_token)
        )

        assert response.status_code == 200
        assert response.json()["partial"] is False
        await test_session.refresh(requirement)
        assert requirement.submissions_count == 0

    async def test_counter_failure_is_reported_as_partial(
        self, client, test_session, admin_token, author_token, requirement, monkeypatch
    ):
        sub = await submit_manuscript(client, author_token, requirement.id)
        original = EntityStore.update_by_id

        async def failing_update(self, model, entity_id, patch, expected=None):
            if model is Requirement:
                raise StoreUnavailable("Entity store unavailable during update")
            return await original(self, model, entity_id, patch, expected)

        monkeypatch.setattr(EntityStore, "update_by_id", failing_update)

        response = await client.delete(
            f"/api/v1/admin/submissions/{sub['id']}", headers=auth_headers(admin_token)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["partial"] is True
        assert "unavailable" in data["error"]
        result = await test_session.execute(
            select(AuditLog).where(AuditLog.action == "SUBMISSION_DELETED")
        )
        assert result.scalar_one().partial is True

    async def test_only_admin_deletes(self, client, chief_token, author_token, requirement):
        sub = await submit_manuscript(client, author_token, requirement.id)

        response = await client.delete(
            f"/api/v1/admin/submissions/{sub['id']}", headers=auth_headers(chief_token)
        )

        assert response.status_code == 403

    async def test_delete_missing(self, client, admin_token):
        response = await client.delete(
            "/api/v1/admin/submissions/999", headers=auth_headers(admin_token)
        )

        assert response.status_code == 404

    async def test_delete_lost_to_concurrent_delete_keeps_counter(
        self, client, test_session, admin_token, author_token, requirement, monkeypatch
    ):
        sub = await submit_manuscript(client, author_token, requirement.id)

        async def already_gone(self, model, entity_id):
            return False

        monkeypatch.setattr(EntityStore, "delete_by_id", already_gone)

        response = await client.delete(
            f"/api/v1/admin/submissions/{sub['id']}", headers=auth_headers(admin_token)
        )

        assert response.status_code == 404
        await test_session.refresh(requirement)
        assert requirement.submissions_count == 1


@pytest.mark.asyncio
class TestResearchPaperEdits:
    """Authors edit and withdraw their own papers until an editor picks them up."""

    async def test_edit_draft(self, client, author_token):
        paper = await submit_paper(client, author_token)

        response = await client.patch(
            f"/api/v1/submissions/{paper['id']}",
            json={
                "title": "  Density, revisited  ",
                "file": {"url": "https://files.test/v2.pdf", "filename": "v2.pdf"},
            },
            headers=auth_headers(author_token),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Density, revisited"
        assert data["abstract"] == "Housing supply study"
        assert data["file_name"] == "v2.pdf"
        assert data["status"] == "draft"
        assert data["version"] == paper["version"] + 1

    async def test_edit_empty_title(self, client, author_token):
        paper = await submit_paper(client, author_token)

        response = await client.patch(
            f"/api/v1/submissions/{paper['id']}",
            json={"title": "   "},
            headers=auth_headers(author_token),
        )

        assert response.status_code == 400

    async def test_stranger_cannot_edit_or_delete(self, client, test_session, author_token):
        paper = await submit_paper(client, author_token)
        other = await create_user(test_session, "other@pressroom.org", UserRole.USER)
        headers = auth_headers(token_for(other))

        edit = await client.patch(
            f"/api/v1/submissions/{paper['id']}", json={"title": "Mine"}, headers=headers
        )
        delete = await client.delete(f"/api/v1/submissions/{paper['id']}", headers=headers)

        assert edit.status_code == 404
        assert delete.status_code == 404

    async def test_manuscripts_are_not_editable_here(self, client, author_token, requirement):
        sub = await submit_manuscript(client, author_token, requirement.id)

        response = await client.patch(
            f"/api/v1/submissions/{sub['id']}",
            json={"title": "Changed"},
            headers=auth_headers(author_token),
        )

        assert response.status_code == 404

    async def test_assigned_paper_is_locked(self, client, author_token, chief_token, editors):
        paper = await submit_paper(client, author_token, draft=False)
        await client.post(
            f"/api/v1/chief-editor/research-papers/{paper['id']}/assign",
            json={"editor_id": editors[0].id},
            headers=auth_headers(chief_token),
        )

        edit = await client.patch(
            f"/api/v1/submissions/{paper['id']}",
            json={"title": "Late change"},
            headers=auth_headers(author_token),
        )
        delete = await client.delete(
            f"/api/v1/submissions/{paper['id']}", headers=auth_headers(author_token)
        )

        assert edit.status_code == 409
        assert delete.status_code == 409

    async def test_withdraw_draft(self, client, test_session, author_token):
        paper = await submit_paper(client, author_token)

        response = await client.delete(
            f"/api/v1/submissions/{paper['id']}", headers=auth_headers(author_token)
        )
        fetched = await client.get(
            f"/api/v1/submissions/{paper['id']}", headers=auth_headers(author_token)
        )

        assert response.status_code == 200
        assert response.json()["deleted_id"] == paper["id"]
        assert fetched.status_code == 404
        result = await test_session.execute(
            select(AuditLog).where(AuditLog.action == "SUBMISSION_DELETED")
        )
        assert result.scalar_one().resource_id == paper["id"]
