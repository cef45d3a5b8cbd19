"""Integration tests for /api/projects endpoints."""

from unittest.mock import patch

from sitecraft.models import ConversationTurn, Version
from sitecraft.services.generation_client import GenerationClient, GenerationError
from tests.conftest import SAMPLE_CODE, headers_for, make_project, make_user


def _scripted(*responses):
    """Patch GenerationClient.complete to replay *responses* in order."""
    queue = list(responses)

    def _complete(self, system_instruction, user_instruction):
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    return patch.object(GenerationClient, "complete", _complete)


class TestCreateProject:

    def test_create_generates_first_version(self, client, auth_headers):
        with _scripted("A warm bakery landing page", "```html\n<html>bakery</html>\n```"):
            resp = client.post(
                "/api/projects",
                json={"prompt": "A landing page for a bakery"},
                headers=auth_headers,
            )
        assert resp.status_code == 201
        project_id = resp.json()["id"]
        assert resp.json()["name"] == "A landing page for a bakery"

        # The background generation has finished by the time the client returns.
        data = client.get(f"/api/projects/{project_id}", headers=auth_headers).json()
        assert data["current_code"] == "<html>bakery</html>"
        assert len(data["versions"]) == 1
        assert data["current_version_index"] == data["versions"][0]["id"]
        assert data["conversation"][0]["content"] == "A landing page for a bakery"

        credits = client.get("/api/users/me/credits", headers=auth_headers).json()
        assert credits["credits"] == 15

    def test_create_with_failed_generation_refunds(self, client, auth_headers):
        with _scripted("enhanced", GenerationError("provider down")):
            resp = client.post(
                "/api/projects", json={"prompt": "A portfolio"}, headers=auth_headers,
            )
        assert resp.status_code == 201

        data = client.get(f"/api/projects/{resp.json()['id']}", headers=auth_headers).json()
        assert data["current_code"] == ""
        assert data["versions"] == []
        assert data["conversation"][-1]["content"] == "Unable to generate the code, please try again"
        assert client.get("/api/users/me/credits", headers=auth_headers).json()["credits"] == 20

    def test_create_requires_prompt(self, client, auth_headers):
        resp = client.post("/api/projects", json={"prompt": "   "}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_create_rejected_without_credits(self, client, db):
        make_user(db, user_id="broke", credits=2)
        resp = client.post("/api/projects", json={"prompt": "A blog"}, headers=headers_for("broke"))
        assert resp.status_code == 403
        assert resp.json()["error"] == "INSUFFICIENT_CREDITS"
        listed = client.get("/api/projects", headers=headers_for("broke")).json()
        assert listed == []

    def test_list_only_shows_own_projects(self, client, db, auth_headers):
        make_user(db, user_id="other")
        make_project(db, name="Mine")
        make_project(db, user_id="other", name="Theirs")

        names = [p["name"] for p in client.get("/api/projects", headers=auth_headers).json()]
        assert names == ["Mine"]


class TestRevisionEndpoint:

    def test_revision_success(self, client, db, auth_headers):
        project = make_project(db, code=SAMPLE_CODE)
        with _scripted("Make the button blue", "<html>blue</html>"):
            resp = client.post(
                f"/api/projects/{project.id}/revisions",
                json={"message": "make the button blue"},
                headers=auth_headers,
            )
        assert resp.status_code == 200
        assert resp.json() == {"message": "Changes made successfully"}

        data = client.get(f"/api/projects/{project.id}", headers=auth_headers).json()
        assert data["current_code"] == "<html>blue</html>"
        roles = [t["role"] for t in data["conversation"]]
        assert roles[0] == "user"
        assert len(roles) >= 4

    def test_revision_generation_failure_is_502(self, client, db, auth_headers):
        project = make_project(db, code=SAMPLE_CODE)
        with _scripted("enhanced", GenerationError("timeout")):
            resp = client.post(
                f"/api/projects/{project.id}/revisions",
                json={"message": "go"},
                headers=auth_headers,
            )
        assert resp.status_code == 502
        assert resp.json()["error"] == "GENERATION_FAILED"
        assert client.get("/api/users/me/credits", headers=auth_headers).json()["credits"] == 20

    def test_credit_history_shows_debit_and_refund(self, client, db, auth_headers):
        project = make_project(db, code=SAMPLE_CODE)
        with _scripted("enhanced", GenerationError("timeout")):
            client.post(
                f"/api/projects/{project.id}/revisions",
                json={"message": "go"},
                headers=auth_headers,
            )

        data = client.get("/api/users/me/credits", headers=auth_headers).json()
        assert data["credits"] == 20
        movements = [(t["kind"], t["amount"], t["project_id"]) for t in data["transactions"]]
        assert movements == [("refund", 5, project.id), ("debit", 5, project.id)]

        limited = client.get("/api/users/me/credits?limit=1", headers=auth_headers).json()
        assert [t["kind"] for t in limited["transactions"]] == ["refund"]

    def test_revision_empty_message_is_400(self, client, db, auth_headers):
        project = make_project(db)
        resp = client.post(
            f"/api/projects/{project.id}/revisions", json={"message": ""}, headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_revision_insufficient_credits_is_403(self, client, db):
        make_user(db, user_id="poor", credits=3)
        project = make_project(db, user_id="poor")
        resp = client.post(
            f"/api/projects/{project.id}/revisions",
            json={"message": "anything"},
            headers=headers_for("poor"),
        )
        assert resp.status_code == 403
        data = client.get(f"/api/projects/{project.id}", headers=headers_for("poor")).json()
        assert data["conversation"] == []

    def test_revision_on_missing_project_is_404(self, client, auth_headers):
        resp = client.post(
            "/api/projects/does-not-exist/revisions", json={"message": "hi"}, headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "PROJECT_NOT_FOUND"


class TestRollbackAndTimeline:

    def test_rollback_and_timeline_order(self, client, db, auth_headers):
        project = make_project(db)
        with _scripted("e1", "<p>one</p>", "e2", "<p>two</p>"):
            for message in ("first", "second"):
                client.post(
                    f"/api/projects/{project.id}/revisions",
                    json={"message": message},
                    headers=auth_headers,
                )

        versions = client.get(f"/api/projects/{project.id}", headers=auth_headers).json()["versions"]
        first_id = versions[0]["id"]

        resp = client.post(
            f"/api/projects/{project.id}/rollback/{first_id}", headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Rollback successful"

        data = client.get(f"/api/projects/{project.id}", headers=auth_headers).json()
        assert data["current_code"] == "<p>one</p>"
        assert len(data["versions"]) == 2

        timeline = data["timeline"]
        assert [e["created_at"] for e in timeline] == sorted(e["created_at"] for e in timeline)
        version_entries = [e for e in timeline if e["kind"] == "version"]
        assert [e["is_current"] for e in version_entries] == [True, False]
        assert timeline[-1]["kind"] == "message"

    def test_rollback_unknown_version_is_404(self, client, db, auth_headers):
        project = make_project(db, code="<p>x</p>")
        resp = client.post(f"/api/projects/{project.id}/rollback/nope", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"


class TestSaveCode:

    def test_manual_save_clears_pointer(self, client, db, auth_headers):
        project = make_project(db)
        with _scripted("e", "<p>generated</p>"):
            client.post(
                f"/api/projects/{project.id}/revisions",
                json={"message": "x"},
                headers=auth_headers,
            )

        resp = client.put(
            f"/api/projects/{project.id}/code",
            json={"code": "  <p>hand edited</p>  "},
            headers=auth_headers,
        )
        assert resp.status_code == 200

        data = client.get(f"/api/projects/{project.id}", headers=auth_headers).json()
        assert data["current_code"] == "<p>hand edited</p>"
        assert data["current_version_index"] is None
        assert len(data["versions"]) == 1
        assert client.get("/api/users/me/credits", headers=auth_headers).json()["credits"] == 15

    def test_empty_code_rejected(self, client, db, auth_headers):
        project = make_project(db, code="<p>keep</p>")
        resp = client.put(f"/api/projects/{project.id}/code", json={"code": " "}, headers=auth_headers)
        assert resp.status_code == 400

    def test_save_on_someone_elses_project_is_404(self, client, db, auth_headers):
        make_user(db, user_id="other")
        project = make_project(db, user_id="other", code="<p>theirs</p>")
        resp = client.put(f"/api/projects/{project.id}/code", json={"code": "<p>x</p>"}, headers=auth_headers)
        assert resp.status_code == 404


class TestDeleteProject:

    def test_delete_removes_history(self, client, db, auth_headers):
        project = make_project(db)
        with _scripted("e", "<p>x</p>"):
            client.post(
                f"/api/projects/{project.id}/revisions", json={"message": "x"}, headers=auth_headers,
            )

        resp = client.delete(f"/api/projects/{project.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/projects/{project.id}", headers=auth_headers).status_code == 404

        db.expire_all()
        assert db.query(Version).count() == 0
        assert db.query(ConversationTurn).count() == 0
