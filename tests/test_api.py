"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from talent_match.api.main import create_app
from talent_match.core.ids import new_id


@pytest.fixture
def client(container):
    """Test client over an app wired to in-memory stores."""
    return TestClient(create_app(container))


def register(client, name, email, role="talent"):
    response = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": "Secret123",
        "role": role,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["data"]["user_id"], {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def admin_auth(client):
    return register(client, "Ada Admin", "ada@example.com", role="admin")


@pytest.fixture
def talent_auth(client):
    return register(client, "Tom Talent", "tom@example.com")


@pytest.fixture
def job_id(client, admin_auth):
    _, headers = admin_auth
    response = client.post("/api/jobs", headers=headers, json={
        "title": "Backend Engineer",
        "description": "Build and operate the matching service.",
        "location": "Remote",
        "requiredSkills": ["python"],
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


class TestAuth:
    """Test authentication and authorization."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["components"] == {"storage": "memory"}

    def test_login_and_me(self, client, talent_auth):
        response = client.post("/api/auth/login", json={"email": "tom@example.com", "password": "Secret123"})
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == 200
        assert me.json()["data"]["email"] == "tom@example.com"

    def test_bad_login(self, client, talent_auth):
        response = client.post("/api/auth/login", json={"email": "tom@example.com", "password": "Nope12345"})

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_missing_token(self, client):
        response = client.get("/api/applications/stats")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_wrong_role(self, client, talent_auth):
        _, headers = talent_auth

        response = client.get("/api/applications/stats", headers=headers)

        assert response.status_code == 403
        assert "Required role(s): admin" in response.json()["message"]

    def test_duplicate_registration(self, client, talent_auth):
        response = client.post("/api/auth/register", json={
            "name": "Tom Again", "email": "tom@example.com", "password": "Secret123",
        })

        assert response.status_code == 409


class TestApplicationsApi:
    """Test the application endpoints."""

    def test_apply_then_conflict(self, client, talent_auth, job_id):
        _, headers = talent_auth

        first = client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})
        second = client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})

        assert first.status_code == 201
        assert first.json()["data"]["status"] == "pending"
        assert second.status_code == 409
        assert second.json()["error"] == "conflict"

    def test_apply_validation(self, client, talent_auth):
        _, headers = talent_auth

        response = client.post("/api/applications/apply", headers=headers, json={"jobId": "not-a-valid-id"})

        assert response.status_code == 400
        assert response.json()["details"]

    def test_apply_missing_job(self, client, talent_auth):
        _, headers = talent_auth

        response = client.post("/api/applications/apply", headers=headers, json={"jobId": new_id()})

        assert response.status_code == 404

    def test_admin_cannot_apply(self, client, admin_auth, job_id):
        _, headers = admin_auth

        response = client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})

        assert response.status_code == 403

    def test_apply_inactive_job(self, client, admin_auth, talent_auth, job_id):
        _, admin_headers = admin_auth
        _, headers = talent_auth
        client.patch(f"/api/jobs/{job_id}/deactivate", headers=admin_headers)

        response = client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_state"

    def test_review_to_matched(self, client, admin_auth, talent_auth, job_id):
        """Reviewing to matched returns the match and exposes it to the talent."""
        admin_id, admin_headers = admin_auth
        _, headers = talent_auth
        application_id = client.post(
            "/api/applications/apply", headers=headers, json={"jobId": job_id}
        ).json()["data"]["id"]

        response = client.patch(
            f"/api/applications/{application_id}/review",
            headers=admin_headers,
            json={"status": "matched"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["status"] == "matched"
        assert body["data"]["reviewed_by"] == admin_id
        assert body["match_outcome"] == "created"
        my_matches = client.get("/api/matches/my-matches", headers=headers).json()
        assert my_matches["count"] == 1
        assert my_matches["data"][0]["matched_by"] == admin_id

    def test_review_invalid_status(self, client, admin_auth, talent_auth, job_id):
        _, admin_headers = admin_auth
        _, headers = talent_auth
        application_id = client.post(
            "/api/applications/apply", headers=headers, json={"jobId": job_id}
        ).json()["data"]["id"]

        response = client.patch(
            f"/api/applications/{application_id}/review",
            headers=admin_headers,
            json={"status": "approved"},
        )

        assert response.status_code == 400

    def test_review_unknown_application(self, client, admin_auth):
        _, admin_headers = admin_auth

        response = client.patch(
            f"/api/applications/{new_id()}/review", headers=admin_headers, json={"status": "rejected"}
        )

        assert response.status_code == 404

    def test_check_and_my_applications(self, client, talent_auth, job_id):
        _, headers = talent_auth

        before = client.get(f"/api/applications/check/{job_id}", headers=headers).json()
        client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})
        after = client.get(f"/api/applications/check/{job_id}", headers=headers).json()
        mine = client.get("/api/applications/my-applications", headers=headers).json()

        assert before["data"]["has_applied"] is False
        assert after["data"]["has_applied"] is True
        assert mine["count"] == 1

    def test_list_pagination_and_stats(self, client, admin_auth, job_id):
        _, admin_headers = admin_auth
        for i in range(12):
            _, headers = register(client, f"Talent {i}", f"talent{i}@example.com")
            client.post("/api/applications/apply", headers=headers, json={"jobId": job_id})

        page = client.get("/api/applications?page=2&limit=5", headers=admin_headers).json()
        stats = client.get("/api/applications/stats", headers=admin_headers).json()

        assert page["pagination"] == {"page": 2, "pages": 3, "total": 12, "limit": 5}
        assert len(page["data"]) == 5
        assert stats["data"]["pending"] == 12
        assert stats["data"]["total"] == 12

    def test_list_bad_pagination(self, client, admin_auth):
        _, admin_headers = admin_auth

        response = client.get("/api/applications?limit=500", headers=admin_headers)

        assert response.status_code == 400


class TestMatchesApi:
    """Test the match endpoints."""

    def test_direct_match_then_conflict(self, client, admin_auth, talent_auth, job_id):
        _, admin_headers = admin_auth
        talent_id, _ = talent_auth
        body = {"userId": talent_id, "jobId": job_id}

        first = client.post("/api/matches", headers=admin_headers, json=body)
        second = client.post("/api/matches", headers=admin_headers, json=body)

        assert first.status_code == 201
        assert first.json()["data"]["status"] == "matched"
        assert second.status_code == 409
        assert client.get("/api/matches", headers=admin_headers).json()["count"] == 1

    def test_match_admin_rejected(self, client, admin_auth, job_id):
        admin_id, admin_headers = admin_auth

        response = client.post("/api/matches", headers=admin_headers, json={"userId": admin_id, "jobId": job_id})

        assert response.status_code == 400

    def test_self_match(self, client, talent_auth, job_id):
        talent_id, headers = talent_auth

        response = client.post("/api/matches/apply", headers=headers, json={"jobId": job_id})

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "applied"
        assert response.json()["data"]["matched_by"] == talent_id


class TestJobsAndUsersApi:
    """Test job and user listing endpoints."""

    def test_public_job_listing(self, client, job_id):
        listing = client.get("/api/jobs").json()
        single = client.get(f"/api/jobs/{job_id}")

        assert listing["count"] == 1
        assert single.status_code == 200
        assert single.json()["data"]["required_skills"] == ["python"]

    def test_talent_cannot_create_job(self, client, talent_auth):
        _, headers = talent_auth

        response = client.post("/api/jobs", headers=headers, json={"title": "Nope"})

        assert response.status_code == 403

    def test_delete_job(self, client, admin_auth, job_id):
        _, admin_headers = admin_auth

        assert client.delete(f"/api/jobs/{job_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/jobs/{job_id}").status_code == 404

    def test_user_listings(self, client, admin_auth, talent_auth):
        _, admin_headers = admin_auth

        users = client.get("/api/users", headers=admin_headers).json()
        talents = client.get("/api/talents").json()

        assert users["count"] == 2
        assert talents["count"] == 1
        assert "password_hash" not in talents["data"][0]
