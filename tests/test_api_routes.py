"""
tests/test_api_routes.py -- Integration tests for the auth and interview routes.

These tests exercise the full stack: FastAPI routing -> middleware -> session
dependency -> auth/records functions -> fakes -> response model
serialization. The fakes replace only the external services.

Coverage:
  - Auth failures: 401 on protected routes without / with a bad cookie
  - register -> login -> me -> sign-out round through the cookie jar
  - sign-in with an ID token, email mismatch sets no cookie
  - sign-up needs an ID token for the same uid
  - Validation failures: 422 envelope
  - Interviews: own list, latest feed excludes caller, detail 404,
    feedback create + read, unknown interview
  - Store outage: 503 envelope on read routes, {success: false} on
    feedback creation
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from auth.session import SESSION_COOKIE
from docstore.store import INTERVIEWS, USERS, StoreError
from fakes import full_model_response


def _seed_interviews(services) -> None:
    rows = [
        ("i1", "uid-ada", True, "2024-03-01T10:00:00+00:00"),
        ("i2", "uid-bob", True, "2024-03-02T10:00:00+00:00"),
        ("i3", "uid-cy", True, "2024-03-03T10:00:00+00:00"),
        ("i4", "uid-bob", False, "2024-03-04T10:00:00+00:00"),
    ]
    for doc_id, user_id, finalized, created_at in rows:
        services.store.seed(
            INTERVIEWS,
            doc_id,
            {"userId": user_id, "finalized": finalized, "createdAt": created_at, "role": "Frontend"},
        )


class TestApiAuthFailure:
    """Requests without a valid session cookie must return 401."""

    def test_me_unauthenticated(self, client: TestClient) -> None:
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": {"code": "unauthorized", "message": "Authentication required."}}

    def test_interviews_unauthenticated(self, client: TestClient) -> None:
        assert client.get("/api/v1/interviews").status_code == 401
        assert client.get("/api/v1/interviews/latest").status_code == 401

    def test_forged_cookie(self, client: TestClient) -> None:
        client.cookies.set(SESSION_COOKIE, "forged")
        assert client.get("/api/v1/auth/me").status_code == 401


class TestAuthRoutes:
    def test_register_login_me_sign_out(self, client: TestClient, services) -> None:
        resp = client.post(
            "/api/v1/auth/register", json={"name": "Ada Lovelace", "email": "ada@example.com", "password": "hunter22"}
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Account created successfully. Please sign in."}

        resp = client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "hunter22"})
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.headers["cache-control"] == "no-store"
        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{SESSION_COOKIE}=")
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

        me = client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "ada@example.com"
        assert me.json()["name"] == "Ada Lovelace"

        resp = client.post("/api/v1/auth/sign-out")
        assert resp.json() == {"success": True, "message": "Signed out successfully"}
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_login_wrong_password_is_200_with_message(self, client: TestClient, services) -> None:
        services.identity.accounts["ada@example.com"] = ("uid-ada", "hunter22")
        resp = client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "nope-nope"})
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "message": "Incorrect password"}
        assert "set-cookie" not in resp.headers

    def test_sign_up_and_sign_in_with_id_token(self, client: TestClient, services) -> None:
        token = services.identity.issue_token("uid-ada", "ada@example.com")
        resp = client.post(
            "/api/v1/auth/sign-up",
            json={"uid": "uid-ada", "name": "Ada", "email": "ada@example.com", "idToken": token},
        )
        assert resp.json()["success"] is True

        resp = client.post("/api/v1/auth/sign-in", json={"email": "ada@example.com", "idToken": token})
        assert resp.json() == {"success": True, "message": "Signed in successfully"}
        assert client.get("/api/v1/auth/me").status_code == 200

    def test_sign_up_for_another_uid_is_rejected(self, client: TestClient, services) -> None:
        token = services.identity.issue_token("uid-eve", "eve@example.com")

        resp = client.post(
            "/api/v1/auth/sign-up",
            json={"uid": "uid-ada", "name": "Ada", "email": "ada@example.com", "idToken": token},
        )

        assert resp.json() == {"success": False, "message": "Invalid authentication token"}
        assert services.store.writes == []

    def test_sign_up_without_id_token_is_422(self, client: TestClient) -> None:
        resp = client.post("/api/v1/auth/sign-up", json={"uid": "uid-ada", "name": "Ada", "email": "ada@example.com"})
        assert resp.status_code == 422

    def test_sign_in_email_mismatch(self, client: TestClient, services) -> None:
        services.store.seed(USERS, "uid-ada", {"name": "Ada", "email": "ada@example.com"})
        token = services.identity.issue_token("uid-ada", "ada@example.com")

        resp = client.post("/api/v1/auth/sign-in", json={"email": "eve@example.com", "idToken": token})

        assert resp.json() == {"success": False, "message": "Invalid authentication token"}
        assert "set-cookie" not in resp.headers
        assert services.identity.minted == []

    def test_session_mint_failure_is_500(self, client: TestClient, services) -> None:
        services.store.seed(USERS, "uid-ada", {"name": "Ada", "email": "ada@example.com"})
        services.identity.mint_fails = True
        token = services.identity.issue_token("uid-ada", "ada@example.com")

        resp = client.post("/api/v1/auth/sign-in", json={"email": "ada@example.com", "idToken": token})

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "session_failed"

    def test_register_validation_error(self, client: TestClient) -> None:
        resp = client.post("/api/v1/auth/register", json={"name": "Al", "email": "not-an-email", "password": "x"})
        assert resp.status_code == 422
        body = resp.json()["error"]
        assert body["code"] == "validation_error"
        fields = {tuple(e["loc"])[-1] for e in body["detail"]}
        assert {"name", "email", "password"} <= fields


class TestInterviewRoutes:
    def test_list_my_interviews(self, signed_in) -> None:
        client, services, _ = signed_in
        _seed_interviews(services)

        resp = client.get("/api/v1/interviews")

        assert resp.status_code == 200
        data = resp.json()
        assert [i["id"] for i in data] == ["i1"]
        assert data[0]["userId"] == "uid-ada"
        assert data[0]["role"] == "Frontend"

    def test_latest_excludes_caller_and_unfinalized(self, signed_in) -> None:
        client, services, uid = signed_in
        _seed_interviews(services)

        data = client.get("/api/v1/interviews/latest", params={"limit": 5}).json()

        assert [i["id"] for i in data] == ["i3", "i2"]
        assert all(i["userId"] != uid and i["finalized"] for i in data)

    def test_latest_limit_bounds(self, signed_in) -> None:
        client, _, _ = signed_in
        assert client.get("/api/v1/interviews/latest", params={"limit": 0}).status_code == 422

    def test_interview_not_found(self, signed_in) -> None:
        client, _, _ = signed_in
        resp = client.get("/api/v1/interviews/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_create_and_read_feedback(self, signed_in) -> None:
        client, services, _ = signed_in
        _seed_interviews(services)
        services.scorer.response = full_model_response(strengths=None)

        resp = client.post(
            "/api/v1/interviews/i1/feedback",
            json={"transcript": [{"role": "user", "content": "I led the migration."}]},
        )
        assert resp.status_code == 200
        created = resp.json()
        assert created["success"] is True
        assert created["feedbackId"]

        fb = client.get("/api/v1/interviews/i1/feedback").json()
        assert fb["id"] == created["feedbackId"]
        assert fb["totalScore"] == 78
        assert fb["strengths"] == []
        assert fb["categoryScores"][0]["name"] == "Communication Skills"

    def test_empty_transcript(self, signed_in) -> None:
        client, services, _ = signed_in
        _seed_interviews(services)

        resp = client.post("/api/v1/interviews/i1/feedback", json={"transcript": []})

        assert resp.json()["success"] is False
        assert "invalid" in resp.json()["error"].lower()
        assert services.store.writes == []

    def test_feedback_for_unknown_interview(self, signed_in) -> None:
        client, _, _ = signed_in
        resp = client.post(
            "/api/v1/interviews/nope/feedback", json={"transcript": [{"role": "user", "content": "hi"}]}
        )
        assert resp.json() == {"success": False, "feedbackId": None, "error": "Interview not found."}

    def test_feedback_missing_is_404(self, signed_in) -> None:
        client, services, _ = signed_in
        _seed_interviews(services)
        assert client.get("/api/v1/interviews/i1/feedback").status_code == 404

    def test_store_outage_is_503(self, signed_in, monkeypatch) -> None:
        client, services, _ = signed_in
        # Keep the session lookup working; only the read route hits the outage.
        user = services.users.get("uid-ada")
        monkeypatch.setattr(services.users, "get", lambda uid, email=None: user)
        services.store.fail_with = StoreError("backend down", code="unavailable")

        resp = client.get("/api/v1/interviews")

        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "store_unavailable"

    def test_store_outage_on_feedback_create_is_action_failure(self, signed_in, monkeypatch) -> None:
        client, services, _ = signed_in
        user = services.users.get("uid-ada")
        monkeypatch.setattr(services.users, "get", lambda uid, email=None: user)
        services.store.fail_with = StoreError("backend down", code="unavailable")

        resp = client.post(
            "/api/v1/interviews/i1/feedback", json={"transcript": [{"role": "user", "content": "hi"}]}
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": False, "feedbackId": None, "error": "backend down"}
        assert services.scorer.prompts == []
