"""
API tests for user listing, account creation and lock routes.
"""

from fastapi import status
from sqlalchemy.exc import IntegrityError

from datajeopardy import crud


class TestUserListing:
    """Tests for GET /users."""

    def test_list_users_includes_risk(self, client, sample_user):
        response = client.get("/users")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["ok"] is True
        row = next(u for u in data["users"] if u["user_id"] == sample_user.id)
        assert row["risk_score"] == 0
        assert row["role_name"] == "Developer"
        assert {"high_severity_count", "recent_high_count", "should_auto_lock"} <= row.keys()

    def test_list_users_locks_high_risk(self, client, high_risk_user):
        data = client.get("/users").json()

        assert data["auto_locked"] == [high_risk_user.id]
        row = next(u for u in data["users"] if u["user_id"] == high_risk_user.id)
        assert row["status"] == "LOCKED"

    def test_list_users_flags_rows_locked_now(self, client, high_risk_user, sample_user):
        rows = {u["user_id"]: u for u in client.get("/users").json()["users"]}

        assert rows[high_risk_user.id]["auto_locked"] is True
        assert rows[sample_user.id]["auto_locked"] is False

    def test_list_roles(self, client):
        data = client.get("/roles").json()
        assert [r["role_name"] for r in data["roles"]] == ["Admin", "Security", "Auditor", "Developer", "Guest"]


class TestLockRoutes:
    """Tests for POST /lock-user, /unlock-user and /lock-high-risk."""

    def test_lock_then_unlock(self, client, auth_headers, db_session, sample_user):
        response = client.post("/lock-user", json={"userId": sample_user.id}, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK

        response = client.post("/unlock-user", json={"userId": sample_user.id}, headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK

        logs = crud.get_user_logs(db_session, sample_user.id)
        assert [l.query_text for l in logs] == ["MANUAL UNLOCK - risk reset"]

    def test_lock_unknown_user(self, client, auth_headers):
        response = client.post("/lock-user", json={"userId": 999}, headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["ok"] is False

    def test_lock_missing_user_id(self, client, auth_headers):
        response = client.post("/lock-user", json={}, headers=auth_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_lock_without_auth(self, client, sample_user):
        response = client.post("/lock-user", json={"userId": sample_user.id})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_batch_lock_high_risk(self, client, auth_headers, high_risk_user, sample_user):
        response = client.post("/lock-high-risk", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["locked"] == [high_risk_user.id]
        assert client.post("/lock-high-risk", headers=auth_headers).json()["locked"] == []


class TestAddUser:
    """Tests for POST /add-user."""

    def test_add_user(self, client, auth_headers, db_session):
        payload = {"username": "carol", "password": "pw123", "roleId": 4}
        response = client.post("/add-user", json=payload, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        user = crud.get_user(db_session, response.json()["insertedId"])
        assert user.username == "carol"
        assert user.status == "ACTIVE"

    def test_add_user_missing_fields(self, client, auth_headers):
        response = client.post("/add-user", json={"username": "carol"}, headers=auth_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_add_user_duplicate_username(self, client, auth_headers, sample_user):
        payload = {"username": sample_user.username, "password": "pw123", "roleId": sample_user.role_id}
        response = client.post("/add-user", json=payload, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"ok": False, "error": f"Username already exists: {sample_user.username}"}

    def test_store_failure_hides_statement(self, client, auth_headers, monkeypatch):
        def failing_insert(*args, **kwargs):
            raise IntegrityError(
                "INSERT INTO user_accounts (username, password_hash) VALUES (?, ?)",
                ("carol", "5e884898da28"),
                Exception("UNIQUE constraint failed: user_accounts.username"),
            )

        monkeypatch.setattr(crud, "create_user", failing_insert)
        payload = {"username": "carol", "password": "pw123", "roleId": 4}
        response = client.post("/add-user", json=payload, headers=auth_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body == {"ok": False, "error": "create user failed"}
        for leaked in ("INSERT", "SQL", "parameters", "5e884898da28"):
            assert leaked not in body["error"]
