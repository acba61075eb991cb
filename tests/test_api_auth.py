"""
tests/test_api_auth.py -- Integration tests for /api/auth/*, /api/bases and /api/health.

These tests exercise the full stack: FastAPI routing -> token extraction and
user resolution -> AccountService -> UserStore -> response model
serialization (camelCase) and the error envelope.

Coverage:
  - Public registration: officer only, logged in straight away, 403 for any other role
  - Admin registration: any role, returns msg + user, no token
  - Login: token + identity; unknown user and wrong password share one 400 body
  - Token transport: x-auth-token and Authorization: Bearer; 401 without/with bad token
  - User management: admin-only list, self-deletion 400, missing user 404
  - Bases: admin sees every base, others their own

Fixtures used (from conftest.py):
  - api_client: (client, tokens, user_ids) keyed by TEST_USERS username.
    Every fixture account has password="testpass123".
    The fixture is module scoped, so every test uses its own usernames.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

ApiClient = tuple[TestClient, dict[str, str], dict[str, int]]


def _auth(token: str) -> dict[str, str]:
    return {"x-auth-token": token}


class TestRegister:
    def test_public_register_creates_logged_in_officer(self, api_client: ApiClient) -> None:
        """Anonymous sign-up returns a token and an officer identity."""
        client, _tokens, _ids = api_client
        body = {"username": "alice", "password": "secret1", "name": "Alice", "base": "Alpha"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        data = resp.json()
        assert data["user"]["role"] == "officer"
        assert data["user"]["base"] == "Alpha"

        me = client.get("/api/auth/user", headers=_auth(data["token"]))
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert "hashedPassword" not in me.json()

    def test_public_register_cannot_pick_admin(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        body = {"username": "mallory", "password": "secret1", "name": "M", "base": "Alpha", "role": "admin"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"

    def test_public_register_unknown_role_is_forbidden(self, api_client: ApiClient) -> None:
        """Any role other than officer is refused on public sign-up, known or not."""
        client, _tokens, _ids = api_client
        body = {"username": "eve", "password": "secret1", "name": "E", "base": "Alpha", "role": "superuser"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"

    def test_admin_register_unknown_role_is_invalid(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        body = {"username": "odd_role", "password": "secret1", "name": "O", "base": "Alpha", "role": "superuser"}
        resp = client.post("/api/auth/register", json=body, headers=_auth(tokens["admin"]))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_admin_registers_commander(self, api_client: ApiClient) -> None:
        """An admin gets the new user back and no token of their own."""
        client, tokens, _ids = api_client
        body = {"username": "charlie_cmd", "password": "secret1", "name": "Charlie", "base": "Charlie",
                "role": "commander"}
        resp = client.post("/api/auth/register", json=body, headers=_auth(tokens["admin"]))
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["msg"] == "User created successfully"
        assert data["user"]["role"] == "commander"
        assert "token" not in data

    def test_non_admin_token_forbidden(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        body = {"username": "sneaky", "password": "secret1", "name": "S", "base": "Alpha"}
        resp = client.post("/api/auth/register", json=body, headers=_auth(tokens["alpha_cmd"]))
        assert resp.status_code == 403

    def test_bad_token_is_not_anonymous(self, api_client: ApiClient) -> None:
        """A broken token must fail rather than fall back to public sign-up."""
        client, _tokens, _ids = api_client
        body = {"username": "ghost", "password": "secret1", "name": "G", "base": "Alpha"}
        resp = client.post("/api/auth/register", json=body, headers=_auth("not-a-token"))
        assert resp.status_code == 401

    def test_duplicate_username(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        body = {"username": "dupe", "password": "secret1", "name": "D", "base": "Alpha"}
        assert client.post("/api/auth/register", json=body).status_code == 200
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "conflict"

    def test_short_password_rejected(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        body = {"username": "shorty", "password": "12345", "name": "S", "base": "Alpha"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestLogin:
    def test_login_success(self, api_client: ApiClient) -> None:
        client, _tokens, ids = api_client
        resp = client.post("/api/auth/login", json={"username": "alpha_cmd", "password": "testpass123"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        data = resp.json()
        assert data["user"] == {
            "id": ids["alpha_cmd"],
            "username": "alpha_cmd",
            "name": "Alpha Commander",
            "role": "commander",
            "base": "Alpha",
        }
        assert client.get("/api/auth/user", headers=_auth(data["token"])).status_code == 200

    def test_wrong_password_and_unknown_user_look_the_same(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        wrong = client.post("/api/auth/login", json={"username": "alpha_cmd", "password": "nope-nope"})
        unknown = client.post("/api/auth/login", json={"username": "nobody_here", "password": "nope-nope"})
        assert wrong.status_code == unknown.status_code == 400
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"]["code"] == "invalid_credentials"


class TestTokenTransport:
    def test_no_token_is_401(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        resp = client.get("/api/auth/user")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthenticated"

    def test_garbage_token_is_401(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        resp = client.get("/api/auth/user", headers=_auth("abc.def.ghi"))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_token"

    def test_bearer_header_accepted(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        resp = client.get("/api/auth/user", headers={"Authorization": f"Bearer {tokens['alpha_officer']}"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "officer"


class TestUserManagement:
    def test_admin_lists_users_without_hashes(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        resp = client.get("/api/auth/users", headers=_auth(tokens["admin"]))
        assert resp.status_code == 200
        users = resp.json()
        assert {"admin", "alpha_cmd", "bravo_cmd", "alpha_officer"} <= {u["username"] for u in users}
        assert all("hashedPassword" not in u and "createdAt" in u for u in users)

    def test_commander_cannot_list_users(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        assert client.get("/api/auth/users", headers=_auth(tokens["alpha_cmd"])).status_code == 403

    def test_admin_cannot_delete_self(self, api_client: ApiClient) -> None:
        client, tokens, ids = api_client
        resp = client.delete(f"/api/auth/users/{ids['admin']}", headers=_auth(tokens["admin"]))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "self_deletion"

    def test_delete_missing_user_is_404(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        assert client.delete("/api/auth/users/987654", headers=_auth(tokens["admin"])).status_code == 404

    def test_delete_huge_user_id_is_400(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        resp = client.delete("/api/auth/users/99999999999999999999999", headers=_auth(tokens["admin"]))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_deleted_user_token_stops_working(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        body = {"username": "temp_user", "password": "secret1", "name": "T", "base": "Alpha"}
        created = client.post("/api/auth/register", json=body).json()

        resp = client.delete(f"/api/auth/users/{created['user']['id']}", headers=_auth(tokens["admin"]))
        assert resp.status_code == 200
        assert resp.json() == {"msg": "User deleted successfully"}

        after = client.get("/api/auth/user", headers=_auth(created["token"]))
        assert after.status_code == 401
        assert after.json()["error"]["code"] == "user_not_found"


class TestBasesAndHealth:
    def test_admin_sees_all_bases(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        resp = client.get("/api/bases", headers=_auth(tokens["admin"]))
        assert resp.status_code == 200
        names = [b["name"] for b in resp.json()]
        assert {"Alpha", "Bravo", "HQ"} <= set(names)
        assert names == sorted(names)
        assert all(b["id"] == b["name"] for b in resp.json())

    def test_commander_sees_own_base(self, api_client: ApiClient) -> None:
        client, tokens, _ids = api_client
        resp = client.get("/api/bases", headers=_auth(tokens["bravo_cmd"]))
        assert resp.json() == [{"id": "Bravo", "name": "Bravo"}]

    def test_bases_require_auth(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        assert client.get("/api/bases").status_code == 401

    def test_health_needs_no_token(self, api_client: ApiClient) -> None:
        client, _tokens, _ids = api_client
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert "version" in resp.json()
