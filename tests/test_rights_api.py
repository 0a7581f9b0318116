"""API tests for the rights router, identity endpoint and health probes."""

import pytest

from tests.conftest import auth_headers


class TestHealth:

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["db"] == "ok"
        assert "x-request-id" in resp.headers


class TestAuthDisabledMode:
    """With AUTH_ENABLED=false every request is an anonymous superuser."""

    def test_me_is_anonymous_superuser(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json() == {"user_id": "anonymous", "access_level": 100, "special_grants": {}}

    def test_access_list_contains_app_and_file_routes(self, client):
        resp = client.get("/api/rights/access-list")
        assert resp.status_code == 200
        paths = list(resp.json())
        assert paths[0] == "/api/auth/me"
        assert "/api/rights/users/*/grants" in paths
        assert paths.index("/api/rights/access-list") < paths.index("/dashboard")
        assert resp.json()["/admin/users"]["GET"]["level_rights"] == [90, 100]

    def test_guarded_endpoint_methods_are_separate_rules(self, client):
        rules = client.get("/api/rights/access-list").json()["/api/rights/users/*/grants"]
        assert rules["GET"]["level_rights"] == [90]
        assert rules["PUT"]["level_rights"] == [100]

    def test_check_reports_rule(self, client):
        resp = client.post("/api/rights/check", json={"path": "/admin/users", "method": "GET"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["allowed"] is True
        assert body["rule"]["level_rights"] == [90, 100]

    def test_check_unmatched_path(self, client):
        resp = client.post("/api/rights/check", json={"path": "/internal/unknown"})
        assert resp.json() == {"allowed": False, "rule": None}

    def test_check_unknown_action(self, client):
        resp = client.post("/api/rights/check", json={"path": "/reports", "action": "execute"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_security_matrix(self, client):
        resp = client.get("/api/rights/menus/main.json/security-matrix")
        assert resp.status_code == 200
        matrix = resp.json()
        assert set(matrix["administration"]) == {"users"}
        assert matrix["finance"]["invoices"]["special_rights"] == "billing"

    def test_security_matrix_unknown_menu(self, client):
        resp = client.get("/api/rights/menus/missing.json/security-matrix")
        assert resp.status_code == 500
        assert resp.json()["error"] == "CONFIGURATION_ERROR"

    def test_replace_and_read_grants(self, client, make_user):
        make_user("alice", 10)
        resp = client.put("/api/rights/users/alice/grants", json={
            "reporting": {"access": True, "read": True},
        })
        assert resp.status_code == 200
        assert resp.json()["reporting"]["read"] is True

        resp = client.get("/api/rights/users/alice/grants")
        assert resp.json() == {
            "reporting": {"access": True, "read": True, "write": False, "delete": False},
        }

    def test_grants_of_unknown_user(self, client):
        resp = client.get("/api/rights/users/ghost/grants")
        assert resp.status_code == 404
        assert resp.json()["error"] == "USER_NOT_FOUND"

    def test_provision_uses_stored_level(self, client, make_user):
        make_user("carol", 60)
        resp = client.post("/api/rights/users/carol/provision", json={"menu": "main.json"})
        assert resp.status_code == 200
        assert set(resp.json()) == {"reporting", "billing"}

    def test_provision_with_explicit_level(self, client, make_user):
        make_user("carol", 60)
        resp = client.post(
            "/api/rights/users/carol/provision", json={"menu": "main.json", "access_level": 10}
        )
        assert resp.json() == {}


@pytest.mark.usefixtures("auth_enabled")
class TestAuthEnabledMode:

    def test_missing_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_invalid_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert resp.status_code == 401

    def test_inactive_user_is_unauthenticated(self, client, db, make_user):
        user = make_user("alice", 90)
        user.is_active = False
        db.commit()
        resp = client.get("/api/auth/me", headers=auth_headers("alice"))
        assert resp.status_code == 401

    def test_me_returns_grants(self, client, make_user):
        make_user("alice", 10, grants={"reporting": {"read": True}})
        resp = client.get("/api/auth/me", headers=auth_headers("alice"))
        assert resp.status_code == 200
        body = resp.json()
        assert body["access_level"] == 10
        assert body["special_grants"]["reporting"]["read"] is True

    def test_level_below_rule_is_forbidden(self, client, make_user):
        make_user("bob", 50)
        resp = client.get("/api/rights/access-list", headers=auth_headers("bob"))
        assert resp.status_code == 403
        assert resp.json()["details"] == {"path": "/api/rights/access-list", "method": "GET"}

    def test_listed_level_allowed(self, client, make_user):
        make_user("bob", 90)
        resp = client.get("/api/rights/access-list", headers=auth_headers("bob"))
        assert resp.status_code == 200

    def test_special_right_opens_endpoint(self, client, make_user):
        make_user("bob", 10, grants={"rights_admin": {"read": True}})
        resp = client.get("/api/rights/access-list", headers=auth_headers("bob"))
        assert resp.status_code == 200

    def test_write_needs_write_flag(self, client, make_user):
        make_user("bob", 10, grants={"rights_admin": {"read": True}})
        make_user("alice", 10)
        resp = client.put(
            "/api/rights/users/alice/grants", json={}, headers=auth_headers("bob")
        )
        assert resp.status_code == 403

    def test_level_90_cannot_replace_grants(self, client, make_user):
        make_user("bob", 90)
        make_user("alice", 10)
        resp = client.put(
            "/api/rights/users/alice/grants", json={}, headers=auth_headers("bob")
        )
        assert resp.status_code == 403

    def test_superuser_provisions(self, client, make_user):
        make_user("root", 100)
        make_user("carol", 50)
        resp = client.post(
            "/api/rights/users/carol/provision",
            json={"menu": "main.json"},
            headers=auth_headers("root"),
        )
        assert resp.status_code == 200
        assert set(resp.json()) == {"reporting", "billing"}

    def test_check_uses_caller_rights(self, client, make_user):
        make_user("bob", 50)
        resp = client.post(
            "/api/rights/check",
            json={"path": "/admin/users/7/edit", "method": "POST"},
            headers=auth_headers("bob"),
        )
        assert resp.json()["allowed"] is False
        assert resp.json()["rule"]["level_rights"] == [100]
