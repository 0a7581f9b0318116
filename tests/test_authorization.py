"""Tests for the allow/deny decision and the RightsService facade."""

import pytest

from routeguard.exceptions import ValidationError
from routeguard.services.authorization import (
    GrantRow,
    Principal,
    authorize,
    is_external_url,
)
from routeguard.services.rights_service import RightsService
from routeguard.services.rule_index import Rule
from tests.conftest import route


def _principal(level: int, **grants) -> Principal:
    return Principal(user_id="u1", access_level=level, special_grants=grants)


class TestLevelRights:

    def test_listed_level_allowed(self):
        rule = Rule(level_rights=frozenset({10, 20}))
        assert authorize(_principal(10), rule) is True

    def test_unlisted_level_denied(self):
        rule = Rule(level_rights=frozenset({10, 20}))
        assert authorize(_principal(30), rule) is False

    @pytest.mark.parametrize("rule", [
        Rule(level_rights=frozenset({1})),
        Rule(special_rights="reporting"),
        Rule(level_rights=frozenset({1}), special_rights="billing"),
    ])
    def test_superuser_always_allowed(self, rule):
        assert authorize(_principal(100), rule) is True

    def test_custom_superuser_level(self):
        rule = Rule(level_rights=frozenset({1}))
        assert authorize(_principal(999), rule, superuser_level=999) is True
        assert authorize(_principal(100), rule, superuser_level=999) is False

    def test_empty_rule_allows_any_authenticated_principal(self):
        assert authorize(_principal(0), Rule()) is True


class TestSpecialRights:

    def test_granted_action_allowed(self):
        rule = Rule(special_rights="reporting")
        principal = _principal(10, reporting={"read": True})
        assert authorize(principal, rule, action="read") is True

    def test_ungranted_action_denied(self):
        rule = Rule(special_rights="reporting")
        principal = _principal(10, reporting={"read": True})
        assert authorize(principal, rule, action="write") is False

    def test_default_action_is_access(self):
        rule = Rule(special_rights="reporting")
        assert authorize(_principal(10, reporting={"access": True}), rule) is True
        assert authorize(_principal(10, reporting={"read": True}), rule) is False

    def test_grant_for_other_tool_denied(self):
        rule = Rule(special_rights="reporting")
        assert authorize(_principal(10, billing=GrantRow.full().to_dict()), rule) is False

    def test_special_rights_pass_when_level_fails(self):
        rule = Rule(level_rights=frozenset({90}), special_rights="billing")
        principal = _principal(10, billing={"delete": True})
        assert authorize(principal, rule, action="delete") is True
        assert authorize(principal, rule, action="write") is False


class TestNoMatch:

    @pytest.mark.parametrize("path", ["/https://example.com", "/http://example.com/x", "https://example.com"])
    def test_external_url_allowed(self, path):
        assert authorize(_principal(0), None, concrete_path=path) is True

    def test_internal_path_denied(self):
        assert authorize(_principal(100), None, concrete_path="/internal/unknown") is False

    def test_is_external_url(self):
        assert is_external_url("/https://example.com")
        assert not is_external_url("/docs/https")


class TestPreconditions:

    def test_unauthenticated_always_denied(self):
        assert authorize(None, Rule()) is False
        assert authorize(None, None, concrete_path="/https://example.com") is False

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            authorize(_principal(10), Rule(), action="execute")


class TestRightsService:

    @pytest.fixture()
    def service(self):
        return RightsService.from_routes([
            route("/admin/{section}", level_rights=[90, 100]),
            route("/admin/users"),
            route("/reports", special_rights="reporting"),
            route("/dashboard"),
        ])

    @pytest.mark.parametrize("level,expected", [(50, False), (90, True), (100, True)])
    def test_admin_users_scenario(self, service, level, expected):
        assert service.check_access("/admin/users", "GET", principal=_principal(level)) is expected

    def test_reports_scenario(self, service):
        principal = _principal(10, reporting={"read": True})
        assert service.check_access("/reports", "GET", "read", principal) is True
        assert service.check_access("/reports", "GET", "write", principal) is False

    def test_method_sensitivity(self, service):
        principal = _principal(50)
        assert service.check_access("/dashboard", "GET", principal=principal) is True
        assert service.check_access("/dashboard", "POST", principal=principal) is False

    def test_external_and_unknown_paths(self, service):
        principal = _principal(50)
        assert service.check_access("/https://example.com", principal=principal) is True
        assert service.check_access("/internal/unknown", principal=principal) is False

    def test_missing_principal_denied(self, service):
        assert service.check_access("/dashboard") is False

    def test_access_list_is_the_built_index(self, service):
        index = service.get_access_list()
        assert list(index) == ["/admin/*", "/admin/users", "/reports", "/dashboard"]
        assert index.get("/admin/users", "GET").level_rights == {90, 100}


class TestPrincipal:

    def test_from_grant_rows(self):
        principal = Principal.from_grant_rows("u1", 10, {"billing": GrantRow(read=True)})
        assert principal.special_grants["billing"] == {
            "access": False, "read": True, "write": False, "delete": False,
        }

    def test_full_grant(self):
        assert GrantRow.full().to_dict() == {
            "access": True, "read": True, "write": True, "delete": True,
        }
