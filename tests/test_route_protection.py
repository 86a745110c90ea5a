"""
CampaignHub — Route protection decision point tests.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from campaignhub.core.exceptions import InsufficientPermissionsError
from campaignhub.core.security import IdentityClaims
from campaignhub.services.rbac import ResourceService, RoleService
from campaignhub.services.route_protection import (
    FailurePolicy,
    ProtectionOutcome,
    RouteProtector,
    is_auth_exempt_path,
    role_permission_loader,
)

ROLES = {
    "READER": {"USERS": ["READ", "LIST"]},
    "VIEWER": {"ALL": ["READ"]},
}


def load(role_name, resource):
    return ROLES[role_name]  # KeyError for unknown roles


def claims(role="READER", **extra):
    return IdentityClaims(sub="user_1", email="user_1@campaignhub.io", role=role, **extra)


@pytest.fixture
def protector():
    return RouteProtector(load)


class TestExemptions:
    def test_public_route(self, protector):
        decision = protector.decide("DELETE", "/api/v1/users/5", claims(), is_public=True)
        assert decision.outcome == ProtectionOutcome.EXEMPT_PUBLIC
        assert decision.allowed

    def test_skip_flag(self, protector):
        decision = protector.decide(
            "DELETE", "/api/v1/users/5", claims(), skip_protection=True
        )
        assert decision.outcome == ProtectionOutcome.EXEMPT_SKIP_FLAG
        assert decision.allowed

    @pytest.mark.parametrize(
        "path",
        [
            "/auth/login",
            "/auth/logout",
            "/auth/callback",
            "/auth/employee/login",
            "/auth/employee/select-organization",
            "/api/v1/auth/login?next=/users",
        ],
    )
    def test_auth_paths_allowed_regardless_of_identity(self, path):
        def exploding_loader(*_):
            raise AssertionError("role lookup must not happen")

        strict = RouteProtector(exploding_loader, FailurePolicy(fail_open=False))
        for identity in (None, claims(role="NOBODY"), claims(role=None)):
            decision = strict.decide("POST", path, identity)
            assert decision.outcome == ProtectionOutcome.EXEMPT_AUTH_PATH
            assert decision.allowed

    def test_auth_path_needs_auth_prefix(self):
        assert is_auth_exempt_path("/api/v1/auth/login")
        assert not is_auth_exempt_path("/api/v1/users/login")
        assert not is_auth_exempt_path("/api/v1/auth/me")


class TestFailOpen:
    def test_missing_identity(self, protector):
        decision = protector.decide("DELETE", "/api/v1/users/5", None)
        assert decision.outcome == ProtectionOutcome.NO_IDENTITY_ROLE
        assert decision.allowed

    def test_missing_role_claim(self, protector):
        decision = protector.decide("DELETE", "/api/v1/users/5", claims(role=None))
        assert decision.outcome == ProtectionOutcome.NO_IDENTITY_ROLE
        assert decision.allowed

    def test_unresolved_resource(self, protector):
        decision = protector.decide("DELETE", "/api/v1/widgets/5", claims())
        assert decision.outcome == ProtectionOutcome.UNRESOLVED_TARGET
        assert decision.allowed

    def test_unresolved_action(self, protector):
        decision = protector.decide("OPTIONS", "/api/v1/users", claims())
        assert decision.outcome == ProtectionOutcome.UNRESOLVED_TARGET
        assert decision.allowed

    def test_lookup_error_falls_back_to_allow(self, protector):
        decision = protector.decide("DELETE", "/api/v1/users/5", claims(role="GHOST"))
        assert decision.outcome == ProtectionOutcome.ERROR_FALLBACK_ALLOW
        assert decision.allowed
        assert decision.resource == "USERS"
        assert decision.action == "DELETE"

    def test_error_is_logged(self, protector, caplog):
        with caplog.at_level("WARNING"):
            protector.decide("GET", "/api/v1/users", claims(role="GHOST"))
        assert "Route protection failed" in caplog.text


class TestFailClosedPolicy:
    @pytest.fixture
    def strict(self):
        return RouteProtector(load, FailurePolicy(fail_open=False))

    def test_missing_role_denied(self, strict):
        decision = strict.decide("GET", "/api/v1/users", None)
        assert decision.outcome == ProtectionOutcome.NO_IDENTITY_ROLE
        assert not decision.allowed

    def test_unresolved_denied(self, strict):
        with pytest.raises(InsufficientPermissionsError):
            strict.enforce("GET", "/api/v1/widgets", claims())

    def test_lookup_error_denied(self, strict):
        decision = strict.decide("GET", "/api/v1/users", claims(role="GHOST"))
        assert decision.outcome == ProtectionOutcome.ERROR_FALLBACK_ALLOW
        assert not decision.allowed

    def test_exemptions_unaffected(self, strict):
        assert strict.decide("GET", "/api/v1/widgets", None, is_public=True).allowed
        assert strict.decide("POST", "/auth/login", None).allowed

    def test_grants_unaffected(self, strict):
        assert strict.decide("GET", "/api/v1/users", claims()).allowed


class TestEvaluation:
    def test_list_granted(self, protector):
        decision = protector.decide("GET", "/api/v1/users", claims())
        assert decision.outcome == ProtectionOutcome.GRANTED
        assert (decision.resource, decision.action) == ("USERS", "LIST")

    def test_delete_denied(self, protector):
        decision = protector.decide("DELETE", "/api/v1/users/5", claims())
        assert decision.outcome == ProtectionOutcome.DENIED
        assert not decision.allowed
        assert (decision.resource, decision.action) == ("USERS", "DELETE")

    def test_enforce_raises_generic_forbidden(self, protector):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            protector.enforce("DELETE", "/api/v1/users/5", claims())
        err = exc_info.value
        assert err.http_status_code == 403
        assert err.message == "Forbidden. Insufficient permissions for this operation"
        assert "USERS" not in err.message and "DELETE" not in err.message
        assert err.detail == {}

    def test_all_fallback_grants_read(self, protector):
        decision = protector.enforce("GET", "/api/v1/campaigns/9", claims(role="VIEWER"))
        assert decision.outcome == ProtectionOutcome.GRANTED
        assert (decision.resource, decision.action) == ("CAMPAIGNS", "READ")

    def test_all_fallback_does_not_grant_other_actions(self, protector):
        decision = protector.decide("POST", "/api/v1/campaigns", claims(role="VIEWER"))
        assert decision.outcome == ProtectionOutcome.DENIED

    def test_restore_needs_update(self, protector):
        decision = protector.decide("POST", "/api/v1/users/5/restore", claims())
        assert decision.action == "UPDATE"
        assert decision.outcome == ProtectionOutcome.DENIED

    def test_permissions_reloaded_every_request(self):
        live = {"EDITOR": {"USERS": ["READ"]}}
        protector = RouteProtector(lambda name, _resource: live[name])
        assert protector.decide("GET", "/api/v1/users/5", claims(role="EDITOR")).allowed

        live["EDITOR"] = {"USERS": []}
        decision = protector.decide("GET", "/api/v1/users/5", claims(role="EDITOR"))
        assert decision.outcome == ProtectionOutcome.DENIED


class TestWithRoleTable:
    """Decision point backed by the live roles and resources tables."""

    def test_end_to_end(self, seeded_session):
        RoleService(seeded_session).create(
            name="READER", permissions={"USERS": ["READ", "LIST"]}
        )
        protector = RouteProtector(role_permission_loader(seeded_session))

        granted = protector.enforce("GET", "/api/v1/users", claims())
        assert (granted.resource, granted.action) == ("USERS", "LIST")

        with pytest.raises(InsufficientPermissionsError):
            protector.enforce("DELETE", "/api/v1/users/5", claims())

    def test_role_edit_visible_on_next_request(self, seeded_session):
        service = RoleService(seeded_session)
        role = service.create(name="READER", permissions={"USERS": ["LIST"]})
        protector = RouteProtector(role_permission_loader(seeded_session))

        assert not protector.decide("POST", "/api/v1/users", claims()).allowed
        service.update(role.id, permissions={"USERS": ["LIST", "CREATE"]})
        assert protector.decide("POST", "/api/v1/users", claims()).allowed

    def test_unknown_role_is_fail_open(self, seeded_session):
        protector = RouteProtector(role_permission_loader(seeded_session))
        decision = protector.decide("DELETE", "/api/v1/users/5", claims(role="MISSING"))
        assert decision.outcome == ProtectionOutcome.ERROR_FALLBACK_ALLOW
        assert decision.allowed

    def test_deleted_resource_row_is_fail_open(self, seeded_session):
        RoleService(seeded_session).create(name="READER", permissions={"USERS": ["LIST"]})
        resources = ResourceService(seeded_session)
        resources.soft_delete(resources.find_by_name("USERS").id)
        protector = RouteProtector(role_permission_loader(seeded_session))

        decision = protector.decide("DELETE", "/api/v1/users/5", claims())
        assert decision.outcome == ProtectionOutcome.ERROR_FALLBACK_ALLOW
        assert decision.allowed
        assert (decision.resource, decision.action) == ("USERS", "DELETE")

    def test_deleted_resource_row_denied_when_fail_closed(self, seeded_session):
        RoleService(seeded_session).create(name="READER", permissions={"USERS": ["LIST"]})
        resources = ResourceService(seeded_session)
        resources.soft_delete(resources.find_by_name("USERS").id)
        strict = RouteProtector(
            role_permission_loader(seeded_session), FailurePolicy(fail_open=False)
        )
        with pytest.raises(InsufficientPermissionsError):
            strict.enforce("GET", "/api/v1/users", claims())

    def test_database_error_rolls_back_session(self, seeded_session, monkeypatch):
        def broken(self, role_name, resource=None):
            raise OperationalError("SELECT roles", {}, Exception("connection lost"))

        rollbacks = []
        monkeypatch.setattr(RoleService, "permissions_for_name", broken)
        monkeypatch.setattr(seeded_session, "rollback", lambda: rollbacks.append(True))

        protector = RouteProtector(role_permission_loader(seeded_session))
        decision = protector.decide("GET", "/api/v1/users", claims())
        assert decision.outcome == ProtectionOutcome.ERROR_FALLBACK_ALLOW
        assert rollbacks == [True]
