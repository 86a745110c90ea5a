"""
CampaignHub — Route Protection

Runs once per request, after the identity gate, and decides whether the caller's
role may perform the request's inferred (resource, action).

This is a best-effort layer, not the only authorization boundary. When it
cannot reach a verdict (no role claim, unclassifiable URL, lookup failure) it
defers to ``FailurePolicy``, which allows by default. Only a definite "role
lacks the action" result is denied unconditionally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campaignhub.config import get_settings
from campaignhub.core import inference
from campaignhub.core import permissions as perms
from campaignhub.core.decorators import is_protection_skipped, is_public_route
from campaignhub.core.exceptions import InsufficientPermissionsError
from campaignhub.core.security import IdentityClaims
from campaignhub.database import get_db
from campaignhub.services.rbac import RoleService

logger = logging.getLogger(__name__)

# Authentication flow endpoints must be reachable before a role is known.
AUTH_PATH_PREFIX = "/auth/"
AUTH_EXEMPT_MARKERS: Tuple[str, ...] = (
    "/login",
    "/callback",
    "/logout",
    "/employee/login",
    "/employee/select-organization",
)

# (role name, resource name) -> role permission structure. Raises when either
# row is missing.
PermissionLoader = Callable[[str, str], perms.PermissionStructure]


class ProtectionOutcome(str, Enum):
    EXEMPT_PUBLIC = "EXEMPT_PUBLIC"
    EXEMPT_SKIP_FLAG = "EXEMPT_SKIP_FLAG"
    EXEMPT_AUTH_PATH = "EXEMPT_AUTH_PATH"
    NO_IDENTITY_ROLE = "NO_IDENTITY_ROLE"
    UNRESOLVED_TARGET = "UNRESOLVED_TARGET"
    EVALUATING = "EVALUATING"
    GRANTED = "GRANTED"
    DENIED = "DENIED"
    ERROR_FALLBACK_ALLOW = "ERROR_FALLBACK_ALLOW"


# Outcomes where no verdict was reached; FailurePolicy decides these.
UNDECIDED_OUTCOMES = frozenset(
    {
        ProtectionOutcome.NO_IDENTITY_ROLE,
        ProtectionOutcome.UNRESOLVED_TARGET,
        ProtectionOutcome.ERROR_FALLBACK_ALLOW,
    }
)


@dataclass(frozen=True)
class ProtectionDecision:
    outcome: ProtectionOutcome
    allowed: bool
    resource: Optional[str] = None
    action: Optional[str] = None


class FailurePolicy:
    """
    What to do when route protection cannot reach a verdict.

    ``fail_open=True`` (the default) allows the request; ``False`` denies it.
    Exempt routes and definite grants/denials are unaffected.
    """

    def __init__(self, fail_open: bool = True) -> None:
        self.fail_open = fail_open

    def allows(self, outcome: ProtectionOutcome) -> bool:
        return self.fail_open

    @classmethod
    def from_settings(cls) -> "FailurePolicy":
        return cls(fail_open=get_settings().ROUTE_PROTECTION_FAIL_OPEN)

    def __repr__(self) -> str:
        return f"FailurePolicy(fail_open={self.fail_open})"


def is_auth_exempt_path(path: str) -> bool:
    return AUTH_PATH_PREFIX in path and any(m in path for m in AUTH_EXEMPT_MARKERS)


class RouteProtector:
    """
    Classify one request and check it against the caller's role.

    ``load_permissions(role, resource)`` returns the role's current permission
    structure after confirming both rows exist. It is called on every evaluated
    request, so a role edit takes effect without reissuing tokens.
    """

    def __init__(
        self,
        load_permissions: PermissionLoader,
        policy: Optional[FailurePolicy] = None,
    ) -> None:
        self.load_permissions = load_permissions
        self.policy = policy or FailurePolicy()

    def _undecided(
        self,
        outcome: ProtectionOutcome,
        resource: Optional[str] = None,
        action: Optional[str] = None,
    ) -> ProtectionDecision:
        return ProtectionDecision(outcome, self.policy.allows(outcome), resource, action)

    def decide(
        self,
        method: str,
        path: str,
        claims: Optional[IdentityClaims],
        is_public: bool = False,
        skip_protection: bool = False,
    ) -> ProtectionDecision:
        if is_public:
            return ProtectionDecision(ProtectionOutcome.EXEMPT_PUBLIC, True)
        if skip_protection:
            return ProtectionDecision(ProtectionOutcome.EXEMPT_SKIP_FLAG, True)
        if is_auth_exempt_path(path):
            return ProtectionDecision(ProtectionOutcome.EXEMPT_AUTH_PATH, True)

        role = getattr(claims, "role", None)
        if not role:
            return self._undecided(ProtectionOutcome.NO_IDENTITY_ROLE)

        resource: Optional[str] = None
        action: Optional[str] = None
        try:
            resource_name, action_name = inference.infer(method, path)
            if resource_name is None or action_name is None:
                return self._undecided(ProtectionOutcome.UNRESOLVED_TARGET)
            resource, action = resource_name.value, action_name.value

            # EVALUATING
            granted = perms.has_permission(
                self.load_permissions(role, resource), resource, action
            )
        except Exception:
            logger.warning(
                "Route protection failed for %s %s (role=%s); policy=%r",
                method,
                path,
                role,
                self.policy,
                exc_info=True,
            )
            return self._undecided(
                ProtectionOutcome.ERROR_FALLBACK_ALLOW, resource, action
            )

        if granted:
            return ProtectionDecision(ProtectionOutcome.GRANTED, True, resource, action)

        logger.info(
            "Permission denied: role=%s resource=%s action=%s path=%s",
            role,
            resource,
            action,
            path,
        )
        return ProtectionDecision(ProtectionOutcome.DENIED, False, resource, action)

    def enforce(
        self,
        method: str,
        path: str,
        claims: Optional[IdentityClaims],
        is_public: bool = False,
        skip_protection: bool = False,
    ) -> ProtectionDecision:
        """``decide`` then raise InsufficientPermissionsError when not allowed."""
        decision = self.decide(method, path, claims, is_public, skip_protection)
        if not decision.allowed:
            raise InsufficientPermissionsError()
        return decision


def _request_target(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def role_permission_loader(db: Session) -> PermissionLoader:
    """Loader backed by the roles and resources tables of ``db``."""
    service = RoleService(db)

    def load(role_name: str, resource: str) -> perms.PermissionStructure:
        try:
            return service.permissions_for_name(role_name, resource)
        except SQLAlchemyError:
            # The request handler reuses this session.
            db.rollback()
            raise

    return load


def protect_route(request: Request, db: Session = Depends(get_db)) -> ProtectionDecision:
    """
    App-wide FastAPI dependency, registered after ``verify_identity``.
    Reads the claims that dependency attached to ``request.state``.
    """
    protector = RouteProtector(
        role_permission_loader(db),
        policy=FailurePolicy.from_settings(),
    )
    decision = protector.enforce(
        request.method,
        _request_target(request),
        getattr(request.state, "identity", None),
        is_public=is_public_route(request),
        skip_protection=is_protection_skipped(request),
    )
    request.state.protection = decision
    return decision
