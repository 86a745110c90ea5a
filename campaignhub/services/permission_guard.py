"""
CampaignHub — Explicit permission dependencies.

Routes that need a specific grant regardless of URL shape declare it:

    @router.get("/summary", dependencies=[Depends(require_permission("ANALYTICS", "READ"))])

Unlike route protection these checks fail closed.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from campaignhub.core import permissions as perms
from campaignhub.core.exceptions import InsufficientPermissionsError
from campaignhub.database import get_db
from campaignhub.services.rbac import RoleService

logger = logging.getLogger(__name__)

Check = Callable[[perms.PermissionStructure], bool]


def _permission_dependency(check: Check) -> Callable[..., None]:
    def dependency(request: Request, db: Session = Depends(get_db)) -> None:
        claims = getattr(request.state, "identity", None)
        if claims is None or not claims.role:
            raise InsufficientPermissionsError("User not authenticated")

        try:
            structure = RoleService(db).permissions_for_name(claims.role)
        except Exception:
            logger.warning("Permission lookup failed for role=%s", claims.role, exc_info=True)
            raise InsufficientPermissionsError("Permission check failed")

        if not check(structure):
            raise InsufficientPermissionsError(
                "Access denied. Insufficient permissions for the requested operation."
            )

    return dependency


def require_permission(resource: str, action: str) -> Callable[..., None]:
    return _permission_dependency(
        lambda structure: perms.has_permission(structure, resource, action)
    )


def require_any_permission(
    requirements: Sequence[perms.PermissionRequirement],
) -> Callable[..., None]:
    """Passes when at least one (resource, action) pair is granted."""
    return _permission_dependency(
        lambda structure: perms.has_any_permission(structure, requirements)
    )


def require_all_permissions(
    requirements: Sequence[perms.PermissionRequirement],
) -> Callable[..., None]:
    """Passes only when every (resource, action) pair is granted."""
    return _permission_dependency(
        lambda structure: perms.has_all_permissions(structure, requirements)
    )
