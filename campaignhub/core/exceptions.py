"""
CampaignHub — Custom Exceptions.
Each exception carries: message, error_code, http_status_code, optional detail dict.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

# ─────────────────────────────────────────────────────────────────────────────
# BASE
# ─────────────────────────────────────────────────────────────────────────────


class CampaignHubError(Exception):
    """Root exception for all CampaignHub errors."""

    http_status_code: int = 400
    error_code: str = "CAMPAIGNHUB_ERROR"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "detail": self.detail,
        }


# ─────────────────────────────────────────────────────────────────────────────
# ADMINISTRATION: Roles, Resources, Actions
# ─────────────────────────────────────────────────────────────────────────────


class EntityNotFoundError(CampaignHubError):
    http_status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, value: str, field: str = "ID") -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(
            message=f"{entity} with {field} {value} not found",
            detail={"entity": entity, "field": field, "value": value},
        )


class EntityConflictError(CampaignHubError):
    http_status_code = 409
    error_code = "CONFLICT"

    def __init__(self, entity: str, name: str) -> None:
        self.entity = entity
        self.name = name
        super().__init__(
            message=f"{entity} with name {name} already exists",
            detail={"entity": entity, "name": name},
        )


class InvalidPermissionStructureError(CampaignHubError):
    http_status_code = 422
    error_code = "INVALID_PERMISSION_STRUCTURE"

    def __init__(self, errors: List[str]) -> None:
        self.errors = errors
        super().__init__(
            message=f"Permission structure is invalid ({len(errors)} error(s))",
            detail={"errors": errors},
        )


# ─────────────────────────────────────────────────────────────────────────────
# AUTHENTICATION / AUTHORIZATION
# ─────────────────────────────────────────────────────────────────────────────


class InsufficientPermissionsError(CampaignHubError):
    """
    Raised when a role may not perform the requested operation.
    The message never names the resource or action that was checked.
    """

    http_status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden. Insufficient permissions for this operation"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message=message or self.default_message)


class AuthenticationError(CampaignHubError):
    http_status_code = 401
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, reason: str = "Invalid or expired token") -> None:
        super().__init__(message=reason, detail={"reason": reason})
