"""
CampaignHub — Permission structure and evaluator.

A role's permissions are a plain mapping of resource name to the action names
it may perform there, e.g. ``{"USERS": ["READ", "LIST"]}``. Names are strings,
not foreign keys into the resources/actions tables. The ``ALL`` key is the
fallback grant for every resource the role does not list explicitly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Set, Tuple

PermissionStructure = Dict[str, List[str]]
PermissionRequirement = Tuple[str, str]


class ResourceName(str, Enum):
    ALL = "ALL"
    USERS = "USERS"
    ROLES = "ROLES"
    ACTIONS = "ACTIONS"
    RESOURCES = "RESOURCES"
    RBAC = "RBAC"
    ORGANIZATIONS = "ORGANIZATIONS"
    EMPLOYEES = "EMPLOYEES"
    ENQUIRIES = "ENQUIRIES"
    FEEDBACKS = "FEEDBACKS"
    PAYMENTS = "PAYMENTS"
    AUDIT_LOGS = "AUDITLOGS"
    ANALYTICS = "ANALYTICS"
    NOTIFICATIONS = "NOTIFICATIONS"
    OVERVIEW = "OVERVIEW"
    PROFILES = "PROFILES"
    SETTINGS = "SETTINGS"
    CONTACTS = "CONTACTS"
    CONTACTLISTS = "CONTACTLISTS"
    TEMPLATES = "TEMPLATES"
    CAMPAIGNS = "CAMPAIGNS"
    SUBSCRIPTIONS = "SUBSCRIPTIONS"
    INVOICES = "INVOICES"
    ASSETS = "ASSETS"


class ActionName(str, Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LIST = "LIST"
    EXPORT = "EXPORT"
    IMPORT = "IMPORT"


def name_of(value: Any) -> str:
    """Plain string for an enum member or a raw name."""
    return value.value if isinstance(value, Enum) else value


# ─── Evaluation ───────────────────────────────────────────────────────────────


def actions_for(permissions: Mapping[str, Iterable[str]], resource: str) -> Set[str]:
    """
    Actions the structure grants on ``resource``.

    An explicit entry wins over ``ALL``; ``ALL`` applies only to resources the
    structure does not name.
    """
    resource = name_of(resource)
    if not permissions:
        return set()
    if resource in permissions:
        return set(permissions[resource] or ())
    if ResourceName.ALL.value in permissions:
        return set(permissions[ResourceName.ALL.value] or ())
    return set()


def has_permission(
    permissions: Mapping[str, Iterable[str]], resource: str, action: str
) -> bool:
    return name_of(action) in actions_for(permissions, resource)


def has_any_permission(
    permissions: Mapping[str, Iterable[str]],
    requirements: Sequence[PermissionRequirement],
) -> bool:
    return any(has_permission(permissions, r, a) for r, a in requirements)


def has_all_permissions(
    permissions: Mapping[str, Iterable[str]],
    requirements: Sequence[PermissionRequirement],
) -> bool:
    return all(has_permission(permissions, r, a) for r, a in requirements)


def all_resource_actions(
    permissions: Mapping[str, Iterable[str]], known_resources: Iterable[str]
) -> PermissionStructure:
    """
    Expand a role's grants across every known resource.

    With an ``ALL`` key, each known resource except ``ALL`` itself receives the
    ``ALL`` action set. Otherwise the structure is returned as stored.
    """
    if not permissions:
        return {}
    all_key = ResourceName.ALL.value
    if all_key in permissions:
        granted = list(permissions[all_key] or ())
        return {
            name_of(name): list(granted)
            for name in known_resources
            if name_of(name) != all_key
        }
    return {resource: list(actions or ()) for resource, actions in permissions.items()}


# ─── Validation ───────────────────────────────────────────────────────────────


def validate_permission_structure(raw: Any) -> Tuple[PermissionStructure, List[str]]:
    """
    Check shape and normalise a permission structure before it is stored.

    Returns the normalised mapping (duplicate actions dropped, first
    occurrence order kept) and a list of error strings; the mapping is only
    meaningful when the list is empty.
    """
    errors: List[str] = []
    if raw is None:
        return {}, errors
    if not isinstance(raw, Mapping):
        return {}, ["permissions must be an object keyed by resource name"]

    normalised: PermissionStructure = {}
    for resource, actions in raw.items():
        resource = name_of(resource)
        if not isinstance(resource, str) or not resource.strip():
            errors.append(f"invalid resource key {resource!r}")
            continue
        if isinstance(actions, (str, bytes)) or not isinstance(actions, Iterable):
            errors.append(f"actions for {resource} must be a list")
            continue
        seen: List[str] = []
        for action in actions:
            action = name_of(action)
            if not isinstance(action, str) or not action.strip():
                errors.append(f"invalid action {action!r} for {resource}")
                continue
            if action not in seen:
                seen.append(action)
        normalised[resource] = seen

    return normalised, errors
