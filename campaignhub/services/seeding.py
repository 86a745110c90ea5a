"""
CampaignHub — Seed data for the RBAC tables.
Canonical resources, actions and the four built-in roles. Idempotent: rows are
matched by name and only missing ones are inserted.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from campaignhub.core.permissions import ActionName, ResourceName
from campaignhub.models.rbac import Action, Resource, Role

logger = logging.getLogger(__name__)

RESOURCE_DESCRIPTIONS: Dict[ResourceName, str] = {
    ResourceName.ALL: "Every resource (fallback grant)",
    ResourceName.USERS: "User management resource",
    ResourceName.ROLES: "Role management resource",
    ResourceName.RBAC: "Role-Based Access Control management resource",
    ResourceName.ACTIONS: "Action management resource",
    ResourceName.RESOURCES: "Resource management resource",
    ResourceName.PROFILES: "User profile management resource",
    ResourceName.SETTINGS: "Application settings resource",
    ResourceName.ORGANIZATIONS: "Organization management resource",
    ResourceName.EMPLOYEES: "Employee management resource",
    ResourceName.ENQUIRIES: "Enquiry management resource",
    ResourceName.FEEDBACKS: "Feedback management resource",
    ResourceName.ANALYTICS: "Analytics and reporting resource",
    ResourceName.AUDIT_LOGS: "Audit log management resource",
    ResourceName.CONTACTS: "Contact management resource",
    ResourceName.TEMPLATES: "Email template management resource",
    ResourceName.CAMPAIGNS: "Email campaign management resource",
    ResourceName.CONTACTLISTS: "Contact list management resource",
    ResourceName.SUBSCRIPTIONS: "Subscription management resource",
    ResourceName.INVOICES: "Invoice management resource",
    ResourceName.OVERVIEW: "Overview dashboard resource",
    ResourceName.ASSETS: "Uploaded asset management resource",
    ResourceName.PAYMENTS: "Checkout and payment resource",
    ResourceName.NOTIFICATIONS: "In-app and push notification resource",
}

ACTION_DESCRIPTIONS: Dict[ActionName, str] = {
    ActionName.CREATE: "Create new records",
    ActionName.READ: "Read a single record",
    ActionName.UPDATE: "Modify or restore records",
    ActionName.DELETE: "Delete records",
    ActionName.LIST: "List collections",
    ActionName.EXPORT: "Export data",
    ActionName.IMPORT: "Import data",
}

_C, _R, _U, _D, _L, _E = "CREATE", "READ", "UPDATE", "DELETE", "LIST", "EXPORT"

ASSETS_ACTIONS = [_C, _R, _D, _L]

DEFAULT_ROLES: List[Tuple[str, str, Dict[str, List[str]]]] = [
    (
        "SUPERADMIN",
        "Super Administrator with complete system access and management privileges",
        {
            "ROLES": [_C, _R, _U, _L, _E],
            "RBAC": [_C, _R, _U, _L, _E],
            "RESOURCES": [_C, _R, _U, _L, _E],
            "ACTIONS": [_C, _R, _U, _L, _E],
            "ORGANIZATIONS": [_C, _R, _U, _L, _E],
            "USERS": [_C, _R, _U, _L, _E],
            "EMPLOYEES": [_C, _R, _U, _L, _E],
            "CAMPAIGNS": [_R, _L, _E],
            "CONTACTS": [_R, _L, _E],
            "CONTACTLISTS": [_R, _L, _E],
            "TEMPLATES": [_R, _L, _E],
            "SUBSCRIPTIONS": [_R, _U, _L, _E],
            "INVOICES": [_R, _U, _L, _E],
            "PROFILES": [_R, _U, _L, _E],
            "SETTINGS": [_R, _U, _L, _E],
            "ANALYTICS": [_R, _U, _L, _E],
            "AUDITLOGS": [_R, _U, _L, _E],
            "OVERVIEW": [_R, _U, _L, _E],
            "ASSETS": ASSETS_ACTIONS,
        },
    ),
    (
        "ADMIN",
        "Administrator with full access to all features",
        {
            "ROLES": [_C, _R, _U, _L],
            "RBAC": [_C, _R, _U, _L],
            "RESOURCES": [_C, _R, _U, _L],
            "ACTIONS": [_C, _R, _U, _L],
            "ORGANIZATIONS": [_R, _U, _L],
            "USERS": [_C, _R, _U, _L],
            "EMPLOYEES": [],
            "CAMPAIGNS": [_C, _R, _U, _D, _L],
            "CONTACTS": [_C, _R, _U, _D, _L],
            "CONTACTLISTS": [_C, _R, _U, _D, _L],
            "TEMPLATES": [_C, _R, _U, _D, _L],
            "SUBSCRIPTIONS": [_C, _R, _U, _L],
            "INVOICES": [_C, _R, _U, _L],
            "PROFILES": [_R, _U, _L],
            "SETTINGS": [_R, _U, _L],
            "ANALYTICS": [_R, _L],
            "AUDITLOGS": [_R, _L],
            "OVERVIEW": [_R, _L],
            "ASSETS": ASSETS_ACTIONS,
        },
    ),
    (
        "USER",
        "Regular user with basic access to email campaign features",
        {
            "ROLES": [_R, _L],
            "RBAC": [_R, _L],
            "RESOURCES": [_R, _L],
            "ACTIONS": [_R, _L],
            "ORGANIZATIONS": [_R, _L],
            "USERS": [_R, _L],
            "EMPLOYEES": [],
            "CAMPAIGNS": [_C, _R, _U, _D, _L],
            "CONTACTS": [_C, _R, _U, _D, _L],
            "CONTACTLISTS": [_C, _R, _U, _D, _L],
            "TEMPLATES": [_C, _R, _U, _D, _L],
            "SUBSCRIPTIONS": [_R, _L],
            "INVOICES": [_R, _L],
            "PROFILES": [_R, _U],
            "SETTINGS": [_R],
            "ANALYTICS": [_R, _L],
            "AUDITLOGS": [_R, _L],
            "OVERVIEW": [_R, _L],
            "ASSETS": ASSETS_ACTIONS,
        },
    ),
    (
        "SUPPORT",
        "Support role with read and update access to all resources for troubleshooting",
        {
            "ROLES": [_R, _U, _L, _E],
            "RBAC": [_R, _U, _L, _E],
            "RESOURCES": [_R, _U, _L, _E],
            "ACTIONS": [_R, _U, _L, _E],
            "ORGANIZATIONS": [_C, _R, _U, _L, _E],
            "USERS": [_C, _R, _U, _L, _E],
            "EMPLOYEES": [_R, _U, _L, _E],
            "CAMPAIGNS": [_R, _L, _E],
            "CONTACTS": [_R, _L, _E],
            "CONTACTLISTS": [_R, _L, _E],
            "TEMPLATES": [_R, _L, _E],
            "SUBSCRIPTIONS": [_R, _U, _L, _E],
            "INVOICES": [_R, _U, _L, _E],
            "PROFILES": [_R, _U, _L, _E],
            "SETTINGS": [_R, _U, _L, _E],
            "AUDITLOGS": [_R, _U, _L, _E],
            "OVERVIEW": [_R, _U, _L, _E],
            "ASSETS": ASSETS_ACTIONS,
        },
    ),
]


def _existing_names(session: Session, model) -> set:
    rows = session.query(model.name).filter(model.deleted_at.is_(None)).all()
    return {name for (name,) in rows}


def seed_rbac(session: Session) -> Dict[str, int]:
    """Insert missing resources, actions and default roles. Returns counts added."""
    added = {"resources": 0, "actions": 0, "roles": 0}

    have = _existing_names(session, Resource)
    for resource, description in RESOURCE_DESCRIPTIONS.items():
        if resource.value not in have:
            session.add(Resource(name=resource.value, description=description))
            added["resources"] += 1

    have = _existing_names(session, Action)
    for action, description in ACTION_DESCRIPTIONS.items():
        if action.value not in have:
            session.add(Action(name=action.value, description=description))
            added["actions"] += 1

    have = _existing_names(session, Role)
    for name, description, permissions in DEFAULT_ROLES:
        if name not in have:
            session.add(
                Role(name=name, description=description, permissions=dict(permissions))
            )
            added["roles"] += 1

    session.commit()
    logger.info("RBAC seed complete: %s", added)
    return added
