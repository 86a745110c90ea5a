"""
CampaignHub — Resource/Action inference from HTTP method and URL path.

Route protection has no route metadata to go on, so the target of a request is
read off the URL shape alone:

* resource: first entry of ``RESOURCE_SEGMENTS`` whose ``/<segment>`` occurs
  anywhere in the path (nested paths like ``/organizations/1/employees``
  resolve to whichever segment is listed first);
* action: path overrides (``/restore``, ``/force``, ``/export``, ``/import``)
  before the HTTP method, with GET split into LIST and READ by looking at the
  last path segment.

Ids longer than 10 characters are caught by the length rule, so a collection
path whose last segment is a long word (``/notifications``) is classified as
READ. That is a known limitation of the heuristic.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from campaignhub.core.permissions import ActionName, ResourceName

# Order is priority: the first match wins.
RESOURCE_SEGMENTS: Tuple[Tuple[str, ResourceName], ...] = (
    ("users", ResourceName.USERS),
    ("roles", ResourceName.ROLES),
    ("actions", ResourceName.ACTIONS),
    ("resources", ResourceName.RESOURCES),
    ("organizations", ResourceName.ORGANIZATIONS),
    ("employees", ResourceName.EMPLOYEES),
    ("enquiries", ResourceName.ENQUIRIES),
    ("feedbacks", ResourceName.FEEDBACKS),
    ("payments", ResourceName.PAYMENTS),
    ("audit-logs", ResourceName.AUDIT_LOGS),
    ("analytics", ResourceName.ANALYTICS),
    ("notifications", ResourceName.NOTIFICATIONS),
    ("overview", ResourceName.OVERVIEW),
    ("profiles", ResourceName.PROFILES),
    ("settings", ResourceName.SETTINGS),
    ("rbac", ResourceName.RBAC),
    ("contacts", ResourceName.CONTACTS),
    ("contact-lists", ResourceName.CONTACTLISTS),
    ("templates", ResourceName.TEMPLATES),
    ("campaigns", ResourceName.CAMPAIGNS),
    ("subscriptions", ResourceName.SUBSCRIPTIONS),
    ("invoices", ResourceName.INVOICES),
    ("assets", ResourceName.ASSETS),
)

# Checked in order, before the HTTP method.
PATH_ACTION_OVERRIDES: Tuple[Tuple[str, ActionName], ...] = (
    ("/restore", ActionName.UPDATE),
    ("/force", ActionName.DELETE),
    ("/export", ActionName.EXPORT),
    ("/import", ActionName.IMPORT),
)

METHOD_ACTIONS: Dict[str, ActionName] = {
    "GET": ActionName.READ,
    "POST": ActionName.CREATE,
    "PUT": ActionName.UPDATE,
    "PATCH": ActionName.UPDATE,
    "DELETE": ActionName.DELETE,
}

MAX_NON_ID_SEGMENT_LENGTH = 10
_NUMERIC = re.compile(r"[0-9]+")


def looks_like_id(segment: str) -> bool:
    """A path segment is treated as an identifier if numeric or longer than 10 chars."""
    return bool(_NUMERIC.fullmatch(segment)) or len(segment) > MAX_NON_ID_SEGMENT_LENGTH


def infer_resource(path: str) -> Optional[ResourceName]:
    for segment, resource in RESOURCE_SEGMENTS:
        if f"/{segment}" in path:
            return resource
    return None


def infer_action(method: str, path: str) -> Optional[ActionName]:
    for marker, action in PATH_ACTION_OVERRIDES:
        if marker in path:
            return action

    method = method.upper()
    if method == "GET":
        segments = [s for s in path.split("?", 1)[0].split("/") if s]
        last = segments[-1] if segments else ""
        return ActionName.READ if looks_like_id(last) else ActionName.LIST

    return METHOD_ACTIONS.get(method)


def infer(
    method: str, path: str
) -> Tuple[Optional[ResourceName], Optional[ActionName]]:
    """Classify a request as ``(resource, action)``; either side may be None."""
    return infer_resource(path), infer_action(method, path)
