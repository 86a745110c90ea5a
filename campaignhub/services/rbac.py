"""
CampaignHub — RBAC Administration Services
Roles, resources and actions: create, query, update, soft/force delete, restore,
plus the per-role permission queries built on the evaluator.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from sqlalchemy import or_
from sqlalchemy.orm import Session

from campaignhub.core import permissions as perms
from campaignhub.core.exceptions import (
    EntityConflictError,
    EntityNotFoundError,
    InvalidPermissionStructureError,
)
from campaignhub.models.rbac import Action, Resource, Role

logger = logging.getLogger(__name__)

T = TypeVar("T", Role, Resource, Action)

_UNSET: Any = object()


def _escape_like(text: str) -> str:
    """Make ``%`` and ``_`` in user search text match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class NamedEntityService(Generic[T]):
    """
    Shared CRUD for the name-keyed RBAC tables.

    Soft-deleted rows are invisible to every query here except ``restore`` and
    ``force_delete``, which reach them by id.
    """

    model: Type[T]
    entity_label: str = "Entity"

    def __init__(self, session: Session) -> None:
        self.session = session

    # ── Queries ───────────────────────────────────────────────────────────────

    def _live(self):
        return self.session.query(self.model).filter(self.model.deleted_at.is_(None))

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        query = self._live().filter(self.model.name == name)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        return query.first() is not None

    def find_all(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None
    ) -> Tuple[List[T], int]:
        """Return one page of live rows and the total match count."""
        query = self._live()
        if search:
            pattern = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(
                    self.model.name.like(pattern, escape="\\"),
                    self.model.description.like(pattern, escape="\\"),
                )
            )
        total = query.count()
        page = max(page, 1)
        items = (
            query.order_by(self.model.name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def find_by_id(self, entity_id: str) -> T:
        row = self._live().filter(self.model.id == entity_id).first()
        if row is None:
            raise EntityNotFoundError(self.entity_label, entity_id)
        return row

    def find_by_name(self, name: str) -> T:
        row = self._live().filter(self.model.name == name).first()
        if row is None:
            raise EntityNotFoundError(self.entity_label, name, field="name")
        return row

    def names(self) -> List[str]:
        return [name for (name,) in self._live().with_entities(self.model.name).all()]

    # ── Mutations ─────────────────────────────────────────────────────────────

    def _create(self, actor_id: Optional[str] = None, **fields: Any) -> T:
        if self._name_taken(fields["name"]):
            raise EntityConflictError(self.entity_label, fields["name"])
        row = self.model(created_by=actor_id, updated_by=actor_id, **fields)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.info("%s created: id=%s name=%s", self.entity_label, row.id, row.name)
        return row

    def _update(self, entity_id: str, actor_id: Optional[str] = None, **fields: Any) -> T:
        row = self.find_by_id(entity_id)
        new_name = fields.get("name")
        if new_name and new_name != row.name and self._name_taken(new_name, row.id):
            raise EntityConflictError(self.entity_label, new_name)
        for key, value in fields.items():
            if value is _UNSET or (key == "name" and not value):
                continue
            setattr(row, key, value)
        row.updated_by = actor_id
        self.session.commit()
        self.session.refresh(row)
        logger.info("%s updated: id=%s", self.entity_label, row.id)
        return row

    def create(
        self, name: str, description: Optional[str] = None, actor_id: Optional[str] = None
    ) -> T:
        return self._create(actor_id=actor_id, name=name, description=description)

    def update(
        self,
        entity_id: str,
        name: Optional[str] = None,
        description: Optional[str] = _UNSET,
        actor_id: Optional[str] = None,
    ) -> T:
        return self._update(
            entity_id, actor_id=actor_id, name=name, description=description
        )

    def soft_delete(self, entity_id: str, actor_id: Optional[str] = None) -> T:
        row = self.find_by_id(entity_id)
        row.deleted_at = datetime.now(timezone.utc)
        row.deleted_by = actor_id
        self.session.commit()
        logger.info("%s soft-deleted: id=%s", self.entity_label, entity_id)
        return row

    def force_delete(self, entity_id: str, actor_id: Optional[str] = None) -> T:
        row = self.session.get(self.model, entity_id)
        if row is None:
            raise EntityNotFoundError(self.entity_label, entity_id)
        # Load every column now; the row is detached once the delete commits.
        self.session.refresh(row)
        self.session.delete(row)
        self.session.commit()
        logger.warning(
            "%s permanently deleted: id=%s by=%s", self.entity_label, entity_id, actor_id
        )
        return row

    def restore(self, entity_id: str, actor_id: Optional[str] = None) -> T:
        row = self.session.get(self.model, entity_id)
        if row is None:
            raise EntityNotFoundError(self.entity_label, entity_id)
        if row.deleted_at is not None:
            if self._name_taken(row.name, row.id):
                raise EntityConflictError(self.entity_label, row.name)
            row.deleted_at = None
            row.deleted_by = None
            row.updated_by = actor_id
            self.session.commit()
            logger.info("%s restored: id=%s", self.entity_label, entity_id)
        return self.find_by_id(entity_id)


class ResourceService(NamedEntityService[Resource]):
    model = Resource
    entity_label = "Resource"


class ActionService(NamedEntityService[Action]):
    model = Action
    entity_label = "Action"


def _checked_permissions(raw: Any) -> perms.PermissionStructure:
    structure, errors = perms.validate_permission_structure(raw)
    if errors:
        raise InvalidPermissionStructureError(errors)
    return structure


class RoleService(NamedEntityService[Role]):
    model = Role
    entity_label = "Role"

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        permissions: Optional[Mapping[str, Any]] = None,
        actor_id: Optional[str] = None,
    ) -> Role:
        return self._create(
            actor_id=actor_id,
            name=name,
            description=description,
            permissions=_checked_permissions(permissions),
        )

    def update(
        self,
        entity_id: str,
        name: Optional[str] = None,
        description: Optional[str] = _UNSET,
        permissions: Optional[Mapping[str, Any]] = _UNSET,
        actor_id: Optional[str] = None,
    ) -> Role:
        # None means "no change", like a missing name; clear grants with {}.
        if permissions is None:
            permissions = _UNSET
        if permissions is not _UNSET:
            permissions = _checked_permissions(permissions)
        return self._update(
            entity_id,
            actor_id=actor_id,
            name=name,
            description=description,
            permissions=permissions,
        )

    # ── Permission queries ────────────────────────────────────────────────────

    def permissions_for_name(
        self, role_name: str, resource: Optional[str] = None
    ) -> perms.PermissionStructure:
        """
        Current permission structure of the live role called ``role_name``.

        With ``resource`` given, the live Resource row of that name must exist
        too; EntityNotFoundError otherwise.
        """
        structure = dict(self.find_by_name(role_name).permissions or {})
        if resource is not None:
            ResourceService(self.session).find_by_name(perms.name_of(resource))
        return structure

    def has_permission(self, role_id: str, resource: str, action: str) -> bool:
        role = self.find_by_id(role_id)
        return perms.has_permission(role.permissions or {}, resource, action)

    def get_actions_for_resource(self, role_id: str, resource: str) -> List[str]:
        role = self.find_by_id(role_id)
        ResourceService(self.session).find_by_name(perms.name_of(resource))
        return sorted(perms.actions_for(role.permissions or {}, resource))

    def get_actions_for_resource_by_role_name(
        self, role_name: str, resource: str
    ) -> List[str]:
        role = self.find_by_name(role_name)
        return self.get_actions_for_resource(role.id, resource)

    def get_all_resource_actions(self, role_id: str) -> Dict[str, List[str]]:
        role = self.find_by_id(role_id)
        known = ResourceService(self.session).names()
        return perms.all_resource_actions(role.permissions or {}, known)
