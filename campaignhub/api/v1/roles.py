"""
CampaignHub — API v1: Roles
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from campaignhub.core.permissions import ActionName, ResourceName
from campaignhub.core.security import IdentityClaims, get_identity
from campaignhub.database import get_db
from campaignhub.models.rbac import Role
from campaignhub.services.permission_guard import require_permission
from campaignhub.services.rbac import RoleService

router = APIRouter(prefix="/roles", tags=["rbac"])

# Probing arbitrary grants is itself an RBAC read.
rbac_read = [Depends(require_permission(ResourceName.RBAC, ActionName.READ))]


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    permissions: Dict[str, List[str]]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreateRoleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Dict[str, List[str]] = Field(default_factory=dict)


class UpdateRoleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[Dict[str, List[str]]] = None


class ActionsResponse(BaseModel):
    actions: List[str]


class PermissionCheckRequest(BaseModel):
    resource: str
    action: str


class PermissionCheckResponse(BaseModel):
    has_permission: bool


def _to_response(role: Role) -> RoleResponse:
    return RoleResponse(**role.to_dict())


# ── Collection ────────────────────────────────────────────────────────────────


@router.post("/", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(
    req: CreateRoleRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    role = RoleService(db).create(
        name=req.name,
        description=req.description,
        permissions=req.permissions,
        actor_id=identity.sub,
    )
    return _to_response(role)


@router.get("/", response_model=List[RoleResponse])
def list_roles(
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    roles, total = RoleService(db).find_all(page=page, limit=limit, search=search)
    response.headers["X-Total-Count"] = str(total)
    return [_to_response(r) for r in roles]


# ── Permission queries (specific routes before generic /{role_id}) ────────────


@router.get("/by-name/{role_name}/actions/{resource}", response_model=ActionsResponse)
def get_actions_by_role_name(role_name: str, resource: str, db: Session = Depends(get_db)):
    actions = RoleService(db).get_actions_for_resource_by_role_name(role_name, resource)
    return ActionsResponse(actions=actions)


@router.get("/{role_id}/actions/{resource}", response_model=ActionsResponse)
def get_actions_for_resource(role_id: str, resource: str, db: Session = Depends(get_db)):
    actions = RoleService(db).get_actions_for_resource(role_id, resource)
    return ActionsResponse(actions=actions)


@router.get("/{role_id}/all-actions", response_model=Dict[str, List[str]])
def get_all_resource_actions(role_id: str, db: Session = Depends(get_db)):
    return RoleService(db).get_all_resource_actions(role_id)


@router.get(
    "/{role_id}/permissions",
    response_model=PermissionCheckResponse,
    dependencies=rbac_read,
)
def check_permission(
    role_id: str,
    resource: str = Query(...),
    action: str = Query(...),
    db: Session = Depends(get_db),
):
    allowed = RoleService(db).has_permission(role_id, resource, action)
    return PermissionCheckResponse(has_permission=allowed)


@router.post(
    "/{role_id}/permissions",
    response_model=PermissionCheckResponse,
    dependencies=rbac_read,
)
def check_permission_body(
    role_id: str, req: PermissionCheckRequest, db: Session = Depends(get_db)
):
    allowed = RoleService(db).has_permission(role_id, req.resource, req.action)
    return PermissionCheckResponse(has_permission=allowed)


# ── Lifecycle ─────────────────────────────────────────────────────────────────


@router.delete("/{role_id}/force", response_model=RoleResponse)
def force_delete_role(
    role_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    role = RoleService(db).force_delete(role_id, actor_id=identity.sub)
    return _to_response(role)


@router.post("/{role_id}/restore", response_model=RoleResponse)
def restore_role(
    role_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return _to_response(RoleService(db).restore(role_id, actor_id=identity.sub))


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(role_id: str, db: Session = Depends(get_db)):
    return _to_response(RoleService(db).find_by_id(role_id))


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: str,
    req: UpdateRoleRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    changes = req.model_dump(exclude_unset=True)
    role = RoleService(db).update(role_id, actor_id=identity.sub, **changes)
    return _to_response(role)


@router.delete("/{role_id}", response_model=RoleResponse)
def delete_role(
    role_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return _to_response(RoleService(db).soft_delete(role_id, actor_id=identity.sub))
