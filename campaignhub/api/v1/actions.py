"""
CampaignHub — API v1: Actions
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from campaignhub.core.security import IdentityClaims, get_identity
from campaignhub.database import get_db
from campaignhub.services.rbac import ActionService

router = APIRouter(prefix="/actions", tags=["rbac"])


class ActionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreateActionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class UpdateActionRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


@router.post("/", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
def create_action(
    req: CreateActionRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ActionService(db).create(
        name=req.name, description=req.description, actor_id=identity.sub
    )


@router.get("/", response_model=List[ActionResponse])
def list_actions(
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    items, total = ActionService(db).find_all(page=page, limit=limit, search=search)
    response.headers["X-Total-Count"] = str(total)
    return items


@router.get("/name/{name}", response_model=ActionResponse)
def get_action_by_name(name: str, db: Session = Depends(get_db)):
    return ActionService(db).find_by_name(name)


@router.delete("/{action_id}/force", response_model=ActionResponse)
def force_delete_action(
    action_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ActionService(db).force_delete(action_id, actor_id=identity.sub)


@router.post("/{action_id}/restore", response_model=ActionResponse)
def restore_action(
    action_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ActionService(db).restore(action_id, actor_id=identity.sub)


@router.get("/{action_id}", response_model=ActionResponse)
def get_action(action_id: str, db: Session = Depends(get_db)):
    return ActionService(db).find_by_id(action_id)


@router.put("/{action_id}", response_model=ActionResponse)
def update_action(
    action_id: str,
    req: UpdateActionRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    changes = req.model_dump(exclude_unset=True)
    return ActionService(db).update(action_id, actor_id=identity.sub, **changes)


@router.delete("/{action_id}", response_model=ActionResponse)
def delete_action(
    action_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ActionService(db).soft_delete(action_id, actor_id=identity.sub)
