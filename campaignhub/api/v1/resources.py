"""
CampaignHub — API v1: Resources
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from campaignhub.core.security import IdentityClaims, get_identity
from campaignhub.database import get_db
from campaignhub.services.rbac import ResourceService

router = APIRouter(prefix="/resources", tags=["rbac"])


class ResourceResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CreateResourceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class UpdateResourceRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


@router.post("/", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource(
    req: CreateResourceRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ResourceService(db).create(
        name=req.name, description=req.description, actor_id=identity.sub
    )


@router.get("/", response_model=List[ResourceResponse])
def list_resources(
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    items, total = ResourceService(db).find_all(page=page, limit=limit, search=search)
    response.headers["X-Total-Count"] = str(total)
    return items


@router.get("/name/{name}", response_model=ResourceResponse)
def get_resource_by_name(name: str, db: Session = Depends(get_db)):
    return ResourceService(db).find_by_name(name)


@router.delete("/{resource_id}/force", response_model=ResourceResponse)
def force_delete_resource(
    resource_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ResourceService(db).force_delete(resource_id, actor_id=identity.sub)


@router.post("/{resource_id}/restore", response_model=ResourceResponse)
def restore_resource(
    resource_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ResourceService(db).restore(resource_id, actor_id=identity.sub)


@router.get("/{resource_id}", response_model=ResourceResponse)
def get_resource(resource_id: str, db: Session = Depends(get_db)):
    return ResourceService(db).find_by_id(resource_id)


@router.put("/{resource_id}", response_model=ResourceResponse)
def update_resource(
    resource_id: str,
    req: UpdateResourceRequest,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    changes = req.model_dump(exclude_unset=True)
    return ResourceService(db).update(resource_id, actor_id=identity.sub, **changes)


@router.delete("/{resource_id}", response_model=ResourceResponse)
def delete_resource(
    resource_id: str,
    db: Session = Depends(get_db),
    identity: IdentityClaims = Depends(get_identity),
):
    return ResourceService(db).soft_delete(resource_id, actor_id=identity.sub)
