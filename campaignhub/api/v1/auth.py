"""
Auth router — login, logout and current-identity endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from campaignhub.core.decorators import public
from campaignhub.core.security import IdentityClaims, get_identity
from campaignhub.database import get_db
from campaignhub.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Request / Response schemas ────────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    full_name: str | None
    role: str
    type: str
    organization_id: Optional[str] = None


class MeResponse(BaseModel):
    sub: str
    email: Optional[str]
    role: Optional[str]
    type: Optional[str]
    organizationId: Optional[str]


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
@public
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate with email + password.
    Returns a JWT access token the frontend stores in memory.
    """
    user, token = auth_service.login(db, body.email, body.password)
    return LoginResponse(
        access_token=token,
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        type=user.principal_type,
        organization_id=user.organization_id,
    )


@router.post("/logout")
@public
def logout():
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
def me(identity: IdentityClaims = Depends(get_identity)):
    """Return the claims of the currently authenticated caller."""
    return MeResponse(**identity.to_dict())
