"""
CampaignHub — Security Layer
Password hashing, JWT creation/verification, identity claims dependency.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from campaignhub.config import get_settings
from campaignhub.core.decorators import is_public_route

settings = get_settings()

# ─── Password hashing ─────────────────────────────────────────────────────────
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Return hash of the given plain-text password."""
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the plain password matches the hash."""
    return _pwd_context.verify(plain_password, hashed_password)


# ─── JWT ──────────────────────────────────────────────────────────────────────


def create_access_token(
    subject: str,
    role: str,
    extra: Optional[Dict[str, Any]] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Create a signed JWT access token.

    :param subject: Usually the user_id.
    :param role: Role *name*, e.g. 'ADMIN'. Permissions are resolved from it
                 on every request, never embedded in the token.
    :param extra: Additional claims to embed (email, type, organizationId).
    :param expires_minutes: Override default expiry from settings.
    """
    expiry = expires_minutes or settings.JWT_EXPIRY_MINUTES
    now = datetime.now(tz=timezone.utc)
    expire = now + timedelta(minutes=expiry)

    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    if extra:
        payload.update(extra)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.
    Raises HTTPException 401 on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return payload
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired token: {exc}",
            headers={"WWW-Authenticate": "Bearer"},
        )


# ─── Identity claims ──────────────────────────────────────────────────────────


class IdentityClaims:
    """Decoded token payload of the caller."""

    def __init__(
        self,
        sub: str,
        email: Optional[str] = None,
        role: Optional[str] = None,
        type: Optional[str] = None,
        organization_id: Optional[str] = None,
        raw_claims: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.sub = sub
        self.email = email
        self.role = role
        self.type = type
        self.organization_id = organization_id
        self.raw_claims = raw_claims or {}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IdentityClaims":
        return cls(
            sub=payload.get("sub"),
            email=payload.get("email"),
            role=payload.get("role"),
            type=payload.get("type"),
            organization_id=payload.get("organizationId"),
            raw_claims=payload,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sub": self.sub,
            "email": self.email,
            "role": self.role,
            "type": self.type,
            "organizationId": self.organization_id,
        }

    def __repr__(self) -> str:
        return f"IdentityClaims(sub={self.sub!r}, role={self.role!r})"


# ─── FastAPI dependencies ─────────────────────────────────────────────────────


def verify_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[IdentityClaims]:
    """
    App-wide identity gate. Public routes pass through untouched; every other
    route needs a valid bearer token. The decoded claims are attached to
    ``request.state.identity`` for route protection to read.
    """
    request.state.identity = None
    if is_public_route(request):
        return None

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing 'sub' claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = IdentityClaims.from_payload(payload)
    request.state.identity = claims
    return claims


def get_identity(request: Request) -> IdentityClaims:
    """Claims set by ``verify_identity``; 401 when the route had none."""
    claims = getattr(request.state, "identity", None)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
