"""
Authentication service — credential check and token issuance.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from campaignhub.core.exceptions import AuthenticationError
from campaignhub.core.security import create_access_token, hash_password, verify_password
from campaignhub.models.users import User


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.lower().strip()).first()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    return user


def issue_token(user: User) -> str:
    """Access token carrying the claims route protection reads."""
    extra = {"email": user.email, "type": user.principal_type}
    if user.organization_id:
        extra["organizationId"] = user.organization_id
    return create_access_token(user.id, user.role, extra=extra)


def login(db: Session, email: str, password: str) -> Tuple[User, str]:
    user = authenticate(db, email, password)
    if not user:
        raise AuthenticationError("Invalid email or password.")
    return user, issue_token(user)


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: str = "",
    role: str = "USER",
    principal_type: str = "user",
    organization_id: Optional[str] = None,
) -> User:
    user = User(
        email=email.lower().strip(),
        hashed_password=hash_password(password),
        full_name=full_name,
        role=role,
        principal_type=principal_type,
        organization_id=organization_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
