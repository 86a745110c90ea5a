"""
User model for authentication.
campaignhub/models/users.py
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from campaignhub.database import Base

PRINCIPAL_TYPES = ("user", "employee")


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Role *name*, copied into the token; permissions are looked up live.
    role: Mapped[str] = mapped_column(String(100), nullable=False, default="USER")
    principal_type: Mapped[str] = mapped_column(
        SAEnum(*PRINCIPAL_TYPES, name="principal_type_enum"),
        nullable=False,
        default="user",
    )
    organization_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
