"""Database model for user accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class User(SQLModel, table=True):
    """Account signing in with email and password or through an SSO provider."""

    __table_args__ = (UniqueConstraint("provider", "uid", name="uq_user_provider_uid"),)

    id: Optional[int] = ORMField(default=None, primary_key=True)
    email: str = ORMField(index=True, unique=True)
    encrypted_password: str
    name: Optional[str] = None

    provider: Optional[str] = ORMField(default=None, index=True)
    uid: Optional[str] = None

    reset_password_token: Optional[str] = ORMField(default=None, unique=True)
    reset_password_sent_at: Optional[datetime] = None
    remember_created_at: Optional[datetime] = None

    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["User"]
