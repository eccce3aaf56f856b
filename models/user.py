# models/user.py

from typing import Optional
from datetime import datetime

from pydantic import EmailStr, Field as PydanticField
from sqlmodel import SQLModel, Field

from .base import ApiModel, new_id, utcnow
from .enums import Role


# ===============================================================
# TABLE
# ===============================================================
class User(SQLModel, table=True):
    """Application account. Authentication lives with the identity provider."""

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    password: str  # pbkdf2 hash, never serialized
    role: Role = Field(default=Role.TENANT, index=True)
    phone_number: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API SCHEMAS
# ===============================================================
class UserRead(ApiModel):
    id: str
    email: str
    name: str
    role: Role
    phone_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserCreate(ApiModel):
    """Admin-created account with an initial password."""

    email: EmailStr
    name: str = PydanticField(..., min_length=2)
    password: str = PydanticField(..., min_length=6)
    role: Role
    phone_number: Optional[str] = None


class UserCreateWithMagicLink(UserCreate):
    """Same as UserCreate; the user also gets a magic link by email."""


class UserUpdate(ApiModel):
    """Partial update. Only fields present in the body change."""

    name: Optional[str] = PydanticField(None, min_length=2)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    phone_number: Optional[str] = None
