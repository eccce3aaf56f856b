# models/join_request.py

from typing import Optional
from datetime import datetime

from pydantic import EmailStr, Field as PydanticField
from sqlmodel import SQLModel, Field

from .base import ApiModel, new_id, utcnow
from .enums import Role, RequestStatus


# ===============================================================
# TABLE
# ===============================================================
class JoinRequest(SQLModel, table=True):
    """
    Application to become a user of the system.
    `role` is the role the applicant asked for.
    """

    __tablename__ = "join_requests"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    role: Role
    message: Optional[str] = None
    status: RequestStatus = Field(default=RequestStatus.PENDING, index=True)
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    family_size: Optional[int] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API SCHEMAS
# ===============================================================
class JoinRequestCreate(ApiModel):
    """Public submission body. Role is case-insensitive."""

    name: str = PydanticField(..., min_length=1)
    email: EmailStr
    role: str = PydanticField(..., min_length=1)
    message: Optional[str] = None
    family_size: Optional[int] = PydanticField(None, ge=0)


class JoinRequestReview(ApiModel):
    """
    Reviewer decision. `status` stays a plain string so an invalid value
    is rejected by the workflow rather than by request parsing.
    """

    status: Optional[str] = None
    reason: Optional[str] = None


class JoinRequestRead(ApiModel):
    id: str
    email: str
    name: str
    role: Role
    message: Optional[str] = None
    status: RequestStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    family_size: Optional[int] = None
    created_at: datetime
    updated_at: datetime
