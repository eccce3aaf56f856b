# models/family.py

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field

from .base import ApiModel, new_id, utcnow
from .enums import FamilyStatus


# ===============================================================
# TABLE
# ===============================================================
class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    size: int = Field(default=0, ge=0)
    credit_score: int = Field(default=0)
    preferred_location: Optional[str] = None
    preferred_rent: Optional[float] = None
    status: FamilyStatus = Field(default=FamilyStatus.ACTIVE, index=True)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API SCHEMAS
# ===============================================================
class FamilyRead(ApiModel):
    id: str
    name: str
    size: int
    credit_score: int
    preferred_location: Optional[str] = None
    preferred_rent: Optional[float] = None
    status: FamilyStatus
    created_at: datetime
    updated_at: datetime
