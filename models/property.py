# models/property.py

from typing import List, Optional
from datetime import datetime

from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from .base import ApiModel, new_id, utcnow
from .enums import PropertyType


# ===============================================================
# TABLE
# ===============================================================
class Property(SQLModel, table=True):
    """
    A rentable resource. Buildings hold units, parking spots and storage
    through `parent_id`.
    """

    __tablename__ = "properties"

    id: str = Field(default_factory=new_id, primary_key=True)
    label: str = Field(index=True)
    type: PropertyType = Field(index=True)
    address: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, foreign_key="properties.id", index=True)

    bedroom_count: Optional[int] = None
    bathroom_count: Optional[float] = None
    square_footage: Optional[float] = None
    rent_amount: Optional[float] = None

    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API SCHEMAS
# ===============================================================
class PropertyWrite(ApiModel):
    """
    Create and update body. On update, fields left out of the body keep
    their stored value.
    """

    label: str = PydanticField(..., min_length=2)
    type: PropertyType
    address: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None
    bedroom_count: Optional[int] = None
    bathroom_count: Optional[float] = None
    square_footage: Optional[float] = None
    rent_amount: Optional[float] = None
    amenities: List[str] = []
    is_active: bool = True
    images: List[str] = []


class PropertySummary(ApiModel):
    id: str
    label: str
    type: PropertyType
    is_active: bool


class PropertyRead(ApiModel):
    id: str
    label: str
    type: PropertyType
    address: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None
    bedroom_count: Optional[int] = None
    bathroom_count: Optional[float] = None
    square_footage: Optional[float] = None
    rent_amount: Optional[float] = None
    amenities: List[str] = []
    images: List[str] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PropertyDetail(PropertyRead):
    parent: Optional[PropertySummary] = None
    children: List[PropertySummary] = []
