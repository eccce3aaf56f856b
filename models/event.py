# models/event.py

from typing import Optional
from datetime import datetime

from pydantic import AwareDatetime, Field as PydanticField
from sqlmodel import SQLModel, Field

from .base import ApiModel, new_id, utcnow
from .enums import EventStatus, EventType
from .property import PropertySummary


# ===============================================================
# TABLE
# ===============================================================
class Event(SQLModel, table=True):
    """Dated occurrence on a property: lease signing, rent payment, inspection."""

    __tablename__ = "events"

    id: str = Field(default_factory=new_id, primary_key=True)
    label: str
    type: EventType = Field(index=True)
    status: EventStatus = Field(default=EventStatus.PENDING, index=True)
    resource_id: str = Field(foreign_key="properties.id", index=True)
    start_date: datetime
    end_date: Optional[datetime] = None
    amount: Optional[float] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API SCHEMAS
# ===============================================================
class EventWrite(ApiModel):
    """Create and update body. Dates must carry a UTC offset."""

    label: str = PydanticField(..., min_length=2)
    type: EventType
    status: EventStatus
    resource_id: str = PydanticField(..., min_length=1)
    start_date: AwareDatetime
    end_date: Optional[AwareDatetime] = None
    amount: Optional[float] = None
    notes: Optional[str] = None


class EventRead(ApiModel):
    id: str
    label: str
    type: EventType
    status: EventStatus
    resource_id: str
    start_date: datetime
    end_date: Optional[datetime] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EventDetail(EventRead):
    resource: Optional[PropertySummary] = None
