# routers/events.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, col, select

from core.config import settings
from core.logging_config import logger
from database import get_session
from dependencies.auth import requires_permission
from models.base import Pagination, utcnow
from models.enums import EventStatus, EventType
from models.event import Event, EventDetail, EventRead, EventWrite
from models.property import Property, PropertySummary


router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def get_event_or_404(session: Session, event_id: str) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


def check_resource(session: Session, resource_id: str) -> Property:
    resource = session.get(Property, resource_id)
    if not resource:
        raise HTTPException(400, "Resource ID does not match an existing property")
    return resource


def event_values(payload: EventWrite) -> dict:
    # Full replacement: optional fields missing from the body are cleared
    data = payload.model_dump()
    data["notes"] = data["notes"] or None
    return data


# ============================================================
# LIST EVENTS
# ============================================================
@router.get(
    "",
    summary="List events",
    dependencies=[Depends(requires_permission("events:read"))],
)
def list_events(
    resource_id: Optional[str] = Query(None, alias="resourceId"),
    type: Optional[EventType] = None,
    status: Optional[EventStatus] = None,
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    filters = []
    if resource_id:
        filters.append(Event.resource_id == resource_id)
    if type:
        filters.append(Event.type == type)
    if status:
        filters.append(Event.status == status)

    rows = session.exec(
        select(Event)
        .where(*filters)
        .order_by(col(Event.start_date).desc())
        .offset(offset)
        .limit(limit)
    ).all()
    total = session.exec(select(func.count()).select_from(Event).where(*filters)).one()

    return {
        "success": True,
        "data": [EventRead.model_validate(row).to_api() for row in rows],
        "pagination": Pagination(total=total, limit=limit, offset=offset).to_api(),
    }


# ============================================================
# CREATE EVENT
# ============================================================
@router.post(
    "",
    status_code=201,
    summary="Create event",
    dependencies=[Depends(requires_permission("events:write"))],
)
def create_event(payload: EventWrite, session: Session = Depends(get_session)):
    check_resource(session, payload.resource_id)

    event = Event(**event_values(payload))
    session.add(event)
    session.commit()
    session.refresh(event)

    logger.info(f"Event {event.id} ({event.type}) created on property {event.resource_id}")
    return {"success": True, "event": EventRead.model_validate(event).to_api()}


# ============================================================
# GET EVENT (with its property)
# ============================================================
@router.get(
    "/{event_id}",
    summary="Get event",
    dependencies=[Depends(requires_permission("events:read"))],
)
def get_event(event_id: str, session: Session = Depends(get_session)):
    event = get_event_or_404(session, event_id)
    resource = session.get(Property, event.resource_id)

    detail = EventDetail.model_validate(event)
    detail.resource = PropertySummary.model_validate(resource) if resource else None
    return {"success": True, "event": detail.to_api()}


# ============================================================
# UPDATE EVENT
# ============================================================
@router.put(
    "/{event_id}",
    summary="Update event",
    dependencies=[Depends(requires_permission("events:write"))],
)
@router.patch(
    "/{event_id}",
    summary="Update event",
    dependencies=[Depends(requires_permission("events:write"))],
)
def update_event(event_id: str, payload: EventWrite, session: Session = Depends(get_session)):
    event = get_event_or_404(session, event_id)
    check_resource(session, payload.resource_id)

    for field, value in event_values(payload).items():
        setattr(event, field, value)
    event.updated_at = utcnow()

    session.add(event)
    session.commit()
    session.refresh(event)

    return {"success": True, "event": EventRead.model_validate(event).to_api()}


# ============================================================
# DELETE EVENT
# ============================================================
@router.delete(
    "/{event_id}",
    summary="Delete event",
    dependencies=[Depends(requires_permission("events:write"))],
)
def delete_event(event_id: str, session: Session = Depends(get_session)):
    event = get_event_or_404(session, event_id)

    session.delete(event)
    session.commit()

    logger.info(f"Event {event_id} deleted")
    return {"success": True, "message": "Event deleted successfully"}
