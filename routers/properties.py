# routers/properties.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from core.config import settings
from core.logging_config import logger
from database import get_session
from dependencies.auth import requires_permission
from models.base import Pagination, utcnow
from models.enums import PropertyType
from models.event import Event
from models.property import (
    Property,
    PropertyDetail,
    PropertyRead,
    PropertySummary,
    PropertyWrite,
)


router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
)


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def get_property_or_404(session: Session, property_id: str) -> Property:
    prop = session.get(Property, property_id)
    if not prop:
        raise HTTPException(404, "Property not found")
    return prop


def check_parent(session: Session, parent_id: Optional[str], property_id: str = None):
    if not parent_id:
        return
    if parent_id == property_id:
        raise HTTPException(400, "A property cannot be its own parent")
    if not session.get(Property, parent_id):
        raise HTTPException(400, "Parent property not found")


def property_detail(session: Session, prop: Property) -> dict:
    parent = session.get(Property, prop.parent_id) if prop.parent_id else None
    children = session.exec(
        select(Property).where(Property.parent_id == prop.id).order_by(col(Property.label))
    ).all()

    detail = PropertyDetail.model_validate(prop)
    detail.parent = PropertySummary.model_validate(parent) if parent else None
    detail.children = [PropertySummary.model_validate(child) for child in children]
    return detail.to_api()


# ============================================================
# LIST PROPERTIES
# ============================================================
@router.get(
    "",
    summary="List properties",
    dependencies=[Depends(requires_permission("properties:read"))],
)
def list_properties(
    type: Optional[PropertyType] = None,
    parent_id: Optional[str] = Query(None, alias="parentId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = None,
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    filters = []
    if type:
        filters.append(Property.type == type)
    if parent_id:
        filters.append(Property.parent_id == parent_id)
    if is_active is not None:
        filters.append(Property.is_active == is_active)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(col(Property.label).ilike(pattern), col(Property.address).ilike(pattern)))

    rows = session.exec(
        select(Property)
        .where(*filters)
        .order_by(col(Property.created_at).desc())
        .offset(offset)
        .limit(limit)
    ).all()
    total = session.exec(select(func.count()).select_from(Property).where(*filters)).one()

    return {
        "success": True,
        "data": [PropertyRead.model_validate(row).to_api() for row in rows],
        "pagination": Pagination(total=total, limit=limit, offset=offset).to_api(),
    }


# ============================================================
# CREATE PROPERTY
# ============================================================
@router.post(
    "",
    status_code=201,
    summary="Create property",
    dependencies=[Depends(requires_permission("properties:create"))],
)
def create_property(payload: PropertyWrite, session: Session = Depends(get_session)):
    check_parent(session, payload.parent_id)

    prop = Property(**payload.model_dump())
    session.add(prop)
    session.commit()
    session.refresh(prop)

    logger.info(f"Property {prop.id} created ({prop.type})")
    return {"success": True, "property": PropertyRead.model_validate(prop).to_api()}


# ============================================================
# GET PROPERTY (with parent and children)
# ============================================================
@router.get(
    "/{property_id}",
    summary="Get property",
    dependencies=[Depends(requires_permission("properties:read"))],
)
def get_property(property_id: str, session: Session = Depends(get_session)):
    prop = get_property_or_404(session, property_id)
    return {"success": True, "property": property_detail(session, prop)}


# ============================================================
# UPDATE PROPERTY
# Fields left out of the body keep their stored value
# ============================================================
@router.put(
    "/{property_id}",
    summary="Update property",
    dependencies=[Depends(requires_permission("properties:update"))],
)
@router.patch(
    "/{property_id}",
    summary="Update property",
    dependencies=[Depends(requires_permission("properties:update"))],
)
def update_property(
    property_id: str,
    payload: PropertyWrite,
    session: Session = Depends(get_session),
):
    prop = get_property_or_404(session, property_id)
    update_data = payload.model_dump(exclude_unset=True)

    if "parent_id" in update_data:
        check_parent(session, update_data["parent_id"], property_id)

    for field, value in update_data.items():
        setattr(prop, field, value)
    prop.updated_at = utcnow()

    session.add(prop)
    session.commit()
    session.refresh(prop)

    return {"success": True, "property": PropertyRead.model_validate(prop).to_api()}


# ============================================================
# DELETE PROPERTY
# ============================================================
@router.delete(
    "/{property_id}",
    summary="Delete property",
    dependencies=[Depends(requires_permission("properties:delete"))],
)
def delete_property(property_id: str, session: Session = Depends(get_session)):
    prop = get_property_or_404(session, property_id)

    has_children = session.exec(
        select(Property.id).where(Property.parent_id == property_id)
    ).first()
    if has_children:
        raise HTTPException(
            400, "Cannot delete property with child properties. Remove child properties first."
        )

    has_events = session.exec(select(Event.id).where(Event.resource_id == property_id)).first()
    if has_events:
        raise HTTPException(400, "Cannot delete property with associated events.")

    session.delete(prop)
    session.commit()

    logger.info(f"Property {property_id} deleted")
    return {"success": True, "message": "Property deleted successfully"}
