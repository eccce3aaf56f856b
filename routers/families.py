# routers/families.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, col, select

from core.config import settings
from database import get_session
from dependencies.auth import requires_permission
from models.base import Pagination
from models.enums import FamilyStatus
from models.family import Family, FamilyRead


router = APIRouter(
    prefix="/families",
    tags=["Families"],
    dependencies=[Depends(requires_permission("families:read"))],
)


# (min, max) inclusive; None = unbounded
SIZE_BUCKETS = {
    "1-2": (1, 2),
    "3-4": (3, 4),
    "5+": (5, None),
}

SORT_FIELDS = {
    "createdAt": Family.created_at,
    "name": Family.name,
    "size": Family.size,
    "creditScore": Family.credit_score,
}


class FamilyPagination(Pagination):
    has_more: bool


@router.get("", summary="List active families")
def list_families(
    size: Optional[str] = None,
    min_credit_score: Optional[int] = Query(None, alias="minCreditScore"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    filters = [Family.status == FamilyStatus.ACTIVE]

    # Unknown buckets are ignored
    if size in SIZE_BUCKETS:
        low, high = SIZE_BUCKETS[size]
        filters.append(col(Family.size) >= low)
        if high is not None:
            filters.append(col(Family.size) <= high)

    if min_credit_score is not None:
        filters.append(col(Family.credit_score) >= min_credit_score)

    sort_column = col(SORT_FIELDS.get(sort_by, Family.created_at))
    order = sort_column.asc() if sort_order == "asc" else sort_column.desc()

    rows = session.exec(
        select(Family).where(*filters).order_by(order).offset(offset).limit(limit)
    ).all()
    total = session.exec(select(func.count()).select_from(Family).where(*filters)).one()

    return {
        "families": [FamilyRead.model_validate(row).to_api() for row in rows],
        "pagination": FamilyPagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        ).to_api(),
    }


@router.get("/{family_id}", summary="Get family")
def get_family(family_id: str, session: Session = Depends(get_session)):
    family = session.get(Family, family_id)
    if not family:
        raise HTTPException(404, "Family not found")
    return FamilyRead.model_validate(family).to_api()
