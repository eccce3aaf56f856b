# routers/join_requests.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlmodel import Session

from core.config import settings
from core.identity_provider import IdentityProviderClient, get_identity_provider
from core.rate_limiter import require_rate_limit
from database import get_session
from dependencies.auth import CurrentUser, requires_permission
from models.base import Pagination
from models.enums import RequestStatus, Role
from models.join_request import JoinRequestCreate, JoinRequestRead, JoinRequestReview
from services.join_requests import (
    get_join_request,
    list_join_requests,
    review_join_request,
    submit_join_request,
)


router = APIRouter(
    prefix="/join-request",
    tags=["Join Requests"],
)


# -----------------------------------------------------
# PUBLIC: Submit join request
# -----------------------------------------------------
@router.post("", status_code=201, summary="Public: Submit join request")
def submit_request(
    payload: JoinRequestCreate,
    request: Request,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    require_rate_limit(
        request,
        scope="join-request",
        max_requests=settings.JOIN_REQUEST_RATE_LIMIT,
        window_seconds=settings.JOIN_REQUEST_RATE_WINDOW_SECONDS,
    )

    join_request = submit_join_request(session, identity_provider, payload)

    return {
        "success": True,
        "message": "Join request submitted successfully",
        "requestId": join_request.id,
    }


# -----------------------------------------------------
# REVIEWERS: List join requests
# permissions: join_requests:read
# -----------------------------------------------------
@router.get(
    "",
    summary="List join requests",
    dependencies=[Depends(requires_permission("join_requests:read"))],
)
def list_requests(
    status: Optional[RequestStatus] = None,
    role: Optional[Role] = None,
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    rows, total = list_join_requests(session, status=status, role=role, limit=limit, offset=offset)

    return {
        "data": [JoinRequestRead.model_validate(row).to_api() for row in rows],
        "pagination": Pagination(total=total, limit=limit, offset=offset).to_api(),
    }


# -----------------------------------------------------
# REVIEWERS: Get one join request
# permissions: join_requests:read
# -----------------------------------------------------
@router.get(
    "/{request_id}",
    summary="Get join request",
    dependencies=[Depends(requires_permission("join_requests:read"))],
)
def get_request(request_id: str, session: Session = Depends(get_session)):
    return JoinRequestRead.model_validate(get_join_request(session, request_id)).to_api()


# -----------------------------------------------------
# REVIEWERS: Approve / reject
# permissions: join_requests:review
# -----------------------------------------------------
@router.patch("/{request_id}", summary="Approve or reject join request")
def review_request(
    request_id: str,
    payload: JoinRequestReview,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
    current_user: CurrentUser = Depends(requires_permission("join_requests:review")),
):
    outcome = review_join_request(
        session,
        identity_provider,
        request_id,
        payload.status,
        reviewer_id=current_user.id,
        rejection_reason=payload.reason,
    )

    body = {
        "success": True,
        "message": outcome.message,
        "joinRequest": outcome.join_request.to_api(),
    }
    if outcome.temporary_password:
        body["temporaryPassword"] = outcome.temporary_password

    return body
