# services/join_requests.py

"""
Join request lifecycle: public submission, listing, and the review workflow.

Review is a small saga. The status change is committed first, then the
account is provisioned (User + Family rows, identity provider calls). If
provisioning fails, the status change is compensated back to PENDING. The
identity provider cannot join the database transaction, so this is the only
way to keep the request retryable.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from core.errors import (
    ConflictError,
    IdentityProviderError,
    InvalidInputError,
    NotFoundError,
    ProvisioningFailedError,
)
from core.identity_provider import IdentityProviderClient
from core.logging_config import logger
from core.security import generate_temporary_password, hash_password
from models.base import utcnow
from models.enums import RequestStatus, Role
from models.family import Family
from models.join_request import JoinRequest, JoinRequestCreate, JoinRequestRead
from models.user import User
from services.users import find_user_by_email, normalize_email


REVIEW_DECISIONS = (RequestStatus.APPROVED, RequestStatus.REJECTED)

REJECTION_SEPARATOR = " | Rejection Reason: "


class ReviewOutcome(BaseModel):
    decision: RequestStatus
    join_request: JoinRequestRead
    temporary_password: Optional[str] = None

    @property
    def message(self) -> str:
        if self.decision == RequestStatus.APPROVED:
            return "Join request approved and user account created"
        return "Join request rejected"


# -----------------------------------------------------
# Lookups
# -----------------------------------------------------
def get_join_request(session: Session, request_id: str) -> JoinRequest:
    join_request = session.get(JoinRequest, request_id)
    if not join_request:
        raise NotFoundError("Join request not found")
    return join_request


def list_join_requests(
    session: Session,
    status: Optional[RequestStatus] = None,
    role: Optional[Role] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[JoinRequest], int]:
    query = select(JoinRequest)
    count_query = select(func.count()).select_from(JoinRequest)

    if status:
        query = query.where(JoinRequest.status == status)
        count_query = count_query.where(JoinRequest.status == status)
    if role:
        query = query.where(JoinRequest.role == role)
        count_query = count_query.where(JoinRequest.role == role)

    rows = session.exec(
        query.order_by(JoinRequest.created_at.desc()).offset(offset).limit(limit)
    ).all()
    total = session.exec(count_query).one()

    return list(rows), total


# -----------------------------------------------------
# Public submission
# -----------------------------------------------------
def parse_role(value: str) -> Role:
    try:
        return Role(value.strip().upper())
    except ValueError:
        raise InvalidInputError("Invalid role")


def submit_join_request(
    session: Session,
    identity_provider: IdentityProviderClient,
    payload: JoinRequestCreate,
) -> JoinRequest:
    role = parse_role(payload.role)
    email = normalize_email(payload.email)

    if find_user_by_email(session, email):
        raise ConflictError("Email is already registered. Please log in instead.")

    existing = session.exec(
        select(JoinRequest).where(func.lower(JoinRequest.email) == email)
    ).first()
    if existing:
        raise ConflictError("A request with this email already exists and is pending review.")

    join_request = JoinRequest(
        email=email,
        name=payload.name.strip(),
        role=role,
        message=payload.message or None,
        family_size=payload.family_size,
        status=RequestStatus.PENDING,
    )
    session.add(join_request)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("A request with this email already exists and is pending review.")
    session.refresh(join_request)

    logger.info(f"Join request {join_request.id} submitted for {email} ({role})")

    # Best effort: the request stands even if the email never goes out
    try:
        identity_provider.issue_sign_in_link(email, create_identity=True)
    except IdentityProviderError as e:
        logger.warning(f"Magic link for join request {join_request.id} not sent: {e}")

    return join_request


# -----------------------------------------------------
# Review workflow
# -----------------------------------------------------
def parse_decision(decision) -> RequestStatus:
    try:
        status = RequestStatus(decision)
    except (ValueError, TypeError):
        status = None

    if status not in REVIEW_DECISIONS:
        raise InvalidInputError("Valid status (APPROVED or REJECTED) is required")
    return status


def already_processed_message(status: RequestStatus) -> str:
    return f"This request has already been {status.value.lower()}"


def build_rejection_message(existing: Optional[str], reason: Optional[str]) -> str:
    reason_text = (reason or "").strip() or "None provided"
    if existing:
        return f"{existing}{REJECTION_SEPARATOR}{reason_text}"
    return f"Rejection Reason: {reason_text}"


def review_join_request(
    session: Session,
    identity_provider: IdentityProviderClient,
    request_id: str,
    decision,
    reviewer_id: str,
    rejection_reason: Optional[str] = None,
) -> ReviewOutcome:
    """
    Approve or reject a PENDING join request.

    Raises:
        InvalidInputError: decision is not APPROVED or REJECTED
        NotFoundError: no join request with this id
        ConflictError: request is not PENDING, or its email already has a user
        ProvisioningFailedError: account creation failed; request is PENDING again
    """
    status = parse_decision(decision)
    join_request = get_join_request(session, request_id)

    if join_request.status != RequestStatus.PENDING:
        raise ConflictError(already_processed_message(join_request.status))

    if status == RequestStatus.APPROVED and find_user_by_email(session, join_request.email):
        raise ConflictError("A user with this email already exists")

    join_request = _transition(session, join_request, status, reviewer_id, rejection_reason)
    logger.info(f"Join request {request_id} {status.value.lower()} by {reviewer_id}")

    if status == RequestStatus.REJECTED:
        return ReviewOutcome(
            decision=status,
            join_request=JoinRequestRead.model_validate(join_request),
        )

    temporary_password = _provision_account(session, identity_provider, join_request)

    return ReviewOutcome(
        decision=status,
        join_request=JoinRequestRead.model_validate(join_request),
        temporary_password=temporary_password,
    )


def _transition(
    session: Session,
    join_request: JoinRequest,
    status: RequestStatus,
    reviewer_id: str,
    rejection_reason: Optional[str],
) -> JoinRequest:
    """Conditional PENDING -> status write. Losing a race is a Conflict."""
    request_id = join_request.id
    now = utcnow()

    values = {
        "status": status,
        "reviewed_by": reviewer_id,
        "reviewed_at": now,
        "updated_at": now,
    }
    if status == RequestStatus.REJECTED:
        values["message"] = build_rejection_message(join_request.message, rejection_reason)

    result = session.exec(
        update(JoinRequest)
        .where(JoinRequest.id == request_id)
        .where(JoinRequest.status == RequestStatus.PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        session.rollback()
        current = get_join_request(session, request_id)
        raise ConflictError(already_processed_message(current.status))

    session.commit()
    session.refresh(join_request)
    return join_request


def _provision_account(
    session: Session,
    identity_provider: IdentityProviderClient,
    join_request: JoinRequest,
) -> str:
    request_id = join_request.id
    email = normalize_email(join_request.email)

    # User + Family commit together or not at all
    try:
        temporary_password = generate_temporary_password()
        user = User(
            email=email,
            name=join_request.name,
            password=hash_password(temporary_password),
            role=join_request.role,
        )
        family = Family(
            name=join_request.name,
            size=join_request.family_size or 0,
            credit_score=0,
            preferred_location=None,
            preferred_rent=None,
        )
        session.add(user)
        session.add(family)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(f"Join request {request_id}: user {email} created concurrently")
        _revert_to_pending(session, request_id)
        raise ConflictError("A user with this email already exists")
    except Exception as e:
        session.rollback()
        logger.error(f"Join request {request_id}: account records not created: {e}", exc_info=True)
        _revert_to_pending(session, request_id)
        raise ProvisioningFailedError() from e

    user_id, family_id = user.id, family.id

    try:
        identity_provider.create_user(
            email,
            temporary_password,
            metadata={"app_user_id": user_id, "role": join_request.role.value},
        )
        identity_provider.issue_sign_in_link(email)
    except Exception as e:
        logger.error(f"Join request {request_id}: identity provisioning failed: {e}", exc_info=True)
        # TODO: remove the user/family rows here once they are linked to the join request
        logger.warning(
            f"Join request {request_id}: user {user_id} and family {family_id} "
            "remain without an auth identity and need manual cleanup"
        )
        _revert_to_pending(session, request_id)
        raise ProvisioningFailedError() from e

    session.refresh(join_request)
    return temporary_password


def _revert_to_pending(session: Session, request_id: str) -> None:
    """Compensating write. Its own failure is logged, never raised."""
    try:
        session.exec(
            update(JoinRequest)
            .where(JoinRequest.id == request_id)
            .where(JoinRequest.status == RequestStatus.APPROVED)
            .values(
                status=RequestStatus.PENDING,
                reviewed_by=None,
                reviewed_at=None,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        session.commit()
        logger.info(f"Join request {request_id} rolled back to PENDING")
    except Exception:
        session.rollback()
        logger.critical(
            f"Join request {request_id} is APPROVED without an account and could not "
            "be rolled back; manual intervention required",
            exc_info=True,
        )
