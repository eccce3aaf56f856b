# routers/users.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from core.config import settings
from core.errors import IdentityProviderError
from core.identity_provider import IdentityProviderClient, get_identity_provider
from core.logging_config import logger
from core.security import hash_password
from database import get_session
from dependencies.auth import requires_permission
from models.base import Pagination, utcnow
from models.enums import Role
from models.user import User, UserCreate, UserCreateWithMagicLink, UserRead, UserUpdate
from services.users import find_user_by_email, normalize_email


router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def dashboard_redirect() -> str:
    return f"{settings.APP_URL.rstrip('/')}/dashboard"


# -----------------------------------------------------
# Helper: Get user by id
# -----------------------------------------------------
def get_user_or_404(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return user


# -----------------------------------------------------
# Helper: Create user row + auth identity
# The row is removed again if the identity cannot be created
# -----------------------------------------------------
def create_user_with_identity(
    session: Session,
    identity_provider: IdentityProviderClient,
    payload: UserCreate,
) -> User:
    email = normalize_email(payload.email)

    if find_user_by_email(session, email):
        raise HTTPException(400, "Email already in use")

    user = User(
        email=email,
        name=payload.name,
        password=hash_password(payload.password),
        role=payload.role,
        phone_number=payload.phone_number,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    try:
        identity_provider.create_user(
            email,
            payload.password,
            metadata={"app_user_id": user.id, "role": user.role.value},
        )
    except IdentityProviderError as e:
        logger.error(f"Auth account for {email} not created, removing user {user.id}: {e}")
        session.delete(user)
        session.commit()
        raise HTTPException(500, "Failed to create auth account")

    return user


# -----------------------------------------------------
# ADMIN: List users
# permissions: users:read
# -----------------------------------------------------
@router.get(
    "",
    summary="Admin: List users",
    dependencies=[Depends(requires_permission("users:read"))],
)
def list_users(
    role: Optional[Role] = None,
    email: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    filters = []
    if role:
        filters.append(User.role == role)
    if email:
        filters.append(func.lower(User.email) == normalize_email(email))
    if search:
        pattern = f"%{search}%"
        filters.append(or_(col(User.name).ilike(pattern), col(User.email).ilike(pattern)))

    query = select(User).where(*filters)
    count_query = select(func.count()).select_from(User).where(*filters)

    rows = session.exec(
        query.order_by(col(User.created_at).desc()).offset(offset).limit(limit)
    ).all()
    total = session.exec(count_query).one()

    return {
        "data": [UserRead.model_validate(row).to_api() for row in rows],
        "pagination": Pagination(total=total, limit=limit, offset=offset).to_api(),
    }


# -----------------------------------------------------
# ADMIN: Create user with a password
# permissions: users:write
# -----------------------------------------------------
@router.post(
    "",
    status_code=201,
    summary="Admin: Create user",
    dependencies=[Depends(requires_permission("users:write"))],
)
def create_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    user = create_user_with_identity(session, identity_provider, payload)

    logger.info(f"User {user.id} created ({user.role})")
    return {"message": "User created successfully", "user": UserRead.model_validate(user).to_api()}


# -----------------------------------------------------
# ADMIN: Get one user
# permissions: users:read
# -----------------------------------------------------
@router.get(
    "/{user_id}",
    summary="Admin: Get user",
    dependencies=[Depends(requires_permission("users:read"))],
)
def get_user(user_id: str, session: Session = Depends(get_session)):
    return UserRead.model_validate(get_user_or_404(session, user_id)).to_api()


# -----------------------------------------------------
# ADMIN: Update user
# An email change is applied to the auth identity first
# permissions: users:write
# -----------------------------------------------------
@router.patch(
    "/{user_id}",
    summary="Admin: Update user",
    dependencies=[Depends(requires_permission("users:write"))],
)
def update_user(
    user_id: str,
    payload: UserUpdate,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    user = get_user_or_404(session, user_id)
    update_data = payload.model_dump(exclude_unset=True)

    if update_data.get("email") is not None:
        new_email = normalize_email(update_data["email"])
        update_data["email"] = new_email

        if new_email != normalize_email(user.email):
            if find_user_by_email(session, new_email):
                raise HTTPException(400, "Email already in use")

            try:
                moved = identity_provider.update_email(user.email, new_email)
            except IdentityProviderError as e:
                logger.error(f"Auth email change for user {user_id} failed: {e}")
                raise HTTPException(500, "Failed to update email in auth system")

            if not moved:
                logger.warning(f"User {user_id} has no auth identity, email changed locally only")

    # Required columns are never cleared
    for field in ("name", "email", "role"):
        if field in update_data and update_data[field] is None:
            del update_data[field]

    for field, value in update_data.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    return {"message": "User updated successfully", "user": UserRead.model_validate(user).to_api()}


# -----------------------------------------------------
# ADMIN: Delete user
# The auth identity is removed best effort
# permissions: users:write
# -----------------------------------------------------
@router.delete(
    "/{user_id}",
    summary="Admin: Delete user",
    dependencies=[Depends(requires_permission("users:write"))],
)
def delete_user(
    user_id: str,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    user = get_user_or_404(session, user_id)

    try:
        if not identity_provider.delete_user(user.email):
            logger.info(f"User {user_id} had no auth identity to delete")
    except IdentityProviderError as e:
        logger.error(f"Auth identity for user {user_id} not deleted: {e}")

    session.delete(user)
    session.commit()

    logger.info(f"User {user_id} deleted")
    return {"message": "User deleted successfully"}


# -----------------------------------------------------
# ADMIN: Create user and send magic link
# permissions: users:write
# -----------------------------------------------------
@router.post(
    "/create-with-magic-link",
    status_code=201,
    summary="Admin: Create user and send magic link",
    dependencies=[Depends(requires_permission("users:write"))],
)
def create_with_magic_link(
    payload: UserCreateWithMagicLink,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    user = create_user_with_identity(session, identity_provider, payload)
    created = UserRead.model_validate(user).to_api()

    try:
        identity_provider.issue_sign_in_link(user.email, redirect_to=dashboard_redirect())
    except IdentityProviderError as e:
        logger.warning(f"Magic link for new user {user.id} not sent: {e}")
        return JSONResponse(
            status_code=201,
            content={"error": "User created but failed to send magic link", "user": created},
        )

    return {"message": "User created and magic link sent successfully", "user": created}


# -----------------------------------------------------
# ADMIN: Re-send magic link
# permissions: users:write
# -----------------------------------------------------
@router.post(
    "/{user_id}/send-magic-link",
    summary="Admin: Send magic link to user",
    dependencies=[Depends(requires_permission("users:write"))],
)
def send_magic_link(
    user_id: str,
    session: Session = Depends(get_session),
    identity_provider: IdentityProviderClient = Depends(get_identity_provider),
):
    user = get_user_or_404(session, user_id)

    try:
        identity_id = identity_provider.find_user(user.email)
    except IdentityProviderError as e:
        logger.error(f"Auth lookup for user {user_id} failed: {e}")
        raise HTTPException(500, "Failed to retrieve auth users")

    if not identity_id:
        raise HTTPException(404, "User not found in authentication system")

    try:
        identity_provider.issue_sign_in_link(user.email, redirect_to=dashboard_redirect())
    except IdentityProviderError as e:
        logger.error(f"Magic link for user {user_id} failed: {e}")
        raise HTTPException(500, "Failed to generate magic link")

    return {"message": "Magic link email sent successfully"}
