from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlmodel import Session

from core.logging_config import logger
from core.supabase_client import get_supabase_client
from database import get_session
from models.enums import Role
from services.users import find_user_by_email


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (application identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # application users.id
    auth_user_id: str               # Supabase Auth UID
    email: str
    role: Role
    name: Optional[str] = None


# ============================================================
# AUTH DECODING (Supabase validates JWT, users table holds role)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials or not credentials.credentials:
        raise unauthorized

    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(credentials.credentials)
        if not auth_resp or not auth_resp.user:
            raise unauthorized
        auth_user = auth_resp.user
    except HTTPException:
        raise
    except Exception as e:
        logger.info(f"Token rejected by Supabase: {e}")
        raise unauthorized

    if not auth_user.email:
        raise unauthorized

    # ---------------------------------------------------------
    # Resolve application user (role lives here, not in metadata)
    # ---------------------------------------------------------
    user = find_user_by_email(session, auth_user.email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Insufficient permissions",
        )

    return CurrentUser(
        id=user.id,
        auth_user_id=auth_user.id,
        email=user.email,
        role=user.role,
        name=user.name,
    )


# ============================================================
# PERMISSION CHECK (DELEGATES TO permission_helpers)
# ============================================================
def requires_permission(permission: str):
    """
    Thin wrapper so routes can still import from dependencies.auth.
    Real RBAC logic lives in core.permission_helpers.
    """
    from core.permission_helpers import requires_permission as new_checker
    return new_checker(permission)
