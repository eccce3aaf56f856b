from fastapi import Depends, HTTPException
from dependencies.auth import get_current_user, CurrentUser
from core.permissions import ROLE_PERMISSIONS


FORBIDDEN_DETAIL = "Forbidden: Insufficient permissions"


# -----------------------------------------------------
# Collect effective permissions for a role
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> set:
    return set(ROLE_PERMISSIONS.get(str(user.role), []))


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def has_permission(user: CurrentUser, permission: str) -> bool:
    effective = get_effective_permissions(user)

    # Wildcard grants everything
    if "*" in effective:
        return True

    return permission in effective


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(permission: str):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_permission("families:read"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not has_permission(current_user, permission):
            raise HTTPException(status_code=403, detail=FORBIDDEN_DETAIL)
        return current_user

    return dependency
