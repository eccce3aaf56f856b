# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
ROLE_PERMISSIONS = {

    # =====================================================
    # ADMIN: Full access to everything
    # =====================================================
    "ADMIN": ["*"],

    # =====================================================
    # PROPERTY MANAGER: reviews applications, no user admin
    # =====================================================
    "PROPERTY_MANAGER": [
        "join_requests:read", "join_requests:review",
        "families:read",
        "properties:update", "properties:delete",
    ],

    # =====================================================
    # OWNER: maintains the properties they hold
    # =====================================================
    "OWNER": [
        "families:read",
        "properties:update", "properties:delete",
    ],

    # =====================================================
    # TENANT
    # =====================================================
    "TENANT": [],

    # =====================================================
    # SERVICE PROVIDER
    # =====================================================
    "SERVICE_PROVIDER": [],
}
