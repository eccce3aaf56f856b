# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    RequestStatus,
    FamilyStatus,
    PropertyType,
    EventType,
    EventStatus,
)

# -------------------------
# Users
# -------------------------
from .user import (
    User,
    UserRead,
    UserCreate,
    UserCreateWithMagicLink,
    UserUpdate,
)

# -------------------------
# Families
# -------------------------
from .family import (
    Family,
    FamilyRead,
)

# -------------------------
# Join Requests
# -------------------------
from .join_request import (
    JoinRequest,
    JoinRequestCreate,
    JoinRequestReview,
    JoinRequestRead,
)

# -------------------------
# Properties
# -------------------------
from .property import (
    Property,
    PropertyWrite,
    PropertySummary,
    PropertyRead,
    PropertyDetail,
)

# -------------------------
# Events
# -------------------------
from .event import (
    Event,
    EventWrite,
    EventRead,
    EventDetail,
)

__all__ = [
    # enums
    "Role",
    "RequestStatus",
    "FamilyStatus",
    "PropertyType",
    "EventType",
    "EventStatus",

    # users
    "User",
    "UserRead",
    "UserCreate",
    "UserCreateWithMagicLink",
    "UserUpdate",

    # families
    "Family",
    "FamilyRead",

    # join requests
    "JoinRequest",
    "JoinRequestCreate",
    "JoinRequestReview",
    "JoinRequestRead",

    # properties
    "Property",
    "PropertyWrite",
    "PropertySummary",
    "PropertyRead",
    "PropertyDetail",

    # events
    "Event",
    "EventWrite",
    "EventRead",
    "EventDetail",
]
