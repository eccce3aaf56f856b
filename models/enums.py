from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Application role, stored on users and requested on join requests."""

    ADMIN = "ADMIN"
    PROPERTY_MANAGER = "PROPERTY_MANAGER"
    OWNER = "OWNER"
    TENANT = "TENANT"
    SERVICE_PROVIDER = "SERVICE_PROVIDER"


# -----------------------------------------------------
# JOIN REQUEST STATUS
# -----------------------------------------------------
class RequestStatus(BaseStrEnum):
    """
    PENDING -> APPROVED | REJECTED.
    APPROVED -> PENDING only as the rollback of a failed provisioning.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# -----------------------------------------------------
# FAMILY STATUS
# -----------------------------------------------------
class FamilyStatus(BaseStrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# -----------------------------------------------------
# PROPERTY TYPE
# -----------------------------------------------------
class PropertyType(BaseStrEnum):
    BUILDING = "BUILDING"
    UNIT = "UNIT"
    COMMERCIAL_SPACE = "COMMERCIAL_SPACE"
    PARKING_SPOT = "PARKING_SPOT"
    STORAGE = "STORAGE"
    LAND = "LAND"


# -----------------------------------------------------
# EVENTS
# -----------------------------------------------------
class EventType(BaseStrEnum):
    LEASE_AGREEMENT = "LEASE_AGREEMENT"
    RENT_PAYMENT = "RENT_PAYMENT"
    MAINTENANCE_REQUEST = "MAINTENANCE_REQUEST"
    INSPECTION = "INSPECTION"
    MOVE_IN = "MOVE_IN"
    MOVE_OUT = "MOVE_OUT"
    CONTRACT_RENEWAL = "CONTRACT_RENEWAL"
    TERMINATION_NOTICE = "TERMINATION_NOTICE"


class EventStatus(BaseStrEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
