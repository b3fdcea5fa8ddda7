"""
onehive/database/enums.py

Enumerations

Defines enumerations used across the platform:
- UserRole: Roles carried by identity-service tokens
- ServiceType: Profession vocabulary shared by requests and workers
- RequestStatus: Service-request lifecycle states
- TrackingStatus: Live-tracking states
- VerificationStatus / ApplicationStatus: Worker onboarding states
- ReviewType: Direction of a rating
"""

from enum import Enum


# ---------------------------------------------------
# User Role Enumeration
# ---------------------------------------------------
class UserRole(str, Enum):
    """
    Enum representing user roles for access control.
    """

    CUSTOMER = "customer"
    WORKER = "worker"
    SHOP = "shop"
    ADMIN = "admin"


# ---------------------------------------------------
# Service Type Enumeration
# ---------------------------------------------------
class ServiceType(str, Enum):
    """
    Profession categories. Worker.profession must use the same vocabulary
    as ServiceRequest.service_type for matching to work.
    """

    PLUMBER = "plumber"
    ELECTRICIAN = "electrician"
    CARPENTER = "carpenter"
    PAINTER = "painter"
    CLEANER = "cleaner"
    DRIVER = "driver"
    MECHANIC = "mechanic"
    APPLIANCE = "appliance"
    PEST_CONTROL = "pest_control"
    OTHER = "other"


# ---------------------------------------------------
# Service Request Status Enumeration
# ---------------------------------------------------
class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ---------------------------------------------------
# Tracking Status Enumeration
# ---------------------------------------------------
class TrackingStatus(str, Enum):
    EN_ROUTE = "en_route"
    ARRIVED = "arrived"
    WORKING = "working"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(TrackingStatus).index(self)


# ---------------------------------------------------
# Worker Onboarding Enumerations
# ---------------------------------------------------
class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------
# Review Type Enumeration
# ---------------------------------------------------
class ReviewType(str, Enum):
    CUSTOMER_TO_WORKER = "customer_to_worker"
    WORKER_TO_CUSTOMER = "worker_to_customer"
