"""
database/models.py

Model registry. Importing this module registers every ORM table on
Base.metadata, which Alembic and the test schema builder rely on.
"""

from onehive.database.base import Base
from onehive.review.models import Review
from onehive.service_request.models import ServiceRequest
from onehive.tracking.models import Tracking, TrackingPoint
from onehive.worker.models import Worker

__all__ = ["Base", "Review", "ServiceRequest", "Tracking", "TrackingPoint", "Worker"]
