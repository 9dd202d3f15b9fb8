"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA tracking:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- External: Notification sinks
"""

from review_gate.sla.infrastructure.models import SLATrackingModel
from review_gate.sla.infrastructure.repositories import (
    SQLAlchemySLATrackingRepository,
    tracking_from_model,
)
from review_gate.sla.infrastructure.external import (
    LoggingNotificationSink,
)

__all__ = [
    "SLATrackingModel",
    "SQLAlchemySLATrackingRepository",
    "tracking_from_model",
    "LoggingNotificationSink",
]
