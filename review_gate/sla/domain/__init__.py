"""
SLA Domain Layer
================

Domain layer for SLA tracking module.

Contains:
- Entities: SLATracking, SLAStatusResult, SLAMetrics, SLAPage,
  SLATransition, SLANotification
- Value Objects: SLADeadline
- Domain Services: SLACalculator

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from review_gate.sla.domain.entities import (
    SLAMetrics,
    SLANotification,
    SLAPage,
    SLAStatusResult,
    SLATracking,
    SLATransition,
)
from review_gate.sla.domain.value_objects import (
    DEFAULT_WARNING_THRESHOLD,
    SLACalculator,
    SLADeadline,
)

__all__ = [
    # Entities
    "SLAMetrics",
    "SLANotification",
    "SLAPage",
    "SLAStatusResult",
    "SLATracking",
    "SLATransition",
    # Value Objects & Services
    "DEFAULT_WARNING_THRESHOLD",
    "SLACalculator",
    "SLADeadline",
]
