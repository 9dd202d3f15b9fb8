"""
SLA Domain Entities
====================

Pure Python domain entities for SLA tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from review_gate.config import SLAStatus
from review_gate.core.exceptions import DomainException
from review_gate.sla.domain.value_objects import DEFAULT_WARNING_THRESHOLD

T = TypeVar("T")


@dataclass
class SLATracking:
    """
    Review deadline for one artifact.

    Exactly one per artifact. Never deleted: completion stamps
    completed_at and freezes the status.
    """

    artifact_id: str
    risk_level: str
    deadline_hours: float
    deadline: datetime
    status: str
    created_at: datetime
    updated_at: datetime

    id: Optional[str] = None
    project_id: Optional[str] = None
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD
    warning_sent_at: Optional[datetime] = None

    # Escalation info, set together
    escalated_at: Optional[datetime] = None
    escalated_to_id: Optional[str] = None
    escalation_reason: Optional[str] = None

    completed_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate tracking on initialization."""
        if self.deadline < self.created_at:
            raise DomainException(
                "deadline cannot be before created_at",
                details={"artifact_id": self.artifact_id}
            )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def is_escalated(self) -> bool:
        return self.status == SLAStatus.ESCALATED

    def escalate(self, escalated_to_id: str, reason: str, timestamp: datetime) -> None:
        """Route to a reviewer. Terminal: status never leaves escalated."""
        self.status = SLAStatus.ESCALATED
        self.escalated_at = timestamp
        self.escalated_to_id = escalated_to_id
        self.escalation_reason = reason
        self.updated_at = timestamp

    def transition_to(self, status: str, timestamp: datetime) -> None:
        """Persistable status change; stamps the first warning."""
        if status == SLAStatus.APPROACHING_SLA and self.warning_sent_at is None:
            self.warning_sent_at = timestamp
        self.status = status
        self.updated_at = timestamp

    def complete(self, timestamp: datetime) -> None:
        """Mark the review decision as made."""
        if self.completed_at is None:
            self.completed_at = timestamp
            self.updated_at = timestamp


@dataclass
class SLAStatusResult:
    """Live SLA status of one artifact at a point in time."""

    artifact_id: str
    status: str
    deadline: datetime
    deadline_hours: float
    percentage_elapsed: float
    time_remaining_seconds: float
    is_overdue: bool
    is_approaching: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "artifact_id": self.artifact_id,
            "status": self.status,
            "deadline": self.deadline.isoformat(),
            "deadline_hours": self.deadline_hours,
            "percentage_elapsed": self.percentage_elapsed,
            "time_remaining_seconds": self.time_remaining_seconds,
            "is_overdue": self.is_overdue,
            "is_approaching": self.is_approaching,
        }


@dataclass
class SLAPage(Generic[T]):
    """One page of a tracking queue."""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass
class SLAMetrics:
    """
    Rollup over resolved tracking rows in a time window.

    compliance_rate is 100 when there is no data.
    """

    total: int
    within_sla: int
    breached: int
    escalated: int
    average_resolution_seconds: float
    compliance_rate: float = field(init=False)

    def __post_init__(self):
        """Calculate compliance rate."""
        if self.total == 0:
            self.compliance_rate = 100.0
        else:
            self.compliance_rate = round(self.within_sla / self.total * 100, 2)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "within_sla": self.within_sla,
            "breached": self.breached,
            "escalated": self.escalated,
            "average_resolution_seconds": self.average_resolution_seconds,
            "compliance_rate": self.compliance_rate,
        }


@dataclass
class SLATransition:
    """A status change observed by the evaluation sweep."""

    artifact_id: str
    project_id: Optional[str]
    previous_status: str
    status: str
    observed_at: datetime


@dataclass
class SLANotification:
    """
    Something a reviewer should hear about.

    The core decides when to notify; delivery belongs to the sink.
    """

    artifact_id: str
    project_id: Optional[str]
    status: str
    deadline: datetime
    triggered_at: datetime
    suggested_escalation_to: Optional[str] = None
    notification_sent: bool = False
    notification_sent_at: Optional[datetime] = None

    def mark_notification_sent(self, timestamp: datetime) -> None:
        self.notification_sent = True
        self.notification_sent_at = timestamp
