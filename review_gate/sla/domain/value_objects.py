"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from review_gate.config import SLAStatus, SLA_STATUS_ORDER


DEFAULT_WARNING_THRESHOLD = 75


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all deadline and status arithmetic in one place.
    Callers pass `now` explicitly so time is always observed from outside.
    """

    @staticmethod
    def calculate_deadline(start: datetime, hours: float) -> datetime:
        """Deadline is start plus the SLA window."""
        return start + timedelta(hours=hours)

    @staticmethod
    def percentage_elapsed(
        created_at: datetime,
        deadline: datetime,
        now: datetime
    ) -> float:
        """
        Share of the SLA window already used, clamped to 0-100.

        A zero-length window counts as fully elapsed.
        """
        total = (deadline - created_at).total_seconds()
        if total <= 0:
            return 100.0
        elapsed = (now - created_at).total_seconds()
        return max(0.0, min(100.0, elapsed / total * 100))

    @staticmethod
    def time_remaining_seconds(deadline: datetime, now: datetime) -> float:
        """Seconds until the deadline, 0 once overdue."""
        return max(0.0, (deadline - now).total_seconds())

    @staticmethod
    def derive_status(
        created_at: datetime,
        deadline: datetime,
        now: datetime,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD
    ) -> str:
        """
        Status implied by the clock alone.

        Returns:
            breached once now is past the deadline, approaching_sla once the
            warning threshold is reached, within_sla otherwise
        """
        if now > deadline:
            return SLAStatus.BREACHED
        if SLACalculator.percentage_elapsed(created_at, deadline, now) >= warning_threshold:
            return SLAStatus.APPROACHING_SLA
        return SLAStatus.WITHIN_SLA

    @staticmethod
    def advance_status(persisted: str, derived: str) -> str:
        """
        Combine stored and clock-derived status.

        Status only moves forward (within -> approaching -> breached ->
        escalated), so the later of the two wins.
        """
        if SLA_STATUS_ORDER.index(derived) > SLA_STATUS_ORDER.index(persisted):
            return derived
        return persisted


@dataclass(frozen=True)
class SLADeadline:
    """
    Resolved SLA window for a risk level.

    Returned by deadline calculation before any tracking row exists.
    """
    risk_level: str
    hours: float
    deadline: datetime
    project_id: Optional[str] = None
