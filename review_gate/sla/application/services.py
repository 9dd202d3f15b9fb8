"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from review_gate.config import (
    OPEN_SLA_STATUSES,
    OVERDUE_SLA_STATUSES,
    SLAStatus,
)
from review_gate.core import DomainException, ResourceNotFoundException, ValidationException
from review_gate.risk.application.services import (
    BuiltinDefaultsProvider,
    IApprovalSettingsRepository,
    IArtifactRepository,
    IThresholdDefaultsProvider,
)
from review_gate.risk.domain import Artifact, ThresholdConfig
from review_gate.shared.infrastructure.logging import get_logger
from review_gate.sla.application.dto import EscalateInput
from review_gate.sla.domain import (
    DEFAULT_WARNING_THRESHOLD,
    SLACalculator,
    SLADeadline,
    SLAMetrics,
    SLANotification,
    SLAPage,
    SLAStatusResult,
    SLATracking,
    SLATransition,
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ISLATrackingRepository(ABC):
    """Interface for SLA tracking data access."""

    @abstractmethod
    async def get_by_artifact_id(self, artifact_id: str) -> Optional[SLATracking]:
        """Get the tracking row for an artifact."""

    @abstractmethod
    async def upsert(self, tracking: SLATracking) -> SLATracking:
        """Create the row or replace every field of the existing one."""

    @abstractmethod
    async def update(self, tracking: SLATracking) -> SLATracking:
        """Persist changes to an existing row."""

    @abstractmethod
    async def list_by_status(
        self,
        statuses: List[str],
        project_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> List[SLATracking]:
        """
        List uncompleted rows in the given statuses.

        Ordered by deadline ascending (most urgent first).
        """

    @abstractmethod
    async def count_by_status(
        self,
        statuses: List[str],
        project_id: Optional[str] = None
    ) -> int:
        """Count uncompleted rows in the given statuses."""

    @abstractmethod
    async def list_resolved_created_since(
        self,
        project_id: str,
        since: datetime
    ) -> List[Tuple[SLATracking, Artifact]]:
        """Rows created at or after `since` whose artifact is approved or rejected."""


class INotificationSink(ABC):
    """Interface for delivering SLA notifications."""

    @abstractmethod
    async def send(self, notification: SLANotification) -> bool:
        """
        Deliver a notification.

        Returns:
            True if delivered
        """


# ========== Application Services ==========

class SLAService:
    """
    Service for SLA deadlines and tracking rows.

    Status is derived from the injected clock on every read and only
    moves forward; a change is persisted when observed.
    """

    def __init__(
        self,
        tracking_repository: ISLATrackingRepository,
        artifact_repository: IArtifactRepository,
        settings_repository: IApprovalSettingsRepository,
        defaults_provider: Optional[IThresholdDefaultsProvider] = None,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._tracking_repo = tracking_repository
        self._artifact_repo = artifact_repository
        self._settings_repo = settings_repository
        self._defaults = defaults_provider or BuiltinDefaultsProvider()
        self._warning_threshold = warning_threshold
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._clock()

    async def get_project_settings(self, project_id: Optional[str]) -> ThresholdConfig:
        """Stored settings for a project, defaults otherwise."""
        if project_id:
            stored = await self._settings_repo.get_by_project_id(project_id)
            if stored is not None:
                return stored
        return self._defaults.get_defaults()

    async def calculate_deadline(
        self,
        project_id: Optional[str],
        risk_level: str,
        start: Optional[datetime] = None
    ) -> SLADeadline:
        """
        Resolve the SLA window for a risk level.

        Args:
            project_id: Project whose settings apply (defaults if None or unset)
            risk_level: low, medium, high or critical
            start: Window start, now if omitted

        Raises:
            ValidationException: unknown risk level
        """
        settings = await self.get_project_settings(project_id)
        return self._deadline_from(settings, project_id, risk_level, start or self.now())

    async def create_sla_tracking(self, artifact_id: str, risk_level: str) -> SLATracking:
        """
        Start (or restart) SLA tracking for an artifact.

        Re-creating resets the window, status, warning, escalation and
        completion of the existing row.
        Projects with SLA warnings turned off get a warning threshold of 100,
        so the row goes straight from within_sla to breached.

        Raises:
            ResourceNotFoundException: artifact does not exist
            ValidationException: unknown risk level
        """
        artifact = await self._artifact_repo.get_with_project_settings(artifact_id)
        if artifact is None:
            raise ResourceNotFoundException("Artifact", artifact_id)

        now = self.now()
        settings = artifact.project_settings or self._defaults.get_defaults()
        window = self._deadline_from(settings, artifact.project_id, risk_level, now)

        tracking = SLATracking(
            artifact_id=artifact_id,
            project_id=artifact.project_id,
            risk_level=risk_level,
            deadline_hours=window.hours,
            deadline=window.deadline,
            status=SLAStatus.WITHIN_SLA,
            warning_threshold=self._warning_threshold if settings.notify_on_sla_warning else 100,
            created_at=now,
            updated_at=now
        )
        saved = await self._tracking_repo.upsert(tracking)

        logger.info(
            "SLA tracking created",
            extra={
                "artifact_id": artifact_id,
                "project_id": artifact.project_id,
                "risk_level": risk_level,
                "deadline": window.deadline.isoformat(),
            }
        )
        return saved

    async def get_sla_status(self, artifact_id: str) -> SLAStatusResult:
        """
        Live SLA status for an artifact.

        Raises:
            ResourceNotFoundException: no tracking row for the artifact
        """
        tracking = await self._tracking_repo.get_by_artifact_id(artifact_id)
        if tracking is None:
            raise ResourceNotFoundException("SLA tracking", artifact_id)

        previous = tracking.status
        result = self._observe(tracking, self.now())
        if tracking.status != previous:
            await self._tracking_repo.update(tracking)
            logger.info(
                "SLA status changed",
                extra={
                    "artifact_id": artifact_id,
                    "previous_status": previous,
                    "status": tracking.status,
                }
            )
        return result

    async def get_approaching_slas(
        self,
        project_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> SLAPage[SLATracking]:
        """Uncompleted rows still open (within or approaching), most urgent first."""
        return await self._page(OPEN_SLA_STATUSES, project_id, page, limit)

    async def get_breached_slas(
        self,
        project_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> SLAPage[SLATracking]:
        """Uncompleted rows that are breached or escalated, most overdue first."""
        return await self._page(OVERDUE_SLA_STATUSES, project_id, page, limit)

    async def escalate(self, data: EscalateInput) -> SLATracking:
        """
        Escalate an artifact's SLA to a reviewer.

        Raises:
            ResourceNotFoundException: no tracking row for the artifact
        """
        tracking = await self._tracking_repo.get_by_artifact_id(data.artifact_id)
        if tracking is None:
            raise ResourceNotFoundException("SLA tracking", data.artifact_id)

        tracking.escalate(data.escalated_to_id, data.reason, self.now())
        saved = await self._tracking_repo.update(tracking)

        logger.warning(
            "SLA escalated",
            extra={
                "artifact_id": data.artifact_id,
                "escalated_to_id": data.escalated_to_id,
                "reason": data.reason,
            }
        )
        return saved

    async def complete_sla_tracking(self, artifact_id: str) -> Optional[SLATracking]:
        """
        Stop tracking once a review decision is made.

        Missing rows are ignored. The status observed at completion is kept.
        """
        tracking = await self._tracking_repo.get_by_artifact_id(artifact_id)
        if tracking is None:
            logger.debug("No SLA tracking to complete", extra={"artifact_id": artifact_id})
            return None
        if tracking.is_completed:
            return tracking

        now = self.now()
        self._observe(tracking, now)
        tracking.complete(now)
        saved = await self._tracking_repo.update(tracking)

        logger.info(
            "SLA tracking completed",
            extra={"artifact_id": artifact_id, "status": saved.status}
        )
        return saved

    def _deadline_from(
        self,
        settings: ThresholdConfig,
        project_id: Optional[str],
        risk_level: str,
        start: datetime
    ) -> SLADeadline:
        try:
            hours = settings.sla_hours_for(risk_level)
        except DomainException as e:
            raise ValidationException(e.message, details=e.details) from e

        return SLADeadline(
            risk_level=risk_level,
            hours=hours,
            deadline=SLACalculator.calculate_deadline(start, hours),
            project_id=project_id
        )

    def _observe(self, tracking: SLATracking, now: datetime) -> SLAStatusResult:
        """Advance the row's status to what the clock implies and report it."""
        # A completed row is read as of its completion time
        at = tracking.completed_at if tracking.is_completed else now

        if not tracking.is_completed:
            derived = SLACalculator.derive_status(
                tracking.created_at, tracking.deadline, at, tracking.warning_threshold
            )
            status = SLACalculator.advance_status(tracking.status, derived)
            if status != tracking.status:
                tracking.transition_to(status, now)

        percentage = SLACalculator.percentage_elapsed(tracking.created_at, tracking.deadline, at)
        is_overdue = at > tracking.deadline

        return SLAStatusResult(
            artifact_id=tracking.artifact_id,
            status=tracking.status,
            deadline=tracking.deadline,
            deadline_hours=tracking.deadline_hours,
            percentage_elapsed=round(percentage, 2),
            time_remaining_seconds=SLACalculator.time_remaining_seconds(tracking.deadline, at),
            is_overdue=is_overdue,
            is_approaching=not is_overdue and percentage >= tracking.warning_threshold
        )

    async def _page(
        self,
        statuses: List[str],
        project_id: Optional[str],
        page: int,
        limit: int
    ) -> SLAPage[SLATracking]:
        page = max(1, page)
        limit = max(1, limit)
        items = await self._tracking_repo.list_by_status(
            statuses, project_id, offset=(page - 1) * limit, limit=limit
        )
        total = await self._tracking_repo.count_by_status(statuses, project_id)
        return SLAPage(items=items, total=total, page=page, limit=limit)


class SLAMetricsService:
    """
    Service for SLA compliance rollups.

    Counts tracking rows created inside the window whose artifact is decided.
    """

    def __init__(
        self,
        tracking_repository: ISLATrackingRepository,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._tracking_repo = tracking_repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_sla_metrics(self, project_id: str, days: int = 30) -> SLAMetrics:
        """
        Calculate SLA metrics for a project.

        Args:
            project_id: Project to aggregate
            days: Look-back window in days

        Returns:
            SLAMetrics (compliance 100 when no row in the window is decided)
        """
        if days < 1:
            raise ValidationException("days must be at least 1", details={"days": days})

        since = self._clock() - timedelta(days=days)
        rows = await self._tracking_repo.list_resolved_created_since(project_id, since)

        within = breached = escalated = 0
        durations = []
        for tracking, artifact in rows:
            if tracking.status == SLAStatus.BREACHED:
                breached += 1
            elif tracking.status == SLAStatus.ESCALATED:
                escalated += 1
            else:
                within += 1

            started = artifact.submitted_at or tracking.created_at
            durations.append((artifact.resolved_at - started).total_seconds())

        average = round(sum(durations) / len(durations), 2) if durations else 0.0

        return SLAMetrics(
            total=len(rows),
            within_sla=within,
            breached=breached,
            escalated=escalated,
            average_resolution_seconds=average
        )


class SLAEvaluationService:
    """
    Service for sweeping open SLAs and notifying on status changes.

    Run periodically by an external scheduler. Never escalates on its own;
    breached notifications carry a suggested escalation target instead.
    """

    def __init__(
        self,
        sla_service: SLAService,
        notification_sink: INotificationSink,
        batch_size: int = 100
    ):
        self._sla_service = sla_service
        self._sink = notification_sink
        self._batch_size = max(1, batch_size)

    async def evaluate_open_trackings(
        self,
        project_id: Optional[str] = None
    ) -> List[SLATransition]:
        """
        Re-evaluate every open tracking row.

        Returns:
            Status transitions observed during the sweep
        """
        # Collect first: transitions move rows between queues and would shift pages
        pending: List[SLATracking] = []
        page = 1
        while True:
            batch = await self._sla_service.get_approaching_slas(
                project_id, page=page, limit=self._batch_size
            )
            pending.extend(batch.items)
            if page >= batch.total_pages:
                break
            page += 1

        transitions = []
        settings_cache: Dict[Optional[str], ThresholdConfig] = {}

        for tracking in pending:
            try:
                result = await self._sla_service.get_sla_status(tracking.artifact_id)
            except ResourceNotFoundException:
                continue
            if result.status == tracking.status:
                continue

            transition = SLATransition(
                artifact_id=tracking.artifact_id,
                project_id=tracking.project_id,
                previous_status=tracking.status,
                status=result.status,
                observed_at=self._sla_service.now()
            )
            transitions.append(transition)

            if tracking.project_id not in settings_cache:
                settings_cache[tracking.project_id] = await self._sla_service.get_project_settings(
                    tracking.project_id
                )
            await self._notify(transition, result, settings_cache[tracking.project_id])

        logger.info(
            "SLA evaluation completed",
            extra={
                "project_id": project_id,
                "evaluated": len(pending),
                "transitions": len(transitions),
            }
        )
        return transitions

    async def _notify(
        self,
        transition: SLATransition,
        result: SLAStatusResult,
        settings: ThresholdConfig
    ) -> Optional[SLANotification]:
        if transition.status == SLAStatus.APPROACHING_SLA:
            if not settings.notify_on_sla_warning:
                return None
            suggested = None
        elif transition.status == SLAStatus.BREACHED:
            suggested = None
            if settings.escalation_enabled and settings.escalation_chain:
                suggested = settings.escalation_chain[0]
        else:
            return None

        notification = SLANotification(
            artifact_id=transition.artifact_id,
            project_id=transition.project_id,
            status=transition.status,
            deadline=result.deadline,
            triggered_at=transition.observed_at,
            suggested_escalation_to=suggested
        )
        if await self._sink.send(notification):
            notification.mark_notification_sent(self._sla_service.now())
        return notification
