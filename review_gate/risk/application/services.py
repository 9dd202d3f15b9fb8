"""
Risk Application Services
=========================

Application services orchestrate business logic and coordinate between
domain value objects and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from review_gate.core import ResourceNotFoundException, ValidationException
from review_gate.risk.application.dto import AssessRiskInput, ApprovalSettingsUpdate
from review_gate.risk.domain import (
    ApprovalPolicyEvaluator,
    Artifact,
    RiskAssessment,
    RiskFactors,
    RiskScorer,
    ThresholdConfig,
)
from review_gate.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IProjectRepository(ABC):
    """Interface for project lookups."""

    @abstractmethod
    async def exists(self, project_id: str) -> bool:
        """Check if a project exists."""


class IArtifactRepository(ABC):
    """Interface for artifact reads."""

    @abstractmethod
    async def get_with_project_settings(self, artifact_id: str) -> Optional[Artifact]:
        """Get an artifact together with its project's stored approval settings."""

    @abstractmethod
    async def count_decisions(
        self,
        project_id: str,
        source_agent: str,
        artifact_type: str,
        since: Optional[datetime] = None
    ) -> Tuple[int, int]:
        """
        Count decided artifacts matching (project, agent, type).

        Returns:
            Tuple of (decided_count, rejected_count)
        """


class IApprovalSettingsRepository(ABC):
    """Interface for per-project approval settings."""

    @abstractmethod
    async def get_by_project_id(self, project_id: str) -> Optional[ThresholdConfig]:
        """Get stored settings, None if the project has none."""

    @abstractmethod
    async def upsert(self, project_id: str, config: ThresholdConfig) -> ThresholdConfig:
        """Create or replace the settings row for a project."""


class IThresholdDefaultsProvider(ABC):
    """Interface for the defaults used when a project has no stored settings."""

    @abstractmethod
    def get_defaults(self) -> ThresholdConfig:
        """Get default approval settings."""


class BuiltinDefaultsProvider(IThresholdDefaultsProvider):
    """Built-in defaults: thresholds 25/50/75, SLA hours 1/4/24/48."""

    def get_defaults(self) -> ThresholdConfig:
        return ThresholdConfig()


# ========== Application Services ==========

class RiskAssessmentService:
    """
    Service for scoring artifacts and managing project approval settings.

    Reads only, except for update_project_settings.
    """

    def __init__(
        self,
        artifact_repository: IArtifactRepository,
        settings_repository: IApprovalSettingsRepository,
        project_repository: IProjectRepository,
        defaults_provider: Optional[IThresholdDefaultsProvider] = None,
        history_window_days: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._artifact_repo = artifact_repository
        self._settings_repo = settings_repository
        self._project_repo = project_repository
        self._defaults = defaults_provider or BuiltinDefaultsProvider()
        self._history_window_days = history_window_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_project_settings(self, project_id: str) -> ThresholdConfig:
        """
        Get approval settings for a project.

        Falls back to a complete default config when nothing is stored.
        Never writes.
        """
        stored = await self._settings_repo.get_by_project_id(project_id)
        if stored is not None:
            return stored
        return self._defaults.get_defaults()

    async def update_project_settings(
        self,
        project_id: str,
        patch: Union[ApprovalSettingsUpdate, Dict[str, Any]]
    ) -> ThresholdConfig:
        """
        Merge a patch onto the current (or default) settings and persist it.

        Raises:
            ResourceNotFoundException: project does not exist
            ValidationException: thresholds out of range or not ascending;
                nothing is written
        """
        if not await self._project_repo.exists(project_id):
            raise ResourceNotFoundException("Project", project_id)

        if isinstance(patch, ApprovalSettingsUpdate):
            patch = patch.model_dump(exclude_unset=True)

        current = await self.get_project_settings(project_id)
        try:
            merged = current.merge(patch)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            raise ValidationException(
                "Invalid approval settings: " + "; ".join(err["msg"] for err in errors),
                details={"project_id": project_id, "errors": errors}
            ) from e

        saved = await self._settings_repo.upsert(project_id, merged)

        logger.info(
            "Approval settings updated",
            extra={"project_id": project_id, "fields": sorted(patch.keys())}
        )
        return saved

    async def assess_risk(self, data: AssessRiskInput) -> RiskAssessment:
        """
        Score an artifact and derive its approval requirements.

        Args:
            data: Artifact attributes to score

        Returns:
            RiskAssessment with score, level, factor breakdown and requirements
        """
        settings = await self.get_project_settings(data.project_id)

        artifact_type_score = RiskScorer.artifact_type_score(data.artifact_type)
        scope_score = RiskScorer.scope_score(data.files_affected)
        confidence_score = RiskScorer.confidence_score(data.ai_confidence_score)
        decided, rejected = await self._decision_history(
            data.project_id, data.source_agent, data.artifact_type
        )
        historical_rejection_score = RiskScorer.historical_rejection_score(rejected, decided)

        risk_score = RiskScorer.weighted_score(
            artifact_type_score,
            scope_score,
            confidence_score,
            historical_rejection_score
        )
        risk_level = RiskScorer.map_score_to_level(risk_score, settings)
        requirements = ApprovalPolicyEvaluator.evaluate(
            risk_level, data.ai_confidence_score, settings
        )

        factors = RiskFactors(
            artifact_type_score=artifact_type_score,
            scope_score=scope_score,
            confidence_score=confidence_score,
            historical_rejection_score=historical_rejection_score,
            details={
                "artifact_type": data.artifact_type,
                "files_affected": data.files_affected,
                "ai_confidence": data.ai_confidence_score,
                "historical_rejection_rate": round(rejected / decided, 4) if decided else None,
            }
        )

        logger.info(
            "Risk assessment completed",
            extra={
                "project_id": data.project_id,
                "artifact_type": data.artifact_type,
                "risk_score": risk_score,
                "risk_level": risk_level,
                "can_auto_approve": requirements.can_auto_approve,
            }
        )

        return RiskAssessment(
            risk_score=risk_score,
            risk_level=risk_level,
            risk_factors=factors,
            approval_requirements=requirements
        )

    def map_score_to_level(self, score: float, config: Optional[ThresholdConfig] = None) -> str:
        """Map a score to a risk level using the given config or the defaults."""
        return RiskScorer.map_score_to_level(score, config or self._defaults.get_defaults())

    async def _decision_history(
        self,
        project_id: str,
        source_agent: str,
        artifact_type: str
    ) -> Tuple[int, int]:
        """(decided, rejected) counts for matching artifacts."""
        since = None
        if self._history_window_days:
            since = self._clock() - timedelta(days=self._history_window_days)

        return await self._artifact_repo.count_decisions(
            project_id, source_agent, artifact_type, since
        )
