"""
Risk Value Objects
==================

Immutable value objects and pure calculators for the risk domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from review_gate.config import ArtifactType, RiskLevel, RISK_LEVEL_ORDER
from review_gate.core.exceptions import DomainException


RiskLevelStr = Literal["low", "medium", "high", "critical"]

# Base risk by artifact type (0-100). Scripts change test execution, test
# cases are mostly documentation.
ARTIFACT_TYPE_BASE_SCORES: Dict[str, int] = {
    ArtifactType.SCRIPT: 70,
    ArtifactType.TEST_CASE: 20,
    ArtifactType.BUG_ANALYSIS: 40,
    ArtifactType.CHAT_SUGGESTION: 30,
    ArtifactType.SELF_HEALING_FIX: 60,
}
UNKNOWN_ARTIFACT_TYPE_SCORE = 50

# Used when the agent reported no confidence at all
MISSING_CONFIDENCE_SCORE = 30

# (max files affected, score); anything above the last tier scores SCOPE_MAX_SCORE
SCOPE_TIERS = [(1, 0), (3, 20), (5, 40), (10, 60)]
SCOPE_MAX_SCORE = 80

FACTOR_WEIGHTS: Dict[str, float] = {
    "artifact_type": 0.40,
    "scope": 0.20,
    "confidence": 0.25,
    "historical_rejection": 0.15,
}


class ThresholdConfig(BaseModel):
    """
    Per-project approval configuration.

    Risk thresholds must satisfy low < medium < high. The check runs on
    every construction, so an invalid configuration cannot exist.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    low_risk_threshold: int = Field(default=25, ge=0, le=100)
    medium_risk_threshold: int = Field(default=50, ge=0, le=100)
    high_risk_threshold: int = Field(default=75, ge=0, le=100)

    low_risk_sla_hours: float = Field(default=1, gt=0)
    medium_risk_sla_hours: float = Field(default=4, gt=0)
    high_risk_sla_hours: float = Field(default=24, gt=0)
    critical_risk_sla_hours: float = Field(default=48, gt=0)

    auto_approve_enabled: bool = True
    auto_approve_max_risk: RiskLevelStr = RiskLevel.LOW
    auto_approve_min_confidence: float = Field(default=90, ge=0, le=100)

    notify_on_submission: bool = True
    notify_on_approval: bool = True
    notify_on_rejection: bool = True
    notify_on_sla_warning: bool = True

    escalation_enabled: bool = True
    escalation_chain: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "ThresholdConfig":
        """Thresholds must be strictly ascending."""
        if not (self.low_risk_threshold < self.medium_risk_threshold < self.high_risk_threshold):
            raise ValueError(
                "Risk thresholds must be in ascending order: low < medium < high"
            )
        return self

    def sla_hours_for(self, risk_level: str) -> float:
        """Get the SLA window in hours for a risk level."""
        hours = {
            RiskLevel.LOW: self.low_risk_sla_hours,
            RiskLevel.MEDIUM: self.medium_risk_sla_hours,
            RiskLevel.HIGH: self.high_risk_sla_hours,
            RiskLevel.CRITICAL: self.critical_risk_sla_hours,
        }
        if risk_level not in hours:
            raise DomainException(
                f"Unknown risk level: {risk_level}",
                details={"risk_level": risk_level}
            )
        return hours[risk_level]

    def merge(self, patch: Dict[str, Any]) -> "ThresholdConfig":
        """
        Return a new config with the patch applied.

        None values in the patch are ignored. Raises pydantic's
        ValidationError if the merged result is invalid.
        """
        updates = {k: v for k, v in patch.items() if v is not None}
        return ThresholdConfig(**{**self.model_dump(), **updates})


@dataclass(frozen=True)
class RiskFactors:
    """Named breakdown of the factor scores behind a risk score."""
    artifact_type_score: float
    scope_score: float
    confidence_score: float
    historical_rejection_score: float
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ApprovalRequirements:
    """What a reviewer (or the auto-approver) needs to do for an artifact."""
    required_approvals: int
    requires_admin: bool
    requires_lead: bool
    can_auto_approve: bool
    auto_approve_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


# Review requirements per risk level before auto-approval is considered
LEVEL_REQUIREMENTS: Dict[str, Dict[str, Any]] = {
    RiskLevel.LOW: {"required_approvals": 1, "requires_admin": False, "requires_lead": False},
    RiskLevel.MEDIUM: {"required_approvals": 1, "requires_admin": False, "requires_lead": False},
    RiskLevel.HIGH: {"required_approvals": 2, "requires_admin": False, "requires_lead": True},
    RiskLevel.CRITICAL: {"required_approvals": 2, "requires_admin": True, "requires_lead": True},
}


def severity(risk_level: str) -> int:
    """Position of a risk level in severity order (low=0 ... critical=3)."""
    return RISK_LEVEL_ORDER.index(risk_level)


class RiskScorer:
    """
    Pure functions for risk scoring.

    Each factor produces a 0-100 score; the overall score is their
    weighted sum, rounded and clamped to 0-100.
    """

    @staticmethod
    def artifact_type_score(artifact_type: str) -> int:
        return ARTIFACT_TYPE_BASE_SCORES.get(artifact_type, UNKNOWN_ARTIFACT_TYPE_SCORE)

    @staticmethod
    def scope_score(files_affected: Optional[int]) -> int:
        """Broader changes score higher. Missing or zero counts as a single file."""
        if not files_affected or files_affected <= 1:
            return 0
        for max_files, score in SCOPE_TIERS:
            if files_affected <= max_files:
                return score
        return SCOPE_MAX_SCORE

    @staticmethod
    def confidence_score(ai_confidence: Optional[float]) -> float:
        """Inverse of confidence: 100% confident is 0 risk, 0% confident is 100."""
        if ai_confidence is None:
            return MISSING_CONFIDENCE_SCORE
        return max(0.0, min(100.0, 100 - ai_confidence))

    @staticmethod
    def historical_rejection_score(rejected: int, total: int) -> float:
        """Rejection rate as a percentage; 0 with no history."""
        if total <= 0:
            return 0.0
        return min(100.0, rejected / total * 100)

    @staticmethod
    def weighted_score(
        artifact_type_score: float,
        scope_score: float,
        confidence_score: float,
        historical_rejection_score: float
    ) -> int:
        weighted = (
            artifact_type_score * FACTOR_WEIGHTS["artifact_type"]
            + scope_score * FACTOR_WEIGHTS["scope"]
            + confidence_score * FACTOR_WEIGHTS["confidence"]
            + historical_rejection_score * FACTOR_WEIGHTS["historical_rejection"]
        )
        return int(round(min(100.0, max(0.0, weighted))))

    @staticmethod
    def map_score_to_level(score: float, config: Optional[ThresholdConfig] = None) -> str:
        """
        Map a 0-100 score onto a risk level.

        Each band includes its upper boundary: with the defaults,
        25 is low, 26 is medium, 75 is high and 76 is critical.
        """
        config = config or ThresholdConfig()
        if score <= config.low_risk_threshold:
            return RiskLevel.LOW
        if score <= config.medium_risk_threshold:
            return RiskLevel.MEDIUM
        if score <= config.high_risk_threshold:
            return RiskLevel.HIGH
        return RiskLevel.CRITICAL


class ApprovalPolicyEvaluator:
    """Decides whether an assessed artifact may skip human review."""

    @staticmethod
    def evaluate(
        risk_level: str,
        ai_confidence: Optional[float],
        config: ThresholdConfig
    ) -> ApprovalRequirements:
        can_auto_approve = (
            config.auto_approve_enabled
            and severity(risk_level) <= severity(config.auto_approve_max_risk)
            and ai_confidence is not None
            and ai_confidence >= config.auto_approve_min_confidence
        )

        reason = None
        if can_auto_approve:
            reason = (
                f"Risk level {risk_level} <= {config.auto_approve_max_risk} and "
                f"confidence {ai_confidence:g}% >= {config.auto_approve_min_confidence:g}%"
            )

        return ApprovalRequirements(
            **LEVEL_REQUIREMENTS[risk_level],
            can_auto_approve=bool(can_auto_approve),
            auto_approve_reason=reason,
        )
