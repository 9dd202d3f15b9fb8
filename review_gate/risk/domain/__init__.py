"""
Risk Domain Layer
=================

Domain layer for the risk assessment module.

Contains:
- Entities: Artifact, RiskAssessment
- Value Objects: ThresholdConfig, RiskFactors, ApprovalRequirements
- Domain Services: RiskScorer, ApprovalPolicyEvaluator

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from review_gate.risk.domain.entities import Artifact, RiskAssessment
from review_gate.risk.domain.value_objects import (
    ApprovalPolicyEvaluator,
    ApprovalRequirements,
    RiskFactors,
    RiskScorer,
    ThresholdConfig,
    severity,
)

__all__ = [
    # Entities
    "Artifact",
    "RiskAssessment",
    # Value Objects & Services
    "ApprovalPolicyEvaluator",
    "ApprovalRequirements",
    "RiskFactors",
    "RiskScorer",
    "ThresholdConfig",
    "severity",
]
