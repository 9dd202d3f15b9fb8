"""
Risk Application Layer
======================

Application layer for the risk assessment module.

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from review_gate.risk.application.dto import (
    AssessRiskInput,
    ApprovalSettingsUpdate,
    ApprovalSettingsResponse,
    RiskAssessmentResponse,
)
from review_gate.risk.application.services import (
    RiskAssessmentService,
    BuiltinDefaultsProvider,
    IApprovalSettingsRepository,
    IArtifactRepository,
    IProjectRepository,
    IThresholdDefaultsProvider,
)

__all__ = [
    # DTOs
    "AssessRiskInput",
    "ApprovalSettingsUpdate",
    "ApprovalSettingsResponse",
    "RiskAssessmentResponse",
    # Services
    "RiskAssessmentService",
    "BuiltinDefaultsProvider",
    # Repository Interfaces
    "IApprovalSettingsRepository",
    "IArtifactRepository",
    "IProjectRepository",
    "IThresholdDefaultsProvider",
]
