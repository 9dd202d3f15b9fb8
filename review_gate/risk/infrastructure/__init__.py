"""
Risk Infrastructure Layer
=========================

Infrastructure implementations for risk assessment:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer and the YAML defaults provider
"""

from review_gate.risk.infrastructure.models import ApprovalSettingsModel
from review_gate.risk.infrastructure.repositories import (
    SQLAlchemyApprovalSettingsRepository,
    SQLAlchemyArtifactRepository,
    SQLAlchemyProjectRepository,
    YAMLDefaultsProvider,
    artifact_from_model,
    config_from_model,
)

__all__ = [
    "ApprovalSettingsModel",
    "SQLAlchemyApprovalSettingsRepository",
    "SQLAlchemyArtifactRepository",
    "SQLAlchemyProjectRepository",
    "YAMLDefaultsProvider",
    "artifact_from_model",
    "config_from_model",
]
