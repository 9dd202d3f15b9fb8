"""
Risk Controllers (API Routes)
=============================

FastAPI routes for risk assessment and per-project approval settings.

Controllers are thin - they delegate to application services.
Application exceptions are mapped to HTTP responses by the shared handler.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from review_gate.config import settings
from review_gate.infrastructure.database import get_session
from review_gate.risk.application import (
    ApprovalSettingsResponse,
    ApprovalSettingsUpdate,
    AssessRiskInput,
    IThresholdDefaultsProvider,
    RiskAssessmentResponse,
    RiskAssessmentService,
)
from review_gate.risk.infrastructure import (
    SQLAlchemyApprovalSettingsRepository,
    SQLAlchemyArtifactRepository,
    SQLAlchemyProjectRepository,
    YAMLDefaultsProvider,
)
from review_gate.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/approvals", tags=["Risk Assessment"])


# ========== Example payloads for Swagger ==========

ASSESS_REQUEST_EXAMPLE = {
    "project_id": "proj-001",
    "artifact_type": "script",
    "ai_confidence_score": 20,
    "files_affected": 10,
    "source_agent": "script-generator"
}

ASSESS_RESPONSE_EXAMPLE = {
    "risk_score": 60,
    "risk_level": "high",
    "risk_factors": {
        "artifact_type_score": 70,
        "scope_score": 60,
        "confidence_score": 80,
        "historical_rejection_score": 0,
        "details": {
            "artifact_type": "script",
            "files_affected": 10,
            "ai_confidence": 20,
            "historical_rejection_rate": None
        }
    },
    "approval_requirements": {
        "required_approvals": 2,
        "requires_admin": False,
        "requires_lead": True,
        "can_auto_approve": False,
        "auto_approve_reason": None
    }
}


# ========== Dependencies ==========

@lru_cache
def get_defaults_provider() -> IThresholdDefaultsProvider:
    """Process-wide defaults provider, read once from the configured YAML file."""
    return YAMLDefaultsProvider(settings.approval_defaults_path)


async def get_risk_service(
    session: AsyncSession = Depends(get_session),
    defaults_provider: IThresholdDefaultsProvider = Depends(get_defaults_provider)
) -> RiskAssessmentService:
    """Get risk assessment service instance."""
    return RiskAssessmentService(
        artifact_repository=SQLAlchemyArtifactRepository(session),
        settings_repository=SQLAlchemyApprovalSettingsRepository(session),
        project_repository=SQLAlchemyProjectRepository(session),
        defaults_provider=defaults_provider,
        history_window_days=settings.risk_history_window_days
    )


# ========== Route Handlers ==========

@router.post(
    "/risk/assess",
    response_model=RiskAssessmentResponse,
    summary="Assess artifact risk",
    description="""
    Score an AI-generated artifact and decide how much human review it needs.

    **Factors** (weighted into a 0-100 score):
    - Artifact type (40%): scripts are riskier than test cases
    - Scope (20%): number of files affected
    - AI confidence (25%): lower confidence means higher risk
    - History (15%): rejection rate of the same agent and type in this project

    **Levels**: `low`, `medium`, `high`, `critical` via the project's thresholds.
    """,
    responses={
        200: {
            "description": "Risk assessment",
            "content": {"application/json": {"example": ASSESS_RESPONSE_EXAMPLE}}
        }
    }
)
async def assess_risk(
    request: AssessRiskInput,
    service: RiskAssessmentService = Depends(get_risk_service)
):
    assessment = await service.assess_risk(request)
    return RiskAssessmentResponse.from_domain(assessment)


@router.get(
    "/settings/{project_id}",
    response_model=ApprovalSettingsResponse,
    summary="Get approval settings",
    description="Effective approval settings for a project. Defaults are returned when none are stored."
)
async def get_approval_settings(
    project_id: str,
    service: RiskAssessmentService = Depends(get_risk_service)
):
    config = await service.get_project_settings(project_id)
    return ApprovalSettingsResponse(project_id=project_id, settings=config)


@router.put(
    "/settings/{project_id}",
    response_model=ApprovalSettingsResponse,
    summary="Update approval settings",
    description="""
    Merge a partial update onto the project's settings.

    Thresholds must stay within 0-100 and strictly ascending
    (low < medium < high). Invalid updates are rejected with 400 and
    nothing is written.
    """,
    responses={
        400: {"description": "Invalid settings"},
        404: {"description": "Project not found"}
    }
)
async def update_approval_settings(
    project_id: str,
    request: ApprovalSettingsUpdate,
    service: RiskAssessmentService = Depends(get_risk_service)
):
    config = await service.update_project_settings(project_id, request)
    return ApprovalSettingsResponse(project_id=project_id, settings=config)
