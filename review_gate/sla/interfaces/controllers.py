"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA tracking endpoints.

Controllers are thin - they delegate to application services.
Fixed paths are registered before /sla/{artifact_id} so they are not
captured as artifact ids.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from review_gate.config import settings
from review_gate.infrastructure.database import get_session
from review_gate.risk.application import IThresholdDefaultsProvider
from review_gate.risk.infrastructure import (
    SQLAlchemyApprovalSettingsRepository,
    SQLAlchemyArtifactRepository,
)
from review_gate.risk.interfaces.controllers import get_defaults_provider
from review_gate.shared.infrastructure.logging import get_logger, log_latency
from review_gate.sla.application import (
    CreateSLATrackingRequest,
    EscalateInput,
    EscalateRequest,
    EvaluationResponse,
    SLAEvaluationService,
    SLAListResponse,
    SLAMetricsResponse,
    SLAMetricsService,
    SLAService,
    SLAStatusResponse,
    SLATrackingResponse,
    SLATransitionResponse,
)
from review_gate.sla.infrastructure import (
    LoggingNotificationSink,
    SQLAlchemySLATrackingRepository,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Tracking"])


# ========== Example payloads for Swagger ==========

SLA_STATUS_RESPONSE_EXAMPLE = {
    "artifact_id": "art-001",
    "status": "approaching_sla",
    "deadline": "2024-01-16T10:00:00Z",
    "deadline_hours": 24,
    "percentage_elapsed": 80.5,
    "time_remaining_seconds": 16848,
    "is_overdue": False,
    "is_approaching": True
}

SLA_METRICS_RESPONSE_EXAMPLE = {
    "project_id": "proj-001",
    "days": 30,
    "total": 2,
    "within_sla": 1,
    "breached": 1,
    "escalated": 0,
    "average_resolution_seconds": 43200.0,
    "compliance_rate": 50.0
}


# ========== Dependencies ==========

async def get_sla_service(
    session: AsyncSession = Depends(get_session),
    defaults_provider: IThresholdDefaultsProvider = Depends(get_defaults_provider)
) -> SLAService:
    """Get SLA service instance."""
    return SLAService(
        tracking_repository=SQLAlchemySLATrackingRepository(session),
        artifact_repository=SQLAlchemyArtifactRepository(session),
        settings_repository=SQLAlchemyApprovalSettingsRepository(session),
        defaults_provider=defaults_provider,
        warning_threshold=settings.sla_warning_threshold_percent
    )


async def get_metrics_service(
    session: AsyncSession = Depends(get_session)
) -> SLAMetricsService:
    """Get SLA metrics service instance."""
    return SLAMetricsService(SQLAlchemySLATrackingRepository(session))


async def get_evaluation_service(
    sla_service: SLAService = Depends(get_sla_service)
) -> SLAEvaluationService:
    """Get SLA evaluation service instance."""
    return SLAEvaluationService(
        sla_service,
        LoggingNotificationSink(),
        batch_size=settings.sla_evaluation_batch_size
    )


# ========== Route Handlers ==========

@router.get(
    "/approaching",
    response_model=SLAListResponse,
    summary="List open SLAs",
    description="""
    Uncompleted tracking rows that are still open (`within_sla` or
    `approaching_sla`), ordered by deadline, most urgent first.
    """
)
async def list_approaching_slas(
    project_id: Optional[str] = Query(None, description="Filter by project"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: SLAService = Depends(get_sla_service)
):
    result = await service.get_approaching_slas(project_id, page=page, limit=limit)
    return SLAListResponse.from_domain(result)


@router.get(
    "/breached",
    response_model=SLAListResponse,
    summary="List breached SLAs",
    description="Uncompleted tracking rows that are `breached` or `escalated`, most overdue first."
)
async def list_breached_slas(
    project_id: Optional[str] = Query(None, description="Filter by project"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: SLAService = Depends(get_sla_service)
):
    result = await service.get_breached_slas(project_id, page=page, limit=limit)
    return SLAListResponse.from_domain(result)


@router.get(
    "/metrics/{project_id}",
    response_model=SLAMetricsResponse,
    summary="Get SLA metrics",
    description="""
    Compliance rollup over SLA rows created in the last `days` days whose
    artifact has been approved or rejected.

    `approaching_sla` counts as within SLA. Compliance is 100 when no such
    row exists.
    """,
    responses={
        200: {
            "description": "SLA metrics",
            "content": {"application/json": {"example": SLA_METRICS_RESPONSE_EXAMPLE}}
        }
    }
)
async def get_sla_metrics(
    project_id: str,
    days: int = Query(30, ge=1, le=365),
    service: SLAMetricsService = Depends(get_metrics_service)
):
    metrics = await service.get_sla_metrics(project_id, days=days)
    return SLAMetricsResponse.from_domain(project_id, days, metrics)


@router.post(
    "/evaluate",
    response_model=EvaluationResponse,
    summary="Run SLA evaluation sweep",
    description="""
    Re-evaluate every open SLA, persist status changes and send warning or
    breach notifications. Intended to be called by an external scheduler.
    """
)
async def evaluate_slas(
    project_id: Optional[str] = Query(None, description="Limit the sweep to one project"),
    service: SLAEvaluationService = Depends(get_evaluation_service)
):
    with log_latency(logger, "sla_evaluation", project_id=project_id):
        transitions = await service.evaluate_open_trackings(project_id)

    return EvaluationResponse(
        transitions=[SLATransitionResponse.from_domain(t) for t in transitions],
        transition_count=len(transitions)
    )


@router.post(
    "/{artifact_id}",
    response_model=SLATrackingResponse,
    status_code=201,
    summary="Start SLA tracking",
    description="""
    Start (or restart) the review deadline for an artifact.

    The window comes from the project's SLA hours for the given risk level.
    Restarting resets status, warning, escalation and completion.
    """,
    responses={404: {"description": "Artifact not found"}}
)
async def create_sla_tracking(
    artifact_id: str,
    request: CreateSLATrackingRequest,
    service: SLAService = Depends(get_sla_service)
):
    tracking = await service.create_sla_tracking(artifact_id, request.risk_level)
    return SLATrackingResponse.from_domain(tracking)


@router.get(
    "/{artifact_id}",
    response_model=SLAStatusResponse,
    summary="Get SLA status",
    description="Live SLA status for an artifact. A status change observed here is persisted.",
    responses={
        200: {
            "description": "SLA status",
            "content": {"application/json": {"example": SLA_STATUS_RESPONSE_EXAMPLE}}
        },
        404: {"description": "No SLA tracking for the artifact"}
    }
)
async def get_sla_status(
    artifact_id: str,
    service: SLAService = Depends(get_sla_service)
):
    result = await service.get_sla_status(artifact_id)
    return SLAStatusResponse.from_domain(result)


@router.post(
    "/{artifact_id}/escalate",
    response_model=SLATrackingResponse,
    summary="Escalate SLA",
    responses={404: {"description": "No SLA tracking for the artifact"}}
)
async def escalate_sla(
    artifact_id: str,
    request: EscalateRequest,
    service: SLAService = Depends(get_sla_service)
):
    tracking = await service.escalate(EscalateInput(
        artifact_id=artifact_id,
        escalated_to_id=request.escalated_to_id,
        reason=request.reason
    ))
    return SLATrackingResponse.from_domain(tracking)


@router.post(
    "/{artifact_id}/complete",
    response_model=Optional[SLATrackingResponse],
    summary="Complete SLA tracking",
    description="Stop tracking after a review decision. Returns null when the artifact was never tracked."
)
async def complete_sla_tracking(
    artifact_id: str,
    service: SLAService = Depends(get_sla_service)
):
    tracking = await service.complete_sla_tracking(artifact_id)
    if tracking is None:
        return None
    return SLATrackingResponse.from_domain(tracking)
