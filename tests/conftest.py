"""Test configuration and fixtures."""

import pytest

from review_gate.risk.application import RiskAssessmentService
from review_gate.sla.application import (
    SLAEvaluationService,
    SLAMetricsService,
    SLAService,
)
from tests.fakes import (
    FakeClock,
    InMemoryApprovalSettingsRepository,
    InMemoryArtifactRepository,
    InMemoryProjectRepository,
    InMemorySLATrackingRepository,
    RecordingNotificationSink,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def project_repo() -> InMemoryProjectRepository:
    return InMemoryProjectRepository({"proj-1", "proj-2"})


@pytest.fixture
def settings_repo() -> InMemoryApprovalSettingsRepository:
    return InMemoryApprovalSettingsRepository()


@pytest.fixture
def artifact_repo(settings_repo) -> InMemoryArtifactRepository:
    return InMemoryArtifactRepository(settings_repo)


@pytest.fixture
def tracking_repo(artifact_repo) -> InMemorySLATrackingRepository:
    return InMemorySLATrackingRepository(artifact_repo)


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def risk_service(artifact_repo, settings_repo, project_repo, clock) -> RiskAssessmentService:
    return RiskAssessmentService(
        artifact_repository=artifact_repo,
        settings_repository=settings_repo,
        project_repository=project_repo,
        clock=clock
    )


@pytest.fixture
def sla_service(tracking_repo, artifact_repo, settings_repo, clock) -> SLAService:
    return SLAService(
        tracking_repository=tracking_repo,
        artifact_repository=artifact_repo,
        settings_repository=settings_repo,
        clock=clock
    )


@pytest.fixture
def metrics_service(tracking_repo, clock) -> SLAMetricsService:
    return SLAMetricsService(tracking_repo, clock=clock)


@pytest.fixture
def evaluation_service(sla_service, sink) -> SLAEvaluationService:
    return SLAEvaluationService(sla_service, sink, batch_size=2)
