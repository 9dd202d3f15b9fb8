"""
SLA Evaluation Job
==================

Runs one SLA evaluation sweep outside the web process, for an external
scheduler (cron, Kubernetes CronJob) to invoke. The service never
schedules sweeps itself.

Usage:
    python -m review_gate.sla.jobs [--project-id PROJECT_ID]
"""

import argparse
import asyncio
from typing import List, Optional

from review_gate.config import settings
from review_gate.infrastructure.database import (
    close_database,
    get_session_context,
    init_database,
)
from review_gate.risk.infrastructure import (
    SQLAlchemyApprovalSettingsRepository,
    SQLAlchemyArtifactRepository,
    YAMLDefaultsProvider,
)
from review_gate.shared.infrastructure.logging import get_logger, log_latency, setup_logging
from review_gate.sla.application import SLAEvaluationService, SLAService
from review_gate.sla.domain import SLATransition
from review_gate.sla.infrastructure import (
    LoggingNotificationSink,
    SQLAlchemySLATrackingRepository,
)

logger = get_logger(__name__)


async def run_evaluation_sweep(project_id: Optional[str] = None) -> List[SLATransition]:
    """Evaluate open SLAs in a single session; commits when the sweep succeeds."""
    async with get_session_context() as session:
        sla_service = SLAService(
            tracking_repository=SQLAlchemySLATrackingRepository(session),
            artifact_repository=SQLAlchemyArtifactRepository(session),
            settings_repository=SQLAlchemyApprovalSettingsRepository(session),
            defaults_provider=YAMLDefaultsProvider(settings.approval_defaults_path),
            warning_threshold=settings.sla_warning_threshold_percent
        )
        evaluator = SLAEvaluationService(
            sla_service,
            LoggingNotificationSink(),
            batch_size=settings.sla_evaluation_batch_size
        )
        with log_latency(logger, "sla_evaluation", project_id=project_id):
            return await evaluator.evaluate_open_trackings(project_id)


async def _run(project_id: Optional[str]) -> List[SLATransition]:
    init_database()
    try:
        return await run_evaluation_sweep(project_id)
    finally:
        await close_database()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run one SLA evaluation sweep")
    parser.add_argument("--project-id", default=None, help="Limit the sweep to one project")
    args = parser.parse_args(argv)

    setup_logging(settings.log_level, settings.environment)
    transitions = asyncio.run(_run(args.project_id))
    logger.info("SLA sweep finished", extra={"transitions": len(transitions)})


if __name__ == "__main__":
    main()
