"""Tests for the standalone SLA sweep job."""

from datetime import datetime, timedelta, timezone

import pytest

from review_gate.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from review_gate.shared.infrastructure.models import ArtifactModel, ProjectModel
from review_gate.sla.domain import SLATracking
from review_gate.sla.infrastructure import SQLAlchemySLATrackingRepository
from review_gate.sla.jobs import run_evaluation_sweep


@pytest.mark.asyncio
async def test_sweep_persists_breach(tmp_path):
    init_database(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    try:
        await create_tables()
        started = datetime.now(timezone.utc) - timedelta(hours=2)

        async with get_session_context() as session:
            session.add(ProjectModel(id="proj-1", name="Checkout"))
            session.add(ArtifactModel(
                id="art-1", project_id="proj-1", type="script",
                source_agent="agent-1", created_at=started
            ))
            await session.flush()
            await SQLAlchemySLATrackingRepository(session).upsert(SLATracking(
                artifact_id="art-1",
                risk_level="low",
                deadline_hours=1,
                deadline=started + timedelta(hours=1),
                status="within_sla",
                created_at=started,
                updated_at=started
            ))

        transitions = await run_evaluation_sweep()
        assert [(t.artifact_id, t.status) for t in transitions] == [("art-1", "breached")]

        async with get_session_context() as session:
            tracking = await SQLAlchemySLATrackingRepository(session).get_by_artifact_id("art-1")
        assert tracking.status == "breached"

        assert await run_evaluation_sweep() == []
    finally:
        await close_database()
