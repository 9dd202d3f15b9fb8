"""
SLA Infrastructure Repositories
================================

Concrete implementations of repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from review_gate.core import ResourceNotFoundException
from review_gate.infrastructure.database import as_utc
from review_gate.risk.domain import Artifact
from review_gate.risk.infrastructure.repositories import artifact_from_model
from review_gate.shared.infrastructure.models import ArtifactModel
from review_gate.sla.application.services import ISLATrackingRepository
from review_gate.sla.domain import SLATracking
from review_gate.sla.infrastructure.models import SLATrackingModel

# Fields copied verbatim between entity and row
_TRACKING_FIELDS = (
    "risk_level",
    "deadline_hours",
    "deadline",
    "status",
    "warning_threshold",
    "warning_sent_at",
    "escalated_at",
    "escalated_to_id",
    "escalation_reason",
    "completed_at",
    "created_at",
    "updated_at",
)


def tracking_from_model(model: SLATrackingModel, project_id: Optional[str] = None) -> SLATracking:
    """Build an SLATracking entity from its row."""
    return SLATracking(
        id=model.id,
        artifact_id=model.artifact_id,
        project_id=project_id,
        risk_level=model.risk_level,
        deadline_hours=model.deadline_hours,
        deadline=as_utc(model.deadline),
        status=model.status,
        warning_threshold=model.warning_threshold,
        warning_sent_at=as_utc(model.warning_sent_at),
        escalated_at=as_utc(model.escalated_at),
        escalated_to_id=model.escalated_to_id,
        escalation_reason=model.escalation_reason,
        completed_at=as_utc(model.completed_at),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at)
    )


class SQLAlchemySLATrackingRepository(ISLATrackingRepository):
    """
    SQLAlchemy implementation of SLA tracking repository.

    Project scoping goes through the artifacts table; tracking rows do not
    store the project themselves.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _select(self):
        return select(SLATrackingModel, ArtifactModel.project_id).join(
            ArtifactModel, ArtifactModel.id == SLATrackingModel.artifact_id
        )

    async def _get_model(self, artifact_id: str) -> Optional[SLATrackingModel]:
        stmt = select(SLATrackingModel).where(SLATrackingModel.artifact_id == artifact_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_artifact_id(self, artifact_id: str) -> Optional[SLATracking]:
        stmt = self._select().where(SLATrackingModel.artifact_id == artifact_id)
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None

        model, project_id = row
        return tracking_from_model(model, project_id)

    async def upsert(self, tracking: SLATracking) -> SLATracking:
        model = await self._get_model(tracking.artifact_id)
        if model is None:
            model = SLATrackingModel(artifact_id=tracking.artifact_id)
            self._session.add(model)

        for name in _TRACKING_FIELDS:
            setattr(model, name, getattr(tracking, name))

        await self._session.flush()
        return tracking_from_model(model, tracking.project_id)

    async def update(self, tracking: SLATracking) -> SLATracking:
        model = await self._get_model(tracking.artifact_id)
        if model is None:
            raise ResourceNotFoundException("SLA tracking", tracking.artifact_id)

        for name in _TRACKING_FIELDS:
            setattr(model, name, getattr(tracking, name))

        await self._session.flush()
        return tracking_from_model(model, tracking.project_id)

    def _open_in(self, stmt, statuses: List[str], project_id: Optional[str]):
        stmt = stmt.where(
            SLATrackingModel.status.in_(statuses),
            SLATrackingModel.completed_at.is_(None)
        )
        if project_id:
            stmt = stmt.where(ArtifactModel.project_id == project_id)
        return stmt

    async def list_by_status(
        self,
        statuses: List[str],
        project_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> List[SLATracking]:
        stmt = self._open_in(self._select(), statuses, project_id)
        stmt = stmt.order_by(SLATrackingModel.deadline.asc(), SLATrackingModel.id.asc())
        stmt = stmt.offset(offset).limit(limit)

        result = await self._session.execute(stmt)
        return [tracking_from_model(model, pid) for model, pid in result.all()]

    async def count_by_status(
        self,
        statuses: List[str],
        project_id: Optional[str] = None
    ) -> int:
        stmt = select(func.count(SLATrackingModel.id)).join(
            ArtifactModel, ArtifactModel.id == SLATrackingModel.artifact_id
        )
        stmt = self._open_in(stmt, statuses, project_id)

        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_resolved_created_since(
        self,
        project_id: str,
        since: datetime
    ) -> List[Tuple[SLATracking, Artifact]]:
        stmt = (
            select(SLATrackingModel, ArtifactModel)
            .join(ArtifactModel, ArtifactModel.id == SLATrackingModel.artifact_id)
            .where(
                ArtifactModel.project_id == project_id,
                SLATrackingModel.created_at >= since,
                or_(
                    ArtifactModel.approved_at.is_not(None),
                    ArtifactModel.rejected_at.is_not(None)
                )
            )
        )
        result = await self._session.execute(stmt)
        return [
            (tracking_from_model(tracking, artifact.project_id), artifact_from_model(artifact))
            for tracking, artifact in result.all()
        ]
