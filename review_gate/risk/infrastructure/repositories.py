"""
Risk Infrastructure Repositories
================================

Concrete implementations of repository interfaces using SQLAlchemy,
plus the YAML-backed defaults provider.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import ValidationError
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from review_gate.core import ConfigurationException, RepositoryException
from review_gate.infrastructure.database import as_utc
from review_gate.risk.application import (
    IApprovalSettingsRepository,
    IArtifactRepository,
    IProjectRepository,
    IThresholdDefaultsProvider,
)
from review_gate.risk.domain import Artifact, ThresholdConfig
from review_gate.risk.infrastructure.models import ApprovalSettingsModel
from review_gate.shared.infrastructure.models import ArtifactModel, ProjectModel
from review_gate.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def config_from_model(model: ApprovalSettingsModel) -> ThresholdConfig:
    """Build a ThresholdConfig from a settings row."""
    try:
        return ThresholdConfig(**{
            name: getattr(model, name) for name in ThresholdConfig.model_fields
        })
    except ValidationError as e:
        raise RepositoryException(
            f"Stored approval settings for project {model.project_id} are invalid",
            details={"project_id": model.project_id}
        ) from e


def artifact_from_model(
    model: ArtifactModel,
    settings: Optional[ApprovalSettingsModel] = None
) -> Artifact:
    """Build an Artifact entity from its row (and optionally its project's settings row)."""
    return Artifact(
        id=model.id,
        project_id=model.project_id,
        type=model.type,
        source_agent=model.source_agent,
        state=model.state,
        created_at=as_utc(model.created_at),
        ai_confidence_score=model.ai_confidence_score,
        files_affected=model.files_affected,
        submitted_at=as_utc(model.submitted_at),
        approved_at=as_utc(model.approved_at),
        rejected_at=as_utc(model.rejected_at),
        project_settings=config_from_model(settings) if settings is not None else None
    )


class SQLAlchemyProjectRepository(IProjectRepository):
    """SQLAlchemy implementation of project lookups."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def exists(self, project_id: str) -> bool:
        stmt = select(ProjectModel.id).where(ProjectModel.id == project_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None


class SQLAlchemyArtifactRepository(IArtifactRepository):
    """
    SQLAlchemy implementation of artifact reads.

    Artifacts are written by the surrounding system; this repository never
    modifies them.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_with_project_settings(self, artifact_id: str) -> Optional[Artifact]:
        stmt = (
            select(ArtifactModel, ApprovalSettingsModel)
            .outerjoin(
                ApprovalSettingsModel,
                ApprovalSettingsModel.project_id == ArtifactModel.project_id
            )
            .where(ArtifactModel.id == artifact_id)
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None

        artifact_model, settings_model = row
        return artifact_from_model(artifact_model, settings_model)

    async def count_decisions(
        self,
        project_id: str,
        source_agent: str,
        artifact_type: str,
        since: Optional[datetime] = None
    ) -> Tuple[int, int]:
        stmt = select(
            func.count(ArtifactModel.id),
            func.count(ArtifactModel.rejected_at)
        ).where(
            ArtifactModel.project_id == project_id,
            ArtifactModel.source_agent == source_agent,
            ArtifactModel.type == artifact_type,
            or_(
                ArtifactModel.approved_at.is_not(None),
                ArtifactModel.rejected_at.is_not(None)
            )
        )
        if since is not None:
            stmt = stmt.where(ArtifactModel.created_at >= since)

        result = await self._session.execute(stmt)
        decided, rejected = result.one()
        return int(decided), int(rejected)


class SQLAlchemyApprovalSettingsRepository(IApprovalSettingsRepository):
    """
    SQLAlchemy implementation of approval settings storage.

    Upsert is select-then-insert/update within the caller's session.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, project_id: str) -> Optional[ApprovalSettingsModel]:
        stmt = select(ApprovalSettingsModel).where(ApprovalSettingsModel.project_id == project_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_project_id(self, project_id: str) -> Optional[ThresholdConfig]:
        model = await self._get_model(project_id)
        if model is None:
            return None
        return config_from_model(model)

    async def upsert(self, project_id: str, config: ThresholdConfig) -> ThresholdConfig:
        values = config.model_dump()
        model = await self._get_model(project_id)

        if model is None:
            model = ApprovalSettingsModel(project_id=project_id, **values)
            self._session.add(model)
        else:
            for name, value in values.items():
                setattr(model, name, value)
            model.updated_at = datetime.now(timezone.utc)

        await self._session.flush()
        return config_from_model(model)


class YAMLDefaultsProvider(IThresholdDefaultsProvider):
    """
    Threshold defaults loaded from an optional YAML file.

    Keys in the file override the built-in defaults; a missing file means
    built-in defaults. The file is read once at construction; call reload()
    to pick up edits.
    """

    def __init__(self, config_path: Path):
        self._config_path = Path(config_path)
        self._config: Optional[ThresholdConfig] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load defaults from the YAML file."""
        if not self._config_path.exists():
            self._config = ThresholdConfig()
            return

        with open(self._config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Approval defaults file {self._config_path} must contain a mapping"
            )

        try:
            self._config = ThresholdConfig(**data)
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid approval defaults in {self._config_path}",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
            ) from e

        logger.info(
            "Approval defaults loaded",
            extra={"path": str(self._config_path), "keys": sorted(data.keys())}
        )

    def get_defaults(self) -> ThresholdConfig:
        return self._config

    def reload(self) -> None:
        """Reload defaults from file."""
        self._load_config()
