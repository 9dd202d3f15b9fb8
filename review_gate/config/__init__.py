"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="review-gate", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/review_gate",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Approval Defaults ==========
    approval_defaults_path: Path = Field(
        default=Path("approval_defaults.yaml"),
        description="Optional YAML file overriding built-in threshold defaults"
    )
    risk_history_window_days: Optional[int] = Field(
        default=None,
        description="Trailing window for historical rejection rate (None = all history)",
        ge=1
    )

    # ========== SLA ==========
    sla_warning_threshold_percent: int = Field(
        default=75,
        description="Percentage of the SLA window after which a tracking row is approaching",
        ge=1,
        le=100
    )
    sla_evaluation_batch_size: int = Field(
        default=100,
        description="Rows fetched per page by the SLA evaluation sweep",
        ge=1,
        le=1000
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class ArtifactType(str):
    """Kinds of AI-generated artifacts that go through review."""
    SCRIPT = "script"
    TEST_CASE = "test_case"
    BUG_ANALYSIS = "bug_analysis"
    CHAT_SUGGESTION = "chat_suggestion"
    SELF_HEALING_FIX = "self_healing_fix"


class ArtifactState(str):
    """Artifact review lifecycle states."""
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVISION = "needs_revision"
    ARCHIVED = "archived"


class RiskLevel(str):
    """Risk buckets, ordered by severity."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SLAStatus(str):
    """SLA tracking states, ordered by lifecycle."""
    WITHIN_SLA = "within_sla"
    APPROACHING_SLA = "approaching_sla"
    BREACHED = "breached"
    ESCALATED = "escalated"


# ========== Lists for validation ==========

RISK_LEVEL_ORDER = [
    RiskLevel.LOW, RiskLevel.MEDIUM,
    RiskLevel.HIGH, RiskLevel.CRITICAL
]
SLA_STATUS_ORDER = [
    SLAStatus.WITHIN_SLA, SLAStatus.APPROACHING_SLA,
    SLAStatus.BREACHED, SLAStatus.ESCALATED
]
OPEN_SLA_STATUSES = [SLAStatus.WITHIN_SLA, SLAStatus.APPROACHING_SLA]
OVERDUE_SLA_STATUSES = [SLAStatus.BREACHED, SLAStatus.ESCALATED]
