"""Unit tests for risk scoring, level mapping and the approval policy."""

from datetime import timedelta

import pytest

from review_gate.core import DomainException
from review_gate.risk.application import AssessRiskInput
from review_gate.risk.domain import (
    ApprovalPolicyEvaluator,
    Artifact,
    RiskScorer,
    ThresholdConfig,
)
from tests.fakes import EPOCH


class TestFactorScores:
    @pytest.mark.parametrize("artifact_type, expected", [
        ("script", 70),
        ("test_case", 20),
        ("bug_analysis", 40),
        ("chat_suggestion", 30),
        ("self_healing_fix", 60),
        ("something_new", 50),
    ])
    def test_artifact_type_base_scores(self, artifact_type, expected):
        assert RiskScorer.artifact_type_score(artifact_type) == expected

    @pytest.mark.parametrize("files, expected", [
        (None, 0), (0, 0), (1, 0), (2, 20), (3, 20), (4, 40), (5, 40),
        (6, 60), (10, 60), (11, 80), (500, 80),
    ])
    def test_scope_tiers(self, files, expected):
        assert RiskScorer.scope_score(files) == expected

    def test_confidence_is_inverted(self):
        assert RiskScorer.confidence_score(100) == 0
        assert RiskScorer.confidence_score(20) == 80
        assert RiskScorer.confidence_score(0) == 100

    def test_missing_confidence_scores_30(self):
        assert RiskScorer.confidence_score(None) == 30

    def test_historical_rejection_rate(self):
        assert RiskScorer.historical_rejection_score(0, 0) == 0
        assert RiskScorer.historical_rejection_score(1, 4) == 25
        assert RiskScorer.historical_rejection_score(3, 3) == 100

    def test_weighted_score_is_rounded_and_clamped(self):
        assert RiskScorer.weighted_score(70, 60, 80, 0) == 60
        assert RiskScorer.weighted_score(20, 0, 5, 0) == 9
        assert RiskScorer.weighted_score(100, 100, 100, 100) == 100
        assert RiskScorer.weighted_score(0, 0, 0, 0) == 0


class TestMapScoreToLevel:
    @pytest.mark.parametrize("score, level", [
        (0, "low"), (25, "low"), (26, "medium"), (50, "medium"),
        (51, "high"), (75, "high"), (76, "critical"), (100, "critical"),
    ])
    def test_default_band_boundaries(self, score, level):
        assert RiskScorer.map_score_to_level(score) == level

    def test_custom_thresholds(self):
        config = ThresholdConfig(low_risk_threshold=10, medium_risk_threshold=20, high_risk_threshold=30)
        assert RiskScorer.map_score_to_level(10, config) == "low"
        assert RiskScorer.map_score_to_level(11, config) == "medium"
        assert RiskScorer.map_score_to_level(31, config) == "critical"

    def test_level_is_monotone_in_score(self):
        order = ["low", "medium", "high", "critical"]
        levels = [order.index(RiskScorer.map_score_to_level(s)) for s in range(101)]
        assert levels == sorted(levels)


class TestApprovalPolicy:
    def test_requirements_per_level(self):
        config = ThresholdConfig(auto_approve_enabled=False)

        low = ApprovalPolicyEvaluator.evaluate("low", 50, config)
        medium = ApprovalPolicyEvaluator.evaluate("medium", 50, config)
        high = ApprovalPolicyEvaluator.evaluate("high", 50, config)
        critical = ApprovalPolicyEvaluator.evaluate("critical", 50, config)

        assert (low.required_approvals, low.requires_lead, low.requires_admin) == (1, False, False)
        assert (medium.required_approvals, medium.requires_lead, medium.requires_admin) == (1, False, False)
        assert (high.required_approvals, high.requires_lead, high.requires_admin) == (2, True, False)
        assert (critical.required_approvals, critical.requires_lead, critical.requires_admin) == (2, True, True)

    def test_auto_approve_low_risk_high_confidence(self):
        result = ApprovalPolicyEvaluator.evaluate("low", 95, ThresholdConfig())

        assert result.can_auto_approve is True
        assert result.auto_approve_reason == "Risk level low <= low and confidence 95% >= 90%"

    def test_no_auto_approve_when_confidence_too_low(self):
        result = ApprovalPolicyEvaluator.evaluate("low", 89.9, ThresholdConfig())
        assert result.can_auto_approve is False
        assert result.auto_approve_reason is None

    def test_no_auto_approve_without_confidence(self):
        assert ApprovalPolicyEvaluator.evaluate("low", None, ThresholdConfig()).can_auto_approve is False

    def test_no_auto_approve_above_max_risk(self):
        assert ApprovalPolicyEvaluator.evaluate("medium", 99, ThresholdConfig()).can_auto_approve is False

    def test_max_risk_setting_widens_auto_approval(self):
        config = ThresholdConfig(auto_approve_max_risk="medium")
        assert ApprovalPolicyEvaluator.evaluate("medium", 99, config).can_auto_approve is True
        assert ApprovalPolicyEvaluator.evaluate("high", 99, config).can_auto_approve is False

    def test_disabled_auto_approval(self):
        config = ThresholdConfig(auto_approve_enabled=False)
        assert ApprovalPolicyEvaluator.evaluate("low", 100, config).can_auto_approve is False


def _input(**overrides) -> AssessRiskInput:
    fields = {
        "project_id": "proj-1",
        "artifact_type": "script",
        "ai_confidence_score": 20,
        "files_affected": 10,
        "source_agent": "agent-1",
    }
    fields.update(overrides)
    return AssessRiskInput(**fields)


class TestAssessRisk:
    @pytest.mark.asyncio
    async def test_risky_script_needs_lead(self, risk_service):
        assessment = await risk_service.assess_risk(_input())

        assert assessment.risk_score == 60
        assert assessment.risk_level == "high"
        assert assessment.approval_requirements.requires_lead is True
        assert assessment.approval_requirements.can_auto_approve is False
        assert assessment.risk_factors.artifact_type_score == 70
        assert assessment.risk_factors.scope_score == 60
        assert assessment.risk_factors.confidence_score == 80
        assert assessment.risk_factors.historical_rejection_score == 0
        assert assessment.risk_factors.details["historical_rejection_rate"] is None

    @pytest.mark.asyncio
    async def test_confident_test_case_is_auto_approvable(self, risk_service):
        assessment = await risk_service.assess_risk(
            _input(artifact_type="test_case", ai_confidence_score=95, files_affected=1)
        )

        assert assessment.risk_score == 9
        assert assessment.risk_level == "low"
        assert assessment.approval_requirements.can_auto_approve is True

    @pytest.mark.asyncio
    async def test_script_never_scores_below_test_case(self, risk_service):
        for confidence in (0, 50, 100, None):
            for files in (1, 4, 20):
                script = await risk_service.assess_risk(
                    _input(artifact_type="script", ai_confidence_score=confidence, files_affected=files)
                )
                test_case = await risk_service.assess_risk(
                    _input(artifact_type="test_case", ai_confidence_score=confidence, files_affected=files)
                )
                assert script.risk_score >= test_case.risk_score

    @pytest.mark.asyncio
    async def test_lower_confidence_never_lowers_score(self, risk_service):
        scores = []
        for confidence in (100, 75, 50, 25, 0):
            assessment = await risk_service.assess_risk(_input(ai_confidence_score=confidence))
            scores.append(assessment.risk_score)
        assert scores == sorted(scores)

    @pytest.mark.asyncio
    async def test_history_counts_only_matching_decided_artifacts(self, risk_service, artifact_repo):
        decided_at = EPOCH + timedelta(hours=1)
        artifact_repo.add("a1", rejected_at=decided_at)
        artifact_repo.add("a2", approved_at=decided_at)
        artifact_repo.add("a3")  # undecided
        artifact_repo.add("a4", source_agent="other", rejected_at=decided_at)
        artifact_repo.add("a5", type="test_case", rejected_at=decided_at)

        assessment = await risk_service.assess_risk(_input())

        assert assessment.risk_factors.historical_rejection_score == 50
        assert assessment.risk_factors.details["historical_rejection_rate"] == 0.5
        # 28 + 12 + 20 + 7.5
        assert assessment.risk_score == 68

    @pytest.mark.asyncio
    async def test_clean_history_reports_zero_rate(self, risk_service, artifact_repo):
        artifact_repo.add("a1", approved_at=EPOCH + timedelta(hours=1))

        assessment = await risk_service.assess_risk(_input())

        assert assessment.risk_factors.historical_rejection_score == 0
        assert assessment.risk_factors.details["historical_rejection_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_project_thresholds_apply(self, risk_service, settings_repo):
        settings_repo.store["proj-1"] = ThresholdConfig(
            low_risk_threshold=70, medium_risk_threshold=80, high_risk_threshold=90
        )

        assessment = await risk_service.assess_risk(_input())

        assert assessment.risk_level == "low"

    def test_map_score_to_level_uses_defaults(self, risk_service):
        assert risk_service.map_score_to_level(26) == "medium"


class TestArtifact:
    def test_cannot_be_approved_and_rejected(self):
        with pytest.raises(DomainException) as exc_info:
            Artifact(
                id="art-1",
                project_id="proj-1",
                type="script",
                source_agent="agent-1",
                state="approved",
                created_at=EPOCH,
                approved_at=EPOCH,
                rejected_at=EPOCH
            )

        assert exc_info.value.details == {"artifact_id": "art-1"}
