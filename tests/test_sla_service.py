"""Tests for SLA deadlines, tracking lifecycle and review queues."""

from datetime import timedelta

import pytest

from review_gate.core import ResourceNotFoundException, ValidationException
from review_gate.risk.domain import ThresholdConfig
from review_gate.sla.application import EscalateInput
from tests.fakes import EPOCH


class TestCalculateDeadline:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("level, hours", [
        ("low", 1), ("medium", 4), ("high", 24), ("critical", 48),
    ])
    async def test_default_windows(self, sla_service, level, hours):
        window = await sla_service.calculate_deadline("proj-1", level)

        assert window.hours == hours
        assert window.deadline == EPOCH + timedelta(hours=hours)
        assert window.project_id == "proj-1"

    @pytest.mark.asyncio
    async def test_project_setting_overrides_default(self, sla_service, settings_repo):
        settings_repo.store["proj-1"] = ThresholdConfig(high_risk_sla_hours=8)

        window = await sla_service.calculate_deadline("proj-1", "high")

        assert window.deadline == EPOCH + timedelta(hours=8)

    @pytest.mark.asyncio
    async def test_no_project_uses_defaults(self, sla_service):
        window = await sla_service.calculate_deadline(None, "medium")
        assert window.hours == 4

    @pytest.mark.asyncio
    async def test_unknown_level(self, sla_service):
        with pytest.raises(ValidationException):
            await sla_service.calculate_deadline("proj-1", "extreme")


class TestCreateTracking:
    @pytest.mark.asyncio
    async def test_creates_within_sla_row(self, sla_service, artifact_repo, tracking_repo):
        artifact_repo.add("art-1")

        tracking = await sla_service.create_sla_tracking("art-1", "medium")

        assert tracking.status == "within_sla"
        assert tracking.deadline == EPOCH + timedelta(hours=4)
        assert tracking.deadline_hours == 4
        assert tracking.project_id == "proj-1"
        assert "art-1" in tracking_repo.rows

    @pytest.mark.asyncio
    async def test_default_warning_threshold(self, sla_service, artifact_repo):
        artifact_repo.add("art-1")

        tracking = await sla_service.create_sla_tracking("art-1", "medium")

        assert tracking.warning_threshold == 75

    @pytest.mark.asyncio
    async def test_warnings_off_goes_straight_to_breached(self, sla_service, artifact_repo, settings_repo, clock):
        artifact_repo.add("art-1")
        settings_repo.store["proj-1"] = ThresholdConfig(notify_on_sla_warning=False)

        tracking = await sla_service.create_sla_tracking("art-1", "medium")
        assert tracking.warning_threshold == 100

        clock.advance(hours=3, minutes=59)
        assert (await sla_service.get_sla_status("art-1")).status == "within_sla"
        clock.advance(minutes=2)
        assert (await sla_service.get_sla_status("art-1")).status == "breached"

    @pytest.mark.asyncio
    async def test_uses_project_settings(self, sla_service, artifact_repo, settings_repo):
        artifact_repo.add("art-1")
        settings_repo.store["proj-1"] = ThresholdConfig(medium_risk_sla_hours=2)

        tracking = await sla_service.create_sla_tracking("art-1", "medium")

        assert tracking.deadline == EPOCH + timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_missing_artifact(self, sla_service):
        with pytest.raises(ResourceNotFoundException):
            await sla_service.create_sla_tracking("nope", "low")

    @pytest.mark.asyncio
    async def test_recreate_resets_the_row(self, sla_service, artifact_repo, tracking_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "low")
        clock.advance(hours=2)
        await sla_service.get_sla_status("art-1")
        await sla_service.escalate(EscalateInput(artifact_id="art-1", escalated_to_id="lead", reason="late"))

        tracking = await sla_service.create_sla_tracking("art-1", "critical")

        assert len(tracking_repo.rows) == 1
        assert tracking.status == "within_sla"
        assert tracking.created_at == clock()
        assert tracking.deadline == clock() + timedelta(hours=48)
        assert tracking.escalated_to_id is None
        assert tracking.warning_sent_at is None


class TestGetStatus:
    @pytest.mark.asyncio
    async def test_missing_row(self, sla_service):
        with pytest.raises(ResourceNotFoundException):
            await sla_service.get_sla_status("nope")

    @pytest.mark.asyncio
    async def test_lifecycle_under_virtual_time(self, sla_service, artifact_repo, tracking_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "medium")

        status = await sla_service.get_sla_status("art-1")
        assert status.status == "within_sla"
        assert status.percentage_elapsed == 0
        assert status.time_remaining_seconds == 4 * 3600
        assert tracking_repo.updates == 0

        clock.advance(hours=3)
        status = await sla_service.get_sla_status("art-1")
        assert status.status == "approaching_sla"
        assert status.is_approaching is True
        assert status.percentage_elapsed == 75
        assert tracking_repo.rows["art-1"].status == "approaching_sla"
        assert tracking_repo.rows["art-1"].warning_sent_at == clock()

        clock.advance(hours=2)
        status = await sla_service.get_sla_status("art-1")
        assert status.status == "breached"
        assert status.is_overdue is True
        assert status.is_approaching is False
        assert status.time_remaining_seconds == 0
        assert status.percentage_elapsed == 100

    @pytest.mark.asyncio
    async def test_unchanged_status_is_not_rewritten(self, sla_service, artifact_repo, tracking_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "high")

        clock.advance(hours=1)
        await sla_service.get_sla_status("art-1")
        await sla_service.get_sla_status("art-1")

        assert tracking_repo.updates == 0

    @pytest.mark.asyncio
    async def test_escalated_is_sticky(self, sla_service, artifact_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "medium")
        clock.advance(hours=5)
        await sla_service.get_sla_status("art-1")

        escalated = await sla_service.escalate(
            EscalateInput(artifact_id="art-1", escalated_to_id="lead-1", reason="Overdue")
        )
        assert escalated.status == "escalated"
        assert escalated.escalated_at == clock()

        clock.advance(hours=5)
        status = await sla_service.get_sla_status("art-1")
        assert status.status == "escalated"
        assert status.is_overdue is True

    @pytest.mark.asyncio
    async def test_escalate_missing_row(self, sla_service):
        with pytest.raises(ResourceNotFoundException):
            await sla_service.escalate(EscalateInput(artifact_id="nope", escalated_to_id="x", reason="y"))


class TestComplete:
    @pytest.mark.asyncio
    async def test_missing_row_is_a_no_op(self, sla_service, tracking_repo):
        assert await sla_service.complete_sla_tracking("nope") is None
        assert tracking_repo.rows == {}

    @pytest.mark.asyncio
    async def test_completion_freezes_status(self, sla_service, artifact_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "medium")
        clock.advance(hours=1)

        completed = await sla_service.complete_sla_tracking("art-1")
        assert completed.completed_at == clock()
        assert completed.status == "within_sla"

        clock.advance(hours=10)
        status = await sla_service.get_sla_status("art-1")
        assert status.status == "within_sla"
        assert status.is_overdue is False
        assert status.time_remaining_seconds == 3 * 3600

    @pytest.mark.asyncio
    async def test_completion_records_observed_breach(self, sla_service, artifact_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "low")
        clock.advance(hours=2)

        completed = await sla_service.complete_sla_tracking("art-1")

        assert completed.status == "breached"

    @pytest.mark.asyncio
    async def test_completing_twice_keeps_first_timestamp(self, sla_service, artifact_repo, clock):
        artifact_repo.add("art-1")
        await sla_service.create_sla_tracking("art-1", "low")
        first = await sla_service.complete_sla_tracking("art-1")
        clock.advance(minutes=5)

        second = await sla_service.complete_sla_tracking("art-1")

        assert second.completed_at == first.completed_at


class TestQueues:
    async def _seed(self, sla_service, artifact_repo, clock):
        # Deadlines: a=+1h(low), b=+4h(medium), c=+24h(high), d=+48h(critical, other project)
        artifact_repo.add("a")
        artifact_repo.add("b")
        artifact_repo.add("c")
        artifact_repo.add("d", project_id="proj-2")
        await sla_service.create_sla_tracking("a", "low")
        await sla_service.create_sla_tracking("b", "medium")
        await sla_service.create_sla_tracking("c", "high")
        await sla_service.create_sla_tracking("d", "critical")

    @pytest.mark.asyncio
    async def test_open_queue_is_ordered_by_deadline(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)

        page = await sla_service.get_approaching_slas()

        assert [t.artifact_id for t in page.items] == ["a", "b", "c", "d"]
        assert page.total == 4
        assert page.total_pages == 1

    @pytest.mark.asyncio
    async def test_pagination(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)

        first = await sla_service.get_approaching_slas(page=1, limit=3)
        second = await sla_service.get_approaching_slas(page=2, limit=3)

        assert [t.artifact_id for t in first.items] == ["a", "b", "c"]
        assert [t.artifact_id for t in second.items] == ["d"]
        assert first.total == second.total == 4
        assert first.total_pages == 2

    @pytest.mark.asyncio
    async def test_project_filter(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)

        page = await sla_service.get_approaching_slas(project_id="proj-2")

        assert [t.artifact_id for t in page.items] == ["d"]

    @pytest.mark.asyncio
    async def test_breached_queue_holds_breached_and_escalated(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)
        clock.advance(hours=5)
        await sla_service.get_sla_status("a")
        await sla_service.get_sla_status("b")
        await sla_service.escalate(EscalateInput(artifact_id="c", escalated_to_id="lead", reason="manual"))

        breached = await sla_service.get_breached_slas()
        open_ = await sla_service.get_approaching_slas()

        assert [t.artifact_id for t in breached.items] == ["a", "b", "c"]
        assert [t.artifact_id for t in open_.items] == ["d"]

    @pytest.mark.asyncio
    async def test_completed_rows_leave_the_queues(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)
        clock.advance(hours=2)
        await sla_service.get_sla_status("a")
        await sla_service.complete_sla_tracking("a")
        await sla_service.complete_sla_tracking("b")

        assert (await sla_service.get_breached_slas()).total == 0
        assert [t.artifact_id for t in (await sla_service.get_approaching_slas()).items] == ["c", "d"]

    @pytest.mark.asyncio
    async def test_out_of_range_paging_is_normalised(self, sla_service, artifact_repo, clock):
        await self._seed(sla_service, artifact_repo, clock)

        page = await sla_service.get_approaching_slas(page=0, limit=0)

        assert page.page == 1
        assert page.limit == 1
        assert [t.artifact_id for t in page.items] == ["a"]
