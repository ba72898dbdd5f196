"""Tests for channel decommission."""

from unittest.mock import AsyncMock, patch

import pytest

from app.domain.live.channel._decommission import DecommissionOrchestrator
from app.domain.live.channel._provisioning import ProvisioningOrchestrator
from app.domain.live.channel.channel_models import ChannelCreateParams, TenantContext
from app.domain.live.channel.channel_store import ChannelStore
from app.schemas import Channel, ChannelState, UsageRecord
from app.services.integrations.compute_models import TerminateResult
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode
from tests.fixtures.compute_fixtures import make_compute

OWNER = TenantContext(tenant_id="tenant_a", plan_key="pro")
OTHER = TenantContext(tenant_id="tenant_b", plan_key="enterprise")
ADMIN = TenantContext(tenant_id="ops", plan_key=None, is_admin=True)


@pytest.mark.usefixtures("clear_collections")
class TestDecommission:
    """Tests for DecommissionOrchestrator.decommission."""

    @pytest.fixture
    def store(self) -> ChannelStore:
        return ChannelStore()

    async def _create(self, store: ChannelStore, compute, fast_settings) -> str:
        result = await ProvisioningOrchestrator(store, compute, fast_settings).create(
            OWNER, ChannelCreateParams(name="Live")
        )
        return result.channel_id

    async def test_real_instance_terminated(self, beanie_db, store, ready_compute, fast_settings):
        channel_id = await self._create(store, ready_compute, fast_settings)

        result = await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert result.instance_terminated is True
        assert result.message == "Channel deleted and compute instance termination initiated"
        ready_compute.terminate.assert_awaited_once_with("i-0abc123def4567890")
        assert result.termination_error is None
        assert await Channel.find_one(Channel.channel_id == channel_id) is None
        assert await UsageRecord.find_one(UsageRecord.channel_id == channel_id) is None

    async def test_mock_instance_not_terminated(self, beanie_db, store, failing_compute, fast_settings):
        channel_id = await self._create(store, failing_compute, fast_settings)

        result = await DecommissionOrchestrator(store, failing_compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert result.instance_terminated is False
        assert result.message == "Channel deleted successfully"
        failing_compute.terminate.assert_not_awaited()
        assert result.termination_error is None
        assert await store.get_channel(channel_id) is None

    async def test_terminate_exception_is_tolerated(self, beanie_db, store, ready_compute, fast_settings):
        """A throwing termination call still deletes the channel and reports the attempt with its error."""
        channel_id = await self._create(store, ready_compute, fast_settings)
        compute = make_compute(terminate_error=RuntimeError("ec2 unavailable"))

        result = await DecommissionOrchestrator(store, compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert result.instance_terminated is True
        assert result.message == "Channel deleted and compute instance termination initiated"
        assert result.termination_error == "RuntimeError: ec2 unavailable"
        compute.terminate.assert_awaited_once_with("i-0abc123def4567890")
        assert await store.get_channel(channel_id) is None

    async def test_terminate_failure_result_is_tolerated(self, beanie_db, store, ready_compute, fast_settings):
        channel_id = await self._create(store, ready_compute, fast_settings)
        compute = make_compute(terminate_result=TerminateResult(success=False, error="InvalidInstanceID"))

        result = await DecommissionOrchestrator(store, compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert result.instance_terminated is True
        assert result.message == "Channel deleted and compute instance termination initiated"
        assert result.termination_error == "InvalidInstanceID"

    async def test_usage_record_delete_failure_is_tolerated(
        self, beanie_db, store, ready_compute, fast_settings
    ):
        channel_id = await self._create(store, ready_compute, fast_settings)

        with patch.object(store, "delete_usage_record", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert await store.get_channel(channel_id) is None

    async def test_other_tenant_rejected_without_mutation(
        self, beanie_db, store, ready_compute, fast_settings
    ):
        """A tenant that does not own the channel cannot delete it and changes nothing."""
        channel_id = await self._create(store, ready_compute, fast_settings)
        ready_compute.terminate.reset_mock()

        with pytest.raises(AppError) as exc_info:
            await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, OTHER)

        assert exc_info.value.errcode == AppErrorCode.E_FORBIDDEN.value
        assert exc_info.value.status_code == HttpStatusCode.FORBIDDEN
        ready_compute.terminate.assert_not_awaited()

        saved = await store.get_channel(channel_id)
        assert saved is not None
        assert saved.status == ChannelState.ACTIVE
        assert await store.get_usage_record(channel_id) is not None

    async def test_admin_bypasses_ownership(self, beanie_db, store, ready_compute, fast_settings):
        channel_id = await self._create(store, ready_compute, fast_settings)

        result = await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, ADMIN)

        assert result.success is True
        assert await store.get_channel(channel_id) is None

    async def test_missing_channel(self, beanie_db, store, ready_compute):
        with pytest.raises(AppError) as exc_info:
            await DecommissionOrchestrator(store, ready_compute).decommission("ch_missing", OWNER)

        assert exc_info.value.errcode == AppErrorCode.E_CHANNEL_NOT_FOUND.value
        assert exc_info.value.status_code == HttpStatusCode.NOT_FOUND

    async def test_channel_delete_failure_propagates(self, beanie_db, store, ready_compute, fast_settings):
        channel_id = await self._create(store, ready_compute, fast_settings)

        with patch.object(store, "delete_channel", AsyncMock(side_effect=RuntimeError("mongo down"))):
            with pytest.raises(RuntimeError, match="mongo down"):
                await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, OWNER)

    async def test_maintenance_channel_deleted_directly(self, beanie_db, store, ready_compute, fast_settings):
        channel_id = await self._create(store, ready_compute, fast_settings)
        await store.update_channel(channel_id, {"status": ChannelState.MAINTENANCE})

        result = await DecommissionOrchestrator(store, ready_compute).decommission(channel_id, OWNER)

        assert result.success is True
        assert await store.get_channel(channel_id) is None
