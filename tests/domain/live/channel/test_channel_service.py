"""Tests for ChannelService reads, transitions and transcoding checks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.app_config import get_app_environ_config
from app.domain.live.channel.channel_domain import ChannelService
from app.domain.live.channel.channel_models import ChannelCreateParams, TenantContext
from app.domain.live.channel.channel_store import ChannelStore
from app.schemas import ChannelState, GeoLocking, HlsSettings
from app.services.integrations.transcoding_probe import ProbeResult, TranscodingProbe, TranscodingStatus
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

OWNER = TenantContext(tenant_id="tenant_a", plan_key="pro")
OTHER = TenantContext(tenant_id="tenant_b", plan_key="pro")
ADMIN = TenantContext(tenant_id="ops", is_admin=True)


@pytest.fixture
def probe() -> AsyncMock:
    probe = AsyncMock(spec=TranscodingProbe)
    probe.probe.return_value = ProbeResult(status=TranscodingStatus.RUNNING, details={"streams": 1})
    return probe


@pytest.fixture
def service(ready_compute, probe, fast_settings) -> ChannelService:
    return ChannelService(store=ChannelStore(), compute=ready_compute, probe=probe, settings=fast_settings)


@pytest.mark.usefixtures("clear_collections")
class TestReads:
    async def test_get_channel_owner(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        channel = await service.get_channel(OWNER, created.channel_id)

        assert channel.channel_id == created.channel_id
        assert channel.status == ChannelState.ACTIVE
        assert channel.hls_url == created.hls_url

    async def test_get_channel_other_tenant_forbidden(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        with pytest.raises(AppError) as exc_info:
            await service.get_channel(OTHER, created.channel_id)

        assert exc_info.value.status_code == HttpStatusCode.FORBIDDEN

    async def test_get_channel_not_found(self, beanie_db, service: ChannelService):
        with pytest.raises(AppError) as exc_info:
            await service.get_channel(OWNER, "ch_missing")

        assert exc_info.value.errcode == AppErrorCode.E_CHANNEL_NOT_FOUND.value

    async def test_list_channels_only_own(self, beanie_db, service: ChannelService):
        await service.create_channel(OWNER, ChannelCreateParams(name="one"))
        await service.create_channel(OWNER, ChannelCreateParams(name="two"))
        await service.create_channel(OTHER, ChannelCreateParams(name="theirs"))

        channels = await service.list_channels(OWNER)

        assert {c.name for c in channels} == {"one", "two"}

    async def test_settings_refiltered_after_downgrade(self, beanie_db, service: ChannelService):
        """A tenant downgraded to basic no longer sees pro-only features on existing channels."""
        created = await service.create_channel(
            OWNER,
            ChannelCreateParams(
                name="Live",
                hls_settings=HlsSettings(geo_locking=GeoLocking(enabled=True, allowed_countries=["US"])),
            ),
        )
        assert created.hls_settings.geo_locking.enabled is True

        downgraded = TenantContext(tenant_id=OWNER.tenant_id, plan_key="basic")
        channel = await service.get_channel(downgraded, created.channel_id)

        assert channel.hls_settings.geo_locking.enabled is False
        assert channel.hls_settings.geo_locking.allowed_countries == []

    def test_validate_feature(self, service: ChannelService):
        result = service.validate_feature(TenantContext(tenant_id="t", plan_key="pro"), "4k")

        assert result.has_access is False
        assert result.current_plan == "pro"
        assert result.required_plan == "enterprise"


@pytest.mark.usefixtures("clear_collections")
class TestTransitions:
    """Ingest and maintenance transitions."""

    async def test_stream_started_and_stopped(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        streaming = await service.mark_streaming(created.channel_id)
        assert streaming.status == ChannelState.STREAMING
        assert streaming.hls_url == created.hls_url

        stopped = await service.mark_stream_stopped(created.channel_id)
        assert stopped.status == ChannelState.ACTIVE

    async def test_stream_started_twice_is_noop(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        await service.mark_streaming(created.channel_id)
        again = await service.mark_streaming(created.channel_id)

        assert again.status == ChannelState.STREAMING

    async def test_streaming_during_maintenance_rejected(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))
        await service.enter_maintenance(ADMIN, created.channel_id)

        with pytest.raises(AppError) as exc_info:
            await service.mark_streaming(created.channel_id)

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_STATE_TRANSITION.value
        assert exc_info.value.status_code == HttpStatusCode.CONFLICT

    async def test_maintenance_round_trip_keeps_endpoints(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        entered = await service.enter_maintenance(ADMIN, created.channel_id)
        exited = await service.exit_maintenance(ADMIN, created.channel_id)

        assert entered.status == ChannelState.MAINTENANCE
        assert exited.status == ChannelState.ACTIVE
        assert exited.rtmp_url == created.rtmp_url

    async def test_maintenance_requires_admin(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        with pytest.raises(AppError) as exc_info:
            await service.enter_maintenance(OWNER, created.channel_id)

        assert exc_info.value.errcode == AppErrorCode.E_FORBIDDEN.value

    async def test_admin_terminate_any_channel(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        result = await service.terminate_channel(ADMIN, created.channel_id)

        assert result.success is True
        with pytest.raises(AppError):
            await service.get_channel(OWNER, created.channel_id)

    async def test_terminate_requires_admin(self, beanie_db, service: ChannelService):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        with pytest.raises(AppError) as exc_info:
            await service.terminate_channel(OWNER, created.channel_id)

        assert exc_info.value.status_code == HttpStatusCode.FORBIDDEN


@pytest.mark.usefixtures("clear_collections")
class TestCheckTranscoding:
    async def test_probe_result_persisted(self, beanie_db, service: ChannelService, probe: AsyncMock):
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        result = await service.check_transcoding(OWNER, created.channel_id)

        assert result.status == TranscodingStatus.RUNNING
        assert result.details == {"streams": 1}
        probe.probe.assert_awaited_once_with(created.transcoding_url, created.status_server_url)

        channel = await service.get_channel(OWNER, created.channel_id)
        assert channel.transcoding_status == "running"
        assert channel.transcoding_checked_at is not None

    async def test_mock_channel_not_probed(self, beanie_db, failing_compute, probe, fast_settings):
        service = ChannelService(compute=failing_compute, probe=probe, settings=fast_settings)
        created = await service.create_channel(OWNER, ChannelCreateParams(name="Demo"))

        result = await service.check_transcoding(OWNER, created.channel_id)

        assert result.status == TranscodingStatus.MOCK
        assert result.is_mock is True
        probe.probe.assert_not_awaited()


@pytest.mark.usefixtures("clear_collections")
class TestChannelLock:
    """Opt-in Redis lock around lifecycle operations."""

    async def test_redis_unavailable_runs_unlocked(self, beanie_db, service: ChannelService, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "CHANNEL_LOCK_ENABLED", True)
        redis_client = MagicMock()
        redis_client.set = AsyncMock(side_effect=RedisConnectionError("connection refused"))

        with patch("app.domain.live.channel.channel_domain.get_redis_client", return_value=redis_client):
            result = await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        assert result.status == ChannelState.ACTIVE

    async def test_busy_channel_rejected(self, beanie_db, service: ChannelService, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "CHANNEL_LOCK_ENABLED", True)
        monkeypatch.setattr("app.domain.live.channel.channel_domain.LOCK_BLOCKING_TIMEOUT_SECONDS", 0)
        redis_client = MagicMock()
        redis_client.set = AsyncMock(return_value=None)

        with patch("app.domain.live.channel.channel_domain.get_redis_client", return_value=redis_client):
            with pytest.raises(AppError) as exc_info:
                await service.delete_channel(OWNER, "ch_any")

        assert exc_info.value.errcode == AppErrorCode.E_CHANNEL_BUSY.value
        assert exc_info.value.status_code == HttpStatusCode.CONFLICT

    async def test_lock_released_after_operation(self, beanie_db, service: ChannelService, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "CHANNEL_LOCK_ENABLED", True)
        redis_client = MagicMock()
        redis_client.set = AsyncMock(return_value=True)
        redis_client.eval = AsyncMock(return_value=1)

        with patch("app.domain.live.channel.channel_domain.get_redis_client", return_value=redis_client):
            await service.create_channel(OWNER, ChannelCreateParams(name="Live"))

        lock_key = redis_client.set.await_args.args[0]
        assert lock_key == "streamflow:tenant:tenant_a"
        redis_client.eval.assert_awaited_once()
