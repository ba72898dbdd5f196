"""Tests for channel persistence."""

import asyncio

import pytest

from app.domain.live.channel.channel_models import ChannelDraft, UsageSeed
from app.domain.live.channel.channel_store import ChannelStore
from app.schemas import Channel, ChannelState, HlsSettings, UsageRecord


def _draft(tenant_id: str = "tenant_a", name: str = "Main") -> ChannelDraft:
    return ChannelDraft(tenant_id=tenant_id, name=name, hls_settings=HlsSettings())


@pytest.mark.usefixtures("clear_collections")
class TestChannelStore:
    """Tests for ChannelStore CRUD operations."""

    @pytest.fixture
    def store(self) -> ChannelStore:
        return ChannelStore()

    async def test_create_channel_defaults(self, beanie_db, store: ChannelStore):
        """Test a new channel starts in CREATING with a ch_ identifier."""
        channel = await store.create_channel(_draft())

        assert channel.channel_id.startswith("ch_")
        assert channel.status == ChannelState.CREATING
        assert channel.is_mock is False
        assert channel.instance_id is None

        saved = await Channel.find_one(Channel.channel_id == channel.channel_id)
        assert saved is not None
        assert saved.tenant_id == "tenant_a"

    async def test_update_channel_stamps_updated_at(self, beanie_db, store: ChannelStore):
        channel = await store.create_channel(_draft())
        await asyncio.sleep(0.01)

        await store.update_channel(channel.channel_id, {"status": ChannelState.PROVISIONING})

        saved = await store.get_channel(channel.channel_id)
        assert saved.status == ChannelState.PROVISIONING
        assert saved.updated_at > channel.updated_at.replace(tzinfo=saved.updated_at.tzinfo)

    async def test_get_channel_missing(self, beanie_db, store: ChannelStore):
        assert await store.get_channel("ch_missing") is None

    async def test_list_and_count_by_tenant(self, beanie_db, store: ChannelStore):
        await store.create_channel(_draft("tenant_a", "one"))
        await store.create_channel(_draft("tenant_a", "two"))
        await store.create_channel(_draft("tenant_b", "other"))

        channels = await store.list_channels_by_tenant("tenant_a")

        assert {c.name for c in channels} == {"one", "two"}
        assert await store.count_channels_by_tenant("tenant_a") == 2
        assert await store.count_channels_by_tenant("tenant_c") == 0

    async def test_usage_record_lifecycle(self, beanie_db, store: ChannelStore):
        channel = await store.create_channel(_draft())

        await store.create_usage_record(channel.channel_id, UsageSeed(tenant_id="tenant_a"))

        record = await store.get_usage_record(channel.channel_id)
        assert record is not None
        assert record.viewer_count == 0
        assert record.peak_viewers == 0
        assert record.total_views == 0
        assert record.uptime == 0

        await store.delete_usage_record(channel.channel_id)
        assert await UsageRecord.find_one(UsageRecord.channel_id == channel.channel_id) is None

    async def test_delete_channel(self, beanie_db, store: ChannelStore):
        channel = await store.create_channel(_draft())

        await store.delete_channel(channel.channel_id)

        assert await store.get_channel(channel.channel_id) is None

    async def test_delete_missing_is_noop(self, beanie_db, store: ChannelStore):
        await store.delete_channel("ch_missing")
        await store.delete_usage_record("ch_missing")
