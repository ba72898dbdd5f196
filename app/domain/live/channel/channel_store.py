"""Persistence of channel records and their usage records."""

from typing import Any

from beanie.operators import Set
from loguru import logger

from app.schemas import Channel, ChannelState, UsageRecord
from app.shared.utils import utc_now

from ...utils.idgen import new_channel_id
from .channel_models import ChannelDraft, UsageSeed


class ChannelStore:
    """Channel and UsageRecord documents, one MongoDB document each.

    Writes are last-writer-wins per document; Channel and UsageRecord are
    never updated in the same transaction.
    """

    async def create_channel(self, draft: ChannelDraft) -> Channel:
        now = utc_now()
        channel = Channel(
            channel_id=new_channel_id(),
            tenant_id=draft.tenant_id,
            name=draft.name,
            description=draft.description,
            status=ChannelState.CREATING,
            hls_settings=draft.hls_settings,
            created_at=now,
            updated_at=now,
        )

        logger.debug(f"Creating channel: {channel.model_dump(exclude={'id'})}")
        await channel.insert()
        return channel

    async def update_channel(self, channel_id: str, patch: dict[str, Any]) -> None:
        """Apply a partial update; `updated_at` is always refreshed."""
        fields = {**patch, "updated_at": utc_now()}
        await Channel.find_one(Channel.channel_id == channel_id).update(Set(fields))

    async def get_channel(self, channel_id: str) -> Channel | None:
        return await Channel.find_one(Channel.channel_id == channel_id)

    async def list_channels_by_tenant(self, tenant_id: str) -> list[Channel]:
        return await Channel.find(Channel.tenant_id == tenant_id).sort("-created_at").to_list()

    async def count_channels_by_tenant(self, tenant_id: str) -> int:
        return await Channel.find(Channel.tenant_id == tenant_id).count()

    async def delete_channel(self, channel_id: str) -> None:
        await Channel.find(Channel.channel_id == channel_id).delete()
        logger.info(f"Deleted channel record {channel_id}")

    async def create_usage_record(self, channel_id: str, seed: UsageSeed) -> None:
        now = utc_now()
        record = UsageRecord(
            channel_id=channel_id,
            **seed.model_dump(),
            created_at=now,
            updated_at=now,
        )
        await record.insert()

    async def get_usage_record(self, channel_id: str) -> UsageRecord | None:
        return await UsageRecord.find_one(UsageRecord.channel_id == channel_id)

    async def delete_usage_record(self, channel_id: str) -> None:
        await UsageRecord.find(UsageRecord.channel_id == channel_id).delete()
