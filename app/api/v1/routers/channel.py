from fastapi import APIRouter, Depends, Query

from app.api.v1.dependency import CurrentTenant, get_channel_service
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.channel import (
    ChannelIdIn,
    ChannelOut,
    CreateChannelIn,
    DeleteChannelOut,
    ListChannelsOut,
    ProvisionOut,
    TranscodingStatusOut,
)
from app.domain.live.channel.channel_domain import ChannelService
from app.domain.live.channel.channel_models import ChannelCreateParams

router = APIRouter(prefix="/channel")


@router.post("/create_channel")
async def create_channel(
    channel: CreateChannelIn,
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ProvisionOut]:
    """Create and provision a channel for the authenticated tenant.

    The response is a success even when the channel is backed by a mock
    instance; check `is_mock`.
    """
    params = ChannelCreateParams(
        name=channel.name,
        description=channel.description,
        hls_settings=channel.hls_settings,
    )

    result = await service.create_channel(tenant, params)

    return ApiOut[ProvisionOut](results=ProvisionOut(**result.model_dump()))


@router.post("/delete_channel")
async def delete_channel(
    body: ChannelIdIn,
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[DeleteChannelOut]:
    """Delete a channel owned by the authenticated tenant and terminate its instance."""
    result = await service.delete_channel(tenant, body.channel_id)

    return ApiOut[DeleteChannelOut](results=DeleteChannelOut(**result.model_dump()))


@router.get("/get_channel")
async def get_channel(
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
    channel_id: str = Query(..., description="Channel identifier"),
) -> ApiOut[ChannelOut]:
    result = await service.get_channel(tenant, channel_id)

    return ApiOut[ChannelOut](results=ChannelOut(**result.model_dump()))


@router.get("/list_channels")
async def list_channels(
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ListChannelsOut]:
    """List channels for the authenticated tenant, newest first."""
    channels = await service.list_channels(tenant)

    return ApiOut[ListChannelsOut](
        results=ListChannelsOut(channels=[ChannelOut(**ch.model_dump()) for ch in channels])
    )


@router.post("/check_transcoding")
async def check_transcoding(
    body: ChannelIdIn,
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[TranscodingStatusOut]:
    """Probe the channel's transcoding service; the observed status is stored on the channel."""
    result = await service.check_transcoding(tenant, body.channel_id)

    return ApiOut[TranscodingStatusOut](results=TranscodingStatusOut(**result.model_dump()))
