from fastapi import APIRouter, Depends

from app.api.v1.dependency import CurrentAdmin, get_channel_service
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.channel import ChannelIdIn, ChannelOut, DeleteChannelOut, SetMaintenanceIn
from app.domain.live.channel.channel_domain import ChannelService

router = APIRouter(prefix="/admin/channel", tags=["Admin"])


@router.post("/set_maintenance")
async def set_maintenance(
    body: SetMaintenanceIn,
    admin: CurrentAdmin,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ChannelOut]:
    """Move an active channel into maintenance, or back to active."""
    if body.enabled:
        result = await service.enter_maintenance(admin, body.channel_id)
    else:
        result = await service.exit_maintenance(admin, body.channel_id)

    return ApiOut[ChannelOut](results=ChannelOut(**result.model_dump()))


@router.post("/terminate")
async def terminate(
    body: ChannelIdIn,
    admin: CurrentAdmin,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[DeleteChannelOut]:
    """Tear down any tenant's channel."""
    result = await service.terminate_channel(admin, body.channel_id)

    return ApiOut[DeleteChannelOut](results=DeleteChannelOut(**result.model_dump()))
