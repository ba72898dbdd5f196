"""Callbacks from the streaming instances when RTMP ingest starts or stops."""

from fastapi import APIRouter, Depends
from loguru import logger

from app.api.v1.dependency import get_channel_service, verify_ingest_token
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.channel import ChannelOut, IngestEventIn
from app.domain.live.channel.channel_domain import ChannelService

router = APIRouter(prefix="/ingest", dependencies=[Depends(verify_ingest_token)])


@router.post("/stream_started")
async def stream_started(
    body: IngestEventIn,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ChannelOut]:
    logger.info(f"Ingest started for channel {body.channel_id}")
    result = await service.mark_streaming(body.channel_id)

    return ApiOut[ChannelOut](results=ChannelOut(**result.model_dump()))


@router.post("/stream_stopped")
async def stream_stopped(
    body: IngestEventIn,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ChannelOut]:
    logger.info(f"Ingest stopped for channel {body.channel_id}")
    result = await service.mark_stream_stopped(body.channel_id)

    return ApiOut[ChannelOut](results=ChannelOut(**result.model_dump()))
