"""Endpoint conventions of the per-channel streaming instance.

Bootstrap scripts already deployed on running instances serve these exact
ports and paths, so the URLs must not change shape.
"""

from pydantic import BaseModel

HTTP_PORT = 8000
RTMP_PORT = 1935
STATUS_SERVER_PORT = 8080


class ChannelEndpoints(BaseModel):
    hls_url: str
    rtmp_url: str
    transcoding_url: str
    health_check_url: str
    status_server_url: str


def derive_endpoints(address: str, channel_id: str) -> ChannelEndpoints:
    return ChannelEndpoints(
        hls_url=f"http://{address}:{HTTP_PORT}/hls/{channel_id}/playlist.m3u8",
        rtmp_url=f"rtmp://{address}:{RTMP_PORT}/live/{channel_id}",
        transcoding_url=f"http://{address}:{HTTP_PORT}/api/status",
        health_check_url=f"http://{address}:{HTTP_PORT}/health",
        status_server_url=f"http://{address}:{STATUS_SERVER_PORT}/health",
    )
