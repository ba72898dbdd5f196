"""Channel domain service - the single entry point used by the API routers."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from redis.exceptions import RedisError

from app.app_config import get_app_environ_config
from app.schemas import ChannelState
from app.services.integrations.compute_models import ComputeProvisioner
from app.services.integrations.ec2_service import ec2_service
from app.services.integrations.transcoding_probe import TranscodingProbe, transcoding_probe
from app.shared.lock import LockManager
from app.shared.storage.redis import get_redis_client
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ._channels import ChannelOperations, check_feature_access
from ._decommission import DecommissionOrchestrator
from ._provisioning import ProvisioningOrchestrator, ProvisioningSettings
from .channel_models import (
    ChannelCreateParams,
    ChannelResponse,
    DecommissionResult,
    FeatureAccessResult,
    ProvisionResult,
    TenantContext,
    TranscodingCheckResult,
)
from .channel_store import ChannelStore

LOCK_PREFIX = "streamflow"
LOCK_BLOCKING_TIMEOUT_SECONDS = 10


class ChannelService:
    """Channel lifecycle service.

    Every operation takes the caller's TenantContext explicitly; nothing is
    read from request-local state.
    """

    def __init__(
        self,
        store: ChannelStore | None = None,
        compute: ComputeProvisioner | None = None,
        probe: TranscodingProbe | None = None,
        settings: ProvisioningSettings | None = None,
    ):
        self.store = store or ChannelStore()
        compute = compute or ec2_service
        self._provisioning = ProvisioningOrchestrator(self.store, compute, settings)
        self._decommission = DecommissionOrchestrator(self.store, compute)
        self._channels = ChannelOperations(self.store, probe or transcoding_probe)

    # ==================== LIFECYCLE ====================

    async def create_channel(self, tenant: TenantContext, params: ChannelCreateParams) -> ProvisionResult:
        """Create and provision a channel for the tenant.

        Raises AppError E_QUOTA_EXCEEDED (403) when the plan's quota is used up.
        Compute failures degrade to a mock instance instead of raising.
        """
        async with self._exclusive("tenant", tenant.tenant_id):
            return await self._provisioning.create(tenant, params)

    async def delete_channel(self, tenant: TenantContext, channel_id: str) -> DecommissionResult:
        """Delete a channel and terminate its instance.

        Raises AppError if the channel is not found or not owned by the tenant.
        """
        async with self._exclusive("channel", channel_id):
            return await self._decommission.decommission(channel_id, tenant)

    async def terminate_channel(self, admin: TenantContext, channel_id: str) -> DecommissionResult:
        """Admin teardown of any tenant's channel."""
        self._require_admin(admin)
        return await self.delete_channel(admin, channel_id)

    # ==================== READS ====================

    async def get_channel(self, tenant: TenantContext, channel_id: str) -> ChannelResponse:
        return await self._channels.get_channel(channel_id, tenant)

    async def list_channels(self, tenant: TenantContext) -> list[ChannelResponse]:
        return await self._channels.list_channels(tenant)

    async def check_transcoding(self, tenant: TenantContext, channel_id: str) -> TranscodingCheckResult:
        return await self._channels.check_transcoding(channel_id, tenant)

    def validate_feature(self, tenant: TenantContext, feature: str) -> FeatureAccessResult:
        return check_feature_access(tenant, feature)

    # ==================== TRANSITIONS ====================

    async def mark_streaming(self, channel_id: str) -> ChannelResponse:
        """Ingest started on the channel's RTMP endpoint."""
        return await self._channels.transition(channel_id, ChannelState.STREAMING)

    async def mark_stream_stopped(self, channel_id: str) -> ChannelResponse:
        return await self._channels.transition(channel_id, ChannelState.ACTIVE)

    async def enter_maintenance(self, admin: TenantContext, channel_id: str) -> ChannelResponse:
        self._require_admin(admin)
        return await self._channels.transition(channel_id, ChannelState.MAINTENANCE, admin)

    async def exit_maintenance(self, admin: TenantContext, channel_id: str) -> ChannelResponse:
        self._require_admin(admin)
        return await self._channels.transition(channel_id, ChannelState.ACTIVE, admin)

    def _require_admin(self, tenant: TenantContext) -> None:
        if not tenant.is_admin:
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="Admin privileges required",
                status_code=HttpStatusCode.FORBIDDEN,
            )

    @asynccontextmanager
    async def _exclusive(self, *key_parts: str) -> AsyncIterator[None]:
        """Serialize operations on the same key when CHANNEL_LOCK_ENABLED is set.

        Falls back to running unlocked if Redis is unavailable (graceful degradation).
        """
        cfg = get_app_environ_config()
        if not cfg.CHANNEL_LOCK_ENABLED:
            yield
            return

        try:
            lock = LockManager(
                get_redis_client(),
                lock_prefix=LOCK_PREFIX,
                default_ttl=cfg.CHANNEL_LOCK_TTL_SECONDS,
            )
            acquired = await lock.acquire(
                *key_parts,
                blocking=True,
                blocking_timeout=LOCK_BLOCKING_TIMEOUT_SECONDS,
            )
        except (RedisError, ConnectionError, OSError) as e:
            logger.warning(f"Redis unavailable for channel lock, proceeding unlocked: {e}")
            yield
            return

        if not acquired:
            raise AppError(
                errcode=AppErrorCode.E_CHANNEL_BUSY,
                errmesg="Another operation is in progress for this channel, try again later",
                status_code=HttpStatusCode.CONFLICT,
            )

        try:
            yield
        finally:
            try:
                await lock.release()
            except (RedisError, ConnectionError, OSError) as e:
                logger.warning(f"Failed to release channel lock: {e}")
