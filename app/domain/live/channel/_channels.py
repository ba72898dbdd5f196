"""Channel read, lifecycle and health operations."""

from loguru import logger

from app.domain.billing import get_plan, has_feature_access, sanitize_hls_settings
from app.domain.billing.plans import list_plans
from app.schemas import Channel, ChannelState, HlsSettings
from app.services.integrations.transcoding_probe import TranscodingProbe, TranscodingStatus
from app.shared.utils import utc_now
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .channel_models import (
    ChannelResponse,
    FeatureAccessResult,
    TenantContext,
    TranscodingCheckResult,
)
from .channel_state_machine import ChannelStateMachine
from .channel_store import ChannelStore


def effective_hls_settings(channel: Channel, tenant: TenantContext | None) -> HlsSettings:
    """Stored snapshot re-filtered against the owner's current plan.

    Internal callers and admins reading another tenant's channel get the
    stored snapshot, since the owner's current plan is not known to them.
    """
    if tenant is None or channel.tenant_id != tenant.tenant_id:
        return channel.hls_settings
    return sanitize_hls_settings(tenant.plan, channel.hls_settings)


class ChannelOperations:
    """Channel-related operations."""

    def __init__(self, store: ChannelStore, probe: TranscodingProbe):
        self.store = store
        self.probe = probe

    async def _get_owned_channel(self, channel_id: str, tenant: TenantContext) -> Channel:
        channel = await self.store.get_channel(channel_id)
        if not channel:
            logger.warning(f"Channel {channel_id} not found for tenant {tenant.tenant_id}")
            raise AppError(
                errcode=AppErrorCode.E_CHANNEL_NOT_FOUND,
                errmesg=f"Channel not found: {channel_id}",
                status_code=HttpStatusCode.NOT_FOUND,
            )

        if channel.tenant_id != tenant.tenant_id and not tenant.is_admin:
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="You do not have access to this channel",
                status_code=HttpStatusCode.FORBIDDEN,
            )
        return channel

    def _to_response(self, channel: Channel, tenant: TenantContext | None) -> ChannelResponse:
        data = channel.model_dump(exclude={"id", "hls_settings"})
        return ChannelResponse(**data, hls_settings=effective_hls_settings(channel, tenant))

    async def get_channel(self, channel_id: str, tenant: TenantContext) -> ChannelResponse:
        """Get a single channel the tenant owns (admins may read any channel).

        Raises AppError if the channel is not found or not owned.
        """
        channel = await self._get_owned_channel(channel_id, tenant)
        return self._to_response(channel, tenant)

    async def list_channels(self, tenant: TenantContext) -> list[ChannelResponse]:
        channels = await self.store.list_channels_by_tenant(tenant.tenant_id)
        return [self._to_response(channel, tenant) for channel in channels]

    async def transition(
        self,
        channel_id: str,
        new_state: ChannelState,
        tenant: TenantContext | None = None,
    ) -> ChannelResponse:
        """
        Move a provisioned channel between ACTIVE, STREAMING and MAINTENANCE.

        Endpoints and instance fields are left untouched.

        Args:
            channel_id: Channel to update
            new_state: Target state
            tenant: Requesting identity; None for trusted internal callers (ingest webhook)

        Raises:
            AppError: E_CHANNEL_NOT_FOUND, E_FORBIDDEN or E_INVALID_STATE_TRANSITION (409)
        """
        if tenant is not None:
            channel = await self._get_owned_channel(channel_id, tenant)
        else:
            channel = await self.store.get_channel(channel_id)
            if not channel:
                raise AppError(
                    errcode=AppErrorCode.E_CHANNEL_NOT_FOUND,
                    errmesg=f"Channel not found: {channel_id}",
                    status_code=HttpStatusCode.NOT_FOUND,
                )

        if channel.status == new_state:
            logger.info(f"Channel {channel_id} already {new_state}, skipping")
            return self._to_response(channel, tenant)

        if not ChannelStateMachine.can_transition(channel.status, new_state):
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE_TRANSITION,
                errmesg=f"Invalid state transition: {channel.status} -> {new_state}",
                status_code=HttpStatusCode.CONFLICT,
            )

        await self.store.update_channel(channel_id, {"status": new_state})
        logger.info(f"Channel {channel_id} transitioned {channel.status} -> {new_state}")

        channel.status = new_state
        return self._to_response(channel, tenant)

    async def check_transcoding(self, channel_id: str, tenant: TenantContext) -> TranscodingCheckResult:
        """Probe the channel's transcoding service and store the observed status."""
        channel = await self._get_owned_channel(channel_id, tenant)
        checked_at = utc_now()

        if channel.is_mock:
            result = TranscodingCheckResult(
                channel_id=channel_id,
                public_ip=channel.public_ip,
                status=TranscodingStatus.MOCK,
                is_mock=True,
                checked_at=checked_at,
            )
        elif not channel.transcoding_url or not channel.status_server_url:
            result = TranscodingCheckResult(
                channel_id=channel_id,
                public_ip=channel.public_ip,
                status=TranscodingStatus.UNREACHABLE,
                is_mock=False,
                error="Channel has no provisioned instance",
                checked_at=checked_at,
            )
        else:
            probe = await self.probe.probe(channel.transcoding_url, channel.status_server_url)
            result = TranscodingCheckResult(
                channel_id=channel_id,
                public_ip=channel.public_ip,
                status=probe.status,
                is_mock=False,
                details=probe.details,
                error=probe.error,
                checked_at=checked_at,
            )

        await self.store.update_channel(
            channel_id,
            {"transcoding_status": result.status.value, "transcoding_checked_at": checked_at},
        )
        logger.debug(f"Transcoding check for channel {channel_id}: {result.status}")
        return result


def check_feature_access(tenant: TenantContext, feature: str) -> FeatureAccessResult:
    plan = get_plan(tenant.plan_key)
    has_access = has_feature_access(plan, feature)
    logger.debug(f"Feature check: tenant={tenant.tenant_id} plan={tenant.plan_key} {feature}={has_access}")
    return FeatureAccessResult(
        feature=feature,
        has_access=has_access,
        current_plan=plan.key.value if plan else None,
        plan_name=plan.name if plan else None,
        plan_price=plan.price if plan else None,
        plan_channels=plan.channels if plan else None,
        plan_features=list(plan.features) if plan else [],
        required_plan=None if has_access else _lowest_plan_with(feature),
    )


def _lowest_plan_with(feature: str) -> str | None:
    for plan in list_plans():
        if has_feature_access(plan, feature):
            return plan.key.value
    return None
