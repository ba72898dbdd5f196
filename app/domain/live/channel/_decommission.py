"""Channel decommission operations."""

from loguru import logger

from app.schemas import ChannelState
from app.services.integrations.compute_models import ComputeProvisioner
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .channel_models import DecommissionResult, TenantContext
from .channel_state_machine import ChannelStateMachine
from .channel_store import ChannelStore

MESSAGE_TERMINATION_INITIATED = "Channel deleted and compute instance termination initiated"
MESSAGE_DELETED = "Channel deleted successfully"


class DecommissionOrchestrator:
    """Tears a channel down: instance, channel record, usage record.

    Only the ownership check and the channel deletion can fail the call.
    Instance termination and usage-record cleanup are best effort.
    """

    def __init__(self, store: ChannelStore, compute: ComputeProvisioner):
        self.store = store
        self.compute = compute

    async def decommission(self, channel_id: str, tenant: TenantContext) -> DecommissionResult:
        """
        Delete a channel owned by the tenant (any channel for admins).

        Args:
            channel_id: Channel to delete
            tenant: Requesting identity

        Returns:
            DecommissionResult; success is True whenever the channel record was deleted

        Raises:
            AppError: E_CHANNEL_NOT_FOUND (404) or E_FORBIDDEN (403) before any mutation
        """
        channel = await self.store.get_channel(channel_id)
        if not channel:
            raise AppError(
                errcode=AppErrorCode.E_CHANNEL_NOT_FOUND,
                errmesg=f"Channel {channel_id} not found",
                status_code=HttpStatusCode.NOT_FOUND,
            )

        if channel.tenant_id != tenant.tenant_id and not tenant.is_admin:
            logger.warning(
                f"Tenant {tenant.tenant_id} attempted to delete channel {channel_id} "
                f"owned by {channel.tenant_id}"
            )
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="You do not have permission to delete this channel",
                status_code=HttpStatusCode.FORBIDDEN,
            )

        if ChannelStateMachine.can_transition(channel.status, ChannelState.TERMINATING):
            try:
                await self.store.update_channel(channel_id, {"status": ChannelState.TERMINATING})
            except Exception:
                logger.exception(f"Failed to mark channel {channel_id} as terminating")
        else:
            logger.info(f"Deleting channel {channel_id} directly from {channel.status} state")

        # reports the attempt; a failed call is surfaced through termination_error
        instance_terminated = bool(channel.instance_id and not channel.is_mock)
        termination_error = None
        if instance_terminated:
            try:
                result = await self.compute.terminate(channel.instance_id)
                if not result.success:
                    termination_error = result.error or "terminate call unsuccessful"
                    logger.error(
                        f"Failed to terminate instance {channel.instance_id} "
                        f"for channel {channel_id}: {termination_error}"
                    )
            except Exception as e:
                termination_error = f"{type(e).__name__}: {e}"
                logger.exception(
                    f"Error terminating instance {channel.instance_id} for channel {channel_id}"
                )

        await self.store.delete_channel(channel_id)

        try:
            await self.store.delete_usage_record(channel_id)
        except Exception:
            logger.exception(f"Failed to delete usage record for channel {channel_id}")

        logger.info(
            f"Decommissioned channel {channel_id} by tenant {tenant.tenant_id} "
            f"(admin={tenant.is_admin}, instance_terminated={instance_terminated}, "
            f"termination_error={termination_error})"
        )

        return DecommissionResult(
            channel_id=channel_id,
            success=True,
            instance_terminated=instance_terminated,
            message=MESSAGE_TERMINATION_INITIATED if instance_terminated else MESSAGE_DELETED,
            termination_error=termination_error,
        )
