"""Channel creation and provisioning.

A channel is created in CREATING with a plan-sanitized HLS snapshot, then
driven to ACTIVE. Compute failures never escape provisioning: when the
provider is unconfigured, errors out or never reports the instance ready,
the channel is backed by a mock instance (`is_mock=True`) whose endpoints
follow the same conventions as a real one.
"""

from __future__ import annotations

import asyncio

from loguru import logger
from pydantic import BaseModel

from app.app_config import get_app_environ_config
from app.domain.billing import check_channel_quota, sanitize_hls_settings
from app.schemas import Channel, ChannelState, HlsSettings
from app.services.integrations.compute_models import (
    AllocatedInstance,
    ComputeNotConfiguredError,
    ComputeProvisioner,
)
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ...utils.idgen import new_mock_instance_id, new_mock_private_ip, new_mock_public_ip
from .bootstrap import generate_bootstrap_script
from .channel_models import (
    ChannelCreateParams,
    ChannelDraft,
    ProvisionResult,
    TenantContext,
    UsageSeed,
)
from .channel_state_machine import ChannelStateMachine
from .channel_store import ChannelStore
from .endpoints import derive_endpoints

MOCK_INSTANCE_TYPE = "mock"
MESSAGE_ALREADY_PROVISIONED = "Channel already provisioned"
MESSAGE_NOT_CONFIGURED = "Demo instance created (compute provider not configured)"


class ProvisioningSettings(BaseModel):
    max_attempts: int = 30
    interval_seconds: float = 10.0
    attempt_timeout_seconds: float = 15.0

    @classmethod
    def from_config(cls) -> ProvisioningSettings:
        cfg = get_app_environ_config()
        return cls(
            max_attempts=cfg.PROVISION_POLL_MAX_ATTEMPTS,
            interval_seconds=cfg.PROVISION_POLL_INTERVAL_SECONDS,
            attempt_timeout_seconds=cfg.PROVISION_POLL_ATTEMPT_TIMEOUT_SECONDS,
        )


class InstanceNotReadyError(Exception):
    """The allocated instance never reached a running state with a public address."""


class ProvisioningOrchestrator:
    def __init__(
        self,
        store: ChannelStore,
        compute: ComputeProvisioner,
        settings: ProvisioningSettings | None = None,
    ):
        self.store = store
        self.compute = compute
        self.settings = settings or ProvisioningSettings.from_config()

    async def create(self, tenant: TenantContext, params: ChannelCreateParams) -> ProvisionResult:
        """Create a channel for the tenant and provision it.

        The requested settings are sanitized against the tenant's plan before
        anything is stored; the quota check happens before the record exists.

        Raises:
            AppError: E_QUOTA_EXCEEDED when the plan's channel quota is used up
        """
        plan = tenant.plan
        existing = await self.store.count_channels_by_tenant(tenant.tenant_id)
        check_channel_quota(plan, existing)

        requested = params.hls_settings
        if requested is None:
            requested = plan.default_hls_settings() if plan else HlsSettings()
        sanitized = sanitize_hls_settings(plan, requested)

        channel = await self.store.create_channel(
            ChannelDraft(
                tenant_id=tenant.tenant_id,
                name=params.name,
                description=params.description,
                hls_settings=sanitized,
            )
        )
        logger.info(
            f"Created channel {channel.channel_id} for tenant {tenant.tenant_id} "
            f"(plan={tenant.plan_key}, existing={existing})"
        )

        return await self.provision(channel.channel_id)

    async def provision(self, channel_id: str) -> ProvisionResult:
        """Drive a CREATING channel to ACTIVE.

        Calling this on a channel that already holds endpoints is a no-op
        returning the stored endpoints.

        Raises:
            AppError: E_CHANNEL_NOT_FOUND, or E_INVALID_STATE_TRANSITION when the
                channel is neither provisioned nor provisionable
        """
        channel = await self.store.get_channel(channel_id)
        if not channel:
            raise AppError(
                errcode=AppErrorCode.E_CHANNEL_NOT_FOUND,
                errmesg=f"Channel {channel_id} not found",
                status_code=HttpStatusCode.NOT_FOUND,
            )

        if channel.status in ChannelState.provisioned_states():
            logger.info(f"Channel {channel_id} already provisioned ({channel.status}), skipping")
            return _result_from_channel(channel, MESSAGE_ALREADY_PROVISIONED)

        if not ChannelStateMachine.can_transition(channel.status, ChannelState.PROVISIONING):
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE_TRANSITION,
                errmesg=f"Cannot provision channel in {channel.status} state",
                status_code=HttpStatusCode.CONFLICT,
            )

        await self.store.update_channel(channel_id, {"status": ChannelState.PROVISIONING})

        script = generate_bootstrap_script(
            channel_id,
            channel.hls_settings,
            get_app_environ_config().TRANSCODING_REPO_URL,
        )

        is_mock = False
        try:
            instance = await self._allocate_and_wait(channel_id, script)
            message = f"Streaming instance {instance.instance_type} provisioned successfully"
        except ComputeNotConfiguredError as e:
            logger.warning(f"Compute not configured for channel {channel_id}, using mock instance: {e}")
            instance, is_mock, message = _mock_instance(), True, MESSAGE_NOT_CONFIGURED
        except Exception as e:
            logger.warning(f"Compute provisioning failed for channel {channel_id}, using mock instance: {e}")
            instance, is_mock = _mock_instance(), True
            message = f"Demo instance created (compute provisioning failed: {e})"

        endpoints = derive_endpoints(instance.public_ip, channel_id)
        patch = {
            "status": ChannelState.ACTIVE,
            "instance_id": instance.instance_id,
            "instance_type": instance.instance_type,
            "public_ip": instance.public_ip,
            "private_ip": instance.private_ip,
            **endpoints.model_dump(),
            "is_mock": is_mock,
            "provision_message": message,
        }

        try:
            await self.store.update_channel(channel_id, patch)
            await self.store.create_usage_record(channel_id, UsageSeed(tenant_id=channel.tenant_id))
        except Exception:
            logger.exception(f"Failed to persist provisioning outcome for channel {channel_id}")
            if not is_mock:
                await self._release_instance(instance.instance_id)
            await self._mark_failed(channel_id)
            raise

        logger.info(
            f"Channel {channel_id} active: instance={instance.instance_id} "
            f"ip={instance.public_ip} is_mock={is_mock}"
        )

        return ProvisionResult(
            channel_id=channel_id,
            status=ChannelState.ACTIVE,
            instance_id=instance.instance_id,
            instance_type=instance.instance_type,
            public_ip=instance.public_ip,
            private_ip=instance.private_ip,
            **endpoints.model_dump(),
            hls_settings=channel.hls_settings,
            is_mock=is_mock,
            message=message,
        )

    async def _allocate_and_wait(self, channel_id: str, script: str) -> AllocatedInstance:
        """Allocate an instance and wait until it is running with a public address.

        Once allocation has succeeded, any failure (an erroring or overrunning
        check, or exhausted attempts) terminates the instance before the
        error propagates, so no real instance outlives an unusable channel.
        """
        instance = await self.compute.allocate(channel_id, script)
        logger.info(f"Allocated instance {instance.instance_id} for channel {channel_id}, waiting for it")

        try:
            return await self._wait_until_ready(instance)
        except Exception:
            await self._release_instance(instance.instance_id)
            raise

    async def _wait_until_ready(self, instance: AllocatedInstance) -> AllocatedInstance:
        for attempt in range(1, self.settings.max_attempts + 1):
            try:
                description = await asyncio.wait_for(
                    self.compute.describe(instance.instance_id),
                    timeout=self.settings.attempt_timeout_seconds,
                )
            except TimeoutError:
                logger.warning(
                    f"Readiness check for instance {instance.instance_id} timed out after "
                    f"{self.settings.attempt_timeout_seconds}s (attempt {attempt}/{self.settings.max_attempts})"
                )
                description = None

            if description and description.is_ready:
                logger.info(
                    f"Instance {instance.instance_id} running after {attempt} check(s): "
                    f"public_ip={description.public_ip}"
                )
                return instance.model_copy(
                    update={
                        "public_ip": description.public_ip,
                        "private_ip": description.private_ip or instance.private_ip,
                    }
                )

            logger.debug(
                f"Instance {instance.instance_id} not ready "
                f"(attempt {attempt}/{self.settings.max_attempts}, "
                f"state={description.state if description else None})"
            )
            if attempt < self.settings.max_attempts:
                await asyncio.sleep(self.settings.interval_seconds)

        raise InstanceNotReadyError(
            f"instance {instance.instance_id} not running after {self.settings.max_attempts} checks"
        )

    async def _release_instance(self, instance_id: str) -> None:
        """Best-effort termination of an instance no channel will keep."""
        try:
            result = await self.compute.terminate(instance_id)
            if not result.success:
                logger.error(f"Failed to terminate instance {instance_id}: {result.error}")
            else:
                logger.info(f"Terminated instance {instance_id} after provisioning failure")
        except Exception:
            logger.exception(f"Error terminating instance {instance_id}")

    async def _mark_failed(self, channel_id: str) -> None:
        try:
            await self.store.update_channel(channel_id, {"status": ChannelState.FAILED})
        except Exception:
            logger.exception(f"Failed to mark channel {channel_id} as failed")


def _mock_instance() -> AllocatedInstance:
    return AllocatedInstance(
        instance_id=new_mock_instance_id(),
        instance_type=MOCK_INSTANCE_TYPE,
        public_ip=new_mock_public_ip(),
        private_ip=new_mock_private_ip(),
    )


def _result_from_channel(channel: Channel, message: str) -> ProvisionResult:
    return ProvisionResult(
        channel_id=channel.channel_id,
        status=channel.status,
        instance_id=channel.instance_id,
        instance_type=channel.instance_type,
        public_ip=channel.public_ip,
        private_ip=channel.private_ip,
        hls_url=channel.hls_url,
        rtmp_url=channel.rtmp_url,
        transcoding_url=channel.transcoding_url,
        health_check_url=channel.health_check_url,
        status_server_url=channel.status_server_url,
        hls_settings=channel.hls_settings,
        is_mock=channel.is_mock,
        message=message,
    )
