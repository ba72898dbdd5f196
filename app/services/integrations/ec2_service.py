"""AWS EC2 compute provisioner.

This module provides a thin wrapper around aioboto3 EC2 operations for
launching, describing and terminating per-channel streaming instances.

Usage:
    from app.services.integrations.ec2_service import ec2_service

    instance = await ec2_service.allocate("ch_01h...", bootstrap_script)
    description = await ec2_service.describe(instance.instance_id)
    result = await ec2_service.terminate(instance.instance_id)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from app.app_config import AppEnvironConfig, get_app_environ_config

from .compute_models import (
    AllocatedInstance,
    ComputeNotConfiguredError,
    InstanceDescription,
    TerminateResult,
)

INSTANCE_PURPOSE_TAG = "StreamFlow-LiveStreaming"
INSTANCE_SERVICE_TAG = "NodeTranscoding"


class EC2Service:
    """Compute provisioner backed by EC2.

    In DEMO_MODE, or when credentials or launch configuration are missing,
    allocate() raises ComputeNotConfiguredError without touching the network
    so callers can degrade to a mock instance.
    """

    def __init__(self, cfg: AppEnvironConfig | None = None) -> None:
        self._cfg = cfg or get_app_environ_config()
        self._session: aioboto3.Session | None = None
        logger.info("EC2Service initialized")

    @property
    def enabled(self) -> bool:
        return not self._cfg.DEMO_MODE and self._cfg.aws_configured

    def _get_session(self) -> aioboto3.Session:
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self._cfg.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self._cfg.AWS_SECRET_ACCESS_KEY,
                region_name=self._cfg.AWS_REGION,
            )
            logger.info(f"EC2 session created for region: {self._cfg.AWS_REGION}")
        return self._session

    def client_config(self) -> Config:
        return Config(
            connect_timeout=self._cfg.EC2_CONNECT_TIMEOUT_SECONDS,
            read_timeout=self._cfg.EC2_READ_TIMEOUT_SECONDS,
            retries={"max_attempts": 3, "mode": "standard"},
        )

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[Any]:
        session = self._get_session()
        async with session.client("ec2", config=self.client_config()) as client:  # type: ignore[attr-defined]
            yield client

    def build_run_instances_params(self, channel_id: str, bootstrap_script: str) -> dict[str, Any]:
        """Build RunInstances parameters; a launch template wins over explicit settings."""
        params: dict[str, Any] = {
            "MinCount": 1,
            "MaxCount": 1,
            # botocore base64-encodes UserData for RunInstances
            "UserData": bootstrap_script,
            "TagSpecifications": [
                {
                    "ResourceType": "instance",
                    "Tags": [
                        {"Key": "Name", "Value": f"streaming-{channel_id}"},
                        {"Key": "ChannelId", "Value": channel_id},
                        {"Key": "Purpose", "Value": INSTANCE_PURPOSE_TAG},
                        {"Key": "Service", "Value": INSTANCE_SERVICE_TAG},
                    ],
                }
            ],
        }

        if self._cfg.AWS_LAUNCH_TEMPLATE_ID:
            params["LaunchTemplate"] = {
                "LaunchTemplateId": self._cfg.AWS_LAUNCH_TEMPLATE_ID,
                "Version": "$Latest",
            }
        else:
            params["ImageId"] = self._cfg.EC2_IMAGE_ID
            params["InstanceType"] = self._cfg.EC2_INSTANCE_TYPE
            params["SecurityGroupIds"] = list(self._cfg.SECURITY_GROUP_IDS)

        return params

    async def allocate(self, channel_id: str, bootstrap_script: str) -> AllocatedInstance:
        """Launch one instance for the channel. Does not wait for readiness.

        Raises:
            ComputeNotConfiguredError: DEMO_MODE or missing AWS configuration
            ClientError/BotoCoreError: provider failure
        """
        if self._cfg.DEMO_MODE:
            raise ComputeNotConfiguredError("compute provider disabled (DEMO_MODE=true)")
        if not self._cfg.aws_configured:
            raise ComputeNotConfiguredError(
                "AWS credentials and AWS_LAUNCH_TEMPLATE_ID or SECURITY_GROUP_IDS must be set"
            )

        params = self.build_run_instances_params(channel_id, bootstrap_script)
        logger.info(f"Launching EC2 instance for channel {channel_id}")

        async with self._get_client() as ec2:
            response = await ec2.run_instances(**params)

        instances = response.get("Instances") or []
        if not instances or not instances[0].get("InstanceId"):
            raise RuntimeError(f"RunInstances returned no instance for channel {channel_id}")

        inst = instances[0]
        allocated = AllocatedInstance(
            instance_id=inst["InstanceId"],
            instance_type=inst.get("InstanceType") or self._cfg.EC2_INSTANCE_TYPE,
            public_ip=inst.get("PublicIpAddress"),
            private_ip=inst.get("PrivateIpAddress"),
        )
        logger.info(f"Launched EC2 instance {allocated.instance_id} for channel {channel_id}")
        return allocated

    async def describe(self, instance_id: str) -> InstanceDescription | None:
        """Describe an instance; returns None when it cannot be described."""
        if not self.enabled:
            return None

        try:
            async with self._get_client() as ec2:
                response = await ec2.describe_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Failed to describe instance {instance_id}: {e}")
            return None

        reservations = response.get("Reservations") or []
        instances = reservations[0].get("Instances") if reservations else None
        if not instances:
            return None

        inst = instances[0]
        return InstanceDescription(
            instance_id=instance_id,
            state=(inst.get("State") or {}).get("Name") or "unknown",
            public_ip=inst.get("PublicIpAddress"),
            private_ip=inst.get("PrivateIpAddress"),
        )

    async def terminate(self, instance_id: str) -> TerminateResult:
        if not self.enabled:
            return TerminateResult(success=False, error="compute provider not configured")

        try:
            async with self._get_client() as ec2:
                await ec2.terminate_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error terminating instance {instance_id}: {e}")
            return TerminateResult(success=False, error=str(e))

        logger.info(f"Initiated termination of instance {instance_id}")
        return TerminateResult(success=True)


ec2_service = EC2Service()
