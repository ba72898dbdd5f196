"""Contract between the channel orchestrators and a compute provider."""

from typing import Protocol

from pydantic import BaseModel

RUNNING_STATE = "running"


class AllocatedInstance(BaseModel):
    instance_id: str
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None


class InstanceDescription(BaseModel):
    instance_id: str
    state: str
    public_ip: str | None = None
    private_ip: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.state == RUNNING_STATE and bool(self.public_ip)


class TerminateResult(BaseModel):
    success: bool
    error: str | None = None


class ComputeNotConfiguredError(Exception):
    """Raised by allocate() when the provider cannot be used at all."""


class ComputeProvisioner(Protocol):
    async def allocate(self, channel_id: str, bootstrap_script: str) -> AllocatedInstance: ...

    async def terminate(self, instance_id: str) -> TerminateResult: ...

    async def describe(self, instance_id: str) -> InstanceDescription | None: ...
