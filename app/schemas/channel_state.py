"""Channel lifecycle states."""

from enum import Enum


class ChannelState(str, Enum):
    """Channel lifecycle states.

    State Transition Flow:

    CREATING → PROVISIONING → ACTIVE ⇄ STREAMING
                    ↓           ↓  ↑
                  FAILED    MAINTENANCE
                    ↓
    TERMINATING → (document deleted)

    State Descriptions:
    - CREATING: Channel record exists, no compute yet. Set by create_channel().
    - PROVISIONING: Compute allocation issued, polling for readiness.
    - ACTIVE: Endpoints available (real or mock instance).
    - STREAMING: Ingest observed on the RTMP endpoint. Set by the ingest webhook.
    - MAINTENANCE: Admin excursion from ACTIVE; endpoints are kept.
    - FAILED: Provisioning could not persist its outcome.
    - TERMINATING: Decommission in progress; the document is deleted next.
    """

    CREATING = "creating"
    PROVISIONING = "provisioning"
    ACTIVE = "active"
    STREAMING = "streaming"
    MAINTENANCE = "maintenance"
    FAILED = "failed"
    TERMINATING = "terminating"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def provisioned_states(cls) -> list["ChannelState"]:
        """States in which the channel already holds endpoints."""
        return [
            ChannelState.ACTIVE,
            ChannelState.STREAMING,
            ChannelState.MAINTENANCE,
        ]


__all__ = ["ChannelState"]
