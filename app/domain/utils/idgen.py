import random
import string

from ulid import ULID

_BASE36 = string.digits + string.ascii_lowercase


def new_ulid(prefix: str | None = None) -> str:
    value = str(ULID()).lower()
    return f"{prefix}{value}" if prefix else value


def new_channel_id() -> str:
    return new_ulid("ch_")


def new_mock_instance_id() -> str:
    """EC2-shaped identifier for a synthetic instance: `i-` plus 9 base36 chars."""
    return "i-" + "".join(random.choices(_BASE36, k=9))


def new_mock_public_ip() -> str:
    return ".".join(str(random.randint(0, 255)) for _ in range(4))


def new_mock_private_ip() -> str:
    return f"10.0.1.{random.randint(0, 254)}"
