from pydantic import BaseModel

from app.shared.config import config


def _split_csv(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class AppEnvironConfig(BaseModel):
    # When enabled, the compute provisioner refuses to call AWS and every channel degrades to a mock instance.
    DEMO_MODE: bool = config.get_bool("DEMO_MODE", True)

    # AWS / EC2 configuration
    AWS_ACCESS_KEY_ID: str | None = (config.get("AWS_ACCESS_KEY_ID") or "").strip() or None
    AWS_SECRET_ACCESS_KEY: str | None = (config.get("AWS_SECRET_ACCESS_KEY") or "").strip() or None
    AWS_REGION: str = (config.get("AWS_REGION") or "us-east-1").strip()
    AWS_LAUNCH_TEMPLATE_ID: str | None = (config.get("AWS_LAUNCH_TEMPLATE_ID") or "").strip() or None
    SECURITY_GROUP_IDS: list[str] = _split_csv(config.get("SECURITY_GROUP_IDS"))
    # Ubuntu 22.04 LTS in us-east-1
    EC2_IMAGE_ID: str = (config.get("EC2_IMAGE_ID") or "ami-0d5d9d301c853a04a").strip()
    EC2_INSTANCE_TYPE: str = (config.get("EC2_INSTANCE_TYPE") or "c5.xlarge").strip()
    TRANSCODING_REPO_URL: str = (
        config.get("TRANSCODING_REPO_URL") or "https://github.com/example/node-transcoding.git"
    ).strip()

    # Provisioning readiness polling
    PROVISION_POLL_MAX_ATTEMPTS: int = config.get_int("PROVISION_POLL_MAX_ATTEMPTS", 30)
    PROVISION_POLL_INTERVAL_SECONDS: float = config.get_float("PROVISION_POLL_INTERVAL_SECONDS", 10.0)
    # Upper bound for a single readiness check; a check that overruns counts as not ready
    PROVISION_POLL_ATTEMPT_TIMEOUT_SECONDS: float = config.get_float("PROVISION_POLL_ATTEMPT_TIMEOUT_SECONDS", 15.0)
    # botocore socket timeouts for every EC2 call
    EC2_CONNECT_TIMEOUT_SECONDS: float = config.get_float("EC2_CONNECT_TIMEOUT_SECONDS", 5.0)
    EC2_READ_TIMEOUT_SECONDS: float = config.get_float("EC2_READ_TIMEOUT_SECONDS", 30.0)

    # Transcoding health probe
    TRANSCODING_PROBE_TIMEOUT_SECONDS: float = config.get_float("TRANSCODING_PROBE_TIMEOUT_SECONDS", 5.0)

    # Optional per-channel advisory lock (Redis)
    CHANNEL_LOCK_ENABLED: bool = config.get_bool("CHANNEL_LOCK_ENABLED", False)
    CHANNEL_LOCK_TTL_SECONDS: int = config.get_int("CHANNEL_LOCK_TTL_SECONDS", 600)

    # Identity
    AUTH_JWT_SECRET: str | None = (config.get("AUTH_JWT_SECRET") or "").strip() or None
    AUTH_JWT_ALGORITHM: str = (config.get("AUTH_JWT_ALGORITHM") or "HS256").strip()
    INGEST_WEBHOOK_SECRET: str | None = (config.get("INGEST_WEBHOOK_SECRET") or "").strip() or None

    # HTTP server
    API_HOST: str = (config.get("API_HOST") or "0.0.0.0").strip()
    API_PORT: int = config.get_int("API_PORT", 8000)
    API_WORKERS: int = config.get_int("API_WORKERS", 1)
    API_CORS_ORIGINS: list[str] = _split_csv(config.get("API_CORS_ORIGINS")) or ["*"]

    @property
    def aws_configured(self) -> bool:
        has_credentials = bool(self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)
        has_launch_config = bool(self.AWS_LAUNCH_TEMPLATE_ID or self.SECURITY_GROUP_IDS)
        return has_credentials and has_launch_config


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
