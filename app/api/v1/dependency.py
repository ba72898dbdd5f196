import hmac
from typing import Annotated

import jwt
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from app.app_config import get_app_environ_config
from app.domain.live.channel.channel_domain import ChannelService
from app.domain.live.channel.channel_models import TenantContext
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

_bearer = HTTPBearer(auto_error=False)

# Singleton instance
_channel_service: ChannelService | None = None


def get_channel_service() -> ChannelService:
    """Get the singleton ChannelService instance."""
    global _channel_service
    if _channel_service is None:
        _channel_service = ChannelService()
    return _channel_service


def _bad_token(errmesg: str = "Invalid token") -> AppError:
    return AppError(
        errcode=AppErrorCode.E_BAD_TOKEN,
        errmesg=errmesg,
        status_code=HttpStatusCode.UNAUTHORIZED,
    )


def decode_tenant_token(token: str) -> TenantContext:
    """Resolve a bearer JWT into the caller's identity facts.

    Required claim: tenant_id. Optional: plan, is_admin.
    """
    cfg = get_app_environ_config()
    if not cfg.AUTH_JWT_SECRET:
        logger.error("AUTH_JWT_SECRET is not configured, rejecting request")
        raise _bad_token("Authentication is not configured")

    try:
        claims = jwt.decode(token, cfg.AUTH_JWT_SECRET, algorithms=[cfg.AUTH_JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {type(e).__name__}: {e}")
        raise _bad_token() from e

    tenant_id = claims.get("tenant_id")
    if not tenant_id:
        raise _bad_token()

    return TenantContext(
        tenant_id=str(tenant_id),
        plan_key=claims.get("plan"),
        is_admin=bool(claims.get("is_admin", False)),
    )


async def get_current_tenant(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> TenantContext:
    # Do not log request headers here (may include secrets like Authorization).
    if credentials is None or not credentials.credentials:
        raise _bad_token("Missing bearer token")

    tenant = decode_tenant_token(credentials.credentials)
    logger.debug("Authenticated tenant_id: {} plan: {}", tenant.tenant_id, tenant.plan_key)
    return tenant


async def get_current_admin(tenant: TenantContext = Depends(get_current_tenant)) -> TenantContext:
    if not tenant.is_admin:
        raise AppError(
            errcode=AppErrorCode.E_FORBIDDEN,
            errmesg="Admin privileges required",
            status_code=HttpStatusCode.FORBIDDEN,
        )
    return tenant


async def verify_ingest_token(x_ingest_token: str | None = Header(default=None)) -> None:
    """Shared-secret check for callbacks from the streaming instances."""
    secret = get_app_environ_config().INGEST_WEBHOOK_SECRET
    if not secret or not x_ingest_token or not hmac.compare_digest(x_ingest_token, secret):
        raise _bad_token("Invalid ingest token")


CurrentTenant = Annotated[TenantContext, Depends(get_current_tenant)]
CurrentAdmin = Annotated[TenantContext, Depends(get_current_admin)]
