"""Tests for request authentication dependencies."""

import time

import jwt
import pytest

from app.api.v1.dependency import decode_tenant_token, get_current_admin, verify_ingest_token
from app.app_config import get_app_environ_config
from app.domain.live.channel.channel_models import TenantContext
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

SECRET = "test-jwt-secret-with-enough-length-for-hs256"


@pytest.fixture
def jwt_secret(monkeypatch) -> str:
    monkeypatch.setattr(get_app_environ_config(), "AUTH_JWT_SECRET", SECRET)
    monkeypatch.setattr(get_app_environ_config(), "AUTH_JWT_ALGORITHM", "HS256")
    return SECRET


def _token(claims: dict, secret: str = SECRET) -> str:
    return jwt.encode(claims, secret, algorithm="HS256")


class TestDecodeTenantToken:
    def test_valid_token(self, jwt_secret):
        tenant = decode_tenant_token(_token({"tenant_id": "tenant_a", "plan": "pro"}))

        assert tenant.tenant_id == "tenant_a"
        assert tenant.plan_key == "pro"
        assert tenant.is_admin is False

    def test_admin_claim(self, jwt_secret):
        tenant = decode_tenant_token(_token({"tenant_id": "ops", "is_admin": True}))

        assert tenant.is_admin is True
        assert tenant.plan_key is None

    def test_expired_token(self, jwt_secret):
        token = _token({"tenant_id": "tenant_a", "exp": int(time.time()) - 60})

        with pytest.raises(AppError) as exc_info:
            decode_tenant_token(token)

        assert exc_info.value.errcode == AppErrorCode.E_BAD_TOKEN.value
        assert exc_info.value.status_code == HttpStatusCode.UNAUTHORIZED

    def test_wrong_secret(self, jwt_secret):
        token = _token({"tenant_id": "tenant_a"}, secret="another-secret-with-enough-length-for-hs256")

        with pytest.raises(AppError) as exc_info:
            decode_tenant_token(token)

        assert exc_info.value.status_code == HttpStatusCode.UNAUTHORIZED

    def test_missing_tenant_id(self, jwt_secret):
        with pytest.raises(AppError) as exc_info:
            decode_tenant_token(_token({"plan": "pro"}))

        assert exc_info.value.errcode == AppErrorCode.E_BAD_TOKEN.value

    def test_secret_not_configured(self, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "AUTH_JWT_SECRET", None)

        with pytest.raises(AppError) as exc_info:
            decode_tenant_token(_token({"tenant_id": "tenant_a"}))

        assert exc_info.value.status_code == HttpStatusCode.UNAUTHORIZED


class TestGetCurrentAdmin:
    async def test_admin_passes(self):
        admin = TenantContext(tenant_id="ops", is_admin=True)

        assert await get_current_admin(admin) is admin

    async def test_tenant_rejected(self):
        with pytest.raises(AppError) as exc_info:
            await get_current_admin(TenantContext(tenant_id="tenant_a", plan_key="pro"))

        assert exc_info.value.errcode == AppErrorCode.E_FORBIDDEN.value
        assert exc_info.value.status_code == HttpStatusCode.FORBIDDEN


class TestVerifyIngestToken:
    async def test_matching_token(self, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "INGEST_WEBHOOK_SECRET", "ingest-secret")

        assert await verify_ingest_token("ingest-secret") is None

    async def test_wrong_token(self, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "INGEST_WEBHOOK_SECRET", "ingest-secret")

        with pytest.raises(AppError) as exc_info:
            await verify_ingest_token("guess")

        assert exc_info.value.status_code == HttpStatusCode.UNAUTHORIZED

    async def test_secret_not_configured(self, monkeypatch):
        monkeypatch.setattr(get_app_environ_config(), "INGEST_WEBHOOK_SECRET", None)

        with pytest.raises(AppError):
            await verify_ingest_token("anything")
