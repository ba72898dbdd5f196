import time
import traceback
import uuid
from contextlib import asynccontextmanager
from os import environ

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.v1.errors import app_error_handler
from app.app_config import get_app_environ_config
from app.schemas.init_schemas import init_schema
from app.shared.api import health
from app.shared.api.utils import (
    api_failure,
    init_logger,
    load_routes,
    log_routes,
    validation_exception_handler,
)
from app.shared.config import config
from app.shared.storage.mongo import get_mongo_manager
from app.shared.storage.redis import close_redis_client
from app.utils.app_errors import AppError, AppErrorCode


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore
        start_time = time.time()
        request_id = str(uuid.uuid4())[:8]

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000

            logger.info(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Duration: {process_time:.2f}ms"
            )

            return response

        except Exception as exc:
            process_time = (time.time() - start_time) * 1000

            logger.error(
                f"[{request_id}] Unhandled exception in {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - "
                f"Error: {type(exc).__name__}: {exc}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            failure = api_failure(
                errcode=AppErrorCode.E_INTERNAL_ERROR.value,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return ORJSONResponse(
                status_code=500,
                content=failure.model_dump(),
            )


@asynccontextmanager
async def lifespan(server: FastAPI):
    init_logger()

    logger.info("Application startup...")

    cfg = get_app_environ_config()
    if cfg.DEMO_MODE or not cfg.aws_configured:
        logger.warning("Compute provider disabled, new channels will be backed by mock instances")

    # Initialize MongoDB schemas and Beanie ODM
    await init_schema()

    log_routes(server)

    if config.get_bool("LOGFIRE_ENABLE"):
        logger.info("Logfire initializing")

        logfire.configure(
            token=config.get("LOGFIRE_TOKEN"),
            service_name="streamflow-control-plane",
            service_version=environ.get("BUILD_COMMIT") or "dev",
        )

        logger.info("Logfire instrument fastapi")
        logfire.instrument_fastapi(server, capture_headers=True)

        logger.info("Logfire instrument mongo")
        logfire.instrument_pymongo(capture_statement=config.get_bool("DEBUG"))

        logger.info("Logfire instrument pydantic")
        logfire.instrument_pydantic()

    yield

    logger.info("Application shutdown...")

    await close_redis_client()
    get_mongo_manager().close_all()


app = FastAPI(
    version="1.0",
    title="StreamFlow Control Plane API",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

DEBUG = config.get_bool("DEBUG")

app.add_middleware(HTTPLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=get_app_environ_config().API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
app.add_exception_handler(AppError, app_error_handler)  # type: ignore

app.include_router(health.router)
load_routes(app, "app.api.v1.routers", "/api/v1")


def build_granian_kwargs():
    cfg = get_app_environ_config()
    kwargs = {
        "interface": "asgi",
        "address": cfg.API_HOST,
        "port": cfg.API_PORT,
        "workers": cfg.API_WORKERS,
        "reload": DEBUG,
    }

    return kwargs


if __name__ == "__main__":
    granian_kwargs = build_granian_kwargs()
    Granian("app.main:app", **granian_kwargs).serve()
