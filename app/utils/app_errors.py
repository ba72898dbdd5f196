"""Application error type raised by domain services and mapped to API failures."""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_BAD_TOKEN = "E_BAD_TOKEN"
    E_FORBIDDEN = "E_FORBIDDEN"
    E_CHANNEL_NOT_FOUND = "E_CHANNEL_NOT_FOUND"
    E_CHANNEL_BUSY = "E_CHANNEL_BUSY"
    E_PLAN_NOT_FOUND = "E_PLAN_NOT_FOUND"
    E_QUOTA_EXCEEDED = "E_QUOTA_EXCEEDED"
    E_INVALID_STATE_TRANSITION = "E_INVALID_STATE_TRANSITION"

    def __str__(self) -> str:
        return self.value


class HttpStatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500


class AppError(Exception):
    """Error carrying an API error code, message and HTTP status.

    The raising call site is captured so handlers can log where the error
    originated without a full traceback.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.BAD_REQUEST,
    ):
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]

        caller_frame = inspect.stack()[1]
        module = inspect.getmodule(caller_frame.frame)
        module_name = module.__name__ if module else caller_frame.filename
        self.caller_info = f"{module_name}:{caller_frame.function}:{caller_frame.lineno}"

        super().__init__(errmesg)

    def __repr__(self) -> str:
        return f"AppError({self.errcode}, {self.errmesg!r}, status_code={self.status_code})"
