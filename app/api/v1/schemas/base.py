from typing import Generic, TypeVar

from app.shared.api.utils import ApiSuccess

ResultT = TypeVar("ResultT")


class ApiOut(ApiSuccess, Generic[ResultT]):
    """Success envelope for /api/v1 routers.

    Failures never use this model; app_error_handler renders them as ApiFailure.
    """

    results: ResultT  # type: ignore[valid-type]
