"""
Structured error responses for the feature API.

Every error body has the same shape:
    {"code": "feature_not_found", "message": "...", "request_id": "..."}
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
import structlog

from flagstore.core.features import InvalidGateValueError, UnsupportedDataTypeError
from flagstore.utils.context import get_request_id

logger = structlog.get_logger()


class ApiError(Exception):
    """Error raised by route handlers and rendered as a structured response."""

    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(message)


class FeatureNotFound(ApiError):
    def __init__(self, key: str):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "feature_not_found",
            f"Feature {key!r} is not registered",
        )


class GateNotFound(ApiError):
    def __init__(self, feature_key: str, gate_key: str):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "gate_not_found",
            f"Feature {feature_key!r} has no gate {gate_key!r}",
        )


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": message, "request_id": get_request_id()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate adapter and backend failures into structured responses."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(UnsupportedDataTypeError)
    async def unsupported_data_type_handler(request: Request, exc: UnsupportedDataTypeError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "unsupported_data_type",
            str(exc),
        )

    @app.exception_handler(InvalidGateValueError)
    async def invalid_gate_value_handler(request: Request, exc: InvalidGateValueError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "invalid_gate_value",
            str(exc),
        )

    async def backend_unavailable_handler(request: Request, exc: Exception):
        logger.error("Feature backend unavailable", path=request.url.path, error=str(exc))
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "backend_unavailable",
            "Feature store backend is unavailable",
        )

    app.add_exception_handler(RedisConnectionError, backend_unavailable_handler)
    app.add_exception_handler(RedisTimeoutError, backend_unavailable_handler)
