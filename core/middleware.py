from fastapi import FastAPI
from fastapi import Request
from fastapi import Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from typing import Optional
import time

from apps.schemas import ErrorResponse
from config import settings
from core.log import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."
VALIDATION_ERROR_MESSAGE = "Validation failed."
NOT_FOUND_MESSAGE = "The requested resource was not found."


def error_response(status_code: int, message: str, detailed: Optional[str] = None) -> JSONResponse:
    """统一的错误响应格式，生产环境下不返回 detailed"""
    body = ErrorResponse(
        status_code=status_code,
        message=message,
        detailed=None if settings.is_production else detailed,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def count_time_middleware(app: FastAPI):
    # 记录每个请求所用的时间
    @app.middleware("http")
    async def count_time(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.debug(f"请求 {request.method} {request.url.path} 耗时: {duration:.4f} 秒")
        return response


def register_exception_handlers(app: FastAPI):
    # HTTPException (例如 404) 和请求体校验失败 统一使用同一种错误格式
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else NOT_FOUND_MESSAGE
        return error_response(exc.status_code, message, detailed=str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, VALIDATION_ERROR_MESSAGE, detailed=format_validation_errors(exc))


class GlobalExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """
    全局异常兜底：路由里没有处理的异常都在这里转换成统一的 JSON 错误响应。
    - ValueError   -> 400 (pydantic ValidationError 除外)
    - LookupError  -> 404
    - 其它         -> 500
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("An unhandled exception occurred: %s", exc)
            return self.handle_exception(exc)

    @staticmethod
    def handle_exception(exc: Exception) -> JSONResponse:
        status_code = 500
        message = INTERNAL_ERROR_MESSAGE

        # pydantic 的 ValidationError 也是 ValueError，走到这里说明是服务端模型出错
        if isinstance(exc, ValueError) and not isinstance(exc, ValidationError):
            status_code = 400
            message = str(exc) or VALIDATION_ERROR_MESSAGE
        elif isinstance(exc, LookupError):
            status_code = 404
            message = NOT_FOUND_MESSAGE

        return error_response(status_code, message, detailed=str(exc))
