from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from repokit.logging.logger import get_logger
from repokit.response import ResponseModel
from typing import Any
from repokit.config import settings

_logger = get_logger("exception_handler")

class BusinessException(Exception):
    """Base class for business exceptions."""
    def __init__(self, message: str, status_code: int = 200, code: int = 400, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.detail = detail


class NotFound(BusinessException):
    """The addressed record does not exist."""
    def __init__(self, model: str, key: Any = None, message: str = None):
        if message is None:
            message = f"No query results for model [{model}]"
            if key is not None:
                message += f" {key}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, code=404,
                         detail={"model": model, "key": key})
        self.model = model
        self.key = key


class NoModelConfigured(BusinessException):
    """A repository was used before a model was bound to it."""
    def __init__(self, repository: str):
        super().__init__(
            f"{repository} : this repository has no defined model.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=500,
        )
        self.repository = repository


class InvalidConfiguration(BusinessException):
    """Repository or files configuration is missing required values."""
    def __init__(self, message: str, config_path: str = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code=500,
                         detail={"config": config_path} if config_path else None)
        self.config_path = config_path


def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    path = request.url.path
    # Handlers outside the logging middleware do not see its contextualized trace id
    logger = _logger.bind(trace_id=getattr(request.state, "trace_id", "system"))

    if isinstance(exc, NotFound):
        logger.info(f"{request.method} {path} - NotFound: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ResponseModel.fail(code=exc.code, message=exc.message)
        )

    if isinstance(exc, BusinessException):
        logger.warning(f"{request.method} {path} - BusinessError: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ResponseModel.fail(code=exc.code, message=exc.message)
        )

    if isinstance(exc, RequestValidationError):
        logger.error(f"{request.method} {path} - ValidationError: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ResponseModel.fail(code=422, message="Invalid request parameters", data=exc.errors())
        )

    if isinstance(exc, SQLAlchemyError):
        logger.critical(f"{request.method} {path} - DatabaseError: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ResponseModel.fail(code=500, message="Service temporarily unavailable")
        )

    logger.opt(exception=True).error(f"{request.method} {path} - UncaughtException: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseModel.fail(
            code=500,
            message="System busy, please try again later",
            data={"error": type(exc).__name__} if settings.DEBUG else None
        )
    )
