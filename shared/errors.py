"""
Error taxonomy for order intake.

ValidationError  -> 400, never persisted
StorageError     -> 500, caller may retry
NotificationError -> recovered locally by the order service, never reaches a client
"""
from typing import Iterable, List

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class OrderIntakeError(Exception):
    """Base class for all order intake failures."""


class ValidationError(OrderIntakeError):
    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = [m for m in messages if m] or ["Invalid order data"]
        super().__init__("; ".join(self.messages))

    @property
    def message(self) -> str:
        return "; ".join(self.messages)


class StorageError(OrderIntakeError):
    pass


class NotificationError(OrderIntakeError):
    pass


class OrderNotFoundError(OrderIntakeError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order not found")


async def _validation_error_handler(request: Request, exc: ValidationError):
    logger.info("request_rejected", path=request.url.path, errors=exc.messages)
    return JSONResponse(status_code=400, content={"message": exc.message, "errors": exc.messages})


async def _storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"message": str(exc) or "Storage error"})


async def _not_found_handler(request: Request, exc: OrderNotFoundError):
    return JSONResponse(status_code=404, content={"message": "Order not found"})


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", path=request.url.path, error=repr(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
    app.add_exception_handler(OrderNotFoundError, _not_found_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
