"""
Domain errors raised by the service layer and their HTTP translation.

Routers keep raising HTTPException for request-level problems; anything
raised from services/ derives from DomainError and is mapped here.
"""
import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class InactiveReferenceError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class ItemKindError(DomainError, ValueError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InsufficientStockError(DomainError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        item_id: UUID,
        available: Decimal,
        requested: Decimal,
        item_name: Optional[str] = None,
    ):
        label = item_name or str(item_id)
        super().__init__(f"Insufficient stock for {label}: available {available}, requested {requested}")
        self.item_id = item_id
        self.available = available
        self.requested = requested


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Constraint violations (check_item_type, FK RESTRICT, unique) reject the write as a whole
    logger.warning("%s %s violated a constraint: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "Constraint violation"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
