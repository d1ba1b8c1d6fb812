"""Service exceptions and their HTTP rendering."""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from brewqc.schemas.common import ErrorResponse

logger = structlog.get_logger()


class BrewQCError(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        params: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.params = params


class NotFoundError(BrewQCError):
    """A referenced batch, user or quality check does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} {entity_id} not found",
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            params={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(BrewQCError):
    """Caller supplied data the service cannot accept."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            params={"field": field} if field else None,
        )
        self.field = field


def _error_body(detail: str, code: str, params: dict[str, Any] | None) -> dict:
    return ErrorResponse(detail=detail, code=code, params=params).model_dump()


def register_exception_handlers(app: FastAPI) -> None:
    """Map service and request validation errors onto JSON responses."""

    @app.exception_handler(BrewQCError)
    async def brewqc_error_handler(request: Request, exc: BrewQCError) -> JSONResponse:
        logger.info(
            "Request failed",
            path=request.url.path,
            code=exc.code,
            detail=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.code, exc.params),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "Invalid request payload", "VALIDATION_ERROR", {"errors": errors}
            ),
        )
