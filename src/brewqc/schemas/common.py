"""Response envelopes shared by the BrewQC routers."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Message(BaseModel):
    """Plain acknowledgement, e.g. after a delete."""

    message: str


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of records plus the size of the full result."""

    model_config = ConfigDict(from_attributes=True)

    items: list[T]
    total: int
    page: int
    page_size: int
    pages: int


class HealthCheck(BaseModel):
    """Service status with the database probe result."""

    status: str
    version: str
    database: str


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    code is a stable machine-readable tag (NOT_FOUND, VALIDATION_ERROR);
    params carries the offending entity or field.
    """

    detail: str
    code: str | None = None
    params: dict[str, Any] | None = None
