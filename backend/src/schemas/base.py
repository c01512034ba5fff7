"""Shared schema configuration and the response envelope."""
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every successful endpoint."""

    success: bool = True
    data: T


class SourcedResponse(ApiResponse[T], Generic[T]):
    """Envelope that also reports which auth method resolved the caller."""

    source: str


class ErrorResponse(BaseModel):
    """Envelope returned for every failure."""

    success: bool = False
    error: str
