"""
Common response models and utilities.

Error body schema and the generic page wrapper. JSON keys are camelCase.

Dependencies: pydantic
System role: Common API response structures
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API models serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """Error response schema shared by every failing request."""

    status_code: int = Field(description="HTTP status code")
    timestamp: datetime = Field(description="When the error was produced (UTC)")
    path: str = Field(description="Request path")
    method: str = Field(description="Request method")
    error_type: str = Field(description="Error kind, e.g. NotFoundError")
    message: str = Field(description="Human-readable error message")


class PageMeta(CamelModel):
    """Pagination metadata."""

    total: int = Field(description="Total records across all pages")
    page: int = Field(description="1-based page number returned")
    limit: int = Field(description="Page size applied")
    last_page: int = Field(description="Last page number (1 when empty)")


class PaginatedResponse(CamelModel, Generic[T]):
    """Generic paginated response wrapper."""

    data: list[T]
    meta: PageMeta
