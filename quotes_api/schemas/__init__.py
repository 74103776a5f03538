"""Pydantic schemas for API request/response validation."""

from quotes_api.schemas.common import ErrorDetail, ErrorResponse, HealthResponse
from quotes_api.schemas.quotes import (
    LikeOut,
    LikeResponse,
    PopularListResponse,
    PopularQuoteOut,
    QuoteListResponse,
    QuoteOut,
    QuoteResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "LikeOut",
    "LikeResponse",
    "PopularListResponse",
    "PopularQuoteOut",
    "QuoteListResponse",
    "QuoteOut",
    "QuoteResponse",
]
