"""Schemas for the REST quote endpoints (/api/quotes)."""

from datetime import datetime

from pydantic import BaseModel, Field


class QuoteOut(BaseModel):
    """A quote as served to clients, optionally with like data."""

    id: str
    content: str
    author: str
    tags: list[str] = Field(default_factory=list)
    length: int | None = None
    date_added: str | None = Field(alias="dateAdded", default=None)
    date_modified: str | None = Field(alias="dateModified", default=None)
    likes: int | None = None
    is_liked: bool | None = Field(alias="isLiked", default=None)

    model_config = {"populate_by_name": True}


class LikeOut(BaseModel):
    """Like state of a quote after a like/unlike."""

    quote_id: str = Field(alias="quoteId")
    likes: int = Field(ge=0)
    is_liked: bool = Field(alias="isLiked")

    model_config = {"populate_by_name": True}


class PopularQuoteOut(BaseModel):
    quote_id: str = Field(alias="quoteId")
    likes: int = Field(ge=0)

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Response payload for GET /api/quotes/random."""

    success: bool = True
    data: QuoteOut
    timestamp: datetime


class QuoteListResponse(BaseModel):
    """Response payload for GET /api/quotes/similar/{quoteId}."""

    success: bool = True
    data: list[QuoteOut]
    count: int = Field(ge=0)
    timestamp: datetime


class LikeResponse(BaseModel):
    """Response payload for POST/DELETE /api/quotes/{quoteId}/like."""

    success: bool = True
    data: LikeOut
    timestamp: datetime


class PopularListResponse(BaseModel):
    """Response payload for GET /api/quotes/popular."""

    success: bool = True
    data: list[PopularQuoteOut]
    count: int = Field(ge=0)
    timestamp: datetime
