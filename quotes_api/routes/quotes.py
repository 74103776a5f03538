"""REST quote endpoints.

GET    /api/quotes/random               - random quote (smart=true for recommendations)
GET    /api/quotes/similar/{quoteId}    - quotes similar to the given one
POST   /api/quotes/{quoteId}/like       - like a quote
DELETE /api/quotes/{quoteId}/like       - remove a like
GET    /api/quotes/popular              - most liked quotes

The caller is identified by the optional x-user-id header.
Routers are thin: call services for business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, Path, Query

from quotes_api.schemas import (
    LikeOut,
    LikeResponse,
    PopularListResponse,
    PopularQuoteOut,
    QuoteListResponse,
    QuoteOut,
    QuoteResponse,
)
from quotes_api.services.quote_gateway import Quote
from quotes_api.services.quotes import QuoteService, get_quote_service
from quotes_api.stores.likes import LikeResult

router = APIRouter()

QUOTE_ID_PATH = Path(
    description="Upstream quote id",
    min_length=1,
    max_length=100,
    examples=["bh8n3Yc8dZ", "dummy_17"],
)


def get_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Caller identity from the x-user-id header (blank means anonymous)."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


@router.get("/random", response_model=QuoteResponse)
async def get_random_quote(
    smart: bool = Query(default=False, description="Blend preferences and popularity"),
    user_id: str | None = Depends(get_user_id),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    """Get a random quote with its like count."""
    result = await service.random_quote(user_id=user_id, smart=smart)
    return QuoteResponse(
        data=_quote_out(result.quote, result.likes),
        timestamp=_now(),
    )


@router.get("/similar/{quote_id}", response_model=QuoteListResponse, response_model_exclude_none=True)
async def get_similar_quotes(
    quote_id: str = QUOTE_ID_PATH,
    limit: int = Query(default=5, ge=1, le=50),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteListResponse:
    """Get quotes sharing tags with the given quote, backfilled with random ones."""
    quotes = await service.similar_quotes(quote_id, limit)
    return QuoteListResponse(
        data=[_quote_out(q) for q in quotes],
        count=len(quotes),
        timestamp=_now(),
    )


@router.post("/{quote_id}/like", response_model=LikeResponse)
async def like_quote(
    quote_id: str = QUOTE_ID_PATH,
    user_id: str | None = Depends(get_user_id),
    service: QuoteService = Depends(get_quote_service),
) -> LikeResponse:
    """Like a quote (idempotent per user)."""
    result = await service.like_quote(quote_id, user_id)
    return LikeResponse(data=_like_out(quote_id, result), timestamp=_now())


@router.delete("/{quote_id}/like", response_model=LikeResponse)
async def unlike_quote(
    quote_id: str = QUOTE_ID_PATH,
    user_id: str | None = Depends(get_user_id),
    service: QuoteService = Depends(get_quote_service),
) -> LikeResponse:
    """Remove the caller's like."""
    result = await service.unlike_quote(quote_id, user_id)
    return LikeResponse(data=_like_out(quote_id, result), timestamp=_now())


@router.get("/popular", response_model=PopularListResponse)
async def get_popular_quotes(
    limit: int = Query(default=10, ge=1, le=100),
    service: QuoteService = Depends(get_quote_service),
) -> PopularListResponse:
    """Get the most liked quotes, descending by like count."""
    entries = await service.popular_quotes(limit)
    return PopularListResponse(
        data=[PopularQuoteOut(quote_id=e.quote_id, likes=e.like_count) for e in entries],
        count=len(entries),
        timestamp=_now(),
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _quote_out(quote: Quote, likes: LikeResult | None = None) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        content=quote.content,
        author=quote.author,
        tags=list(quote.tags),
        length=quote.length,
        date_added=quote.date_added,
        date_modified=quote.date_modified,
        likes=likes.like_count if likes else None,
        is_liked=likes.is_liked if likes else None,
    )


def _like_out(quote_id: str, result: LikeResult) -> LikeOut:
    return LikeOut(quote_id=quote_id, likes=result.like_count, is_liked=result.is_liked)
