"""Quote service facade used by the REST and GraphQL adapters.

Wires the gateway, like store, recommendation engine and similarity finder
together so adapters stay thin.
"""

import logging
import random
from collections.abc import Callable

from quotes_api.services.preferences import learn_preferences
from quotes_api.services.quote_gateway import Quote, QuoteGateway
from quotes_api.services.recommendation import QuoteWithLikes, RecommendationEngine
from quotes_api.services.similarity import SimilarityFinder
from quotes_api.settings import get_settings
from quotes_api.stores.likes import LikeResult, LikeStore, PopularityEntry

logger = logging.getLogger("uvicorn.error")


class QuoteService:
    """Entry point for every quote operation exposed over the API."""

    def __init__(
        self,
        gateway: QuoteGateway,
        store: LikeStore,
        random_source: Callable[[], float] = random.random,
    ):
        self.gateway = gateway
        self.store = store
        self.recommender = RecommendationEngine(gateway, store, random_source=random_source)
        self.similarity = SimilarityFinder(gateway)

    async def random_quote(self, user_id: str | None = None, smart: bool = False) -> QuoteWithLikes:
        """Get a random quote with like data, optionally via smart selection."""
        if smart:
            return await self.recommender.recommend(user_id)

        quote = await self.gateway.fetch_random()
        likes = await self.store.get_likes(quote.id, user_id)
        return QuoteWithLikes(quote=quote, likes=likes)

    async def similar_quotes(self, quote_id: str, limit: int = 5) -> list[Quote]:
        return await self.similarity.find_similar(quote_id, limit)

    async def like_quote(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        """Like a quote and, for known users, refresh their preferences."""
        result = await self.store.like(quote_id, user_id)
        if user_id:
            tags = await learn_preferences(self.store, user_id)
            logger.info(f"Updated preferences for user {user_id}: {len(tags)} tags")
        return result

    async def unlike_quote(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        return await self.store.unlike(quote_id, user_id)

    async def quote_likes(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        return await self.store.get_likes(quote_id, user_id)

    async def popular_quotes(self, limit: int = 10) -> list[PopularityEntry]:
        return await self.store.get_popular(limit)

    async def close(self) -> None:
        await self.gateway.close()


# Singleton service instance
_service: QuoteService | None = None


def get_quote_service() -> QuoteService:
    """Get quote service singleton (also the FastAPI dependency)."""
    global _service
    if _service is None:
        settings = get_settings()
        gateway = QuoteGateway(
            primary_url=settings.quotable_api_url,
            secondary_url=settings.dummyjson_api_url,
            timeout=settings.upstream_timeout,
            user_agent=settings.user_agent,
        )
        _service = QuoteService(gateway=gateway, store=LikeStore())
    return _service


async def close_quote_service() -> None:
    """Close the singleton's upstream HTTP client."""
    global _service
    if _service is not None:
        await _service.close()
        _service = None
