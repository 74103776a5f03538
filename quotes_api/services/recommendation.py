"""Smart random quote selection.

Order of precedence for a single call:
1. Fetch a fresh random quote (fatal if every provider is down)
2. Known user whose preferred tags match the fresh quote -> fresh quote
3. With probability 0.7 -> one of the top-5 most liked quotes, picked uniformly
4. Otherwise (or if step 3 yields nothing) -> fresh quote

Steps 2-3 never fail the request: storage or lookup errors fall through.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from quotes_api.errors import StorageError
from quotes_api.services.preferences import matches_preferences
from quotes_api.services.quote_gateway import Quote, QuoteGateway
from quotes_api.stores.likes import LikeResult, LikeStore

logger = logging.getLogger("uvicorn.error")

POPULAR_PROBABILITY = 0.7
POPULAR_POOL_SIZE = 5


@dataclass(frozen=True)
class QuoteWithLikes:
    """A quote plus its local like data for the caller."""

    quote: Quote
    likes: LikeResult


class RecommendationEngine:
    """Blends freshness, user preference and popularity into one pick."""

    def __init__(
        self,
        gateway: QuoteGateway,
        store: LikeStore,
        random_source: Callable[[], float] = random.random,
    ):
        """Initialize engine.

        Args:
            gateway: Upstream quote gateway.
            store: Like store (read-only use here).
            random_source: Uniform [0, 1) generator; tests pass a fixed sequence.
        """
        self.gateway = gateway
        self.store = store
        self._random = random_source

    async def recommend(self, user_id: str | None = None) -> QuoteWithLikes:
        fresh = await self.gateway.fetch_random()

        if user_id and await self._matches_user(fresh, user_id):
            return await self._with_likes(fresh, user_id)

        if self._random() < POPULAR_PROBABILITY:
            popular = await self._pick_popular(user_id)
            if popular is not None:
                return popular

        return await self._with_likes(fresh, user_id)

    async def _matches_user(self, quote: Quote, user_id: str) -> bool:
        try:
            preferred = await self.store.get_preferences(user_id)
        except StorageError as e:
            logger.warning(f"Preferences unavailable for user {user_id}, skipping: {e}")
            return False
        return bool(preferred) and matches_preferences(quote.tags, preferred)

    async def _pick_popular(self, user_id: str | None) -> QuoteWithLikes | None:
        try:
            entries = await self.store.get_popular(POPULAR_POOL_SIZE)
            if not entries:
                return None

            index = min(int(self._random() * len(entries)), len(entries) - 1)
            popular = await self.gateway.fetch_by_id(entries[index].quote_id)
            if popular is None:
                return None

            return await self._with_likes(popular, user_id)
        except StorageError as e:
            logger.warning(f"Popular quote fetch failed, serving fresh quote: {e}")
            return None

    async def _with_likes(self, quote: Quote, user_id: str | None) -> QuoteWithLikes:
        likes = await self.store.get_likes(quote.id, user_id)
        return QuoteWithLikes(quote=quote, likes=likes)
