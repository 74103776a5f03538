"""Similar quote lookup.

Collects quotes sharing tags with a source quote (in tag order), then backfills
with random quotes until the requested count is reached. The source quote and
duplicates are never returned; first occurrence wins.
"""

import logging

from quotes_api.errors import AllProvidersDownError, ProviderError, QuoteNotFoundError
from quotes_api.services.quote_gateway import Quote, QuoteGateway

logger = logging.getLogger("uvicorn.error")

TAG_FETCH_LIMIT = 3


class SimilarityFinder:
    """Finds quotes related to a given quote."""

    def __init__(self, gateway: QuoteGateway, backfill_attempts_per_slot: int = 5):
        """Initialize finder.

        Args:
            gateway: Upstream quote gateway.
            backfill_attempts_per_slot: Random draws allowed per missing result
                before backfill gives up (upstream may keep repeating quotes).
        """
        self.gateway = gateway
        self.backfill_attempts_per_slot = backfill_attempts_per_slot

    async def find_similar(self, quote_id: str, limit: int = 5) -> list[Quote]:
        """Find up to ``limit`` quotes similar to ``quote_id``.

        Raises:
            QuoteNotFoundError: The source quote could not be resolved.
            ValueError: limit < 1.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")

        source = await self.gateway.fetch_by_id(quote_id)
        if source is None:
            raise QuoteNotFoundError(quote_id)

        collected: list[Quote] = []
        seen: set[str] = {quote_id, source.id}

        for tag in source.tags:
            if len(collected) >= limit:
                break
            try:
                matches = await self.gateway.fetch_by_tag(tag, TAG_FETCH_LIMIT, exclude_id=quote_id)
            except ProviderError as e:
                logger.warning(f"Couldn't fetch quotes for tag {tag}: {e}")
                continue

            for match in matches:
                if match.id in seen:
                    continue
                seen.add(match.id)
                collected.append(match)
                if len(collected) >= limit:
                    break

        await self._backfill(collected, seen, limit)
        return collected[:limit]

    async def _backfill(self, collected: list[Quote], seen: set[str], limit: int) -> None:
        max_attempts = (limit - len(collected)) * self.backfill_attempts_per_slot
        attempts = 0
        while len(collected) < limit and attempts < max_attempts:
            attempts += 1
            try:
                candidate = await self.gateway.fetch_random()
            except AllProvidersDownError as e:
                logger.warning(f"Ran out of quotes to fetch: {e}")
                return
            if candidate.id in seen:
                continue
            seen.add(candidate.id)
            collected.append(candidate)

        if len(collected) < limit:
            logger.info(f"Backfill stopped at {len(collected)}/{limit} after {attempts} draws")
