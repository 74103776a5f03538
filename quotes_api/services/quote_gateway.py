"""Quote gateway over the two upstream quote providers.

Providers, in fixed fallback order:
- Primary (Quotable): random, lookup by id, filter by tag
- Secondary (DummyJSON): random only

Both payload shapes are normalized into a single immutable ``Quote``.
Secondary ids are prefixed with ``dummy_`` so they never collide with primary ids.

Failure policy:
- fetch_random: primary -> secondary -> AllProvidersDownError
- fetch_by_id: primary only; 404 and any other failure both mean "not found"
- fetch_by_tag: primary only; 404 means no matches, other failures raise ProviderError
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from quotes_api.errors import AllProvidersDownError, ProviderError

logger = logging.getLogger("uvicorn.error")

DUMMY_ID_PREFIX = "dummy_"


@dataclass(frozen=True)
class Quote:
    """Canonical quote record. Never persisted, always re-fetched upstream."""

    id: str
    content: str
    author: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    length: int | None = None
    date_added: str | None = None
    date_modified: str | None = None


class QuotableRecord(BaseModel):
    """Raw record from the primary provider."""

    id: str = Field(alias="_id")
    content: str
    author: str
    tags: list[str] | None = None
    length: int | None = None
    date_added: str | None = Field(default=None, alias="dateAdded")
    date_modified: str | None = Field(default=None, alias="dateModified")

    def to_quote(self) -> Quote:
        return Quote(
            id=self.id,
            content=self.content,
            author=self.author,
            tags=tuple(self.tags or ()),
            length=self.length,
            date_added=self.date_added,
            date_modified=self.date_modified,
        )


class DummyJsonRecord(BaseModel):
    """Raw record from the secondary provider."""

    id: int
    quote: str
    author: str

    def to_quote(self) -> Quote:
        return Quote(
            id=f"{DUMMY_ID_PREFIX}{self.id}",
            content=self.quote,
            author=self.author,
            tags=(),
            length=len(self.quote),
        )


class QuoteGateway:
    """Client for the primary and secondary quote providers."""

    PRIMARY = "quotable"
    SECONDARY = "dummyjson"

    def __init__(
        self,
        primary_url: str = "https://api.quotable.io",
        secondary_url: str = "https://dummyjson.com",
        timeout: float = 5.0,
        user_agent: str = "RandomQuoteGenerator/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize gateway.

        Args:
            primary_url: Base URL of the primary provider.
            secondary_url: Base URL of the secondary provider.
            timeout: Per-request timeout in seconds.
            user_agent: User-Agent header sent upstream.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self.primary_url = primary_url.rstrip("/")
        self.secondary_url = secondary_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ============================================================
    # Public operations
    # ============================================================

    async def fetch_random(self) -> Quote:
        """Fetch a random quote, falling back to the secondary provider.

        Raises:
            AllProvidersDownError: Both providers failed.
        """
        try:
            payload = await self._get_json(self.PRIMARY, f"{self.primary_url}/random")
            if not isinstance(payload, dict):
                raise ProviderError(f"{self.PRIMARY} returned a non-object random payload")
            return self._parse_primary(payload)
        except ProviderError as e:
            logger.warning(f"Primary quote provider failed, falling back: {e}")

        try:
            payload = await self._get_json(self.SECONDARY, f"{self.secondary_url}/quotes/random")
            return self._parse_secondary(payload)
        except ProviderError as e:
            logger.warning(f"Secondary quote provider failed: {e}")

        raise AllProvidersDownError(
            "All quote providers are down",
            detail={"providers": [self.PRIMARY, self.SECONDARY]},
        )

    async def fetch_by_id(self, quote_id: str) -> Quote | None:
        """Look up a quote by id on the primary provider.

        The secondary provider has no lookup capability. Any failure is
        reported as "not found" because callers use this opportunistically.
        """
        url = f"{self.primary_url}/quotes/{quote(quote_id, safe='')}"
        try:
            payload = await self._get_json(self.PRIMARY, url, allow_not_found=True)
            if payload is None:
                return None
            if not isinstance(payload, dict):
                raise ProviderError(f"{self.PRIMARY} returned a non-object lookup payload")
            return self._parse_primary(payload)
        except ProviderError as e:
            logger.warning(f"Couldn't get quote {quote_id} from {self.PRIMARY}: {e}")
            return None

    async def fetch_by_tag(
        self,
        tag: str,
        limit: int,
        exclude_id: str | None = None,
    ) -> list[Quote]:
        """Fetch quotes carrying ``tag`` from the primary provider.

        Upstream answers with a single record, a bare list, or a paginated
        ``{"results": [...]}`` object depending on the match count; all three
        are normalized into a list.

        Args:
            tag: Tag to filter by.
            limit: Max records requested upstream.
            exclude_id: Id to drop from the results (usually the source quote).

        Raises:
            ProviderError: The primary provider failed.
        """
        payload = await self._get_json(
            self.PRIMARY,
            f"{self.primary_url}/quotes",
            params={"tags": tag, "limit": limit},
            allow_not_found=True,
        )
        if payload is None:
            return []

        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict) and isinstance(payload.get("results"), list):
            records = payload["results"]
        elif isinstance(payload, dict):
            records = [payload]
        else:
            raise ProviderError(f"{self.PRIMARY} returned an unexpected tag payload")

        quotes = [self._parse_primary(record) for record in records]
        return [q for q in quotes if q.id != exclude_id]

    # ============================================================
    # HTTP + parsing helpers
    # ============================================================

    async def _get_json(
        self,
        provider: str,
        url: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """GET a JSON document, converting every failure into ProviderError.

        Returns None for a 404 when ``allow_not_found`` is set.
        """
        client = await self._get_client()
        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise ProviderError(f"{provider} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{provider} request failed: {e}") from e

        if response.status_code == 404 and allow_not_found:
            return None
        if not response.is_success:
            raise ProviderError(
                f"{provider} API error: HTTP {response.status_code}",
                detail={"status": response.status_code, "url": url},
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{provider} returned invalid JSON") from e

    def _parse_primary(self, data: Any) -> Quote:
        try:
            return QuotableRecord.model_validate(data).to_quote()
        except ValidationError as e:
            raise ProviderError(f"{self.PRIMARY} returned a malformed quote: {e.error_count()} errors") from e

    def _parse_secondary(self, data: Any) -> Quote:
        try:
            return DummyJsonRecord.model_validate(data).to_quote()
        except ValidationError as e:
            raise ProviderError(f"{self.SECONDARY} returned a malformed quote: {e.error_count()} errors") from e
