"""In-memory stand-ins for the gateway and like store."""

from collections import Counter
from collections.abc import Iterable

from quotes_api.errors import AllProvidersDownError, ProviderError, StorageError
from quotes_api.services.quote_gateway import Quote
from quotes_api.stores.likes import LikeResult, PopularityEntry


def make_quote(quote_id: str, tags: Iterable[str] = (), content: str | None = None) -> Quote:
    text = content or f"Quote {quote_id}"
    return Quote(id=quote_id, content=text, author="Test Author", tags=tuple(tags), length=len(text))


class FakeGateway:
    """Scripted gateway: random draws come from an iterable, lookups from dicts."""

    def __init__(
        self,
        random_quotes: Iterable[Quote] = (),
        by_id: dict[str, Quote] | None = None,
        by_tag: dict[str, list[Quote]] | None = None,
        failing_tags: Iterable[str] = (),
    ):
        self._random = iter(random_quotes)
        self.by_id = by_id or {}
        self.by_tag = by_tag or {}
        self.failing_tags = set(failing_tags)
        self.random_calls = 0
        self.tag_calls: list[tuple[str, int, str | None]] = []
        self.closed = False

    async def fetch_random(self) -> Quote:
        self.random_calls += 1
        try:
            return next(self._random)
        except StopIteration:
            raise AllProvidersDownError("All quote providers are down") from None

    async def fetch_by_id(self, quote_id: str) -> Quote | None:
        return self.by_id.get(quote_id)

    async def fetch_by_tag(self, tag: str, limit: int, exclude_id: str | None = None) -> list[Quote]:
        self.tag_calls.append((tag, limit, exclude_id))
        if tag in self.failing_tags:
            raise ProviderError(f"tag {tag} unavailable")
        return [q for q in self.by_tag.get(tag, [])[:limit] if q.id != exclude_id]

    async def close(self) -> None:
        self.closed = True


class FakeLikeStore:
    """Like store semantics without a database.

    ``failing`` names methods that raise StorageError.
    """

    def __init__(self, failing: Iterable[str] = ()):
        self.rows: list[tuple[str, str | None]] = []
        self.preferences: dict[str, set[str]] = {}
        self.failing = set(failing)

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise StorageError(f"Failed to {name}")

    def _result(self, quote_id: str, user_id: str | None) -> LikeResult:
        count = sum(1 for q, _ in self.rows if q == quote_id)
        liked = user_id is not None and (quote_id, user_id) in self.rows
        return LikeResult(like_count=count, is_liked=liked)

    async def like(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        self._check("like")
        if user_id is None or (quote_id, user_id) not in self.rows:
            self.rows.append((quote_id, user_id))
        return self._result(quote_id, user_id)

    async def unlike(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        self._check("unlike")
        if user_id is not None and (quote_id, user_id) in self.rows:
            self.rows.remove((quote_id, user_id))
        return LikeResult(like_count=self._result(quote_id, None).like_count, is_liked=False)

    async def get_likes(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        self._check("get_likes")
        return self._result(quote_id, user_id)

    async def get_popular(self, limit: int) -> list[PopularityEntry]:
        self._check("get_popular")
        counts = Counter(q for q, _ in self.rows)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [PopularityEntry(quote_id=q, like_count=c) for q, c in ordered[: max(limit, 0)]]

    async def get_liked_quote_ids(self, user_id: str) -> list[str]:
        self._check("get_liked_quote_ids")
        return [q for q, u in reversed(self.rows) if u == user_id]

    async def set_preferences(self, user_id: str, tags: Iterable[str]) -> None:
        self._check("set_preferences")
        self.preferences[user_id] = set(tags)

    async def get_preferences(self, user_id: str) -> set[str]:
        self._check("get_preferences")
        return set(self.preferences.get(user_id, set()))


def fixed_draws(*values: float):
    """Uniform-draw source returning ``values`` in order."""
    draws = iter(values)

    def draw() -> float:
        return next(draws)

    return draw
