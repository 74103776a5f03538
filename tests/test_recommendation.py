"""Tests for smart random quote selection."""

import pytest

from quotes_api.errors import AllProvidersDownError
from quotes_api.services.recommendation import RecommendationEngine
from quotes_api.stores.likes import LikeResult
from tests.fakes import FakeGateway, FakeLikeStore, fixed_draws, make_quote


def _never_draw() -> float:
    pytest.fail("random source must not be consulted")


async def test_preference_match_short_circuits():
    fresh = make_quote("fresh", tags=["Inspirational"])
    popular = make_quote("popular")
    store = FakeLikeStore()
    store.preferences["alice"] = {"inspiration"}
    await store.like("popular", "bob")
    await store.like("fresh", "alice")
    gateway = FakeGateway(random_quotes=[fresh], by_id={"popular": popular})

    engine = RecommendationEngine(gateway, store, random_source=_never_draw)
    result = await engine.recommend("alice")

    assert result.quote == fresh
    assert result.likes == LikeResult(like_count=1, is_liked=True)


async def test_popular_quote_wins_on_low_draw():
    popular = make_quote("popular")
    store = FakeLikeStore()
    await store.like("popular", "bob")
    gateway = FakeGateway(random_quotes=[make_quote("fresh")], by_id={"popular": popular})

    engine = RecommendationEngine(gateway, store, random_source=fixed_draws(0.5, 0.0))
    result = await engine.recommend()

    assert result.quote == popular
    assert result.likes == LikeResult(like_count=1, is_liked=False)


async def test_high_draw_keeps_fresh_quote():
    fresh = make_quote("fresh")
    store = FakeLikeStore()
    await store.like("popular", "bob")
    gateway = FakeGateway(random_quotes=[fresh], by_id={"popular": make_quote("popular")})

    engine = RecommendationEngine(gateway, store, random_source=fixed_draws(0.7))
    result = await engine.recommend()

    assert result.quote == fresh


async def test_unmatched_preferences_fall_through_to_popularity():
    popular = make_quote("popular")
    store = FakeLikeStore()
    store.preferences["alice"] = {"wisdom"}
    await store.like("popular", "alice")
    gateway = FakeGateway(random_quotes=[make_quote("fresh", tags=["love"])], by_id={"popular": popular})

    engine = RecommendationEngine(gateway, store, random_source=fixed_draws(0.1, 0.3))
    result = await engine.recommend("alice")

    assert result.quote == popular
    assert result.likes.is_liked is True


async def test_popular_pick_is_uniform_over_top_five():
    store = FakeLikeStore()
    # counts: q0=6 ... q5=1, only the top five are eligible
    for i in range(6):
        for n in range(6 - i):
            await store.like(f"q{i}", f"user{n}")
    by_id = {f"q{i}": make_quote(f"q{i}") for i in range(6)}
    gateway = FakeGateway(random_quotes=[make_quote("fresh")], by_id=by_id)

    engine = RecommendationEngine(gateway, store, random_source=fixed_draws(0.0, 0.99))
    result = await engine.recommend()

    assert result.quote.id == "q4"


async def test_empty_popularity_serves_fresh():
    fresh = make_quote("fresh")
    engine = RecommendationEngine(
        FakeGateway(random_quotes=[fresh]),
        FakeLikeStore(),
        random_source=fixed_draws(0.0),
    )
    assert (await engine.recommend()).quote == fresh


async def test_unresolvable_popular_quote_serves_fresh():
    fresh = make_quote("fresh")
    store = FakeLikeStore()
    await store.like("gone", "bob")
    engine = RecommendationEngine(
        FakeGateway(random_quotes=[fresh]),
        store,
        random_source=fixed_draws(0.0, 0.0),
    )
    assert (await engine.recommend()).quote == fresh


async def test_storage_failures_in_ranking_steps_fall_through():
    fresh = make_quote("fresh", tags=["wisdom"])
    store = FakeLikeStore(failing={"get_preferences", "get_popular"})
    engine = RecommendationEngine(
        FakeGateway(random_quotes=[fresh]),
        store,
        random_source=fixed_draws(0.0),
    )

    result = await engine.recommend("alice")
    assert result.quote == fresh
    assert result.likes == LikeResult(like_count=0, is_liked=False)


async def test_gateway_failure_is_fatal():
    engine = RecommendationEngine(FakeGateway(), FakeLikeStore(), random_source=_never_draw)
    with pytest.raises(AllProvidersDownError):
        await engine.recommend("alice")
