"""Tests for the GraphQL endpoint."""

import pytest
from httpx import AsyncClient

from quotes_api.main import app
from quotes_api.services.quotes import QuoteService, get_quote_service
from tests.fakes import FakeGateway, FakeLikeStore, fixed_draws, make_quote


@pytest.fixture
def store() -> FakeLikeStore:
    return FakeLikeStore()


@pytest.fixture
def gateway() -> FakeGateway:
    source = make_quote("q1", tags=["wisdom"])
    return FakeGateway(
        random_quotes=[source],
        by_id={"q1": source},
        by_tag={"wisdom": [make_quote("q2", tags=["wisdom"])]},
    )


@pytest.fixture(autouse=True)
def service(gateway: FakeGateway, store: FakeLikeStore) -> QuoteService:
    service = QuoteService(gateway, store, random_source=fixed_draws(0.9))
    app.dependency_overrides[get_quote_service] = lambda: service
    return service


async def execute(client: AsyncClient, query: str, user_id: str | None = None, **variables) -> dict:
    headers = {"x-user-id": user_id} if user_id else {}
    response = await client.post("/graphql", json={"query": query, "variables": variables}, headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_random_quote_with_nested_similar(client: AsyncClient, store: FakeLikeStore):
    await store.like("q1", "alice")
    body = await execute(
        client,
        "{ randomQuote { id content tags likes isLiked similarQuotes(limit: 1) { id likes isLiked } } }",
        user_id="alice",
    )

    assert "errors" not in body
    quote = body["data"]["randomQuote"]
    assert quote["id"] == "q1"
    assert quote["likes"] == 1
    assert quote["isLiked"] is True
    assert quote["similarQuotes"] == [{"id": "q2", "likes": 0, "isLiked": False}]


@pytest.mark.asyncio
async def test_like_and_unlike_mutations(client: AsyncClient, store: FakeLikeStore):
    like = await execute(
        client,
        "mutation Like($id: ID!) { likeQuote(quoteId: $id) { quoteId likes isLiked } }",
        user_id="alice",
        id="q1",
    )
    assert like["data"]["likeQuote"] == {"quoteId": "q1", "likes": 1, "isLiked": True}
    assert store.preferences["alice"]

    unlike = await execute(
        client,
        "mutation Unlike($id: ID!) { unlikeQuote(quoteId: $id) { quoteId likes isLiked } }",
        user_id="alice",
        id="q1",
    )
    assert unlike["data"]["unlikeQuote"] == {"quoteId": "q1", "likes": 0, "isLiked": False}


@pytest.mark.asyncio
async def test_popular_quotes(client: AsyncClient, store: FakeLikeStore):
    await store.like("q1", "alice")
    await store.like("q3", "alice")
    await store.like("q3", "bob")

    body = await execute(client, "{ popularQuotes(limit: 5) { quoteId likes } }")

    assert body["data"]["popularQuotes"] == [
        {"quoteId": "q3", "likes": 2},
        {"quoteId": "q1", "likes": 1},
    ]


@pytest.mark.asyncio
async def test_similar_quotes_not_found_has_code(client: AsyncClient):
    body = await execute(client, '{ similarQuotes(quoteId: "missing") { id } }')

    error = body["errors"][0]
    assert error["extensions"]["code"] == "QUOTE_NOT_FOUND"
    assert error["message"].startswith("Failed to fetch similar quotes")


@pytest.mark.asyncio
async def test_similar_quotes_invalid_limit(client: AsyncClient):
    body = await execute(client, '{ similarQuotes(quoteId: "q1", limit: 0) { id } }')
    assert body["errors"][0]["extensions"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_random_quote_providers_down(client: AsyncClient, gateway: FakeGateway):
    gateway._random = iter(())
    body = await execute(client, "{ randomQuote { id } }")
    assert body["errors"][0]["extensions"]["code"] == "ALL_PROVIDERS_DOWN"


@pytest.mark.asyncio
async def test_storage_failure_has_code(client: AsyncClient, store: FakeLikeStore):
    store.failing.add("like")
    body = await execute(
        client,
        'mutation { likeQuote(quoteId: "q1") { likes } }',
        user_id="alice",
    )
    assert body["errors"][0]["extensions"]["code"] == "STORAGE_ERROR"
