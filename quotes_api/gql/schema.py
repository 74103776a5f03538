"""GraphQL schema and resolvers.

Resolvers are thin: they read the caller from the x-user-id header (via the
shared REST dependency), call QuoteService and map service errors onto GraphQL
errors carrying a stable ``extensions.code``.
"""

import logging
from typing import Any

import strawberry
from fastapi import Depends
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from quotes_api.errors import QuoteServiceError
from quotes_api.routes.quotes import get_user_id
from quotes_api.services import quote_gateway
from quotes_api.services.quotes import QuoteService, get_quote_service
from quotes_api.stores.likes import LikeResult as StoredLikeResult

logger = logging.getLogger("uvicorn.error")


@strawberry.type(name="Quote")
class QuoteType:
    id: strawberry.ID
    content: str
    author: str
    tags: list[str] | None = None
    length: int | None = None
    likes: int | None = None
    is_liked: bool | None = None

    @strawberry.field
    async def similar_quotes(self, info: Info, limit: int = 3) -> list["QuoteType"] | None:
        """Similar quotes; failures degrade to an empty list."""
        service = _service(info)
        try:
            quotes = await service.similar_quotes(str(self.id), limit)
        except (QuoteServiceError, ValueError) as e:
            logger.warning(f"Couldn't get similar quotes for {self.id}: {e}")
            return []
        return [_quote_type(q, likes=0, is_liked=False) for q in quotes]


@strawberry.type
class LikeResult:
    quote_id: strawberry.ID
    likes: int
    is_liked: bool


@strawberry.type
class PopularQuote:
    quote_id: strawberry.ID
    likes: int


@strawberry.type
class Query:
    @strawberry.field
    async def random_quote(self, info: Info, smart: bool = False) -> QuoteType:
        service = _service(info)
        try:
            result = await service.random_quote(user_id=_user_id(info), smart=smart)
        except QuoteServiceError as e:
            raise _graphql_error("Failed to fetch random quote", e) from e
        return _quote_type(result.quote, result.likes.like_count, result.likes.is_liked)

    @strawberry.field
    async def similar_quotes(self, info: Info, quote_id: strawberry.ID, limit: int = 5) -> list[QuoteType]:
        service = _service(info)
        try:
            quotes = await service.similar_quotes(str(quote_id), limit)
        except ValueError as e:
            raise GraphQLError(str(e), extensions={"code": "VALIDATION_ERROR"}) from e
        except QuoteServiceError as e:
            raise _graphql_error("Failed to fetch similar quotes", e) from e
        return [_quote_type(q, likes=0, is_liked=False) for q in quotes]

    @strawberry.field
    async def popular_quotes(self, info: Info, limit: int = 10) -> list[PopularQuote]:
        service = _service(info)
        try:
            entries = await service.popular_quotes(limit)
        except QuoteServiceError as e:
            raise _graphql_error("Failed to fetch popular quotes", e) from e
        return [PopularQuote(quote_id=strawberry.ID(entry.quote_id), likes=entry.like_count) for entry in entries]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def like_quote(self, info: Info, quote_id: strawberry.ID) -> LikeResult:
        service = _service(info)
        try:
            result = await service.like_quote(str(quote_id), _user_id(info))
        except QuoteServiceError as e:
            raise _graphql_error("Failed to like quote", e) from e
        return _like_result(quote_id, result)

    @strawberry.mutation
    async def unlike_quote(self, info: Info, quote_id: strawberry.ID) -> LikeResult:
        service = _service(info)
        try:
            result = await service.unlike_quote(str(quote_id), _user_id(info))
        except QuoteServiceError as e:
            raise _graphql_error("Failed to unlike quote", e) from e
        return _like_result(quote_id, result)


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(
    user_id: str | None = Depends(get_user_id),
    service: QuoteService = Depends(get_quote_service),
) -> dict[str, Any]:
    """Per-request GraphQL context."""
    return {"user_id": user_id, "service": service}


def create_graphql_router(graphiql: bool = False) -> GraphQLRouter:
    """Build the FastAPI router serving the schema."""
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if graphiql else None,
    )


def _service(info: Info) -> QuoteService:
    return info.context["service"]


def _user_id(info: Info) -> str | None:
    return info.context.get("user_id")


def _graphql_error(prefix: str, error: QuoteServiceError) -> GraphQLError:
    return GraphQLError(f"{prefix}: {error.message}", extensions={"code": error.code})


def _quote_type(quote: quote_gateway.Quote, likes: int | None, is_liked: bool | None) -> QuoteType:
    return QuoteType(
        id=strawberry.ID(quote.id),
        content=quote.content,
        author=quote.author,
        tags=list(quote.tags),
        length=quote.length,
        likes=likes,
        is_liked=is_liked,
    )


def _like_result(quote_id: strawberry.ID, result: StoredLikeResult) -> LikeResult:
    return LikeResult(quote_id=quote_id, likes=result.like_count, is_liked=result.is_liked)
