"""GraphQL adapter (strawberry) mounted at /graphql."""

from quotes_api.gql.schema import create_graphql_router, schema

__all__ = ["create_graphql_router", "schema"]
