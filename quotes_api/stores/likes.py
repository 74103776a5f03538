"""Like store: like rows and per-user preferred tags.

Pure storage, no business logic. Every public call runs in its own session
scope (commit on success, rollback on error). Any SQLAlchemy failure, driver
timeout or connection error, or use before init_db() is logged and re-raised
as StorageError.

Races on like() are resolved by the (quote_id, user_id) unique constraint via
INSERT ... ON CONFLICT DO NOTHING, so concurrent likes for one pair leave exactly
one row.
"""

import json
import logging
from collections.abc import AsyncGenerator, Callable, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.errors import StorageError
from quotes_api.models import Like, UserPreference
from quotes_api.stores.postgres import DatabaseNotInitializedError, get_session

logger = logging.getLogger("uvicorn.error")

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass(frozen=True)
class LikeResult:
    """Like count for a quote plus whether the caller has liked it."""

    like_count: int
    is_liked: bool


@dataclass(frozen=True)
class PopularityEntry:
    """Derived projection: quote id with its number of like rows."""

    quote_id: str
    like_count: int


def _dialect_insert(session: AsyncSession) -> Callable[..., Any]:
    """Pick the dialect-specific insert() that supports ON CONFLICT."""
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise StorageError(f"Unsupported database dialect: {name}")


class LikeStore:
    """Persistent like counter and preference table."""

    def __init__(self, session_scope: SessionScope = get_session):
        self._session_scope = session_scope

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self._session_scope() as session:
                yield session
        # driver timeouts (TimeoutError) and refused connections are OSError, unwrapped by SQLAlchemy
        except (SQLAlchemyError, OSError, DatabaseNotInitializedError) as e:
            logger.exception(f"Storage operation {operation} failed")
            raise StorageError(f"Failed to {operation}", detail={"operation": operation}) from e

    # ============================================================
    # Likes
    # ============================================================

    async def like(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        """Record a like; re-liking the same (quote, user) pair is a no-op."""
        async with self._session("like quote") as session:
            insert = _dialect_insert(session)
            stmt = (
                insert(Like)
                .values(quote_id=quote_id, user_id=user_id)
                .on_conflict_do_nothing(index_elements=["quote_id", "user_id"])
            )
            await session.execute(stmt)
            return await self._like_result(session, quote_id, user_id)

    async def unlike(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        """Remove the caller's like if present.

        Anonymous likes cannot be attributed to a caller, so an anonymous
        unlike removes nothing.
        """
        async with self._session("unlike quote") as session:
            if user_id is not None:
                await session.execute(
                    delete(Like).where(Like.quote_id == quote_id, Like.user_id == user_id)
                )
            count = await self._count(session, quote_id)
            return LikeResult(like_count=count, is_liked=False)

    async def get_likes(self, quote_id: str, user_id: str | None = None) -> LikeResult:
        async with self._session("get quote likes") as session:
            return await self._like_result(session, quote_id, user_id)

    async def get_popular(self, limit: int) -> list[PopularityEntry]:
        """Most-liked quotes, descending by count.

        Ties are broken by quote_id ascending so the order is deterministic.
        """
        if limit <= 0:
            return []

        like_count = func.count(Like.id).label("like_count")
        query = (
            select(Like.quote_id, like_count)
            .group_by(Like.quote_id)
            .order_by(like_count.desc(), Like.quote_id.asc())
            .limit(limit)
        )
        async with self._session("get popular quotes") as session:
            result = await session.execute(query)
            return [
                PopularityEntry(quote_id=row.quote_id, like_count=row.like_count)
                for row in result.all()
            ]

    async def get_liked_quote_ids(self, user_id: str) -> list[str]:
        """Quote ids liked by a user, most recently liked first."""
        query = (
            select(Like.quote_id)
            .where(Like.user_id == user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        async with self._session("get user liked quotes") as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    # ============================================================
    # Preferences
    # ============================================================

    async def set_preferences(self, user_id: str, tags: Iterable[str]) -> None:
        """Replace the user's preferred tags wholesale."""
        tags_json = json.dumps(sorted(set(tags)))
        async with self._session("update user preferences") as session:
            insert = _dialect_insert(session)
            stmt = insert(UserPreference).values(user_id=user_id, liked_tags=tags_json)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id"],
                set_={"liked_tags": stmt.excluded.liked_tags, "updated_at": func.now()},
            )
            await session.execute(stmt)

    async def get_preferences(self, user_id: str) -> set[str]:
        """Preferred tags for a user (empty if none recorded)."""
        async with self._session("get user preferences") as session:
            result = await session.execute(
                select(UserPreference.liked_tags).where(UserPreference.user_id == user_id)
            )
            raw = result.scalar_one_or_none()

        if not raw:
            return set()
        try:
            tags = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed preferences for user {user_id}")
            return set()
        if not isinstance(tags, list):
            return set()
        return {str(t) for t in tags}

    # ============================================================
    # Helpers
    # ============================================================

    async def _count(self, session: AsyncSession, quote_id: str) -> int:
        result = await session.execute(
            select(func.count(Like.id)).where(Like.quote_id == quote_id)
        )
        return result.scalar_one()

    async def _like_result(
        self,
        session: AsyncSession,
        quote_id: str,
        user_id: str | None,
    ) -> LikeResult:
        count = await self._count(session, quote_id)
        is_liked = False
        if user_id is not None:
            result = await session.execute(
                select(func.count(Like.id)).where(Like.quote_id == quote_id, Like.user_id == user_id)
            )
            is_liked = result.scalar_one() > 0
        return LikeResult(like_count=count, is_liked=is_liked)
