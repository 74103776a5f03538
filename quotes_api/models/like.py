"""Like model.

One row per (quote_id, user_id) pair. Anonymous likes store a NULL user_id;
SQL unique constraints treat NULLs as distinct, so each anonymous like is its
own row and counts toward the quote total.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from quotes_api.stores.postgres import Base


class Like(Base):
    """A single like of an upstream quote."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("quote_id", "user_id", name="uq_likes_quote_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)

    # Upstream quote id (primary ids or "dummy_" prefixed secondary ids)
    quote_id: Mapped[str] = mapped_column(String(100), index=True)
    user_id: Mapped[str | None] = mapped_column(String(200), index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Like {self.quote_id} by {self.user_id or 'anonymous'}>"
