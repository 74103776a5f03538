"""User preference model.

One row per user holding a JSON-encoded tag list. Rows are replaced
wholesale on update, never merged.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from quotes_api.stores.postgres import Base


class UserPreference(Base):
    """Preferred tags for a known user."""

    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[str] = mapped_column(String(200), unique=True, index=True)

    # JSON array of tag strings
    liked_tags: Mapped[str] = mapped_column(Text, default="[]")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<UserPreference {self.user_id}>"
