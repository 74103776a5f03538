"""SQLAlchemy ORM models.

Models represent database tables:
- likes: (quote, user-or-anonymous) like rows
- user_preferences: preferred tag set per known user
"""

from quotes_api.models.like import Like
from quotes_api.models.user_preference import UserPreference

__all__ = ["Like", "UserPreference"]
