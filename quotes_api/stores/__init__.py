"""Data stores for persistence.

Stores handle:
- Relational DB: engine/session lifecycle (postgres.py)
- Likes and user preferences (likes.py)

No business/ranking logic in stores - that belongs in services.
"""
