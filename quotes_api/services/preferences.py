"""Per-user preference signal.

The "learning" step is a fixed tag list: any user with at least one like gets
the same preferred tags. Preferences are replaced wholesale on every update.
"""

from quotes_api.stores.likes import LikeStore

DEFAULT_PREFERRED_TAGS = ("inspirational", "motivational", "wisdom", "life", "success")


def matches_preferences(quote_tags: tuple[str, ...] | list[str], preferred: set[str]) -> bool:
    """Case-insensitive substring match in either direction.

    Example:
        >>> matches_preferences(("Famous Quotes",), {"quotes"})
        True
    """
    for tag in quote_tags:
        tag_lower = tag.lower()
        for pref in preferred:
            pref_lower = pref.lower()
            if pref_lower in tag_lower or tag_lower in pref_lower:
                return True
    return False


async def learn_preferences(store: LikeStore, user_id: str) -> set[str]:
    """Recompute and persist the preferred tags for a user.

    Returns:
        The tag set that was stored.
    """
    liked_quote_ids = await store.get_liked_quote_ids(user_id)

    # TODO: derive tags from the liked quotes themselves once quote tags are stored locally
    tags = set(DEFAULT_PREFERRED_TAGS) if liked_quote_ids else set()

    await store.set_preferences(user_id, tags)
    return tags
