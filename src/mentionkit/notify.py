"""Notification payloads for the people mentioned in a note."""

from typing import Any

from .config import DEFAULT_ROUTES
from .core.extract import extract_ids


def action_url(
    entity_type: str,
    entity_id: str,
    routes: dict[str, str] | None = None,
    default_route: str = "dashboard/sourcing",
) -> str:
    """Link back to the entity the note is attached to."""
    route = (routes if routes is not None else DEFAULT_ROUTES).get(entity_type, default_route)
    return f"/{route.strip('/')}/{entity_id}"


def build_mention_notifications(
    storage_text: str,
    entity_type: str,
    entity_id: str,
    routes: dict[str, str] | None = None,
    default_route: str = "dashboard/sourcing",
    author_id: str | None = None,
    dedupe: bool = True,
) -> list[dict[str, Any]]:
    """
    One "mention" notification per referenced id, in mention order.

    Args:
        storage_text: Note body in storage form
        entity_type: Kind of record the note is attached to (e.g. "order")
        entity_id: Id of that record
        routes: entity_type -> URL prefix
        default_route: URL prefix for unlisted entity types
        author_id: Note author; never notified about their own mentions
        dedupe: Notify each id once even if mentioned several times

    Returns:
        Notification payloads ready for the host to persist
    """
    url = action_url(entity_type, entity_id, routes, default_route)
    out: list[dict[str, Any]] = []
    seen: set[str] = set()
    for user_id in extract_ids(storage_text):
        if user_id == author_id:
            continue
        if dedupe:
            if user_id in seen:
                continue
            seen.add(user_id)
        out.append(
            {
                "user_id": user_id,
                "type": "mention",
                "title": "You were mentioned",
                "message": "You were mentioned in an update",
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action_url": url,
            }
        )
    return out
