"""
Session store for configurator sessions.

Uses Redis (via django cache) to keep in-progress sessions between requests.
Only drafts live here; published specs are stored behind the publish endpoint.
"""
import json
import logging
import uuid
from datetime import datetime, timezone

from django.conf import settings
from django.core.cache import cache

from walletpass.member_dashboard.publishing import Publisher
from walletpass.member_dashboard.session import ConfiguratorSession

logger = logging.getLogger(__name__)

# Cache key prefix for sessions
SESSION_KEY_PREFIX = "member_dashboard_session"


def get_session_key(session_id: str) -> str:
    """Get cache key for a session."""
    return f"{SESSION_KEY_PREFIX}:{session_id}"


def new_session_id() -> str:
    return uuid.uuid4().hex


def save_session(session_id: str, session: ConfiguratorSession) -> None:
    """
    Store a session, resetting its TTL.

    Args:
        session_id: The session identifier
        session: The session to store
    """
    data = {
        "session": session.to_dict(),
        "last_accessed": datetime.now(timezone.utc).isoformat(),
    }
    cache.set(get_session_key(session_id), json.dumps(data), timeout=settings.MEMBER_DASHBOARD_SESSION_TTL)


def load_session(session_id: str, publisher: Publisher | None = None) -> ConfiguratorSession | None:
    """
    Retrieve a session.

    Args:
        session_id: The session identifier
        publisher: Publisher to attach to the restored session

    Returns:
        The session, or None if it does not exist or has expired
    """
    if not session_id:
        return None

    data = cache.get(get_session_key(session_id))
    if data is None:
        return None

    # Handle both string (JSON) and dict formats
    if isinstance(data, str):
        data = json.loads(data)

    try:
        return ConfiguratorSession.from_dict(data["session"], publisher=publisher)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Discarding unreadable configurator session {session_id}: {e}")
        delete_session(session_id)
        return None


def delete_session(session_id: str) -> None:
    cache.delete(get_session_key(session_id))
