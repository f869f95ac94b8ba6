# commands/autocomplete.py - Search autocomplete backed by per-user coordinators
import logging
import time
from typing import Callable, Dict, List, Tuple

from discord import app_commands

from commands.embeds import suggestion_label, suggestion_value
from services.autocomplete import SearchCoordinator

logger = logging.getLogger(__name__)

SESSION_TTL = 300  # Drop a user's search box after 5 minutes idle
MAX_SESSIONS = 200


class SearchSessions:
    """One SearchCoordinator per user, like one search box per browser tab."""

    def __init__(self, factory: Callable[[], SearchCoordinator] = SearchCoordinator, ttl: float = SESSION_TTL):
        self.factory = factory
        self.ttl = ttl
        self._sessions: Dict[int, Tuple[SearchCoordinator, float]] = {}

    def __len__(self):
        return len(self._sessions)

    def get(self, user_id: int) -> SearchCoordinator:
        self._clean()
        entry = self._sessions.get(user_id)
        coordinator = entry[0] if entry else self.factory()
        self._sessions[user_id] = (coordinator, time.time())
        return coordinator

    def discard(self, user_id: int):
        entry = self._sessions.pop(user_id, None)
        if entry:
            entry[0].close()

    def close_all(self):
        for coordinator, _ in self._sessions.values():
            coordinator.close()
        self._sessions.clear()

    def _clean(self):
        """Remove idle sessions and cap the total."""
        now = time.time()
        expired = [uid for uid, (_, ts) in self._sessions.items() if now - ts > self.ttl]
        for uid in expired:
            self.discard(uid)

        if len(self._sessions) > MAX_SESSIONS:
            oldest = sorted(self._sessions, key=lambda uid: self._sessions[uid][1])
            for uid in oldest[:len(self._sessions) - MAX_SESSIONS]:
                self.discard(uid)


async def suggest(sessions: SearchSessions, user_id: int, current: str) -> List[app_commands.Choice]:
    """Feed one keystroke to the user's coordinator and answer with its suggestions.

    Superseded keystrokes answer with an empty list; Discord only shows the
    response to the latest one anyway.
    """
    coordinator = sessions.get(user_id)
    coordinator.input_changed(current)
    suggestions = await coordinator.settle()
    if not suggestions:
        return []
    return [
        app_commands.Choice(name=suggestion_label(s), value=suggestion_value(s))
        for s in suggestions
    ]


def make_search_autocomplete(sessions: SearchSessions):
    """Build the autocomplete callback for a command's query option.

    Note: Autocomplete has a 3s Discord timeout. On slow connections this
    may time out and show nothing; the user can still submit free text.
    """

    async def search_autocomplete(interaction, current: str):
        try:
            return await suggest(sessions, interaction.user.id, current)
        except Exception as e:
            logger.debug(f"Autocomplete timeout/error (expected): {e}")
            return []

    return search_autocomplete
