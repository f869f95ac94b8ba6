"""
Search-as-you-type coordinator.

Debounces input, runs the movie and person searches side by side, merges
them into a short suggestion list and tracks a keyboard selection cursor.
Every scheduled lookup carries a generation number; only the lookup for the
latest generation is allowed to touch the visible state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Set

import config
from clients import tmdb
from models import MovieSuggestion, PersonSuggestion, SearchSuggestion

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_MOVIE_SUGGESTIONS = 3
MAX_PERSON_SUGGESTIONS = 2

KEY_DOWN = "ArrowDown"
KEY_UP = "ArrowUp"
KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"


@dataclass
class SearchState:
    query: str = ""
    suggestions: List[SearchSuggestion] = field(default_factory=list)
    selected_index: int = -1
    is_open: bool = False
    is_loading: bool = False

    @property
    def selected(self) -> Optional[SearchSuggestion]:
        if 0 <= self.selected_index < len(self.suggestions):
            return self.suggestions[self.selected_index]
        return None


def merge_suggestions(movies: List[Any], people: List[Any]) -> List[SearchSuggestion]:
    """Movies with posters first, then people with photos. API order is kept."""
    movie_hits = [m for m in movies if m.poster_path][:MAX_MOVIE_SUGGESTIONS]
    person_hits = [p for p in people if p.profile_path][:MAX_PERSON_SUGGESTIONS]
    return (
        [MovieSuggestion.from_summary(m) for m in movie_hits]
        + [PersonSuggestion.from_summary(p) for p in person_hits]
    )


class SearchCoordinator:
    """Owns the state of one search box."""

    def __init__(
        self,
        search_movies: Callable = None,
        search_people: Callable = None,
        debounce: float = None,
        on_change: Optional[Callable[[SearchState], None]] = None,
        on_navigate: Optional[Callable[[SearchSuggestion], None]] = None,
    ):
        self._search_movies = search_movies or tmdb.search_movies
        self._search_people = search_people or tmdb.search_people
        if debounce is None:
            debounce = getattr(config, "AUTOCOMPLETE_DEBOUNCE_SECONDS", 0.3)
        self.debounce = debounce
        self.on_change = on_change
        self.on_navigate = on_navigate

        self.state = SearchState()
        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._outcome: Optional[asyncio.Future] = None
        self._lookups: Set[asyncio.Task] = set()

    # ---------------- Transitions ----------------

    def input_changed(self, text: str):
        """Handle a keystroke. Must be called from the event loop for queries >= 2 chars."""
        self.state.query = text or ""
        query = self.state.query.strip()
        self._supersede()

        if len(query) < MIN_QUERY_LENGTH:
            self.state.suggestions = []
            self.state.selected_index = -1
            self.state.is_open = False
            self.state.is_loading = False
            self._notify()
            return

        loop = asyncio.get_running_loop()
        self._outcome = loop.create_future()
        self.state.is_loading = True
        self._timer = loop.call_later(self.debounce, self._fire, self._generation, query)

    def key_pressed(self, key: str) -> Optional[SearchSuggestion]:
        """Move the cursor, open the selection or close the dropdown.

        Returns the suggestion navigated to on Enter, otherwise None.
        """
        suggestions = self.state.suggestions
        if not self.state.is_open or not suggestions:
            return None

        count = len(suggestions)
        index = self.state.selected_index
        if key == KEY_DOWN:
            self.state.selected_index = (index + 1) % count
        elif key == KEY_UP:
            self.state.selected_index = index - 1 if index > 0 else count - 1
        elif key == KEY_ENTER:
            selected = self.state.selected
            if selected is None:
                return None
            return self._choose(selected)
        elif key == KEY_ESCAPE:
            self._close_dropdown()
        else:
            return None

        self._notify()
        return None

    def suggestion_clicked(self, index: int) -> Optional[SearchSuggestion]:
        if not 0 <= index < len(self.state.suggestions):
            return None
        return self._choose(self.state.suggestions[index])

    def outside_click(self):
        if self.state.is_open:
            self._close_dropdown()
            self._notify()

    def submit(self) -> str:
        """Form submission: close the dropdown and hand the query to a full search."""
        self._supersede()
        self.state.is_loading = False
        self._close_dropdown()
        self._notify()
        return self.state.query.strip()

    # ---------------- Awaiting results ----------------

    async def settle(self) -> Optional[List[SearchSuggestion]]:
        """Wait for the outcome of the latest input.

        Returns the suggestions that were applied, or None if that input was
        superseded before its lookup finished.
        """
        outcome = self._outcome
        if outcome is None:
            return list(self.state.suggestions)
        return await asyncio.shield(outcome)

    async def wait_idle(self):
        """Wait until no lookup (current or stale) is in flight."""
        while self._timer is not None or self._lookups:
            if self._lookups:
                await asyncio.gather(*self._lookups, return_exceptions=True)
            else:
                await asyncio.sleep(self.debounce / 2 or 0)

    def close(self):
        """Drop the pending timer and callbacks. In-flight lookups finish unobserved."""
        self._supersede()
        self.on_change = None
        self.on_navigate = None

    # ---------------- Internals ----------------

    def _supersede(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(None)
        self._outcome = None

    def _fire(self, generation: int, query: str):
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._lookup(generation, query))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)

    async def _lookup(self, generation: int, query: str):
        logger.debug(f"Autocomplete lookup #{generation} for '{query}'")
        movies, people = await asyncio.gather(
            self._search_movies(query),
            self._search_people(query),
            return_exceptions=True,
        )

        if generation != self._generation:
            logger.debug(f"Discarding stale autocomplete results #{generation} for '{query}'")
            return

        movie_results = self._results_or_empty("Movie", query, movies)
        person_results = self._results_or_empty("Person", query, people)
        suggestions = merge_suggestions(movie_results, person_results)

        self.state.suggestions = suggestions
        self.state.selected_index = -1
        self.state.is_open = bool(suggestions)
        self.state.is_loading = False

        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(list(suggestions))
        self._notify()

    @staticmethod
    def _results_or_empty(label: str, query: str, result: Any) -> list:
        if isinstance(result, BaseException):
            logger.error(f"{label} search failed for '{query}': {result}")
            return []
        return list(getattr(result, "results", result) or [])

    def _choose(self, suggestion: SearchSuggestion) -> SearchSuggestion:
        self._close_dropdown()
        self._notify()
        if self.on_navigate:
            self.on_navigate(suggestion)
        return suggestion

    def _close_dropdown(self):
        self.state.is_open = False
        self.state.selected_index = -1

    def _notify(self):
        if self.on_change:
            try:
                self.on_change(self.state)
            except Exception as e:
                logger.error(f"Error in search state callback: {e}")
