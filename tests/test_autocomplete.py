"""
Unit tests for the search-as-you-type coordinator.
"""

import asyncio
import unittest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from clients.tmdb import TMDBFetchError
from models import MovieSuggestion, MovieSummary, Page, PersonSuggestion, PersonSummary
from services.autocomplete import (
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_UP,
    SearchCoordinator,
    merge_suggestions,
)

DEBOUNCE = 0.02


def movie(movie_id, poster=True):
    return MovieSummary(
        id=movie_id,
        title=f"Movie {movie_id}",
        poster_path=f"/poster{movie_id}.jpg" if poster else None,
        release_date="2001-09-11",
        vote_average=7.5,
    )


def person(person_id, profile=True):
    return PersonSummary(
        id=person_id,
        name=f"Person {person_id}",
        profile_path=f"/profile{person_id}.jpg" if profile else None,
        known_for_department="Acting",
    )


class FakeSearch:
    """Stands in for a TMDB search function."""

    def __init__(self, results=None, by_query=None, error=None):
        self.results = results or []
        self.by_query = by_query or {}
        self.error = error
        self.gates = {}
        self.calls = []

    async def __call__(self, query, page=1):
        self.calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        return Page(results=list(self.by_query.get(query, self.results)))


class TestMergeSuggestions(unittest.TestCase):

    def test_caps_and_orders_movies_before_people(self):
        merged = merge_suggestions([movie(i) for i in range(1, 5)], [person(i) for i in range(11, 14)])
        self.assertEqual(len(merged), 5)
        self.assertEqual([s.kind for s in merged], ["movie"] * 3 + ["person"] * 2)
        self.assertEqual([s.id for s in merged], [1, 2, 3, 11, 12])

    def test_skips_entries_without_images(self):
        merged = merge_suggestions(
            [movie(1, poster=False), movie(2), movie(3), movie(4)],
            [person(11, profile=False), person(12)],
        )
        self.assertEqual([s.id for s in merged], [2, 3, 4, 12])
        self.assertIsInstance(merged[0], MovieSuggestion)
        self.assertIsInstance(merged[-1], PersonSuggestion)
        self.assertEqual(merged[0].year, "2001")


class TestSearchCoordinator(unittest.IsolatedAsyncioTestCase):

    def make(self, movies=None, people=None, **kwargs):
        self.movie_search = movies or FakeSearch([movie(i) for i in range(1, 5)])
        self.person_search = people or FakeSearch([person(i) for i in range(11, 14)])
        return SearchCoordinator(
            search_movies=self.movie_search,
            search_people=self.person_search,
            debounce=DEBOUNCE,
            **kwargs,
        )

    async def quiet(self):
        await asyncio.sleep(DEBOUNCE * 4)

    async def test_short_input_clears_without_lookup(self):
        coordinator = self.make()
        for text in ["", "a", " b ", "  "]:
            coordinator.input_changed(text)
            await self.quiet()
            self.assertEqual(coordinator.state.suggestions, [])
            self.assertFalse(coordinator.state.is_open)
            self.assertEqual(await coordinator.settle(), [])
        self.assertEqual(self.movie_search.calls, [])
        self.assertEqual(self.person_search.calls, [])

    async def test_short_input_cancels_pending_lookup(self):
        coordinator = self.make()
        coordinator.input_changed("ali")
        coordinator.input_changed("a")
        await self.quiet()
        self.assertEqual(self.movie_search.calls, [])
        self.assertEqual(self.person_search.calls, [])

    async def test_short_input_clears_visible_suggestions(self):
        coordinator = self.make()
        coordinator.input_changed("ali")
        await coordinator.settle()
        self.assertTrue(coordinator.state.is_open)

        coordinator.input_changed("a")
        self.assertEqual(coordinator.state.suggestions, [])
        self.assertFalse(coordinator.state.is_open)

    async def test_debounce_issues_one_lookup_pair_for_final_text(self):
        coordinator = self.make()
        for text in ["a", "al", "ali", "alie", "alien"]:
            coordinator.input_changed(text)
        await coordinator.settle()
        await coordinator.wait_idle()
        self.assertEqual(self.movie_search.calls, ["alien"])
        self.assertEqual(self.person_search.calls, ["alien"])

    async def test_query_is_trimmed_before_searching(self):
        coordinator = self.make()
        coordinator.input_changed("  ali  ")
        await coordinator.settle()
        self.assertEqual(self.movie_search.calls, ["ali"])

    async def test_shows_three_movies_then_two_people(self):
        coordinator = self.make()
        coordinator.input_changed("ali")
        suggestions = await coordinator.settle()
        self.assertEqual(len(suggestions), 5)
        self.assertEqual([s.kind for s in suggestions], ["movie", "movie", "movie", "person", "person"])
        self.assertEqual(coordinator.state.suggestions, suggestions)
        self.assertTrue(coordinator.state.is_open)
        self.assertFalse(coordinator.state.is_loading)
        self.assertEqual(coordinator.state.selected_index, -1)

    async def test_stale_lookup_is_not_applied(self):
        movies = FakeSearch(by_query={"aa": [movie(1)], "bb": [movie(2)]})
        people = FakeSearch(by_query={"aa": [person(11)], "bb": [person(12)]})
        gate = asyncio.Event()
        movies.gates["aa"] = gate
        people.gates["aa"] = gate
        coordinator = self.make(movies, people)

        coordinator.input_changed("aa")
        await self.quiet()  # lookup A fired and is now blocked
        self.assertEqual(movies.calls, ["aa"])

        coordinator.input_changed("bb")
        suggestions = await coordinator.settle()
        self.assertEqual([s.id for s in suggestions], [2, 12])

        gate.set()
        await coordinator.wait_idle()
        self.assertEqual([s.id for s in coordinator.state.suggestions], [2, 12])

    async def test_settle_reports_superseded_input(self):
        coordinator = self.make()
        coordinator.input_changed("ali")
        pending = asyncio.ensure_future(coordinator.settle())
        await asyncio.sleep(0)
        coordinator.input_changed("alien")
        self.assertIsNone(await pending)
        self.assertEqual(len(await coordinator.settle()), 5)

    async def test_one_failing_side_still_shows_the_other(self):
        movies = FakeSearch(error=TMDBFetchError("/search/movie", "status=500"))
        coordinator = self.make(movies=movies)
        coordinator.input_changed("ali")
        with self.assertLogs("services.autocomplete", level="ERROR") as logs:
            suggestions = await coordinator.settle()
        self.assertEqual([s.kind for s in suggestions], ["person", "person"])
        self.assertTrue(coordinator.state.is_open)
        self.assertIn("Movie search failed", logs.output[0])

    async def test_both_sides_failing_leaves_dropdown_hidden(self):
        error = TMDBFetchError("/search", "timed out")
        coordinator = self.make(FakeSearch(error=error), FakeSearch(error=error))
        coordinator.input_changed("ali")
        with self.assertLogs("services.autocomplete", level="ERROR"):
            suggestions = await coordinator.settle()
        self.assertEqual(suggestions, [])
        self.assertFalse(coordinator.state.is_open)

    async def test_submit_cancels_pending_lookup(self):
        coordinator = self.make()
        coordinator.input_changed(" ali ")
        self.assertEqual(coordinator.submit(), "ali")
        await self.quiet()
        self.assertEqual(self.movie_search.calls, [])
        self.assertFalse(coordinator.state.is_open)

    async def test_on_change_sees_applied_results(self):
        seen = []
        coordinator = self.make(on_change=lambda state: seen.append(len(state.suggestions)))
        coordinator.input_changed("ali")
        await coordinator.settle()
        self.assertEqual(seen[-1], 5)

    async def test_close_ignores_in_flight_lookup(self):
        movies = FakeSearch([movie(1)])
        gate = asyncio.Event()
        movies.gates["ali"] = gate
        coordinator = self.make(movies=movies)

        coordinator.input_changed("ali")
        await self.quiet()
        coordinator.close()
        gate.set()
        await coordinator.wait_idle()
        self.assertEqual(movies.calls, ["ali"])
        self.assertEqual(coordinator.state.suggestions, [])


class TestKeyboardNavigation(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.navigated = []
        self.coordinator = SearchCoordinator(
            search_movies=FakeSearch([movie(1), movie(2), movie(3)]),
            search_people=FakeSearch([]),
            debounce=DEBOUNCE,
            on_navigate=self.navigated.append,
        )
        self.coordinator.input_changed("ali")
        await self.coordinator.settle()

    def test_arrow_down_wraps(self):
        indices = []
        for _ in range(4):
            self.coordinator.key_pressed(KEY_DOWN)
            indices.append(self.coordinator.state.selected_index)
        self.assertEqual(indices, [0, 1, 2, 0])

    def test_arrow_up_wraps(self):
        self.coordinator.key_pressed(KEY_UP)
        self.assertEqual(self.coordinator.state.selected_index, 2)
        self.coordinator.key_pressed(KEY_UP)
        self.assertEqual(self.coordinator.state.selected_index, 1)
        self.coordinator.key_pressed(KEY_DOWN)
        self.coordinator.key_pressed(KEY_DOWN)
        self.assertEqual(self.coordinator.state.selected_index, 0)
        self.coordinator.key_pressed(KEY_UP)
        self.assertEqual(self.coordinator.state.selected_index, 2)

    def test_enter_without_selection_does_nothing(self):
        self.assertIsNone(self.coordinator.key_pressed(KEY_ENTER))
        self.assertTrue(self.coordinator.state.is_open)
        self.assertEqual(self.navigated, [])

    def test_enter_opens_selection_and_closes(self):
        self.coordinator.key_pressed(KEY_DOWN)
        self.coordinator.key_pressed(KEY_DOWN)
        self.assertIs(self.coordinator.state.selected, self.coordinator.state.suggestions[1])
        chosen = self.coordinator.key_pressed(KEY_ENTER)
        self.assertEqual(chosen.id, 2)
        self.assertEqual(self.navigated, [chosen])
        self.assertFalse(self.coordinator.state.is_open)

    def test_escape_closes_without_navigating(self):
        self.coordinator.key_pressed(KEY_DOWN)
        self.assertIsNone(self.coordinator.key_pressed(KEY_ESCAPE))
        self.assertFalse(self.coordinator.state.is_open)
        self.assertEqual(self.navigated, [])

    def test_keys_are_ignored_when_closed(self):
        self.coordinator.outside_click()
        self.coordinator.key_pressed(KEY_DOWN)
        self.assertEqual(self.coordinator.state.selected_index, -1)
        self.assertIsNone(self.coordinator.key_pressed(KEY_ENTER))
        self.assertEqual(self.navigated, [])

    def test_suggestion_click_navigates(self):
        chosen = self.coordinator.suggestion_clicked(0)
        self.assertEqual(chosen.id, 1)
        self.assertFalse(self.coordinator.state.is_open)
        self.assertIsNone(self.coordinator.suggestion_clicked(9))


if __name__ == '__main__':
    unittest.main()
