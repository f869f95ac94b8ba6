"""
Unit tests for TMDB response normalization.
"""

import unittest
import sys
import os
from datetime import date

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from models import CreditKind, MovieFull, MovieSummary, Page, PersonFull, PersonSummary


MOVIE_PAYLOAD = {
    "id": 603,
    "title": "The Matrix",
    "tagline": "Welcome to the Real World.",
    "overview": "A hacker learns the truth.",
    "release_date": "1999-03-30",
    "runtime": 136,
    "vote_average": 8.2,
    "poster_path": "/matrix.jpg",
    "backdrop_path": "",
    "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
    "credits": {
        "cast": [{"id": i, "name": f"Actor {i}", "character": f"Role {i}", "credit_id": f"c{i}"} for i in range(12)],
        "crew": [
            {"id": 100, "name": "Lana Wachowski", "job": "Director", "department": "Directing"},
            {"id": 101, "name": "Lilly Wachowski", "job": "Director", "department": "Directing"},
            {"id": 102, "name": "Bill Pope", "job": "Director of Photography"},
            {"id": 103, "name": "No Job"},
        ],
    },
    "videos": {"results": [
        {"key": "teaser1", "name": "Teaser", "site": "YouTube", "type": "Teaser"},
        {"key": "vimeo1", "name": "Trailer", "site": "Vimeo", "type": "Trailer"},
        {"key": "yt1", "name": "Official Trailer", "site": "YouTube", "type": "Trailer"},
    ]},
    "similar": {"results": [{"id": 604, "title": "The Matrix Reloaded"}, {"title": "No id"}]},
}


class TestMovieModels(unittest.TestCase):

    def test_summary_normalizes_missing_fields(self):
        movie = MovieSummary.from_api({"id": 1, "title": "", "poster_path": "", "release_date": ""})
        self.assertEqual(movie.title, "Unknown")
        self.assertIsNone(movie.poster_path)
        self.assertIsNone(movie.release_date)
        self.assertIsNone(movie.year)
        self.assertEqual(movie.vote_average, 0.0)

    def test_summary_without_id_is_rejected(self):
        self.assertIsNone(MovieSummary.from_api({"title": "Nameless"}))

    def test_full_movie(self):
        movie = MovieFull.from_api(MOVIE_PAYLOAD)
        self.assertEqual(movie.year, "1999")
        self.assertEqual(movie.genres, ["Action", "Science Fiction"])
        self.assertIsNone(movie.backdrop_path)
        self.assertEqual(len(movie.top_cast()), 10)
        self.assertEqual(movie.top_cast()[0].character, "Role 0")
        self.assertEqual([d.name for d in movie.directors], ["Lana Wachowski", "Lilly Wachowski"])
        self.assertEqual(len(movie.crew), 3)
        self.assertEqual(movie.trailer.key, "yt1")
        self.assertEqual(movie.trailer.url, "https://www.youtube.com/watch?v=yt1")
        self.assertEqual([m.id for m in movie.similar], [604])

    def test_zero_runtime_is_unknown(self):
        movie = MovieFull.from_api({"id": 1, "title": "Short", "runtime": 0})
        self.assertIsNone(movie.runtime)
        self.assertIsNone(movie.trailer)
        self.assertEqual(movie.directors, [])


class TestPersonModels(unittest.TestCase):

    def test_summary(self):
        person = PersonSummary.from_api({"id": 5, "name": "Someone", "profile_path": None})
        self.assertIsNone(person.profile_path)
        self.assertIsNone(person.known_for_department)

    def test_credits_are_split_by_kind(self):
        person = PersonFull.from_api({
            "id": 1,
            "name": "Someone",
            "biography": "  ",
            "movie_credits": {
                "cast": [{"id": 10, "title": "Film", "character": "Lead", "release_date": ""}],
                "crew": [{"id": 11, "title": "Other", "job": "Writer"}, {"id": 12, "title": "No job"}],
            },
        })
        self.assertEqual(person.biography, "")
        self.assertEqual(len(person.cast_credits), 1)
        self.assertEqual(person.cast_credits[0].kind, CreditKind.CAST)
        self.assertIsNone(person.cast_credits[0].release_date)
        self.assertEqual([c.job for c in person.crew_credits], ["Writer"])

    def test_age_before_and_after_birthday(self):
        person = PersonFull(id=1, name="Someone", birthday="1970-06-15")
        self.assertEqual(person.age(date(2020, 6, 14)), 49)
        self.assertEqual(person.age(date(2020, 6, 15)), 50)

    def test_age_at_death(self):
        person = PersonFull(id=1, name="Someone", birthday="1930-05-31", deathday="2000-05-01")
        self.assertEqual(person.age(date(2024, 1, 1)), 69)

    def test_age_unknown_without_birthday(self):
        self.assertIsNone(PersonFull(id=1, name="Someone").age())


class TestPage(unittest.TestCase):

    def test_skips_unparseable_results(self):
        page = Page.from_api(
            {"page": 2, "total_pages": 7, "results": [{"id": 1, "title": "A"}, {"title": "B"}]},
            MovieSummary.from_api,
        )
        self.assertEqual(page.page, 2)
        self.assertEqual(page.total_pages, 7)
        self.assertEqual([m.id for m in page.results], [1])

    def test_empty_payload(self):
        page = Page.from_api(None, MovieSummary.from_api)
        self.assertEqual(page.results, [])
        self.assertEqual(page.total_pages, 1)


if __name__ == '__main__':
    unittest.main()
