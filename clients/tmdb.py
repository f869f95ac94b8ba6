"""
TMDB API client
https://developer.themoviedb.org/reference - read-only v3 endpoints
"""

import aiohttp
import asyncio
import logging
import time
from typing import Any, Dict, Optional, Tuple

from config import TMDB_API_KEY
from models import MovieFull, MovieSummary, Page, PersonFull, PersonSummary

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"

# Shared timeout configuration
# Autocomplete has 3s Discord limit, so searches use shorter timeouts
TMDB_TIMEOUT = aiohttp.ClientTimeout(total=8, connect=3)
TMDB_SEARCH_TIMEOUT = aiohttp.ClientTimeout(total=2.5, connect=1.5)

# Shared session for connection reuse (avoids cold-start latency)
_session: Optional[aiohttp.ClientSession] = None

# Search cache with TTL (key -> (payload, timestamp))
_search_cache: Dict[str, Tuple[Any, float]] = {}
CACHE_TTL = 30  # seconds
MAX_CACHE_SIZE = 100


class TMDBFetchError(Exception):
    """Raised when a TMDB request fails for any reason (status, timeout, transport)."""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"TMDB request to {endpoint} failed: {reason}")
        self.endpoint = endpoint
        self.reason = reason


def image_url(path: Optional[str], size: str = "w500") -> Optional[str]:
    """Resolve a TMDB image path to a CDN URL, or None when there is no image."""
    if not path:
        return None
    return f"{TMDB_IMAGE_BASE}/{size}{path}"


# ---------------- Cache helpers ----------------

def _clean_cache():
    """Remove expired entries from cache and cap size."""
    now = time.time()
    expired = [k for k, (_, ts) in _search_cache.items() if now - ts > CACHE_TTL]
    for k in expired:
        del _search_cache[k]

    # If still too large, remove oldest entries
    if len(_search_cache) > MAX_CACHE_SIZE:
        sorted_keys = sorted(_search_cache.keys(), key=lambda k: _search_cache[k][1])
        for k in sorted_keys[:len(_search_cache) - MAX_CACHE_SIZE]:
            del _search_cache[k]


def _cache_get(key: str) -> Optional[Any]:
    val = _search_cache.get(key)
    if not val:
        return None
    payload, ts = val
    if time.time() - ts < CACHE_TTL:
        return payload
    _search_cache.pop(key, None)
    return None


def _cache_set(key: str, payload: Any):
    _search_cache[key] = (payload, time.time())
    _clean_cache()


def clear_cache():
    _search_cache.clear()


# ---------------- Session management ----------------

async def get_session() -> aiohttp.ClientSession:
    """Get or create the shared aiohttp session"""
    global _session
    if _session is None or _session.closed:
        connector = aiohttp.TCPConnector(
            limit=10,
            keepalive_timeout=30,
            enable_cleanup_closed=True
        )
        _session = aiohttp.ClientSession(
            timeout=TMDB_TIMEOUT,
            connector=connector
        )
        logger.info("Created new TMDB aiohttp session")
    return _session


async def warmup_session():
    """Pre-warm the session by making a lightweight request"""
    try:
        await _get_json("/configuration")
        logger.info("TMDB session pre-warmed successfully")
    except TMDBFetchError as e:
        logger.warning(f"Failed to pre-warm TMDB session: {e}")


async def close_session():
    """Close the shared session (call on bot shutdown)"""
    global _session
    if _session and not _session.closed:
        await _session.close()
        _session = None
        logger.info("Closed TMDB aiohttp session")


# ---------------- HTTP helpers ----------------

async def _get_json(endpoint: str, params: dict = None, timeout: aiohttp.ClientTimeout = None) -> dict:
    """
    GET a TMDB endpoint and return its JSON body.

    Any non-200 status, timeout, transport error or body that is not a
    JSON object raises TMDBFetchError.
    Status codes are not interpreted and nothing is retried.
    """
    query = {"api_key": TMDB_API_KEY}
    for key, value in (params or {}).items():
        if value is not None:
            query[key] = value

    url = f"{TMDB_BASE_URL}{endpoint}"
    try:
        session = await get_session()
        async with session.get(url, params=query, timeout=timeout) as resp:
            if resp.status != 200:
                raise TMDBFetchError(endpoint, f"status={resp.status}")
            data = await resp.json()
    except asyncio.TimeoutError:
        raise TMDBFetchError(endpoint, "timed out")
    except aiohttp.ClientError as e:
        raise TMDBFetchError(endpoint, f"{type(e).__name__}: {e}")
    except ValueError as e:
        raise TMDBFetchError(endpoint, f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise TMDBFetchError(endpoint, "malformed response")
    return data


# ---------------- Search ----------------

async def search_movies(query: str, page: int = 1) -> Page:
    """Search movies by title. Results are cached briefly per (query, page)."""
    q = (query or "").strip()
    if not q:
        return Page(results=[])

    cache_key = f"movie:{q.lower()}:{page}"
    cached = _cache_get(cache_key)
    if cached is not None:
        return cached

    data = await _get_json("/search/movie", {"query": q, "page": page}, timeout=TMDB_SEARCH_TIMEOUT)
    result = Page.from_api(data, MovieSummary.from_api)
    _cache_set(cache_key, result)
    return result


async def search_people(query: str, page: int = 1) -> Page:
    """Search people by name. Results are cached briefly per (query, page)."""
    q = (query or "").strip()
    if not q:
        return Page(results=[])

    cache_key = f"person:{q.lower()}:{page}"
    cached = _cache_get(cache_key)
    if cached is not None:
        return cached

    data = await _get_json("/search/person", {"query": q, "page": page}, timeout=TMDB_SEARCH_TIMEOUT)
    result = Page.from_api(data, PersonSummary.from_api)
    _cache_set(cache_key, result)
    return result


# ---------------- Details ----------------

async def get_movie_details(movie_id: int) -> MovieFull:
    """Movie details with credits, videos and similar titles embedded."""
    endpoint = f"/movie/{movie_id}"
    data = await _get_json(endpoint, {"append_to_response": "credits,videos,similar"})
    movie = MovieFull.from_api(data)
    if movie is None:
        raise TMDBFetchError(endpoint, "malformed response")
    return movie


async def get_person_details(person_id: int) -> PersonFull:
    """Person details with movie credit lists embedded."""
    endpoint = f"/person/{person_id}"
    data = await _get_json(endpoint, {"append_to_response": "movie_credits"})
    person = PersonFull.from_api(data)
    if person is None:
        raise TMDBFetchError(endpoint, "malformed response")
    return person


# ---------------- Listings ----------------

async def _get_movie_listing(endpoint: str, page: int) -> Page:
    data = await _get_json(endpoint, {"page": page})
    return Page.from_api(data, MovieSummary.from_api)


async def get_trending_movies(page: int = 1) -> Page:
    return await _get_movie_listing("/trending/movie/week", page)


async def get_popular_movies(page: int = 1) -> Page:
    return await _get_movie_listing("/movie/popular", page)


async def get_top_rated_movies(page: int = 1) -> Page:
    return await _get_movie_listing("/movie/top_rated", page)


async def get_now_playing_movies(page: int = 1) -> Page:
    return await _get_movie_listing("/movie/now_playing", page)


async def get_upcoming_movies(page: int = 1) -> Page:
    return await _get_movie_listing("/movie/upcoming", page)


# Category key -> (display label, fetcher)
MOVIE_CATEGORIES = {
    "trending": ("Trending This Week", get_trending_movies),
    "popular": ("Popular", get_popular_movies),
    "top_rated": ("Top Rated", get_top_rated_movies),
    "now_playing": ("Now Showing", get_now_playing_movies),
    "upcoming": ("Upcoming", get_upcoming_movies),
}
