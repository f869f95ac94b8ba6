"""
Result schemas for TMDB responses.

Raw JSON is normalized here, at the client boundary, so the rest of the bot
never has to guess whether a field is missing, null or an empty string.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ---------------- Normalization helpers ----------------

def _str_or_none(value: Any) -> Optional[str]:
    """Empty strings and non-strings collapse to None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _year_from(date_str: Optional[str]) -> Optional[str]:
    if date_str and len(date_str) >= 4 and date_str[:4].isdigit():
        return date_str[:4]
    return None


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a TMDB YYYY-MM-DD date, returning None for anything else."""
    if not date_str:
        return None
    try:
        return date.fromisoformat(date_str[:10])
    except ValueError:
        return None


# ---------------- Listing results ----------------

@dataclass
class MovieSummary:
    id: int
    title: str
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: float = 0.0
    overview: str = ""

    @property
    def year(self) -> Optional[str]:
        return _year_from(self.release_date)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["MovieSummary"]:
        movie_id = _int_or_none(data.get("id")) if isinstance(data, dict) else None
        if movie_id is None:
            return None
        return cls(
            id=movie_id,
            title=_str_or_none(data.get("title")) or "Unknown",
            poster_path=_str_or_none(data.get("poster_path")),
            backdrop_path=_str_or_none(data.get("backdrop_path")),
            release_date=_str_or_none(data.get("release_date")),
            vote_average=_float(data.get("vote_average")),
            overview=data.get("overview") or "",
        )


@dataclass
class PersonSummary:
    id: int
    name: str
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["PersonSummary"]:
        person_id = _int_or_none(data.get("id")) if isinstance(data, dict) else None
        if person_id is None:
            return None
        return cls(
            id=person_id,
            name=_str_or_none(data.get("name")) or "Unknown",
            profile_path=_str_or_none(data.get("profile_path")),
            known_for_department=_str_or_none(data.get("known_for_department")),
        )


@dataclass
class Page:
    """One page of a paginated TMDB listing."""
    results: List[Any]
    page: int = 1
    total_pages: int = 1
    total_results: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any], parse) -> "Page":
        data = data or {}
        results = []
        for item in data.get("results") or []:
            parsed = parse(item)
            if parsed is not None:
                results.append(parsed)
        return cls(
            results=results,
            page=_int_or_none(data.get("page")) or 1,
            total_pages=max(1, _int_or_none(data.get("total_pages")) or 1),
            total_results=_int_or_none(data.get("total_results")) or len(results),
        )


# ---------------- Movie details ----------------

@dataclass
class CastMember:
    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None
    credit_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["CastMember"]:
        person_id = _int_or_none(data.get("id"))
        if person_id is None:
            return None
        return cls(
            id=person_id,
            name=_str_or_none(data.get("name")) or "Unknown",
            character=_str_or_none(data.get("character")),
            profile_path=_str_or_none(data.get("profile_path")),
            credit_id=_str_or_none(data.get("credit_id")),
        )


@dataclass
class CrewMember:
    id: int
    name: str
    job: str
    department: Optional[str] = None
    credit_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["CrewMember"]:
        person_id = _int_or_none(data.get("id"))
        job = _str_or_none(data.get("job"))
        if person_id is None or job is None:
            return None
        return cls(
            id=person_id,
            name=_str_or_none(data.get("name")) or "Unknown",
            job=job,
            department=_str_or_none(data.get("department")),
            credit_id=_str_or_none(data.get("credit_id")),
        )


@dataclass
class Video:
    key: str
    name: str
    site: str
    type: str

    @property
    def url(self) -> Optional[str]:
        if self.site == "YouTube":
            return f"https://www.youtube.com/watch?v={self.key}"
        return None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["Video"]:
        key = _str_or_none(data.get("key"))
        if key is None:
            return None
        return cls(
            key=key,
            name=data.get("name") or "",
            site=data.get("site") or "",
            type=data.get("type") or "",
        )


def _parse_list(items: Any, parse) -> list:
    parsed = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        value = parse(item)
        if value is not None:
            parsed.append(value)
    return parsed


@dataclass
class MovieFull(MovieSummary):
    tagline: Optional[str] = None
    runtime: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    cast: List[CastMember] = field(default_factory=list)
    crew: List[CrewMember] = field(default_factory=list)
    videos: List[Video] = field(default_factory=list)
    similar: List[MovieSummary] = field(default_factory=list)

    @property
    def trailer(self) -> Optional[Video]:
        for video in self.videos:
            if video.type == "Trailer" and video.site == "YouTube":
                return video
        return None

    @property
    def directors(self) -> List[CrewMember]:
        return [member for member in self.crew if member.job == "Director"]

    def top_cast(self, limit: int = 10) -> List[CastMember]:
        return self.cast[:limit]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["MovieFull"]:
        summary = MovieSummary.from_api(data)
        if summary is None:
            return None

        credits = data.get("credits") or {}
        videos = (data.get("videos") or {}).get("results")
        similar = (data.get("similar") or {}).get("results")
        genres = [g.get("name") for g in data.get("genres") or [] if isinstance(g, dict) and g.get("name")]

        runtime = _int_or_none(data.get("runtime"))
        return cls(
            id=summary.id,
            title=summary.title,
            poster_path=summary.poster_path,
            backdrop_path=summary.backdrop_path,
            release_date=summary.release_date,
            vote_average=summary.vote_average,
            overview=summary.overview,
            tagline=_str_or_none(data.get("tagline")),
            runtime=runtime if runtime and runtime > 0 else None,
            genres=genres,
            cast=_parse_list(credits.get("cast"), CastMember.from_api),
            crew=_parse_list(credits.get("crew"), CrewMember.from_api),
            videos=_parse_list(videos, Video.from_api),
            similar=_parse_list(similar, MovieSummary.from_api),
        )


# ---------------- Person details ----------------

class CreditKind(Enum):
    CAST = "cast"
    CREW = "crew"


@dataclass
class Credit:
    """A person's credit on one movie, either a cast role or a crew job."""
    movie_id: int
    title: str
    kind: CreditKind
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    character: Optional[str] = None
    job: Optional[str] = None
    department: Optional[str] = None
    credit_id: Optional[str] = None

    @property
    def year(self) -> Optional[str]:
        return _year_from(self.release_date)

    @classmethod
    def from_api(cls, data: Dict[str, Any], kind: CreditKind) -> Optional["Credit"]:
        movie_id = _int_or_none(data.get("id"))
        if movie_id is None:
            return None
        job = _str_or_none(data.get("job"))
        if kind is CreditKind.CREW and job is None:
            return None
        return cls(
            movie_id=movie_id,
            title=_str_or_none(data.get("title")) or _str_or_none(data.get("original_title")) or "Unknown",
            kind=kind,
            poster_path=_str_or_none(data.get("poster_path")),
            release_date=_str_or_none(data.get("release_date")),
            character=_str_or_none(data.get("character")) if kind is CreditKind.CAST else None,
            job=job if kind is CreditKind.CREW else None,
            department=_str_or_none(data.get("department")),
            credit_id=_str_or_none(data.get("credit_id")),
        )


@dataclass
class PersonFull(PersonSummary):
    biography: str = ""
    birthday: Optional[str] = None
    deathday: Optional[str] = None
    place_of_birth: Optional[str] = None
    cast_credits: List[Credit] = field(default_factory=list)
    crew_credits: List[Credit] = field(default_factory=list)

    def age(self, today: Optional[date] = None) -> Optional[int]:
        """Age in whole years at death, or as of today for living people."""
        born = parse_date(self.birthday)
        if born is None:
            return None
        end = parse_date(self.deathday) or today or date.today()
        years = end.year - born.year
        if (end.month, end.day) < (born.month, born.day):
            years -= 1
        return years

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["PersonFull"]:
        summary = PersonSummary.from_api(data)
        if summary is None:
            return None

        movie_credits = data.get("movie_credits") or {}
        return cls(
            id=summary.id,
            name=summary.name,
            profile_path=summary.profile_path,
            known_for_department=summary.known_for_department,
            biography=(data.get("biography") or "").strip(),
            birthday=_str_or_none(data.get("birthday")),
            deathday=_str_or_none(data.get("deathday")),
            place_of_birth=_str_or_none(data.get("place_of_birth")),
            cast_credits=_parse_list(
                movie_credits.get("cast"), lambda item: Credit.from_api(item, CreditKind.CAST)
            ),
            crew_credits=_parse_list(
                movie_credits.get("crew"), lambda item: Credit.from_api(item, CreditKind.CREW)
            ),
        )


# ---------------- Derived view models ----------------

@dataclass
class FilmographySection:
    label: str
    kind: CreditKind
    credits: List[Credit]


@dataclass(frozen=True)
class MovieSuggestion:
    id: int
    title: str
    poster_path: Optional[str]
    year: Optional[str]
    rating: float

    kind = "movie"

    @classmethod
    def from_summary(cls, movie: MovieSummary) -> "MovieSuggestion":
        return cls(
            id=movie.id,
            title=movie.title,
            poster_path=movie.poster_path,
            year=movie.year,
            rating=movie.vote_average,
        )


@dataclass(frozen=True)
class PersonSuggestion:
    id: int
    name: str
    profile_path: Optional[str]
    department: Optional[str]

    kind = "person"

    @classmethod
    def from_summary(cls, person: PersonSummary) -> "PersonSuggestion":
        return cls(
            id=person.id,
            name=person.name,
            profile_path=person.profile_path,
            department=person.known_for_department,
        )


SearchSuggestion = Union[MovieSuggestion, PersonSuggestion]
