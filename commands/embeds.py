# commands/embeds.py - Embed builders and display formatting
import logging
from datetime import date
from typing import List, Optional, Tuple

import discord

from clients.tmdb import image_url
from models import (
    CreditKind,
    FilmographySection,
    MovieFull,
    MovieSuggestion,
    Page,
    PersonFull,
    SearchSuggestion,
    parse_date,
)

logger = logging.getLogger(__name__)

# Colors
LISTING_COLOR = 0xf1c40f  # Gold
MOVIE_COLOR = 0x2ecc71  # Green
PERSON_COLOR = 0x9b59b6  # Purple
SEARCH_COLOR = 0x3498db  # Blue

BIO_CLAMP_LENGTH = 350
MAX_DESCRIPTION_LENGTH = 4000
MAX_FIELD_LENGTH = 1024
MAX_CHOICE_NAME_LENGTH = 100
CAST_LIMIT = 10
SIMILAR_LIMIT = 5
NO_YEAR = "—"


# ---------------- Formatting helpers ----------------

def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def format_year(release_date: Optional[str]) -> str:
    if release_date and release_date[:4].isdigit():
        return release_date[:4]
    return NO_YEAR


def format_runtime(minutes: Optional[int]) -> str:
    if not minutes or minutes <= 0:
        return "Unknown"
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
    return f"{mins}m"


def format_rating(vote_average: float) -> str:
    if not vote_average:
        return "N/A"
    return f"⭐ {vote_average:.1f} / 10"


def format_long_date(date_str: Optional[str]) -> Optional[str]:
    """2024-03-05 -> March 5, 2024"""
    parsed = parse_date(date_str)
    if parsed is None:
        return None
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def clamp_biography(text: str, expanded: bool = False) -> Tuple[str, bool]:
    """Return the biography to show and whether it is long enough to toggle."""
    is_long = len(text) > BIO_CLAMP_LENGTH
    if expanded or not is_long:
        return truncate(text, MAX_DESCRIPTION_LENGTH), is_long
    clipped = text[:BIO_CLAMP_LENGTH].rsplit(" ", 1)[0]
    return clipped + "...", is_long


def suggestion_label(suggestion: SearchSuggestion) -> str:
    if isinstance(suggestion, MovieSuggestion):
        label = f"🎬 {suggestion.title}"
        if suggestion.year:
            label += f" ({suggestion.year})"
        if suggestion.rating:
            label += f" · ⭐ {suggestion.rating:.1f}"
    else:
        label = f"👤 {suggestion.name}"
        if suggestion.department:
            label += f" · {suggestion.department}"
    return truncate(label, MAX_CHOICE_NAME_LENGTH)


def suggestion_value(suggestion: SearchSuggestion) -> str:
    return f"{suggestion.kind}:{suggestion.id}"


def parse_suggestion_value(value: str) -> Optional[Tuple[str, int]]:
    """'movie:603' -> ('movie', 603). Free text returns None."""
    kind, sep, raw_id = (value or "").partition(":")
    if not sep or kind not in ("movie", "person") or not raw_id.isdigit():
        return None
    return kind, int(raw_id)


# ---------------- Listings ----------------

def movie_listing_embed(heading: str, page: Optional[Page]) -> discord.Embed:
    embed = discord.Embed(title=f"🎞️ {heading}", color=LISTING_COLOR)

    if page is None or not page.results:
        embed.description = "No films found."
        return embed

    lines = []
    for movie in page.results:
        rating = f" · ⭐ {movie.vote_average:.1f}" if movie.vote_average else ""
        lines.append(f"**{movie.title}** ({format_year(movie.release_date)}){rating}")
    embed.description = truncate("\n".join(lines), MAX_DESCRIPTION_LENGTH)

    first_poster = next((m.poster_path for m in page.results if m.poster_path), None)
    if first_poster:
        embed.set_thumbnail(url=image_url(first_poster, "w342"))

    if page.total_pages > 1:
        embed.set_footer(text=f"Page {page.page} of {page.total_pages}")
    return embed


# ---------------- Movie details ----------------

def movie_detail_embed(movie: MovieFull) -> discord.Embed:
    description = movie.overview or "No description available."
    if movie.tagline:
        description = f"*{movie.tagline}*\n\n{description}"

    embed = discord.Embed(
        title=f"{movie.title} ({format_year(movie.release_date)})",
        description=truncate(description, MAX_DESCRIPTION_LENGTH),
        color=MOVIE_COLOR,
        url=f"https://www.themoviedb.org/movie/{movie.id}",
    )

    embed.add_field(name="**Rating**", value=format_rating(movie.vote_average), inline=True)
    embed.add_field(name="**Runtime**", value=format_runtime(movie.runtime), inline=True)
    embed.add_field(name="**Release**", value=format_long_date(movie.release_date) or NO_YEAR, inline=True)

    if movie.genres:
        embed.add_field(name="**Genres**", value=", ".join(movie.genres), inline=False)

    directors = movie.directors
    if directors:
        names = ", ".join(d.name for d in directors)
        embed.add_field(name="**Directed by**", value=truncate(names, MAX_FIELD_LENGTH), inline=False)

    cast = movie.top_cast(CAST_LIMIT)
    if cast:
        lines = [f"{c.name} as {c.character}" if c.character else c.name for c in cast]
        embed.add_field(name="**Cast**", value=truncate("\n".join(lines), MAX_FIELD_LENGTH), inline=False)

    similar = movie.similar[:SIMILAR_LIMIT]
    if similar:
        lines = [f"{m.title} ({format_year(m.release_date)})" for m in similar]
        embed.add_field(name="**Similar**", value=truncate("\n".join(lines), MAX_FIELD_LENGTH), inline=False)

    poster = image_url(movie.poster_path, "w342")
    if poster:
        embed.set_thumbnail(url=poster)
    backdrop = image_url(movie.backdrop_path, "original")
    if backdrop:
        embed.set_image(url=backdrop)

    return embed


# ---------------- Person details ----------------

def person_detail_embed(person: PersonFull, expanded_bio: bool = False, today: Optional[date] = None) -> discord.Embed:
    if person.biography:
        bio, _ = clamp_biography(person.biography, expanded_bio)
    else:
        bio = "No biography available."

    embed = discord.Embed(
        title=person.name,
        description=bio,
        color=PERSON_COLOR,
        url=f"https://www.themoviedb.org/person/{person.id}",
    )

    if person.known_for_department:
        embed.add_field(name="**Known For**", value=person.known_for_department, inline=True)

    age = person.age(today)
    born = format_long_date(person.birthday)
    if born:
        if age is not None and not person.deathday:
            born += f" (age {age})"
        embed.add_field(name="**Born**", value=born, inline=True)

    died = format_long_date(person.deathday)
    if died:
        if age is not None:
            died += f" (age {age})"
        embed.add_field(name="**Died**", value=died, inline=True)

    if person.place_of_birth:
        embed.add_field(name="**Birthplace**", value=person.place_of_birth, inline=False)

    profile = image_url(person.profile_path, "h632")
    if profile:
        embed.set_thumbnail(url=profile)

    return embed


def format_credit(credit, kind: CreditKind) -> str:
    line = f"**{credit.title}** ({format_year(credit.release_date)})"
    if kind is CreditKind.CAST and credit.character:
        line += f" as {credit.character}"
    return line


def filmography_embed(person: PersonFull, sections: List[FilmographySection], index: int) -> discord.Embed:
    """One filmography section per page."""
    embed = discord.Embed(title=f"🎬 {person.name} · Filmography", color=PERSON_COLOR)

    if not sections:
        embed.description = "No filmography available."
        return embed

    section = sections[index]
    lines = [format_credit(credit, section.kind) for credit in section.credits]
    embed.add_field(
        name=f"{section.label} · {len(section.credits)}",
        value=truncate("\n".join(lines), MAX_FIELD_LENGTH),
        inline=False,
    )
    if len(sections) > 1:
        embed.set_footer(text=f"Section {index + 1} of {len(sections)}")
    return embed


# ---------------- Search suggestions ----------------

def suggestions_embed(query: str, suggestions: List[SearchSuggestion], selected_index: int) -> discord.Embed:
    embed = discord.Embed(title=f"🔎 Suggestions for \"{query}\"", color=SEARCH_COLOR)

    if not suggestions:
        embed.description = "No suggestions."
        return embed

    lines = []
    for i, suggestion in enumerate(suggestions):
        marker = "▶" if i == selected_index else "▫️"
        lines.append(f"{marker} {suggestion_label(suggestion)}")
    embed.description = "\n".join(lines)
    embed.set_footer(text="Use ▲ ▼ to move, ⏎ to open, ✖ to close")
    return embed
