# commands/details.py - Movie and person detail views
import logging
from typing import List

import discord
from discord import app_commands

from clients.tmdb import TMDBFetchError, get_movie_details, get_person_details
from commands.embeds import BIO_CLAMP_LENGTH, filmography_embed, movie_detail_embed, person_detail_embed
from models import FilmographySection, MovieFull, PersonFull
from services.filmography import filmography_for

logger = logging.getLogger(__name__)

DETAIL_VIEW_TIMEOUT = 300  # 5 minutes


async def _remove_view(message):
    """Strip buttons from a message whose view expired."""
    if not message:
        return
    try:
        await message.edit(view=None)
    except discord.NotFound:
        pass
    except discord.HTTPException as e:
        logger.debug(f"Could not remove expired view: {e}")


class MovieDetailView(discord.ui.View):
    """Trailer link and TMDB page buttons for a movie."""

    def __init__(self, movie: MovieFull):
        super().__init__(timeout=DETAIL_VIEW_TIMEOUT)
        self.movie = movie
        self.message = None

        trailer = movie.trailer
        if trailer and trailer.url:
            self.add_item(discord.ui.Button(label="▶ Trailer", style=discord.ButtonStyle.link, url=trailer.url))
        self.add_item(discord.ui.Button(
            label="TMDB",
            style=discord.ButtonStyle.link,
            url=f"https://www.themoviedb.org/movie/{movie.id}",
        ))

    async def on_timeout(self):
        await _remove_view(self.message)


class PersonDetailView(discord.ui.View):
    """Biography toggle plus one filmography section per page."""

    def __init__(self, person: PersonFull, sections: List[FilmographySection]):
        super().__init__(timeout=DETAIL_VIEW_TIMEOUT)
        self.person = person
        self.sections = sections
        self.section_index = 0
        self.expanded_bio = False
        self.message = None
        self.update_buttons()

    def get_embeds(self) -> List[discord.Embed]:
        return [
            person_detail_embed(self.person, expanded_bio=self.expanded_bio),
            filmography_embed(self.person, self.sections, self.section_index),
        ]

    def update_buttons(self):
        self.bio_button.label = "Show less" if self.expanded_bio else "Read more"
        self.bio_button.disabled = len(self.person.biography) <= BIO_CLAMP_LENGTH
        self.prev_button.disabled = self.section_index == 0
        self.next_button.disabled = self.section_index >= len(self.sections) - 1

    async def refresh(self, interaction: discord.Interaction):
        self.update_buttons()
        await interaction.response.edit_message(embeds=self.get_embeds(), view=self)

    async def on_timeout(self):
        await _remove_view(self.message)

    @discord.ui.button(label="Read more", style=discord.ButtonStyle.secondary)
    async def bio_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.expanded_bio = not self.expanded_bio
        await self.refresh(interaction)

    @discord.ui.button(label="⬅️ Previous", style=discord.ButtonStyle.grey)
    async def prev_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        if self.section_index > 0:
            self.section_index -= 1
        await self.refresh(interaction)

    @discord.ui.button(label="➡️ Next", style=discord.ButtonStyle.grey)
    async def next_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        if self.section_index < len(self.sections) - 1:
            self.section_index += 1
        await self.refresh(interaction)


async def show_movie(interaction: discord.Interaction, movie_id: int):
    """Send the movie detail view as a followup. The interaction must already be deferred."""
    try:
        movie = await get_movie_details(movie_id)
    except TMDBFetchError as e:
        logger.error(f"Failed to load movie {movie_id}: {e}")
        await interaction.followup.send("❌ Movie not found.")
        return

    view = MovieDetailView(movie)
    view.message = await interaction.followup.send(embed=movie_detail_embed(movie), view=view, wait=True)


async def show_person(interaction: discord.Interaction, person_id: int):
    """Send the person detail view as a followup. The interaction must already be deferred."""
    try:
        person = await get_person_details(person_id)
    except TMDBFetchError as e:
        logger.error(f"Failed to load person {person_id}: {e}")
        await interaction.followup.send("❌ Person not found.")
        return

    view = PersonDetailView(person, filmography_for(person))
    view.message = await interaction.followup.send(embeds=view.get_embeds(), view=view, wait=True)


def setup(bot):
    logger.info("Setting up detail commands...")

    @bot.tree.command(name="movie", description="Show details for a movie by TMDB id")
    @app_commands.describe(movie_id="TMDB movie id")
    async def movie_cmd(interaction: discord.Interaction, movie_id: int):
        await interaction.response.defer()
        await show_movie(interaction, movie_id)

    @bot.tree.command(name="person", description="Show details and filmography for a person by TMDB id")
    @app_commands.describe(person_id="TMDB person id")
    async def person_cmd(interaction: discord.Interaction, person_id: int):
        await interaction.response.defer()
        await show_person(interaction, person_id)
