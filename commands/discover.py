# commands/discover.py - Categorized and searched movie listings
import logging
from typing import Awaitable, Callable, Optional

import discord
from discord import app_commands

from clients.tmdb import MOVIE_CATEGORIES, TMDBFetchError
from commands.embeds import movie_listing_embed
from models import Page

logger = logging.getLogger(__name__)

LISTING_VIEW_TIMEOUT = 180  # 3 minutes
MAX_PAGE = 500  # TMDB refuses pages past 500

PageFetcher = Callable[[int], Awaitable[Page]]


async def fetch_page(fetch: PageFetcher, page_number: int, heading: str) -> Optional[Page]:
    """Fetch one listing page; failures are logged and rendered as an empty listing."""
    try:
        return await fetch(page_number)
    except TMDBFetchError as e:
        logger.error(f"Failed to load '{heading}' page {page_number}: {e}")
        return None


class MovieListingView(discord.ui.View):
    """Paginated movie listing"""

    def __init__(self, heading: str, fetch: PageFetcher, page: Optional[Page]):
        super().__init__(timeout=LISTING_VIEW_TIMEOUT)
        self.heading = heading
        self.fetch = fetch
        self.page = page
        self.page_number = page.page if page else 1
        self.message = None
        self.update_buttons()

    @property
    def total_pages(self) -> int:
        if self.page is None:
            return 1
        return min(self.page.total_pages, MAX_PAGE)

    def create_embed(self) -> discord.Embed:
        return movie_listing_embed(self.heading, self.page)

    def update_buttons(self):
        self.prev_button.disabled = self.page_number <= 1
        self.next_button.disabled = self.page_number >= self.total_pages

    async def go_to(self, interaction: discord.Interaction, page_number: int):
        await interaction.response.defer()
        page = await fetch_page(self.fetch, page_number, self.heading)
        if page is not None:
            self.page = page
            self.page_number = page_number
        self.update_buttons()
        await interaction.edit_original_response(embed=self.create_embed(), view=self)

    async def on_timeout(self):
        for item in self.children:
            item.disabled = True
        if self.message:
            try:
                await self.message.edit(view=self)
            except discord.NotFound:
                pass
            except discord.HTTPException as e:
                logger.debug(f"Could not disable expired listing view: {e}")

    @discord.ui.button(label="⬅️ Previous", style=discord.ButtonStyle.grey)
    async def prev_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.go_to(interaction, max(1, self.page_number - 1))

    @discord.ui.button(label="➡️ Next", style=discord.ButtonStyle.grey)
    async def next_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.go_to(interaction, min(self.total_pages, self.page_number + 1))


async def send_listing(interaction: discord.Interaction, heading: str, fetch: PageFetcher, page_number: int = 1):
    """Send a listing as a followup. The interaction must already be deferred."""
    page = await fetch_page(fetch, page_number, heading)
    view = MovieListingView(heading, fetch, page)
    view.message = await interaction.followup.send(embed=view.create_embed(), view=view, wait=True)


CATEGORY_CHOICES = [
    app_commands.Choice(name=label, value=key) for key, (label, _) in MOVIE_CATEGORIES.items()
]


def setup(bot):
    logger.info("Setting up discover commands...")

    @bot.tree.command(name="discover", description="Browse trending, popular, top rated, now showing or upcoming films")
    @app_commands.describe(category="Which list to browse", page="Page number to start on")
    @app_commands.choices(category=CATEGORY_CHOICES)
    async def discover_cmd(
        interaction: discord.Interaction,
        category: app_commands.Choice[str],
        page: app_commands.Range[int, 1, MAX_PAGE] = 1,
    ):
        await interaction.response.defer()
        heading, fetch = MOVIE_CATEGORIES[category.value]
        await send_listing(interaction, heading, fetch, page)
