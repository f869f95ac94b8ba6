# commands/search.py - /search with movie + person autocomplete
import logging

import discord
from discord import app_commands

from clients.tmdb import search_movies
from commands.autocomplete import SearchSessions, make_search_autocomplete
from commands.details import show_movie, show_person
from commands.discover import send_listing
from commands.embeds import parse_suggestion_value, suggestions_embed
from models import MovieSuggestion
from services.autocomplete import KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_UP, SearchCoordinator

logger = logging.getLogger(__name__)

PICKER_VIEW_TIMEOUT = 120  # 2 minutes


async def open_suggestion(interaction: discord.Interaction, kind: str, item_id: int):
    if kind == "movie":
        await show_movie(interaction, item_id)
    else:
        await show_person(interaction, item_id)


class SuggestionPickerView(discord.ui.View):
    """Button keyboard over a coordinator's suggestion dropdown."""

    def __init__(self, coordinator: SearchCoordinator, user_id: int):
        super().__init__(timeout=PICKER_VIEW_TIMEOUT)
        self.coordinator = coordinator
        self.user_id = user_id
        self.message = None

    def create_embed(self) -> discord.Embed:
        state = self.coordinator.state
        return suggestions_embed(state.query.strip(), state.suggestions, state.selected_index)

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.user_id:
            await interaction.response.send_message("❌ This search belongs to someone else.", ephemeral=True)
            return False
        return True

    async def press(self, interaction: discord.Interaction, key: str):
        chosen = self.coordinator.key_pressed(key)

        if not self.coordinator.state.is_open:
            self.stop()
            await interaction.response.edit_message(view=None)
        else:
            await interaction.response.edit_message(embed=self.create_embed(), view=self)

        if chosen is not None:
            kind = "movie" if isinstance(chosen, MovieSuggestion) else "person"
            await open_suggestion(interaction, kind, chosen.id)

    async def on_timeout(self):
        # Walking away from the panel counts as clicking outside the dropdown
        self.coordinator.outside_click()
        if self.message:
            try:
                await self.message.edit(view=None)
            except discord.NotFound:
                pass
            except discord.HTTPException as e:
                logger.debug(f"Could not remove expired picker: {e}")

    @discord.ui.button(label="▲", style=discord.ButtonStyle.grey)
    async def up_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.press(interaction, KEY_UP)

    @discord.ui.button(label="▼", style=discord.ButtonStyle.grey)
    async def down_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.press(interaction, KEY_DOWN)

    @discord.ui.button(label="⏎ Open", style=discord.ButtonStyle.primary)
    async def enter_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.press(interaction, KEY_ENTER)

    @discord.ui.button(label="✖", style=discord.ButtonStyle.secondary)
    async def escape_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.press(interaction, KEY_ESCAPE)


def setup(bot, sessions: SearchSessions = None):
    logger.info("Setting up search commands...")
    sessions = sessions or SearchSessions()
    search_autocomplete = make_search_autocomplete(sessions)

    async def do_search(interaction: discord.Interaction, query: str):
        """Shared logic: a picked suggestion opens its detail view, free text lists results."""
        user_id = interaction.user.id
        coordinator = sessions.get(user_id)

        picked = parse_suggestion_value(query)
        if picked:
            kind, item_id = picked
            for index, suggestion in enumerate(coordinator.state.suggestions):
                if suggestion.kind == kind and suggestion.id == item_id:
                    coordinator.suggestion_clicked(index)
                    break
            await open_suggestion(interaction, kind, item_id)
            return

        text = query.strip()
        coordinator.submit()
        if not text:
            await interaction.followup.send("❌ Type something to search for.")
            return

        picker_coordinator = SearchCoordinator(debounce=0)
        picker_coordinator.input_changed(text)
        suggestions = await picker_coordinator.settle()
        if suggestions:
            view = SuggestionPickerView(picker_coordinator, user_id)
            view.message = await interaction.followup.send(embed=view.create_embed(), view=view, wait=True)

        await send_listing(interaction, f"Results for \"{text}\"", lambda page: search_movies(text, page))

    @bot.tree.command(name="search", description="Search for films and people")
    @app_commands.describe(query="Start typing a title or a name to see suggestions")
    @app_commands.autocomplete(query=search_autocomplete)
    async def search_cmd(interaction: discord.Interaction, query: str):
        await interaction.response.defer()
        await do_search(interaction, query)

    @bot.tree.command(name="film", description="Search for films and people")
    @app_commands.describe(query="Start typing a title or a name to see suggestions")
    @app_commands.autocomplete(query=search_autocomplete)
    async def film_cmd(interaction: discord.Interaction, query: str):
        await interaction.response.defer()
        await do_search(interaction, query)

    return sessions
