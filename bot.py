import asyncio
import logging
import signal
import sys
import time
from typing import Optional

import discord
from discord.ext import commands

# Local imports
import config
from logging_utils import setup_logging, log_system_info


class CinemateBot(commands.Bot):
    """Bot with shutdown handlers for shared resources"""

    def __init__(self, config_module=None):
        self.config = config_module
        self.logger = logging.getLogger(__name__)

        intents = discord.Intents.default()

        super().__init__(
            command_prefix="!",
            help_command=None,
            intents=intents,
            chunk_guilds_at_startup=False,
            max_messages=self._get_config_value('MAX_MESSAGES', 200),
        )

        self.startup_time = None
        self.shutdown_handlers = []

    def _get_config_value(self, key: str, default):
        """Get configuration value with fallback to default"""
        if self.config and hasattr(self.config, key):
            return getattr(self.config, key)
        return default

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.startup_time = time.time()

    async def on_ready(self):
        startup_duration = time.time() - (self.startup_time or time.time())
        self.logger.info(f"✅ Logged in as {self.user} (ID: {self.user.id})")
        self.logger.info(f"🏁 Startup completed in {startup_duration:.2f} seconds")
        self.logger.info(f"📊 Connected to {len(self.guilds)} guild(s)")

    async def close(self):
        """Run shutdown handlers, then disconnect"""
        self.logger.info("🔄 Initiating graceful shutdown...")

        for handler in self.shutdown_handlers:
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler()
                else:
                    handler()
            except Exception as e:
                self.logger.error(f"Error in shutdown handler: {e}")

        await super().close()
        self.logger.info("✅ Shutdown complete")

    def add_shutdown_handler(self, handler):
        """Add a function to be called during shutdown"""
        self.shutdown_handlers.append(handler)


class BotManager:
    """Manages bot lifecycle and command loading"""

    def __init__(self):
        self.logger = setup_logging(config)
        self.bot: Optional[CinemateBot] = None
        self.setup_complete = False
        self.components_loaded = False

        log_system_info(self.logger, {
            'Bot Version': getattr(config, 'BOT_VERSION', '1.0.0'),
            'Environment': 'Production' if not getattr(config, 'DEBUG', False) else 'Development'
        })

    async def initialize_bot(self) -> bool:
        """Initialize the bot with all components"""
        try:
            self.bot = CinemateBot(config)

            if not await self._load_commands():
                return False

            self._setup_signal_handlers()

            self.setup_complete = True
            self.logger.info("🚀 Bot initialization complete")
            return True

        except Exception as e:
            self.logger.exception(f"❌ Bot initialization failed: {e}")
            return False

    async def _load_commands(self) -> bool:
        """Load all command modules"""
        try:
            from commands import details, discover, search

            details.setup(self.bot)
            discover.setup(self.bot)
            sessions = search.setup(self.bot)
            self.bot.add_shutdown_handler(sessions.close_all)
            self.logger.info("✅ Commands loaded (details, discover, search)")

            registered_commands = [cmd.name for cmd in self.bot.tree.get_commands()]
            self.logger.info(f"📋 Registered commands: {registered_commands}")
            return True

        except Exception as e:
            self.logger.exception(f"❌ Error loading commands: {e}")
            return False

    async def sync_commands(self):
        """Sync slash commands with Discord"""
        try:
            guild_ids = getattr(config, 'GUILD_IDS_TEST', [])
            if guild_ids:
                # Guild-specific sync (faster for testing)
                self.logger.info("🔄 Syncing commands to test guilds...")
                for guild_id in guild_ids:
                    guild = discord.Object(id=guild_id)
                    self.bot.tree.copy_global_to(guild=guild)
                    synced = await self.bot.tree.sync(guild=guild)
                    self.logger.info(f"✅ Guild {guild_id} synced {len(synced)} commands: {[c.name for c in synced]}")
            else:
                # Global sync (takes up to 1 hour to update)
                self.logger.info("🔄 Syncing commands globally...")
                synced = await self.bot.tree.sync()
                self.logger.info(f"✅ Globally synced {len(synced)} commands: {[c.name for c in synced]}")

        except discord.HTTPException as e:
            self.logger.error(f"❌ Failed to sync commands: {e}")

    async def load_additional_components(self):
        """Pre-warm the TMDB session and register its cleanup"""
        if self.components_loaded:
            return
        from clients.tmdb import warmup_session, close_session
        await warmup_session()
        self.bot.add_shutdown_handler(close_session)
        self.components_loaded = True
        self.logger.info("✅ TMDB session ready")

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self.logger.info(f"📡 Received signal {signum}, initiating shutdown...")

            async def shutdown():
                if self.bot:
                    await self.bot.close()

            try:
                loop = asyncio.get_event_loop()
                loop.create_task(shutdown())
            except RuntimeError:
                # No event loop running, exit immediately
                sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start_bot(self) -> bool:
        """Start the bot with retry logic"""
        if not self.setup_complete:
            self.logger.error("❌ Bot not initialized properly")
            return False

        if not getattr(config, 'DISCORD_TOKEN', None):
            self.logger.error("❌ DISCORD_TOKEN not found in config!")
            return False
        if not getattr(config, 'TMDB_API_KEY', None):
            self.logger.error("❌ TMDB_API_KEY not found in config!")
            return False

        max_retries = getattr(config, 'MAX_STARTUP_RETRIES', 3)
        retry_delay = getattr(config, 'STARTUP_RETRY_DELAY', 5)

        @self.bot.event
        async def on_ready():
            await CinemateBot.on_ready(self.bot)
            await self.sync_commands()
            await self.load_additional_components()
            self.logger.info("🎉 Bot is ready and operational!")

        for attempt in range(max_retries):
            try:
                self.logger.info(f"🚀 Starting bot (attempt {attempt + 1}/{max_retries})...")
                await self.bot.start(config.DISCORD_TOKEN)
                return True

            except discord.LoginFailure as e:
                self.logger.error(f"❌ Invalid Discord token: {e}")
                return False  # Don't retry on auth failures

            except Exception as e:
                self.logger.error(f"❌ Bot startup failed (attempt {attempt + 1}/{max_retries}): {e}")

                if attempt < max_retries - 1:
                    self.logger.info(f"⏳ Retrying in {retry_delay} seconds...")
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2  # Exponential backoff
                else:
                    self.logger.error("❌ Max retries reached. Bot startup failed.")
                    return False

        return False


async def main():
    """Main function - entry point"""
    bot_manager = BotManager()

    try:
        if not await bot_manager.initialize_bot():
            bot_manager.logger.error("❌ Failed to initialize bot. Exiting.")
            return

        if not await bot_manager.start_bot():
            bot_manager.logger.error("❌ Failed to start bot. Exiting.")
            return

    except KeyboardInterrupt:
        bot_manager.logger.info("⌨️ Received keyboard interrupt")
    finally:
        if bot_manager.bot and not bot_manager.bot.is_closed():
            await bot_manager.bot.close()
        bot_manager.logger.info("🔚 Bot process ended")


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot interrupted by user")


if __name__ == "__main__":
    run()
