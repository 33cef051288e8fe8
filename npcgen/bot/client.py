"""
NPCGenBot - discord.py bot client.

Manages the full bot lifecycle:
- Initializes shared services (actor store, compendium packs, LLM
  orchestrator, NPC generator) once at startup
- Loads the NPC command cog
- Syncs slash commands (guild-local for dev, global for production)
- Cleans up all resources on shutdown via AsyncExitStack
"""

from __future__ import annotations

import discord
from contextlib import AsyncExitStack
from pathlib import Path

from discord.ext import commands

from npcgen.config.logging import get_logger
from npcgen.config.settings import Settings
from npcgen.documents import JsonActorStore, get_settings_packs
from npcgen.generator.builder import NPCGenerator
from npcgen.llm import LLMOrchestrator

logger = get_logger(__name__)


class NPCGenBot(commands.Bot):
    """
    Discord bot that generates D&D 5e NPCs on request.

    Holds the shared ``NPCGenerator`` and exposes it to cogs. Async
    resources are managed via AsyncExitStack so they're cleaned up when the
    bot shuts down.

    Args:
        settings: Full application settings (bot token, LLM config, output, packs)
    """

    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        super().__init__(
            command_prefix=settings.bot.command_prefix,
            intents=intents,
        )
        self.settings = settings
        self.generator: NPCGenerator | None = None
        self._exit_stack = AsyncExitStack()

    async def setup_hook(self) -> None:
        """
        Called after login, before connecting to the Gateway.

        Initializes all services, loads cogs, and syncs slash commands.
        """
        # --- 1. Actor store ---
        store = await self._exit_stack.enter_async_context(
            JsonActorStore(self.settings.generator.output_dir)
        )
        logger.info(f"Actor store ready ({self.settings.generator.output_dir})")

        # --- 2. Compendium packs (optional) ---
        packs = get_settings_packs(self.settings.compendium)
        if not any(packs.values()):
            logger.info("No compendium packs configured - NPCs will only get their unique weapon")

        # --- 3. LLM orchestrator + generator ---
        system_prompt_path = Path(__file__).parent.parent / "prompts" / "system.txt"
        orchestrator = LLMOrchestrator(
            settings=self.settings.llm,
            system_prompt=system_prompt_path.read_text(encoding="utf-8"),
        )
        self.generator = NPCGenerator(
            settings=self.settings.generator,
            orchestrator=orchestrator,
            store=store,
            packs=packs,
        )
        logger.info(f"NPC generator ready (model: {self.settings.llm.model})")

        # --- 4. Load cogs ---
        from npcgen.bot.cogs.npc import NPCCog
        await self.add_cog(NPCCog(self))
        logger.info("Cogs loaded")

        # --- 5. Sync slash commands ---
        try:
            if self.settings.bot.dev_guild_id:
                guild = discord.Object(id=self.settings.bot.dev_guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info(f"Slash commands synced to dev guild {self.settings.bot.dev_guild_id} (instant)")
            else:
                await self.tree.sync()
                logger.info("Slash commands synced globally (may take up to 1 hour to propagate)")
        except discord.errors.Forbidden:
            logger.warning(
                "Could not sync slash commands (403 Forbidden). "
                "The bot is missing the 'applications.commands' OAuth2 scope. "
                "Re-invite the bot with both 'bot' and 'applications.commands' scopes."
            )
        except Exception as e:
            logger.warning(f"Slash command sync failed: {e}. The bot will still start.")

    async def on_ready(self) -> None:
        """Called when the bot successfully connects to Discord."""
        logger.info(f"Logged in as {self.user} (id: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self) -> None:
        """Graceful shutdown - clean up all async resources before disconnecting."""
        logger.info(f"Shutting down {self.settings.bot.name}...")
        await self._exit_stack.aclose()
        await super().close()

    def is_allowed_channel(self, channel_id: int) -> bool:
        """
        Return True if the bot should respond in this channel.

        An empty ``allowed_channel_ids`` (the default) means everywhere.
        """
        allowed = self.settings.bot.allowed_channel_ids
        return not allowed or channel_id in allowed
