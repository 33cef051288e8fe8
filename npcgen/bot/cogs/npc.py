"""
NPCCog - the /npc slash command.

The command's parameters are the generator dialog: type, class or job,
challenge rating, race, gender, alignment, plus an optional name and story
context. The subtype and CR autocompletes read the type already entered, so
picking ``commoner`` offers jobs and a fixed CR list while ``npc`` offers
classes and a random CR.

The finished NPC is posted as an embed with the actor JSON attached for
import into the VTT.
"""

from __future__ import annotations

import io
import json

import discord
from discord import app_commands
from discord.ext import commands

from npcgen.config.logging import LOG_PREFIX, get_logger
from npcgen.data.tables import RANDOM_VALUE
from npcgen.generator import options as dialog
from npcgen.generator.models import (
    DialogOption,
    GenerationInProgressError,
    GenerationResult,
    InvalidSelectionError,
    NPCCreationError,
    NPCRequest,
)
from npcgen.llm import LLMError

logger = get_logger(__name__)

# Discord caps autocomplete results at 25
_MAX_CHOICES = 25


def _error_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(
        title=title,
        description=description,
        color=discord.Color.red(),
    )


def _filter_choices(
    options: list[DialogOption],
    current: str,
) -> list[app_commands.Choice[str]]:
    current = current.lower()
    return [
        app_commands.Choice(name=option.label, value=option.value)
        for option in options
        if current in option.label.lower() or current in option.value
    ][:_MAX_CHOICES]


def _namespace_type(interaction: discord.Interaction) -> str:
    """The type already entered in this command invocation, default ``npc``."""
    npc_type = getattr(interaction.namespace, "type", None)
    return npc_type if npc_type in ("npc", "commoner") else "npc"


def _result_embed(result: GenerationResult) -> discord.Embed:
    npc = result.npc
    details = npc.details
    biography = details.biography
    # The actor carries "Unknown" when alignment is hidden
    actor_details = result.actor.get("system", {}).get("details", {})
    alignment = actor_details.get("alignment", details.alignment.label)

    embed = discord.Embed(
        title=npc.name[:256],
        description=(biography.readaloud if biography else "")[:4096],
        color=discord.Color.gold(),
    )
    embed.add_field(
        name="Profile",
        value=(
            f"{details.gender.label} {details.race.label}\n"
            f"{details.sheet}: {details.subtype.label}\n"
            f"CR {details.cr.label} | {alignment}"
        ),
        inline=True,
    )
    embed.add_field(
        name="Stats",
        value=(
            f"AC {npc.attributes.ac} | HP {npc.attributes.hp.max} ({npc.attributes.hp.formula})\n"
            + " ".join(f"{key.upper()} {ability.value}" for key, ability in npc.abilities.items())
        ),
        inline=True,
    )
    if npc.unique_magical_weapon and npc.unique_magical_weapon.name:
        embed.add_field(
            name=npc.unique_magical_weapon.name[:256],
            value=(npc.unique_magical_weapon.description or "-")[:1024],
            inline=False,
        )
    embed.set_footer(text=f"{len(result.actor.get('items', []))} embedded item(s)")
    return embed


def _actor_file(result: GenerationResult) -> discord.File:
    payload = json.dumps(result.actor, indent=2, ensure_ascii=False).encode("utf-8")
    filename = f"{result.actor.get('name', 'npc').replace(' ', '_')}.json"
    return discord.File(io.BytesIO(payload), filename=filename)


class NPCCog(commands.Cog):
    """Provides the /npc slash command."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @app_commands.command(name="npc", description="Generate a D&D 5e NPC")
    @app_commands.describe(
        type="Commoner (job) or NPC (class)",
        subtype="Class or job",
        cr="Challenge rating",
        race="Race",
        gender="Gender",
        alignment="Alignment",
        name="Optional name for the NPC",
        context="Optional setting or story context",
    )
    @app_commands.choices(
        type=[
            app_commands.Choice(name=option.label, value=option.value)
            for option in dialog.get_dialog_options("type", False)
        ]
    )
    async def npc(
        self,
        interaction: discord.Interaction,
        type: str = "npc",
        subtype: str = RANDOM_VALUE,
        cr: str = RANDOM_VALUE,
        race: str = RANDOM_VALUE,
        gender: str = RANDOM_VALUE,
        alignment: str = RANDOM_VALUE,
        name: str | None = None,
        context: str | None = None,
    ) -> None:
        """
        /npc [type] [subtype] [cr] [race] [gender] [alignment] [name] [context]

        Generates an NPC and posts it with the importable actor JSON.
        """
        if not self.bot.is_allowed_channel(interaction.channel_id):
            await interaction.response.send_message(
                "I'm not configured to respond in this channel.", ephemeral=True
            )
            return

        generator = self.bot.generator
        if generator.is_requesting:
            await interaction.response.send_message(
                f"{LOG_PREFIX} Please wait, an NPC is already being generated.",
                ephemeral=True,
            )
            return

        # Defer immediately - the model call takes well over Discord's 3s limit
        await interaction.response.defer()

        request = NPCRequest(
            type=type,
            subtype=subtype,
            cr=cr,
            race=race,
            gender=gender,
            alignment=alignment,
            name=name,
            context=context,
        )
        try:
            result = await generator.generate(request)
        except GenerationInProgressError as e:
            await interaction.followup.send(f"{LOG_PREFIX} {e}", ephemeral=True)
            return
        except InvalidSelectionError as e:
            await interaction.followup.send(embed=_error_embed("Invalid Selection", str(e)))
            return
        except LLMError as e:
            logger.warning(f"LLM error generating NPC: {e}")
            await interaction.followup.send(embed=_error_embed("LLM Error", str(e)))
            return
        except NPCCreationError:
            await interaction.followup.send(
                embed=_error_embed("NPC Creation Failed", "The NPC could not be created. See logs.")
            )
            return
        except Exception as e:
            logger.exception(f"Unexpected error generating NPC: {e}")
            await interaction.followup.send(
                embed=_error_embed("Error", "Something went wrong. Please try again.")
            )
            return

        await interaction.followup.send(
            content=f"{LOG_PREFIX} {result.npc.name} has been created",
            embed=_result_embed(result),
            file=_actor_file(result),
        )

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    @npc.autocomplete("subtype")
    async def subtype_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        changed = dialog.change_dialog_category(_namespace_type(interaction))
        return _filter_choices(changed["subtype"], current)

    @npc.autocomplete("cr")
    async def cr_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        changed = dialog.change_dialog_category(_namespace_type(interaction))
        return _filter_choices(changed["cr"], current)

    @npc.autocomplete("race")
    async def race_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        return _filter_choices(dialog.get_dialog_options("race", True), current)

    @npc.autocomplete("gender")
    async def gender_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        return _filter_choices(dialog.get_dialog_options("gender", True), current)

    @npc.autocomplete("alignment")
    async def alignment_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        return _filter_choices(dialog.get_dialog_options("alignment", True), current)
