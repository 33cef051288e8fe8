"""
NPCGenerator - the generate-button pipeline.

    NPCRequest (dialog values)
          ↓ generate_dialog_data()   resolve selections, derive stats locally
    GeneratedNPC
          ↓ init_query()             compose prompt
    query string
          ↓ LLMOrchestrator          one model call
    GptNpcData
          ↓ merge_gpt_data()         name, gear, biography, ability overrides
          ↓ create_npc()             actor document + compendium items + weapon
    GenerationResult

Only one generation runs at a time per generator; a second request while
one is in flight is refused with ``GenerationInProgressError`` rather than
queued.
"""

from __future__ import annotations

import asyncio
import random

from npcgen.config.logging import LOG_PREFIX, get_logger
from npcgen.config.settings import GeneratorSettings
from npcgen.data.tables import CATEGORY_LIST, RANDOM_VALUE, SUBTYPE_LABELS
from npcgen.documents.actor import (
    build_actor,
    create_unique_magical_weapon_item,
    render_biography,
)
from npcgen.documents.base import ActorStore
from npcgen.documents.compendium import Compendium, add_items_to_npc
from npcgen.generator import options as dialog
from npcgen.generator.models import (
    Biography,
    GenerationInProgressError,
    GenerationResult,
    GeneratedNPC,
    GptNpcData,
    NPCCreationError,
    NPCDetails,
    NPCRequest,
)
from npcgen.generator.query import init_query
from npcgen.generator.stats import StatGenerator
from npcgen.llm import LLMOrchestrator

logger = get_logger(__name__)

# GPT ability keys → dnd5e ability keys
_GPT_ABILITY_KEYS = {
    "strength": "str",
    "dexterity": "dex",
    "constitution": "con",
    "intelligence": "int",
    "wisdom": "wis",
    "charisma": "cha",
}

# CR a commoner gets when none was chosen (the first entry of its CR select)
_COMMONER_DEFAULT_CR = "0"


class NPCGenerator:
    """
    Generates NPCs and writes them to an actor store.

    Args:
        settings: Generation behaviour (alignment hiding, source label)
        orchestrator: Language model client
        store: Destination for actor documents (must be initialized)
        packs: Optional ``{"items": Compendium, "spells": Compendium}``
        rng: Random source shared by option resolution and stat rolls
        query_template: Override for ``prompts/query.txt``
    """

    def __init__(
        self,
        settings: GeneratorSettings,
        orchestrator: LLMOrchestrator,
        store: ActorStore,
        packs: dict[str, Compendium | None] | None = None,
        rng: random.Random | None = None,
        query_template: str | None = None,
    ):
        self._settings = settings
        self._orchestrator = orchestrator
        self._store = store
        self._packs = packs or {}
        self._rng = rng or random.Random()
        self._stats = StatGenerator(self._rng)
        self._query_template = query_template
        self._lock = asyncio.Lock()

    @property
    def is_requesting(self) -> bool:
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Dialog
    # ------------------------------------------------------------------

    def generate_dialog_data(self, request: NPCRequest) -> GeneratedNPC:
        """
        Resolve the dialog values and derive every locally computed stat.

        Raises:
            InvalidSelectionError: If a value is not one of its category's options
        """
        npc_type = dialog.get_selected_option(
            "type", request.type, dialog.get_dialog_options("type", True), self._rng
        )
        cr_value = request.cr
        if npc_type.value == "commoner" and cr_value == RANDOM_VALUE:
            cr_value = _COMMONER_DEFAULT_CR

        option_tables = {"subtype": npc_type.value}
        selected = {"type": npc_type}
        for category in CATEGORY_LIST:
            if category == "type":
                continue
            value = cr_value if category == "cr" else getattr(request, category)
            table = option_tables.get(category, category)
            selected[category] = dialog.get_selected_option(
                category, value, dialog.get_dialog_options(table, True), self._rng
            )

        details = NPCDetails(
            **selected,
            optional_name=request.name,
            optional_context=request.context,
            sheet=SUBTYPE_LABELS[npc_type.value],
        )

        race = details.race.value
        subtype = details.subtype.value
        cr = details.cr.value
        abilities = self._stats.generate_npc_abilities(subtype, cr)

        npc = GeneratedNPC(
            details=details,
            abilities=abilities,
            attributes=self._stats.generate_npc_attributes(race, subtype, cr, abilities),
            skills=self._stats.generate_npc_skills(race, subtype),
            traits=self._stats.generate_npc_traits(race, subtype),
            currency=self._stats.get_npc_currency(cr),
        )
        logger.debug(
            f"Dialog data: {details.race.label} {details.subtype.label} "
            f"CR {details.cr.label} ({details.alignment.label})"
        )
        return npc

    def init_query(self, npc: GeneratedNPC) -> str:
        return init_query(npc.details, self._query_template)

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_gpt_data(self, npc: GeneratedNPC, gpt: GptNpcData) -> GeneratedNPC:
        """
        Fold the model's reply into the NPC.

        Ability scores the model supplied replace the derived ones; zero or
        missing values leave them untouched.
        """
        npc.name = gpt.name.strip() or npc.details.optional_name or ""
        npc.spells = list(gpt.spells)
        npc.items = list(gpt.items)
        npc.unique_magical_weapon = gpt.unique_magical_weapon

        for gpt_key, ability in _GPT_ABILITY_KEYS.items():
            value = getattr(gpt, gpt_key)
            if value:
                npc.abilities[ability].value = max(1, min(30, value))

        npc.details.source = self._settings.source
        npc.details.biography = Biography(
            appearance=gpt.appearance,
            background=gpt.background,
            roleplaying=gpt.roleplaying,
            readaloud=gpt.readaloud,
        )
        return npc

    # ------------------------------------------------------------------
    # Document creation
    # ------------------------------------------------------------------

    async def create_npc(self, npc: GeneratedNPC) -> dict:
        """
        Write the NPC to the actor store with its items, spells and weapon.

        Raises:
            NPCCreationError: If any step of document creation fails
        """
        try:
            if not npc.name:
                raise ValueError("NPC has no name")

            bio_content = render_biography(npc)
            actor = await self._store.create_actor(
                build_actor(npc, bio_content, hide_alignment=self._settings.hide_alignment)
            )

            await add_items_to_npc(self._store, actor, self._packs.get("items"), npc.items)
            await add_items_to_npc(self._store, actor, self._packs.get("spells"), npc.spells)

            if npc.unique_magical_weapon is not None and npc.unique_magical_weapon.name:
                weapon = create_unique_magical_weapon_item(npc.unique_magical_weapon)
                await self._store.create_embedded_items(actor, [weapon])
            else:
                logger.warning(f"No unique magical weapon returned for {npc.name!r}")
        except Exception as e:
            logger.error(f"{LOG_PREFIX} Error during NPC creation: {e}", exc_info=True)
            raise NPCCreationError(f"Could not create NPC {npc.name!r}: {e}", cause=e)

        logger.info(f"{LOG_PREFIX} {npc.name} has been created")
        return actor

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def generate(self, request: NPCRequest) -> GenerationResult:
        """
        Run the full pipeline for one dialog submission.

        Raises:
            GenerationInProgressError: If another generation is still running
            InvalidSelectionError: If a dialog value is invalid
            LLMError: If the model call fails or returns unusable data
            NPCCreationError: If the actor could not be written
        """
        if self._lock.locked():
            raise GenerationInProgressError(
                "Please wait, an NPC is already being generated."
            )

        async with self._lock:
            npc = self.generate_dialog_data(request)
            response = await self._orchestrator.generate_npc_data(self.init_query(npc))
            self.merge_gpt_data(npc, response.data)
            actor = await self.create_npc(npc)

        return GenerationResult(actor=actor, npc=npc, path=self._store.location_of(actor))
