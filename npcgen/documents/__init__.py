"""
Host Document Layer.

Builds dnd5e actor documents from generated NPCs and hands them to an
``ActorStore``. Compendium packs supply the full item and spell documents
for the names the language model picks.
"""

from npcgen.documents.base import ActorStore
from npcgen.documents.compendium import Compendium, add_items_to_npc, get_settings_packs
from npcgen.documents.json_store import JsonActorStore

__all__ = [
    "ActorStore",
    "Compendium",
    "JsonActorStore",
    "add_items_to_npc",
    "get_settings_packs",
]
