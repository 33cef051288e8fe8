"""
Compendium packs: item and spell documents looked up by name.

A pack is a JSON array of documents or a JSON-lines file (the layout of the
host's classic ``.db`` packs). The model returns gear and spells by name;
matching entries are copied into the NPC, unknown names are skipped.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from npcgen.config.logging import get_logger
from npcgen.config.settings import CompendiumSettings
from npcgen.documents.base import ActorStore

logger = get_logger(__name__)

# Keys that belong to the pack entry, not to an embedded copy
_PACK_ONLY_KEYS = ("_id", "folder", "sort", "ownership", "_stats")


def _normalize(name: str) -> str:
    return " ".join(name.lower().split())


class Compendium:
    """
    In-memory index of a pack's documents by (case-insensitive) name.

    Args:
        name: Label used in logs, e.g. ``"items"``
        documents: Pack documents; entries without a name are ignored
    """

    def __init__(self, name: str, documents: list[dict[str, Any]]):
        self.name = name
        self._index: dict[str, dict[str, Any]] = {}
        for document in documents:
            doc_name = document.get("name")
            if doc_name:
                self._index.setdefault(_normalize(doc_name), document)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, name: str) -> bool:
        return _normalize(name) in self._index

    @classmethod
    def load(cls, path: str | Path, name: str | None = None) -> Compendium:
        """
        Load a pack from a JSON array or JSON-lines file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is neither format
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        stripped = text.lstrip()

        if stripped.startswith("["):
            documents = json.loads(text)
        else:
            documents = []
            for line_number, line in enumerate(text.splitlines(), start=1):
                if not line.strip():
                    continue
                try:
                    documents.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}:{line_number}: invalid JSON line: {e}") from e

        if not isinstance(documents, list):
            raise ValueError(f"{path}: expected a list of documents")

        pack = cls(name or path.stem, documents)
        logger.info(f"Loaded compendium {pack.name!r} ({len(pack)} entries) from {path}")
        return pack

    def find(self, name: str) -> dict[str, Any] | None:
        """Copy of the named document, ready to embed; None if absent."""
        document = self._index.get(_normalize(name))
        if document is None:
            return None
        embedded = copy.deepcopy(document)
        for key in _PACK_ONLY_KEYS:
            embedded.pop(key, None)
        return embedded


def get_settings_packs(settings: CompendiumSettings) -> dict[str, Compendium | None]:
    """Load the configured item and spell packs (``None`` where unset)."""
    packs: dict[str, Compendium | None] = {"items": None, "spells": None}
    if settings.items_pack:
        packs["items"] = Compendium.load(settings.items_pack, name="items")
    if settings.spells_pack:
        packs["spells"] = Compendium.load(settings.spells_pack, name="spells")
    return packs


async def add_items_to_npc(
    store: ActorStore,
    actor: dict[str, Any],
    pack: Compendium | None,
    names: list[str],
) -> list[dict[str, Any]]:
    """
    Embed the named pack entries in the actor.

    Returns:
        The embedded items (empty when there is no pack or nothing matched)
    """
    if pack is None or not names:
        return []

    found = []
    for name in names:
        document = pack.find(name)
        if document is None:
            logger.debug(f"{name!r} not found in compendium {pack.name!r}")
            continue
        found.append(document)

    if not found:
        return []
    return await store.create_embedded_items(actor, found)
