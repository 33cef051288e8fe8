"""
JSON file actor store.

Writes each actor as ``<slug>-<id>.json`` in the output directory, in the
format the host's "Import Data" action accepts. Embedding items rewrites the
file so it always holds the complete document.
"""

from __future__ import annotations

import copy
import json
import re
import time
from pathlib import Path
from typing import Any

import aiofiles

from npcgen.config.logging import get_logger
from npcgen.documents.base import ActorStore, generate_document_id

logger = get_logger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    slug = _SLUG_RE.sub("-", name.lower()).strip("-")
    return slug or "npc"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class JsonActorStore(ActorStore):
    """
    Actor store backed by a directory of JSON files.

    Args:
        output_dir: Directory for actor files; created on ``initialize``
    """

    def __init__(self, output_dir: str | Path):
        self._output_dir = Path(output_dir)
        self._paths: dict[str, Path] = {}
        self._initialized = False

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    async def initialize(self) -> None:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._initialized = True
        logger.debug(f"Writing actors to {self._output_dir}")

    async def shutdown(self) -> None:
        self._paths.clear()
        self._initialized = False

    async def create_actor(self, data: dict[str, Any]) -> dict[str, Any]:
        if not self._initialized:
            raise RuntimeError("Actor store not initialized")
        if not data.get("name"):
            raise ValueError("Actor document requires a name")

        actor = copy.deepcopy(data)
        actor["_id"] = generate_document_id()
        actor.setdefault("items", [])
        actor.setdefault("effects", [])
        now = _timestamp_ms()
        actor.setdefault("_stats", {"createdTime": now, "modifiedTime": now})

        path = self._output_dir / f"{slugify(actor['name'])}-{actor['_id']}.json"
        self._paths[actor["_id"]] = path
        await self._write(actor)
        logger.info(f"Created actor {actor['name']!r} at {path}")
        return actor

    async def create_embedded_items(
        self,
        actor: dict[str, Any],
        items: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        if actor.get("_id") not in self._paths:
            raise KeyError(f"Unknown actor: {actor.get('_id')!r}")

        created = []
        for item in items:
            embedded = copy.deepcopy(item)
            embedded["_id"] = generate_document_id()
            created.append(embedded)

        actor.setdefault("items", []).extend(created)
        actor.setdefault("_stats", {})["modifiedTime"] = _timestamp_ms()
        await self._write(actor)
        logger.debug(f"Embedded {len(created)} item(s) in {actor['name']!r}")
        return created

    def location_of(self, actor: dict[str, Any]) -> str | None:
        path = self._paths.get(actor.get("_id"))
        return str(path) if path else None

    async def _write(self, actor: dict[str, Any]) -> None:
        path = self._paths[actor["_id"]]
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(actor, indent=2, ensure_ascii=False))
