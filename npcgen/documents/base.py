"""
Base class for actor stores.

An actor store is where finished NPC documents go: the host VTT's document
model, a file export, or an in-memory list in tests. Generation code only
talks to this interface.
"""

import secrets
import string
from abc import ABC, abstractmethod
from typing import Any

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_document_id(length: int = 16) -> str:
    """Random alphanumeric id in the host's document id format."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class ActorStore(ABC):
    """
    Abstract base class for actor stores.

    Stores are async context managers: ``initialize`` runs on entry and
    ``shutdown`` on exit.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the store for writes (create directories, open connections).

        Raises:
            OSError: If the store's backing location is unusable
        """
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Release any resources held by the store."""
        pass

    @abstractmethod
    async def create_actor(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Persist a new actor document.

        Args:
            data: Actor document (``name``, ``type``, ``system``, ...)

        Returns:
            The stored document, including its assigned ``_id``
        """
        pass

    @abstractmethod
    async def create_embedded_items(
        self,
        actor: dict[str, Any],
        items: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """
        Embed item documents in an existing actor.

        Args:
            actor: A document previously returned by ``create_actor``
            items: Item documents to embed

        Returns:
            The embedded items, each with its assigned ``_id``
        """
        pass

    def location_of(self, actor: dict[str, Any]) -> str | None:
        """Human-readable location of a stored actor, if the store has one."""
        return None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
        return False
