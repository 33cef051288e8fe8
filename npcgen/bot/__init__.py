"""
Discord Bot Layer.

Exposes the NPC generator as the /npc slash command and posts each result
with its importable actor JSON.
"""

from npcgen.bot.client import NPCGenBot

__all__ = ["NPCGenBot"]
