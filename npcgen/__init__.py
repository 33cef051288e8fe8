"""
npcgen - LLM-assisted NPC generator for D&D 5th edition virtual tabletops.

Statistics are derived locally from data tables; names, biography, gear and a
signature magic weapon come from a language model. The merged result is
written as a dnd5e actor document ready to import into the host VTT.
"""

__version__ = "0.1.0"
