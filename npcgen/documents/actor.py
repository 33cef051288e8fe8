"""
Actor document construction.

Maps a ``GeneratedNPC`` onto the host's dnd5e ``npc`` actor schema and
builds the unique magical weapon item with its active effects. The
biography HTML is rendered from ``templates/sheet.html`` with Jinja2.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from npcgen.generator.models import GeneratedNPC, UniqueMagicalWeapon, WeaponEffect
from npcgen.generator.stats import parse_cr

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"
SHEET_TEMPLATE = "sheet.html"

HIDDEN_ALIGNMENT = "Unknown"

_environment: Environment | None = None


def _get_environment() -> Environment:
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _environment


def render_biography(npc: GeneratedNPC, template: str = SHEET_TEMPLATE) -> str:
    """Render the sheet's biography HTML."""
    return _get_environment().get_template(template).render(npc=npc)


def build_actor(
    npc: GeneratedNPC,
    biography_html: str,
    hide_alignment: bool = False,
) -> dict[str, Any]:
    """
    Build the ``npc`` actor document (without embedded items).

    Args:
        npc: Generated NPC with GPT data already merged
        biography_html: Rendered biography for ``details.biography.value``
        hide_alignment: Write ``Unknown`` instead of the real alignment
    """
    details = npc.details
    attributes = npc.attributes
    alignment = HIDDEN_ALIGNMENT if hide_alignment else details.alignment.label

    return {
        "name": npc.name,
        "type": "npc",
        "system": {
            "details": {
                "source": details.source,
                "cr": parse_cr(details.cr.value),
                "alignment": alignment,
                "race": details.race.label,
                "biography": {"value": biography_html},
                "type": {"value": "custom", "custom": details.race.label},
            },
            "traits": {
                "size": npc.traits.size,
                "languages": {"value": list(npc.traits.languages)},
            },
            "abilities": {
                key: ability.model_dump() for key, ability in npc.abilities.items()
            },
            "attributes": {
                "hp": attributes.hp.model_dump(),
                "ac": {"value": attributes.ac},
                "movement": attributes.movement.model_dump(),
                "senses": attributes.senses.model_dump(),
                "spellcasting": attributes.spellcasting,
                "prof": attributes.prof,
            },
            "skills": {key: dict(skill) for key, skill in npc.skills.items()},
            "currency": npc.currency.model_dump(),
        },
        "items": [],
        "effects": [],
    }


def create_weapon_effects(effects: list[WeaponEffect]) -> list[dict[str, Any]]:
    """Active effects that transfer from the weapon to whoever carries it."""
    return [
        {
            "label": effect.name,
            "name": effect.name,
            "icon": effect.icon,
            "origin": None,
            "disabled": False,
            "duration": dict(effect.duration),
            "changes": [dict(change) for change in effect.changes],
            "transfer": True,
        }
        for effect in effects
    ]


def create_unique_magical_weapon_item(weapon: UniqueMagicalWeapon) -> dict[str, Any]:
    """Weapon item for the NPC's signature magic weapon."""
    return {
        "name": weapon.name,
        "type": "weapon",
        "system": {
            "description": {"value": weapon.description},
            "damage": {
                "parts": [[f"1d8 + @mod + {weapon.damage_bonus}", weapon.damage_type]],
            },
            "properties": list(weapon.properties),
            "rarity": weapon.rarity,
            "magic": True,
            "scaling": weapon.scaling,
        },
        "effects": create_weapon_effects(weapon.effects),
    }
