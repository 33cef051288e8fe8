"""
Prompt composition for the generate request.

The user's selections become a short characteristics line:

    (Context: a port city under siege) (Name: Mira) Female, Elf, Rogue, Chaotic Good

which is rendered into ``prompts/query.txt`` together with the challenge
rating, so the model can size the NPC's unique weapon.
"""

from __future__ import annotations

import re
from pathlib import Path

from npcgen.generator.models import NPCDetails

QUERY_TEMPLATE_PATH = Path(__file__).parent.parent / "prompts" / "query.txt"

_PLACEHOLDER_RE = re.compile(r"\{(options|context_block|cr)\}")

_CONTEXT_INSTRUCTION = (
    "Fit the character into the given context: their background and "
    "read-aloud text should reference it.\n"
)


def load_query_template(path: Path = QUERY_TEMPLATE_PATH) -> str:
    return path.read_text(encoding="utf-8")


def build_options(details: NPCDetails) -> str:
    """The characteristics line, with optional name and context prefixes."""
    options = ", ".join(
        option.label
        for option in (details.gender, details.race, details.subtype, details.alignment)
    )
    if details.optional_name:
        options = f"(Name: {details.optional_name}) {options}"
    if details.optional_context:
        options = f"(Context: {details.optional_context}) {options}"
    return options


def get_generate_query_template(options: str, has_context: bool, cr: str, template: str) -> str:
    """Fill the template in one pass; user text is never re-scanned for placeholders."""
    values = {
        "options": options,
        "context_block": _CONTEXT_INSTRUCTION if has_context else "",
        "cr": cr,
    }
    return _PLACEHOLDER_RE.sub(lambda match: values[match.group(1)], template)


def init_query(details: NPCDetails, template: str | None = None) -> str:
    """Build the user prompt for the NPC described by ``details``."""
    if template is None:
        template = load_query_template()
    return get_generate_query_template(
        build_options(details),
        has_context=bool(details.optional_context),
        cr=details.cr.value,
        template=template,
    )
