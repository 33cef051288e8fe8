"""
Dialog categories and options.

The NPC dialog has one select per category in ``CATEGORY_LIST``. Which
options a select offers can depend on another field: the subtype list is the
class list for ``npc`` and the job list for ``commoner``, and a random CR is
only offered for class NPCs.
"""

from __future__ import annotations

import random

from npcgen.data.tables import (
    CATEGORY_LABELS,
    OPTION_TABLES,
    RANDOM_LABEL,
    RANDOM_VALUE,
    SUBTYPE_LABELS,
)
from npcgen.generator.models import DialogCategory, DialogOption, InvalidSelectionError

# Categories whose initial select has no "Random" entry
_FIXED_CATEGORIES = ("type", "cr")


def get_dialog_categories(category_list: list[str]) -> list[dict[str, str]]:
    """Return ``[{value, label}]`` for each category key."""
    return [
        {"value": category, "label": CATEGORY_LABELS.get(category, category.title())}
        for category in category_list
    ]


def get_dialog_options(category: str, random_option: bool) -> list[DialogOption]:
    """
    List the options of a category.

    Args:
        category: Table key; ``npc`` and ``commoner`` select the subtype lists
        random_option: Prepend a ``Random`` entry

    Raises:
        KeyError: If the category has no option table
    """
    table = OPTION_TABLES[category]
    options = [DialogOption(value=value, label=label) for value, label in table.items()]
    if random_option:
        options.insert(0, DialogOption(value=RANDOM_VALUE, label=RANDOM_LABEL))
    return options


def dialog_data(category_list: list[str]) -> list[DialogCategory]:
    """
    Categories for the initial dialog render.

    The subtype select starts on the commoner job list, matching the first
    entry of the type select.
    """
    categories = []
    for category in get_dialog_categories(category_list):
        key = category["value"]
        table = "commoner" if key == "subtype" else key
        categories.append(
            DialogCategory(
                value=key,
                label=category["label"],
                option=get_dialog_options(table, key not in _FIXED_CATEGORIES),
            )
        )
    return categories


def change_dialog_category(npc_type: str) -> dict[str, object]:
    """
    Re-populate the dependent selects after the type changed.

    Returns:
        ``{"subtype_label", "subtype", "cr"}`` with the new label and option lists

    Raises:
        InvalidSelectionError: If ``npc_type`` is not a known type
    """
    if npc_type not in SUBTYPE_LABELS:
        raise InvalidSelectionError(f"Unknown NPC type: {npc_type!r}")
    return {
        "subtype_label": SUBTYPE_LABELS[npc_type],
        "subtype": get_dialog_options(npc_type, True),
        "cr": get_dialog_options("cr", npc_type == "npc"),
    }


def get_selected_option(
    category: str,
    value: str,
    options: list[DialogOption],
    rng: random.Random | None = None,
) -> DialogOption:
    """
    Resolve a submitted value to a concrete option.

    ``random`` picks uniformly among the non-random options.

    Raises:
        InvalidSelectionError: If the value is not among the options
    """
    rng = rng or random
    concrete = [option for option in options if option.value != RANDOM_VALUE]
    if not concrete:
        raise InvalidSelectionError(f"No options available for {category!r}")

    if value == RANDOM_VALUE:
        return rng.choice(concrete)

    for option in concrete:
        if option.value == value:
            return option

    allowed = ", ".join(option.value for option in concrete)
    raise InvalidSelectionError(f"Invalid {category} {value!r}. Choose one of: {allowed}")
