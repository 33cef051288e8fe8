"""
Data tables for NPC generation (D&D 5th edition, SRD/PHB values).

Contains:
- Dialog categories and their option lists
- Class and job profiles (hit dice, ability priorities, skills, armor)
- Race profiles (size, speed, senses, languages)
- Proficiency bonus and individual treasure by challenge rating

Keys follow the dnd5e system's identifiers (``str``, ``prc``, ``med``,
``elvish``) so derived values drop straight into an actor document.
"""

from typing import Any


ABILITIES = ("str", "dex", "con", "int", "wis", "cha")

RANDOM_VALUE = "random"
RANDOM_LABEL = "Random"


# =============================================================================
# DIALOG CATEGORIES
# =============================================================================

CATEGORY_LIST = ["type", "subtype", "cr", "race", "gender", "alignment"]

CATEGORY_LABELS = {
    "type": "Type",
    "subtype": "Job",
    "cr": "Challenge Rating",
    "race": "Race",
    "gender": "Gender",
    "alignment": "Alignment",
}

# Label of the subtype field depends on the chosen type
SUBTYPE_LABELS = {
    "npc": "Class",
    "commoner": "Job",
}


# =============================================================================
# OPTION TABLES
# value -> label
# =============================================================================

NPC_TYPES = {
    "commoner": "Commoner",
    "npc": "NPC",
}

GENDERS = {
    "male": "Male",
    "female": "Female",
    "nonbinary": "Non-binary",
}

ALIGNMENTS = {
    "lawful-good": "Lawful Good",
    "neutral-good": "Neutral Good",
    "chaotic-good": "Chaotic Good",
    "lawful-neutral": "Lawful Neutral",
    "true-neutral": "True Neutral",
    "chaotic-neutral": "Chaotic Neutral",
    "lawful-evil": "Lawful Evil",
    "neutral-evil": "Neutral Evil",
    "chaotic-evil": "Chaotic Evil",
}

CHALLENGE_RATINGS = {
    "0": "0",
    "1/8": "1/8",
    "1/4": "1/4",
    "1/2": "1/2",
    **{str(cr): str(cr) for cr in range(1, 31)},
}


# =============================================================================
# RACES
# =============================================================================

RACES: dict[str, dict[str, Any]] = {
    "dragonborn": {
        "label": "Dragonborn",
        "size": "med",
        "walk": 30,
        "darkvision": 0,
        "languages": ["common", "draconic"],
        "skills": [],
    },
    "dwarf": {
        "label": "Dwarf",
        "size": "med",
        "walk": 25,
        "darkvision": 60,
        "languages": ["common", "dwarvish"],
        "skills": [],
    },
    "elf": {
        "label": "Elf",
        "size": "med",
        "walk": 30,
        "darkvision": 60,
        "languages": ["common", "elvish"],
        "skills": ["prc"],
    },
    "gnome": {
        "label": "Gnome",
        "size": "sm",
        "walk": 25,
        "darkvision": 60,
        "languages": ["common", "gnomish"],
        "skills": [],
    },
    "half-elf": {
        "label": "Half-Elf",
        "size": "med",
        "walk": 30,
        "darkvision": 60,
        "languages": ["common", "elvish"],
        # Skill Versatility: two skills of any kind
        "skills": [],
        "bonus_skills": 2,
    },
    "halfling": {
        "label": "Halfling",
        "size": "sm",
        "walk": 25,
        "darkvision": 0,
        "languages": ["common", "halfling"],
        "skills": [],
    },
    "half-orc": {
        "label": "Half-Orc",
        "size": "med",
        "walk": 30,
        "darkvision": 60,
        "languages": ["common", "orc"],
        "skills": ["itm"],
    },
    "human": {
        "label": "Human",
        "size": "med",
        "walk": 30,
        "darkvision": 0,
        "languages": ["common"],
        "skills": [],
    },
    "tiefling": {
        "label": "Tiefling",
        "size": "med",
        "walk": 30,
        "darkvision": 60,
        "languages": ["common", "infernal"],
        "skills": [],
    },
}


# =============================================================================
# SKILLS
# =============================================================================

SKILLS = {
    "acr": "dex",
    "ani": "wis",
    "arc": "int",
    "ath": "str",
    "dec": "cha",
    "his": "int",
    "ins": "wis",
    "itm": "cha",
    "inv": "int",
    "med": "wis",
    "nat": "int",
    "prc": "wis",
    "prf": "cha",
    "per": "cha",
    "rel": "int",
    "slt": "dex",
    "ste": "dex",
    "sur": "wis",
}


# =============================================================================
# CLASSES
# armor: (base AC, max dex bonus or None, extra ability added to AC or None)
# =============================================================================

CLASSES: dict[str, dict[str, Any]] = {
    "barbarian": {
        "label": "Barbarian",
        "hit_die": 12,
        "priority": ["str", "con", "dex", "wis", "cha", "int"],
        "saves": ["str", "con"],
        "skills": ["ani", "ath", "itm", "nat", "prc", "sur"],
        "skill_count": 2,
        "armor": (10, None, "con"),
        "spellcasting": "",
        "languages": [],
    },
    "bard": {
        "label": "Bard",
        "hit_die": 8,
        "priority": ["cha", "dex", "con", "wis", "int", "str"],
        "saves": ["dex", "cha"],
        "skills": list(SKILLS),
        "skill_count": 3,
        "armor": (11, None, None),
        "spellcasting": "cha",
        "languages": [],
    },
    "cleric": {
        "label": "Cleric",
        "hit_die": 8,
        "priority": ["wis", "con", "str", "cha", "dex", "int"],
        "saves": ["wis", "cha"],
        "skills": ["his", "ins", "med", "per", "rel"],
        "skill_count": 2,
        "armor": (16, 0, None),
        "spellcasting": "wis",
        "languages": ["celestial"],
    },
    "druid": {
        "label": "Druid",
        "hit_die": 8,
        "priority": ["wis", "con", "dex", "int", "cha", "str"],
        "saves": ["int", "wis"],
        "skills": ["arc", "ani", "ins", "med", "nat", "prc", "rel", "sur"],
        "skill_count": 2,
        "armor": (12, 2, None),
        "spellcasting": "wis",
        "languages": ["druidic", "sylvan"],
    },
    "fighter": {
        "label": "Fighter",
        "hit_die": 10,
        "priority": ["str", "con", "dex", "wis", "cha", "int"],
        "saves": ["str", "con"],
        "skills": ["acr", "ani", "ath", "his", "ins", "itm", "prc", "sur"],
        "skill_count": 2,
        "armor": (16, 0, None),
        "spellcasting": "",
        "languages": [],
    },
    "monk": {
        "label": "Monk",
        "hit_die": 8,
        "priority": ["dex", "wis", "con", "str", "int", "cha"],
        "saves": ["str", "dex"],
        "skills": ["acr", "ath", "his", "ins", "rel", "ste"],
        "skill_count": 2,
        "armor": (10, None, "wis"),
        "spellcasting": "",
        "languages": [],
    },
    "paladin": {
        "label": "Paladin",
        "hit_die": 10,
        "priority": ["str", "cha", "con", "wis", "dex", "int"],
        "saves": ["wis", "cha"],
        "skills": ["ath", "ins", "itm", "med", "per", "rel"],
        "skill_count": 2,
        "armor": (16, 0, None),
        "spellcasting": "cha",
        "languages": ["celestial"],
    },
    "ranger": {
        "label": "Ranger",
        "hit_die": 10,
        "priority": ["dex", "wis", "con", "str", "int", "cha"],
        "saves": ["str", "dex"],
        "skills": ["ani", "ath", "ins", "inv", "nat", "prc", "ste", "sur"],
        "skill_count": 3,
        "armor": (14, 2, None),
        "spellcasting": "wis",
        "languages": ["sylvan"],
    },
    "rogue": {
        "label": "Rogue",
        "hit_die": 8,
        "priority": ["dex", "int", "con", "cha", "wis", "str"],
        "saves": ["dex", "int"],
        "skills": ["acr", "ath", "dec", "ins", "itm", "inv", "prc", "prf", "per", "slt", "ste"],
        "skill_count": 4,
        "armor": (11, None, None),
        "spellcasting": "",
        "languages": ["cant"],
    },
    "sorcerer": {
        "label": "Sorcerer",
        "hit_die": 6,
        "priority": ["cha", "con", "dex", "wis", "int", "str"],
        "saves": ["con", "cha"],
        "skills": ["arc", "dec", "ins", "itm", "per", "rel"],
        "skill_count": 2,
        "armor": (10, None, None),
        "spellcasting": "cha",
        "languages": ["draconic"],
    },
    "warlock": {
        "label": "Warlock",
        "hit_die": 8,
        "priority": ["cha", "con", "dex", "wis", "int", "str"],
        "saves": ["wis", "cha"],
        "skills": ["arc", "dec", "his", "itm", "inv", "nat", "rel"],
        "skill_count": 2,
        "armor": (11, None, None),
        "spellcasting": "cha",
        "languages": ["abyssal"],
    },
    "wizard": {
        "label": "Wizard",
        "hit_die": 6,
        "priority": ["int", "con", "dex", "wis", "cha", "str"],
        "saves": ["int", "wis"],
        "skills": ["arc", "his", "ins", "inv", "med", "rel"],
        "skill_count": 2,
        "armor": (10, None, None),
        "spellcasting": "int",
        "languages": ["draconic"],
    },
}

STANDARD_ARRAY = [15, 14, 13, 12, 10, 8]


# =============================================================================
# COMMONER JOBS
# =============================================================================

JOBS: dict[str, dict[str, Any]] = {
    "alchemist": {"label": "Alchemist", "ability": "int", "skills": ["arc", "med"]},
    "minstrel": {"label": "Minstrel", "ability": "cha", "skills": ["prf"]},
    "beggar": {"label": "Beggar", "ability": "wis", "skills": ["ins", "slt"]},
    "blacksmith": {"label": "Blacksmith", "ability": "str", "skills": ["ath"]},
    "carpenter": {"label": "Carpenter", "ability": "str", "skills": ["ath"]},
    "farmer": {"label": "Farmer", "ability": "con", "skills": ["ani", "nat"]},
    "fisher": {"label": "Fisher", "ability": "wis", "skills": ["nat", "sur"]},
    "guard": {"label": "Town Guard", "ability": "str", "skills": ["prc", "itm"]},
    "hunter": {"label": "Hunter", "ability": "dex", "skills": ["sur", "ste"]},
    "innkeeper": {"label": "Innkeeper", "ability": "cha", "skills": ["ins", "per"]},
    "merchant": {"label": "Merchant", "ability": "cha", "skills": ["per", "dec"]},
    "miner": {"label": "Miner", "ability": "con", "skills": ["ath"]},
    "noble": {"label": "Noble", "ability": "cha", "skills": ["his", "per"]},
    "priest": {"label": "Priest", "ability": "wis", "skills": ["rel", "med"]},
    "sailor": {"label": "Sailor", "ability": "dex", "skills": ["ath", "acr"]},
    "scholar": {"label": "Scholar", "ability": "int", "skills": ["his", "inv"]},
    "servant": {"label": "Servant", "ability": "dex", "skills": ["ins"]},
    "tailor": {"label": "Tailor", "ability": "dex", "skills": ["slt"]},
    "pickpocket": {"label": "Pickpocket", "ability": "dex", "skills": ["slt", "ste"]},
}

# Commoners fight unarmored with whatever is at hand
JOB_HIT_DIE = 8
JOB_KEY_ABILITY_BONUS = 2


# =============================================================================
# CHALLENGE RATING PROGRESSION
# =============================================================================

# (minimum CR, proficiency bonus), checked from the top down
PROFICIENCY_BY_CR = [
    (29, 9),
    (25, 8),
    (21, 7),
    (17, 6),
    (13, 5),
    (9, 4),
    (5, 3),
    (0, 2),
]

# Individual treasure per CR tier (DMG ch. 7), (dice count, die, multiplier)
CURRENCY_BY_CR: list[tuple[float, dict[str, tuple[int, int, int]]]] = [
    (17, {"cp": (0, 6, 1), "sp": (0, 6, 1), "ep": (0, 6, 1), "gp": (2, 6, 1000), "pp": (8, 6, 100)}),
    (11, {"cp": (0, 6, 1), "sp": (0, 6, 1), "ep": (1, 6, 100), "gp": (4, 6, 100), "pp": (1, 6, 10)}),
    (5, {"cp": (4, 6, 100), "sp": (6, 6, 10), "ep": (3, 6, 10), "gp": (4, 6, 10), "pp": (0, 6, 1)}),
    (0, {"cp": (5, 6, 1), "sp": (4, 6, 1), "ep": (0, 6, 1), "gp": (3, 6, 1), "pp": (0, 6, 1)}),
]

# CR where armored classes swap chain mail for plate
HEAVY_ARMOR_CR = 5
MONK_FAST_MOVEMENT_CR = 2
MONK_SPEED_BONUS = 10


# =============================================================================
# OPTION LOOKUP
# =============================================================================

def _labels(table: dict[str, dict[str, Any]]) -> dict[str, str]:
    return {key: entry["label"] for key, entry in table.items()}


OPTION_TABLES: dict[str, dict[str, str]] = {
    "type": NPC_TYPES,
    "npc": _labels(CLASSES),
    "commoner": _labels(JOBS),
    "cr": CHALLENGE_RATINGS,
    "race": _labels(RACES),
    "gender": GENDERS,
    "alignment": ALIGNMENTS,
}
