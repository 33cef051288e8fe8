"""
Local statistics derivation.

Turns the resolved dialog selections (race, class or job, challenge rating)
into dnd5e numbers: ability scores, hit points, armor class, movement,
senses, skills, traits and coin. Nothing here talks to the language model;
the model may later override ability scores, everything else stays as
derived.

All randomness goes through a ``random.Random`` instance so callers (and
tests) can seed it.
"""

from __future__ import annotations

import math
import random
from fractions import Fraction

from npcgen.data import tables
from npcgen.generator.models import (
    Ability,
    Attributes,
    Currency,
    HitPoints,
    Movement,
    Senses,
    Traits,
)


def parse_cr(value: str | float) -> float:
    """Convert a CR option value (``"1/8"``, ``"5"``) to a number."""
    if isinstance(value, (int, float)):
        return float(value)
    return float(Fraction(value.strip()))


def ability_modifier(score: int) -> int:
    return (score - 10) // 2


def proficiency_bonus(cr: float) -> int:
    for minimum, bonus in tables.PROFICIENCY_BY_CR:
        if cr >= minimum:
            return bonus
    return 2


def hit_dice_count(cr: float) -> int:
    """Hit dice scale with CR; CR 0 to 1/2 creatures get a single die."""
    return max(1, math.ceil(cr * 1.5))


def roll(count: int, sides: int, rng: random.Random) -> int:
    return sum(rng.randint(1, sides) for _ in range(count))


def is_class(subtype: str) -> bool:
    return subtype in tables.CLASSES


class StatGenerator:
    """
    Derives NPC statistics from the data tables.

    Args:
        rng: Random source; a fresh unseeded ``random.Random`` by default
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Abilities
    # ------------------------------------------------------------------

    def generate_npc_abilities(self, subtype: str, cr: str | float) -> dict[str, Ability]:
        """
        Ability scores with saving throw proficiencies.

        Classes assign the standard array along their priority list and
        gain two points per four CR, spent on the top priorities. Jobs roll
        3d6 per ability and add a bonus to their key ability.
        """
        cr_value = parse_cr(cr)
        if is_class(subtype):
            return self._class_abilities(tables.CLASSES[subtype], cr_value)
        if subtype in tables.JOBS:
            return self._job_abilities(tables.JOBS[subtype])
        raise KeyError(f"Unknown subtype: {subtype!r}")

    def _class_abilities(self, profile: dict, cr: float) -> dict[str, Ability]:
        scores = dict(zip(profile["priority"], tables.STANDARD_ARRAY))
        cap = 20 if cr <= 20 else 24

        points = 2 * (int(cr) // 4)
        for ability in profile["priority"]:
            if points <= 0:
                break
            room = cap - scores[ability]
            spent = min(room, points)
            scores[ability] += spent
            points -= spent

        return {
            ability: Ability(
                value=scores[ability],
                proficient=1 if ability in profile["saves"] else 0,
            )
            for ability in tables.ABILITIES
        }

    def _job_abilities(self, profile: dict) -> dict[str, Ability]:
        abilities = {}
        for ability in tables.ABILITIES:
            score = roll(3, 6, self._rng)
            if ability == profile["ability"]:
                score = min(score + tables.JOB_KEY_ABILITY_BONUS, 20)
            abilities[ability] = Ability(value=score, proficient=0)
        return abilities

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def generate_npc_attributes(
        self,
        race: str,
        subtype: str,
        cr: str | float,
        abilities: dict[str, Ability],
    ) -> Attributes:
        """Hit points, armor class, movement, senses and spellcasting ability."""
        cr_value = parse_cr(cr)
        race_profile = tables.RACES[race]
        class_profile = tables.CLASSES.get(subtype)

        hit_die = class_profile["hit_die"] if class_profile else tables.JOB_HIT_DIE
        hp = self._hit_points(hit_die, hit_dice_count(cr_value), abilities["con"].value)

        walk = race_profile["walk"]
        if subtype == "monk" and cr_value >= tables.MONK_FAST_MOVEMENT_CR:
            walk += tables.MONK_SPEED_BONUS

        return Attributes(
            hp=hp,
            ac=self._armor_class(class_profile, cr_value, abilities),
            movement=Movement(walk=walk),
            senses=Senses(darkvision=race_profile["darkvision"]),
            spellcasting=class_profile["spellcasting"] if class_profile else "",
            prof=proficiency_bonus(cr_value),
        )

    @staticmethod
    def _hit_points(hit_die: int, count: int, constitution: int) -> HitPoints:
        bonus = ability_modifier(constitution) * count
        average = math.floor(count * (hit_die / 2 + 0.5)) + bonus
        formula = f"{count}d{hit_die}"
        if bonus:
            formula += f" {'+' if bonus > 0 else '-'} {abs(bonus)}"
        average = max(1, average)
        return HitPoints(value=average, max=average, formula=formula)

    @staticmethod
    def _armor_class(class_profile: dict | None, cr: float, abilities: dict[str, Ability]) -> int:
        dex = ability_modifier(abilities["dex"].value)
        if class_profile is None:
            return 10 + dex

        base, max_dex, extra = class_profile["armor"]
        if max_dex == 0 and cr >= tables.HEAVY_ARMOR_CR:
            base = 18  # plate
        if max_dex is not None:
            dex = min(dex, max_dex)
        ac = base + dex
        if extra:
            ac += ability_modifier(abilities[extra].value)
        return max(ac, 1)

    # ------------------------------------------------------------------
    # Skills & traits
    # ------------------------------------------------------------------

    def generate_npc_skills(self, race: str, subtype: str) -> dict[str, dict[str, int]]:
        """Proficient skills as ``{"prc": {"value": 1}, ...}``."""
        race_profile = tables.RACES[race]
        chosen: list[str] = []

        if is_class(subtype):
            profile = tables.CLASSES[subtype]
            chosen = self._rng.sample(profile["skills"], profile["skill_count"])
        elif subtype in tables.JOBS:
            chosen = list(tables.JOBS[subtype]["skills"])
        else:
            raise KeyError(f"Unknown subtype: {subtype!r}")

        for skill in race_profile["skills"]:
            if skill not in chosen:
                chosen.append(skill)

        remaining = [skill for skill in tables.SKILLS if skill not in chosen]
        extra = min(race_profile.get("bonus_skills", 0), len(remaining))
        chosen.extend(self._rng.sample(remaining, extra))

        return {skill: {"value": 1} for skill in sorted(chosen)}

    def generate_npc_traits(self, race: str, subtype: str) -> Traits:
        race_profile = tables.RACES[race]
        languages = list(race_profile["languages"])
        class_profile = tables.CLASSES.get(subtype)
        if class_profile:
            languages.extend(lang for lang in class_profile["languages"] if lang not in languages)
        return Traits(size=race_profile["size"], languages=languages)

    # ------------------------------------------------------------------
    # Currency
    # ------------------------------------------------------------------

    def get_npc_currency(self, cr: str | float) -> Currency:
        """Individual treasure for the CR tier."""
        cr_value = parse_cr(cr)
        for minimum, coins in tables.CURRENCY_BY_CR:
            if cr_value >= minimum:
                return Currency(**{
                    coin: roll(count, sides, self._rng) * multiplier
                    for coin, (count, sides, multiplier) in coins.items()
                })
        return Currency()
