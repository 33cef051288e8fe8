"""
Data models for NPC generation.

Two groups live here:

- What the generator derives locally (``NPCDetails``, ``Ability``,
  ``Attributes``, ``Traits``, ``Currency``) and collects in ``GeneratedNPC``.
- What the language model returns (``GptNpcData`` and the nested
  ``UniqueMagicalWeapon``). These accept the camelCase keys the prompt asks
  for, and ignore anything extra the model adds.
"""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from npcgen.data.tables import RANDOM_VALUE

# Leading "+2" or "+1d6" of a damage bonus answer
_BONUS_RE = re.compile(r"\s*\+?\s*(\d+(?:d\d+)?)", re.IGNORECASE)


class InvalidSelectionError(ValueError):
    """A dialog value that is not one of the category's options."""


class GenerationInProgressError(RuntimeError):
    """Raised when a generation is requested while another is still running."""


class NPCCreationError(RuntimeError):
    """Raised when the NPC document could not be written to the actor store."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DialogOption(BaseModel):
    """One selectable entry of a dialog category."""

    value: str
    label: str


class DialogCategory(BaseModel):
    """A dialog field: its key, display label and available options."""

    value: str
    label: str
    option: list[DialogOption] = Field(default_factory=list)


class NPCRequest(BaseModel):
    """
    The raw dialog submission.

    Every category defaults to ``random``; the generator resolves them to
    concrete options before deriving any statistics.
    """

    type: str = RANDOM_VALUE
    subtype: str = RANDOM_VALUE
    cr: str = RANDOM_VALUE
    race: str = RANDOM_VALUE
    gender: str = RANDOM_VALUE
    alignment: str = RANDOM_VALUE
    name: str | None = Field(None, description="Optional name the model should use")
    context: str | None = Field(None, description="Optional setting or story context")

    @field_validator("name", "context")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class Biography(BaseModel):
    appearance: str = ""
    background: str = ""
    roleplaying: str = ""
    readaloud: str = ""


class NPCDetails(BaseModel):
    """Resolved dialog selections plus the text fields merged in later."""

    type: DialogOption
    subtype: DialogOption
    cr: DialogOption
    race: DialogOption
    gender: DialogOption
    alignment: DialogOption
    optional_name: str | None = None
    optional_context: str | None = None
    sheet: str = Field(description="Label for the subtype on the sheet: 'Class' or 'Job'")
    source: str | None = None
    biography: Biography | None = None


class Ability(BaseModel):
    value: int = Field(ge=1, le=30)
    proficient: int = Field(default=0, ge=0, le=1)


class HitPoints(BaseModel):
    value: int = Field(ge=1)
    max: int = Field(ge=1)
    formula: str


class Movement(BaseModel):
    walk: int = 30
    burrow: int = 0
    climb: int = 0
    fly: int = 0
    swim: int = 0
    units: str = "ft"
    hover: bool = False


class Senses(BaseModel):
    darkvision: int = 0
    blindsight: int = 0
    tremorsense: int = 0
    truesight: int = 0
    units: str = "ft"
    special: str = ""


class Attributes(BaseModel):
    hp: HitPoints
    ac: int = Field(ge=1)
    movement: Movement = Field(default_factory=Movement)
    senses: Senses = Field(default_factory=Senses)
    spellcasting: str = ""
    prof: int = Field(default=2, ge=2, le=9)


class Traits(BaseModel):
    size: str = "med"
    languages: list[str] = Field(default_factory=list)


class Currency(BaseModel):
    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0


# ---------------------------------------------------------------------------
# Language model output
# ---------------------------------------------------------------------------


class WeaponEffect(BaseModel):
    """An active effect carried by the unique weapon (transferred to its wielder)."""

    name: str
    icon: str = "icons/svg/aura.svg"
    duration: dict[str, Any] = Field(default_factory=dict)
    changes: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class UniqueMagicalWeapon(BaseModel):
    name: str = ""
    description: str = ""
    damage_bonus: int | str = Field(default=0, alias="damageBonus")
    damage_type: str = Field(default="slashing", alias="damageType")
    properties: list[str] = Field(default_factory=list)
    rarity: str = "uncommon"
    scaling: str = "none"
    effects: list[WeaponEffect] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("name", "description", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("damage_type", "rarity", "scaling", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("damage_bonus", mode="before")
    @classmethod
    def _coerce_bonus(cls, value: Any) -> Any:
        """
        Keep the bonus usable in a damage formula.

        ``"+2"`` becomes ``2``, a dice bonus such as ``"+1d6"`` is kept as
        ``"1d6"``, anything unparseable (or null) becomes ``0``.
        """
        if value is None or isinstance(value, bool):
            return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        if isinstance(value, float):
            return math.floor(value + 0.5)
        if isinstance(value, str):
            match = _BONUS_RE.match(value)
            if match is None:
                return 0
            bonus = match.group(1).lower()
            return int(bonus) if bonus.isdigit() else bonus
        return value


class GptNpcData(BaseModel):
    """The JSON object the language model is asked to produce."""

    name: str = ""
    spells: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)
    appearance: str = ""
    background: str = ""
    roleplaying: str = ""
    readaloud: str = ""
    unique_magical_weapon: UniqueMagicalWeapon | None = Field(
        default=None, alias="uniqueMagicalWeapon"
    )
    strength: int | None = None
    dexterity: int | None = None
    constitution: int | None = None
    intelligence: int | None = None
    wisdom: int | None = None
    charisma: int | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("name", "appearance", "background", "roleplaying", "readaloud", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(
        "strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma",
        mode="before",
    )
    @classmethod
    def _whole_score(cls, value: Any) -> Any:
        """Round fractional scores; a score that is not a number is dropped."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if isinstance(value, float):
            return math.floor(value + 0.5)
        return value

    @field_validator("spells", "items", mode="before")
    @classmethod
    def _names_only(cls, value: Any) -> Any:
        """Accept ``["Rope"]`` as well as ``[{"name": "Rope", ...}]``."""
        if value is None:
            return []
        if isinstance(value, list):
            return [
                entry.get("name", "") if isinstance(entry, dict) else entry
                for entry in value
            ]
        return value


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class GeneratedNPC(BaseModel):
    """Everything known about an NPC between the dialog and the actor document."""

    details: NPCDetails
    abilities: dict[str, Ability]
    attributes: Attributes
    skills: dict[str, dict[str, int]]
    traits: Traits
    currency: Currency
    name: str = ""
    spells: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)
    unique_magical_weapon: UniqueMagicalWeapon | None = None


class GenerationResult(BaseModel):
    """Returned by a completed generation."""

    actor: dict[str, Any]
    npc: GeneratedNPC
    path: str | None = Field(None, description="Where the actor store persisted the document")
