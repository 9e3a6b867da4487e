"""Immutable combat profiles supplied by collection management."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AbilityScore(str, Enum):
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"


class DamageType(str, Enum):
    BLUDGEONING = "bludgeoning"
    PIERCING = "piercing"
    SLASHING = "slashing"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    THUNDER = "thunder"
    ACID = "acid"
    POISON = "poison"
    RADIANT = "radiant"
    NECROTIC = "necrotic"
    PSYCHIC = "psychic"
    FORCE = "force"


class CreatureSize(str, Enum):
    TINY = "Tiny"
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    HUGE = "Huge"
    GARGANTUAN = "Gargantuan"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Abilities(BaseModel):
    """The six ability scores."""

    model_config = ConfigDict(frozen=True)

    strength: int = Field(default=10, ge=1, le=30)
    dexterity: int = Field(default=10, ge=1, le=30)
    constitution: int = Field(default=10, ge=1, le=30)
    intelligence: int = Field(default=10, ge=1, le=30)
    wisdom: int = Field(default=10, ge=1, le=30)
    charisma: int = Field(default=10, ge=1, le=30)

    def score(self, ability: AbilityScore | str) -> int:
        return getattr(self, AbilityScore(ability).value)


class Speed(BaseModel):
    model_config = ConfigDict(frozen=True)

    walk: int = Field(default=30, ge=0)
    climb: Optional[int] = Field(default=None, ge=0)
    fly: Optional[int] = Field(default=None, ge=0)
    swim: Optional[int] = Field(default=None, ge=0)


class DamageSpec(BaseModel):
    """Damage dice of an action, e.g. 1d12+3 slashing."""

    model_config = ConfigDict(frozen=True)

    dice_count: int = Field(..., ge=1)
    dice_size: int = Field(..., ge=1)
    modifier: int = 0
    damage_type: DamageType

    @property
    def notation(self) -> str:
        if self.modifier > 0:
            return f"{self.dice_count}d{self.dice_size}+{self.modifier}"
        if self.modifier < 0:
            return f"{self.dice_count}d{self.dice_size}-{abs(self.modifier)}"
        return f"{self.dice_count}d{self.dice_size}"


class ActionDefinition(BaseModel):
    """A single action listed on a stat block."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    attack_bonus: Optional[int] = None
    damage: Optional[DamageSpec] = None
    save_dc: Optional[int] = Field(default=None, ge=1)
    save_ability: Optional[AbilityScore] = None
    range: Optional[int] = Field(default=None, ge=0)
    uses: Optional[int] = Field(default=None, ge=1)
    recharge: Optional[str] = Field(default=None, pattern=r"^[1-6](-6)?$")

    @model_validator(mode="after")
    def _save_needs_ability(self) -> "ActionDefinition":
        if self.save_dc is not None and self.save_ability is None:
            raise ValueError(f"action '{self.name}' has save_dc but no save_ability")
        return self

    @property
    def is_attack(self) -> bool:
        return self.attack_bonus is not None

    @property
    def is_save(self) -> bool:
        return self.attack_bonus is None and self.save_dc is not None

    @property
    def max_uses(self) -> Optional[int]:
        """Uses available before the action is exhausted (None = unlimited)."""
        if self.uses is not None:
            return self.uses
        if self.recharge is not None:
            return 1
        return None


class CreatureStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    armor_class: int = Field(..., ge=1)
    hit_points: int = Field(..., ge=1)
    speed: Speed = Field(default_factory=Speed)
    abilities: Abilities = Field(default_factory=Abilities)


class StatBlock(BaseModel):
    """Combat profile of a miniature. Never mutated during a battle."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = ""
    name: str = Field(..., min_length=1)
    size: CreatureSize = CreatureSize.MEDIUM
    creature_type: str = Field(default="humanoid", alias="type")
    stats: CreatureStats
    actions: List[ActionDefinition] = Field(default_factory=list)

    # collection metadata, carried through to battle records
    source: Optional[str] = None
    challenge_rating: Optional[float] = Field(default=None, ge=0)
    rarity: Optional[Rarity] = None
    level: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _unique_action_names(self) -> "StatBlock":
        names = [action.name for action in self.actions]
        if len(names) != len(set(names)):
            raise ValueError(f"stat block '{self.name}' has duplicate action names")
        return self

    @property
    def armor_class(self) -> int:
        return self.stats.armor_class

    @property
    def max_hp(self) -> int:
        return self.stats.hit_points

    @property
    def abilities(self) -> Abilities:
        return self.stats.abilities

    def get_action(self, name: str) -> Optional[ActionDefinition]:
        for action in self.actions:
            if action.name == name:
                return action
        return None
