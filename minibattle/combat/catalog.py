"""Miniature stat block catalog (demo roster from the collection and battle setup screens)."""
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from .dice import DiceRoller
from .errors import InvalidCombatant
from .models.stat_block import StatBlock

logger = logging.getLogger(__name__)


def _abilities(str_, dex, con, int_, wis, cha) -> Dict[str, int]:
    return {
        "strength": str_,
        "dexterity": dex,
        "constitution": con,
        "intelligence": int_,
        "wisdom": wis,
        "charisma": cha,
    }


# 玩家收藏的棋子
COLLECTION_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "dwarf_fighter": {
        "name": "Dwarf Fighter",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 5,
        "rarity": "uncommon",
        "level": 5,
        "stats": {
            "armor_class": 18,
            "hit_points": 58,
            "speed": {"walk": 25},
            "abilities": _abilities(16, 12, 16, 11, 13, 10),
        },
        "actions": [
            {
                "name": "Warhammer",
                "description": "Melee weapon attack",
                "attack_bonus": 6,
                "damage": {"dice_count": 1, "dice_size": 8, "modifier": 3, "damage_type": "bludgeoning"},
            },
            {
                "name": "Action Surge",
                "description": "Two quick warhammer blows",
                "attack_bonus": 6,
                "damage": {"dice_count": 2, "dice_size": 8, "modifier": 3, "damage_type": "bludgeoning"},
                "uses": 1,
            },
        ],
    },
    "elf_ranger": {
        "name": "Elf Ranger",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 7,
        "rarity": "rare",
        "level": 7,
        "stats": {
            "armor_class": 15,
            "hit_points": 65,
            "speed": {"walk": 30},
            "abilities": _abilities(14, 18, 14, 13, 16, 12),
        },
        "actions": [
            {
                "name": "Longbow",
                "description": "Ranged weapon attack",
                "attack_bonus": 7,
                "damage": {"dice_count": 1, "dice_size": 8, "modifier": 4, "damage_type": "piercing"},
                "range": 150,
            },
            {
                "name": "Shortsword",
                "description": "Melee weapon attack",
                "attack_bonus": 7,
                "damage": {"dice_count": 1, "dice_size": 6, "modifier": 4, "damage_type": "piercing"},
            },
        ],
    },
    "human_wizard": {
        "name": "Human Wizard",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 9,
        "rarity": "rare",
        "level": 9,
        "stats": {
            "armor_class": 12,
            "hit_points": 40,
            "speed": {"walk": 30},
            "abilities": _abilities(8, 14, 12, 20, 15, 13),
        },
        "actions": [
            {
                "name": "Fire Bolt",
                "description": "Ranged spell attack",
                "attack_bonus": 9,
                "damage": {"dice_count": 2, "dice_size": 10, "modifier": 0, "damage_type": "fire"},
                "range": 120,
            },
            {
                "name": "Fireball",
                "description": "A bright streak explodes in a roar of flame",
                "save_dc": 17,
                "save_ability": "dexterity",
                "damage": {"dice_count": 8, "dice_size": 6, "modifier": 0, "damage_type": "fire"},
                "range": 150,
                "uses": 2,
            },
        ],
    },
    "orc_barbarian": {
        "name": "Orc Barbarian",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 6,
        "rarity": "uncommon",
        "level": 6,
        "stats": {
            "armor_class": 13,
            "hit_points": 95,
            "speed": {"walk": 30},
            "abilities": _abilities(20, 12, 18, 8, 11, 9),
        },
        "actions": [
            {
                "name": "Greataxe",
                "description": "Melee weapon attack",
                "attack_bonus": 8,
                "damage": {"dice_count": 1, "dice_size": 12, "modifier": 5, "damage_type": "slashing"},
            },
        ],
    },
    "gnome_rogue": {
        "name": "Gnome Rogue",
        "size": "Small",
        "type": "humanoid",
        "challenge_rating": 4,
        "rarity": "common",
        "level": 4,
        "stats": {
            "armor_class": 15,
            "hit_points": 35,
            "speed": {"walk": 25},
            "abilities": _abilities(8, 18, 12, 14, 13, 10),
        },
        "actions": [
            {
                "name": "Rapier",
                "description": "Melee weapon attack",
                "attack_bonus": 6,
                "damage": {"dice_count": 1, "dice_size": 8, "modifier": 4, "damage_type": "piercing"},
            },
            {
                "name": "Sneak Attack",
                "description": "Strike a distracted foe",
                "attack_bonus": 6,
                "damage": {"dice_count": 3, "dice_size": 6, "modifier": 4, "damage_type": "piercing"},
                "recharge": "5-6",
            },
        ],
    },
    "dragonborn_paladin": {
        "name": "Dragonborn Paladin",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 8,
        "rarity": "epic",
        "level": 8,
        "stats": {
            "armor_class": 20,
            "hit_points": 85,
            "speed": {"walk": 30},
            "abilities": _abilities(18, 10, 16, 12, 14, 17),
        },
        "actions": [
            {
                "name": "Longsword",
                "description": "Melee weapon attack",
                "attack_bonus": 7,
                "damage": {"dice_count": 1, "dice_size": 8, "modifier": 4, "damage_type": "slashing"},
            },
            {
                "name": "Fire Breath",
                "description": "Exhale fire in a 15-foot cone",
                "save_dc": 13,
                "save_ability": "dexterity",
                "damage": {"dice_count": 3, "dice_size": 6, "modifier": 0, "damage_type": "fire"},
                "uses": 1,
            },
        ],
    },
}

# 对战设置里的随机敌人
OPPONENT_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "orc_warrior": {
        "name": "Orc Warrior",
        "size": "Medium",
        "type": "humanoid",
        "challenge_rating": 2,
        "rarity": "common",
        "level": 2,
        "stats": {
            "armor_class": 13,
            "hit_points": 15,
            "speed": {"walk": 30},
            "abilities": _abilities(16, 12, 13, 7, 11, 10),
        },
        "actions": [
            {
                "name": "Greataxe",
                "description": "Melee weapon attack",
                "attack_bonus": 5,
                "damage": {"dice_count": 1, "dice_size": 12, "modifier": 3, "damage_type": "slashing"},
            },
        ],
    },
    "goblin_shaman": {
        "name": "Goblin Shaman",
        "size": "Small",
        "type": "humanoid",
        "challenge_rating": 1,
        "rarity": "uncommon",
        "level": 1,
        "stats": {
            "armor_class": 12,
            "hit_points": 9,
            "speed": {"walk": 30},
            "abilities": _abilities(8, 14, 10, 14, 15, 11),
        },
        "actions": [
            {
                "name": "Fire Bolt",
                "description": "Ranged spell attack",
                "attack_bonus": 4,
                "damage": {"dice_count": 1, "dice_size": 10, "modifier": 0, "damage_type": "fire"},
                "range": 120,
            },
        ],
    },
}


def load_stat_block(data: Any) -> StatBlock:
    """
    Validate raw stat block data.

    Raises:
        InvalidCombatant: data is missing or malformed
    """
    if data is None:
        raise InvalidCombatant("Missing stat block")
    if isinstance(data, StatBlock):
        block = data
    else:
        try:
            block = StatBlock.model_validate(data)
        except ValidationError as exc:
            name = data.get("name", "<unnamed>") if isinstance(data, dict) else "<unnamed>"
            raise InvalidCombatant(f"Invalid stat block '{name}': {exc}") from exc

    # model_construct 构造的实例不经过字段校验
    if block.max_hp <= 0:
        raise InvalidCombatant(f"Stat block '{block.name}' needs positive hit points, got {block.max_hp}")
    if block.armor_class <= 0:
        raise InvalidCombatant(f"Stat block '{block.name}' needs positive armor class, got {block.armor_class}")
    return block


def get_stat_block(template_id: str) -> StatBlock:
    """Look up a catalog entry by id (collection or opponent roster)."""
    template = COLLECTION_TEMPLATES.get(template_id) or OPPONENT_TEMPLATES.get(template_id)
    if template is None:
        raise InvalidCombatant(f"Unknown miniature: {template_id}")
    return load_stat_block({"id": template_id, **template})


def list_templates() -> List[str]:
    return [*COLLECTION_TEMPLATES, *OPPONENT_TEMPLATES]


def random_opponent(roller: DiceRoller) -> StatBlock:
    """Pick a random opponent from the battle setup roster."""
    template_id = roller.choice(list(OPPONENT_TEMPLATES))
    logger.debug("Random opponent selected: %s", template_id)
    return get_stat_block(template_id)
