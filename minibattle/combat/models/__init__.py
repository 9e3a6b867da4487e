"""Data models for the battle engine."""

from .stat_block import (
    AbilityScore,
    Abilities,
    ActionDefinition,
    CreatureSize,
    CreatureStats,
    DamageSpec,
    DamageType,
    Rarity,
    Speed,
    StatBlock,
)
from .participant import BattleParticipant, Condition, ConditionEffect
from .action import ActionResult
from .battle_log import BattleLogEntry, LogEntryType
from .battle_session import BattleEndReason, BattleSession, BattleState
from .battle_result import BattleOutcome, BattleRecord

__all__ = [
    "AbilityScore",
    "Abilities",
    "ActionDefinition",
    "CreatureSize",
    "CreatureStats",
    "DamageSpec",
    "DamageType",
    "Rarity",
    "Speed",
    "StatBlock",
    "BattleParticipant",
    "Condition",
    "ConditionEffect",
    "ActionResult",
    "BattleLogEntry",
    "LogEntryType",
    "BattleEndReason",
    "BattleSession",
    "BattleState",
    "BattleOutcome",
    "BattleRecord",
]
