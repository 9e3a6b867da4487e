"""Battle engine package."""

from .battle_engine import BattleEngine, check_win_condition
from .dice import DiceRoller
from .errors import (
    BattleError,
    BattleNotFound,
    EmptyParticipantSet,
    InvalidAction,
    InvalidCombatant,
    InvalidStateTransition,
)
from .history import BattleHistory

__all__ = [
    "BattleEngine",
    "check_win_condition",
    "DiceRoller",
    "BattleError",
    "BattleNotFound",
    "EmptyParticipantSet",
    "InvalidAction",
    "InvalidCombatant",
    "InvalidStateTransition",
    "BattleHistory",
]
