"""Typed errors raised by the battle engine."""
from typing import Optional


class BattleError(RuntimeError):
    """Base class for all battle engine errors."""


class BattleNotFound(BattleError, LookupError):
    """Raised when a battle id does not refer to a known session."""

    def __init__(self, battle_id: str) -> None:
        self.battle_id = battle_id
        super().__init__(f"Battle session not found: {battle_id}")


class InvalidStateTransition(BattleError):
    """Raised when an operation is attempted outside its valid state."""

    def __init__(self, state: str, operation: str, battle_id: Optional[str] = None) -> None:
        self.state = state
        self.operation = operation
        self.battle_id = battle_id
        super().__init__(
            f"Cannot {operation} while battle {battle_id or '<new>'} is in state '{state}'"
        )


class InvalidCombatant(BattleError, ValueError):
    """Raised when a stat block is missing or malformed at initialization."""


class InvalidAction(BattleError, ValueError):
    """Raised when an action or target is not valid for the active participant."""


class EmptyParticipantSet(BattleError, ValueError):
    """Raised when a battle is initialized with fewer than two combatants."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"A battle needs at least two combatants, got {count}")
