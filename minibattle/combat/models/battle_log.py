"""
战斗日志数据模型
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .action import ActionResult


class LogEntryType(str, Enum):
    """日志条目类型"""

    INITIATIVE = "initiative"
    ACTION = "action"
    DAMAGE = "damage"
    HEAL = "heal"
    CONDITION = "condition"
    TURN_START = "turn_start"
    BATTLE_END = "battle_end"


@dataclass(frozen=True)
class BattleLogEntry:
    """
    战斗日志条目

    只追加不修改；按 type 区分变体，各变体使用的字段：
    - initiative: message, order
    - turn_start: actor, round
    - action: attacker, target, action, result
    - damage / heal: target, amount, hp
    - condition: target, condition, message
    - battle_end: winner, reason
    """

    type: LogEntryType
    message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    round: int = 1

    actor: Optional[str] = None
    attacker: Optional[str] = None
    target: Optional[str] = None
    action: Optional[str] = None
    result: Optional[ActionResult] = None

    amount: Optional[int] = None
    hp: Optional[int] = None
    condition: Optional[str] = None
    order: Optional[tuple] = None

    winner: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "round": self.round,
        }
        optional = {
            "message": self.message or None,
            "actor": self.actor,
            "attacker": self.attacker,
            "target": self.target,
            "action": self.action,
            "result": self.result.to_dict() if self.result else None,
            "amount": self.amount,
            "hp": self.hp,
            "condition": self.condition,
            "order": list(self.order) if self.order else None,
            "winner": self.winner,
            "reason": self.reason,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data
