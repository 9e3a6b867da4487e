"""
战斗结果数据模型
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .battle_log import BattleLogEntry
from .battle_session import BattleEndReason


@dataclass(frozen=True)
class BattleOutcome:
    """胜负判定结果（winner_id 为空表示无胜者）"""

    reason: BattleEndReason
    winner_id: Optional[str] = None


@dataclass(frozen=True)
class BattleRecord:
    """
    已结束战斗的完整记录

    交给历史/持久化使用，创建后不再修改
    """

    # ===== 基础信息 =====
    battle_id: str
    end_reason: BattleEndReason
    winner_id: Optional[str] = None
    winner_name: Optional[str] = None
    room_id: Optional[str] = None

    # ===== 参与者最终状态 =====
    participants: Tuple[Dict[str, Any], ...] = ()

    # ===== 完整日志 =====
    battle_log: Tuple[BattleLogEntry, ...] = ()

    # ===== 统计数据 =====
    total_rounds: int = 0
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    damage_dealt: Dict[str, int] = field(default_factory=dict)

    def to_summary(self) -> str:
        """生成一句话摘要"""
        if self.end_reason == BattleEndReason.MUTUAL_DESTRUCTION:
            return f"Both combatants fell after {self.total_rounds} round(s). No winner."
        if self.end_reason == BattleEndReason.ABORTED:
            return f"Battle aborted in round {self.total_rounds}."
        if self.end_reason == BattleEndReason.FORFEIT:
            return f"{self.winner_name or 'Nobody'} wins by forfeit in round {self.total_rounds}."
        return f"{self.winner_name} wins in {self.total_rounds} round(s)."

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（持久化格式）"""
        return {
            "battle_id": self.battle_id,
            "room_id": self.room_id,
            "winner_id": self.winner_id,
            "winner_name": self.winner_name,
            "end_reason": self.end_reason.value,
            "participants": [dict(p) for p in self.participants],
            "battle_log": [entry.to_dict() for entry in self.battle_log],
            "total_rounds": self.total_rounds,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "damage_dealt": dict(self.damage_dealt),
            "summary": self.to_summary(),
        }


def damage_by_attacker(entries: List[BattleLogEntry]) -> Dict[str, int]:
    """按攻击者汇总造成的伤害"""
    totals: Dict[str, int] = {}
    for entry in entries:
        if entry.attacker and entry.result is not None:
            totals[entry.attacker] = totals.get(entry.attacker, 0) + entry.result.damage
    return totals
