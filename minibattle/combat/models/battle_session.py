"""
战斗会话数据模型
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..rules import DEFAULT_TURN_TIMER
from .action import ActionResult
from .battle_log import BattleLogEntry
from .participant import BattleParticipant
from .stat_block import ActionDefinition


class BattleState(str, Enum):
    """战斗状态"""

    IDLE = "idle"  # 空闲（未开始 / 已重置）
    INITIALIZING = "initializing"  # 已创建参与者，等待骰先攻
    ROLLING_INITIATIVE = "rolling_initiative"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    SELECTING_ACTION = "selecting_action"  # 已选择行动，尚未结算
    RESOLVING_ACTION = "resolving_action"
    CHECKING_WIN_CONDITION = "checking_win_condition"
    BATTLE_COMPLETE = "battle_complete"  # 终态
    PAUSED = "paused"


class BattleEndReason(str, Enum):
    """战斗结束原因"""

    ELIMINATION = "elimination"  # 只剩一方存活
    MUTUAL_DESTRUCTION = "mutual destruction"  # 同时倒下，平局
    FORFEIT = "forfeit"  # 一方认输
    ABORTED = "aborted"  # 外部中止，无胜者


TURN_STATES = (BattleState.PLAYER_TURN, BattleState.ENEMY_TURN)


@dataclass
class BattleSession:
    """
    战斗会话

    包含一场战斗的所有状态和日志；只能通过 BattleEngine 的操作修改
    """

    # ===== 基础信息 =====
    battle_id: str
    state: BattleState = BattleState.IDLE
    room_id: Optional[str] = None  # 预留：联机房间

    # ===== 参与者（先攻后按行动顺序排列） =====
    participants: List[BattleParticipant] = field(default_factory=list)

    # ===== 回合 =====
    current_turn: int = 0
    round: int = 1
    turn_timer: int = DEFAULT_TURN_TIMER

    # ===== 行动选择 =====
    selected_action: Optional[ActionDefinition] = None
    selected_target_id: Optional[str] = None
    available_actions: List[ActionDefinition] = field(default_factory=list)
    last_result: Optional[ActionResult] = None  # 最近一次结算结果

    # ===== 暂停前的状态 =====
    paused_from: Optional[BattleState] = None

    # ===== 战斗日志 =====
    battle_log: List[BattleLogEntry] = field(default_factory=list)
    event_sink: Optional[Callable[[BattleLogEntry], None]] = field(
        default=None, repr=False, compare=False
    )

    # ===== 战斗结果（结束后填充） =====
    winner_id: Optional[str] = None
    end_reason: Optional[BattleEndReason] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    # ===== 便捷方法 =====

    @property
    def is_complete(self) -> bool:
        return self.state == BattleState.BATTLE_COMPLETE

    def get_participant(self, participant_id: str) -> Optional[BattleParticipant]:
        """根据ID获取参与者"""
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def get_current_participant(self) -> Optional[BattleParticipant]:
        """获取当前回合的行动者"""
        if not self.participants:
            return None
        return self.participants[self.current_turn]

    def get_alive_participants(self) -> List[BattleParticipant]:
        return [p for p in self.participants if p.is_alive]

    def get_opponents(self, participant: BattleParticipant) -> List[BattleParticipant]:
        """获取存活的对手（阵营不同）"""
        return [
            p
            for p in self.participants
            if p.is_alive and p.is_player != participant.is_player
        ]

    def get_winner(self) -> Optional[BattleParticipant]:
        if self.winner_id is None:
            return None
        return self.get_participant(self.winner_id)

    def add_log(self, entry: BattleLogEntry) -> BattleLogEntry:
        """追加日志并推送给事件输出回调"""
        self.battle_log.append(entry)
        if self.event_sink:
            self.event_sink(entry)
        return entry

    def get_recent_log(self, count: int) -> List[BattleLogEntry]:
        if count <= 0:
            return []
        return self.battle_log[-count:]

    def duration_seconds(self) -> Optional[float]:
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def clear(self):
        """重置为空闲会话（保留ID、房间和事件回调）"""
        self.state = BattleState.IDLE
        self.participants = []
        self.current_turn = 0
        self.round = 1
        self.turn_timer = DEFAULT_TURN_TIMER
        self.selected_action = None
        self.selected_target_id = None
        self.available_actions = []
        self.last_result = None
        self.paused_from = None
        self.battle_log = []
        self.winner_id = None
        self.end_reason = None
        self.started_at = None
        self.ended_at = None

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        current = self.get_current_participant()
        return {
            "battle_id": self.battle_id,
            "state": self.state.value,
            "room_id": self.room_id,
            "round": self.round,
            "current_turn": current.id if current else None,
            "turn_timer": self.turn_timer,
            "selected_action": self.selected_action.name if self.selected_action else None,
            "available_actions": [a.name for a in self.available_actions],
            "participants": [p.to_dict() for p in self.participants],
            "battle_log": [entry.to_dict() for entry in self.battle_log[-10:]],
            "winner": self.winner_id,
            "end_reason": self.end_reason.value if self.end_reason else None,
        }
