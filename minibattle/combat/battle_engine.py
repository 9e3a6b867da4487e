"""
战斗引擎

核心战斗流程实现：初始化 -> 骰先攻 -> 选择行动 -> 结算 -> 判定胜负 -> 下一回合
"""
import copy
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..config import settings
from .ai_opponent import OpponentAI
from .catalog import load_stat_block
from .dice import DiceRoller
from .errors import BattleNotFound, EmptyParticipantSet, InvalidAction, InvalidStateTransition
from .history import BattleHistory
from .models.action import ActionResult
from .models.battle_log import BattleLogEntry, LogEntryType
from .models.battle_result import BattleOutcome, BattleRecord, damage_by_attacker
from .models.battle_session import TURN_STATES, BattleEndReason, BattleSession, BattleState
from .models.participant import BattleParticipant, Condition
from .models.stat_block import ActionDefinition
from .resolution import resolve_action
from .rules import RECHARGE_DIE, parse_recharge
from .state_machine import BattleEvent, transition, turn_event

logger = logging.getLogger(__name__)

ActionRef = Union[str, ActionDefinition]

# 可以选择 / 结算行动的状态
SELECTABLE_STATES = (*TURN_STATES, BattleState.SELECTING_ACTION)


def check_win_condition(participants: Sequence[BattleParticipant]) -> Optional[BattleOutcome]:
    """
    胜负判定

    Returns:
        Optional[BattleOutcome]:
            - 只剩一人存活：该参与者获胜（elimination）
            - 无人存活：平局（mutual destruction）
            - 两人及以上存活：None，战斗继续
    """
    alive = [p for p in participants if p.is_alive]
    if len(alive) == 1:
        return BattleOutcome(reason=BattleEndReason.ELIMINATION, winner_id=alive[0].id)
    if not alive:
        return BattleOutcome(reason=BattleEndReason.MUTUAL_DESTRUCTION)
    return None


class BattleEngine:
    """
    战斗引擎

    职责：
    - 初始化战斗
    - 骰先攻并排序行动顺序
    - 校验和结算行动
    - 管理回合流程
    - 判定胜负并归档
    """

    def __init__(
        self,
        roller: Optional[DiceRoller] = None,
        history: Optional[BattleHistory] = None,
        event_sink: Optional[Callable[[BattleLogEntry], None]] = None,
        turn_timer: Optional[int] = None,
    ):
        self.roller = roller or DiceRoller()
        self.history = history if history is not None else BattleHistory()
        self.event_sink = event_sink
        self.turn_timer = turn_timer if turn_timer is not None else settings.turn_timer
        self.ai = OpponentAI(self.roller)
        self.sessions: Dict[str, BattleSession] = {}

    # ============================================
    # 公共接口 - 战斗流程
    # ============================================

    def initialize_battle(
        self,
        *combatants: Any,
        battle_id: Optional[str] = None,
        room_id: Optional[str] = None,
    ) -> str:
        """
        初始化战斗

        Args:
            combatants: 参与者的 StatBlock（或可校验为 StatBlock 的字典），
                第一个为玩家一方，其余为对手
            battle_id: 战斗ID（可选，默认自动生成）
            room_id: 联机房间ID（预留）

        Returns:
            str: 战斗ID

        Raises:
            EmptyParticipantSet: 少于两个参与者
            InvalidCombatant: StatBlock 缺失或不合法
            InvalidStateTransition: 同ID的战斗正在进行
        """
        if len(combatants) < 2:
            raise EmptyParticipantSet(len(combatants))
        stat_blocks = [load_stat_block(combatant) for combatant in combatants]

        battle_id = battle_id or f"battle_{uuid.uuid4().hex[:8]}"
        session = self.sessions.get(battle_id)
        if session is None:
            session = BattleSession(battle_id=battle_id, event_sink=self.event_sink)
        elif session.state != BattleState.IDLE:
            raise InvalidStateTransition(session.state.value, "initialize", battle_id)

        self._fire(session, BattleEvent.INITIALIZE)
        session.room_id = room_id
        session.participants = [
            BattleParticipant.from_stat_block(f"player{index + 1}", stat_block, is_player=index == 0)
            for index, stat_block in enumerate(stat_blocks)
        ]
        session.round = 1
        session.current_turn = 0
        session.battle_log = []
        session.turn_timer = self.turn_timer
        session.started_at = datetime.now()
        self.sessions[battle_id] = session

        logger.debug(
            "Battle %s initialized: %s",
            battle_id,
            " vs ".join(p.name for p in session.participants),
        )
        return battle_id

    def roll_initiative(self, battle_id: str) -> List[BattleParticipant]:
        """
        骰先攻

        每人 d20 + 敏捷修正；按先攻从高到低排序，同值保持原顺序

        Returns:
            List[BattleParticipant]: 行动顺序
        """
        session = self._get_session(battle_id)
        self._fire(session, BattleEvent.ROLL_INITIATIVE)

        for participant in session.participants:
            participant.initiative = self.roller.d20() + participant.ability_modifier("dexterity")

        # sorted 是稳定排序，reverse=True 也保持同值元素的原顺序
        session.participants = sorted(
            session.participants, key=lambda p: p.initiative, reverse=True
        )
        session.current_turn = 0

        first = session.participants[0]
        session.add_log(
            BattleLogEntry(
                type=LogEntryType.INITIATIVE,
                message=f"Initiative rolled! {first.name} goes first.",
                round=session.round,
                order=tuple(p.name for p in session.participants),
            )
        )
        logger.debug(
            "Battle %s initiative: %s",
            battle_id,
            ", ".join(f"{p.name}={p.initiative}" for p in session.participants),
        )

        self._start_turn(session)
        return list(session.participants)

    def get_available_actions(self, battle_id: str) -> List[ActionDefinition]:
        """获取当前行动者可用的行动"""
        session = self._get_session(battle_id)
        if session.state not in SELECTABLE_STATES:
            return []
        return list(session.available_actions)

    def select_action(
        self, battle_id: str, action_ref: ActionRef, target_id: Optional[str] = None
    ) -> ActionDefinition:
        """
        选择行动和目标

        Args:
            action_ref: 行动名或行动定义，必须在当前可用行动中
            target_id: 目标参与者ID；只有一个存活对手时可省略

        Raises:
            InvalidStateTransition: 不在行动者回合
            InvalidAction: 行动不可用或目标无效/已被击败
        """
        session = self._get_session(battle_id)
        if session.state not in SELECTABLE_STATES:
            raise InvalidStateTransition(session.state.value, "select_action", battle_id)

        actor = session.get_current_participant()
        action = self._find_available_action(session, actor, action_ref)
        target = self._validate_target(session, actor, target_id)

        self._fire(session, BattleEvent.SELECT_ACTION)
        session.selected_action = action
        session.selected_target_id = target.id
        return action

    def resolve_selected_action(self, battle_id: str) -> ActionResult:
        """
        结算已选择的行动

        流程：
        1. 校验目标仍然存活（在修改状态前）
        2. 命中/豁免判定与伤害结算
        3. 记录日志
        4. 判定胜负，未结束则进入下一回合

        结果在进入第4步前写入 session.last_result。事件回调或历史归档回调
        抛出的异常会在状态已推进之后向上传播，此时可从 last_result 取回结果
        """
        session = self._get_session(battle_id)
        if session.state != BattleState.SELECTING_ACTION or session.selected_action is None:
            raise InvalidStateTransition(session.state.value, "resolve_selected_action", battle_id)

        actor = session.get_current_participant()
        action = session.selected_action
        target = session.get_participant(session.selected_target_id)
        if target is None or not target.is_alive:
            raise InvalidAction(f"Target {session.selected_target_id} is missing or already defeated")

        self._fire(session, BattleEvent.RESOLVE_ACTION)
        hp_before = target.current_hp
        result = resolve_action(self.roller, actor, target, action)
        actor.spend_use(action)
        session.last_result = result

        session.add_log(
            BattleLogEntry(
                type=LogEntryType.ACTION,
                message=f"{actor.name} uses {action.name} on {target.name}: {result.to_display_text()}",
                round=session.round,
                attacker=actor.name,
                target=target.name,
                action=action.name,
                result=result,
            )
        )
        lost = hp_before - target.current_hp
        if lost > 0:
            session.add_log(
                BattleLogEntry(
                    type=LogEntryType.DAMAGE,
                    message=f"{target.name} takes {lost} damage ({target.current_hp}/{target.max_hp} HP)",
                    round=session.round,
                    target=target.name,
                    amount=lost,
                    hp=target.current_hp,
                )
            )

        session.selected_action = None
        session.selected_target_id = None
        self._fire(session, BattleEvent.CHECK_WIN)
        self._resolve_turn_end(session)
        return result

    def pass_turn(self, battle_id: str):
        """放弃本回合（无可用行动或超时时使用）"""
        session = self._get_session(battle_id)
        if session.state not in SELECTABLE_STATES:
            raise InvalidStateTransition(session.state.value, "pass_turn", battle_id)

        actor = session.get_current_participant()
        logger.debug("Battle %s: %s passes the turn", battle_id, actor.name)
        session.selected_action = None
        session.selected_target_id = None
        self._fire(session, BattleEvent.PASS_TURN)
        self._resolve_turn_end(session)

    def take_ai_turn(self, battle_id: str) -> Optional[ActionResult]:
        """
        敌人回合：随机选择行动和目标并结算

        Returns:
            Optional[ActionResult]: 行动结果；没有可用行动时跳过回合返回None
        """
        session = self._get_session(battle_id)
        if session.state != BattleState.ENEMY_TURN:
            raise InvalidStateTransition(session.state.value, "take_ai_turn", battle_id)
        return self._auto_act(session)

    def tick_timer(self, battle_id: str, elapsed: int = 1) -> Optional[ActionResult]:
        """
        外部时钟推进回合计时

        计时归零时自动行动：已选择行动则直接结算，否则随机选择；
        没有可用行动则跳过回合

        Returns:
            Optional[ActionResult]: 超时自动行动的结果
        """
        session = self._get_session(battle_id)
        if session.state not in SELECTABLE_STATES:
            raise InvalidStateTransition(session.state.value, "tick_timer", battle_id)
        if elapsed < 0:
            raise ValueError("elapsed must be >= 0")

        session.turn_timer = max(0, session.turn_timer - elapsed)
        if session.turn_timer > 0:
            return None

        actor = session.get_current_participant()
        logger.debug("Battle %s: turn timer expired for %s", battle_id, actor.name)
        return self._auto_act(session)

    # ============================================
    # 公共接口 - 暂停 / 中止 / 重置
    # ============================================

    def pause(self, battle_id: str):
        """暂停战斗（恢复时回到暂停前的状态）"""
        session = self._get_session(battle_id)
        previous = session.state
        self._fire(session, BattleEvent.PAUSE)
        session.paused_from = previous

    def resume(self, battle_id: str):
        session = self._get_session(battle_id)
        self._fire(session, BattleEvent.RESUME)
        session.paused_from = None

    def abort(self, battle_id: str, participant_id: Optional[str] = None) -> BattleRecord:
        """
        中止战斗

        Args:
            participant_id: 认输的参与者；提供时结束原因为 forfeit，
                剩下唯一存活的对手获胜；不提供时为 aborted，无胜者
        """
        session = self._get_session(battle_id)
        if participant_id is not None:
            forfeiting = session.get_participant(participant_id)
            if forfeiting is None:
                raise InvalidAction(f"Unknown participant: {participant_id}")
            remaining = [
                p for p in session.get_alive_participants() if p.id != forfeiting.id
            ]
            outcome = BattleOutcome(
                reason=BattleEndReason.FORFEIT,
                winner_id=remaining[0].id if len(remaining) == 1 else None,
            )
        else:
            outcome = BattleOutcome(reason=BattleEndReason.ABORTED)

        self._complete(session, outcome, BattleEvent.ABORT)
        return self.get_battle_record(battle_id)

    def reset(self, battle_id: str):
        """重置为空闲状态（已结束的战斗记录保留在历史中）"""
        session = self._get_session(battle_id)
        self._fire(session, BattleEvent.RESET)
        session.clear()

    # ============================================
    # 公共接口 - 状态与效果
    # ============================================

    def apply_condition(self, battle_id: str, participant_id: str, condition: Condition):
        """施加状态（同名状态刷新而不叠加；保存副本，不修改传入的对象）"""
        session = self._get_session(battle_id)
        participant = self._require_active_participant(session, participant_id, "apply_condition")
        if condition.duration <= 0:
            raise InvalidAction(f"Condition {condition.name} must last at least one round")

        existing = participant.find_condition(condition.name)
        if existing is not None:
            participant.conditions.remove(existing)
        # 每个参与者持有独立副本，持续时间各自递减
        participant.add_condition(copy.deepcopy(condition))

        session.add_log(
            BattleLogEntry(
                type=LogEntryType.CONDITION,
                message=f"{participant.name} is {condition.name} for {condition.duration} round(s)",
                round=session.round,
                target=participant.name,
                condition=condition.name,
            )
        )

    def heal(self, battle_id: str, participant_id: str, amount: int) -> int:
        """
        恢复生命值

        Returns:
            int: 实际恢复量（不超过最大HP）
        """
        if amount < 0:
            raise InvalidAction("Heal amount must be >= 0")
        session = self._get_session(battle_id)
        participant = self._require_active_participant(session, participant_id, "heal")

        actual = participant.heal(amount)
        session.add_log(
            BattleLogEntry(
                type=LogEntryType.HEAL,
                message=f"{participant.name} recovers {actual} HP ({participant.current_hp}/{participant.max_hp})",
                round=session.round,
                target=participant.name,
                amount=actual,
                hp=participant.current_hp,
            )
        )
        return actual

    def set_event_sink(
        self, battle_id: str, sink: Optional[Callable[[BattleLogEntry], None]]
    ):
        """设置事件输出回调（用于推送UI）"""
        self._get_session(battle_id).event_sink = sink

    # ============================================
    # 公共接口 - 查询
    # ============================================

    def get_session(self, battle_id: str) -> BattleSession:
        return self._get_session(battle_id)

    def get_battle_log(self, battle_id: str) -> tuple:
        """完整战斗日志（只读）"""
        return tuple(self._get_session(battle_id).battle_log)

    def get_recent_log(self, battle_id: str, count: Optional[int] = None) -> List[BattleLogEntry]:
        count = settings.recent_log_count if count is None else count
        return self._get_session(battle_id).get_recent_log(count)

    def get_participant_status(self, battle_id: str) -> List[Dict[str, Any]]:
        """每个参与者的 {id, name, current_hp, max_hp, hp_percentage, is_player}"""
        return [p.to_status() for p in self._get_session(battle_id).participants]

    def get_current_participant(self, battle_id: str) -> Optional[BattleParticipant]:
        return self._get_session(battle_id).get_current_participant()

    def is_player_turn(self, battle_id: str) -> bool:
        session = self._get_session(battle_id)
        current = session.get_current_participant()
        return session.state in SELECTABLE_STATES and bool(current and current.is_player)

    def get_winner(self, battle_id: str) -> Optional[BattleParticipant]:
        return self._get_session(battle_id).get_winner()

    def get_battle_record(self, battle_id: str) -> BattleRecord:
        """获取已结束战斗的记录"""
        session = self._get_session(battle_id)
        if not session.is_complete:
            raise InvalidStateTransition(session.state.value, "get_battle_record", battle_id)
        record = self.history.get(battle_id)
        if record is None:
            record = self._build_record(session)
        return record

    # ============================================
    # 私有方法 - 回合流程
    # ============================================

    def _fire(self, session: BattleSession, event: BattleEvent) -> BattleState:
        try:
            session.state = transition(session.state, event, session.paused_from)
        except InvalidStateTransition as exc:
            raise InvalidStateTransition(exc.state, exc.operation, session.battle_id) from None
        return session.state

    def _start_turn(self, session: BattleSession):
        """开始当前行动者的回合"""
        actor = session.get_current_participant()
        self._fire(session, turn_event(actor.is_player))
        session.turn_timer = self.turn_timer
        self._recharge_actions(actor)
        session.available_actions = actor.available_actions()

        session.add_log(
            BattleLogEntry(
                type=LogEntryType.TURN_START,
                message=f"Round {session.round}: {actor.name}'s turn.",
                round=session.round,
                actor=actor.name,
            )
        )

    def _resolve_turn_end(self, session: BattleSession):
        """胜负判定，未结束则推进到下一个存活的行动者"""
        outcome = check_win_condition(session.participants)
        if outcome is not None:
            self._complete(session, outcome, BattleEvent.COMPLETE)
            return
        self._advance_turn(session)
        self._start_turn(session)

    def _advance_turn(self, session: BattleSession):
        """推进回合索引；回到队首时轮数+1，并跳过已倒下的参与者"""
        count = len(session.participants)
        for _ in range(count):
            session.current_turn = (session.current_turn + 1) % count
            if session.current_turn == 0:
                session.round += 1
                self._on_round_end(session)
            if session.participants[session.current_turn].is_alive:
                return

    def _on_round_end(self, session: BattleSession):
        """一轮结束：状态持续时间-1，移除过期状态"""
        for participant in session.participants:
            for condition in participant.tick_conditions():
                session.add_log(
                    BattleLogEntry(
                        type=LogEntryType.CONDITION,
                        message=f"{participant.name} is no longer {condition.name}",
                        round=session.round,
                        target=participant.name,
                        condition=condition.name,
                    )
                )

    def _recharge_actions(self, actor: BattleParticipant):
        """回合开始时为已用尽的充能行动骰 d6"""
        for action in actor.stat_block.actions:
            if action.recharge is None or not actor.is_exhausted(action):
                continue
            roll = self.roller.roll_single(RECHARGE_DIE)
            if roll >= parse_recharge(action.recharge):
                actor.restore_uses(action)
                logger.debug("%s recharged %s (rolled %s)", actor.name, action.name, roll)

    def _auto_act(self, session: BattleSession) -> Optional[ActionResult]:
        """随机行动（AI回合 / 超时）"""
        if session.state == BattleState.SELECTING_ACTION and session.selected_action is not None:
            return self.resolve_selected_action(session.battle_id)

        actor = session.get_current_participant()
        decision = self.ai.decide_action(session, actor)
        if decision is None:
            self.pass_turn(session.battle_id)
            return None

        action, target = decision
        self.select_action(session.battle_id, action, target.id)
        return self.resolve_selected_action(session.battle_id)

    def _complete(self, session: BattleSession, outcome: BattleOutcome, event: BattleEvent):
        """进入终态，记录结果并归档"""
        self._fire(session, event)
        session.paused_from = None
        session.winner_id = outcome.winner_id
        session.end_reason = outcome.reason
        session.ended_at = datetime.now()
        session.selected_action = None
        session.selected_target_id = None
        session.available_actions = []

        winner = session.get_winner()
        if winner is not None:
            message = f"{winner.name} wins by {outcome.reason.value}!"
        else:
            message = f"Battle ended with no winner ({outcome.reason.value})."
        session.add_log(
            BattleLogEntry(
                type=LogEntryType.BATTLE_END,
                message=message,
                round=session.round,
                winner=winner.name if winner else None,
                reason=outcome.reason.value,
            )
        )
        logger.info(
            "Battle %s complete: %s (winner=%s, rounds=%s)",
            session.battle_id,
            outcome.reason.value,
            winner.name if winner else None,
            session.round,
        )
        self.history.add(self._build_record(session))

    def _build_record(self, session: BattleSession) -> BattleRecord:
        winner = session.get_winner()
        return BattleRecord(
            battle_id=session.battle_id,
            end_reason=session.end_reason,
            winner_id=session.winner_id,
            winner_name=winner.name if winner else None,
            room_id=session.room_id,
            participants=tuple(p.to_dict() for p in session.participants),
            battle_log=tuple(session.battle_log),
            total_rounds=session.round,
            started_at=session.started_at,
            ended_at=session.ended_at,
            duration_seconds=session.duration_seconds(),
            damage_dealt=damage_by_attacker(session.battle_log),
        )

    # ============================================
    # 私有方法 - 校验
    # ============================================

    def _get_session(self, battle_id: str) -> BattleSession:
        session = self.sessions.get(battle_id)
        if session is None:
            raise BattleNotFound(battle_id)
        return session

    def _find_available_action(
        self, session: BattleSession, actor: BattleParticipant, action_ref: ActionRef
    ) -> ActionDefinition:
        name = action_ref.name if isinstance(action_ref, ActionDefinition) else action_ref
        for action in session.available_actions:
            if action.name == name:
                if isinstance(action_ref, ActionDefinition) and action_ref != action:
                    break
                return action
        raise InvalidAction(f"Action '{name}' is not available to {actor.name}")

    def _validate_target(
        self, session: BattleSession, actor: BattleParticipant, target_id: Optional[str]
    ) -> BattleParticipant:
        if target_id is None:
            opponents = session.get_opponents(actor)
            if len(opponents) == 1:
                return opponents[0]
            raise InvalidAction("A target must be specified")

        target = session.get_participant(target_id)
        if target is None:
            raise InvalidAction(f"Unknown target: {target_id}")
        if target.id == actor.id:
            raise InvalidAction(f"{actor.name} cannot target itself")
        if not target.is_alive:
            raise InvalidAction(f"Target {target.name} is already defeated")
        return target

    def _require_active_participant(
        self, session: BattleSession, participant_id: str, operation: str
    ) -> BattleParticipant:
        if session.state in (BattleState.IDLE, BattleState.BATTLE_COMPLETE, BattleState.PAUSED):
            raise InvalidStateTransition(session.state.value, operation, session.battle_id)
        participant = session.get_participant(participant_id)
        if participant is None:
            raise InvalidAction(f"Unknown participant: {participant_id}")
        if not participant.is_alive:
            raise InvalidAction(f"{participant.name} is already defeated")
        return participant
