"""
战斗状态机

纯函数：(当前状态, 事件) -> 新状态。不修改会话，不产生日志；
伴随转换的日志由 BattleEngine 在触发事件的同一步骤中追加
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import InvalidStateTransition
from .models.battle_session import BattleState


class BattleEvent(str, Enum):
    """状态机事件"""

    INITIALIZE = "initialize"
    ROLL_INITIATIVE = "roll_initiative"
    START_PLAYER_TURN = "start_player_turn"
    START_ENEMY_TURN = "start_enemy_turn"
    SELECT_ACTION = "select_action"
    RESOLVE_ACTION = "resolve_action"
    PASS_TURN = "pass_turn"
    CHECK_WIN = "check_win"
    COMPLETE = "complete"
    PAUSE = "pause"
    RESUME = "resume"
    ABORT = "abort"
    RESET = "reset"


# 暂停 / 中止可以从这些状态发起
ACTIVE_STATES = (
    BattleState.INITIALIZING,
    BattleState.ROLLING_INITIATIVE,
    BattleState.PLAYER_TURN,
    BattleState.ENEMY_TURN,
    BattleState.SELECTING_ACTION,
    BattleState.RESOLVING_ACTION,
    BattleState.CHECKING_WIN_CONDITION,
)

_TRANSITIONS: Dict[Tuple[BattleState, BattleEvent], BattleState] = {
    (BattleState.IDLE, BattleEvent.INITIALIZE): BattleState.INITIALIZING,
    (BattleState.INITIALIZING, BattleEvent.ROLL_INITIATIVE): BattleState.ROLLING_INITIATIVE,
    (BattleState.ROLLING_INITIATIVE, BattleEvent.START_PLAYER_TURN): BattleState.PLAYER_TURN,
    (BattleState.ROLLING_INITIATIVE, BattleEvent.START_ENEMY_TURN): BattleState.ENEMY_TURN,
    (BattleState.PLAYER_TURN, BattleEvent.SELECT_ACTION): BattleState.SELECTING_ACTION,
    (BattleState.ENEMY_TURN, BattleEvent.SELECT_ACTION): BattleState.SELECTING_ACTION,
    # 结算前可以改选
    (BattleState.SELECTING_ACTION, BattleEvent.SELECT_ACTION): BattleState.SELECTING_ACTION,
    (BattleState.SELECTING_ACTION, BattleEvent.RESOLVE_ACTION): BattleState.RESOLVING_ACTION,
    (BattleState.RESOLVING_ACTION, BattleEvent.CHECK_WIN): BattleState.CHECKING_WIN_CONDITION,
    (BattleState.PLAYER_TURN, BattleEvent.PASS_TURN): BattleState.CHECKING_WIN_CONDITION,
    (BattleState.ENEMY_TURN, BattleEvent.PASS_TURN): BattleState.CHECKING_WIN_CONDITION,
    (BattleState.SELECTING_ACTION, BattleEvent.PASS_TURN): BattleState.CHECKING_WIN_CONDITION,
    (BattleState.CHECKING_WIN_CONDITION, BattleEvent.START_PLAYER_TURN): BattleState.PLAYER_TURN,
    (BattleState.CHECKING_WIN_CONDITION, BattleEvent.START_ENEMY_TURN): BattleState.ENEMY_TURN,
    (BattleState.CHECKING_WIN_CONDITION, BattleEvent.COMPLETE): BattleState.BATTLE_COMPLETE,
}


def transition(
    state: BattleState,
    event: BattleEvent,
    paused_from: Optional[BattleState] = None,
) -> BattleState:
    """
    计算状态转换

    Args:
        state: 当前状态
        event: 事件
        paused_from: 暂停前的状态（仅 RESUME 使用）

    Returns:
        BattleState: 新状态

    Raises:
        InvalidStateTransition: 当前状态不接受该事件
    """
    if event == BattleEvent.RESET:
        return BattleState.IDLE

    if event == BattleEvent.PAUSE:
        if state in ACTIVE_STATES:
            return BattleState.PAUSED
        raise InvalidStateTransition(state.value, event.value)

    if event == BattleEvent.RESUME:
        if state == BattleState.PAUSED and paused_from is not None:
            return paused_from
        raise InvalidStateTransition(state.value, event.value)

    if event == BattleEvent.ABORT:
        if state in ACTIVE_STATES or state == BattleState.PAUSED:
            return BattleState.BATTLE_COMPLETE
        raise InvalidStateTransition(state.value, event.value)

    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidStateTransition(state.value, event.value) from None


def turn_event(is_player: bool) -> BattleEvent:
    """根据行动者阵营选择回合事件"""
    return BattleEvent.START_PLAYER_TURN if is_player else BattleEvent.START_ENEMY_TURN
