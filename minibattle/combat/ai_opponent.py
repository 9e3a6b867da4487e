"""
敌人AI系统

随机选择行动和目标（也用于回合超时的自动选择）
"""
from typing import Optional, Tuple

from .dice import DiceRoller
from .models.battle_session import BattleSession
from .models.participant import BattleParticipant
from .models.stat_block import ActionDefinition


class OpponentAI:
    """
    敌人AI

    设计原则：
    - 只做随机选择，不做策略
    - 随机数来自注入的 DiceRoller，便于复现
    """

    def __init__(self, roller: DiceRoller):
        self.roller = roller

    def decide_action(
        self, session: BattleSession, actor: BattleParticipant
    ) -> Optional[Tuple[ActionDefinition, BattleParticipant]]:
        """
        为当前行动者决定行动

        Returns:
            Optional[Tuple[ActionDefinition, BattleParticipant]]:
                (行动, 目标)，没有可用行动或目标时返回None（跳过回合）
        """
        targets = session.get_opponents(actor)
        if not session.available_actions or not targets:
            return None

        action = self.roller.choice(session.available_actions)
        target = self.roller.choice(targets)
        return action, target
