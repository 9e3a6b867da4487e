"""
战斗参与者数据模型
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..rules import ability_modifier
from .stat_block import AbilityScore, ActionDefinition, StatBlock


@dataclass
class ConditionEffect:
    """状态效果内容（数值修正 + 优势/劣势 + 伤害类型标记）"""

    stat_modifiers: Dict[str, int] = field(default_factory=dict)
    advantage: List[str] = field(default_factory=list)
    disadvantage: List[str] = field(default_factory=list)
    immunity: List[str] = field(default_factory=list)
    resistance: List[str] = field(default_factory=list)
    vulnerability: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stat_modifiers": dict(self.stat_modifiers),
            "advantage": list(self.advantage),
            "disadvantage": list(self.disadvantage),
            "immunity": list(self.immunity),
            "resistance": list(self.resistance),
            "vulnerability": list(self.vulnerability),
        }


@dataclass
class Condition:
    """状态实例"""

    name: str
    duration: int  # 剩余轮数
    effect: ConditionEffect = field(default_factory=ConditionEffect)
    description: str = ""

    def tick(self) -> bool:
        """
        每轮结束时调用，减少持续时间

        Returns:
            bool: 是否已过期
        """
        self.duration -= 1
        return self.duration <= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "effect": self.effect.to_dict(),
        }


@dataclass
class BattleParticipant:
    """
    战斗参与者

    包装不可变的 StatBlock，附加本场战斗内的可变状态
    """

    # ===== 基础信息 =====
    id: str  # 如 "player1", "player2"
    stat_block: StatBlock
    is_player: bool

    # ===== 生命值 =====
    current_hp: int
    max_hp: int

    # ===== 先攻 =====
    initiative: int = 0

    # ===== 状态 =====
    conditions: List[Condition] = field(default_factory=list)

    # ===== 有限次数行动（行动名 -> 已使用次数） =====
    uses_spent: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_stat_block(
        cls, participant_id: str, stat_block: StatBlock, is_player: bool
    ) -> "BattleParticipant":
        return cls(
            id=participant_id,
            stat_block=stat_block,
            is_player=is_player,
            current_hp=stat_block.max_hp,
            max_hp=stat_block.max_hp,
        )

    # ===== 便捷属性 =====

    @property
    def name(self) -> str:
        return self.stat_block.name

    @property
    def armor_class(self) -> int:
        return self.stat_block.armor_class

    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    # ===== 生命值 =====

    def take_damage(self, amount: int) -> int:
        """
        受到伤害

        Returns:
            int: 实际扣除的HP（不会把HP扣到0以下）
        """
        actual_damage = min(max(0, amount), self.current_hp)
        self.current_hp -= actual_damage
        return actual_damage

    def heal(self, amount: int) -> int:
        """
        恢复生命值

        Returns:
            int: 实际恢复的量（不超过最大HP）
        """
        actual_heal = min(max(0, amount), self.max_hp - self.current_hp)
        self.current_hp += actual_heal
        return actual_heal

    # ===== 能力值 =====

    def ability_score(self, ability: str) -> int:
        """获取能力值（含状态修正，限制在1-30）"""
        key = AbilityScore(ability).value
        score = self.stat_block.abilities.score(key)
        for condition in self.conditions:
            score += condition.effect.stat_modifiers.get(key, 0)
        return max(1, min(30, score))

    def ability_modifier(self, ability: str) -> int:
        return ability_modifier(self.ability_score(ability))

    # ===== 状态效果 =====

    def add_condition(self, condition: Condition):
        self.conditions.append(condition)

    def tick_conditions(self) -> List[Condition]:
        """
        每轮结束时推进状态持续时间

        Returns:
            List[Condition]: 本次过期的状态
        """
        expired = [c for c in self.conditions if c.tick()]
        self.conditions = [c for c in self.conditions if c.duration > 0]
        return expired

    def damage_tags(self, kind: str) -> Set[str]:
        """汇总状态中的 immunity / resistance / vulnerability 标记"""
        tags: Set[str] = set()
        for condition in self.conditions:
            tags.update(getattr(condition.effect, kind))
        return tags

    def roll_mode(self, *tags: str) -> str:
        """
        根据状态中的优势/劣势标记决定d20方式

        Returns:
            str: "advantage" / "disadvantage" / "normal"（两者同时存在时抵消）
        """
        wanted = set(tags)
        advantage = any(wanted & set(c.effect.advantage) for c in self.conditions)
        disadvantage = any(wanted & set(c.effect.disadvantage) for c in self.conditions)
        if advantage and not disadvantage:
            return "advantage"
        if disadvantage and not advantage:
            return "disadvantage"
        return "normal"

    # ===== 行动 =====

    def available_actions(self) -> List[ActionDefinition]:
        """可用行动：去掉次数已用尽的行动"""
        return [a for a in self.stat_block.actions if not self.is_exhausted(a)]

    def is_exhausted(self, action: ActionDefinition) -> bool:
        max_uses = action.max_uses
        if max_uses is None:
            return False
        return self.uses_spent.get(action.name, 0) >= max_uses

    def spend_use(self, action: ActionDefinition):
        if action.max_uses is None:
            return
        self.uses_spent[action.name] = self.uses_spent.get(action.name, 0) + 1

    def restore_uses(self, action: ActionDefinition):
        self.uses_spent.pop(action.name, None)

    def to_status(self) -> Dict[str, Any]:
        """参与者状态（给UI显示）"""
        return {
            "id": self.id,
            "name": self.name,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "hp_percentage": self.current_hp / self.max_hp * 100,
            "is_player": self.is_player,
        }

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于序列化）"""
        return {
            **self.to_status(),
            "stat_block_id": self.stat_block.id,
            "armor_class": self.armor_class,
            "initiative": self.initiative,
            "is_alive": self.is_alive,
            "conditions": [c.to_dict() for c in self.conditions],
            "uses_spent": dict(self.uses_spent),
        }

    def find_condition(self, name: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.name == name:
                return condition
        return None
