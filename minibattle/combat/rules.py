"""
战斗规则（DND简化版）

定义所有战斗相关的常量和规则函数
"""
from typing import Iterable


# ============================================
# 常量定义
# ============================================

# 暴击 / 大失败判定（自然骰）
CRITICAL_HIT_ROLL = 20
CRITICAL_MISS_ROLL = 1

# 回合计时默认值（配置未覆盖时）
DEFAULT_TURN_TIMER = 30

# 充能骰
RECHARGE_DIE = 6


# ============================================
# 规则函数
# ============================================


def ability_modifier(score: int) -> int:
    """能力值修正：floor((score - 10) / 2)"""
    return (score - 10) // 2


def calculate_hit_chance(attack_bonus: int, target_ac: int) -> float:
    """
    计算命中概率

    Args:
        attack_bonus: 攻击加值
        target_ac: 目标AC

    Returns:
        float: 命中概率（0-1）
    """
    # d20 + attack_bonus >= target_ac
    required_roll = target_ac - attack_bonus

    if required_roll <= 1:
        return 0.95  # 只有骰1才会失手
    if required_roll >= 20:
        return 0.05  # 只有骰20才会命中
    return (21 - required_roll) / 20


def apply_damage_modifiers(
    damage: int,
    damage_type: str,
    immunities: Iterable[str] = (),
    resistances: Iterable[str] = (),
    vulnerabilities: Iterable[str] = (),
) -> int:
    """
    应用免疫/抗性/易伤

    免疫优先；抗性减半（向下取整）后再计算易伤翻倍
    """
    damage = max(0, damage)
    if damage_type in set(immunities):
        return 0
    if damage_type in set(resistances):
        damage //= 2
    if damage_type in set(vulnerabilities):
        damage *= 2
    return damage


def parse_recharge(tag: str) -> int:
    """
    解析充能标记，返回充能所需的最小骰值

    Examples:
        >>> parse_recharge("5-6")
        5
        >>> parse_recharge("6")
        6
    """
    low = tag.split("-", 1)[0].strip()
    value = int(low)
    if not 1 <= value <= RECHARGE_DIE:
        raise ValueError(f"Invalid recharge tag: {tag!r}")
    return value
