"""
行动结算

攻击骰 -> 伤害骰 -> 伤害类型修正 -> 扣血
"""
import logging
from typing import Optional, Tuple

from .dice import DiceRoller
from .models.action import ActionResult
from .models.participant import BattleParticipant
from .models.stat_block import ActionDefinition, DamageSpec
from .rules import CRITICAL_HIT_ROLL, CRITICAL_MISS_ROLL, apply_damage_modifiers

logger = logging.getLogger(__name__)


def roll_attack(
    roller: DiceRoller,
    attacker: BattleParticipant,
    target: BattleParticipant,
    attack_bonus: int,
) -> Tuple[bool, bool, int, int]:
    """
    命中判定：d20 + 攻击加值 vs 目标AC

    自然20必定命中且暴击，自然1必定未命中

    Returns:
        Tuple[bool, bool, int, int]: (是否命中, 是否暴击, 自然骰, 总值)
    """
    roll, _ = roller.d20_with_mode(attacker.roll_mode("attack"))
    total = roll + attack_bonus
    if roll == CRITICAL_HIT_ROLL:
        return True, True, roll, total
    if roll == CRITICAL_MISS_ROLL:
        return False, False, roll, total
    return total >= target.armor_class, False, roll, total


def roll_damage(roller: DiceRoller, spec: DamageSpec, critical: bool = False) -> int:
    """
    伤害骰：dice_count 个 dice_size 面骰 + 修正值

    暴击时伤害骰投两次（修正值只加一次），结果不会为负
    """
    dice_total, _ = roller.roll_dice(spec.dice_count, spec.dice_size)
    if critical:
        extra, _ = roller.roll_dice(spec.dice_count, spec.dice_size)
        dice_total += extra
    return max(0, dice_total + spec.modifier)


def modified_damage(target: BattleParticipant, damage: int, damage_type: str) -> int:
    """按目标状态中的免疫/抗性/易伤修正伤害"""
    return apply_damage_modifiers(
        damage,
        damage_type,
        immunities=target.damage_tags("immunity"),
        resistances=target.damage_tags("resistance"),
        vulnerabilities=target.damage_tags("vulnerability"),
    )


def resolve_attack(
    roller: DiceRoller,
    attacker: BattleParticipant,
    target: BattleParticipant,
    action: ActionDefinition,
) -> ActionResult:
    """攻击类行动结算（会修改目标HP）"""
    hit, critical, roll, total = roll_attack(roller, attacker, target, action.attack_bonus)

    damage = 0
    damage_type: Optional[str] = None
    if hit and action.damage is not None:
        damage_type = action.damage.damage_type.value
        raw = roll_damage(roller, action.damage, critical=critical)
        damage = modified_damage(target, raw, damage_type)
        target.take_damage(damage)

    logger.debug(
        "%s -> %s with %s: roll=%s total=%s vs AC %s hit=%s crit=%s damage=%s",
        attacker.name,
        target.name,
        action.name,
        roll,
        total,
        target.armor_class,
        hit,
        critical,
        damage,
    )
    return ActionResult(
        hit=hit,
        damage=damage,
        critical=critical,
        roll=roll,
        total=total,
        damage_type=damage_type,
    )


def resolve_save(
    roller: DiceRoller,
    target: BattleParticipant,
    action: ActionDefinition,
) -> ActionResult:
    """
    豁免类行动结算（会修改目标HP）

    目标 d20 + 对应能力修正 vs DC；豁免成功伤害减半，失败全额
    """
    ability = action.save_ability.value
    roll, _ = roller.d20_with_mode(target.roll_mode("save", ability))
    total = roll + target.ability_modifier(ability)
    saved = total >= action.save_dc

    damage = 0
    damage_type: Optional[str] = None
    if action.damage is not None:
        damage_type = action.damage.damage_type.value
        raw = roll_damage(roller, action.damage)
        if saved:
            raw //= 2
        damage = modified_damage(target, raw, damage_type)
        target.take_damage(damage)

    logger.debug(
        "%s saves against %s (DC %s %s): roll=%s total=%s saved=%s damage=%s",
        target.name,
        action.name,
        action.save_dc,
        ability,
        roll,
        total,
        saved,
        damage,
    )
    return ActionResult(
        hit=not saved,
        damage=damage,
        roll=roll,
        total=total,
        damage_type=damage_type,
        save_dc=action.save_dc,
        saved=saved,
    )


def resolve_action(
    roller: DiceRoller,
    attacker: BattleParticipant,
    target: BattleParticipant,
    action: ActionDefinition,
) -> ActionResult:
    """
    按行动类型分派结算

    有攻击加值时按攻击结算（忽略豁免字段）；只有豁免DC时按豁免结算；
    两者都没有的辅助行动不产生效果
    """
    if action.is_attack:
        return resolve_attack(roller, attacker, target, action)
    if action.is_save:
        return resolve_save(roller, target, action)
    return ActionResult(hit=False, damage=0)
