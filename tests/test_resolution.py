import pytest

from minibattle.combat.dice import DiceRoller
from minibattle.combat.models.participant import BattleParticipant, Condition, ConditionEffect
from minibattle.combat.models.stat_block import ActionDefinition, DamageSpec
from minibattle.combat.resolution import (
    resolve_action,
    resolve_attack,
    resolve_save,
    roll_attack,
    roll_damage,
)


@pytest.fixture
def roller(rng):
    return DiceRoller(rng=rng)


@pytest.fixture
def attacker(make_stat_block):
    return BattleParticipant.from_stat_block("player1", make_stat_block("Hero"), is_player=True)


@pytest.fixture
def target(make_stat_block):
    block = make_stat_block("Orc", hp=15, ac=13, dexterity=14)
    return BattleParticipant.from_stat_block("player2", block, is_player=False)


def _axe(**overrides):
    data = {
        "name": "Greataxe",
        "attack_bonus": 5,
        "damage": {"dice_count": 1, "dice_size": 12, "modifier": 3, "damage_type": "slashing"},
    }
    data.update(overrides)
    return ActionDefinition.model_validate(data)


class TestAttackRoll:
    def test_hit_when_total_meets_armor_class(self, roller, rng, attacker, target):
        rng.push(8)
        assert roll_attack(roller, attacker, target, 5) == (True, False, 8, 13)

    def test_miss_when_total_below_armor_class(self, roller, rng, attacker, target):
        rng.push(7)
        assert roll_attack(roller, attacker, target, 5) == (False, False, 7, 12)

    def test_natural_twenty_always_hits_and_crits(self, roller, rng, attacker, target):
        target.stat_block = target.stat_block.model_copy(
            update={"stats": target.stat_block.stats.model_copy(update={"armor_class": 40})}
        )
        rng.push(20)
        hit, critical, roll, total = roll_attack(roller, attacker, target, -5)
        assert hit is True
        assert critical is True
        assert (roll, total) == (20, 15)

    def test_natural_one_always_misses(self, roller, rng, attacker, target):
        rng.push(1)
        hit, critical, roll, total = roll_attack(roller, attacker, target, 30)
        assert hit is False
        assert critical is False
        assert total == 31

    def test_advantage_condition_rolls_twice(self, roller, rng, attacker, target):
        attacker.add_condition(
            Condition(name="blessed", duration=2, effect=ConditionEffect(advantage=["attack"]))
        )
        rng.push(3, 17)
        hit, _, roll, _ = roll_attack(roller, attacker, target, 0)
        assert roll == 17
        assert hit is True

    def test_advantage_and_disadvantage_cancel(self, roller, rng, attacker, target):
        attacker.add_condition(
            Condition(name="blessed", duration=2, effect=ConditionEffect(advantage=["attack"]))
        )
        attacker.add_condition(
            Condition(name="poisoned", duration=2, effect=ConditionEffect(disadvantage=["attack"]))
        )
        rng.push(3)
        _, _, roll, _ = roll_attack(roller, attacker, target, 0)
        assert roll == 3


class TestDamageRoll:
    def test_adds_modifier_once(self, roller, rng):
        rng.push(2, 5)
        spec = DamageSpec(dice_count=2, dice_size=6, modifier=3, damage_type="fire")
        assert roll_damage(roller, spec) == 10

    def test_critical_rolls_dice_twice(self, roller, rng):
        rng.push(2, 5, 6, 1)
        spec = DamageSpec(dice_count=2, dice_size=6, modifier=3, damage_type="fire")
        assert roll_damage(roller, spec, critical=True) == 17

    def test_negative_total_clamped_to_zero(self, roller, rng):
        rng.push(1)
        spec = DamageSpec(dice_count=1, dice_size=4, modifier=-5, damage_type="fire")
        assert roll_damage(roller, spec) == 0


class TestResolveAttack:
    def test_hit_applies_damage(self, roller, rng, attacker, target):
        rng.push(12, 7)
        result = resolve_attack(roller, attacker, target, _axe())
        assert result.hit is True
        assert result.damage == 10
        assert result.damage_type == "slashing"
        assert target.current_hp == 5

    def test_miss_leaves_hp_untouched(self, roller, rng, attacker, target):
        rng.push(2)
        result = resolve_attack(roller, attacker, target, _axe())
        assert result.hit is False
        assert result.damage == 0
        assert target.current_hp == 15

    def test_damage_never_drops_hp_below_zero(self, roller, rng, attacker, target):
        rng.push(20, 12, 12)
        result = resolve_attack(roller, attacker, target, _axe())
        assert result.critical is True
        assert result.damage == 27
        assert target.current_hp == 0
        assert not target.is_alive

    @pytest.mark.parametrize(
        "kind, expected",
        [("resistance", 5), ("vulnerability", 20), ("immunity", 0)],
    )
    def test_condition_damage_tags(self, roller, rng, attacker, target, kind, expected):
        target.current_hp = target.max_hp = 50
        target.add_condition(
            Condition(name="warded", duration=3, effect=ConditionEffect(**{kind: ["slashing"]}))
        )
        rng.push(15, 7)
        result = resolve_attack(roller, attacker, target, _axe())
        assert result.damage == expected
        assert target.current_hp == 50 - expected

    def test_hit_without_damage_spec(self, roller, rng, attacker, target):
        rng.push(15)
        result = resolve_attack(roller, attacker, target, _axe(damage=None))
        assert result.hit is True
        assert result.damage == 0


class TestResolveSave:
    def _breath(self):
        return ActionDefinition.model_validate(
            {
                "name": "Fire Breath",
                "save_dc": 13,
                "save_ability": "dexterity",
                "damage": {"dice_count": 2, "dice_size": 6, "modifier": 0, "damage_type": "fire"},
            }
        )

    def test_failed_save_takes_full_damage(self, roller, rng, target):
        rng.push(10, 3, 4)
        result = resolve_save(roller, target, self._breath())
        assert result.saved is False
        assert result.hit is True
        assert result.total == 12
        assert result.damage == 7
        assert target.current_hp == 8

    def test_successful_save_halves_damage(self, roller, rng, target):
        rng.push(11, 3, 4)
        result = resolve_save(roller, target, self._breath())
        assert result.saved is True
        assert result.hit is False
        assert result.damage == 3

    def test_stat_modifier_condition_changes_save(self, roller, rng, target):
        target.add_condition(
            Condition(name="slowed", duration=1, effect=ConditionEffect(stat_modifiers={"dexterity": -4}))
        )
        rng.push(11, 3, 4)
        result = resolve_save(roller, target, self._breath())
        assert result.total == 11
        assert result.saved is False


def test_utility_action_has_no_effect(roller, rng, attacker, target):
    utility = ActionDefinition(name="Dodge", description="Focus on avoiding attacks")
    result = resolve_action(roller, attacker, target, utility)
    assert result.hit is False
    assert result.damage == 0
    assert target.current_hp == 15
    assert rng.calls == []
    assert result.to_display_text() == "no effect"
