import random

import pytest

from minibattle.combat.dice import DiceRoller
from minibattle.combat.rules import (
    ability_modifier,
    apply_damage_modifiers,
    calculate_hit_chance,
    parse_recharge,
)


def test_seeded_rollers_are_reproducible():
    first = DiceRoller(seed=7)
    second = DiceRoller(seed=7)
    assert [first.d20() for _ in range(10)] == [second.d20() for _ in range(10)]


def test_roll_dice_sums_individual_rolls(rng):
    rng.push(3, 5, 6)
    roller = DiceRoller(rng=rng)
    total, rolls = roller.roll_dice(3, 6)
    assert rolls == [3, 5, 6]
    assert total == 14


def test_roll_single_rejects_non_positive_die():
    with pytest.raises(ValueError):
        DiceRoller().roll_single(0)


def test_d20_with_mode_keeps_higher_or_lower(rng):
    rng.push(4, 17, 4, 17, 9)
    roller = DiceRoller(rng=rng)
    assert roller.d20_with_mode("advantage") == (17, (4, 17))
    assert roller.d20_with_mode("disadvantage") == (4, (4, 17))
    assert roller.d20_with_mode("normal") == (9, (9,))


def test_choice_single_option_does_not_consume_rng(rng):
    assert DiceRoller(rng=rng).choice(["only"]) == "only"
    assert rng.calls == []


def test_choice_uses_rng(rng):
    rng.push(2)
    roller = DiceRoller(rng=rng)
    assert roller.choice(["a", "b", "c"]) == "b"


def test_default_roller_stays_in_range():
    roller = DiceRoller(rng=random.Random(1))
    assert all(1 <= roller.d20() <= 20 for _ in range(200))


@pytest.mark.parametrize(
    "score, expected",
    [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (12, 1), (20, 5), (30, 10)],
)
def test_ability_modifier_floors(score, expected):
    assert ability_modifier(score) == expected


class TestDamageModifiers:
    def test_resistance_halves_rounding_down(self):
        assert apply_damage_modifiers(7, "fire", resistances=["fire"]) == 3

    def test_vulnerability_doubles(self):
        assert apply_damage_modifiers(7, "fire", vulnerabilities=["fire"]) == 14

    def test_immunity_zeroes(self):
        assert apply_damage_modifiers(7, "fire", immunities=["fire"], vulnerabilities=["fire"]) == 0

    def test_non_matching_type_unchanged(self):
        assert apply_damage_modifiers(7, "cold", resistances=["fire"], immunities=["fire"]) == 7

    def test_negative_damage_becomes_zero(self):
        assert apply_damage_modifiers(-3, "fire") == 0


def test_hit_chance_bounds():
    assert calculate_hit_chance(30, 10) == 0.95
    assert calculate_hit_chance(0, 40) == 0.05
    assert calculate_hit_chance(5, 13) == pytest.approx(0.65)


def test_parse_recharge():
    assert parse_recharge("5-6") == 5
    assert parse_recharge("6") == 6
    with pytest.raises(ValueError):
        parse_recharge("0")
