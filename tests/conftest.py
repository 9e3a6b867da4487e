import pytest

from minibattle.combat.battle_engine import BattleEngine
from minibattle.combat.dice import DiceRoller
from minibattle.combat.history import BattleHistory
from minibattle.combat.models.stat_block import StatBlock


class ScriptedRng:
    """Returns queued values from randint() so every die roll is predictable."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def push(self, *values):
        self.values.extend(values)

    def randint(self, low, high):
        if not self.values:
            raise AssertionError(f"ScriptedRng exhausted (randint({low}, {high}))")
        value = self.values.pop(0)
        assert low <= value <= high, f"scripted value {value} outside [{low}, {high}]"
        self.calls.append((low, high))
        return value


GREATAXE = {
    "name": "Greataxe",
    "description": "Melee weapon attack",
    "attack_bonus": 5,
    "damage": {"dice_count": 1, "dice_size": 12, "modifier": 3, "damage_type": "slashing"},
}


def build_stat_block(name="Fighter", hp=20, ac=12, dexterity=10, actions=None, **abilities):
    return StatBlock.model_validate(
        {
            "id": name.lower().replace(" ", "_"),
            "name": name,
            "stats": {
                "armor_class": ac,
                "hit_points": hp,
                "abilities": {"dexterity": dexterity, **abilities},
            },
            "actions": [GREATAXE] if actions is None else actions,
        }
    )


@pytest.fixture
def rng():
    return ScriptedRng()


@pytest.fixture
def history():
    return BattleHistory(limit=10)


@pytest.fixture
def engine(rng, history):
    return BattleEngine(roller=DiceRoller(rng=rng), history=history, turn_timer=30)


@pytest.fixture
def make_stat_block():
    return build_stat_block


@pytest.fixture
def started_battle(engine, rng, make_stat_block):
    """Hero (player1) vs Orc (player2); hero acts first."""

    def _start(hero=None, orc=None):
        hero = hero or make_stat_block("Hero", hp=58, ac=18, dexterity=12)
        orc = orc or make_stat_block("Orc", hp=15, ac=13, dexterity=12)
        battle_id = engine.initialize_battle(hero, orc, battle_id="b1")
        rng.push(15, 10)
        engine.roll_initiative(battle_id)
        return battle_id

    return _start
