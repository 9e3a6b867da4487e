import pytest
from pydantic import ValidationError

from minibattle.combat.catalog import (
    COLLECTION_TEMPLATES,
    OPPONENT_TEMPLATES,
    get_stat_block,
    list_templates,
    load_stat_block,
    random_opponent,
)
from minibattle.combat.dice import DiceRoller
from minibattle.combat.errors import InvalidCombatant
from minibattle.combat.models.participant import BattleParticipant, Condition, ConditionEffect
from minibattle.combat.models.stat_block import ActionDefinition, DamageSpec, StatBlock


class TestStatBlock:
    def test_defaults(self):
        block = StatBlock.model_validate({"name": "Scout", "stats": {"armor_class": 12, "hit_points": 9}})
        assert block.creature_type == "humanoid"
        assert block.size.value == "Medium"
        assert block.abilities.score("wisdom") == 10
        assert block.actions == []

    def test_type_alias_and_field_name(self):
        by_alias = StatBlock.model_validate(
            {"name": "Wolf", "type": "beast", "stats": {"armor_class": 13, "hit_points": 11}}
        )
        by_name = StatBlock(name="Wolf", creature_type="beast", stats={"armor_class": 13, "hit_points": 11})
        assert by_alias.creature_type == by_name.creature_type == "beast"

    def test_is_immutable(self):
        block = get_stat_block("orc_warrior")
        with pytest.raises(ValidationError):
            block.name = "Renamed"

    @pytest.mark.parametrize(
        "stats",
        [
            {"armor_class": 0, "hit_points": 10},
            {"armor_class": 10, "hit_points": 0},
            {"armor_class": 10, "hit_points": 10, "abilities": {"strength": 31}},
        ],
    )
    def test_rejects_out_of_range_stats(self, stats):
        with pytest.raises(ValidationError):
            StatBlock.model_validate({"name": "Bad", "stats": stats})

    def test_rejects_duplicate_action_names(self):
        with pytest.raises(ValidationError):
            StatBlock.model_validate(
                {
                    "name": "Twin",
                    "stats": {"armor_class": 10, "hit_points": 10},
                    "actions": [{"name": "Slam"}, {"name": "Slam"}],
                }
            )

    def test_save_dc_needs_ability(self):
        with pytest.raises(ValidationError):
            ActionDefinition(name="Roar", save_dc=12)

    @pytest.mark.parametrize("recharge", ["0", "7", "5-5", "abc"])
    def test_rejects_bad_recharge(self, recharge):
        with pytest.raises(ValidationError):
            ActionDefinition(name="Breath", recharge=recharge)

    def test_max_uses(self):
        assert ActionDefinition(name="Slam").max_uses is None
        assert ActionDefinition(name="Surge", uses=2).max_uses == 2
        assert ActionDefinition(name="Breath", recharge="5-6").max_uses == 1

    @pytest.mark.parametrize("modifier, notation", [(3, "1d12+3"), (0, "1d12"), (-1, "1d12-1")])
    def test_damage_notation(self, modifier, notation):
        spec = DamageSpec(dice_count=1, dice_size=12, modifier=modifier, damage_type="slashing")
        assert spec.notation == notation


class TestParticipant:
    def test_starts_at_full_health(self):
        participant = BattleParticipant.from_stat_block("player1", get_stat_block("dwarf_fighter"), True)
        assert participant.current_hp == participant.max_hp == 58
        assert participant.armor_class == 18
        assert participant.ability_modifier("dexterity") == 1

    def test_hp_is_clamped(self):
        participant = BattleParticipant.from_stat_block("player2", get_stat_block("orc_warrior"), False)
        assert participant.take_damage(100) == 15
        assert participant.current_hp == 0
        assert not participant.is_alive
        assert participant.heal(100) == 15
        assert participant.current_hp == 15

    def test_condition_modifies_ability_within_bounds(self):
        participant = BattleParticipant.from_stat_block("player1", get_stat_block("gnome_rogue"), True)
        participant.add_condition(
            Condition(name="hasted", duration=2, effect=ConditionEffect(stat_modifiers={"dexterity": 20}))
        )
        assert participant.ability_score("dexterity") == 30

    def test_status_dict(self):
        participant = BattleParticipant.from_stat_block("player2", get_stat_block("goblin_shaman"), False)
        participant.take_damage(3)
        status = participant.to_status()
        assert status == {
            "id": "player2",
            "name": "Goblin Shaman",
            "current_hp": 6,
            "max_hp": 9,
            "hp_percentage": pytest.approx(66.666, rel=1e-3),
            "is_player": False,
        }


class TestCatalog:
    def test_every_template_is_valid(self):
        for template_id in list_templates():
            block = get_stat_block(template_id)
            assert block.id == template_id
            assert block.actions

    def test_lists_collection_then_opponents(self):
        assert list_templates() == [*COLLECTION_TEMPLATES, *OPPONENT_TEMPLATES]

    def test_unknown_template(self):
        with pytest.raises(InvalidCombatant):
            get_stat_block("tarrasque")

    def test_load_stat_block_passes_models_through(self):
        block = get_stat_block("elf_ranger")
        assert load_stat_block(block) is block

    def test_load_stat_block_reports_name(self):
        with pytest.raises(InvalidCombatant, match="Lich"):
            load_stat_block({"name": "Lich", "stats": {"armor_class": 17}})

    def test_random_opponent_comes_from_roster(self, rng):
        rng.push(2)
        block = random_opponent(DiceRoller(rng=rng))
        assert block.id == list(OPPONENT_TEMPLATES)[1]

    def test_seeded_random_opponent_is_reproducible(self):
        assert random_opponent(DiceRoller(seed=3)).id == random_opponent(DiceRoller(seed=3)).id
