from minibattle.combat.history import BattleHistory
from minibattle.combat.models.battle_result import BattleRecord
from minibattle.combat.models.battle_session import BattleEndReason


def _record(battle_id):
    return BattleRecord(battle_id=battle_id, end_reason=BattleEndReason.ELIMINATION, winner_id="player1")


def test_newest_first():
    history = BattleHistory(limit=5)
    history.add(_record("a"))
    history.add(_record("b"))
    assert [r.battle_id for r in history.list()] == ["b", "a"]
    assert history.get("a").battle_id == "a"
    assert history.get("zzz") is None


def test_limit_drops_oldest():
    history = BattleHistory(limit=2)
    for battle_id in "abc":
        history.add(_record(battle_id))
    assert len(history) == 2
    assert history.get("a") is None


def test_on_record_callback():
    archived = []
    history = BattleHistory(limit=3, on_record=archived.append)
    record = _record("a")
    history.add(record)
    assert archived == [record]


def test_default_limit_from_settings():
    from minibattle.config import settings

    assert BattleHistory().limit == settings.history_limit


def test_engine_archives_finished_battles(started_battle, engine, history):
    battle_id = started_battle()
    engine.abort(battle_id, "player2")
    record = history.list()[0]
    assert record.battle_id == battle_id
    assert record.winner_name == "Hero"
    assert record.participants[0]["name"] == "Hero"
