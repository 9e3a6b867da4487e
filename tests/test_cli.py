import io

import pytest
from rich.console import Console

from minibattle import cli


def _console():
    return Console(file=io.StringIO(), width=120, color_system=None)


def test_run_battle_plays_to_completion():
    console = _console()
    battle_id = cli.run_battle("dwarf_fighter", "orc_warrior", seed=42, console=console)

    output = console.file.getvalue()
    assert battle_id.startswith("battle_")
    assert "Initiative rolled!" in output
    assert "Battle Complete" in output
    assert "Dwarf Fighter" in output


def test_same_seed_same_battle():
    first, second = _console(), _console()
    cli.run_battle("gnome_rogue", "goblin_shaman", seed=7, console=first)
    cli.run_battle("gnome_rogue", "goblin_shaman", seed=7, console=second)
    assert first.file.getvalue() == second.file.getvalue()


def test_random_opponent_when_omitted():
    console = _console()
    cli.run_battle("human_wizard", None, seed=1, console=console)
    output = console.file.getvalue()
    assert "Orc Warrior" in output or "Goblin Shaman" in output


def test_interactive_pass(monkeypatch):
    monkeypatch.setattr(cli.IntPrompt, "ask", lambda *args, **kwargs: 0)
    console = _console()
    cli.run_battle("orc_barbarian", "orc_warrior", seed=5, interactive=True, console=console)
    assert "Battle Complete" in console.file.getvalue()


def test_main_returns_zero(capsys):
    assert cli.main(["elf_ranger", "orc_warrior", "--seed", "3"]) == 0
    assert "Battle Complete" in capsys.readouterr().out


def test_main_rejects_unknown_miniature():
    with pytest.raises(SystemExit):
        cli.main(["tarrasque"])
