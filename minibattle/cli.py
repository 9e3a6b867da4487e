"""
对战命令行工具

直接调用战斗引擎，在终端里跑一场完整的对战

使用方式:
    minibattle dwarf_fighter orc_warrior --seed 42
    minibattle elf_ranger --interactive
"""
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt
from rich.table import Table

from .combat.battle_engine import BattleEngine
from .combat.catalog import get_stat_block, list_templates, random_opponent
from .combat.dice import DiceRoller
from .combat.errors import BattleError
from .combat.models.battle_log import BattleLogEntry, LogEntryType
from .combat.models.battle_session import BattleState
from .combat.rules import calculate_hit_chance
from .config import settings

# 颜色主题
COLORS = {
    LogEntryType.INITIATIVE: "bright_magenta",
    LogEntryType.TURN_START: "bright_blue",
    LogEntryType.ACTION: "bright_yellow",
    LogEntryType.DAMAGE: "bold red",
    LogEntryType.HEAL: "bright_green",
    LogEntryType.CONDITION: "cyan",
    LogEntryType.BATTLE_END: "bold bright_green",
}

# 防止双方都无行动时死循环
MAX_TURNS = 500


class BattleRenderer:
    """终端渲染"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_entry(self, entry: BattleLogEntry):
        self.console.print(f"[{COLORS[entry.type]}]{entry.message}[/]")

    def print_status(self, engine: BattleEngine, battle_id: str):
        table = Table(title="Participants")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("HP", justify="right")
        table.add_column("Side")
        for status in engine.get_participant_status(battle_id):
            hp_style = "green" if status["hp_percentage"] > 50 else "red"
            table.add_row(
                status["id"],
                status["name"],
                f"[{hp_style}]{status['current_hp']}/{status['max_hp']}[/]",
                "player" if status["is_player"] else "enemy",
            )
        self.console.print(table)

    def print_result(self, engine: BattleEngine, battle_id: str):
        record = engine.get_battle_record(battle_id)
        self.console.print(
            Panel(record.to_summary(), title="Battle Complete", border_style="green")
        )
        self.print_status(engine, battle_id)


def choose_action(console: Console, engine: BattleEngine, battle_id: str) -> bool:
    """
    交互式选择行动

    Returns:
        bool: 是否选择了行动（False 表示跳过回合）
    """
    session = engine.get_session(battle_id)
    actor = session.get_current_participant()
    actions = engine.get_available_actions(battle_id)
    if not actions:
        return False

    target = session.get_opponents(actor)[0]
    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("#", style="yellow")
    table.add_column("Action", style="white")
    table.add_column("Damage", style="dim")
    table.add_column("Hit", style="dim")
    for index, action in enumerate(actions, start=1):
        chance = (
            f"{calculate_hit_chance(action.attack_bonus, target.armor_class):.0%}"
            if action.is_attack
            else f"DC {action.save_dc}" if action.is_save else "-"
        )
        damage = action.damage.notation if action.damage else "-"
        table.add_row(str(index), action.name, damage, chance)
    console.print(Panel(table, title=f"{actor.name} vs {target.name}", border_style="red"))

    choice = IntPrompt.ask(
        "Choose an action (0 to pass)",
        choices=[str(i) for i in range(len(actions) + 1)],
        default=1,
    )
    if choice == 0:
        return False
    engine.select_action(battle_id, actions[choice - 1].name, target.id)
    return True


def run_battle(
    player: str,
    opponent: Optional[str],
    seed: Optional[int] = None,
    interactive: bool = False,
    console: Optional[Console] = None,
) -> str:
    """跑完一场战斗，返回战斗ID"""
    renderer = BattleRenderer(console)
    roller = DiceRoller(seed=seed)
    engine = BattleEngine(roller=roller, event_sink=renderer.print_entry)

    opponent_block = get_stat_block(opponent) if opponent else random_opponent(roller)
    battle_id = engine.initialize_battle(get_stat_block(player), opponent_block)
    engine.roll_initiative(battle_id)

    session = engine.get_session(battle_id)
    for _ in range(MAX_TURNS):
        if session.state == BattleState.BATTLE_COMPLETE:
            break
        if interactive and engine.is_player_turn(battle_id):
            if choose_action(renderer.console, engine, battle_id):
                engine.resolve_selected_action(battle_id)
            else:
                engine.pass_turn(battle_id)
        else:
            # 双方都由随机策略驱动：直接让计时归零触发自动行动
            engine.tick_timer(battle_id, session.turn_timer)
    else:
        engine.abort(battle_id)

    renderer.print_result(engine, battle_id)
    return battle_id


def main(argv: Optional[List[str]] = None) -> int:
    """主入口"""
    templates = list_templates()
    parser = argparse.ArgumentParser(description="Miniature battle simulator")
    parser.add_argument("player", choices=templates, help="player miniature")
    parser.add_argument(
        "opponent", nargs="?", choices=templates, help="opponent miniature (random if omitted)"
    )
    parser.add_argument("--seed", type=int, default=None, help="dice seed for a reproducible battle")
    parser.add_argument("--interactive", action="store_true", help="choose the player's actions")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    console = Console()
    try:
        run_battle(
            args.player,
            args.opponent,
            seed=args.seed,
            interactive=args.interactive,
            console=console,
        )
    except BattleError as exc:
        console.print(f"[bright_red]Error: {exc}[/]")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
