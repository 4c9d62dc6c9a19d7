"""Entry point for hoops package."""

import argparse
import logging

from rich import box
from rich.console import Console
from rich.table import Table

from hoops.simulation.ai.difficulty import DIFFICULTIES, DEFAULT_DIFFICULTY


def _box_score_table(match, side) -> Table:
    team = match.ctx.team(side)
    table = Table(title=team.name, box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Player", style="green")
    table.add_column("POS", justify="center", style="yellow")
    table.add_column("PTS", justify="right", style="bold")
    table.add_column("FG", justify="right")
    table.add_column("3PT", justify="right")
    table.add_column("REB", justify="right")
    table.add_column("AST", justify="right")
    table.add_column("STL", justify="right")
    table.add_column("BLK", justify="right")
    table.add_column("TO", justify="right")
    table.add_column("PF", justify="right")

    for player in team.roster:
        s = player.stats
        table.add_row(
            str(player.number),
            player.name,
            player.role.value,
            str(s.points),
            f"{s.shots_made}/{s.shots_attempted}",
            f"{s.three_made}/{s.three_attempted}",
            str(s.rebounds),
            str(s.assists),
            str(s.steals),
            str(s.blocks),
            str(s.turnovers),
            str(s.fouls),
        )

    t = team.stats
    table.add_row(
        "",
        "TEAM",
        "",
        str(t.points),
        f"{t.field_goals_made}/{t.field_goals_attempted}",
        f"{t.threes_made}/{t.threes_attempted}",
        str(t.rebounds),
        str(t.assists),
        str(t.steals),
        str(t.blocks),
        str(t.turnovers),
        str(t.fouls),
        style="bold",
    )
    return table


def run_demo(args: argparse.Namespace) -> None:
    """Headless autopilot match with a box score at the end."""
    from hoops.logging import GameLog
    from hoops.simulation import MatchConfig, Orchestrator, TeamDescriptor
    from hoops.simulation.core.court import Side

    console = Console()
    config = MatchConfig(
        home=TeamDescriptor(args.home, "#552583", "#FDB927"),
        away=TeamDescriptor(args.away, "#007A33", "#FFFFFF"),
        difficulty=args.difficulty,
        quarter_length=args.quarter_minutes * 60,
        seed=args.seed,
        autopilot=True,
    )
    match = Orchestrator(config)
    game_log = GameLog(args.home, args.away)
    game_log.connect_to_event_bus(match.event_bus, match.state)

    console.print("[bold]Hoops - Arcade Basketball Simulator (Demo Mode)[/bold]")
    console.print(f"{args.home} vs {args.away}, difficulty {args.difficulty}, seed {args.seed}\n")

    if args.seconds is not None:
        match.simulate(args.seconds)
    else:
        # Four quarters plus slack; simulate stops at game end
        match.simulate(config.quarter_length * 4 + 5)

    if args.play_by_play:
        console.print(game_log.format_play_by_play(last_n=args.play_by_play))
        console.print()

    console.print(_box_score_table(match, Side.HOME))
    console.print(_box_score_table(match, Side.AWAY))

    state = match.state
    status = "Final" if state.game_over else f"Q{state.quarter} {match.clock_display()}"
    console.print(
        f"\n[bold]{status}:[/bold] {args.home} {state.score[Side.HOME]} - "
        f"{args.away} {state.score[Side.AWAY]}"
    )


def main() -> None:
    """Main entry point for the Hoops application."""
    parser = argparse.ArgumentParser(
        description="Hoops - Arcade Basketball Simulator",
        prog="hoops",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run a headless autopilot match and print the box score",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the API server",
    )
    parser.add_argument(
        "--home",
        type=str,
        default="Lakers",
        help="Home team name (default: Lakers)",
    )
    parser.add_argument(
        "--away",
        type=str,
        default="Celtics",
        help="Away team name (default: Celtics)",
    )
    parser.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTIES),
        default=DEFAULT_DIFFICULTY,
        help=f"AI difficulty (default: {DEFAULT_DIFFICULTY})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible match",
    )
    parser.add_argument(
        "--quarter-minutes",
        type=int,
        default=3,
        help="Quarter length in minutes for the demo (default: 3)",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Stop the demo after this much game time instead of playing it out",
    )
    parser.add_argument(
        "--play-by-play",
        type=int,
        default=0,
        metavar="N",
        help="Print the last N play-by-play rows after the demo",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1", help="API host")
    parser.add_argument("--port", type=int, default=8000, help="API port")
    parser.add_argument("--reload", action="store_true", help="Reload the API on code changes")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log match lifecycle")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.serve:
        from hoops.api.main import run_api

        run_api(host=args.host, port=args.port, reload=args.reload)
    elif args.demo:
        run_demo(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
