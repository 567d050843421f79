"""CLI entrypoint using Typer.

Commands are organized into subcommand groups for database, children,
teams, roster, games (including an interactive live session) and stats.

Example:
    $ kidstats --help
    $ kidstats child add "Maya" --born 2015-04-02
    $ kidstats game live <game-id>
    $ kidstats stats career <child-id> --json
"""

from __future__ import annotations

import json
import sys
from datetime import date
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kidstats import __version__
from kidstats.config import get_settings
from kidstats.logging import configure_from_settings
from kidstats.types import KidStatsError, NoDataError, NotFoundError, StorageError

if TYPE_CHECKING:
    from kidstats.live import LiveGameSession
    from kidstats.stats import LiveStats

console = Console()

app = typer.Typer(
    name="kidstats",
    help="Youth basketball stat tracker",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

db_app = typer.Typer(name="db", help="Database commands", no_args_is_help=True)
child_app = typer.Typer(name="child", help="Child commands", no_args_is_help=True)
team_app = typer.Typer(name="team", help="Team commands", no_args_is_help=True)
roster_app = typer.Typer(name="roster", help="Roster commands", no_args_is_help=True)
game_app = typer.Typer(name="game", help="Game and live recording commands", no_args_is_help=True)
stats_app = typer.Typer(name="stats", help="Statistics commands", no_args_is_help=True)

app.add_typer(db_app, name="db")
app.add_typer(child_app, name="child")
app.add_typer(team_app, name="team")
app.add_typer(roster_app, name="roster")
app.add_typer(game_app, name="game")
app.add_typer(stats_app, name="stats")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]kidstats[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Youth basketball stat tracker.

    Track live games for your kids and review their career statistics.
    """
    configure_from_settings(get_settings(), verbose=verbose)


def _prepare_db() -> list[str]:
    from kidstats.data import init_db

    get_settings().ensure_directories()
    return init_db()


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


# =============================================================================
# Database Commands
# =============================================================================


@db_app.command("init")
def db_init() -> None:
    """Create the database and all tables."""
    tables = _prepare_db()
    console.print(f"[green]Database ready:[/green] {get_settings().db_path}")
    console.print(f"Tables: {', '.join(tables)}")


@db_app.command("status")
def db_status() -> None:
    """Show record counts."""
    from sqlalchemy import func, select

    from kidstats.data import Child, Game, Player, StatEvent, StatStore, Team, session_scope

    settings = get_settings()
    if not settings.is_memory_db and not settings.db_path_obj.exists():
        console.print(
            Panel(
                f"[bold]Database:[/bold] {settings.db_path}\n"
                "[yellow]Database not found. Run 'db init' first.[/yellow]",
                title="Data Status",
            )
        )
        return

    _prepare_db()
    with session_scope() as session:
        store = StatStore(session)
        table = Table(title="Database Status")
        table.add_column("Entity", style="cyan")
        table.add_column("Count", justify="right")
        for label, model in (
            ("Children", Child),
            ("Teams", Team),
            ("Players", Player),
            ("Games", Game),
        ):
            table.add_row(label, str(store.scalar(select(func.count()).select_from(model))))
        deleted = store.scalar(
            select(func.count()).select_from(StatEvent).where(StatEvent.is_soft_deleted.is_(True))
        )
        total = store.scalar(select(func.count()).select_from(StatEvent))
        table.add_row("Stat events", f"{total} ({deleted} undone)")
        console.print(table)


# =============================================================================
# Child Commands
# =============================================================================


@child_app.command("add")
def child_add(
    name: Annotated[str, typer.Argument(help="Child's name")],
    born: Annotated[
        str | None,
        typer.Option("--born", help="Date of birth (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Add a child."""
    from kidstats.data import RosterService, StatStore, session_scope

    try:
        dob = date.fromisoformat(born) if born else None
    except ValueError:
        _fail(f"Invalid date: {born}")
        return

    _prepare_db()
    with session_scope() as session:
        try:
            child = RosterService(StatStore(session)).create_child(name, dob)
        except ValueError as exc:
            _fail(str(exc))
            return
        console.print(f"Created child [bold]{child.name}[/bold] ({child.id})")


@child_app.command("list")
def child_list() -> None:
    """List children."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        roster = RosterService(StatStore(session))
        children = roster.list_children()
        default = roster.default_child()
        if not children:
            console.print("[yellow]No children yet. Add one with 'child add'.[/yellow]")
            return
        table = Table(title="Children")
        table.add_column("Name", style="cyan")
        table.add_column("ID")
        table.add_column("Last used", style="green")
        for child in children:
            marker = " *" if default is not None and child.id == default.id else ""
            last_used = child.last_used_at.strftime("%Y-%m-%d") if child.last_used_at else "-"
            table.add_row(f"{child.name}{marker}", child.id, last_used)
        console.print(table)


@child_app.command("default")
def child_default() -> None:
    """Show the most recently used child."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        child = RosterService(StatStore(session)).default_child()
        if child is None:
            console.print("[yellow]No children yet.[/yellow]")
            return
        console.print(f"[bold]{child.name}[/bold] ({child.id})")


# =============================================================================
# Team and Roster Commands
# =============================================================================


@team_app.command("add")
def team_add(
    name: Annotated[str, typer.Argument(help="Team name")],
    season: Annotated[str, typer.Option("--season", "-s", help="Season label")],
    org: Annotated[
        str | None, typer.Option("--org", help="League or organization")
    ] = None,
    color: Annotated[
        str | None, typer.Option("--color", help="Colour tag, e.g. #1E90FF")
    ] = None,
) -> None:
    """Add a team."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        try:
            team = RosterService(StatStore(session)).create_team(name, season, org, color)
        except ValueError as exc:
            _fail(str(exc))
            return
        console.print(f"Created team [bold]{team.name}[/bold] {team.season} ({team.id})")


@team_app.command("list")
def team_list(
    all_teams: Annotated[
        bool, typer.Option("--all", help="Include inactive teams")
    ] = False,
) -> None:
    """List teams."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        teams = RosterService(StatStore(session)).list_teams(active_only=not all_teams)
        table = Table(title="Teams")
        table.add_column("Name", style="cyan")
        table.add_column("Season")
        table.add_column("ID")
        for team in teams:
            table.add_row(team.name, team.season, team.id)
        console.print(table)


@roster_app.command("add")
def roster_add(
    child_id: Annotated[str, typer.Argument(help="Child ID")],
    team_id: Annotated[str, typer.Argument(help="Team ID")],
    jersey: Annotated[str | None, typer.Option("--jersey", "-j")] = None,
    position: Annotated[str | None, typer.Option("--position", "-p")] = None,
) -> None:
    """Put a child on a team's roster."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        try:
            player = RosterService(StatStore(session)).add_player(
                child_id, team_id, jersey, position
            )
        except NotFoundError as exc:
            _fail(str(exc))
            return
        console.print(f"Rostered player {player.id}")


# =============================================================================
# Game Commands
# =============================================================================


@game_app.command("start")
def game_start(
    team_id: Annotated[str, typer.Argument(help="Team ID")],
    child_id: Annotated[str, typer.Argument(help="Focus child ID")],
    opponent: Annotated[str, typer.Option("--opponent", "-o", help="Opponent name")],
    location: Annotated[str | None, typer.Option("--location")] = None,
) -> None:
    """Start a new game for a team, tracking one focus child."""
    from kidstats.data import RosterService, StatStore, session_scope

    _prepare_db()
    with session_scope() as session:
        roster = RosterService(StatStore(session))
        try:
            game = roster.start_game(team_id, child_id, opponent, location=location)
        except (NotFoundError, ValueError) as exc:
            _fail(str(exc))
            return
        console.print(f"Started game vs [bold]{game.opponent_name}[/bold] ({game.id})")


LIVE_HELP = (
    "Commands: <stat> (2pm 2px 3pm 3px ftm ftx reb ast stl blk to pf team), "
    "t <player-id> <1|2|3>, opp <points>, undo, score, box, end, quit"
)


@game_app.command("live")
def game_live(
    game_id: Annotated[str, typer.Argument(help="Game ID")],
) -> None:
    """Record a game interactively, one command per line."""
    from kidstats.data import StatStore, session_scope
    from kidstats.live import LiveGameSession
    from kidstats.stats import StatEventKind

    _prepare_db()
    with session_scope() as session:
        try:
            live = LiveGameSession.open(StatStore(session), game_id)
        except NotFoundError as exc:
            _fail(str(exc))
            return

        console.print(
            Panel(
                f"[bold]Opponent:[/bold] {live.game.opponent_name}\n{LIVE_HELP}",
                title="Live Game",
            )
        )
        _print_score(live)

        for raw in sys.stdin:
            parts = raw.split()
            if not parts:
                continue
            command = parts[0].lower()
            try:
                if command in ("quit", "q", "exit"):
                    break
                if command == "help":
                    console.print(LIVE_HELP)
                elif command == "undo":
                    if live.undo_last_action():
                        console.print("[yellow]Undone[/yellow]")
                    else:
                        console.print("Nothing to undo")
                elif command == "score":
                    _print_score(live)
                elif command == "box":
                    _print_box(live.current_stats)
                elif command == "end":
                    live.end_game()
                    console.print(f"[green]Final:[/green] {live.team_score}-{live.opponent_score} ({live.result.value})")
                    break
                elif command == "opp":
                    live.record_opponent_score(int(parts[1]))
                    _print_score(live)
                elif command == "t":
                    live.record_teammate_score(parts[1], int(parts[2]))
                    _print_score(live)
                else:
                    kind = StatEventKind.parse(command)
                    live.record_focus_player_stat(kind)
                    console.print(f"{kind.short_label} -> {live.current_stats.points} pts")
            except StorageError as exc:
                _fail(str(exc))
            except IndexError:
                console.print(f"[red]Missing argument.[/red] {LIVE_HELP}")
            except (ValueError, NotFoundError) as exc:
                console.print(f"[red]{exc}[/red]")


@game_app.command("show")
def game_show(
    game_id: Annotated[str, typer.Argument(help="Game ID")],
) -> None:
    """Show a game's derived score and the focus player's box score."""
    from kidstats.data import StatStore, session_scope
    from kidstats.live import LiveGameSession

    _prepare_db()
    with session_scope() as session:
        try:
            live = LiveGameSession.open(StatStore(session), game_id)
        except NotFoundError as exc:
            _fail(str(exc))
            return
        status = "Final" if live.game.is_complete else "In progress"
        console.print(f"[bold]{status}[/bold] vs {live.game.opponent_name}")
        _print_score(live)
        _print_box(live.current_stats)


def _print_score(live: LiveGameSession) -> None:
    console.print(f"Team {live.team_score} - {live.opponent_score} {live.game.opponent_name}")


def _print_box(stats: LiveStats) -> None:
    table = Table(title="Box Score")
    for column in ("PTS", "FG", "3PT", "FT", "REB", "AST", "STL", "BLK", "TO", "PF"):
        table.add_column(column, justify="right")
    table.add_row(
        str(stats.points),
        f"{stats.fg_made}-{stats.fg_attempted}",
        f"{stats.three_made}-{stats.three_attempted}",
        f"{stats.ft_made}-{stats.ft_attempted}",
        str(stats.rebounds),
        str(stats.assists),
        str(stats.steals),
        str(stats.blocks),
        str(stats.turnovers),
        str(stats.fouls),
    )
    console.print(table)


# =============================================================================
# Stats Commands
# =============================================================================


@stats_app.command("career")
def stats_career(
    child_id: Annotated[str, typer.Argument(help="Child ID")],
    as_json: Annotated[
        bool, typer.Option("--json", help="Print machine-readable JSON")
    ] = False,
) -> None:
    """Show career statistics for a child."""
    from kidstats.data import StatStore, session_scope
    from kidstats.stats.career import CareerStatsCalculator

    _prepare_db()
    with session_scope() as session:
        try:
            stats = CareerStatsCalculator(StatStore(session)).compute(child_id)
        except NoDataError:
            console.print("[yellow]No games recorded yet[/yellow]")
            return
        except KidStatsError as exc:
            _fail(f"Failed to load stats: {exc}")
            return

        if as_json:
            typer.echo(json.dumps(stats.to_dict(), indent=2))
            return

        console.print(
            Panel(
                f"[bold]Games:[/bold] {stats.total_games}\n"
                f"[bold]PPG:[/bold] {stats.points_per_game:.1f}  "
                f"[bold]RPG:[/bold] {stats.rebounds_per_game:.1f}  "
                f"[bold]APG:[/bold] {stats.assists_per_game:.1f}\n"
                f"[bold]FG:[/bold] {stats.field_goal_made}-{stats.field_goal_attempted} "
                f"({stats.field_goal_percentage:.1f}%)  "
                f"[bold]3PT:[/bold] {stats.three_point_made}-{stats.three_point_attempted} "
                f"({stats.three_point_percentage:.1f}%)  "
                f"[bold]FT:[/bold] {stats.free_throw_made}-{stats.free_throw_attempted} "
                f"({stats.free_throw_percentage:.1f}%)\n"
                f"[bold]Career highs:[/bold] {stats.career_high_points} PTS, "
                f"{stats.career_high_rebounds} REB, {stats.career_high_assists} AST",
                title=f"{stats.child_name} - Career",
            )
        )

        if stats.team_stats:
            table = Table(title="By Team")
            table.add_column("Team", style="cyan")
            table.add_column("Season")
            table.add_column("W-L-T", justify="right")
            table.add_column("PPG", justify="right")
            table.add_column("RPG", justify="right")
            table.add_column("APG", justify="right")
            for team in stats.team_stats:
                table.add_row(
                    team.team_name,
                    team.season,
                    f"{team.wins}-{team.losses}-{team.ties}",
                    f"{team.points_per_game:.1f}",
                    f"{team.rebounds_per_game:.1f}",
                    f"{team.assists_per_game:.1f}",
                )
            console.print(table)
