"""Text scorecards rendered with tabulate."""

from typing import List, Sequence

from tabulate import tabulate

from cricket_scoring.game import Game
from cricket_scoring.innings import Innings

BATTING_HEADERS = ['Player', 'Runs', 'Balls', '4s', '6s', 'S/R', 'Status']
BOWLING_HEADERS = ['Bowler', 'Overs', 'Maidens', 'Runs', 'Wickets', 'Economy', 'Wides', 'No Balls']


def _ordinal(n: int) -> str:
    suffix = {1: "ST", 2: "ND", 3: "RD"}.get(n if n < 20 else n % 10, "TH")
    return f"{n}{suffix}"


def batting_table(innings: Innings, squad: Sequence[str] = ()) -> str:
    """Batting card; squad members who never came in are listed as did not bat."""
    rows = []
    seen = set()
    for fig in innings.batting_figures():
        seen.add(fig.player)
        rows.append([
            fig.player,
            fig.runs,
            fig.balls,
            fig.fours,
            fig.sixes,
            f"{fig.strike_rate:.1f}",
            fig.status,
        ])
    for player in squad:
        if player not in seen:
            rows.append([player, "-", "-", "-", "-", "-", "did not bat"])

    if not rows:
        rows.append(["No batting data available", "-", "-", "-", "-", "-", "-"])

    score = innings.score
    extras = score.extras
    rows.append([
        "Extras",
        extras.total,
        "",
        "",
        "",
        "",
        f"w {extras.wides}, nb {extras.no_balls}, b {extras.byes}, lb {extras.leg_byes}, pen {extras.penalties}",
    ])
    rows.append(["Total", f"{score.runs}/{score.wickets}", innings.overs_notation(), "", "", "", ""])
    return tabulate(rows, headers=BATTING_HEADERS, tablefmt="grid", disable_numparse=True)


def bowling_table(innings: Innings) -> str:
    bpo = innings.rules.balls_per_over
    rows = [
        [
            fig.bowler,
            fig.overs_notation(bpo),
            fig.maidens,
            fig.runs,
            fig.wickets,
            f"{fig.economy(bpo):.2f}",
            fig.wides,
            fig.no_balls,
        ]
        for fig in innings.bowling_figures()
    ]
    if not rows:
        rows.append(["No bowling data available", "-", "-", "-", "-", "-", "-", "-"])
    return tabulate(rows, headers=BOWLING_HEADERS, tablefmt="grid", disable_numparse=True)


def format_scorecard(game: Game) -> str:
    output: List[str] = []
    output.append("=" * 80)
    output.append(game.title.upper())
    output.append("=" * 80)

    squads = {team.name: team.players for team in game.teams}
    for innings in game.all_innings:
        heading = _ordinal(innings.number)
        output.append(f"\n{heading} INNINGS - {innings.batting_team} BATTING")
        output.append("-" * 50)
        output.append(batting_table(innings, squads.get(innings.batting_team, ())))

        output.append(f"\n{heading} INNINGS - {innings.bowling_team} BOWLING")
        output.append("-" * 50)
        output.append(bowling_table(innings))

    if game.outcome is not None:
        output.append(f"\nMATCH RESULT: {game.outcome}")

    return "\n".join(output)
