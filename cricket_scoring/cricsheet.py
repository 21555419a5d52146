"""
cricket_scoring/cricsheet.py
============================

Replays Cricsheet JSON match records through the engine.

    record = load_match("data/1234567.json")
    game = build_game(record)
    game.record_outcome().same_result(recorded_outcome(record))

Only the fields the engine needs are read: teams, players, match type and
over allocation, the innings with their deliveries, targets, penalty runs,
declarations and forfeitures, and the recorded outcome.  Super overs are
skipped; the engine resolves the main match only.
"""

import json
import logging
import math
from dataclasses import replace
from typing import Any, Dict, Optional

from cricket_scoring.delivery import Delivery, DismissalKind, delivery
from cricket_scoring.errors import ScoringError, ValidationError
from cricket_scoring.format_config import MatchFormat, get_format
from cricket_scoring.game import Game, Team
from cricket_scoring.outcome import Margin, Outcome, ResultKind, ResultMethod
from cricket_scoring.revised_target import RevisedTargetPolicy

logger = logging.getLogger(__name__)

# Cricsheet match_type -> registry name
MATCH_TYPES = {
    "T20": "T20",
    "IT20": "T20",
    "ODI": "ODI",
    "ODM": "ODI",
    "Test": "Test",
    "MDM": "FirstClass",
}

# Outcome methods that mean the result came from a revised target.
REVISED_METHODS = {"D/L", "DLS", "VJD"}


class RecordError(ValidationError):
    """A Cricsheet record the engine cannot represent."""


def load_match(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Record -> engine values
# ---------------------------------------------------------------------------

def match_format_for(info: Dict[str, Any]) -> MatchFormat:
    """Registry format for the match type, adjusted to the recorded overs and ball count."""
    match_type = info.get("match_type")
    fmt = get_format(MATCH_TYPES.get(match_type, match_type))
    overs = info.get("overs")
    if overs is not None and fmt.limited_overs and overs != fmt.overs:
        fmt = fmt.with_overs(int(overs))
    balls_per_over = info.get("balls_per_over")
    if balls_per_over and balls_per_over != fmt.balls_per_over:
        fmt = replace(fmt, balls_per_over=int(balls_per_over))
    return fmt


def parse_delivery(over: int, ball: int, data: Dict[str, Any]) -> Delivery:
    """One entry of an over's "deliveries" list."""
    runs = data.get("runs") or {}
    extras = data.get("extras") or {}
    wickets = data.get("wickets") or []
    if len(wickets) > 1:
        raise RecordError(f"over {over}.{ball}: {len(wickets)} wickets on one delivery")

    wicket = player_out = None
    fielders = ()
    if wickets:
        entry = wickets[0]
        try:
            wicket = DismissalKind(entry.get("kind"))
        except ValueError as e:
            raise RecordError(f"over {over}.{ball}: unknown dismissal '{entry.get('kind')}'") from e
        player_out = entry.get("player_out")
        fielders = tuple(f["name"] for f in entry.get("fielders") or [] if f.get("name"))

    try:
        parsed = delivery(
            over, ball,
            striker=data.get("batter"),
            non_striker=data.get("non_striker"),
            bowler=data.get("bowler"),
            runs=int(runs.get("batter", 0)),
            wides=int(extras.get("wides", 0)),
            noballs=int(extras.get("noballs", 0)),
            byes=int(extras.get("byes", 0)),
            legbyes=int(extras.get("legbyes", 0)),
            penalty=int(extras.get("penalty", 0)),
            wicket=wicket,
            player_out=player_out,
            fielders=fielders,
            non_boundary=bool(runs.get("non_boundary", False)),
        )
    except ValidationError as e:
        raise RecordError(f"over {over}.{ball}: {e}", e.delivery) from e

    total = runs.get("total")
    if total is not None and total != parsed.total_runs:
        raise RecordError(
            f"over {over}.{ball}: total {total} does not match components ({parsed.total_runs})",
            parsed,
        )
    return parsed


def recorded_outcome(record: Dict[str, Any]) -> Outcome:
    """The result as Cricsheet recorded it."""
    outcome = (record.get("info") or {}).get("outcome") or {}
    method = ResultMethod.REVISED if outcome.get("method") in REVISED_METHODS else ResultMethod.NORMAL
    result = outcome.get("result")

    if result == "draw":
        return Outcome.draw()
    if result == "tie":
        return Outcome.tie(method)
    if result == "no result":
        return Outcome.no_result()

    winner = outcome.get("winner")
    if winner is None:
        raise RecordError(f"outcome has neither a result nor a winner: {outcome}")
    by = outcome.get("by") or {}
    if "runs" in by:
        return Outcome.win_by_runs(winner, int(by["runs"]), innings=bool(by.get("innings")),
                                   method=method)
    if "wickets" in by:
        return Outcome.win_by_wickets(winner, int(by["wickets"]), method=method)
    # Awarded matches carry a winner and no margin.
    return Outcome(ResultKind.WIN, winner, Margin(), method)


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------

def build_game(record: Dict[str, Any], policy: Optional[RevisedTargetPolicy] = None,
               match_id: Optional[str] = None) -> Game:
    """
    Build a Game from a record and replay every innings into it.

    The game is left finished: decided by its innings, ended (drawable
    formats) or abandoned (limited overs) when the record stops short.
    """
    info = record.get("info") or {}
    names = info.get("teams") or []
    if len(names) != 2:
        raise RecordError(f"expected two teams, found {names}")
    players = info.get("players") or {}
    team1, team2 = (Team(name, tuple(players.get(name, ()))) for name in names)

    game = Game(
        team1, team2, match_format_for(info),
        revised_target_policy=policy,
        match_id=match_id,
        venue=info.get("venue"),
        dates=info.get("dates") or (),
        event=(info.get("event") or {}).get("name"),
    )

    for entry in record.get("innings") or []:
        if entry.get("super_over"):
            logger.debug(f"{game.title}: skipping super over")
            continue
        try:
            _replay_innings(game, entry)
        except RecordError:
            raise
        except ScoringError as e:
            raise RecordError(f"{game.title}, {entry.get('team')} innings: {e}") from e

    if not game.is_finished:
        if game.format.allows_draw:
            game.end_play()
        else:
            game.abandon("record ends before a result")
    return game


def _replay_innings(game: Game, entry: Dict[str, Any]) -> None:
    batting = entry.get("team")
    if game.current_innings is not None:
        _close_unfinished(game)

    if entry.get("forfeited"):
        game.forfeit_innings(batting)
        return

    previous = game.innings
    follow_on = bool(previous) and previous[-1].batting_team == batting
    penalties = entry.get("penalty_runs") or {}
    target = entry.get("target") or {}

    explicit_target = None
    if target and len(previous) + 1 == game.format.max_innings:
        overs = target.get("overs")
        if overs is not None and game.format.limited_overs:
            overs = int(math.ceil(float(overs)))
            if overs < game.format.overs:
                game.flag_stoppage(overs, reason="reduced overs")
        explicit_target = target.get("runs")

    game.start_innings(batting, target=explicit_target, follow_on=follow_on,
                       penalty_runs=int(penalties.get("pre", 0)))

    for over in entry.get("overs") or []:
        number = int(over.get("over", 0))
        for index, data in enumerate(over.get("deliveries") or [], start=1):
            game.bowl(parse_delivery(number, index, data))

    post = int(penalties.get("post", 0))
    if post:
        if game.current_innings is not None:
            game.award_penalty(post)
        else:
            logger.warning(f"{game.title}: {post} post-innings penalty run(s) after {batting} innings closed; ignored")

    if entry.get("declared") and game.current_innings is not None:
        game.declare()


def _close_unfinished(game: Game) -> None:
    """The record moved on from an innings the engine still has open."""
    innings = game.current_innings
    if game.format.limited_overs:
        overs = math.ceil(innings.score.legal_balls / game.format.balls_per_over) or 1
        game.flag_stoppage(overs, reason="innings curtailed")
    if game.current_innings is not None:
        logger.warning(f"{game.title}: closing {innings.batting_team} innings at {innings.score}")
        game.declare()
