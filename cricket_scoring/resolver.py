"""
cricket_scoring/resolver.py
===========================

Turns a game's innings into an Outcome.

Resolution order:
    1. a result the innings force on their own
         - the final chase reached its target          -> win by wickets
         - the final chase completed short of it       -> win by runs
         - the final chase completed level with it     -> tie
         - a side has completed all its innings and
           trails an opponent with an innings unplayed -> innings win
       (a declared or forfeited innings counts as completed)
    2. an abandoned limited-overs match with enough of the chase bowled,
       settled against the par score from the revised-target policy
    3. an abandoned match otherwise                    -> no result
    4. a drawable match where play ended               -> draw

A game that is still in progress and undecided cannot be resolved.
"""

import logging
from typing import Optional

from cricket_scoring.errors import UnresolvableOutcomeError
from cricket_scoring.game import Game, GameStatus
from cricket_scoring.innings import COMPLETED_CLOSURES, ClosureReason, Innings
from cricket_scoring.outcome import Outcome, ResultMethod
from cricket_scoring.revised_target import InterruptedState, RevisedTargetPolicy

logger = logging.getLogger(__name__)


def resolve(game: Game, policy: Optional[RevisedTargetPolicy] = None) -> Outcome:
    outcome = forced_result(game)
    if outcome is None:
        if game.status is GameStatus.ABANDONED:
            outcome = _abandoned_result(game, policy)
        elif game.status is GameStatus.COMPLETED and game.format.allows_draw:
            outcome = Outcome.draw()
        else:
            raise UnresolvableOutcomeError(
                f"{game.title} is {game.status.value} and not yet decided"
            )
    logger.debug(f"Resolved {game.title}: {outcome}")
    return outcome


def forced_result(game: Game) -> Optional[Outcome]:
    """The result the closed innings already guarantee, or None."""
    if not game.innings:
        return None
    last = game.innings[-1]
    method, revised_target = _method_for(game, last)

    if last.closure is ClosureReason.TARGET_REACHED:
        return Outcome.win_by_wickets(
            last.batting_team, last.wickets_remaining, last.balls_remaining,
            method, revised_target,
        )
    if last.closure not in COMPLETED_CLOSURES:
        return None

    if last.target is not None and last.number == game.format.max_innings:
        shortfall = last.target - 1 - last.runs
        if shortfall > 0:
            return Outcome.win_by_runs(last.bowling_team, shortfall, False, method, revised_target)
        if shortfall == 0:
            return Outcome.tie(method, revised_target)

    batting = last.batting_team
    opponent = last.bowling_team
    innings_left = game.format.innings_per_side - len(game.innings_for(opponent))
    if len(game.innings_for(batting)) == game.format.innings_per_side and innings_left > 0:
        deficit = game.team_total(opponent) - game.team_total(batting)
        if deficit > 0:
            return Outcome.win_by_runs(opponent, deficit, innings=True)
    return None


def _method_for(game: Game, innings: Innings):
    if game.revised_target is not None and innings.target == game.revised_target \
            and innings.number == game.format.max_innings:
        return ResultMethod.REVISED, game.revised_target
    return ResultMethod.NORMAL, None


def _abandoned_result(game: Game, policy: Optional[RevisedTargetPolicy]) -> Outcome:
    fmt = game.format
    if policy is None or not fmt.limited_overs or len(game.innings) < 2:
        return Outcome.no_result()

    first, chase = game.innings[0], game.innings[1]
    faced = chase.score.legal_balls
    if fmt.min_balls_for_result is None or faced < fmt.min_balls_for_result:
        logger.debug(f"{game.title}: chase faced {faced} balls, too few for a result")
        return Outcome.no_result()

    state = InterruptedState(
        first_innings_runs=first.runs,
        first_innings_balls=first.rules.ball_limit or first.score.legal_balls,
        chase_balls=faced,
        chase_balls_faced=faced,
        chase_runs=chase.runs,
        chase_wickets=chase.score.wickets,
        max_wickets=fmt.max_wickets,
        balls_per_over=fmt.balls_per_over,
    )
    target = policy(state)
    par = target - 1
    logger.debug(f"{game.title}: par score {par} after {faced} balls, {chase.batting_team} on {chase.runs}")

    if chase.runs > par:
        return Outcome.win_by_wickets(
            chase.batting_team, chase.wickets_remaining, None, ResultMethod.REVISED, target,
        )
    if chase.runs == par:
        return Outcome.tie(ResultMethod.REVISED, target)
    return Outcome.win_by_runs(chase.bowling_team, par - chase.runs, False, ResultMethod.REVISED, target)
