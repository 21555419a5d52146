"""
cricket_scoring/game.py
=======================

A match between two teams: the ordered innings, the format they are played
under, and the stored outcome.

Game is the only mutable object in the engine, and it changes in exactly two
ways: a finished innings is appended to its sequence, and the outcome is
stored once.  The innings in progress is held separately as a frozen Innings
value that is replaced after each transition.

Usage
-----
    game = Game(Team("A"), Team("B"), get_format("T20"))
    game.start_innings("A")
    for d in first_innings_deliveries:
        game.bowl(d)
    game.start_innings("B")          # target set automatically
    ...
    outcome = game.record_outcome()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from cricket_scoring.delivery import Delivery
from cricket_scoring.errors import SequenceError
from cricket_scoring.format_config import MatchFormat
from cricket_scoring.innings import ClosureReason, Innings
from cricket_scoring.outcome import Outcome
from cricket_scoring.revised_target import InterruptedState, RevisedTargetPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Team:
    name: str
    players: Tuple[str, ...] = ()


class GameStatus(str, Enum):
    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class Stoppage:
    """Play lost to an interruption; the affected innings is allotted overs_available."""
    overs_available: int
    innings_number: int
    reason: str = "rain"


@dataclass(frozen=True)
class FollowOn:
    enforced_by: str
    lead: int


class Game:
    """
    Parameters
    ----------
    team1, team2          : the two Team records
    match_format          : MatchFormat the match is played under
    revised_target_policy : optional callable InterruptedState -> target; only
                            consulted once a stoppage has been flagged
    match_id, title, venue, dates, event : metadata carried through untouched
    """

    def __init__(self, team1: Team, team2: Team, match_format: MatchFormat,
                 revised_target_policy: Optional[RevisedTargetPolicy] = None,
                 match_id: Optional[str] = None, title: Optional[str] = None,
                 venue: Optional[str] = None, dates: Sequence[str] = (),
                 event: Optional[str] = None):
        if team1.name == team2.name:
            raise SequenceError(f"both teams are called {team1.name}")
        self.team1 = team1
        self.team2 = team2
        self.format = match_format
        self.revised_target_policy = revised_target_policy
        self.match_id = match_id
        self.title = title or f"{team1.name} vs {team2.name}"
        self.venue = venue
        self.dates = tuple(dates)
        self.event = event

        self.status = GameStatus.NOT_STARTED
        self.stoppages: List[Stoppage] = []
        self.follow_on: Optional[FollowOn] = None
        self.revised_target: Optional[int] = None
        self.abandon_reason: Optional[str] = None
        self._innings: List[Innings] = []
        self._current: Optional[Innings] = None
        self._outcome: Optional[Outcome] = None

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    @property
    def teams(self) -> Tuple[Team, Team]:
        return (self.team1, self.team2)

    @property
    def innings(self) -> Tuple[Innings, ...]:
        """Closed innings, in the order they were played."""
        return tuple(self._innings)

    @property
    def current_innings(self) -> Optional[Innings]:
        return self._current

    @property
    def all_innings(self) -> Tuple[Innings, ...]:
        if self._current is None:
            return self.innings
        return self.innings + (self._current,)

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def stoppage(self) -> Optional[Stoppage]:
        return self.stoppages[-1] if self.stoppages else None

    @property
    def is_finished(self) -> bool:
        return self.status in (GameStatus.COMPLETED, GameStatus.ABANDONED)

    def opponent(self, team_name: str) -> str:
        if team_name == self.team1.name:
            return self.team2.name
        if team_name == self.team2.name:
            return self.team1.name
        raise SequenceError(f"{team_name} is not playing in {self.title}")

    def innings_for(self, team_name: str) -> List[Innings]:
        return [i for i in self.all_innings if i.batting_team == team_name]

    def team_total(self, team_name: str) -> int:
        self.opponent(team_name)
        return sum(i.runs for i in self.innings_for(team_name))

    def is_decided(self) -> bool:
        """True once the innings played force a result on their own."""
        from cricket_scoring.resolver import forced_result
        return forced_result(self) is not None

    # ------------------------------------------------------------------ #
    # Innings sequencing                                                   #
    # ------------------------------------------------------------------ #

    def start_innings(self, batting_team: str, bowling_team: Optional[str] = None,
                      target: Optional[int] = None, follow_on: bool = False,
                      penalty_runs: int = 0) -> Innings:
        """
        Open the next innings.

        For the last innings the format allows, the target is set to the
        runs needed to pass the opposition's aggregate, or to the revised
        target when a stoppage has been flagged and a policy is installed.
        An explicit target overrides both, and is only accepted for that
        last innings.
        """
        number = self._check_next_innings(batting_team, bowling_team, follow_on)
        if target is not None and number != self.format.max_innings:
            raise SequenceError(
                f"innings {number} is not the final innings of {self.format.name}; only a chase has a target"
            )
        bowling_team = self.opponent(batting_team)

        ball_limit = self._ball_limit_for(number)
        if number == self.format.max_innings:
            if target is None:
                target = self._chase_target(batting_team, ball_limit)
            elif self.stoppages and self.format.limited_overs:
                # An explicit target after lost time is the revised one.
                self.revised_target = target

        innings = Innings.open(
            batting_team,
            bowling_team,
            self.format.innings_rules(ball_limit),
            target=target,
            number=number,
            penalty_runs=penalty_runs,
        )
        self.status = GameStatus.IN_PROGRESS
        logger.info(
            f"Innings {number}: {batting_team} batting"
            + (f", target {target}" if target is not None else "")
        )
        self._store(innings)
        return innings

    def forfeit_innings(self, batting_team: str, bowling_team: Optional[str] = None) -> Innings:
        self.start_innings(batting_team, bowling_team)
        return self._apply(lambda innings: innings.forfeit())

    def bowl(self, delivery: Delivery) -> Innings:
        return self._apply(lambda innings: innings.bowl(delivery))

    def declare(self) -> Innings:
        return self._apply(lambda innings: innings.declare())

    def award_penalty(self, runs: int) -> Innings:
        return self._apply(lambda innings: innings.award_penalty(runs))

    # ------------------------------------------------------------------ #
    # Interruptions                                                        #
    # ------------------------------------------------------------------ #

    def flag_stoppage(self, overs_available: int, reason: str = "rain") -> Stoppage:
        """
        Record lost time in a limited-overs match.

        The innings in progress (or, between innings, the next one) is
        allotted overs_available overs.  A chase is re-targeted through the
        revised-target policy when one is installed.
        """
        if not self.format.limited_overs:
            raise SequenceError(f"{self.format.name} has no over allocation to reduce")
        if self.is_finished:
            raise SequenceError(f"{self.title} is already {self.status.value}")
        if overs_available <= 0:
            raise SequenceError("a stoppage must leave at least one over; abandon the match instead")

        number = self._current.number if self._current is not None else len(self._innings) + 1
        if number > self.format.max_innings:
            raise SequenceError("every innings has already been played")
        if overs_available > self.format.overs:
            raise SequenceError(
                f"{self.format.name} innings are {self.format.overs} overs; a stoppage cannot allot {overs_available}"
            )
        allotted = self._current.rules.ball_limit if self._current is not None else None
        if allotted is not None and overs_available * self.format.balls_per_over > allotted:
            raise SequenceError(
                f"innings {number} already has only {allotted} balls; a stoppage cannot add overs"
            )

        stoppage = Stoppage(overs_available, number, reason)
        self.stoppages.append(stoppage)
        logger.info(f"Stoppage ({reason}): innings {number} allotted {overs_available} overs")

        if self._current is not None:
            balls = overs_available * self.format.balls_per_over
            target = None
            if number == self.format.max_innings:
                target = self._revised_target(balls, self._current)
            self._apply(lambda innings: innings.revise(target=target, ball_limit=balls))
        return stoppage

    def end_play(self) -> None:
        """Time has run out in a drawable format."""
        if not self.format.allows_draw:
            raise SequenceError(
                f"{self.format.name} matches cannot run out of time; abandon the match instead"
            )
        if self.is_finished:
            raise SequenceError(f"{self.title} is already {self.status.value}")
        if self._current is not None:
            self._apply(lambda innings: innings.stop(ClosureReason.PLAY_ENDED))
        self.status = GameStatus.COMPLETED
        logger.info(f"Play ended in {self.title}")

    def abandon(self, reason: str = "rain") -> None:
        if self.is_finished:
            raise SequenceError(f"{self.title} is already {self.status.value}")
        if self._current is not None:
            self._apply(lambda innings: innings.stop(ClosureReason.ABANDONED))
        self.status = GameStatus.ABANDONED
        self.abandon_reason = reason
        logger.info(f"{self.title} abandoned ({reason})")

    # ------------------------------------------------------------------ #
    # Outcome                                                              #
    # ------------------------------------------------------------------ #

    def record_outcome(self, policy: Optional[RevisedTargetPolicy] = None) -> Outcome:
        """
        Resolve and store the outcome.  Calling it again returns the stored
        value without resolving a second time.
        """
        if self._outcome is not None:
            return self._outcome
        from cricket_scoring.resolver import resolve
        outcome = resolve(self, policy or self.revised_target_policy)
        self._outcome = outcome
        if self.status is GameStatus.IN_PROGRESS:
            self.status = GameStatus.COMPLETED
        logger.info(f"{self.title}: {outcome.describe()}")
        return outcome

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _check_next_innings(self, batting_team: str, bowling_team: Optional[str],
                            follow_on: bool) -> int:
        opponent = self.opponent(batting_team)
        if bowling_team is not None and bowling_team != opponent:
            raise SequenceError(f"{bowling_team} cannot bowl to {batting_team}")
        if self.is_finished:
            raise SequenceError(f"{self.title} is already {self.status.value}")
        if self._current is not None:
            raise SequenceError(
                f"innings {self._current.number} ({self._current.batting_team}) is still open"
            )

        number = len(self._innings) + 1
        if number > self.format.max_innings:
            raise SequenceError(f"{self.format.name} allows only {self.format.max_innings} innings")
        if len(self.innings_for(batting_team)) >= self.format.innings_per_side:
            raise SequenceError(f"{batting_team} has no innings left")
        if self._innings and self.is_decided():
            raise SequenceError(f"{self.title} has already been decided")

        if follow_on:
            self._check_follow_on(batting_team, number)
        elif self._innings and self._innings[-1].batting_team == batting_team:
            raise SequenceError(f"{batting_team} batted last; only an enforced follow-on allows that")
        return number

    def _check_follow_on(self, batting_team: str, number: int) -> None:
        threshold = self.format.follow_on_threshold
        if threshold is None:
            raise SequenceError(f"{self.format.name} has no follow-on")
        if number != 3:
            raise SequenceError("the follow-on can only be enforced for the third innings")
        first, second = self._innings[0], self._innings[1]
        if second.batting_team != batting_team:
            raise SequenceError(f"only {second.batting_team} can be asked to follow on")
        lead = first.runs - second.runs
        if lead < threshold:
            raise SequenceError(
                f"{first.batting_team} lead by {lead}; the follow-on needs {threshold}"
            )
        self.follow_on = FollowOn(enforced_by=first.batting_team, lead=lead)
        logger.info(f"{first.batting_team} enforce the follow-on with a lead of {lead}")

    def _ball_limit_for(self, number: int) -> Optional[int]:
        limit = self.format.ball_limit
        for stoppage in self.stoppages:
            if stoppage.innings_number <= number:
                limit = stoppage.overs_available * self.format.balls_per_over
        return limit

    def _chase_target(self, batting_team: str, ball_limit: Optional[int]) -> int:
        natural = self.team_total(self.opponent(batting_team)) - self.team_total(batting_team) + 1
        if self.stoppages and self.format.limited_overs:
            revised = self._revised_target(ball_limit, None)
            if revised is not None:
                return revised
        return natural

    def _revised_target(self, chase_balls: int, chase: Optional[Innings]) -> Optional[int]:
        if self.revised_target_policy is None or not self._innings:
            return None
        first = self._innings[0]
        state = InterruptedState(
            first_innings_runs=first.runs,
            first_innings_balls=first.rules.ball_limit or first.score.legal_balls,
            chase_balls=chase_balls,
            chase_balls_faced=chase.score.legal_balls if chase else 0,
            chase_runs=chase.runs if chase else 0,
            chase_wickets=chase.score.wickets if chase else 0,
            max_wickets=self.format.max_wickets,
            balls_per_over=self.format.balls_per_over,
        )
        self.revised_target = self.revised_target_policy(state)
        logger.info(f"Revised target: {self.revised_target} from {chase_balls} balls")
        return self.revised_target

    def _apply(self, transition: Callable[[Innings], Innings]) -> Innings:
        if self._current is None:
            if self._innings:
                # The last innings is closed; let it raise InningsClosedError.
                transition(self._innings[-1])
            raise SequenceError("no innings has been started")
        updated = transition(self._current)
        self._store(updated)
        return updated

    def _store(self, innings: Innings) -> None:
        if innings.is_open:
            self._current = innings
            return
        self._current = None
        self._innings.append(innings)
        if innings.closure not in (ClosureReason.PLAY_ENDED, ClosureReason.ABANDONED) \
                and self.is_decided():
            self.status = GameStatus.COMPLETED
            logger.debug(f"{self.title} decided after innings {innings.number}")


__all__ = [
    "Game",
    "GameStatus",
    "Team",
    "Stoppage",
    "FollowOn",
]
