"""
cricket_scoring/innings.py
==========================

The innings state machine.

An innings is OPEN while it accepts deliveries and CLOSED once any closing
condition is met.  CLOSED is terminal and always carries the ClosureReason
that ended it; the outcome resolver relies on that reason (a chase that
reached its target is a different result from a chase that ran out of
wickets).

Innings values are frozen.  Every transition (bowl, declare, forfeit, stop,
award_penalty, revise) returns a new Innings and leaves the original alone,
so any earlier snapshot can be kept and inspected safely.

Closure checks after each delivery, in order:
    1. target reached   (a chase ends the moment it gets there)
    2. all out          (wickets lost == rules.max_wickets)
    3. overs complete   (legal balls == rules.ball_limit)

Checking the target first means a chase won off the final legal ball closes
TARGET_REACHED, not OVERS_COMPLETE.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from cricket_scoring.delivery import Delivery
from cricket_scoring.errors import InningsClosedError, SequenceError, ValidationError
from cricket_scoring.figures import BattingFigures, BowlingFigures, batting_figures, bowling_figures
from cricket_scoring.format_config import InningsRules
from cricket_scoring.score import Score, accumulate, add_penalty

logger = logging.getLogger(__name__)


class InningsState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ClosureReason(str, Enum):
    ALL_OUT = "all out"
    OVERS_COMPLETE = "overs complete"
    DECLARED = "declared"
    FORFEITED = "forfeited"
    TARGET_REACHED = "target reached"
    # Set by the game when play stops with the innings unfinished.
    PLAY_ENDED = "play ended"
    ABANDONED = "abandoned"


# Completed innings under the Laws: a declaration or forfeiture counts.
COMPLETED_CLOSURES = frozenset({
    ClosureReason.ALL_OUT,
    ClosureReason.OVERS_COMPLETE,
    ClosureReason.DECLARED,
    ClosureReason.FORFEITED,
})


@dataclass(frozen=True)
class Innings:
    batting_team: str
    bowling_team: str
    rules: InningsRules = field(default_factory=InningsRules)
    number: int = 1
    target: Optional[int] = None
    deliveries: Tuple[Delivery, ...] = ()
    score: Score = field(default_factory=Score)
    state: InningsState = InningsState.OPEN
    closure: Optional[ClosureReason] = None

    # ------------------------------------------------------------------ #
    # Construction                                                         #
    # ------------------------------------------------------------------ #

    @classmethod
    def open(cls, batting_team: str, bowling_team: str, rules: InningsRules = InningsRules(),
             target: Optional[int] = None, number: int = 1, penalty_runs: int = 0) -> "Innings":
        """
        Start an innings.

        penalty_runs are awarded to the batting side before the first ball
        (runs carried over from the previous innings under Law 41).
        """
        if batting_team == bowling_team:
            raise SequenceError(f"{batting_team} cannot bat and bowl in the same innings")
        innings = cls(
            batting_team=batting_team,
            bowling_team=bowling_team,
            rules=rules,
            number=number,
            target=target,
        )
        if penalty_runs:
            innings = replace(innings, score=add_penalty(innings.score, penalty_runs))
        return innings._settle()

    @classmethod
    def forfeited(cls, batting_team: str, bowling_team: str, rules: InningsRules = InningsRules(),
                  number: int = 1, target: Optional[int] = None) -> "Innings":
        return cls.open(batting_team, bowling_team, rules, target=target, number=number).forfeit()

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    @property
    def is_open(self) -> bool:
        return self.state is InningsState.OPEN

    @property
    def is_closed(self) -> bool:
        return self.state is InningsState.CLOSED

    @property
    def declared(self) -> bool:
        return self.closure is ClosureReason.DECLARED

    @property
    def runs(self) -> int:
        return self.score.runs

    @property
    def wickets_remaining(self) -> int:
        return self.rules.max_wickets - self.score.wickets

    @property
    def balls_remaining(self) -> Optional[int]:
        if self.rules.ball_limit is None:
            return None
        return max(0, self.rules.ball_limit - self.score.legal_balls)

    @property
    def runs_required(self) -> Optional[int]:
        if self.target is None:
            return None
        return max(0, self.target - self.score.runs)

    def overs_notation(self) -> str:
        return self.score.overs_notation(self.rules.balls_per_over)

    def batting_figures(self) -> List[BattingFigures]:
        return batting_figures(self.deliveries)

    def bowling_figures(self) -> List[BowlingFigures]:
        return bowling_figures(self.deliveries, self.rules.counting, self.rules.balls_per_over)

    def __str__(self) -> str:
        text = f"{self.batting_team} {self.score.runs}/{self.score.wickets} ({self.overs_notation()} ov)"
        if self.closure is not None:
            text += f" [{self.closure.value}]"
        return text

    # ------------------------------------------------------------------ #
    # Transitions                                                          #
    # ------------------------------------------------------------------ #

    def bowl(self, delivery: Delivery) -> "Innings":
        """Accept one delivery; may close the innings."""
        self._require_open("deliveries")
        score = accumulate(self.score, delivery, self.rules.counting)
        if score.wickets > self.rules.max_wickets:
            raise ValidationError(
                f"{self.batting_team} cannot lose more than {self.rules.max_wickets} wickets",
                delivery,
            )
        updated = replace(self, deliveries=self.deliveries + (delivery,), score=score)
        return updated._settle()

    def declare(self) -> "Innings":
        self._require_open("a declaration")
        return self._close(ClosureReason.DECLARED)

    def forfeit(self) -> "Innings":
        self._require_open("a forfeiture")
        if self.deliveries:
            raise SequenceError(f"{self.batting_team} cannot forfeit an innings already under way")
        return self._close(ClosureReason.FORFEITED)

    def stop(self, reason: ClosureReason) -> "Innings":
        """Close the innings because play as a whole stopped."""
        if reason not in (ClosureReason.PLAY_ENDED, ClosureReason.ABANDONED):
            raise SequenceError(f"{reason.value} is not a stoppage of play")
        self._require_open("a stoppage")
        return self._close(reason)

    def award_penalty(self, runs: int) -> "Innings":
        """Penalty runs to the batting side outside any delivery."""
        self._require_open("penalty runs")
        return replace(self, score=add_penalty(self.score, runs))._settle()

    def revise(self, target: Optional[int] = None, ball_limit: Optional[int] = None) -> "Innings":
        """Apply a revised target and/or shortened allocation after a stoppage."""
        self._require_open("a revision")
        updated = self
        if target is not None:
            updated = replace(updated, target=target)
        if ball_limit is not None:
            updated = replace(updated, rules=replace(updated.rules, ball_limit=ball_limit))
        logger.info(
            f"{self.batting_team} innings revised: target={updated.target}, "
            f"ball_limit={updated.rules.ball_limit}"
        )
        return updated._settle()

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    def _require_open(self, what: str) -> None:
        if self.is_closed:
            raise InningsClosedError(
                f"{self.batting_team} innings is closed ({self.closure.value}); "
                f"cannot accept {what}",
                closure=self.closure,
            )

    def _settle(self) -> "Innings":
        """Close the innings if the current score meets a closing condition."""
        if self.target is not None and self.score.runs >= self.target:
            return self._close(ClosureReason.TARGET_REACHED)
        if self.score.wickets >= self.rules.max_wickets:
            return self._close(ClosureReason.ALL_OUT)
        if self.rules.ball_limit is not None and self.score.legal_balls >= self.rules.ball_limit:
            return self._close(ClosureReason.OVERS_COMPLETE)
        return self

    def _close(self, reason: ClosureReason) -> "Innings":
        closed = replace(self, state=InningsState.CLOSED, closure=reason)
        logger.debug(f"Innings {self.number} closed: {closed}")
        return closed
