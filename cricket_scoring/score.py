"""
cricket_scoring/score.py
========================

Pure aggregation of runs, wickets, extras and legal balls from deliveries.

accumulate() folds a single delivery into a Score and returns a new Score;
score_deliveries() is the fold over a whole sequence.  Neither knows about
targets, over limits or closure; that is the innings state machine's job.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Tuple

from cricket_scoring.delivery import Delivery, ExtrasType
from cricket_scoring.errors import ValidationError
from cricket_scoring.format_config import BallCountingRules


@dataclass(frozen=True)
class ExtrasBreakdown:
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0
    penalties: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes + self.penalties

    def add(self, kind: ExtrasType, runs: int) -> "ExtrasBreakdown":
        if kind is ExtrasType.WIDE:
            return replace(self, wides=self.wides + runs)
        if kind is ExtrasType.NO_BALL:
            return replace(self, no_balls=self.no_balls + runs)
        if kind is ExtrasType.BYE:
            return replace(self, byes=self.byes + runs)
        if kind is ExtrasType.LEG_BYE:
            return replace(self, leg_byes=self.leg_byes + runs)
        if kind is ExtrasType.PENALTY:
            return replace(self, penalties=self.penalties + runs)
        raise ValidationError(f"unhandled extras category {kind!r}")


@dataclass(frozen=True)
class Score:
    """
    Running total of one innings.

    runs is always bat_runs + extras.total; legal_balls counts only the
    deliveries that count toward the over.
    """
    runs: int = 0
    bat_runs: int = 0
    wickets: int = 0
    retirements: int = 0
    legal_balls: int = 0
    extras: ExtrasBreakdown = field(default_factory=ExtrasBreakdown)

    def overs(self, balls_per_over: int = 6) -> Tuple[int, int]:
        """(completed overs, balls into the current over)"""
        return divmod(self.legal_balls, balls_per_over)

    def overs_notation(self, balls_per_over: int = 6) -> str:
        completed, balls = self.overs(balls_per_over)
        return f"{completed}.{balls}"

    def run_rate(self, balls_per_over: int = 6) -> float:
        if self.legal_balls == 0:
            return 0.0
        return self.runs * balls_per_over / self.legal_balls

    def summary(self, balls_per_over: int = 6) -> str:
        e = self.extras
        return (
            f"{self.runs}/{self.wickets}\n"
            f"{e.wides} wides, {e.no_balls} no balls, {e.byes} byes, "
            f"{e.leg_byes} leg byes, {e.penalties} penalty\n"
            f"{self.overs_notation(balls_per_over)}"
        )

    def __str__(self) -> str:
        return f"{self.runs}/{self.wickets} ({self.overs_notation()} ov)"


def add_penalty(score: Score, runs: int) -> Score:
    """Penalty runs awarded outside a delivery (before or after an innings)."""
    if runs <= 0:
        raise ValidationError(f"penalty runs must be positive, got {runs}")
    return replace(
        score,
        runs=score.runs + runs,
        extras=score.extras.add(ExtrasType.PENALTY, runs),
    )


def accumulate(score: Score, delivery: Delivery, counting: BallCountingRules) -> Score:
    """Fold one delivery into score and return the new Score."""
    delivery.validate()

    extras = score.extras
    for extra in delivery.extras:
        extras = extras.add(extra.kind, extra.runs)

    wickets = score.wickets
    retirements = score.retirements
    if delivery.is_wicket:
        wickets += 1
    elif delivery.is_retirement_not_counted:
        retirements += 1

    legal_balls = score.legal_balls
    if delivery.counts_toward_over(counting):
        legal_balls += 1

    return Score(
        runs=score.runs + delivery.total_runs,
        bat_runs=score.bat_runs + delivery.bat_runs,
        wickets=wickets,
        retirements=retirements,
        legal_balls=legal_balls,
        extras=extras,
    )


def score_deliveries(deliveries: Iterable[Delivery],
                     counting: BallCountingRules = BallCountingRules()) -> Score:
    score = Score()
    for d in deliveries:
        score = accumulate(score, d, counting)
    return score
