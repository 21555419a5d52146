"""
Match outcome values.

Created once by the resolver (or parsed from a recorded result) and never
changed afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ResultKind(str, Enum):
    WIN = "win"
    TIE = "tie"
    DRAW = "draw"
    NO_RESULT = "no result"


class ResultMethod(str, Enum):
    NORMAL = "normal"
    REVISED = "revised"


@dataclass(frozen=True)
class Margin:
    """
    How a win was achieved.  Exactly one of runs / wickets is set, except for
    awarded matches where neither is.
    """
    runs: Optional[int] = None
    wickets: Optional[int] = None
    balls_remaining: Optional[int] = None
    innings: bool = False

    def describe(self) -> str:
        if self.runs is not None:
            unit = "run" if self.runs == 1 else "runs"
            text = f"{self.runs} {unit}"
            return f"an innings and {text}" if self.innings else text
        if self.wickets is not None:
            unit = "wicket" if self.wickets == 1 else "wickets"
            text = f"{self.wickets} {unit}"
            if self.balls_remaining:
                text += f" ({self.balls_remaining} balls remaining)"
            return text
        return "award"


@dataclass(frozen=True)
class Outcome:
    kind: ResultKind
    winner: Optional[str] = None
    margin: Optional[Margin] = None
    method: ResultMethod = ResultMethod.NORMAL
    revised_target: Optional[int] = None

    @classmethod
    def win_by_runs(cls, winner: str, runs: int, innings: bool = False,
                    method: ResultMethod = ResultMethod.NORMAL,
                    revised_target: Optional[int] = None) -> "Outcome":
        return cls(ResultKind.WIN, winner, Margin(runs=runs, innings=innings), method, revised_target)

    @classmethod
    def win_by_wickets(cls, winner: str, wickets: int, balls_remaining: Optional[int] = None,
                       method: ResultMethod = ResultMethod.NORMAL,
                       revised_target: Optional[int] = None) -> "Outcome":
        return cls(
            ResultKind.WIN, winner, Margin(wickets=wickets, balls_remaining=balls_remaining),
            method, revised_target,
        )

    @classmethod
    def tie(cls, method: ResultMethod = ResultMethod.NORMAL,
            revised_target: Optional[int] = None) -> "Outcome":
        return cls(ResultKind.TIE, method=method, revised_target=revised_target)

    @classmethod
    def draw(cls) -> "Outcome":
        return cls(ResultKind.DRAW)

    @classmethod
    def no_result(cls) -> "Outcome":
        return cls(ResultKind.NO_RESULT)

    def same_result(self, other: "Outcome") -> bool:
        """Kind, winner and margin agree; balls remaining and targets are ignored."""
        if self.kind != other.kind or self.winner != other.winner:
            return False
        if self.margin is None or other.margin is None:
            return self.margin == other.margin
        return (self.margin.runs, self.margin.wickets) == (other.margin.runs, other.margin.wickets)

    def describe(self) -> str:
        if self.kind is ResultKind.WIN:
            text = f"{self.winner} won by {self.margin.describe() if self.margin else 'award'}"
        elif self.kind is ResultKind.TIE:
            text = "Match tied"
        elif self.kind is ResultKind.DRAW:
            text = "Match drawn"
        else:
            text = "No result"
        if self.method is ResultMethod.REVISED:
            text += " (revised target)"
        return text

    def __str__(self) -> str:
        return self.describe()
