"""
Revised targets for stoppage-affected limited-overs matches.

The engine never computes a revised target itself.  A policy is any callable
taking an InterruptedState and returning the runs the side batting second
needs from the balls it is allotted.  Statistical methods are supplied by the
caller; average_run_rate_target() is the simple proportional method and is
shipped only as a baseline.
"""

from dataclasses import dataclass
from typing import Callable

from cricket_scoring.errors import ValidationError


@dataclass(frozen=True)
class InterruptedState:
    """
    What a revised-target policy is told about an interrupted match.

    first_innings_runs  : runs scored by the side batting first
    first_innings_balls : legal balls that side was allotted
    chase_balls         : legal balls the side batting second is now allotted
    chase_balls_faced   : legal balls it had already faced
    chase_runs          : runs it had already scored
    chase_wickets       : wickets it had already lost
    max_wickets         : wickets that make a side all out
    balls_per_over      : legal balls per over
    """
    first_innings_runs: int
    first_innings_balls: int
    chase_balls: int
    chase_balls_faced: int = 0
    chase_runs: int = 0
    chase_wickets: int = 0
    max_wickets: int = 10
    balls_per_over: int = 6


RevisedTargetPolicy = Callable[[InterruptedState], int]


def average_run_rate_target(state: InterruptedState) -> int:
    """Scale the first-innings total by the share of balls available, plus one."""
    if state.first_innings_balls <= 0:
        raise ValidationError("first innings allotment must be positive to scale a target")
    return int(state.first_innings_runs * state.chase_balls / state.first_innings_balls) + 1
