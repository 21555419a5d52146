"""
cricket_scoring/delivery.py
===========================

The delivery: one ball bowled and everything that happened on it.

Extras categories and dismissal kinds are closed enums.  Every rule that
depends on the kind lives in a lookup table keyed by the enum, and
_check_tables() refuses to import the module if a table misses a member, so a
new kind cannot be added without deciding how each rule treats it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from cricket_scoring.errors import ValidationError
from cricket_scoring.format_config import BallCountingRules


# ---------------------------------------------------------------------------
# Extras
# ---------------------------------------------------------------------------

class ExtrasType(str, Enum):
    WIDE = "wides"
    NO_BALL = "noballs"
    BYE = "byes"
    LEG_BYE = "legbyes"
    PENALTY = "penalty"


@dataclass(frozen=True)
class Extra:
    kind: ExtrasType
    runs: int


# ---------------------------------------------------------------------------
# Dismissals
# ---------------------------------------------------------------------------

class DismissalKind(str, Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    CAUGHT_AND_BOWLED = "caught and bowled"
    LBW = "lbw"
    RUN_OUT = "run out"
    STUMPED = "stumped"
    HIT_WICKET = "hit wicket"
    HIT_BALL_TWICE = "hit the ball twice"
    HANDLED_BALL = "handled the ball"
    OBSTRUCTING_FIELD = "obstructing the field"
    TIMED_OUT = "timed out"
    RETIRED_OUT = "retired out"
    RETIRED_HURT = "retired hurt"
    RETIRED_NOT_OUT = "retired not out"

    @property
    def counts_as_wicket(self) -> bool:
        return _COUNTS_AS_WICKET[self]

    @property
    def credited_to_bowler(self) -> bool:
        return _CREDITED_TO_BOWLER[self]

    @property
    def allowed_on_wide(self) -> bool:
        return _ALLOWED_ON_WIDE[self]

    @property
    def allowed_on_no_ball(self) -> bool:
        return _ALLOWED_ON_NO_BALL[self]

    @property
    def striker_only(self) -> bool:
        return _STRIKER_ONLY[self]

    @property
    def takes_fielder(self) -> bool:
        return _TAKES_FIELDER[self]


_K = DismissalKind

# Retired hurt / not out ends a batter's stay without costing a wicket.
_COUNTS_AS_WICKET: Dict[DismissalKind, bool] = {
    _K.BOWLED: True, _K.CAUGHT: True, _K.CAUGHT_AND_BOWLED: True, _K.LBW: True,
    _K.RUN_OUT: True, _K.STUMPED: True, _K.HIT_WICKET: True,
    _K.HIT_BALL_TWICE: True, _K.HANDLED_BALL: True, _K.OBSTRUCTING_FIELD: True,
    _K.TIMED_OUT: True, _K.RETIRED_OUT: True,
    _K.RETIRED_HURT: False, _K.RETIRED_NOT_OUT: False,
}

_CREDITED_TO_BOWLER: Dict[DismissalKind, bool] = {
    _K.BOWLED: True, _K.CAUGHT: True, _K.CAUGHT_AND_BOWLED: True, _K.LBW: True,
    _K.RUN_OUT: False, _K.STUMPED: True, _K.HIT_WICKET: True,
    _K.HIT_BALL_TWICE: False, _K.HANDLED_BALL: False, _K.OBSTRUCTING_FIELD: False,
    _K.TIMED_OUT: False, _K.RETIRED_OUT: False,
    _K.RETIRED_HURT: False, _K.RETIRED_NOT_OUT: False,
}

# Law 21.18 / 22.3: only these dismissals are possible off a wide or no-ball.
_ALLOWED_ON_WIDE: Dict[DismissalKind, bool] = {
    _K.BOWLED: False, _K.CAUGHT: False, _K.CAUGHT_AND_BOWLED: False, _K.LBW: False,
    _K.RUN_OUT: True, _K.STUMPED: True, _K.HIT_WICKET: True,
    _K.HIT_BALL_TWICE: False, _K.HANDLED_BALL: True, _K.OBSTRUCTING_FIELD: True,
    _K.TIMED_OUT: True, _K.RETIRED_OUT: True,
    _K.RETIRED_HURT: True, _K.RETIRED_NOT_OUT: True,
}

_ALLOWED_ON_NO_BALL: Dict[DismissalKind, bool] = {
    _K.BOWLED: False, _K.CAUGHT: False, _K.CAUGHT_AND_BOWLED: False, _K.LBW: False,
    _K.RUN_OUT: True, _K.STUMPED: False, _K.HIT_WICKET: False,
    _K.HIT_BALL_TWICE: True, _K.HANDLED_BALL: True, _K.OBSTRUCTING_FIELD: True,
    _K.TIMED_OUT: True, _K.RETIRED_OUT: True,
    _K.RETIRED_HURT: True, _K.RETIRED_NOT_OUT: True,
}

_STRIKER_ONLY: Dict[DismissalKind, bool] = {
    _K.BOWLED: True, _K.CAUGHT: True, _K.CAUGHT_AND_BOWLED: True, _K.LBW: True,
    _K.RUN_OUT: False, _K.STUMPED: True, _K.HIT_WICKET: True,
    _K.HIT_BALL_TWICE: True, _K.HANDLED_BALL: False, _K.OBSTRUCTING_FIELD: False,
    _K.TIMED_OUT: False, _K.RETIRED_OUT: False,
    _K.RETIRED_HURT: False, _K.RETIRED_NOT_OUT: False,
}

_TAKES_FIELDER: Dict[DismissalKind, bool] = {
    _K.BOWLED: False, _K.CAUGHT: True, _K.CAUGHT_AND_BOWLED: True, _K.LBW: False,
    _K.RUN_OUT: True, _K.STUMPED: True, _K.HIT_WICKET: False,
    _K.HIT_BALL_TWICE: False, _K.HANDLED_BALL: False, _K.OBSTRUCTING_FIELD: True,
    _K.TIMED_OUT: False, _K.RETIRED_OUT: False,
    _K.RETIRED_HURT: False, _K.RETIRED_NOT_OUT: False,
}


def _check_tables():
    tables = {
        "_COUNTS_AS_WICKET": _COUNTS_AS_WICKET,
        "_CREDITED_TO_BOWLER": _CREDITED_TO_BOWLER,
        "_ALLOWED_ON_WIDE": _ALLOWED_ON_WIDE,
        "_ALLOWED_ON_NO_BALL": _ALLOWED_ON_NO_BALL,
        "_STRIKER_ONLY": _STRIKER_ONLY,
        "_TAKES_FIELDER": _TAKES_FIELDER,
    }
    for name, table in tables.items():
        missing = [kind.name for kind in DismissalKind if kind not in table]
        if missing:
            raise RuntimeError(f"{name} has no entry for {', '.join(missing)}")


_check_tables()


@dataclass(frozen=True)
class Dismissal:
    kind: DismissalKind
    player_out: str
    fielders: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Delivery:
    """
    One ball bowled.

    Attributes
    ----------
    over         : 0-based over number
    ball         : ball number within the over as recorded (illegal
                   deliveries are re-bowled, so numbers may repeat)
    striker      : batter on strike
    non_striker  : batter at the bowler's end
    bowler       : bowler of the delivery
    bat_runs     : runs off the bat, credited to the striker
    extras       : extras conceded, at most one entry per ExtrasType
    dismissal    : the one dismissal (or retirement) on this delivery, if any
    non_boundary : bat runs of 4 or 6 that were run rather than a boundary

    A Delivery validates itself on construction and raises ValidationError
    instead of storing an inconsistent event.
    """
    over: int
    ball: int
    striker: str
    non_striker: str
    bowler: str
    bat_runs: int = 0
    extras: Tuple[Extra, ...] = ()
    dismissal: Optional[Dismissal] = None
    non_boundary: bool = False
    _by_kind: Dict[ExtrasType, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_kind: Dict[ExtrasType, int] = {}
        for extra in self.extras:
            if extra.kind in by_kind:
                raise ValidationError(f"duplicate {extra.kind.value} on one delivery", self)
            by_kind[extra.kind] = extra.runs
        object.__setattr__(self, "_by_kind", by_kind)
        self.validate()

    # ------------------------------------------------------------------ #
    # Validation                                                           #
    # ------------------------------------------------------------------ #

    def validate(self) -> None:
        """Raise ValidationError if the delivery breaks any scoring rule."""
        label = f"delivery {self.over}.{self.ball}"
        if not self.striker or not self.non_striker or not self.bowler:
            raise ValidationError(f"{label}: striker, non-striker and bowler are required", self)
        if self.striker == self.non_striker:
            raise ValidationError(f"{label}: striker and non-striker are the same player", self)
        if self.over < 0 or self.ball < 0:
            raise ValidationError(f"{label}: over and ball must not be negative", self)
        if self.bat_runs < 0:
            raise ValidationError(f"{label}: bat runs cannot be negative", self)

        for kind, runs in self._by_kind.items():
            if runs <= 0:
                raise ValidationError(f"{label}: {kind.value} must be a positive amount", self)

        wide = ExtrasType.WIDE in self._by_kind
        no_ball = ExtrasType.NO_BALL in self._by_kind
        byes = ExtrasType.BYE in self._by_kind
        leg_byes = ExtrasType.LEG_BYE in self._by_kind

        if wide and no_ball:
            raise ValidationError(f"{label}: a delivery cannot be both wide and no-ball", self)
        if wide and (byes or leg_byes):
            raise ValidationError(f"{label}: runs taken off a wide are scored as wides", self)
        if byes and leg_byes:
            raise ValidationError(f"{label}: byes and leg-byes on the same delivery", self)
        if self.bat_runs and (wide or byes or leg_byes):
            raise ValidationError(
                f"{label}: bat runs cannot accompany wides, byes or leg-byes", self
            )
        if self.non_boundary and self.bat_runs not in (4, 6):
            raise ValidationError(f"{label}: non_boundary only applies to 4 or 6 bat runs", self)

        if self.dismissal is not None:
            self._validate_dismissal(label, wide, no_ball)

    def _validate_dismissal(self, label: str, wide: bool, no_ball: bool) -> None:
        kind = self.dismissal.kind
        out = self.dismissal.player_out
        if wide and not kind.allowed_on_wide:
            raise ValidationError(f"{label}: cannot be {kind.value} off a wide", self)
        if no_ball and not kind.allowed_on_no_ball:
            raise ValidationError(f"{label}: cannot be {kind.value} off a no-ball", self)
        if kind.striker_only and out != self.striker:
            raise ValidationError(f"{label}: only the striker can be {kind.value}", self)
        if kind is not DismissalKind.TIMED_OUT and out not in (self.striker, self.non_striker):
            raise ValidationError(f"{label}: {out} is not at the crease", self)
        if self.dismissal.fielders and not kind.takes_fielder:
            raise ValidationError(f"{label}: {kind.value} does not involve a fielder", self)

    # ------------------------------------------------------------------ #
    # Derived values                                                       #
    # ------------------------------------------------------------------ #

    def extra(self, kind: ExtrasType) -> int:
        return self._by_kind.get(kind, 0)

    @property
    def is_wide(self) -> bool:
        return ExtrasType.WIDE in self._by_kind

    @property
    def is_no_ball(self) -> bool:
        return ExtrasType.NO_BALL in self._by_kind

    @property
    def extra_runs(self) -> int:
        return sum(self._by_kind.values())

    @property
    def total_runs(self) -> int:
        return self.bat_runs + self.extra_runs

    @property
    def is_boundary_four(self) -> bool:
        return self.bat_runs == 4 and not self.non_boundary

    @property
    def is_boundary_six(self) -> bool:
        return self.bat_runs == 6 and not self.non_boundary

    @property
    def is_wicket(self) -> bool:
        return self.dismissal is not None and self.dismissal.kind.counts_as_wicket

    @property
    def is_retirement_not_counted(self) -> bool:
        """Retired hurt or not out: the batter leaves without a wicket falling."""
        return self.dismissal is not None and not self.dismissal.kind.counts_as_wicket

    def counts_toward_over(self, counting: BallCountingRules) -> bool:
        if self.is_wide:
            return counting.wide_counts
        if self.is_no_ball:
            return counting.no_ball_counts
        return True

    def faced_by_striker(self) -> bool:
        """Wides are not balls faced; no-balls are."""
        return not self.is_wide

    def runs_conceded_by_bowler(self) -> int:
        """Bat runs plus wides and no-balls; byes, leg-byes and penalties are not the bowler's."""
        return self.bat_runs + self.extra(ExtrasType.WIDE) + self.extra(ExtrasType.NO_BALL)


def delivery(over, ball, striker, non_striker, bowler, runs=0, wides=0, noballs=0,
             byes=0, legbyes=0, penalty=0, wicket=None, player_out=None,
             fielders=(), non_boundary=False) -> Delivery:
    """
    Keyword-friendly Delivery factory.

    ``wicket`` is a DismissalKind (or its string value); ``player_out``
    defaults to the striker.
    """
    extras = []
    for kind, amount in (
        (ExtrasType.WIDE, wides),
        (ExtrasType.NO_BALL, noballs),
        (ExtrasType.BYE, byes),
        (ExtrasType.LEG_BYE, legbyes),
        (ExtrasType.PENALTY, penalty),
    ):
        if amount:
            extras.append(Extra(kind, amount))

    dismissal = None
    if wicket is not None:
        dismissal = Dismissal(
            kind=DismissalKind(wicket),
            player_out=player_out or striker,
            fielders=tuple(fielders),
        )

    return Delivery(
        over=over,
        ball=ball,
        striker=striker,
        non_striker=non_striker,
        bowler=bowler,
        bat_runs=runs,
        extras=tuple(extras),
        dismissal=dismissal,
        non_boundary=non_boundary,
    )
