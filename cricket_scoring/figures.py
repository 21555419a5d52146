"""
Per-player batting and bowling figures derived from an innings' deliveries.

Recomputed from the delivery log on demand; nothing here is stored on the
innings itself.
"""

from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from cricket_scoring.delivery import Delivery, DismissalKind, ExtrasType
from cricket_scoring.format_config import BallCountingRules


@dataclass
class BattingFigures:
    player: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    dismissal: Optional[DismissalKind] = None
    bowler: Optional[str] = None

    @property
    def out(self) -> bool:
        return self.dismissal is not None and self.dismissal.counts_as_wicket

    @property
    def strike_rate(self) -> float:
        return self.runs * 100 / self.balls if self.balls else 0.0

    @property
    def status(self) -> str:
        if self.dismissal is None:
            return "not out"
        if self.bowler and self.dismissal.credited_to_bowler:
            return f"{self.dismissal.value} (b {self.bowler})"
        return self.dismissal.value


@dataclass
class BowlingFigures:
    bowler: str
    balls: int = 0
    runs: int = 0
    wickets: int = 0
    wides: int = 0
    no_balls: int = 0
    maidens: int = 0

    def overs_notation(self, balls_per_over: int = 6) -> str:
        completed, balls = divmod(self.balls, balls_per_over)
        return f"{completed}.{balls}" if balls else str(completed)

    def economy(self, balls_per_over: int = 6) -> float:
        return self.runs * balls_per_over / self.balls if self.balls else 0.0


def batting_figures(deliveries: Iterable[Delivery]) -> List[BattingFigures]:
    """Batters in order of appearance with their runs, balls and dismissal."""
    card: Dict[str, BattingFigures] = OrderedDict()

    def entry(name):
        if name not in card:
            card[name] = BattingFigures(player=name)
        return card[name]

    for d in deliveries:
        striker = entry(d.striker)
        entry(d.non_striker)
        if d.faced_by_striker():
            striker.balls += 1
        striker.runs += d.bat_runs
        if d.is_boundary_four:
            striker.fours += 1
        elif d.is_boundary_six:
            striker.sixes += 1
        if d.dismissal is not None:
            out = entry(d.dismissal.player_out)
            out.dismissal = d.dismissal.kind
            out.bowler = d.bowler
    return list(card.values())


def bowling_figures(deliveries: Iterable[Delivery],
                    counting: BallCountingRules = BallCountingRules(),
                    balls_per_over: int = 6) -> List[BowlingFigures]:
    """Bowlers in order of appearance; a maiden is a completed over with nothing conceded."""
    card: Dict[str, BowlingFigures] = OrderedDict()
    # (bowler, over) -> [legal balls, runs conceded]
    overs = defaultdict(lambda: [0, 0])

    for d in deliveries:
        fig = card.setdefault(d.bowler, BowlingFigures(bowler=d.bowler))
        legal = d.counts_toward_over(counting)
        conceded = d.runs_conceded_by_bowler()
        if legal:
            fig.balls += 1
        fig.runs += conceded
        fig.wides += d.extra(ExtrasType.WIDE)
        fig.no_balls += d.extra(ExtrasType.NO_BALL)
        if d.dismissal is not None and d.dismissal.kind.credited_to_bowler:
            fig.wickets += 1
        tally = overs[(d.bowler, d.over)]
        tally[0] += 1 if legal else 0
        tally[1] += conceded

    for (bowler, _), (balls, runs) in overs.items():
        if balls == balls_per_over and runs == 0:
            card[bowler].maidens += 1
    return list(card.values())
