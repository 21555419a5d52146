"""
cricket_scoring/format_config.py
================================

Single source of truth for every format-specific rule the engine applies.

Every component with a format-sensitive value reads it from a MatchFormat
instance rather than hardcoding T20 constants.  Adding a new format requires
only a new entry in FORMAT_REGISTRY, or an entry in config/formats.yaml that
load_format_overrides() merges in at start-up.

Usage
-----
    from cricket_scoring.format_config import get_format

    fmt = get_format("ODI")
    fmt.ball_limit          # 300
    fmt.max_wickets         # 10
    fmt.innings_rules()     # InningsRules for one innings of this format
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import yaml

from cricket_scoring.config import load_config

logger = logging.getLogger(__name__)

_OVERRIDES_PATH = os.path.join(
    os.path.abspath(os.path.dirname(__file__)), "..", "config", "formats.yaml"
)

DEFAULT_FORMAT = "T20"


# ---------------------------------------------------------------------------
# Ball counting
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BallCountingRules:
    """
    Whether wides and no-balls count toward the length of the over.

    Under the current Laws neither does, but historical and domestic rule
    sets differ, so the choice is configuration rather than a constant.
    """
    wide_counts: bool = False
    no_ball_counts: bool = False


# ---------------------------------------------------------------------------
# Per-innings rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InningsRules:
    """
    The slice of a format an innings needs to decide when it is over.

    Passed into the innings explicitly; an innings never looks back at the
    game that owns it.

    Attributes
    ----------
    max_wickets    : wickets that make the batting side all out
    ball_limit     : legal balls allotted to the innings (None = unlimited)
    balls_per_over : legal balls in one over
    counting       : BallCountingRules for wides and no-balls
    """
    max_wickets: int = 10
    ball_limit: Optional[int] = None
    balls_per_over: int = 6
    counting: BallCountingRules = field(default_factory=BallCountingRules)


# ---------------------------------------------------------------------------
# MatchFormat
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchFormat:
    """
    Complete parameterisation of a cricket format.

    Attributes
    ----------
    name                 : canonical format name ("T20", "ODI", "Test")
    overs                : overs per innings, None for unlimited-overs cricket
    innings_per_side     : 1 for limited-overs, 2 for first-class
    balls_per_over       : legal balls per over
    players_per_side     : squad size batting; max wickets is one fewer
    follow_on_threshold  : minimum first-innings lead that lets the side
                           batting first enforce the follow-on (None = no rule)
    min_overs_for_result : overs the side batting second must face before a
                           revised-target result can be declared
    counting             : BallCountingRules
    """
    name: str
    overs: Optional[int]
    innings_per_side: int = 1
    balls_per_over: int = 6
    players_per_side: int = 11
    follow_on_threshold: Optional[int] = None
    min_overs_for_result: Optional[int] = None
    counting: BallCountingRules = field(default_factory=BallCountingRules)

    def __post_init__(self):
        if self.overs is not None and self.overs <= 0:
            raise ValueError(f"{self.name}: overs must be positive or None")
        if self.innings_per_side not in (1, 2):
            raise ValueError(f"{self.name}: innings_per_side must be 1 or 2")
        if self.balls_per_over <= 0:
            raise ValueError(f"{self.name}: balls_per_over must be positive")
        if self.players_per_side < 2:
            raise ValueError(f"{self.name}: players_per_side must be at least 2")

    # ------------------------------------------------------------------ #
    # Derived values                                                       #
    # ------------------------------------------------------------------ #

    @property
    def max_wickets(self) -> int:
        return self.players_per_side - 1

    @property
    def max_innings(self) -> int:
        return self.innings_per_side * 2

    @property
    def limited_overs(self) -> bool:
        return self.overs is not None

    @property
    def allows_draw(self) -> bool:
        """Only timed (unlimited-overs) cricket can be drawn."""
        return self.overs is None

    @property
    def ball_limit(self) -> Optional[int]:
        if self.overs is None:
            return None
        return self.overs * self.balls_per_over

    @property
    def min_balls_for_result(self) -> Optional[int]:
        if self.min_overs_for_result is None:
            return None
        return self.min_overs_for_result * self.balls_per_over

    def innings_rules(self, ball_limit: Optional[int] = None) -> InningsRules:
        """Rules for one innings; ball_limit overrides the format allocation."""
        return InningsRules(
            max_wickets=self.max_wickets,
            ball_limit=ball_limit if ball_limit is not None else self.ball_limit,
            balls_per_over=self.balls_per_over,
            counting=self.counting,
        )

    def with_overs(self, overs: Optional[int]) -> "MatchFormat":
        """Same format with a different over allocation (reduced matches)."""
        return replace(self, overs=overs)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "MatchFormat":
        counting = data.get("counting") or {}
        return cls(
            name=name,
            overs=data.get("overs"),
            innings_per_side=int(data.get("innings_per_side", 1)),
            balls_per_over=int(data.get("balls_per_over", 6)),
            players_per_side=int(data.get("players_per_side", 11)),
            follow_on_threshold=data.get("follow_on_threshold"),
            min_overs_for_result=data.get("min_overs_for_result"),
            counting=BallCountingRules(
                wide_counts=bool(counting.get("wide_counts", False)),
                no_ball_counts=bool(counting.get("no_ball_counts", False)),
            ),
        )


# ---------------------------------------------------------------------------
# Built-in formats
# ---------------------------------------------------------------------------

_T20 = MatchFormat(name="T20", overs=20, min_overs_for_result=5)

_ODI = MatchFormat(name="ODI", overs=50, min_overs_for_result=20)

_T10 = MatchFormat(name="T10", overs=10, min_overs_for_result=5)

# 100 balls bowled in sets of five.
_HUNDRED = MatchFormat(name="Hundred", overs=20, balls_per_over=5, min_overs_for_result=5)

# Follow-on leads follow Law 14.1.1: 200 for five days or more, 150 for
# three or four days.
_TEST = MatchFormat(name="Test", overs=None, innings_per_side=2, follow_on_threshold=200)

_FIRST_CLASS = MatchFormat(
    name="FirstClass", overs=None, innings_per_side=2, follow_on_threshold=150
)


# ---------------------------------------------------------------------------
# Public registry: look up by match format string
# ---------------------------------------------------------------------------

FORMAT_REGISTRY: Dict[str, MatchFormat] = {
    "T20":        _T20,
    "ODI":        _ODI,
    "T10":        _T10,
    "Hundred":    _HUNDRED,
    "Test":       _TEST,
    "FirstClass": _FIRST_CLASS,
}

# Alternative spellings used by match-record feeds.
_ALIASES: Dict[str, str] = {
    "IT20": "T20",
    "ODM": "ODI",
    "MDM": "FirstClass",
    "OD": "ODI",
}


def _lookup(match_format: str) -> Optional[MatchFormat]:
    key = _ALIASES.get(match_format, match_format)
    fmt = FORMAT_REGISTRY.get(key)
    if fmt is None:
        for name, candidate in FORMAT_REGISTRY.items():
            if name.lower() == key.lower():
                return candidate
    return fmt


def default_format() -> MatchFormat:
    """The format named by default_format in config.yaml, else T20."""
    name = load_config().get("default_format") or DEFAULT_FORMAT
    fmt = _lookup(str(name))
    if fmt is None:
        logger.warning(f"Configured default format '{name}' is unknown, using {DEFAULT_FORMAT}")
        return FORMAT_REGISTRY[DEFAULT_FORMAT]
    return fmt


def get_format(match_format: Optional[str]) -> MatchFormat:
    """
    Return the MatchFormat for the given match format string.
    Falls back to the configured default format for None or unrecognised values.
    """
    if not match_format:
        return default_format()
    fmt = _lookup(match_format)
    if fmt is None:
        fallback = default_format()
        logger.warning(f"Unknown match format '{match_format}', using {fallback.name}")
        return fallback
    return fmt


def load_format_overrides(path: Optional[str] = None) -> int:
    """
    Merge formats from a YAML file into FORMAT_REGISTRY.

    Returns the number of formats loaded.  A missing file is not an error:
    the built-in registry is used as is.
    """
    path = path or _OVERRIDES_PATH
    if not os.path.exists(path):
        logger.warning(f"{os.path.basename(path)} not found, using built-in formats only")
        return 0
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    loaded = 0
    for name, entry in (data.get("formats") or {}).items():
        FORMAT_REGISTRY[name] = MatchFormat.from_dict(name, entry or {})
        loaded += 1
    for alias, target in (data.get("aliases") or {}).items():
        _ALIASES[alias] = target
    logger.info(f"Loaded {loaded} format definition(s) from {path}")
    return loaded
