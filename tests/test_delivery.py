import pytest

from cricket_scoring.delivery import (
    Delivery,
    Dismissal,
    DismissalKind,
    Extra,
    ExtrasType,
    delivery,
)
from cricket_scoring.errors import ScoringError, ValidationError
from cricket_scoring.format_config import BallCountingRules


def test_plain_delivery_totals(ball):
    d = ball(runs=4)
    assert d.total_runs == 4
    assert d.extra_runs == 0
    assert d.is_boundary_four
    assert not d.is_wicket


def test_run_four_is_not_a_boundary(ball):
    d = ball(runs=4, non_boundary=True)
    assert not d.is_boundary_four
    assert d.total_runs == 4


def test_no_ball_with_bat_runs(ball):
    d = ball(runs=6, noballs=1)
    assert d.total_runs == 7
    assert d.is_no_ball
    assert d.runs_conceded_by_bowler() == 7
    assert d.faced_by_striker()


def test_byes_not_conceded_by_bowler(ball):
    d = ball(byes=4)
    assert d.total_runs == 4
    assert d.runs_conceded_by_bowler() == 0


def test_wide_not_faced(ball):
    d = ball(wides=5)
    assert d.total_runs == 5
    assert not d.faced_by_striker()


@pytest.mark.parametrize(
    "kwargs, counting, expected",
    [
        ({}, BallCountingRules(), True),
        ({"wides": 1}, BallCountingRules(), False),
        ({"noballs": 1}, BallCountingRules(), False),
        ({"wides": 1}, BallCountingRules(wide_counts=True), True),
        ({"noballs": 1}, BallCountingRules(no_ball_counts=True), True),
        ({"byes": 2}, BallCountingRules(), True),
        ({"legbyes": 1}, BallCountingRules(), True),
    ],
)
def test_counts_toward_over(ball, kwargs, counting, expected):
    assert ball(**kwargs).counts_toward_over(counting) is expected


@pytest.mark.parametrize(
    "kwargs",
    [
        {"wides": 1, "noballs": 1},
        {"wides": 1, "byes": 1},
        {"byes": 1, "legbyes": 1},
        {"runs": 2, "legbyes": 1},
        {"runs": 1, "wides": 1},
        {"runs": -1},
        {"runs": 3, "non_boundary": True},
        {"striker": "same", "non_striker": "same"},
        {"bowler": ""},
    ],
)
def test_malformed_deliveries_rejected(ball, kwargs):
    with pytest.raises(ValidationError):
        ball(**kwargs)


@pytest.mark.parametrize(
    "kind, extras",
    [
        ("bowled", {"wides": 1}),
        ("caught", {"noballs": 1}),
        ("lbw", {"wides": 1}),
        ("stumped", {"noballs": 1}),
    ],
)
def test_dismissals_impossible_off_illegal_deliveries(ball, kind, extras):
    with pytest.raises(ValidationError):
        ball(wicket=kind, **extras)


def test_stumped_off_wide_and_run_out_off_no_ball_allowed(ball):
    assert ball(wides=1, wicket="stumped", fielders=("keeper",)).is_wicket
    assert ball(noballs=1, wicket="run out", player_out="bat2").is_wicket


def test_only_striker_can_be_bowled(ball):
    with pytest.raises(ValidationError):
        ball(wicket="bowled", player_out="bat2")


def test_player_out_must_be_at_crease(ball):
    with pytest.raises(ValidationError):
        ball(wicket="run out", player_out="bat7")


def test_fielder_only_for_fielding_dismissals(ball):
    with pytest.raises(ValidationError):
        ball(wicket="bowled", fielders=("slip",))


def test_run_out_off_bye_keeps_runs_and_wicket(ball):
    d = ball(byes=1, wicket="run out", player_out="bat2", fielders=("cover",))
    assert d.is_wicket
    assert d.total_runs == 1
    assert d.bat_runs == 0


def test_retired_hurt_is_not_a_wicket(ball):
    d = ball(wicket="retired hurt")
    assert not d.is_wicket
    assert d.is_retirement_not_counted


def test_retired_out_is_a_wicket(ball):
    d = ball(wicket="retired out")
    assert d.is_wicket
    assert not d.is_retirement_not_counted


def test_duplicate_extras_rejected():
    with pytest.raises(ValidationError):
        Delivery(
            over=0, ball=1, striker="a", non_striker="b", bowler="c",
            extras=(Extra(ExtrasType.BYE, 1), Extra(ExtrasType.BYE, 2)),
        )


def test_validation_error_carries_delivery():
    with pytest.raises(ValidationError) as excinfo:
        Delivery(
            over=0, ball=1, striker="a", non_striker="b", bowler="c",
            dismissal=Dismissal(DismissalKind.BOWLED, "b"),
        )
    assert excinfo.value.delivery is not None
    assert isinstance(excinfo.value, ScoringError)


def test_unknown_dismissal_kind():
    with pytest.raises(ValueError):
        delivery(0, 1, "a", "b", "c", wicket="timed in")


@pytest.mark.parametrize("kind", list(DismissalKind))
def test_every_dismissal_kind_classified(kind):
    assert isinstance(kind.counts_as_wicket, bool)
    assert isinstance(kind.credited_to_bowler, bool)
    if kind.credited_to_bowler:
        assert kind.counts_as_wicket
