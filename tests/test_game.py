import pytest

from cricket_scoring.errors import InningsClosedError, SequenceError
from cricket_scoring.game import Game, GameStatus, Team
from cricket_scoring.innings import ClosureReason
from cricket_scoring.revised_target import average_run_rate_target


def _post_150(game, bowl):
    """Home make 150/0 from their 20 overs."""
    game.start_innings("Home")
    bowl(game, 30, runs=2)
    return bowl(game, 90, runs=1)


# ==================== Sequencing ====================

def test_first_innings_starts_game(t20_game):
    innings = t20_game.start_innings("Home")
    assert t20_game.status is GameStatus.IN_PROGRESS
    assert innings.bowling_team == "Away"
    assert innings.number == 1
    assert innings.target is None
    assert innings.rules.ball_limit == 120


def test_unknown_team_rejected(t20_game):
    with pytest.raises(SequenceError):
        t20_game.start_innings("Visitors")


def test_wrong_bowling_team_rejected(t20_game):
    with pytest.raises(SequenceError):
        t20_game.start_innings("Home", bowling_team="Home")


def test_cannot_start_while_innings_open(t20_game):
    t20_game.start_innings("Home")
    with pytest.raises(SequenceError):
        t20_game.start_innings("Away")


def test_same_team_cannot_bat_twice_in_a_row(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=100)
    with pytest.raises(SequenceError):
        five_day_game.start_innings("Home")


def test_teams_must_differ(home, t20):
    with pytest.raises(SequenceError):
        Game(home, Team("Home"), t20)


def test_chase_target_set_automatically(t20_game, bowl):
    first = _post_150(t20_game, bowl)
    assert first.closure is ClosureReason.OVERS_COMPLETE
    chase = t20_game.start_innings("Away")
    assert chase.target == 151
    assert chase.number == 2


def test_explicit_target_overrides(t20_game, bowl):
    _post_150(t20_game, bowl)
    assert t20_game.start_innings("Away", target=140).target == 140


def test_target_only_for_final_innings(t20_game):
    with pytest.raises(SequenceError):
        t20_game.start_innings("Home", target=10)
    assert t20_game.status is GameStatus.NOT_STARTED
    assert t20_game.current_innings is None


def test_target_rejected_before_fourth_innings(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=300)
    five_day_game.start_innings("Away")
    all_out(five_day_game, runs=250)
    with pytest.raises(SequenceError):
        five_day_game.start_innings("Home", target=100)


def test_no_innings_after_decision(t20_game, bowl):
    _post_150(t20_game, bowl)
    t20_game.start_innings("Away")
    bowl(t20_game, 26, runs=6)
    assert t20_game.status is GameStatus.COMPLETED
    with pytest.raises(SequenceError):
        t20_game.start_innings("Home")


def test_bowl_without_innings(t20_game, ball):
    with pytest.raises(SequenceError):
        t20_game.bowl(ball())


def test_bowl_to_closed_innings(t20_game, ball):
    t20_game.start_innings("Home")
    t20_game.declare()
    with pytest.raises(InningsClosedError):
        t20_game.bowl(ball())


def test_innings_appended_only_when_closed(t20_game, bowl):
    t20_game.start_innings("Home")
    bowl(t20_game, 10, runs=1)
    assert t20_game.innings == ()
    assert t20_game.current_innings.runs == 10
    assert len(t20_game.all_innings) == 1
    bowl(t20_game, 110, runs=1)
    assert len(t20_game.innings) == 1
    assert t20_game.current_innings is None


def test_team_totals(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=120)
    five_day_game.start_innings("Away")
    all_out(five_day_game, runs=80)
    assert five_day_game.team_total("Home") == 120
    assert five_day_game.team_total("Away") == 80
    assert [i.number for i in five_day_game.innings_for("Away")] == [2]
    with pytest.raises(SequenceError):
        five_day_game.team_total("Visitors")


def test_penalty_runs_through_game(t20_game):
    t20_game.start_innings("Home", penalty_runs=5)
    innings = t20_game.award_penalty(5)
    assert innings.runs == 10
    assert innings.score.extras.penalties == 10


# ==================== Follow-on ====================

def test_follow_on_enforced(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=400)
    five_day_game.start_innings("Away")
    all_out(five_day_game, runs=150)
    innings = five_day_game.start_innings("Away", follow_on=True)
    assert innings.number == 3
    assert five_day_game.follow_on.enforced_by == "Home"
    assert five_day_game.follow_on.lead == 250


def test_follow_on_needs_lead(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=300)
    five_day_game.start_innings("Away")
    all_out(five_day_game, runs=150)
    with pytest.raises(SequenceError):
        five_day_game.start_innings("Away", follow_on=True)


def test_follow_on_not_in_limited_overs(t20_game, all_out):
    t20_game.start_innings("Home")
    all_out(t20_game, runs=100)
    with pytest.raises(SequenceError):
        t20_game.start_innings("Home", follow_on=True)


def test_follow_on_only_for_third_innings(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=300)
    with pytest.raises(SequenceError):
        five_day_game.start_innings("Home", follow_on=True)


def test_fourth_innings_target_after_declaration(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=300)
    five_day_game.start_innings("Away")
    all_out(five_day_game, runs=250)
    five_day_game.start_innings("Home")
    five_day_game.declare()
    chase = five_day_game.start_innings("Away")
    assert chase.target == 51
    assert chase.rules.ball_limit is None


# ==================== Stoppages & end of play ====================

def test_end_play_only_in_drawable_formats(t20_game):
    t20_game.start_innings("Home")
    with pytest.raises(SequenceError):
        t20_game.end_play()


def test_end_play_closes_open_innings(five_day_game, bowl):
    five_day_game.start_innings("Home")
    bowl(five_day_game, 30, runs=1)
    five_day_game.end_play()
    assert five_day_game.status is GameStatus.COMPLETED
    assert five_day_game.innings[-1].closure is ClosureReason.PLAY_ENDED


def test_abandon_closes_open_innings(t20_game, bowl):
    t20_game.start_innings("Home")
    bowl(t20_game, 18, runs=1)
    t20_game.abandon("rain")
    assert t20_game.status is GameStatus.ABANDONED
    assert t20_game.abandon_reason == "rain"
    assert t20_game.innings[-1].closure is ClosureReason.ABANDONED
    with pytest.raises(SequenceError):
        t20_game.abandon()


def test_stoppage_needs_limited_overs(five_day_game):
    five_day_game.start_innings("Home")
    with pytest.raises(SequenceError):
        five_day_game.flag_stoppage(40)


def test_stoppage_cannot_exceed_format_overs(t20_game):
    t20_game.start_innings("Home")
    with pytest.raises(SequenceError):
        t20_game.flag_stoppage(50)
    assert t20_game.current_innings.rules.ball_limit == 120
    assert t20_game.stoppages == []


def test_stoppage_cannot_restore_lost_overs(t20_game, bowl):
    t20_game.start_innings("Home")
    bowl(t20_game, 30, runs=1)
    t20_game.flag_stoppage(15)
    with pytest.raises(SequenceError):
        t20_game.flag_stoppage(18)
    assert t20_game.current_innings.rules.ball_limit == 90
    t20_game.flag_stoppage(12)
    assert t20_game.current_innings.rules.ball_limit == 72


def test_stoppage_between_innings_within_format_overs(t20_game, bowl):
    _post_150(t20_game, bowl)
    with pytest.raises(SequenceError):
        t20_game.flag_stoppage(21)


def test_stoppage_in_first_innings_shortens_both(t20_game, bowl):
    t20_game.start_innings("Home")
    bowl(t20_game, 60, runs=1)
    t20_game.flag_stoppage(10)
    first = t20_game.innings[0]
    assert first.closure is ClosureReason.OVERS_COMPLETE
    chase = t20_game.start_innings("Away")
    assert chase.rules.ball_limit == 60
    assert chase.target == 61
    assert t20_game.revised_target is None


def test_stoppage_between_innings_uses_policy(home, away, t20, bowl):
    game = Game(home, away, t20, revised_target_policy=average_run_rate_target)
    _post_150(game, bowl)
    stoppage = game.flag_stoppage(10)
    assert stoppage.innings_number == 2
    chase = game.start_innings("Away")
    assert chase.rules.ball_limit == 60
    assert chase.target == 76
    assert game.revised_target == 76


def test_stoppage_during_chase_revises_target(home, away, t20, bowl):
    game = Game(home, away, t20, revised_target_policy=average_run_rate_target)
    _post_150(game, bowl)
    game.start_innings("Away")
    bowl(game, 30, runs=1)
    game.flag_stoppage(10, reason="bad light")
    chase = game.current_innings
    assert chase.target == 76
    assert chase.balls_remaining == 30
    assert game.stoppage.reason == "bad light"


def test_stoppage_without_policy_keeps_natural_target(t20_game, bowl):
    _post_150(t20_game, bowl)
    t20_game.start_innings("Away")
    bowl(t20_game, 30, runs=1)
    t20_game.flag_stoppage(10)
    assert t20_game.current_innings.target == 151
    assert t20_game.current_innings.rules.ball_limit == 60


def test_forfeited_innings(five_day_game, all_out):
    five_day_game.start_innings("Home")
    all_out(five_day_game, runs=300)
    innings = five_day_game.forfeit_innings("Away")
    assert innings.closure is ClosureReason.FORFEITED
    assert innings.deliveries == ()
    assert five_day_game.team_total("Away") == 0


def test_metadata_carried(home, away, t20):
    game = Game(home, away, t20, match_id="42", venue="Eden Gardens",
                dates=["2024-04-01"], event="League")
    assert game.title == "Home vs Away"
    assert game.venue == "Eden Gardens"
    assert game.dates == ("2024-04-01",)
    assert game.event == "League"
