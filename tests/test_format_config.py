import logging

import pytest

from cricket_scoring import config, format_config
from cricket_scoring.format_config import (
    BallCountingRules,
    MatchFormat,
    get_format,
    load_format_overrides,
)


@pytest.fixture
def registry(monkeypatch):
    """Isolate registry and alias changes made by a test."""
    monkeypatch.setattr(format_config, "FORMAT_REGISTRY", dict(format_config.FORMAT_REGISTRY))
    monkeypatch.setattr(format_config, "_ALIASES", dict(format_config._ALIASES))
    return format_config.FORMAT_REGISTRY


@pytest.fixture
def configured_default(tmp_path, monkeypatch):
    """Point the config loader at a config.yaml naming a different default format."""
    def _write(name):
        path = tmp_path / "config.yaml"
        path.write_text(f"default_format: {name}\n")
        monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))
        monkeypatch.setattr(config, "_config_cache", None)
    return _write


@pytest.mark.parametrize(
    "name, ball_limit, max_innings, allows_draw",
    [
        ("T20", 120, 2, False),
        ("ODI", 300, 2, False),
        ("T10", 60, 2, False),
        ("Hundred", 100, 2, False),
        ("Test", None, 4, True),
        ("FirstClass", None, 4, True),
    ],
)
def test_builtin_formats(name, ball_limit, max_innings, allows_draw):
    fmt = get_format(name)
    assert fmt.name == name
    assert fmt.ball_limit == ball_limit
    assert fmt.max_innings == max_innings
    assert fmt.allows_draw is allows_draw
    assert fmt.max_wickets == 10


@pytest.mark.parametrize("alias, name", [("IT20", "T20"), ("ODM", "ODI"), ("MDM", "FirstClass"), ("odi", "ODI")])
def test_aliases_and_case(alias, name):
    assert get_format(alias).name == name


def test_unknown_format_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="cricket_scoring.format_config"):
        fmt = get_format("Village Sixes")
    assert fmt.name == "T20"
    assert "Village Sixes" in caplog.text


def test_missing_name_is_default():
    assert get_format(None).name == format_config.DEFAULT_FORMAT


def test_configured_default_format(configured_default, caplog):
    configured_default("ODI")
    assert get_format(None).name == "ODI"
    with caplog.at_level(logging.WARNING, logger="cricket_scoring.format_config"):
        assert get_format("Village Sixes").name == "ODI"
    assert "using ODI" in caplog.text


def test_unknown_configured_default_uses_t20(configured_default):
    configured_default("Beach Cricket")
    assert get_format(None).name == "T20"


def test_follow_on_thresholds():
    assert get_format("Test").follow_on_threshold == 200
    assert get_format("FirstClass").follow_on_threshold == 150
    assert get_format("T20").follow_on_threshold is None


def test_innings_rules_override_ball_limit():
    rules = get_format("ODI").innings_rules(ball_limit=240)
    assert rules.ball_limit == 240
    assert rules.max_wickets == 10
    assert get_format("ODI").innings_rules().ball_limit == 300


def test_hundred_uses_five_ball_overs():
    rules = get_format("Hundred").innings_rules()
    assert rules.balls_per_over == 5
    assert get_format("Hundred").min_balls_for_result == 25


def test_with_overs_and_squad_size():
    fmt = MatchFormat(name="Sixes", overs=6, players_per_side=6)
    assert fmt.max_wickets == 5
    assert fmt.with_overs(5).ball_limit == 30
    assert fmt.ball_limit == 36


@pytest.mark.parametrize(
    "kwargs",
    [
        {"overs": 0},
        {"overs": 20, "innings_per_side": 3},
        {"overs": 20, "balls_per_over": 0},
        {"overs": 20, "players_per_side": 1},
    ],
)
def test_invalid_formats(kwargs):
    with pytest.raises(ValueError):
        MatchFormat(name="Bad", **kwargs)


def test_from_dict():
    fmt = MatchFormat.from_dict(
        "Legacy",
        {"overs": 40, "balls_per_over": 8, "counting": {"no_ball_counts": True}},
    )
    assert fmt.ball_limit == 320
    assert fmt.counting == BallCountingRules(wide_counts=False, no_ball_counts=True)


def test_load_format_overrides(tmp_path, registry):
    path = tmp_path / "formats.yaml"
    path.write_text(
        "formats:\n"
        "  Sixes:\n"
        "    overs: 6\n"
        "    players_per_side: 6\n"
        "aliases:\n"
        "  SIX: Sixes\n"
    )
    assert load_format_overrides(str(path)) == 1
    assert "Sixes" in registry
    assert get_format("SIX").max_wickets == 5


def test_load_format_overrides_missing_file(tmp_path, registry, caplog):
    with caplog.at_level(logging.WARNING):
        assert load_format_overrides(str(tmp_path / "absent.yaml")) == 0
    assert "not found" in caplog.text


def test_shipped_formats_file(registry):
    assert load_format_overrides() >= 1
    assert get_format("List-A-40").ball_limit == 240
