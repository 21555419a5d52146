#!/usr/bin/env python3
"""
Replay Cricsheet JSON records and compare the engine's result with the recorded one.
Run from project root:  python scripts/validate_matches.py data/*.json
"""
import argparse
import glob
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tabulate import tabulate

from cricket_scoring.config import load_config, setup_logging
from cricket_scoring.cricsheet import build_game, load_match, recorded_outcome
from cricket_scoring.errors import ScoringError
from cricket_scoring.format_config import load_format_overrides
from cricket_scoring.revised_target import average_run_rate_target
from cricket_scoring.scorecard import format_scorecard

logger = logging.getLogger("cricket_scoring.validate")


def _expand(paths):
    files = []
    for path in paths:
        if os.path.isdir(path):
            files.extend(sorted(glob.glob(os.path.join(path, "*.json"))))
        else:
            files.append(path)
    return files


def validate_file(path, show_scorecard=False):
    """Return (match id, computed, recorded, agrees) for one record."""
    match_id = os.path.splitext(os.path.basename(path))[0]
    record = load_match(path)
    game = build_game(record, policy=average_run_rate_target, match_id=match_id)
    computed = game.record_outcome()
    recorded = recorded_outcome(record)
    if show_scorecard:
        print(format_scorecard(game))
    return match_id, computed, recorded, computed.same_result(recorded)


def main():
    parser = argparse.ArgumentParser(description='Compare engine results with Cricsheet records')
    parser.add_argument('paths', nargs='+',
                        help='Cricsheet JSON files or directories containing them')
    parser.add_argument('--scorecards', '-s', action='store_true',
                        help='Print a scorecard for every match')
    parser.add_argument('--mismatches-only', '-m', action='store_true',
                        help='Only list matches whose result differs')
    args = parser.parse_args()

    setup_logging(load_config())
    load_format_overrides()

    rows = []
    agreed = failed = 0
    files = _expand(args.paths)
    for path in files:
        try:
            match_id, computed, recorded, agrees = validate_file(path, args.scorecards)
        except (ScoringError, OSError, ValueError) as e:
            failed += 1
            logger.error(f"{path}: {e}")
            rows.append([os.path.basename(path), "-", "-", f"error: {e}"])
            continue
        if agrees:
            agreed += 1
            if args.mismatches_only:
                continue
        rows.append([match_id, computed.describe(), recorded.describe(), "ok" if agrees else "MISMATCH"])

    if rows:
        print(tabulate(rows, headers=['Match', 'Computed', 'Recorded', 'Status'], tablefmt="grid"))
    print(f"\n{agreed}/{len(files)} results agree, {failed} file(s) could not be replayed")
    return 0 if agreed == len(files) else 1


if __name__ == "__main__":
    sys.exit(main())
