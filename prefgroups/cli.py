"""Command line entry point: read a survey, optimize groups, write reports."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from .cliques import find_maximal_mutual_groups
from .config import STRATEGIES, GroupingConfig
from .errors import ConfigError, InputError
from .logging_config import configure_logging, get_logger
from .optimizer import TrialOptimizer
from .preferences import load_survey, load_tapout
from .reporting import format_summary, save_mutual_groups, write_reports

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prefgroups",
        description="Group people by yes/no preferences; never break a veto; report the best of many trials.")
    parser.add_argument("survey", help="Survey matrix: header row of names, one yes/no row per respondent")
    parser.add_argument("--tapout", default=None,
                        help="Optional file of comma-separated names; people on a line never share a group")
    parser.add_argument("--sep", default="\t", help="Survey column separator (default: tab)")
    parser.add_argument("--group-size", type=int, default=4, help="Maximum group size (default: 4)")
    parser.add_argument("--trials", type=int, default=1000, help="Number of independent trials (default: 1000)")
    parser.add_argument("--local-attempts", type=int, default=20,
                        help="Random draws per candidate-group search (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (0…4294967295); random if omitted")
    parser.add_argument("--strategy", choices=STRATEGIES, default="preferences",
                        help="preferences: satisfy yes answers; cliques: plain compatibility partition")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes for trials (default: 1)")
    parser.add_argument("--out-stem", type=str, default=None,
                        help="Optional output filename stem. Defaults to survey stem.")
    parser.add_argument("--no-plots", action="store_true", help="Skip the PNG outputs")
    parser.add_argument("--mutual-groups", action="store_true",
                        help="Also list maximal groups of people who all mutually said yes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI args, run the optimizer, and write all outputs."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    in_stem = os.path.splitext(os.path.basename(args.survey))[0]
    out_stem = args.out_stem or in_stem

    try:
        config = GroupingConfig(
            max_group_size=args.group_size,
            max_local_attempts=args.local_attempts,
            trials=args.trials,
            seed=args.seed,
            workers=args.workers,
            strategy=args.strategy,
        ).validate()
        table = load_survey(args.survey, sep=args.sep)
        if args.tapout:
            table = load_tapout(args.tapout, table)
    except (ConfigError, InputError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.mutual_groups:
        mutual = find_maximal_mutual_groups(table)
        save_mutual_groups(mutual, table, out_stem)
        print(f"Found {len(mutual)} maximal mutual groups.")

    result = TrialOptimizer(table, config).run()
    print(f"Seed: {result.seed_entropy} (rerun with --seed {result.seed_entropy} to reproduce)")
    if not result.ok:
        print(f"ERROR: no feasible grouping after {result.trials_run} trials: {result.reason}", file=sys.stderr)
        return 1

    write_reports(result, table, out_stem, plots=not args.no_plots, seed=args.seed)
    print(f"Created {len(result.groups)} groups. Output stem: {out_stem}")
    print(format_summary(result, table))
    return 0


if __name__ == "__main__":
    sys.exit(main())
