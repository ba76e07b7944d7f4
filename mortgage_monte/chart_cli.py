"""CLI entry point for chart generation."""

import argparse
import sys
from pathlib import Path

from mortgage_monte.charts import plot_balances, plot_net_worth
from mortgage_monte.cli import add_run_args, run_from_args


def add_chart_args(parser: argparse.ArgumentParser) -> None:
    add_run_args(parser)
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="output filename suffix (e.g. base → net_worth-base.png)",
    )


def main(argv: list[str] | None = None):
    result, _, _, args = run_from_args(
        "Mortgage vs. invest-first chart generation", add_chart_args, argv,
    )

    path = plot_net_worth(result, args.output, name=args.name)
    print(f"  → {path}", file=sys.stderr)
    path = plot_balances(result, args.output, name=args.name)
    print(f"  → {path}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
