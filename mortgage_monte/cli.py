"""CLI entry point for the mortgage vs. invest-first projection."""

import argparse
import sys

from mortgage_monte.config import build_constants, build_inputs, parse_args
from mortgage_monte.errors import InvalidInputError, NumericDegeneracyError
from mortgage_monte.monte_carlo import DEFAULT_TRIALS, ProjectionResult, project
from mortgage_monte.params import Constants, InputParameters
from mortgage_monte.runner import FAILURE_MESSAGE
from mortgage_monte.stats import Milestones, SummaryStats, find_milestones, summarize
from mortgage_monte.validation import validate_inputs


def add_run_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--trials", type=int, default=DEFAULT_TRIALS,
        help=f"Monte Carlo trials per scenario (default: {DEFAULT_TRIALS})",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="random seed for a reproducible run (default: unseeded)",
    )


def _fmt(v: float) -> str:
    if v < 0:
        return f"-${abs(v):,.0f}"
    return f"${v:,.0f}"


def _print_header(inputs: InputParameters, constants: Constants, trials: int):
    house = constants.house
    print("=" * 80)
    print(f"Mortgage vs. invest-first projection (30 years, N={trials:,} trials per scenario)")
    print(
        f"  Home: {_fmt(house.value)} / Loan: {_fmt(house.loan)} at {house.rate:.3%}"
        f" / Payment: {_fmt(house.payment)}/mo / Extra: {_fmt(inputs.extra_payment)}/mo"
    )
    print(
        f"  Salary: {_fmt(constants.income.salary)} (+{inputs.salary_growth:.1f}%/yr)"
        f" / Return: {inputs.investment_return:.1f}% ± {inputs.market_volatility:.1f}%"
        f" / Inflation: {inputs.inflation_rate:.1f}% / Stress: {inputs.stress_test_factor:.2f}"
    )
    print(
        f"  Shocks: job loss {inputs.job_loss_prob:.1%}/yr"
        f" / refinance {inputs.refi_prob:.1%}/yr / emergency {inputs.emergency_prob:.1%}/yr"
    )
    print("=" * 80)


def _print_comparison(result: ProjectionResult, stats: tuple[SummaryStats, SummaryStats]):
    m, v = result.mortgage[-1], result.invest_first[-1]
    m_stats, v_stats = stats
    rows = [
        ("Net Worth", m.net_worth, v.net_worth),
        ("Taxable Investments", m.taxable_investments, v.taxable_investments),
        ("401(k) Balance", m.retirement_401k, v.retirement_401k),
        ("Home Equity", m.equity, v.equity),
        ("Total Tax Paid", m_stats.tax, v_stats.tax),
        ("Total Interest Paid", m_stats.interest, v_stats.interest),
        ("Total PMI Paid", m.pmi_paid, v.pmi_paid),
        ("95% CI Width", m.confidence_interval or 0, v.confidence_interval or 0),
    ]
    print("\n[Year 30 comparison]")
    print("-" * 80)
    print(f"{'':<22}{'Pay down mortgage':>19}{'Invest first':>19}{'Delta':>19}")
    print("-" * 80)
    for label, mv, vv in rows:
        delta = vv - mv
        sign = "+" if delta > 0 else ""
        print(f"{label:<22}{_fmt(mv):>19}{_fmt(vv):>19}{sign + _fmt(delta):>19}")
    print(
        f"{'Avg Liquidity Ratio':<22}{m_stats.liquidity_ratio:>19.2f}"
        f"{v_stats.liquidity_ratio:>19.2f}{v_stats.liquidity_ratio - m_stats.liquidity_ratio:>+19.2f}"
    )
    print("-" * 80)


def _print_milestones(milestones: tuple[Milestones, Milestones]):
    def year(n: int) -> str:
        return f"Year {n}" if n else "never"

    print("\n[Milestones]")
    print(f"{'':<22}{'Pay down mortgage':>19}{'Invest first':>19}")
    m, v = milestones
    for label, attr in [
        ("Mortgage paid off", "payoff_year"),
        ("PMI drops off", "pmi_dropoff_year"),
        ("Emergency fund met", "liquidity_year"),
        ("$1M net worth", "first_million_year"),
        ("$2M net worth", "second_million_year"),
    ]:
        print(f"{label:<22}{year(getattr(m, attr)):>19}{year(getattr(v, attr)):>19}")


def _print_yearly_log(result: ProjectionResult):
    for label, trajectory in [("Pay down mortgage", result.mortgage), ("Invest first", result.invest_first)]:
        print(f"\n[Yearly log (every 5 years) - {label}]")
        print("-" * 100)
        print(
            f"{'Year':<5} {'Salary':>12} {'Balance':>12} {'Taxable':>12} {'401(k)':>12}"
            f" {'Net worth':>14} {'Liquidity':>10} {'Rate':>7}"
        )
        print("-" * 100)
        for i, d in enumerate(trajectory):
            if i % 5 == 0 or i == len(trajectory) - 1:
                print(
                    f"{d.year:<5} {_fmt(d.salary):>12} {_fmt(d.balance):>12}"
                    f" {_fmt(d.taxable_investments):>12} {_fmt(d.retirement_401k):>12}"
                    f" {_fmt(d.net_worth):>14} {d.liquidity_ratio:>10.2f} {d.mortgage_rate:>6.2f}%"
                )
        print("-" * 100)


def run_from_args(
    description: str,
    add_args_fn=add_run_args,
    argv: list[str] | None = None,
) -> tuple[ProjectionResult, InputParameters, Constants, argparse.Namespace]:
    """Shared CLI flow: resolve config, validate, run. Exits 1 on bad input."""
    r, config, args = parse_args(description, add_args_fn, argv)
    try:
        inputs = build_inputs(r)
    except InvalidInputError as e:
        errors = e.errors
    else:
        errors = validate_inputs(inputs)
    if errors:
        for e in errors:
            print(f"  {e}", file=sys.stderr)
        raise SystemExit(1)
    constants = build_constants(r, config)

    print(f"Running {args.trials:,} trials per scenario...", file=sys.stderr)
    try:
        result = project(inputs, constants, trial_count=args.trials, seed=args.seed)
    except (InvalidInputError, NumericDegeneracyError) as e:
        print(f"{FAILURE_MESSAGE} ({e})", file=sys.stderr)
        raise SystemExit(1)
    return result, inputs, constants, args


def main(argv: list[str] | None = None):
    """Run both scenarios and print the comparison."""
    result, inputs, constants, _ = run_from_args(
        "Mortgage vs. invest-first Monte Carlo projection", argv=argv,
    )
    _print_header(inputs, constants, result.n_trials)

    stats = (
        summarize(result.mortgage, constants.house.rate),
        summarize(result.invest_first, constants.house.rate),
    )
    _print_comparison(result, stats)
    _print_milestones((find_milestones(result.mortgage), find_milestones(result.invest_first)))
    _print_yearly_log(result)


if __name__ == "__main__":
    main()
