"""TOML config loader with CLI > config > default resolution."""

import argparse
import dataclasses
import sys
import tomllib
from pathlib import Path
from typing import Callable

from mortgage_monte.errors import InvalidInputError
from mortgage_monte.params import (
    DEFAULT_CONSTANTS,
    DEFAULT_INPUTS,
    Constants,
    InputParameters,
    calc_monthly_payment,
)
from mortgage_monte.validation import INPUT_CONSTRAINTS

DEFAULT_CONFIG_PATH = Path("config.toml")

# Engine inputs take their defaults from InputParameters
DEFAULTS = {f.name: getattr(DEFAULT_INPUTS, f.name) for f in dataclasses.fields(InputParameters)}

# Optional TOML tables that override Constants sections
CONSTANT_SECTIONS = ("house", "income", "capital")


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Accept dashed keys as written on the command line (extra-payment → extra_payment)
    return {k.replace("-", "_"): v for k, v in raw.items()}


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared projection flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="config file path (default: config.toml)")
    parser.add_argument("--household-income", type=float, default=None, help=f"annual household income before tax, $ (default: {d['household_income']:,.0f})")
    parser.add_argument("--home-value", type=float, default=None, help=f"home market value, $ (default: {d['home_value']:,.0f})")
    parser.add_argument("--loan-amount", type=float, default=None, help=f"mortgage principal, $ (default: {d['loan_amount']:,.0f})")
    parser.add_argument("--extra-payment", type=float, default=None, help=f"extra principal per month, $ (default: {d['extra_payment']:,.0f})")
    parser.add_argument("--investment-return", type=float, default=None, help=f"expected annual return, %% (default: {d['investment_return']})")
    parser.add_argument("--salary-growth", type=float, default=None, help=f"annual salary growth, %% (default: {d['salary_growth']})")
    parser.add_argument("--market-volatility", type=float, default=None, help=f"annual return volatility sigma, %% (default: {d['market_volatility']})")
    parser.add_argument("--inflation-rate", type=float, default=None, help=f"annual inflation, %% (default: {d['inflation_rate']})")
    parser.add_argument("--liquidity-needed", type=float, default=None, help=f"liquidity reserve target, $ (default: {d['liquidity_needed']:,.0f})")
    parser.add_argument("--job-loss-prob", type=float, default=None, help=f"job loss probability per year (default: {d['job_loss_prob']})")
    parser.add_argument("--refi-prob", type=float, default=None, help=f"refinance opportunity probability per year (default: {d['refi_prob']})")
    parser.add_argument("--emergency-prob", type=float, default=None, help=f"emergency expense probability per year (default: {d['emergency_prob']})")
    parser.add_argument("--ibond-limit", type=float, default=None, help=f"annual I-bond purchase cap, $ (default: {d['ibond_limit']:,.0f})")
    parser.add_argument("--mega-backdoor-amount", type=float, default=None, help=f"mega backdoor 401(k) contribution, $ (default: {d['mega_backdoor_amount']:,.0f})")
    parser.add_argument("--stress-test-factor", type=float, default=None, help=f"downside shock weighting 0-1 (default: {d['stress_test_factor']})")
    parser.add_argument("--ibond-base-rate", type=float, default=None, help=f"I-bond fixed rate, %% (default: {d['ibond_base_rate']})")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def build_inputs(r: dict) -> InputParameters:
    """Build InputParameters from resolved config dict.

    Raises InvalidInputError listing every value that is not a number.
    """
    values = {}
    errors = []
    for key in DEFAULTS:
        try:
            values[key] = float(r[key])
        except (TypeError, ValueError):
            errors.append(f"{INPUT_CONSTRAINTS[key][2]} (got {r[key]!r})")
    if errors:
        raise InvalidInputError("; ".join(errors), errors=errors)
    return InputParameters(**values)


def build_constants(r: dict, config: dict | None = None, base: Constants = DEFAULT_CONSTANTS) -> Constants:
    """Build Constants for a run.

    The household inputs drive the house and salary terms: down payment is
    home value minus loan and the base payment is re-amortized over 30 years.
    ``[house]``, ``[income]`` and ``[capital]`` tables in the config file
    override individual fields after that.
    """
    house = dataclasses.replace(
        base.house,
        value=r["home_value"],
        loan=r["loan_amount"],
        down_payment=max(0.0, r["home_value"] - r["loan_amount"]),
    )
    income = dataclasses.replace(base.income, salary=r["household_income"])
    sections = {"house": house, "income": income, "capital": base.capital}

    for name in CONSTANT_SECTIONS:
        overrides = (config or {}).get(name)
        if not overrides:
            continue
        if "brackets" in overrides:
            overrides = {**overrides, "brackets": tuple(overrides["brackets"])}
        try:
            sections[name] = dataclasses.replace(sections[name], **overrides)
        except TypeError as e:
            print(f"Unknown key in [{name}] config table: {e}", file=sys.stderr)
            raise SystemExit(1)

    house_overrides = (config or {}).get("house") or {}
    if "payment" not in house_overrides:
        h = sections["house"]
        sections["house"] = dataclasses.replace(h, payment=calc_monthly_payment(h.loan, h.rate))
    return dataclasses.replace(base, **sections)


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
    argv: list[str] | None = None,
) -> tuple[dict, dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, raw_config, namespace).
    namespace: raw argparse.Namespace (for extra CLI args added via add_args_fn).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args(argv)
    config = load_config(args.config)
    return resolve(args, config), config, args
