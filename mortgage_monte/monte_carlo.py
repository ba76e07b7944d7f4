"""Monte Carlo aggregation across trials and the projection entry point."""

import math
import sys
from dataclasses import dataclass, field
from random import Random

from mortgage_monte.errors import InvalidInputError, NumericDegeneracyError
from mortgage_monte.params import DEFAULT_CONSTANTS, SIM_YEARS, Constants, InputParameters
from mortgage_monte.shocks import ShockGenerator
from mortgage_monte.simulation import AVERAGED_FIELDS, YearRecord, round_field, simulate_trial
from mortgage_monte.validation import check_required_inputs

DEFAULT_TRIALS = 2000
CI_Z_SCORE = 1.96  # 95% two-sided, normal approximation
PROGRESS_EVERY = 100


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo aggregation."""

    n_trials: int = DEFAULT_TRIALS
    seed: int | None = None  # None → not reproducible


@dataclass
class ProjectionResult:
    """Averaged trajectories for both scenarios of one run."""

    mortgage: list[YearRecord] = field(default_factory=list)
    invest_first: list[YearRecord] = field(default_factory=list)
    n_trials: int = 0


def calc_std(values: list[float]) -> float:
    """Sample standard deviation (n-1). Fewer than 2 values → 0."""
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    return math.sqrt(sum((x - mean) ** 2 for x in values) / (n - 1))


def run_scenario(
    inputs: InputParameters,
    constants: Constants,
    is_mortgage: bool,
    config: MonteCarloConfig | None = None,
    shocks: ShockGenerator | None = None,
    quiet: bool = False,
) -> list[YearRecord]:
    """Run N independent trials of one scenario and average them year by year.

    Unrounded per-trial records are folded into running sums and each mean
    is rounded once. Only the final-year net worths are kept, for the
    confidence interval.
    """
    if config is None:
        config = MonteCarloConfig()
    n = config.n_trials
    if n < 1:
        raise InvalidInputError(f"trial count must be at least 1 (got {n})")
    if shocks is None:
        shocks = ShockGenerator(Random(config.seed))
    label = "mortgage" if is_mortgage else "invest-first"

    sums = [dict.fromkeys(AVERAGED_FIELDS, 0.0) for _ in range(SIM_YEARS)]
    final_net_worths: list[float] = []

    for i in range(n):
        trial = simulate_trial(inputs, constants, is_mortgage, shocks, round_values=False)
        for year_sums, record in zip(sums, trial):
            for name in AVERAGED_FIELDS:
                year_sums[name] += getattr(record, name)
        final_net_worths.append(trial[-1].net_worth)
        if not quiet and (i + 1) % PROGRESS_EVERY == 0:
            print(f"\r  {label}: {i + 1}/{n}", end="", file=sys.stderr)

    if not quiet and n >= PROGRESS_EVERY:
        print(file=sys.stderr)

    trajectory = []
    for y, year_sums in enumerate(sums):
        means = {}
        for name, total in year_sums.items():
            mean = total / n
            if not math.isfinite(mean):
                raise NumericDegeneracyError(
                    f"{label} year {y + 1}: {name} averaged to {mean}"
                )
            means[name] = round_field(name, mean)
        trajectory.append(YearRecord(year=y + 1, **means))

    trajectory[-1].confidence_interval = round_field(
        "confidence_interval", calc_std(final_net_worths) * CI_Z_SCORE,
    )
    return trajectory


def project(
    inputs: InputParameters,
    constants: Constants = DEFAULT_CONSTANTS,
    trial_count: int | None = None,
    seed: int | None = None,
    quiet: bool = False,
) -> ProjectionResult:
    """Project both scenarios (mortgage-accelerated, invest-first).

    Blocking; run it off the UI thread (see ``runner.ProjectionRunner``).
    Raises InvalidInputError before any trial runs if inputs are unusable.
    """
    check_required_inputs(inputs)
    config = MonteCarloConfig(
        n_trials=DEFAULT_TRIALS if trial_count is None else trial_count,
        seed=seed,
    )
    if config.n_trials < 1:
        raise InvalidInputError(f"trial count must be at least 1 (got {config.n_trials})")

    mortgage = run_scenario(inputs, constants, True, config, quiet=quiet)
    invest_first = run_scenario(inputs, constants, False, config, quiet=quiet)
    return ProjectionResult(
        mortgage=mortgage, invest_first=invest_first, n_trials=config.n_trials,
    )
