"""Summary statistics and display milestones derived from a trajectory."""

from dataclasses import dataclass

from mortgage_monte.params import SIM_YEARS
from mortgage_monte.simulation import YearRecord

PMI_DROPOFF_LTV = 0.8
MILLION = 1_000_000


@dataclass
class SummaryStats:
    tax: float
    interest: float
    liquidity_ratio: float


@dataclass
class Milestones:
    """First year (1-based) each milestone is reached.

    payoff / net worth milestones fall back to the last year; PMI and
    liquidity fall back to 0 (never reached).
    """

    payoff_year: int
    pmi_dropoff_year: int
    liquidity_year: int
    first_million_year: int
    second_million_year: int


def summarize(trajectory: list[YearRecord], house_rate: float) -> SummaryStats:
    """Reduce a trajectory to lifetime totals.

    Interest is approximated as outstanding balance × annual rate at each year
    boundary, not the monthly interest accrued inside the trials.
    """
    n = len(trajectory)
    return SummaryStats(
        tax=sum(d.taxes_paid for d in trajectory),
        interest=sum(d.balance * house_rate for d in trajectory if d.balance > 0),
        liquidity_ratio=sum(d.liquidity_ratio for d in trajectory) / n if n else 0.0,
    )


def _first_year(trajectory: list[YearRecord], predicate, default: int) -> int:
    for d in trajectory:
        if predicate(d):
            return d.year
    return default


def find_milestones(trajectory: list[YearRecord]) -> Milestones:
    return Milestones(
        payoff_year=_first_year(trajectory, lambda d: not d.balance, SIM_YEARS),
        pmi_dropoff_year=_first_year(
            trajectory,
            lambda d: d.home_value > 0 and d.balance / d.home_value <= PMI_DROPOFF_LTV,
            0,
        ),
        liquidity_year=_first_year(trajectory, lambda d: d.liquidity_ratio >= 1, 0),
        first_million_year=_first_year(trajectory, lambda d: d.net_worth >= MILLION, SIM_YEARS),
        second_million_year=_first_year(trajectory, lambda d: d.net_worth >= 2 * MILLION, SIM_YEARS),
    )
