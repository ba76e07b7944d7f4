"""Monte Carlo projection of paying down a mortgage vs. investing first."""

from mortgage_monte.errors import InvalidInputError, NumericDegeneracyError
from mortgage_monte.params import (
    Constants,
    HouseTerms,
    IncomeTerms,
    CapitalGainsTerms,
    InputParameters,
    DEFAULT_CONSTANTS,
    DEFAULT_INPUTS,
    DEFAULT_TAX_BRACKETS,
    SIM_YEARS,
    calc_monthly_payment,
)
from mortgage_monte.shocks import ShockGenerator
from mortgage_monte.tax import compute_tax
from mortgage_monte.simulation import YearRecord, calc_volatile_return, simulate_trial
from mortgage_monte.monte_carlo import (
    MonteCarloConfig,
    ProjectionResult,
    calc_std,
    project,
    run_scenario,
)
from mortgage_monte.stats import Milestones, SummaryStats, find_milestones, summarize
from mortgage_monte.validation import validate_inputs, validate_single_input
from mortgage_monte.runner import ProjectionRunner

__all__ = [
    "InvalidInputError",
    "NumericDegeneracyError",
    "Constants",
    "HouseTerms",
    "IncomeTerms",
    "CapitalGainsTerms",
    "InputParameters",
    "DEFAULT_CONSTANTS",
    "DEFAULT_INPUTS",
    "DEFAULT_TAX_BRACKETS",
    "SIM_YEARS",
    "calc_monthly_payment",
    "ShockGenerator",
    "compute_tax",
    "YearRecord",
    "calc_volatile_return",
    "simulate_trial",
    "MonteCarloConfig",
    "ProjectionResult",
    "calc_std",
    "project",
    "run_scenario",
    "Milestones",
    "SummaryStats",
    "find_milestones",
    "summarize",
    "validate_inputs",
    "validate_single_input",
    "ProjectionRunner",
]
