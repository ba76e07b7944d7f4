"""Input parameters, structural constants and loan payment helper."""

import math
from dataclasses import dataclass, field

from mortgage_monte.errors import InvalidInputError

SIM_YEARS = 30
MONTHS_PER_YEAR = 12
LOAN_YEARS = 30


@dataclass(frozen=True)
class InputParameters:
    """User-facing knobs for one projection run (percent fields are in %)."""

    household_income: float = 250000
    home_value: float = 597000
    loan_amount: float = 567150
    extra_payment: float = 500          # extra principal per month ($)
    investment_return: float = 7.0      # %/yr
    salary_growth: float = 3.0          # %/yr
    market_volatility: float = 20.0     # sigma, %/yr
    inflation_rate: float = 3.5         # %/yr
    liquidity_needed: float = 30000     # emergency reserve target in year-1 dollars
    job_loss_prob: float = 0.05
    refi_prob: float = 0.15
    emergency_prob: float = 0.01
    ibond_limit: float = 3000           # annual I-bond purchase cap ($)
    mega_backdoor_amount: float = 2000
    stress_test_factor: float = 0.25    # 0 = unbiased, 1 = downside shocks only
    ibond_base_rate: float = 0.90       # I-bond fixed rate (%)


@dataclass(frozen=True)
class HouseTerms:
    value: float = 597000
    loan: float = 567150
    down_payment: float = 29850
    pmi_monthly: float = 99.25
    payment: float = 3631.52
    rate: float = 0.06625               # annual, decimal
    appreciation: float = 3.0           # %/yr
    closing_costs: float = 5000


@dataclass(frozen=True)
class IncomeTerms:
    salary: float = 250000
    tax_rate: float = 0.0495
    deduction: float = 29200
    limit_401k: float = 23000
    match_rate: float = 0.05
    fica_rate: float = 0.153


@dataclass(frozen=True)
class CapitalGainsTerms:
    gain_rate: float = 0.15
    dividend_rate: float = 0.20
    qualified_rate: float = 0.20
    # (0% ceiling, qualified-rate ceiling)
    brackets: tuple[float, float] = (83350, 517200)


# (upper threshold, marginal rate, cumulative tax below threshold)
DEFAULT_TAX_BRACKETS: tuple[tuple[float, float, float], ...] = (
    (22000, 0.10, 0),
    (89450, 0.12, 2200),
    (190750, 0.22, 10294),
    (384750, 0.24, 32580),
    (490000, 0.32, 74208),
    (731200, 0.35, 108217),
    (float("inf"), 0.37, 192417),
)


@dataclass(frozen=True)
class Constants:
    """Structural and economic parameters fixed for a run."""

    house: HouseTerms = field(default_factory=HouseTerms)
    income: IncomeTerms = field(default_factory=IncomeTerms)
    tax_brackets: tuple[tuple[float, float, float], ...] = DEFAULT_TAX_BRACKETS
    capital: CapitalGainsTerms = field(default_factory=CapitalGainsTerms)

    def __post_init__(self):
        thresholds = [upper for upper, _, _ in self.tax_brackets]
        if not thresholds:
            raise InvalidInputError("tax_brackets must not be empty")
        if any(b <= a for a, b in zip(thresholds, thresholds[1:])):
            raise InvalidInputError("tax_brackets must be sorted ascending by threshold")
        if not math.isinf(thresholds[-1]):
            raise InvalidInputError("last tax bracket threshold must be unbounded (inf)")


DEFAULT_INPUTS = InputParameters()
DEFAULT_CONSTANTS = Constants()


def calc_monthly_payment(principal: float, annual_rate: float, years: int = LOAN_YEARS) -> float:
    """Fixed monthly payment of a fully amortizing loan.

    Degenerate loans return a finite value: no principal or no term → 0,
    zero rate → straight-line principal / months.
    """
    months = years * MONTHS_PER_YEAR
    if principal <= 0 or months <= 0:
        return 0.0
    r = annual_rate / MONTHS_PER_YEAR
    if r == 0:
        return principal / months
    growth = (1 + r) ** months
    return principal * r * growth / (growth - 1)
