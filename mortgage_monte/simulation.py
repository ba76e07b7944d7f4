"""Single-trial simulator: one 30-year month-by-month path for one scenario."""

import math
from dataclasses import dataclass
from typing import Callable

from mortgage_monte.params import (
    MONTHS_PER_YEAR,
    SIM_YEARS,
    Constants,
    InputParameters,
    calc_monthly_payment,
)
from mortgage_monte.shocks import ShockGenerator
from mortgage_monte.tax import compute_tax

# Market return clamp (%)
RETURN_FLOOR = -50.0
RETURN_CAP = 100.0

PMI_LTV_THRESHOLD = 0.78
REFI_FLOOR_RATIO = 0.85   # refinance never goes below 85% of the initial loan rate
REFI_STEP = 0.005         # 0.5 percentage points per refinance

JOB_LOSS_CONDITIONAL_PROB = 0.7
JOB_LOSS_EXPOSED_YEARS = 2
JOB_LOSS_SALARY_RATIO = 0.5

CONTRIBUTION_SALARY_CAP = 0.10  # 401(k) contribution at most 10% of salary

# Decimal places kept per field; everything else rounds to whole currency units
FIELD_DECIMALS: dict[str, int] = {
    "liquidity_ratio": 2,
    "mortgage_rate": 2,
}


@dataclass
class YearRecord:
    """One simulated (or averaged) year of one scenario."""

    year: int
    balance: float
    equity: float
    home_value: float
    taxable_investments: float
    retirement_401k: float
    total_investments: float
    net_worth: float
    pmi_paid: float
    taxes_paid: float
    salary: float
    liquidity_ratio: float
    mortgage_rate: float
    confidence_interval: float | None = None


AVERAGED_FIELDS: tuple[str, ...] = (
    "balance",
    "equity",
    "home_value",
    "taxable_investments",
    "retirement_401k",
    "total_investments",
    "net_worth",
    "pmi_paid",
    "taxes_paid",
    "salary",
    "liquidity_ratio",
    "mortgage_rate",
)


def round_field(name: str, value: float) -> float:
    """Round to the precision reported for ``name``, ties toward +inf.

    Non-finite values pass through.
    """
    if not math.isfinite(value):
        return value
    scale = 10 ** FIELD_DECIMALS.get(name, 0)
    # Drop float noise first so a rate like 6.624999... still lands on the .5 tie
    scaled = round(value * scale, 6)
    return math.floor(scaled + 0.5) / scale if scale > 1 else math.floor(scaled + 0.5)


def calc_volatile_return(
    expected_return: float,
    volatility: float,
    stress_factor: float,
    normal_sample: Callable[[], float],
) -> float:
    """Stochastic return (%) blending an unbiased shock with a downside-only shock.

    stress_factor=0 leaves the distribution symmetric; 1 keeps only the
    downside half. Result is clamped to [-50, 100].
    """
    shock = normal_sample()
    stress_shock = min(0.0, normal_sample())
    total_shock = shock * (1 - stress_factor) + stress_shock * stress_factor
    raw_return = expected_return + volatility * total_shock
    return max(RETURN_FLOOR, min(RETURN_CAP, raw_return))


def _loan_to_value(balance: float, home_value: float) -> float:
    if home_value > 0:
        return balance / home_value
    return math.inf if balance > 0 else 0.0


@dataclass
class TrialState:
    """Balances threaded month to month through one trial."""

    balance: float
    principal_paid: float
    taxable: float
    rate: float
    payment: float
    pmi_paid: float = 0.0
    retirement_401k: float = 0.0
    ibonds: float = 0.0
    months_paid: int = 0

    @classmethod
    def initial(cls, constants: Constants, is_mortgage: bool) -> "TrialState":
        """Starting position.

        Mortgage: full loan outstanding, down payment already in the house.
        Invest-first: house owned outright and its value put straight into
        the taxable account.
        """
        house = constants.house
        if is_mortgage:
            balance = house.loan
            principal_paid = house.down_payment
            taxable = 0.0
        else:
            balance = 0.0
            principal_paid = house.value
            taxable = house.value
        return cls(
            balance=balance,
            principal_paid=principal_paid,
            taxable=taxable,
            rate=house.rate,
            payment=calc_monthly_payment(balance, house.rate),
        )


def simulate_trial(
    inputs: InputParameters,
    constants: Constants,
    is_mortgage: bool,
    shocks: ShockGenerator,
    round_values: bool = True,
) -> list[YearRecord]:
    """Run one 30-year trial and return its year-by-year records.

    round_values=False keeps full precision, for callers that aggregate
    many trials and round once at the end.
    """
    house = constants.house
    income = constants.income
    growth = inputs.salary_growth / 100
    inflation = inputs.inflation_rate / 100
    appreciation = min(inflation, house.appreciation / 100)
    refi_floor = house.rate * REFI_FLOOR_RATIO
    ibond_rate = (inputs.ibond_base_rate + max(0.0, inputs.inflation_rate)) / 100

    def market_return() -> float:
        return calc_volatile_return(
            inputs.investment_return,
            inputs.market_volatility,
            inputs.stress_test_factor,
            shocks.normal_sample,
        )

    s = TrialState.initial(constants, is_mortgage)
    records: list[YearRecord] = []

    for y in range(SIM_YEARS):
        job_loss = shocks.bernoulli_event(inputs.job_loss_prob, JOB_LOSS_CONDITIONAL_PROB)
        if job_loss and y < JOB_LOSS_EXPOSED_YEARS:
            salary = income.salary * JOB_LOSS_SALARY_RATIO
        else:
            salary = income.salary * (1 + growth) ** y
        contribution = min(
            income.limit_401k * 2 + inputs.mega_backdoor_amount,
            salary * CONTRIBUTION_SALARY_CAP,
        )
        home_value = house.value * (1 + appreciation) ** y
        liquidity_target = inputs.liquidity_needed * (1 + inflation) ** y

        # Pre-tax deferral capped at the statutory limit; mega backdoor is after-tax
        taxable_income = max(
            0.0, salary - min(contribution, income.limit_401k) - income.deduction,
        )
        taxes = compute_tax(taxable_income, constants=constants)

        ibond_room = max(0.0, inputs.ibond_limit)

        for _ in range(MONTHS_PER_YEAR):
            if shocks.bernoulli_event(inputs.refi_prob / MONTHS_PER_YEAR) and s.rate > refi_floor:
                s.rate = max(refi_floor, s.rate - REFI_STEP)
                s.payment = calc_monthly_payment(s.balance, s.rate)

            interest = s.balance * s.rate / MONTHS_PER_YEAR if s.balance > 0 else 0.0
            scheduled = min(s.balance, s.payment - interest)

            s.taxable *= 1 + market_return() / 100 / MONTHS_PER_YEAR

            if s.balance > 0 and _loan_to_value(s.balance, home_value) > PMI_LTV_THRESHOLD:
                s.pmi_paid += house.pmi_monthly

            if s.balance > 0:
                extra = 0.0
                if is_mortgage and not shocks.bernoulli_event(inputs.emergency_prob / MONTHS_PER_YEAR):
                    extra = max(0.0, min(s.balance - scheduled, inputs.extra_payment))
                s.balance = max(0.0, s.balance - scheduled - extra)
                s.principal_paid += scheduled + extra
                s.months_paid += 1

            if not is_mortgage or s.balance <= 0:
                to_bonds = min(ibond_room, inputs.extra_payment)
                ibond_room -= to_bonds
                s.ibonds += to_bonds
                s.taxable += inputs.extra_payment - to_bonds

        match = min(salary * income.match_rate, contribution)
        s.retirement_401k = (
            s.retirement_401k * (1 + market_return() / 100) + contribution + match
        )
        s.ibonds *= 1 + ibond_rate

        liquid = s.taxable + s.ibonds
        raw = {
            "balance": s.balance,
            "equity": home_value - s.balance,
            "home_value": home_value,
            "taxable_investments": s.taxable,
            "retirement_401k": s.retirement_401k,
            "total_investments": s.taxable + s.retirement_401k + s.ibonds,
            "net_worth": home_value - s.balance + s.taxable + s.retirement_401k + s.ibonds,
            "pmi_paid": s.pmi_paid,
            "taxes_paid": taxes,
            "salary": salary,
            "liquidity_ratio": liquid / liquidity_target if liquidity_target > 0 else 0.0,
            "mortgage_rate": s.rate * 100,
        }
        if round_values:
            raw = {k: round_field(k, v) for k, v in raw.items()}
        records.append(YearRecord(year=y + 1, **raw))

    return records
