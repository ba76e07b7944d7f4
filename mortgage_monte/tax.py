"""Federal income tax, FICA and investment income tax calculations."""

from mortgage_monte.params import DEFAULT_CONSTANTS, Constants

FICA_WAGE_BASE = 160200
SOCIAL_SECURITY_RATE = 0.062
MEDICARE_RATE = 0.0145


def investment_income_tax(
    capital_gains: float, qualified_dividends: float, constants: Constants,
) -> float:
    """Tax on capital gains and dividends, floored at 0.

    The dividend rate is picked from where the dividend amount itself falls:
    at or below the low boundary → 0%, up to the high boundary → qualified rate,
    above it → ordinary dividend rate.
    """
    capital = constants.capital
    low, high = capital.brackets
    if qualified_dividends <= low:
        dividend_rate = 0.0
    elif qualified_dividends <= high:
        dividend_rate = capital.qualified_rate
    else:
        dividend_rate = capital.dividend_rate
    return max(0.0, capital_gains * capital.gain_rate + qualified_dividends * dividend_rate)


def ordinary_income_tax(income: float, constants: Constants) -> float:
    """Progressive bracket tax on ordinary income."""
    if income <= 0:
        return 0.0
    prev_upper = 0.0
    for upper, rate, cumulative in constants.tax_brackets:
        if income <= upper:
            return cumulative + (income - prev_upper) * rate
        prev_upper = upper
    return 0.0  # pragma: no cover  (last bracket is unbounded)


def fica_tax(income: float) -> float:
    """Social Security (capped at the wage base) plus uncapped Medicare."""
    if income <= 0:
        return 0.0
    return min(income, FICA_WAGE_BASE) * SOCIAL_SECURITY_RATE + income * MEDICARE_RATE


def compute_tax(
    ordinary_income: float,
    capital_gains: float = 0.0,
    qualified_dividends: float = 0.0,
    constants: Constants | None = None,
) -> float:
    """Total annual liability: bracket tax + FICA + investment income tax."""
    if constants is None:
        constants = DEFAULT_CONSTANTS
    investment = investment_income_tax(capital_gains, qualified_dividends, constants)
    if ordinary_income <= 0:
        return investment
    return ordinary_income_tax(ordinary_income, constants) + fica_tax(ordinary_income) + investment
