"""Input range table and pre-run validation."""

import dataclasses
import math

from mortgage_monte.errors import InvalidInputError
from mortgage_monte.params import InputParameters

# field → (min, max, message)
INPUT_CONSTRAINTS: dict[str, tuple[float, float, str]] = {
    "household_income": (0, 2000000, "Household income must be between $0 and $2,000,000"),
    "home_value": (0, 10000000, "Home value must be between $0 and $10,000,000"),
    "loan_amount": (0, 10000000, "Loan amount must be between $0 and $10,000,000"),
    "extra_payment": (0, 1000000, "Extra payment must be between $0 and $1,000,000"),
    "investment_return": (-20, 30, "Investment return must be between -20% and 30%"),
    "salary_growth": (-10, 20, "Salary growth must be between -10% and 20%"),
    "market_volatility": (0, 100, "Market volatility must be between 0% and 100%"),
    "inflation_rate": (-5, 20, "Inflation rate must be between -5% and 20%"),
    "liquidity_needed": (0, 1000000, "Liquidity needed must be between $0 and $1,000,000"),
    "job_loss_prob": (0, 1, "Job loss probability must be between 0 and 1"),
    "refi_prob": (0, 1, "Refinance probability must be between 0 and 1"),
    "emergency_prob": (0, 1, "Emergency probability must be between 0 and 1"),
    "ibond_limit": (0, 15000, "I-Bond limit must be between $0 and $15,000"),
    "mega_backdoor_amount": (0, 50000, "Mega backdoor amount must be between $0 and $50,000"),
    "stress_test_factor": (0, 1, "Stress test factor must be between 0 and 1"),
    "ibond_base_rate": (0, 10, "I-Bond base rate must be between 0% and 10%"),
}

# The engine cannot run without a return, a volatility and an inflation rate
REQUIRED_NONZERO_FIELDS = ("investment_return", "market_volatility", "inflation_rate")


def validate_single_input(field: str, value: float) -> str | None:
    """Return the error message for one field, or None if it is in range."""
    lo, hi, message = INPUT_CONSTRAINTS[field]
    if value is None or not math.isfinite(value) or value < lo or value > hi:
        return message
    return None


def validate_inputs(inputs: InputParameters) -> list[str]:
    """Check every field against the range table. Returns list of error messages."""
    errors = []
    for f in dataclasses.fields(inputs):
        message = validate_single_input(f.name, getattr(inputs, f.name))
        if message is not None:
            errors.append(message)
    return errors


def check_required_inputs(inputs: InputParameters) -> None:
    """Raise InvalidInputError if any field is missing/non-finite or a required rate is 0."""
    errors = []
    for f in dataclasses.fields(inputs):
        value = getattr(inputs, f.name)
        if value is None:
            errors.append(f"{f.name} is missing")
        elif not isinstance(value, (int, float)) or not math.isfinite(value):
            errors.append(f"{f.name} must be a finite number (got {value!r})")
        elif f.name in REQUIRED_NONZERO_FIELDS and value == 0:
            errors.append(f"{f.name} must be nonzero")
    if errors:
        raise InvalidInputError(
            "Invalid input state: " + "; ".join(errors), errors=errors,
        )
