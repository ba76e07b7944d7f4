"""Tests for the single-trial simulator and volatility model."""

import dataclasses
import math
from random import Random

import pytest
from mortgage_monte.params import DEFAULT_CONSTANTS, Constants, HouseTerms, InputParameters, SIM_YEARS
from mortgage_monte.shocks import ShockGenerator
from mortgage_monte.simulation import (
    RETURN_CAP,
    RETURN_FLOOR,
    TrialState,
    calc_volatile_return,
    round_field,
    simulate_trial,
)
from mortgage_monte.stats import find_milestones
from mortgage_monte.tax import compute_tax

# No random life events; market noise only
CALM = InputParameters(job_loss_prob=0, refi_prob=0, emergency_prob=0)


def run(inputs=CALM, constants=DEFAULT_CONSTANTS, is_mortgage=True, seed=42):
    return simulate_trial(inputs, constants, is_mortgage, ShockGenerator(Random(seed)))


def sequence(*values):
    it = iter(values)
    return lambda: next(it)


class TestVolatileReturn:
    def test_zero_sample_returns_expected(self):
        assert calc_volatile_return(7.0, 20.0, 0.0, lambda: 0.0) == 7.0

    def test_clamped_high(self):
        assert calc_volatile_return(7.0, 20.0, 0.0, lambda: 100.0) == RETURN_CAP

    def test_clamped_low(self):
        assert calc_volatile_return(7.0, 20.0, 0.0, lambda: -100.0) == RETURN_FLOOR

    def test_stress_never_increases(self):
        """Unbiased shock +1, stress shock -1."""
        results = [
            calc_volatile_return(7.0, 20.0, factor, sequence(1.0, -1.0))
            for factor in (0.0, 0.25, 0.5, 0.75, 1.0)
        ]
        assert results == sorted(results, reverse=True)
        assert results[-1] == pytest.approx(-13.0)

    def test_positive_stress_sample_ignored(self):
        """Only the downside half of the stress draw counts."""
        assert calc_volatile_return(7.0, 20.0, 1.0, sequence(0.0, 2.0)) == 7.0


class TestRoundField:
    def test_currency_whole_units(self):
        assert round_field("net_worth", 1234.6) == 1235

    def test_ratio_two_decimals(self):
        assert round_field("liquidity_ratio", 1.23456) == 1.23
        assert round_field("mortgage_rate", 6.625) == 6.63
        assert round_field("mortgage_rate", 0.06625 * 100) == 6.63

    def test_ties_round_up(self):
        assert round_field("net_worth", 2.5) == 3
        assert round_field("net_worth", 3.5) == 4
        assert round_field("net_worth", -2.5) == -2
        assert round_field("liquidity_ratio", 1.005) == 1.01

    def test_nan_passes_through(self):
        assert math.isnan(round_field("net_worth", float("nan")))


class TestTrialState:
    def test_mortgage_start(self):
        s = TrialState.initial(DEFAULT_CONSTANTS, is_mortgage=True)
        house = DEFAULT_CONSTANTS.house
        assert s.balance == house.loan
        assert s.principal_paid == house.down_payment
        assert s.taxable == 0
        assert s.payment == pytest.approx(house.payment, abs=0.5)

    def test_invest_first_start(self):
        s = TrialState.initial(DEFAULT_CONSTANTS, is_mortgage=False)
        assert s.balance == 0
        assert s.payment == 0
        assert s.taxable == DEFAULT_CONSTANTS.house.value


class TestTrajectoryShape:
    def test_thirty_years_in_order(self):
        for is_mortgage in (True, False):
            records = run(InputParameters(), is_mortgage=is_mortgage)
            assert len(records) == SIM_YEARS
            assert [d.year for d in records] == list(range(1, SIM_YEARS + 1))

    def test_invest_first_year_one(self):
        first = run(InputParameters(), is_mortgage=False)[0]
        assert first.balance == 0
        assert first.taxable_investments > 0

    def test_net_worth_identity(self):
        for d in run(is_mortgage=True):
            assert d.net_worth == pytest.approx(d.equity + d.total_investments, abs=2)


class TestMortgageBehavior:
    def test_pmi_charged_while_ltv_high(self):
        first = run()[0]
        assert first.pmi_paid == pytest.approx(12 * DEFAULT_CONSTANTS.house.pmi_monthly, abs=1)

    def test_no_pmi_without_loan(self):
        assert all(d.pmi_paid == 0 for d in run(is_mortgage=False))

    def test_balance_never_increases(self):
        balances = [d.balance for d in run()]
        assert all(b <= a for a, b in zip(balances, balances[1:]))

    def test_extra_payment_pays_off_sooner(self):
        slow = find_milestones(run(dataclasses.replace(CALM, extra_payment=0)))
        fast = find_milestones(run(dataclasses.replace(CALM, extra_payment=3000)))
        assert fast.payoff_year < slow.payoff_year
        assert fast.payoff_year <= 15

    def test_refinance_stops_at_floor(self):
        """Monthly probability 1: two 0.5pt steps, the second capped at 85% of 6.625%."""
        records = run(dataclasses.replace(CALM, refi_prob=12))
        assert records[0].mortgage_rate == 5.63
        assert records[-1].mortgage_rate == 5.63

    def test_no_refinance_keeps_rate(self):
        assert all(d.mortgage_rate == 6.63 for d in run())


class TestIncomeAndTax:
    def test_year_one_taxes(self):
        """250000 salary, 23000 pre-tax deferral, 29200 deduction."""
        first = run()[0]
        assert first.taxes_paid == round(compute_tax(197800, constants=DEFAULT_CONSTANTS))

    def test_salary_growth(self):
        records = run()
        assert records[0].salary == 250000
        assert records[1].salary == 257500

    def test_job_loss_only_hits_early_years(self):
        inputs = dataclasses.replace(CALM, job_loss_prob=1.0)
        rng = ShockGenerator(Random(11))
        hit = 0
        n = 200
        for _ in range(n):
            records = simulate_trial(inputs, DEFAULT_CONSTANTS, True, rng)
            if records[0].salary < 250000:
                hit += 1
                assert records[0].salary == 125000
            assert records[5].salary == round(250000 * 1.03 ** 5)
        assert 0.55 < hit / n < 0.85

    def test_no_job_loss_when_probability_zero(self):
        rng = ShockGenerator(Random(11))
        for _ in range(50):
            assert simulate_trial(CALM, DEFAULT_CONSTANTS, True, rng)[0].salary == 250000


class TestIBonds:
    def test_annual_purchase_cap_resets(self):
        """500/mo surplus, 3000/yr cap, 0.9% + 3.5% composite rate."""
        records = run(is_mortgage=False)
        bonds = [d.total_investments - d.taxable_investments - d.retirement_401k for d in records]
        assert bonds[0] == pytest.approx(3132, abs=2)
        assert bonds[1] == pytest.approx((3132 + 3000) * 1.044, abs=2)

    def test_no_bonds_while_mortgage_outstanding(self):
        first = run(is_mortgage=True)[0]
        assert first.total_investments == pytest.approx(first.retirement_401k, abs=1)


class TestDegenerateInputs:
    def test_zero_home_and_loan(self):
        constants = Constants(house=HouseTerms(value=0, loan=0, down_payment=0))
        for is_mortgage in (True, False):
            for d in run(constants=constants, is_mortgage=is_mortgage):
                for f in dataclasses.fields(d):
                    value = getattr(d, f.name)
                    if value is not None:
                        assert math.isfinite(value)

    def test_zero_liquidity_target(self):
        records = run(dataclasses.replace(CALM, liquidity_needed=0), is_mortgage=False)
        assert all(d.liquidity_ratio == 0 for d in records)

    def test_zero_rate_loan(self):
        constants = Constants(house=dataclasses.replace(DEFAULT_CONSTANTS.house, rate=0.0))
        records = run(dataclasses.replace(CALM, extra_payment=0), constants=constants)
        assert all(math.isfinite(d.balance) for d in records)
        assert records[-1].balance == 0


class FlatShocks:
    """Zero market noise and no life events."""

    def normal_sample(self):
        return 0.0

    def bernoulli_event(self, probability, conditional_probability=1.0):
        return False


def run_flat(inputs, constants=DEFAULT_CONSTANTS, is_mortgage=True):
    return simulate_trial(inputs, constants, is_mortgage, FlatShocks())


class TestEmergencySkipsExtraPayment:
    def test_certain_emergency_matches_no_extra(self):
        """Monthly probability 1: every extra payment is skipped."""
        skipped = run(dataclasses.replace(CALM, emergency_prob=12, extra_payment=3000))
        no_extra = run(dataclasses.replace(CALM, extra_payment=0))
        assert [d.balance for d in skipped] == [d.balance for d in no_extra]

    def test_no_emergency_applies_extra(self):
        with_extra = run(dataclasses.replace(CALM, extra_payment=3000))
        no_extra = run(dataclasses.replace(CALM, extra_payment=0))
        assert with_extra[0].balance < no_extra[0].balance - 12 * 3000 + 1


class TestRetirementContributions:
    """Zero return: the 401(k) is the sum of contributions and match."""

    ZERO_RETURN = dataclasses.replace(CALM, investment_return=0.0)

    def test_ten_percent_of_salary_cap(self):
        """250000 salary: contribution 25000, match 5% = 12500."""
        records = run_flat(self.ZERO_RETURN)
        assert records[0].retirement_401k == 37500
        assert records[1].retirement_401k == 37500 + 25750 + 12875

    def test_statutory_cap_and_match_capped_at_contribution(self):
        """1M salary: contribution 2 x 23000 + 2000, match 50000 capped at 48000."""
        constants = dataclasses.replace(
            DEFAULT_CONSTANTS, income=dataclasses.replace(DEFAULT_CONSTANTS.income, salary=1_000_000),
        )
        records = run_flat(dataclasses.replace(self.ZERO_RETURN, salary_growth=0.0), constants)
        assert records[0].retirement_401k == 96000
        assert records[1].retirement_401k == 192000

    def test_mega_backdoor_raises_cap(self):
        constants = dataclasses.replace(
            DEFAULT_CONSTANTS, income=dataclasses.replace(DEFAULT_CONSTANTS.income, salary=1_000_000),
        )
        inputs = dataclasses.replace(self.ZERO_RETURN, mega_backdoor_amount=10000)
        assert run_flat(inputs, constants)[0].retirement_401k == 56000 + 50000


class TestHomeAppreciation:
    def test_year_one_is_purchase_price(self):
        assert run_flat(CALM)[0].home_value == DEFAULT_CONSTANTS.house.value

    def test_inflation_below_appreciation(self):
        records = run_flat(dataclasses.replace(CALM, inflation_rate=2.0))
        assert records[1].home_value == pytest.approx(597000 * 1.02, abs=1)
        assert records[10].home_value == pytest.approx(597000 * 1.02 ** 10, abs=1)

    def test_inflation_above_appreciation(self):
        records = run_flat(dataclasses.replace(CALM, inflation_rate=5.0))
        assert records[1].home_value == pytest.approx(597000 * 1.03, abs=1)
        assert records[10].home_value == pytest.approx(597000 * 1.03 ** 10, abs=1)


class TestUnroundedTrial:
    def test_full_precision_kept(self):
        exact = simulate_trial(CALM, DEFAULT_CONSTANTS, False, ShockGenerator(Random(42)), round_values=False)
        rounded = run(is_mortgage=False)
        assert [round_field("net_worth", d.net_worth) for d in exact] == [d.net_worth for d in rounded]
        assert any(d.net_worth != round(d.net_worth) for d in exact)
