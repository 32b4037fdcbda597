"""Core calculation engine for the mortgage calculator.

This module implements the Swedish amortization requirement, the monthly cost
and stress test of a mortgage, the yearly amortization schedule and the payoff
projection under a fixed monthly payment.

Two kinds of schedule live here and they intentionally differ:
``build_yearly_schedule`` compounds once a year against the opening balance
(the chart of the required amortization), while ``project_payoff`` simulates
month by month (the payoff estimates).

No function validates its inputs. A zero property value or income raises
``ZeroDivisionError``; callers should use ``utils.validate_scenario`` first.
"""

from __future__ import annotations

import logging
from typing import List

from .data_models import LoanScenario, MortgageEvaluation, PayoffResult, YearEntry
from .rules import (
    AFFORDABILITY_INCOME_SHARE,
    AMORTIZATION_BANDS,
    DEBT_TO_INCOME_EXTRA_RATE,
    DEBT_TO_INCOME_LIMIT,
    MAX_PAYOFF_MONTHS,
    NON_AMORTIZING_YEARS,
    STRESS_TEST_MIN_RATE,
    STRESS_TEST_RATE_INCREASE,
)

logger = logging.getLogger(__name__)


def ltv_band_rate(ltv: float) -> float:
    """Return the amortization rate of the LTV band ``ltv`` falls into."""
    for band in AMORTIZATION_BANDS:
        if ltv > band.threshold_ltv:
            return band.annual_rate
    return 0.0


def resolve_amortization_rate(
    current_loan_amount: float, property_value: float, annual_income: float
) -> float:
    """Return the required yearly amortization as a fraction of the loan.

    The rate is 2 % above 70 % LTV, 1 % above 50 % LTV and nothing below,
    plus one percentage point when the loan exceeds 4.5 times the gross
    yearly income. For example a 2.1 MSEK loan on a 2.8 MSEK property with
    400 kSEK income gives ``0.02 + 0.01 == 0.03``.
    """
    ltv = current_loan_amount / property_value
    rate = ltv_band_rate(ltv)
    debt_to_income = current_loan_amount / annual_income
    if debt_to_income > DEBT_TO_INCOME_LIMIT:
        rate += DEBT_TO_INCOME_EXTRA_RATE
    return rate


def build_yearly_schedule(
    initial_loan: float, interest_rate: float, amortization_rate: float, years: int
) -> List[YearEntry]:
    """Return the yearly amortization schedule.

    Each year amortizes ``amortization_rate`` of the opening balance and pays
    a full year of interest on it. The balance shrinks geometrically and is
    never clamped. ``years <= 0`` gives an empty schedule.
    """
    remaining_loan = initial_loan
    schedule: List[YearEntry] = []
    for year in range(1, years + 1):
        yearly_amortization = remaining_loan * amortization_rate
        yearly_interest = remaining_loan * (interest_rate / 100)
        remaining_loan -= yearly_amortization
        schedule.append(
            YearEntry(
                year=year,
                remaining_loan=remaining_loan,
                yearly_amortization=yearly_amortization,
                yearly_interest=yearly_interest,
                total_payment=yearly_amortization + yearly_interest,
            )
        )
    return schedule


def stress_test_rate(interest_rate: float) -> float:
    return max(interest_rate + STRESS_TEST_RATE_INCREASE, STRESS_TEST_MIN_RATE)


def evaluate_mortgage(scenario: LoanScenario) -> MortgageEvaluation:
    """Compute the monthly cost, stress test and schedule of a mortgage.

    Parameters
    ----------
    scenario: LoanScenario
        The loan to evaluate. All figures are based on
        ``current_loan_amount``; the original amount is only used for
        ``loan_percentage``.

    Returns
    -------
    MortgageEvaluation
        Unrounded monthly figures. The loan counts as affordable when the
        stress tested monthly payment is strictly below 40 % of the gross
        monthly income.
    """
    loan = scenario.current_loan_amount
    amortization_rate = resolve_amortization_rate(
        loan, scenario.property_value, scenario.annual_income
    )
    debt_to_income = loan / scenario.annual_income

    monthly_interest_rate = scenario.interest_rate / 12 / 100
    monthly_amortization = loan * amortization_rate / 12
    monthly_interest = loan * monthly_interest_rate

    stress_rate = stress_test_rate(scenario.interest_rate)
    stress_payment = loan * (stress_rate / 12 / 100) + monthly_amortization
    affordability_limit = scenario.annual_income / 12 * AFFORDABILITY_INCOME_SHARE

    schedule = build_yearly_schedule(
        loan, scenario.interest_rate, amortization_rate, scenario.loan_term_years
    )

    loan_percentage = None
    if scenario.original_loan_amount:
        loan_percentage = loan / scenario.original_loan_amount * 100

    logger.debug(
        "Evaluated loan %.2f: amortization %.2f%%, stress payment %.2f (limit %.2f)",
        loan,
        amortization_rate * 100,
        stress_payment,
        affordability_limit,
    )

    return MortgageEvaluation(
        monthly_amortization=monthly_amortization,
        monthly_interest=monthly_interest,
        total_monthly_payment=monthly_amortization + monthly_interest,
        effective_interest_rate=scenario.interest_rate,
        amortization_rate_pct=amortization_rate * 100,
        debt_to_income_pct=debt_to_income * 100,
        stress_test_rate=stress_rate,
        stress_test_monthly_payment=stress_payment,
        is_affordable=stress_payment < affordability_limit,
        yearly_schedule=tuple(schedule),
        loan_percentage=loan_percentage,
    )


def project_payoff(
    loan_amount: float,
    monthly_payment: float,
    annual_interest_rate: float,
    one_time_payment: float = 0.0,
) -> PayoffResult:
    """Simulate monthly payments until the loan is paid off.

    The one-time payment is deducted from the balance before the first month.
    When ``monthly_payment`` does not exceed the first month's interest the
    loan can never be paid off and ``PayoffResult(99, 0, balance)`` is
    returned without simulating. Otherwise a balance below one krona counts
    as paid off, and the simulation stops after 1200 months regardless.
    """
    monthly_rate = annual_interest_rate / 12 / 100
    balance = loan_amount - one_time_payment

    if monthly_payment <= balance * monthly_rate:
        logger.debug(
            "Payment %.2f does not cover interest on %.2f; loan never pays off",
            monthly_payment,
            balance,
        )
        return PayoffResult(years=NON_AMORTIZING_YEARS, months=0, final_balance=balance)

    months = 0
    while balance > 0 and months < MAX_PAYOFF_MONTHS:
        interest_this_month = balance * monthly_rate
        principal_this_month = min(balance, monthly_payment - interest_this_month)
        balance -= principal_this_month
        months += 1
        # Treat anything below one krona as paid off
        if balance < 1:
            balance = 0.0
            break

    return PayoffResult(years=months // 12, months=months % 12, final_balance=balance)
