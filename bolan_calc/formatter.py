"""Output helpers for the mortgage calculator.

This module renders evaluations, schedules and scenarios as plain text. All
amounts are rounded to whole kronor and grouped Swedish style, with a space
as thousands separator. Rounding happens here only; the calculation core
always returns unrounded values.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import (
    CustomScenarioResult,
    ExtraPaymentScenario,
    InvestmentComparison,
    MortgageEvaluation,
    PayoffResult,
    YearEntry,
)


def format_sek(amount: float) -> str:
    """Format ``amount`` as whole kronor, e.g. ``1 234 567``."""
    return f"{round(amount):,}".replace(",", " ")


def format_time(months: int) -> str:
    sign = "-" if months < 0 else ""
    months = abs(months)
    return f"{sign}{months // 12}y {months % 12}m"


def format_payoff(payoff: PayoffResult) -> str:
    if payoff.never_pays_off:
        return "never"
    return f"{payoff.years}y {payoff.months}m"


def print_evaluation(evaluation: MortgageEvaluation) -> None:
    """Print the monthly cost and affordability of a mortgage."""
    print("Monthly payment")
    print("-" * 72)
    print(f"Amortization       : {format_sek(evaluation.monthly_amortization)} SEK")
    print(f"Interest           : {format_sek(evaluation.monthly_interest)} SEK")
    print(f"Total              : {format_sek(evaluation.total_monthly_payment)} SEK")
    print(f"Amortization rate  : {evaluation.amortization_rate_pct:.1f}%")
    print(f"Debt to income     : {evaluation.debt_to_income_pct:.1f}%")
    if evaluation.loan_percentage is not None:
        print(f"Loan remaining     : {evaluation.loan_percentage:.1f}% of original")
    print(
        f"Stress test ({evaluation.stress_test_rate:g}%) : "
        f"{format_sek(evaluation.stress_test_monthly_payment)} SEK"
    )
    if not evaluation.is_affordable:
        print("Warning: Monthly payments may be too high for your income")
    print("-" * 72)


def print_schedule(schedule: Iterable[YearEntry]) -> None:
    """Print the yearly amortization schedule as a simple table."""
    headers = ["Year", "Remaining", "Amortization", "Interest", "Total"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.year),
            format_sek(entry.remaining_loan),
            format_sek(entry.yearly_amortization),
            format_sek(entry.yearly_interest),
            format_sek(entry.total_payment),
        ]
        print("\t".join(row))


def print_current_path(monthly_payment: float, payoff: PayoffResult) -> None:
    if payoff.never_pays_off:
        print(
            f"With current monthly payment of {format_sek(monthly_payment)} SEK, "
            "the loan is never paid off."
        )
        return
    print(
        f"With current monthly payment of {format_sek(monthly_payment)} SEK, "
        f"you will pay off the loan in {payoff.years} years and {payoff.months} months."
    )


def print_scenarios(scenarios: Iterable[ExtraPaymentScenario]) -> None:
    print(f"{'Scenario':20s} {'Monthly':>12s} {'Payoff':>10s} {'Interest saved':>16s}")
    for scenario in scenarios:
        print(
            f"{scenario.label:20s} {format_sek(scenario.monthly_payment):>12s} "
            f"{format_payoff(scenario.payoff):>10s} {format_sek(scenario.interest_saved):>16s}"
        )


def print_comparisons(comparisons: Iterable[InvestmentComparison]) -> None:
    """Print the mortgage vs. investment outcome of every scenario."""
    print("Mortgage vs. investment")
    print("=" * 72)
    for comparison in comparisons:
        investment = comparison.investment_strategy
        print(f"{comparison.label}: {comparison.headline} ({comparison.description})")
        print(f"  Mortgage net worth   : {format_sek(comparison.mortgage_strategy.net_worth)} SEK")
        print(f"  Investment net worth : {format_sek(investment.net_worth)} SEK")
        if investment.isk_tax_paid is not None:
            print(f"  ISK tax paid         : {format_sek(investment.isk_tax_paid)} SEK")
        if investment.tax_amount is not None:
            print(f"  Capital gains tax    : {format_sek(investment.tax_amount)} SEK")
        print(f"  {comparison.narrative}")
    print("=" * 72)


def print_custom_scenario(result: CustomScenarioResult) -> None:
    print("Custom Payment Plan")
    print("-" * 72)
    print(f"New monthly payment : {format_sek(result.monthly_payment)} SEK")
    print(f"One-time payment    : {format_sek(result.one_time_payment)} SEK")
    print(f"New loan balance    : {format_sek(result.new_balance)} SEK")
    print(f"Time to payoff      : {format_payoff(result.payoff)}")
    print(f"Interest saved      : {format_sek(result.interest_saved)} SEK")
    print(f"Time saved          : {format_time(result.months_saved)}")
    print("-" * 72)
