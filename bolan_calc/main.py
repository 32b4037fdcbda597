"""Command‑line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi‑command interface.
Users can evaluate a mortgage under the Swedish amortization rules, compare
extra payment scenarios, weigh extra payments against investing, and export or
import calculations as JSON files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional
from uuid import uuid4

import click

from .data_models import AccountType, LoanScenario, MortgageEvaluation, SavedCalculation, YearEntry
from .engine import evaluate_mortgage, project_payoff
from .errors import CalculatorError
from .export import build_export_document, calculation_to_dict, parse_imported_calculation
from .formatter import (
    format_payoff,
    format_sek,
    print_comparisons,
    print_current_path,
    print_custom_scenario,
    print_evaluation,
    print_scenarios,
    print_schedule,
)
from .investment import compare_investment_strategies
from .scenarios import compare_extra_payments, current_payoff_path, evaluate_custom_scenario
from .utils import (
    build_scenario,
    ensure_finite,
    iso_timestamp,
    number_from_str,
    validate_extra_payments,
    validate_scenario,
)

logger = logging.getLogger(__name__)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("2000000", "2 000 000") and shorthand with
    ``k``/``m`` suffixes (e.g. "2.5m" meaning 2_500_000). Returns a float.
    """
    value = value.strip().lower()
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return number_from_str(value) * factor
    except CalculatorError:
        raise click.BadParameter(f"Invalid amount: {value}")


def _amount(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    return parse_amount(value)


def loan_options(func: Callable) -> Callable:
    """Attach the options describing a loan scenario to a command."""
    options = [
        click.option("--original-loan", "-o", "original_loan", required=True, callback=_amount, help="Original loan amount"),
        click.option("--current-loan", "-c", "current_loan", callback=_amount, help="Current loan balance (defaults to the original amount)"),
        click.option("--property-value", "-v", "property_value", required=True, callback=_amount, help="Property value"),
        click.option("--income", "-i", "income", required=True, callback=_amount, help="Gross yearly household income"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", default=30, show_default=True, type=int, help="Loan term in years"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_scenario_from_options(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
) -> LoanScenario:
    try:
        return build_scenario(original_loan, current_loan, property_value, income, rate, term)
    except CalculatorError as exc:
        raise click.BadParameter(str(exc))


def check_finite(value: float, name: str) -> float:
    try:
        return ensure_finite(value, name)
    except CalculatorError as exc:
        raise click.BadParameter(str(exc))


def check_extra_payments(loan_amount: float, monthly_extra: float, one_time_payment: float) -> None:
    try:
        validate_extra_payments(loan_amount, monthly_extra, one_time_payment)
    except CalculatorError as exc:
        raise click.BadParameter(str(exc))


def export_schedule_to_csv(path: Path, schedule: List[YearEntry]) -> None:
    """Export the yearly schedule to a CSV file."""
    header = ["Year", "Remaining_Loan", "Yearly_Amortization", "Yearly_Interest", "Total_Payment"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for entry in schedule:
            writer.writerow(
                [
                    entry.year,
                    entry.remaining_loan,
                    entry.yearly_amortization,
                    entry.yearly_interest,
                    entry.total_payment,
                ]
            )


def write_json(path: Path, data: dict) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


@click.group()
@click.option("--verbose", is_flag=True, help="Log calculation details")
def cli(verbose: bool) -> None:
    """A Swedish mortgage calculator following the amortization requirement."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def evaluate(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
    output: Optional[str],
) -> None:
    """Compute the monthly payment, stress test and yearly schedule."""
    scenario = build_scenario_from_options(original_loan, current_loan, property_value, income, rate, term)
    evaluation = evaluate_mortgage(scenario)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            scenarios = compare_extra_payments(
                scenario.current_loan_amount, evaluation.total_monthly_payment, scenario.interest_rate
            )
            write_json(path, build_export_document(scenario, evaluation, scenarios))
            click.echo(f"Calculation exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_schedule_to_csv(path, list(evaluation.yearly_schedule))
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        return
    print_evaluation(evaluation)
    print_schedule(evaluation.yearly_schedule)


@cli.command()
@loan_options
def scenarios(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
) -> None:
    """Show how extra monthly payments shorten the loan."""
    scenario = build_scenario_from_options(original_loan, current_loan, property_value, income, rate, term)
    evaluation = evaluate_mortgage(scenario)
    base_payment = evaluation.total_monthly_payment
    print_current_path(
        base_payment,
        current_payoff_path(scenario.current_loan_amount, base_payment, scenario.interest_rate),
    )
    print_scenarios(
        compare_extra_payments(scenario.current_loan_amount, base_payment, scenario.interest_rate)
    )


@cli.command()
@loan_options
@click.option("--expected-return", "expected_return", default=7.0, show_default=True, type=float, help="Expected yearly stock market return (percent)")
@click.option("--account", "account", type=click.Choice([a.value for a in AccountType]), default=AccountType.ISK.value, show_default=True, help="Investment account type")
def invest(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
    expected_return: float,
    account: str,
) -> None:
    """Compare paying extra on the mortgage with investing the difference."""
    check_finite(expected_return, "Expected return")
    scenario = build_scenario_from_options(original_loan, current_loan, property_value, income, rate, term)
    evaluation = evaluate_mortgage(scenario)
    payment_scenarios = compare_extra_payments(
        scenario.current_loan_amount, evaluation.total_monthly_payment, scenario.interest_rate
    )
    comparisons = compare_investment_strategies(
        payment_scenarios,
        scenario.current_loan_amount,
        scenario.interest_rate,
        expected_return,
        account,
    )
    print_comparisons(comparisons)


@cli.command()
@loan_options
@click.option("--monthly-extra", "monthly_extra", default="0", callback=_amount, help="Extra amount paid every month")
@click.option("--one-time", "one_time", default="0", callback=_amount, help="One-time payment made now")
def custom(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
    monthly_extra: float,
    one_time: float,
) -> None:
    """Evaluate a custom plan of extra monthly and one-time payments."""
    scenario = build_scenario_from_options(original_loan, current_loan, property_value, income, rate, term)
    check_extra_payments(scenario.current_loan_amount, monthly_extra, one_time)
    evaluation = evaluate_mortgage(scenario)
    result = evaluate_custom_scenario(
        scenario.current_loan_amount,
        evaluation.total_monthly_payment,
        scenario.interest_rate,
        monthly_extra=monthly_extra,
        one_time_payment=one_time,
    )
    print_custom_scenario(result)


@cli.command()
@click.option("--loan", "loan", required=True, callback=_amount, help="Loan balance")
@click.option("--payment", "payment", required=True, callback=_amount, help="Monthly payment")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--one-time", "one_time", default="0", callback=_amount, help="One-time payment made now")
def payoff(loan: float, payment: float, rate: float, one_time: float) -> None:
    """Estimate how long a fixed monthly payment takes to clear a loan."""
    check_finite(rate, "Interest rate")
    check_extra_payments(loan, 0.0, one_time)
    result = project_payoff(loan, payment, rate, one_time)
    if result.never_pays_off:
        click.echo(
            f"A payment of {format_sek(payment)} SEK does not cover the interest; "
            "the loan is never paid off."
        )
        return
    click.echo(f"Paid off in {format_payoff(result)}")


@cli.command()
@loan_options
@click.option("--name", "name", default="Calculation", show_default=True, help="Name of the calculation")
@click.option("--output", "output", required=True, type=str, help="Output file path (.json)")
def export(
    original_loan: float,
    current_loan: Optional[float],
    property_value: float,
    income: float,
    rate: float,
    term: int,
    name: str,
    output: str,
) -> None:
    """Save a calculation to a JSON file that can be imported again."""
    path = Path(output)
    if path.suffix.lower() != ".json":
        raise click.BadParameter("Calculation export must use .json extension")
    scenario = build_scenario_from_options(original_loan, current_loan, property_value, income, rate, term)
    calculation = SavedCalculation(
        id=uuid4().hex,
        date=iso_timestamp(),
        name=name,
        values=scenario,
        results=evaluate_mortgage(scenario),
    )
    write_json(path, calculation_to_dict(calculation))
    click.echo(f"Calculation exported to {path}")


@cli.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_calculation(path: Path) -> None:
    """Load an exported calculation and evaluate it again."""
    try:
        calculation = parse_imported_calculation(path.read_text(encoding="utf-8"))
        validate_scenario(calculation.values)
    except CalculatorError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{calculation.name} ({calculation.date})")
    evaluation: MortgageEvaluation = evaluate_mortgage(calculation.values)
    if evaluation != calculation.results:
        logger.info("Stored results of %s differ from a fresh evaluation", calculation.id)
    print_evaluation(evaluation)


if __name__ == "__main__":
    cli()
