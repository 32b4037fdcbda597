"""Conversion of calculation records to and from JSON-compatible data.

Saved calculations are exchanged as ``{id, date, name, values, results}``
documents. Numbers are written as JSON floats, never as formatted strings, so
reading an exported file gives back exactly the values that were written.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict
from typing import Any, Dict, Iterable, Optional

from .data_models import (
    CustomScenarioResult,
    ExtraPaymentScenario,
    InvestmentComparison,
    LoanScenario,
    MortgageEvaluation,
    PayoffResult,
    SavedCalculation,
    YearEntry,
)
from .errors import MalformedImportError
from .utils import ensure_finite, iso_timestamp

logger = logging.getLogger(__name__)


def _float(data: Dict[str, Any], key: str) -> float:
    return ensure_finite(float(data[key]), key)


def _reject_constant(token: str) -> float:
    raise ValueError(f"Non-finite number {token}")


def scenario_to_dict(scenario: LoanScenario) -> Dict[str, Any]:
    return asdict(scenario)


def scenario_from_dict(data: Dict[str, Any]) -> LoanScenario:
    return LoanScenario(
        original_loan_amount=_float(data, "original_loan_amount"),
        current_loan_amount=_float(data, "current_loan_amount"),
        property_value=_float(data, "property_value"),
        annual_income=_float(data, "annual_income"),
        interest_rate=_float(data, "interest_rate"),
        loan_term_years=int(data["loan_term_years"]),
    )


def evaluation_to_dict(evaluation: MortgageEvaluation) -> Dict[str, Any]:
    """Convert an evaluation into a JSON-serialisable dictionary."""
    data = asdict(evaluation)
    data["yearly_schedule"] = [asdict(entry) for entry in evaluation.yearly_schedule]
    return data


def evaluation_from_dict(data: Dict[str, Any]) -> MortgageEvaluation:
    schedule = tuple(
        YearEntry(
            year=int(entry["year"]),
            remaining_loan=_float(entry, "remaining_loan"),
            yearly_amortization=_float(entry, "yearly_amortization"),
            yearly_interest=_float(entry, "yearly_interest"),
            total_payment=_float(entry, "total_payment"),
        )
        for entry in data["yearly_schedule"]
    )
    loan_percentage = data.get("loan_percentage")
    if loan_percentage is not None:
        loan_percentage = ensure_finite(float(loan_percentage), "loan_percentage")
    return MortgageEvaluation(
        monthly_amortization=_float(data, "monthly_amortization"),
        monthly_interest=_float(data, "monthly_interest"),
        total_monthly_payment=_float(data, "total_monthly_payment"),
        effective_interest_rate=_float(data, "effective_interest_rate"),
        amortization_rate_pct=_float(data, "amortization_rate_pct"),
        debt_to_income_pct=_float(data, "debt_to_income_pct"),
        stress_test_rate=_float(data, "stress_test_rate"),
        stress_test_monthly_payment=_float(data, "stress_test_monthly_payment"),
        is_affordable=bool(data["is_affordable"]),
        yearly_schedule=schedule,
        loan_percentage=loan_percentage,
    )


def payoff_to_dict(payoff: PayoffResult) -> Dict[str, Any]:
    data = asdict(payoff)
    data["never_pays_off"] = payoff.never_pays_off
    return data


def payment_scenario_to_dict(scenario: ExtraPaymentScenario) -> Dict[str, Any]:
    data = asdict(scenario)
    data["payoff"] = payoff_to_dict(scenario.payoff)
    return data


def calculation_to_dict(calculation: SavedCalculation) -> Dict[str, Any]:
    return {
        "id": calculation.id,
        "date": calculation.date,
        "name": calculation.name,
        "values": scenario_to_dict(calculation.values),
        "results": evaluation_to_dict(calculation.results),
    }


def calculation_from_dict(data: Dict[str, Any]) -> SavedCalculation:
    return SavedCalculation(
        id=str(data["id"]),
        date=str(data["date"]),
        name=str(data["name"]),
        values=scenario_from_dict(data["values"]),
        results=evaluation_from_dict(data["results"]),
    )


def parse_imported_calculation(text: str) -> SavedCalculation:
    """Parse an exported calculation document.

    Raises
    ------
    MalformedImportError
        If the text is not JSON, does not have the expected shape or holds
        a number that is not finite.
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        logger.warning("Rejected import: %s", exc)
        raise MalformedImportError("Invalid calculation file format") from exc
    if not isinstance(data, dict):
        logger.warning("Rejected import: top level is %s", type(data).__name__)
        raise MalformedImportError("Invalid calculation file format")
    try:
        return calculation_from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Rejected import: %r", exc)
        raise MalformedImportError(f"Invalid calculation file format: {exc}") from exc


def export_filename(name: str) -> str:
    """File name used when downloading a saved calculation."""
    return re.sub(r"\s+", "_", name.strip()) + ".json"


def build_export_document(
    scenario: LoanScenario,
    evaluation: MortgageEvaluation,
    payment_scenarios: Iterable[ExtraPaymentScenario],
    date: Optional[str] = None,
) -> Dict[str, Any]:
    """Collect inputs, monthly figures, scenarios and schedule in one document."""
    return {
        "date": date or iso_timestamp(),
        "inputs": scenario_to_dict(scenario),
        "monthly_payments": {
            "amortization": evaluation.monthly_amortization,
            "interest": evaluation.monthly_interest,
            "total": evaluation.total_monthly_payment,
            "stress_test": evaluation.stress_test_monthly_payment,
        },
        "rates": {
            "amortization": evaluation.amortization_rate_pct,
            "debt_to_income": evaluation.debt_to_income_pct,
            "interest": evaluation.effective_interest_rate,
        },
        "payment_scenarios": [payment_scenario_to_dict(s) for s in payment_scenarios],
        "amortization_schedule": [asdict(entry) for entry in evaluation.yearly_schedule],
    }


def comparison_to_dict(comparison: InvestmentComparison) -> Dict[str, Any]:
    data = asdict(comparison)
    data["payoff"] = payoff_to_dict(comparison.payoff)
    data["mortgage_strategy"]["payoff"] = payoff_to_dict(comparison.mortgage_strategy.payoff)
    data["winner"] = comparison.winner.value
    return data


def custom_scenario_to_dict(result: CustomScenarioResult) -> Dict[str, Any]:
    data = asdict(result)
    data["payoff"] = payoff_to_dict(result.payoff)
    data["baseline_payoff"] = payoff_to_dict(result.baseline_payoff)
    return data
