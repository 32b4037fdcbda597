"""Utility functions for the mortgage calculator.

This module provides helpers for parsing user input into numbers, checking a
loan scenario before it is handed to the calculation core and producing the
timestamps stored alongside saved calculations.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from .data_models import LoanScenario
from .errors import InvalidInputError
from .rules import MAX_LOAN_TERM_YEARS


def number_from_str(value: str) -> float:
    """Convert a numeric string into a finite ``float``.

    Spaces, non-breaking spaces and commas used as thousands separators are
    stripped, so ``"2 000 000"`` and ``"2,000,000"`` both parse. Raises
    ``InvalidInputError`` if conversion fails or the value is ``nan``/``inf``.
    """
    try:
        cleaned = value.replace(",", "").replace(" ", "").replace("\u00a0", "")
        number = float(cleaned)
    except (AttributeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid numeric value: {value}") from exc
    return ensure_finite(number, "value")


def ensure_finite(value: float, name: str) -> float:
    """Return ``value`` unchanged, or raise ``InvalidInputError`` for nan/inf."""
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number")
    return value


def validate_scenario(scenario: LoanScenario) -> LoanScenario:
    """Reject scenarios the calculation core cannot evaluate meaningfully.

    The core divides by the property value and the income and does not check
    them itself. Returns the scenario unchanged so the call can be chained.
    """
    ensure_finite(scenario.property_value, "Property value")
    ensure_finite(scenario.annual_income, "Annual income")
    ensure_finite(scenario.current_loan_amount, "Current loan amount")
    ensure_finite(scenario.original_loan_amount, "Original loan amount")
    ensure_finite(scenario.interest_rate, "Interest rate")
    if scenario.property_value <= 0:
        raise InvalidInputError("Property value must be positive")
    if scenario.annual_income <= 0:
        raise InvalidInputError("Annual income must be positive")
    if scenario.current_loan_amount <= 0:
        raise InvalidInputError("Current loan amount must be positive")
    if scenario.original_loan_amount <= 0:
        raise InvalidInputError("Original loan amount must be positive")
    if scenario.interest_rate < 0:
        raise InvalidInputError("Interest rate cannot be negative")
    if scenario.loan_term_years <= 0:
        raise InvalidInputError("Loan term must be at least one year")
    if scenario.loan_term_years > MAX_LOAN_TERM_YEARS:
        raise InvalidInputError(f"Loan term cannot exceed {MAX_LOAN_TERM_YEARS} years")
    return scenario


def validate_extra_payments(
    loan_amount: float, monthly_extra: float = 0.0, one_time_payment: float = 0.0
) -> None:
    """Check extra payments before they are applied to a loan balance.

    Both amounts must be finite and non-negative, and a one-time payment may
    not exceed the balance it pays down.
    """
    ensure_finite(monthly_extra, "Monthly extra payment")
    ensure_finite(one_time_payment, "One-time payment")
    if monthly_extra < 0:
        raise InvalidInputError("Monthly extra payment cannot be negative")
    if one_time_payment < 0:
        raise InvalidInputError("One-time payment cannot be negative")
    if one_time_payment > loan_amount:
        raise InvalidInputError("One-time payment cannot exceed the loan balance")


def build_scenario(
    original_loan_amount: float,
    current_loan_amount: Optional[float],
    property_value: float,
    annual_income: float,
    interest_rate: float,
    loan_term_years: int,
) -> LoanScenario:
    """Build and validate a scenario; the current amount defaults to the original."""
    if current_loan_amount is None:
        current_loan_amount = original_loan_amount
    return validate_scenario(
        LoanScenario(
            original_loan_amount=float(original_loan_amount),
            current_loan_amount=float(current_loan_amount),
            property_value=float(property_value),
            annual_income=float(annual_income),
            interest_rate=float(interest_rate),
            loan_term_years=int(loan_term_years),
        )
    )


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """Return ``now`` (default: the current UTC time) in ISO 8601 format."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.isoformat()
