"""Data models for the mortgage calculator.

This module defines the value records passed in and out of the calculation
core: the loan scenario entered by the user, the evaluation of that scenario,
payoff projections, extra payment scenarios and the investment comparison.
All records are frozen dataclasses; the core never mutates a record once it
has been produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .rules import NON_AMORTIZING_YEARS


class Winner(str, Enum):
    MORTGAGE = "mortgage"
    INVESTMENT = "investment"
    TIE = "tie"


class AccountType(str, Enum):
    """How investment returns are taxed.

    ``ISK`` (investeringssparkonto) is taxed yearly on the standing value,
    ``STANDARD`` pays capital gains tax on realized gains.
    """

    ISK = "isk"
    STANDARD = "standard"


@dataclass(frozen=True)
class LoanScenario:
    """Inputs describing a single mortgage.

    Attributes
    ----------
    original_loan_amount: float
        The amount originally borrowed.
    current_loan_amount: float
        The outstanding balance. LTV, DTI and all payments are based on this.
    property_value: float
        Current market value of the property.
    annual_income: float
        Gross yearly household income.
    interest_rate: float
        Annual nominal interest rate in percent (3.5 means 3.5 %).
    loan_term_years: int
        Number of years shown in the yearly amortization schedule.
    """

    original_loan_amount: float
    current_loan_amount: float
    property_value: float
    annual_income: float
    interest_rate: float
    loan_term_years: int


@dataclass(frozen=True)
class YearEntry:
    """A row of the yearly amortization schedule."""

    year: int
    remaining_loan: float
    yearly_amortization: float
    yearly_interest: float
    total_payment: float


@dataclass(frozen=True)
class MortgageEvaluation:
    """Monthly cost, stress test and schedule for a loan scenario.

    Percentages (``amortization_rate_pct``, ``debt_to_income_pct``,
    ``loan_percentage``) are expressed in percent, all amounts in SEK. Values
    are never rounded.
    """

    monthly_amortization: float
    monthly_interest: float
    total_monthly_payment: float
    effective_interest_rate: float
    amortization_rate_pct: float
    debt_to_income_pct: float
    stress_test_rate: float
    stress_test_monthly_payment: float
    is_affordable: bool
    yearly_schedule: Tuple[YearEntry, ...]
    loan_percentage: Optional[float] = None


@dataclass(frozen=True)
class PayoffResult:
    """Time needed to pay off a loan under a fixed monthly payment.

    ``years=99, months=0`` with a positive ``final_balance`` is the
    non-amortizing marker: the payment does not exceed the interest, so the
    loan is never paid off. Check ``never_pays_off`` before using the numeric
    payoff time.
    """

    years: int
    months: int
    final_balance: float

    @property
    def total_months(self) -> int:
        return self.years * 12 + self.months

    @property
    def never_pays_off(self) -> bool:
        return (
            self.years == NON_AMORTIZING_YEARS
            and self.months == 0
            and self.final_balance > 0
        )


@dataclass(frozen=True)
class ExtraPaymentOffer:
    extra_amount: float
    label: str


@dataclass(frozen=True)
class ExtraPaymentScenario:
    """The effect of paying a fixed extra amount every month."""

    extra_amount: float
    label: str
    monthly_payment: float
    payoff: PayoffResult
    total_interest: float
    interest_saved: float
    months_saved: int


@dataclass(frozen=True)
class CustomScenarioResult:
    """A user-defined plan of extra monthly and one-time payments.

    Savings are measured against paying off the loan at the base payment,
    not against the fixed reference term used by the scenario catalog.
    """

    monthly_extra: float
    one_time_payment: float
    monthly_payment: float
    new_balance: float
    payoff: PayoffResult
    baseline_payoff: PayoffResult
    interest_saved: float
    months_saved: int


@dataclass(frozen=True)
class MortgageStrategy:
    interest_saved: float
    months_saved: int
    payoff: PayoffResult
    net_worth: float


@dataclass(frozen=True)
class InvestmentStrategy:
    """Outcome of investing the extra payment instead.

    ``isk_tax_paid`` is only set for ISK accounts; ``capital_gains`` and
    ``tax_amount`` only for standard accounts.
    """

    final_value: float
    total_invested: float
    after_tax_value: float
    net_worth: float
    isk_tax_paid: Optional[float] = None
    capital_gains: Optional[float] = None
    tax_amount: Optional[float] = None


@dataclass(frozen=True)
class InvestmentComparison:
    """An extra payment scenario set against investing the same amount."""

    extra_amount: float
    label: str
    monthly_payment: float
    payoff: PayoffResult
    total_interest: float
    interest_saved: float
    months_saved: int
    mortgage_strategy: MortgageStrategy
    investment_strategy: InvestmentStrategy
    winner: Winner
    winner_margin_pct: Optional[float]
    headline: str
    description: str
    mortgage_share_pct: float
    investment_share_pct: float
    narrative: str


@dataclass(frozen=True)
class SavedCalculation:
    """A calculation as persisted or exported.

    ``id`` and ``date`` are assigned by whoever stores the record; the
    calculation core never sets them.
    """

    id: str
    date: str
    name: str
    values: LoanScenario
    results: MortgageEvaluation
