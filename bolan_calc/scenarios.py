"""Extra payment scenarios.

Shows what happens to the payoff time and the total interest when a fixed
extra amount is paid every month on top of the required payment. All payoff
times come from ``engine.project_payoff``.
"""

from __future__ import annotations

from typing import List

from .data_models import CustomScenarioResult, ExtraPaymentOffer, ExtraPaymentScenario, PayoffResult
from .engine import project_payoff
from .rules import REFERENCE_TERM_YEARS

FLAT_OFFERS = (
    ExtraPaymentOffer(extra_amount=1000.0, label="+1,000 SEK/month"),
    ExtraPaymentOffer(extra_amount=2000.0, label="+2,000 SEK/month"),
    ExtraPaymentOffer(extra_amount=5000.0, label="+5,000 SEK/month"),
)

# (share of the base payment, label)
PROPORTIONAL_OFFERS = (
    (0.5, "+50% payment"),
    (1.0, "Double payment"),
)


def extra_payment_catalog(base_monthly_payment: float) -> List[ExtraPaymentOffer]:
    """Return the five extra payment offers in display order."""
    offers = list(FLAT_OFFERS)
    for share, label in PROPORTIONAL_OFFERS:
        offers.append(ExtraPaymentOffer(extra_amount=base_monthly_payment * share, label=label))
    return offers


def compare_extra_payments(
    current_loan_amount: float, base_monthly_payment: float, annual_interest_rate: float
) -> List[ExtraPaymentScenario]:
    """Evaluate every offer of the catalog against the base payment.

    Interest and months saved are measured against a fixed reference: interest
    on the full loan for 30 years, and a 360 month term. A non-amortizing
    payment yields the 99 year marker, which flows into these figures as-is.
    """
    reference_months = REFERENCE_TERM_YEARS * 12
    reference_interest = current_loan_amount * annual_interest_rate / 100 * REFERENCE_TERM_YEARS

    scenarios: List[ExtraPaymentScenario] = []
    for offer in extra_payment_catalog(base_monthly_payment):
        total_monthly = base_monthly_payment + offer.extra_amount
        payoff = project_payoff(current_loan_amount, total_monthly, annual_interest_rate)
        total_months = payoff.total_months
        total_interest = total_monthly * total_months - current_loan_amount
        scenarios.append(
            ExtraPaymentScenario(
                extra_amount=offer.extra_amount,
                label=offer.label,
                monthly_payment=total_monthly,
                payoff=payoff,
                total_interest=total_interest,
                interest_saved=reference_interest - total_interest,
                months_saved=reference_months - total_months,
            )
        )
    return scenarios


def current_payoff_path(
    current_loan_amount: float, base_monthly_payment: float, annual_interest_rate: float
) -> PayoffResult:
    """Payoff time when only the required payment is made."""
    return project_payoff(current_loan_amount, base_monthly_payment, annual_interest_rate)


def evaluate_custom_scenario(
    current_loan_amount: float,
    base_monthly_payment: float,
    annual_interest_rate: float,
    monthly_extra: float = 0.0,
    one_time_payment: float = 0.0,
) -> CustomScenarioResult:
    """Compare a custom payment plan with paying only the base payment.

    The one-time payment reduces the balance immediately; ``monthly_extra``
    is added to every monthly payment.
    """
    new_monthly_payment = base_monthly_payment + monthly_extra
    payoff = project_payoff(
        current_loan_amount, new_monthly_payment, annual_interest_rate, one_time_payment
    )
    baseline = project_payoff(current_loan_amount, base_monthly_payment, annual_interest_rate)

    baseline_interest = base_monthly_payment * baseline.total_months - current_loan_amount
    new_interest = new_monthly_payment * payoff.total_months - (current_loan_amount - one_time_payment)

    return CustomScenarioResult(
        monthly_extra=monthly_extra,
        one_time_payment=one_time_payment,
        monthly_payment=new_monthly_payment,
        new_balance=current_loan_amount - one_time_payment,
        payoff=payoff,
        baseline_payoff=baseline,
        interest_saved=baseline_interest - new_interest,
        months_saved=baseline.total_months - payoff.total_months,
    )


def project_balance_path(
    current_loan_amount: float, monthly_payment: float, annual_interest_rate: float, years: int
) -> List[float]:
    """Return the approximate balance at the end of each year.

    A coarse yearly approximation used for charting the scenarios: a year of
    payments minus a year of interest on the opening balance, floored at zero.
    """
    balance = current_loan_amount
    path: List[float] = []
    for _ in range(years):
        yearly_payment = monthly_payment * 12
        yearly_interest = balance * (annual_interest_rate / 100)
        balance = max(0.0, balance - (yearly_payment - yearly_interest))
        path.append(balance)
    return path
