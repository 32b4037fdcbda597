"""Swedish mortgage regulation constants.

The amortization requirement (amorteringskravet) ties the yearly amortization
to the loan-to-value ratio of the property, with an additional percentage point
for households borrowing more than 4.5 times their gross income. Banks also
stress test the monthly cost at an inflated interest rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RateBand:
    """An LTV band of the amortization requirement.

    Attributes
    ----------
    threshold_ltv: float
        The band applies when the loan-to-value ratio strictly exceeds this.
    annual_rate: float
        Required yearly amortization as a fraction of the loan.
    """

    threshold_ltv: float
    annual_rate: float


# Evaluated highest threshold first; the first band whose threshold the LTV
# strictly exceeds wins.
AMORTIZATION_BANDS: Tuple[RateBand, ...] = (
    RateBand(threshold_ltv=0.70, annual_rate=0.02),
    RateBand(threshold_ltv=0.50, annual_rate=0.01),
    RateBand(threshold_ltv=0.0, annual_rate=0.0),
)

DEBT_TO_INCOME_LIMIT = 4.5  # 450 % of gross yearly income
DEBT_TO_INCOME_EXTRA_RATE = 0.01

STRESS_TEST_RATE_INCREASE = 3.0  # percentage points
STRESS_TEST_MIN_RATE = 6.0  # percent
AFFORDABILITY_INCOME_SHARE = 0.4  # of gross monthly income

NON_AMORTIZING_YEARS = 99
MAX_PAYOFF_MONTHS = 1200
MAX_LOAN_TERM_YEARS = MAX_PAYOFF_MONTHS // 12

# Reference horizon for the extra payment scenarios
REFERENCE_TERM_YEARS = 30

ISK_ANNUAL_TAX_RATE = 0.00375  # 1.25 % schablonintäkt taxed at 30 %
CAPITAL_GAINS_TAX_RATE = 0.30
WINNER_THRESHOLD = 1.05
