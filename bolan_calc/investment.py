"""Pay down the mortgage or invest the difference.

For every extra payment scenario, the extra amount is instead invested monthly
for as long as the scenario takes to pay off the loan. The investment value
after tax is compared with the value of the avoided debt.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

from .data_models import (
    AccountType,
    ExtraPaymentScenario,
    InvestmentComparison,
    InvestmentStrategy,
    MortgageStrategy,
    Winner,
)
from .rules import CAPITAL_GAINS_TAX_RATE, ISK_ANNUAL_TAX_RATE, WINNER_THRESHOLD


def _monthly_return_rate(expected_annual_return: float) -> float:
    return (1 + expected_annual_return / 100) ** (1 / 12) - 1


def simulate_investment(
    monthly_investment: float,
    total_months: int,
    expected_annual_return: float,
    account_type: Union[AccountType, str],
) -> InvestmentStrategy:
    """Grow a monthly savings plan and apply Swedish investment tax.

    ISK accounts accrue 0.375 % of the account value every twelfth month; the
    tax is paid from outside the account, so it is reported in
    ``isk_tax_paid`` but not deducted. Standard accounts pay 30 % on the gain
    when the holding is sold at the end.
    """
    account_type = AccountType(account_type)
    monthly_rate = _monthly_return_rate(expected_annual_return)
    total_invested = monthly_investment * total_months
    value = 0.0

    if account_type is AccountType.ISK:
        tax_paid = 0.0
        for month in range(1, total_months + 1):
            value = value * (1 + monthly_rate) + monthly_investment
            if month % 12 == 0:
                tax_paid += value * ISK_ANNUAL_TAX_RATE
        return InvestmentStrategy(
            final_value=value,
            total_invested=total_invested,
            after_tax_value=value,
            net_worth=value,
            isk_tax_paid=tax_paid,
        )

    for _ in range(total_months):
        value = value * (1 + monthly_rate) + monthly_investment
    capital_gains = max(0.0, value - total_invested)
    tax_amount = capital_gains * CAPITAL_GAINS_TAX_RATE
    after_tax_value = value - tax_amount
    return InvestmentStrategy(
        final_value=value,
        total_invested=total_invested,
        after_tax_value=after_tax_value,
        net_worth=after_tax_value,
        capital_gains=capital_gains,
        tax_amount=tax_amount,
    )


def _margin_pct(better: float, worse: float) -> Optional[float]:
    # No percentage exists when the losing side is worth nothing
    if worse == 0:
        return None
    return (better / worse - 1) * 100


def pick_winner(
    mortgage_net_worth: float, investment_net_worth: float
) -> Tuple[Winner, Optional[float]]:
    """Return the winning strategy and how much better it is, in percent.

    A side only wins when it beats the other by more than 5 %. The margin is
    ``None`` when the losing side is worth nothing.
    """
    if mortgage_net_worth > investment_net_worth * WINNER_THRESHOLD:
        return Winner.MORTGAGE, _margin_pct(mortgage_net_worth, investment_net_worth)
    if investment_net_worth > mortgage_net_worth * WINNER_THRESHOLD:
        return Winner.INVESTMENT, _margin_pct(investment_net_worth, mortgage_net_worth)
    return Winner.TIE, 0.0


def format_time_saved(months: int) -> str:
    months = abs(months)
    return f"{months // 12} years and {months % 12} months"


def _by_margin(margin: Optional[float]) -> str:
    return "" if margin is None else f" by {margin:.1f}%"


def _describe(
    winner: Winner,
    margin: Optional[float],
    scenario: ExtraPaymentScenario,
    annual_interest_rate: float,
    expected_annual_return: float,
) -> Tuple[str, str, str]:
    years = scenario.payoff.years
    by_margin = _by_margin(margin)
    if winner is Winner.MORTGAGE:
        return (
            "Mortgage Wins",
            f"Better{by_margin}",
            f"Paying an extra {scenario.extra_amount:.0f} SEK per month on your mortgage "
            f"would save you {scenario.interest_saved:.0f} SEK in interest and help you pay off "
            f"your mortgage {format_time_saved(scenario.months_saved)} earlier. This strategy "
            f"outperforms investing in the stock market{by_margin} given the current "
            f"{annual_interest_rate:g}% interest rate and expected stock market returns.",
        )
    if winner is Winner.INVESTMENT:
        return (
            "Investment Wins",
            f"Better{by_margin}",
            f"Investing {scenario.extra_amount:.0f} SEK per month in the stock market while "
            f"making minimum mortgage payments would likely result in a higher net worth after "
            f"{years} years. The investment strategy outperforms the mortgage payoff strategy"
            f"{by_margin} assuming a {expected_annual_return:g}% annual return.",
        )
    return (
        "It's a Tie",
        "Both strategies are similar",
        f"Both strategies yield similar results after {years} years. Paying extra on your "
        f"mortgage offers guaranteed savings on interest, while investing offers potential for "
        f"higher returns but with more risk. Consider your risk tolerance and financial goals "
        f"when deciding.",
    )


def compare_investment_strategies(
    scenarios: Iterable[ExtraPaymentScenario],
    current_loan_amount: float,
    annual_interest_rate: float,
    expected_annual_return: float,
    account_type: Union[AccountType, str] = AccountType.ISK,
) -> List[InvestmentComparison]:
    """Set every extra payment scenario against investing the extra amount.

    Parameters
    ----------
    scenarios: Iterable[ExtraPaymentScenario]
        Output of ``scenarios.compare_extra_payments``.
    current_loan_amount: float
        Net worth of the mortgage strategy (the debt that no longer exists).
    annual_interest_rate: float
        Mortgage interest rate in percent, quoted in the narrative. The
        scenarios already reflect it.
    expected_annual_return: float
        Expected yearly stock market return in percent.
    account_type: AccountType or str
        ``"isk"`` or ``"standard"``; anything else raises ``ValueError``.
    """
    account_type = AccountType(account_type)
    comparisons: List[InvestmentComparison] = []
    for scenario in scenarios:
        mortgage = MortgageStrategy(
            interest_saved=scenario.interest_saved,
            months_saved=scenario.months_saved,
            payoff=scenario.payoff,
            net_worth=current_loan_amount,
        )
        investment = simulate_investment(
            scenario.extra_amount,
            scenario.payoff.total_months,
            expected_annual_return,
            account_type,
        )
        winner, margin = pick_winner(mortgage.net_worth, investment.net_worth)
        headline, description, narrative = _describe(
            winner, margin, scenario, annual_interest_rate, expected_annual_return
        )

        largest = max(mortgage.net_worth, investment.net_worth)
        mortgage_share = mortgage.net_worth / largest * 100 if largest else 0.0
        investment_share = investment.net_worth / largest * 100 if largest else 0.0

        comparisons.append(
            InvestmentComparison(
                extra_amount=scenario.extra_amount,
                label=scenario.label,
                monthly_payment=scenario.monthly_payment,
                payoff=scenario.payoff,
                total_interest=scenario.total_interest,
                interest_saved=scenario.interest_saved,
                months_saved=scenario.months_saved,
                mortgage_strategy=mortgage,
                investment_strategy=investment,
                winner=winner,
                winner_margin_pct=margin,
                headline=headline,
                description=description,
                mortgage_share_pct=mortgage_share,
                investment_share_pct=investment_share,
                narrative=narrative,
            )
        )
    return comparisons
