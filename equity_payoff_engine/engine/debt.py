import math
from dataclasses import dataclass
from typing import List, Optional

from .errors import InvalidLoanParameters

# Balances below this are floating-point residue and clamp to zero.
BALANCE_EPSILON = 0.01


@dataclass(frozen=True)
class ScheduleRow:
    month: int
    payment: float
    principal: float
    interest: float
    balance: float
    cumulative_interest: float


@dataclass(frozen=True)
class EquityData:
    total_equity: float
    max_tappable_equity: float
    current_ltv: Optional[float]
    max_ltv: float


def loan_term_months(term_years: float) -> int:
    return int(round(term_years * 12))


def _check(principal: float, annual_rate: float, term_years: float) -> None:
    # the term must round to at least one monthly payment
    if principal <= 0 or annual_rate < 0 or term_years <= 0 or loan_term_months(term_years) < 1:
        raise InvalidLoanParameters(principal, annual_rate, term_years)


def monthly_payment(principal: float, annual_rate: float, term_years: float) -> float:
    """Level payment P = L * r(1+r)^n / ((1+r)^n - 1); L / n when the rate is zero."""
    _check(principal, annual_rate, term_years)
    r = annual_rate / 12.0
    n = loan_term_months(term_years)
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return principal * (r * growth) / (growth - 1)


def remaining_balance(principal: float, annual_rate: float, term_years: float, payments_made: int) -> float:
    """Closed-form balance after `payments_made` level payments."""
    if payments_made <= 0:
        return principal
    n = loan_term_months(term_years)
    if payments_made >= n:
        return 0.0
    r = annual_rate / 12.0
    if r == 0:
        return principal - (principal / n) * payments_made
    factor = (1 + r) ** n
    paid_factor = (1 + r) ** payments_made
    return principal * (factor - paid_factor) / (factor - 1)


def total_interest(principal: float, annual_rate: float, term_years: float) -> float:
    payment = monthly_payment(principal, annual_rate, term_years)
    return payment * loan_term_months(term_years) - principal


def interest_saved(balance: float, annual_rate: float, remaining_months: int) -> float:
    """Interest still owed on `balance` if it ran its remaining months instead of being retired now."""
    if balance <= 0 or remaining_months <= 0:
        return 0.0
    payment = monthly_payment(balance, annual_rate, remaining_months / 12.0)
    return payment * remaining_months - balance


def break_even_months(current_payment: float, new_payment: float, closing_costs: float) -> float:
    savings = current_payment - new_payment
    if savings <= 0:
        return math.inf
    return float(math.ceil(closing_costs / savings))


def amortize_one_month(debt: float, payment: float, annual_rate: float) -> tuple[float, float, float]:
    """
    Applies one payment and returns (principal, interest, new_debt).
    Principal never exceeds the outstanding debt.
    """
    if debt <= 0:
        return 0.0, 0.0, 0.0
    interest = debt * annual_rate / 12.0
    principal = min(payment - interest, debt)
    interest = min(interest, payment - principal)
    new_debt = debt - principal
    if new_debt < BALANCE_EPSILON:
        new_debt = 0.0
    return principal, interest, new_debt


def generate_schedule(principal: float, annual_rate: float, term_years: float) -> List[ScheduleRow]:
    payment = monthly_payment(principal, annual_rate, term_years)
    rows: List[ScheduleRow] = []
    balance = principal
    cumulative = 0.0
    for month in range(1, loan_term_months(term_years) + 1):
        paid_principal, paid_interest, balance = amortize_one_month(balance, payment, annual_rate)
        cumulative += paid_interest
        rows.append(ScheduleRow(
            month=month,
            payment=paid_principal + paid_interest,
            principal=paid_principal,
            interest=paid_interest,
            balance=balance,
            cumulative_interest=cumulative,
        ))
        if balance <= 0:
            break
    return rows


def equity_data(property_value: float, mortgage_balance: float, max_ltv: float = 0.80) -> EquityData:
    max_loan = property_value * max_ltv
    return EquityData(
        total_equity=property_value - mortgage_balance,
        max_tappable_equity=max(0.0, max_loan - mortgage_balance),
        current_ltv=(mortgage_balance / property_value) if property_value > 0 else None,
        max_ltv=max_ltv,
    )


def cash_out_loan_amount(current_balance: float, cash_out: float, closing_costs: float = 0.0) -> float:
    """New principal of a cash-out refinance: old balance plus cash taken plus financed costs."""
    return current_balance + cash_out + closing_costs
