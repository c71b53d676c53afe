from .debt import loan_term_months, monthly_payment
from .types import CalculatorInputs, ScenarioType


def prior_loan_payment(inputs: CalculatorInputs) -> float:
    """Level payment of the mortgage in place before the equity event; 0 if nothing is owed."""
    mortgage = inputs.current_mortgage
    if mortgage.current_balance <= 0 or loan_term_months(mortgage.remaining_years) < 1:
        return 0.0
    return monthly_payment(mortgage.current_balance, mortgage.interest_rate, mortgage.remaining_years)


def payment_delta(scenario_type: ScenarioType, new_payment_due: float, prior_payment: float) -> float:
    """
    Extra monthly outlay versus the prior loan.
    A cash-out refinance replaces the old mortgage; a HELOC sits on top of it.
    """
    if ScenarioType(scenario_type) is ScenarioType.CASH_OUT_REFINANCE:
        return new_payment_due - prior_payment
    return new_payment_due


def net_cash_flow(net_monthly_cash_flow: float, scenario_type: ScenarioType,
                  new_payment_due: float, prior_payment: float) -> float:
    return net_monthly_cash_flow - payment_delta(scenario_type, new_payment_due, prior_payment)
