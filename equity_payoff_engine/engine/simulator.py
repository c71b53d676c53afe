import logging
from typing import List, Optional

from .cashflow import net_cash_flow, prior_loan_payment
from .config import DEFAULT_POLICY, SimulationPolicy
from .debt import loan_term_months, monthly_payment, remaining_balance
from .epochs import add_months
from .liquidity import execute_payoff, sell_for_shortfall
from .performance import price_path
from .trigger import can_retire, trigger_met
from .types import (
    NOT_TRIGGERED,
    CalculatorInputs,
    MonthlyAmortizationEntry,
    PerformanceModel,
    ScenarioType,
    Triggered,
)

logger = logging.getLogger(__name__)


def simulation_months(inputs: CalculatorInputs, horizon_months: Optional[int] = None) -> int:
    """Loan term in months, stretched to `horizon_months` when that is longer."""
    term = loan_term_months(inputs.refinance_scenario.new_loan_term_years)
    return max(term, horizon_months or 0)


def simulate(
    inputs: CalculatorInputs,
    policy: SimulationPolicy = DEFAULT_POLICY,
    horizon_months: Optional[int] = None,
) -> List[MonthlyAmortizationEntry]:
    """
    Runs the month-by-month payoff state machine and returns the full schedule.

    Month 0 is the loan origination: full principal, no payment, no cash flow,
    asset bought at the current spot price. Each later month applies one loan payment, one
    property appreciation step and one asset price step, funds any cash-flow
    shortfall by selling asset units, then checks the payoff trigger. Once the
    payoff executes the debt stays at zero for the rest of the run.
    """
    prop = inputs.property
    refi = inputs.refinance_scenario
    asset = inputs.asset_investment
    settings = asset.performance_settings

    # === Constants ===
    term_months = loan_term_months(refi.new_loan_term_years)
    months = simulation_months(inputs, horizon_months)
    new_payment = monthly_payment(refi.new_loan_amount, refi.new_interest_rate, refi.new_loan_term_years)
    prior_payment = prior_loan_payment(inputs)
    monthly_appreciation = (1 + prop.appreciation_rate) ** (1.0 / 12.0) - 1
    path = price_path(
        settings, months,
        epochs=policy.epochs,
        cycle=policy.cycle,
        sentiment_multipliers=policy.sentiment_multipliers,
    )

    logger.info(
        "Simulating %d months: %s of %.2f at %.4f, payment %.2f (prior %.2f), model=%s",
        months, ScenarioType(refi.type).value, refi.new_loan_amount, refi.new_interest_rate,
        new_payment, prior_payment, PerformanceModel(settings.model).value,
    )

    # === State ===
    units = asset.investment_amount / asset.current_asset_price
    spot = asset.current_asset_price
    property_value = prop.current_value
    paid_off = False
    exhausted_logged = False

    schedule: List[MonthlyAmortizationEntry] = []

    for m in range(months):
        if m > 0:
            property_value *= (1 + monthly_appreciation)
            spot *= (1 + float(path.pct_changes[m]))

        debt = 0.0 if paid_off else remaining_balance(
            refi.new_loan_amount, refi.new_interest_rate, refi.new_loan_term_years, m
        )
        payment_due = new_payment if (not paid_off and 1 <= m <= term_months) else 0.0

        # Shortfall liquidation; month 0 is origination and holds the seed position
        cash_flow = 0.0 if m == 0 else net_cash_flow(
            inputs.property_income.net_monthly_cash_flow, refi.type, payment_due, prior_payment
        )
        sale = sell_for_shortfall(-cash_flow, spot, units)
        units = sale.remaining_units
        sold = sale.units_sold
        if sale.unfunded > 0 and not exhausted_logged:
            logger.warning(
                "Asset holdings exhausted in month %d; %.2f of shortfall left unfunded", m, sale.unfunded
            )
            exhausted_logged = True

        # Payoff trigger
        asset_value = units * spot
        payoff_amount = debt
        met = False
        at_trigger = NOT_TRIGGERED
        if not paid_off and debt > 0:
            met = trigger_met(inputs.payoff_trigger, asset_value, debt)
            if met and can_retire(asset_value, debt):
                payoff = execute_payoff(debt, spot, units)
                units = payoff.remaining_units
                sold += payoff.units_sold
                at_trigger = Triggered(asset_value_at_trigger=asset_value, debt_balance_at_trigger=debt)
                logger.info(
                    "Payoff trigger fired in month %d: asset %.2f retires debt %.2f", m, asset_value, debt
                )
                paid_off = True
                debt = 0.0
                asset_value = units * spot

        base_equity = prop.current_value - debt
        appreciation = property_value - prop.current_value

        # === RECORD ROW ===
        schedule.append(MonthlyAmortizationEntry(
            month=m,
            date=add_months(settings.loan_start_date, m).isoformat(),
            debt_balance=debt,
            base_equity=base_equity,
            property_value=property_value,
            property_appreciation=appreciation,
            asset_held=units,
            asset_value=asset_value,
            asset_spot_price=spot,
            asset_performed_pct=float(path.pct_changes[m]),
            cycle_phase=path.phases[m],
            total_asset=base_equity + appreciation + asset_value,
            monthly_payment=payment_due,
            net_cash_flow=cash_flow,
            asset_sold_monthly=sold,
            remaining_asset=units,
            unfunded_shortfall=sale.unfunded,
            payoff_trigger_met=met,
            can_pay_off=paid_off,
            payoff_amount=payoff_amount,
            surplus=max(0.0, asset_value - debt),
            at_trigger=at_trigger,
        ))

        if at_trigger.fired and not policy.continue_after_payoff:
            break

    return schedule
