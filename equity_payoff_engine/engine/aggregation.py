from typing import List, Optional, Sequence

from .config import DEFAULT_POLICY, SimulationPolicy
from .debt import interest_saved, loan_term_months
from .simulator import simulate
from .types import (
    AmortizationResults,
    CalculatorInputs,
    MonthlyAmortizationEntry,
    PayoffAnalysis,
    PerformanceSummary,
    StackedChartPoint,
    Triggered,
)


def chart_point(entry: MonthlyAmortizationEntry) -> StackedChartPoint:
    """Debt is drawn beneath the stack; the total is equity + appreciation + asset."""
    return StackedChartPoint(
        month=entry.month,
        date=entry.date,
        debt=entry.debt_balance,
        base_equity=entry.base_equity,
        appreciation=entry.property_appreciation,
        asset_value=entry.asset_value,
        total_value=entry.base_equity + entry.property_appreciation + entry.asset_value,
    )


def stacked_chart_data(
    schedule: Sequence[MonthlyAmortizationEntry],
    horizon_months: int = 240,
    step_months: int = 12,
) -> List[StackedChartPoint]:
    """Month 0, every `step_months`-th month, and the last month inside the horizon."""
    last = min(len(schedule), horizon_months) - 1
    if last < 0:
        return []
    indices = list(range(0, last + 1, step_months))
    if indices[-1] != last:
        indices.append(last)
    return [chart_point(schedule[i]) for i in indices]


def analyze_payoff(schedule: Sequence[MonthlyAmortizationEntry], inputs: CalculatorInputs) -> PayoffAnalysis:
    refi = inputs.refinance_scenario
    for entry in schedule:
        if isinstance(entry.at_trigger, Triggered):
            remaining = loan_term_months(refi.new_loan_term_years) - entry.month
            debt = entry.at_trigger.debt_balance_at_trigger
            return PayoffAnalysis(
                trigger_month=entry.month,
                trigger_date=entry.date,
                asset_value_at_trigger=entry.at_trigger.asset_value_at_trigger,
                debt_at_trigger=debt,
                interest_saved=interest_saved(debt, refi.new_interest_rate, remaining),
                final_asset_retained=entry.asset_value,
            )
    return PayoffAnalysis(
        trigger_month=None,
        trigger_date=None,
        asset_value_at_trigger=0.0,
        debt_at_trigger=0.0,
        interest_saved=0.0,
        final_asset_retained=0.0,
    )


def performance_summary(schedule: Sequence[MonthlyAmortizationEntry], inputs: CalculatorInputs) -> PerformanceSummary:
    last = schedule[-1]
    invested = inputs.asset_investment.investment_amount
    total_roi = (last.total_asset - invested) / invested
    years = len(schedule) / 12.0
    growth = 1 + total_roi
    annualized = growth ** (1.0 / years) - 1 if growth > 0 else -1.0
    return PerformanceSummary(
        final_total_asset=last.total_asset,
        final_property_value=last.property_value,
        final_asset_value=last.asset_value,
        total_roi=total_roi,
        annualized_return=annualized,
    )


def build_results(
    inputs: CalculatorInputs,
    policy: SimulationPolicy = DEFAULT_POLICY,
    horizon_months: Optional[int] = None,
) -> AmortizationResults:
    schedule = simulate(inputs, policy=policy, horizon_months=horizon_months)
    return AmortizationResults(
        monthly_schedule=schedule,
        stacked_chart_data=stacked_chart_data(
            schedule, policy.chart_horizon_months, policy.chart_step_months
        ),
        payoff_analysis=analyze_payoff(schedule, inputs),
        performance_summary=performance_summary(schedule, inputs),
    )
