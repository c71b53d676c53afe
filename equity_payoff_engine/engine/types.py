from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Union

import pandas as pd


class ScenarioType(str, Enum):
    CASH_OUT_REFINANCE = "cash-out-refinance"
    HELOC = "heloc"


class PerformanceModel(str, Enum):
    SEASONAL = "seasonal"
    STEADY = "steady"
    CUSTOM = "custom"


class TriggerType(str, Enum):
    PERCENTAGE = "percentage"
    RETAINED_AMOUNT = "retained_amount"


# === Request ===

@dataclass(frozen=True)
class PropertyData:
    current_value: float
    appreciation_rate: float = 0.0


@dataclass(frozen=True)
class CurrentMortgage:
    current_balance: float
    interest_rate: float
    remaining_years: float


@dataclass(frozen=True)
class PropertyIncome:
    net_monthly_cash_flow: float
    monthly_taxes: float = 0.0
    monthly_insurance: float = 0.0
    monthly_hoa: float = 0.0


@dataclass(frozen=True)
class RefinanceScenario:
    type: ScenarioType
    cash_out_amount: float
    new_loan_amount: float
    new_interest_rate: float
    new_loan_term_years: float


@dataclass(frozen=True)
class PerformanceSettings:
    """Asset price-path settings. CAGR, growth and drawdown figures are percentages."""

    model: PerformanceModel
    initial_cagr: float
    loan_start_date: date
    sentiment: str = "neutral"
    max_drawdown_percent: Optional[float] = None
    final_cagr: Optional[float] = None
    custom_annual_growth_rate: Optional[float] = None


@dataclass(frozen=True)
class AssetInvestment:
    investment_amount: float
    current_asset_price: float
    performance_settings: PerformanceSettings


@dataclass(frozen=True)
class PayoffTrigger:
    type: TriggerType
    value: float


@dataclass(frozen=True)
class CalculatorInputs:
    property: PropertyData
    current_mortgage: CurrentMortgage
    property_income: PropertyIncome
    refinance_scenario: RefinanceScenario
    asset_investment: AssetInvestment
    payoff_trigger: PayoffTrigger


# === Trigger snapshot (fired once per run) ===

@dataclass(frozen=True)
class NotTriggered:
    fired: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Triggered:
    asset_value_at_trigger: float
    debt_balance_at_trigger: float
    fired: bool = field(default=True, init=False)


TriggerSnapshot = Union[NotTriggered, Triggered]
NOT_TRIGGERED = NotTriggered()


# === Schedule ===

@dataclass(frozen=True)
class MonthlyAmortizationEntry:
    month: int
    date: str
    debt_balance: float
    base_equity: float
    property_value: float
    property_appreciation: float
    asset_held: float
    asset_value: float
    asset_spot_price: float
    asset_performed_pct: float
    cycle_phase: str
    total_asset: float
    monthly_payment: float
    net_cash_flow: float
    asset_sold_monthly: float
    remaining_asset: float
    unfunded_shortfall: float
    payoff_trigger_met: bool
    can_pay_off: bool
    payoff_amount: float
    surplus: float
    at_trigger: TriggerSnapshot = NOT_TRIGGERED

    def to_payload(self) -> dict:
        row = {
            "month": self.month,
            "date": self.date,
            "debtBalance": self.debt_balance,
            "baseEquity": self.base_equity,
            "propertyValue": self.property_value,
            "propertyAppreciation": self.property_appreciation,
            "assetHeld": self.asset_held,
            "assetValue": self.asset_value,
            "assetSpotPrice": self.asset_spot_price,
            "assetPerformedPct": self.asset_performed_pct,
            "cyclePhase": self.cycle_phase,
            "totalAsset": self.total_asset,
            "monthlyPayment": self.monthly_payment,
            "netCashFlow": self.net_cash_flow,
            "assetSoldMonthly": self.asset_sold_monthly,
            "remainingAsset": self.remaining_asset,
            "unfundedShortfall": self.unfunded_shortfall,
            "payoffTriggerMet": self.payoff_trigger_met,
            "canPayOff": self.can_pay_off,
            "payoffAmount": self.payoff_amount,
            "surplus": self.surplus,
        }
        if isinstance(self.at_trigger, Triggered):
            row["assetValueAtTrigger"] = self.at_trigger.asset_value_at_trigger
            row["debtBalanceAtTrigger"] = self.at_trigger.debt_balance_at_trigger
        return row


# Column order of the exported monthly table.
MONTHLY_COLUMNS = [
    "month", "date", "debtBalance", "baseEquity", "propertyValue", "propertyAppreciation",
    "assetHeld", "assetValue", "assetSpotPrice", "assetPerformedPct", "cyclePhase",
    "totalAsset", "monthlyPayment", "netCashFlow", "assetSoldMonthly", "remainingAsset",
    "unfundedShortfall", "payoffTriggerMet", "canPayOff", "payoffAmount", "surplus",
    "assetValueAtTrigger", "debtBalanceAtTrigger",
]

CHART_COLUMNS = ["month", "date", "debt", "baseEquity", "appreciation", "assetValue", "totalValue"]


@dataclass(frozen=True)
class StackedChartPoint:
    month: int
    date: str
    debt: float
    base_equity: float
    appreciation: float
    asset_value: float
    total_value: float

    def to_payload(self) -> dict:
        return {
            "month": self.month,
            "date": self.date,
            "debt": self.debt,
            "baseEquity": self.base_equity,
            "appreciation": self.appreciation,
            "assetValue": self.asset_value,
            "totalValue": self.total_value,
        }


@dataclass(frozen=True)
class PayoffAnalysis:
    trigger_month: Optional[int]
    trigger_date: Optional[str]
    asset_value_at_trigger: float
    debt_at_trigger: float
    interest_saved: float
    final_asset_retained: float

    def to_payload(self) -> dict:
        return {
            "triggerMonth": self.trigger_month,
            "triggerDate": self.trigger_date,
            "assetValueAtTrigger": self.asset_value_at_trigger,
            "debtAtTrigger": self.debt_at_trigger,
            "interestSaved": self.interest_saved,
            "finalAssetRetained": self.final_asset_retained,
        }


@dataclass(frozen=True)
class PerformanceSummary:
    final_total_asset: float
    final_property_value: float
    final_asset_value: float
    total_roi: float
    annualized_return: float

    def to_payload(self) -> dict:
        return {
            "finalTotalAsset": self.final_total_asset,
            "finalPropertyValue": self.final_property_value,
            "finalAssetValue": self.final_asset_value,
            "totalROI": self.total_roi,
            "annualizedReturn": self.annualized_return,
        }


@dataclass(frozen=True)
class AmortizationResults:
    monthly_schedule: List[MonthlyAmortizationEntry]
    stacked_chart_data: List[StackedChartPoint]
    payoff_analysis: PayoffAnalysis
    performance_summary: PerformanceSummary

    def to_payload(self) -> dict:
        return {
            "monthlySchedule": [e.to_payload() for e in self.monthly_schedule],
            "stackedChartData": [p.to_payload() for p in self.stacked_chart_data],
            "payoffAnalysis": self.payoff_analysis.to_payload(),
            "performanceSummary": self.performance_summary.to_payload(),
        }

    def monthly_frame(self) -> pd.DataFrame:
        rows = [e.to_payload() for e in self.monthly_schedule]
        return pd.DataFrame(rows).reindex(columns=MONTHLY_COLUMNS)

    def chart_frame(self) -> pd.DataFrame:
        rows = [p.to_payload() for p in self.stacked_chart_data]
        return pd.DataFrame(rows, columns=CHART_COLUMNS)
