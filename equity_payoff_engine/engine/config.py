from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping

from jsonschema import Draft202012Validator

from .epochs import DEFAULT_EPOCHS, EpochCalendar
from .errors import ConfigError
from .performance import DEFAULT_CYCLE, DEFAULT_SENTIMENT_MULTIPLIERS, CyclePolicy
from .types import (
    AssetInvestment,
    CalculatorInputs,
    CurrentMortgage,
    PayoffTrigger,
    PerformanceModel,
    PerformanceSettings,
    PropertyData,
    PropertyIncome,
    RefinanceScenario,
    ScenarioType,
    TriggerType,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema" / "calculator_inputs.json"


@dataclass(frozen=True)
class SimulationPolicy:
    """Calibrated constants of the model. Every field can be overridden from an engine JSON file."""

    cycle: CyclePolicy = DEFAULT_CYCLE
    epochs: EpochCalendar = DEFAULT_EPOCHS
    sentiment_multipliers: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_SENTIMENT_MULTIPLIERS))
    chart_horizon_months: int = 240
    chart_step_months: int = 12
    continue_after_payoff: bool = True


DEFAULT_POLICY = SimulationPolicy()


def _read_json(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: not valid JSON ({exc})") from exc


def policy_from_dict(raw: Dict[str, Any]) -> SimulationPolicy:
    cycle_raw = raw.get("cycle", {})
    cycle = CyclePolicy(
        summer_months=int(cycle_raw.get("summerMonths", DEFAULT_CYCLE.summer_months)),
        fall_months=int(cycle_raw.get("fallMonths", DEFAULT_CYCLE.fall_months)),
        winter_months=int(cycle_raw.get("winterMonths", DEFAULT_CYCLE.winter_months)),
        spring_months=int(cycle_raw.get("springMonths", DEFAULT_CYCLE.spring_months)),
        target_fall_factor=float(cycle_raw.get("targetFallFactor", DEFAULT_CYCLE.target_fall_factor)),
        summer_gain_share=float(cycle_raw.get("summerGainShare", DEFAULT_CYCLE.summer_gain_share)),
        spring_gain_share=float(cycle_raw.get("springGainShare", DEFAULT_CYCLE.spring_gain_share)),
        summer_factor_months=int(cycle_raw.get("summerFactorMonths", DEFAULT_CYCLE.summer_factor_months)),
        spring_factor_months=int(cycle_raw.get("springFactorMonths", DEFAULT_CYCLE.spring_factor_months)),
    )
    epochs = EpochCalendar.from_config(raw["epochs"]) if "epochs" in raw else DEFAULT_EPOCHS
    multipliers = dict(DEFAULT_SENTIMENT_MULTIPLIERS)
    multipliers.update({str(k): float(v) for k, v in raw.get("sentimentMultipliers", {}).items()})
    chart = raw.get("chart", {})
    policy = SimulationPolicy(
        cycle=cycle,
        epochs=epochs,
        sentiment_multipliers=multipliers,
        chart_horizon_months=int(chart.get("horizonMonths", 240)),
        chart_step_months=int(chart.get("stepMonths", 12)),
        continue_after_payoff=bool(raw.get("continueAfterPayoff", True)),
    )
    if policy.chart_step_months <= 0 or policy.chart_horizon_months <= 0:
        raise ConfigError("chart horizon and step must be positive")
    return policy


def load_engine_config(path: Path) -> SimulationPolicy:
    logger.info("Loading engine policy from %s", path)
    return policy_from_dict(_read_json(Path(path)))


def _validator() -> Draft202012Validator:
    schema = _read_json(SCHEMA_PATH)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_payload(payload: Dict[str, Any]) -> None:
    errors = sorted(_validator().iter_errors(payload), key=lambda e: list(e.path))
    if errors:
        detail = "; ".join(
            f"{'/'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
        )
        raise ConfigError(f"invalid calculator inputs: {detail}")


def parse_inputs(payload: Dict[str, Any]) -> CalculatorInputs:
    """Validate a camelCase request payload and build the immutable inputs record."""
    validate_payload(payload)

    prop = payload["property"]
    mortgage = payload["currentMortgage"]
    income = payload["propertyIncome"]
    refi = payload["refinanceScenario"]
    asset = payload["assetInvestment"]
    perf = asset["performanceSettings"]
    trigger = payload["payoffTrigger"]

    try:
        start = date.fromisoformat(perf["loanStartDate"])
    except ValueError as exc:
        raise ConfigError(f"assetInvestment/performanceSettings/loanStartDate: {exc}") from exc

    return CalculatorInputs(
        property=PropertyData(
            current_value=float(prop["currentValue"]),
            appreciation_rate=float(prop.get("appreciationRate", 0.0)),
        ),
        current_mortgage=CurrentMortgage(
            current_balance=float(mortgage["currentBalance"]),
            interest_rate=float(mortgage["interestRate"]),
            remaining_years=float(mortgage["remainingYears"]),
        ),
        property_income=PropertyIncome(
            net_monthly_cash_flow=float(income["netMonthlyCashFlow"]),
            monthly_taxes=float(income.get("monthlyTaxes", 0.0)),
            monthly_insurance=float(income.get("monthlyInsurance", 0.0)),
            monthly_hoa=float(income.get("monthlyHOA", 0.0)),
        ),
        refinance_scenario=RefinanceScenario(
            type=ScenarioType(refi["type"]),
            cash_out_amount=float(refi["cashOutAmount"]),
            new_loan_amount=float(refi["newLoanAmount"]),
            new_interest_rate=float(refi["newInterestRate"]),
            new_loan_term_years=float(refi["newLoanTermYears"]),
        ),
        asset_investment=AssetInvestment(
            investment_amount=float(asset["investmentAmount"]),
            current_asset_price=float(asset["currentAssetPrice"]),
            performance_settings=PerformanceSettings(
                model=PerformanceModel(perf["model"]),
                initial_cagr=float(perf["initialCAGR"]),
                loan_start_date=start,
                sentiment=perf.get("sentiment", "neutral"),
                max_drawdown_percent=_optional_float(perf.get("maxDrawdownPercent")),
                final_cagr=_optional_float(perf.get("finalCAGR")),
                custom_annual_growth_rate=_optional_float(perf.get("customAnnualGrowthRate")),
            ),
        ),
        payoff_trigger=PayoffTrigger(
            type=TriggerType(trigger["type"]),
            value=float(trigger["value"]),
        ),
    )


def _optional_float(value):
    return None if value is None else float(value)


def load_inputs(path: Path) -> CalculatorInputs:
    return parse_inputs(_read_json(Path(path)))
