import json
from datetime import date
from pathlib import Path

import pytest
from jsonschema import Draft202012Validator

from equity_payoff_engine.engine.config import SCHEMA_PATH, load_inputs, parse_inputs, validate_payload
from equity_payoff_engine.engine.errors import ConfigError
from equity_payoff_engine.engine.types import PerformanceModel, ScenarioType, TriggerType

BASE = Path(__file__).resolve().parents[2] / "engines" / "base_scenario.json"


def _payload():
    return json.loads(BASE.read_text())


def test_schema_is_valid_draft_2020_12():
    Draft202012Validator.check_schema(json.loads(SCHEMA_PATH.read_text()))


def test_base_scenario_validates():
    validate_payload(_payload())


def test_parse_builds_typed_inputs():
    inputs = load_inputs(BASE)
    assert inputs.property.current_value == 500_000
    assert inputs.refinance_scenario.type is ScenarioType.CASH_OUT_REFINANCE
    assert inputs.asset_investment.performance_settings.model is PerformanceModel.SEASONAL
    assert inputs.asset_investment.performance_settings.loan_start_date == date(2025, 1, 1)
    assert inputs.asset_investment.performance_settings.final_cagr is None
    assert inputs.payoff_trigger.type is TriggerType.PERCENTAGE
    assert inputs.property_income.monthly_hoa == 0.0


@pytest.mark.parametrize("mutate", [
    lambda p: p.pop("payoffTrigger"),
    lambda p: p["refinanceScenario"].update(type="reverse-mortgage"),
    lambda p: p["refinanceScenario"].update(newLoanAmount=0),
    lambda p: p["refinanceScenario"].update(newInterestRate=-0.01),
    lambda p: p["refinanceScenario"].update(newLoanTermYears=0.04),
    lambda p: p["assetInvestment"].update(currentAssetPrice=0),
    lambda p: p["assetInvestment"]["performanceSettings"].update(model="random-walk"),
    lambda p: p["assetInvestment"]["performanceSettings"].update(sentiment="euphoric"),
    lambda p: p["assetInvestment"]["performanceSettings"].update(maxDrawdownPercent=150),
    lambda p: p["assetInvestment"]["performanceSettings"].update(loanStartDate="01/02/2025"),
    lambda p: p["payoffTrigger"].update(type="time"),
])
def test_invalid_payloads_rejected(mutate):
    payload = _payload()
    mutate(payload)
    with pytest.raises(ConfigError):
        parse_inputs(payload)


def test_error_message_names_the_field():
    payload = _payload()
    payload["refinanceScenario"]["type"] = "reverse-mortgage"
    with pytest.raises(ConfigError, match="refinanceScenario/type"):
        validate_payload(payload)


def test_impossible_calendar_date_rejected():
    payload = _payload()
    payload["assetInvestment"]["performanceSettings"]["loanStartDate"] = "2025-02-30"
    with pytest.raises(ConfigError):
        parse_inputs(payload)


def test_missing_start_date_rejected():
    payload = _payload()
    del payload["assetInvestment"]["performanceSettings"]["loanStartDate"]
    with pytest.raises(ConfigError, match="loanStartDate"):
        parse_inputs(payload)


def test_malformed_inputs_file(tmp_path):
    bad = tmp_path / "inputs.json"
    bad.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_inputs(bad)
