import json
from pathlib import Path

import pytest

from equity_payoff_engine.engine.cashflow import net_cash_flow, payment_delta, prior_loan_payment
from equity_payoff_engine.engine.config import parse_inputs
from equity_payoff_engine.engine.debt import monthly_payment
from equity_payoff_engine.engine.liquidity import execute_payoff, sell_for_shortfall
from equity_payoff_engine.engine.types import ScenarioType

BASE = Path(__file__).resolve().parents[2] / "engines" / "base_scenario.json"


def test_sale_covers_shortfall():
    sale = sell_for_shortfall(1_000.0, 50_000.0, 1.0)
    assert sale.units_sold == pytest.approx(0.02)
    assert sale.proceeds == pytest.approx(1_000.0)
    assert sale.remaining_units == pytest.approx(0.98)
    assert sale.unfunded == pytest.approx(0.0, abs=1e-9)


def test_sale_clamps_at_holdings():
    sale = sell_for_shortfall(100_000.0, 50_000.0, 1.0)
    assert sale.units_sold == 1.0
    assert sale.remaining_units == 0.0
    assert sale.unfunded == pytest.approx(50_000.0)


@pytest.mark.parametrize("shortfall", [0.0, -250.0])
def test_no_sale_without_shortfall(shortfall):
    sale = sell_for_shortfall(shortfall, 50_000.0, 2.0)
    assert sale.units_sold == 0.0
    assert sale.remaining_units == 2.0
    assert sale.unfunded == 0.0


def test_empty_holdings_leave_shortfall_unfunded():
    sale = sell_for_shortfall(750.0, 50_000.0, 0.0)
    assert sale.units_sold == 0.0
    assert sale.remaining_units == 0.0
    assert sale.unfunded == 750.0


def test_execute_payoff_sells_exactly_the_debt():
    payoff = execute_payoff(80_000.0, 40_000.0, 5.0)
    assert payoff.units_sold == pytest.approx(2.0)
    assert payoff.remaining_units == pytest.approx(3.0)
    assert payoff.unfunded == 0.0


def test_payment_delta_by_scenario():
    assert payment_delta(ScenarioType.CASH_OUT_REFINANCE, 2_000.0, 1_500.0) == 500.0
    assert payment_delta(ScenarioType.HELOC, 2_000.0, 1_500.0) == 2_000.0
    assert payment_delta("heloc", 0.0, 1_500.0) == 0.0


def test_net_cash_flow_cash_out_credits_retired_payment():
    # before the first payment the old mortgage is already gone
    assert net_cash_flow(200.0, ScenarioType.CASH_OUT_REFINANCE, 0.0, 1_500.0) == 1_700.0
    assert net_cash_flow(200.0, ScenarioType.CASH_OUT_REFINANCE, 2_000.0, 1_500.0) == -300.0
    assert net_cash_flow(200.0, ScenarioType.HELOC, 600.0, 1_500.0) == -400.0


def test_prior_loan_payment():
    payload = json.loads(BASE.read_text())
    inputs = parse_inputs(payload)
    assert prior_loan_payment(inputs) == pytest.approx(monthly_payment(300_000, 0.04, 25))

    payload["currentMortgage"]["currentBalance"] = 0
    assert prior_loan_payment(parse_inputs(payload)) == 0.0


def test_prior_loan_under_one_payment_is_ignored():
    payload = json.loads(BASE.read_text())
    payload["currentMortgage"]["remainingYears"] = 0.03
    assert prior_loan_payment(parse_inputs(payload)) == 0.0
