import math

import pytest

from equity_payoff_engine.engine.debt import (
    amortize_one_month,
    break_even_months,
    cash_out_loan_amount,
    equity_data,
    generate_schedule,
    interest_saved,
    loan_term_months,
    monthly_payment,
    remaining_balance,
    total_interest,
)
from equity_payoff_engine.engine.errors import InvalidLoanParameters


def test_monthly_payment_reference_value():
    assert monthly_payment(200_000, 0.06, 30) == pytest.approx(1199.10, abs=0.01)


def test_monthly_payment_zero_rate_is_straight_line():
    assert monthly_payment(120_000, 0.0, 10) == 1000.0


def test_monthly_payment_fifteen_year_is_sane():
    pay = monthly_payment(100_000, 0.055, 15)
    assert 800 < pay < 900
    # payment covers the first month's interest
    assert pay > 100_000 * 0.055 / 12


@pytest.mark.parametrize("principal, rate, years", [
    (-100_000, 0.05, 30),
    (0, 0.05, 30),
    (100_000, -0.01, 30),
    (100_000, 0.05, 0),
    (100_000, 0.05, 0.04),
    (100_000, 0.0, 0.04),
])
def test_invalid_loan_parameters_raise(principal, rate, years):
    with pytest.raises(InvalidLoanParameters):
        monthly_payment(principal, rate, years)


def test_one_month_term_repays_in_a_single_payment():
    assert loan_term_months(1 / 12) == 1
    assert monthly_payment(12_000, 0.0, 1 / 12) == pytest.approx(12_000)
    assert monthly_payment(12_000, 0.12, 1 / 12) == pytest.approx(12_120)
    assert remaining_balance(12_000, 0.12, 1 / 12, 1) == 0.0


def test_invalid_loan_parameters_is_a_value_error():
    with pytest.raises(ValueError):
        monthly_payment(100_000, 0.05, -1)


def test_loan_term_months_rounds():
    assert loan_term_months(30) == 360
    assert loan_term_months(2.5) == 30


def test_remaining_balance_endpoints():
    assert remaining_balance(300_000, 0.065, 30, 0) == 300_000
    assert remaining_balance(300_000, 0.065, 30, 360) == 0.0
    assert remaining_balance(300_000, 0.065, 30, 500) == 0.0
    mid = remaining_balance(300_000, 0.065, 30, 12)
    assert 0 < mid < 300_000


def test_remaining_balance_never_increases():
    balances = [remaining_balance(250_000, 0.07, 20, k) for k in range(0, 241)]
    for prev, curr in zip(balances, balances[1:]):
        assert curr <= prev + 1e-9
    assert balances[-1] == 0.0


def test_remaining_balance_zero_rate_is_linear():
    assert remaining_balance(120_000, 0.0, 10, 60) == pytest.approx(60_000)


def test_remaining_balance_matches_iterated_schedule():
    rows = generate_schedule(200_000, 0.06, 30)
    for k in (1, 12, 120, 359):
        assert rows[k - 1].balance == pytest.approx(remaining_balance(200_000, 0.06, 30, k), abs=0.01)


def test_total_interest_is_payments_less_principal():
    pay = monthly_payment(200_000, 0.06, 30)
    assert total_interest(200_000, 0.06, 30) == pytest.approx(pay * 360 - 200_000)
    assert total_interest(120_000, 0.0, 10) == pytest.approx(0.0, abs=1e-9)


def test_interest_saved():
    assert interest_saved(0.0, 0.05, 120) == 0.0
    assert interest_saved(100_000, 0.05, 0) == 0.0
    pay = monthly_payment(100_000, 0.05, 10)
    assert interest_saved(100_000, 0.05, 120) == pytest.approx(pay * 120 - 100_000)


def test_break_even_months():
    assert break_even_months(1500, 1600, 3000) == math.inf
    assert break_even_months(1500, 1500, 3000) == math.inf
    assert break_even_months(1500, 1400, 3000) == 30
    assert break_even_months(1500, 1400, 3050) == 31


def test_amortize_one_month_never_overpays():
    principal, interest, new_debt = amortize_one_month(100.0, 5000.0, 0.06)
    assert new_debt == 0.0
    assert principal == pytest.approx(100.0)
    assert principal + interest <= 5000.0
    assert amortize_one_month(0.0, 1000.0, 0.06) == (0.0, 0.0, 0.0)


def test_generate_schedule_amortizes_to_zero():
    rows = generate_schedule(200_000, 0.06, 30)
    assert len(rows) == 360
    assert rows[-1].balance == 0.0
    assert all(r.balance >= 0 for r in rows)
    assert sum(r.principal for r in rows) == pytest.approx(200_000, abs=0.05)
    assert rows[-1].cumulative_interest == pytest.approx(total_interest(200_000, 0.06, 30), abs=0.5)


def test_generate_schedule_zero_rate():
    rows = generate_schedule(120_000, 0.0, 10)
    assert len(rows) == 120
    assert all(r.interest == 0 for r in rows)
    assert all(r.principal == pytest.approx(1000.0) for r in rows)


def test_generate_schedule_rejects_bad_parameters():
    with pytest.raises(InvalidLoanParameters):
        generate_schedule(0, 0.05, 30)


def test_equity_data():
    eq = equity_data(500_000, 300_000)
    assert eq.total_equity == 200_000
    assert eq.max_tappable_equity == pytest.approx(100_000)
    assert eq.current_ltv == pytest.approx(0.6)
    assert eq.max_ltv == 0.80

    underwater = equity_data(300_000, 280_000)
    assert underwater.max_tappable_equity == 0.0

    assert equity_data(0, 10_000).current_ltv is None


def test_cash_out_loan_amount():
    assert cash_out_loan_amount(300_000, 100_000, 5_000) == 405_000
    assert cash_out_loan_amount(300_000, 100_000) == 400_000
