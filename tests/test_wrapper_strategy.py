"""Tests for the wrapper-backed (index SIPP) simulator."""

import pytest

from pension_compare.calculators.historical import default_data
from pension_compare.calculators.registry import default_registry
from pension_compare.calculators.results import RowStatus
from pension_compare.calculators.simulation import SimulationContext, SimulationInput
from pension_compare.calculators.taxes import compute_tax
from pension_compare.calculators.wrapper import simulate_wrapper
from pension_compare.config import FeeConfig, PolicyConfig, WithdrawalBasis

PRINCIPAL_BASIS = PolicyConfig(withdrawal_basis=WithdrawalBasis.INITIAL_PRINCIPAL)


def _run(make_ctx, sid="sp500", years=5, rate=4.0, **kwargs):
    reg, ctx = make_ctx(**kwargs)
    return simulate_wrapper(reg.get(sid), SimulationInput(100_000.0, 2000, rate, years), ctx), ctx


def test_lump_sum_enters_untaxed(make_ctx):
    res, _ = _run(make_ctx, fees=FeeConfig(), allowance=0.0)
    init = res.initial_transaction
    assert init.tax_paid == 0.0
    assert init.purchase_fee == 0.0
    assert init.units == pytest.approx(1000.0)
    assert res.metrics.initial_tax_paid == 0.0


def test_management_fee_then_withdrawal(make_ctx):
    res, _ = _run(make_ctx, fees=FeeConfig())
    row = res.yearly_rows[0]
    assert row.fee == pytest.approx(500.0)
    assert row.gross_withdrawal == pytest.approx(0.04 * 99_500.0)
    assert row.transaction_cost == 0.0
    assert row.end_units == pytest.approx(995.0 - 39.8)
    assert row.end_value == pytest.approx(95_520.0)


def test_withdrawal_taxed_as_income(make_ctx):
    res, _ = _run(make_ctx, fees=FeeConfig(), allowance=0.0)
    row = res.yearly_rows[0]
    # 25% tax free, remaining 2 985 in the 20% band
    assert row.tax_paid == pytest.approx(3980.0 * 0.75 * 0.20)
    assert row.net_withdrawal == pytest.approx(row.gross_withdrawal - row.tax_paid)


def test_final_value_taxed_as_income(make_ctx):
    res, ctx = _run(make_ctx, fees=FeeConfig(), allowance=0.0)
    m = res.metrics
    expected = compute_tax(m.final_value, 2004, ctx.data, tax_free_fraction=0.25).net_amount
    assert m.final_after_tax_value == pytest.approx(expected)
    assert m.remaining_tax_liability == pytest.approx(m.final_value - expected)
    assert m.total_value_realized == m.total_net_withdrawn + m.final_after_tax_value


def test_principal_basis_depletion(make_ctx):
    res, _ = _run(make_ctx, years=11, rate=10.0, policy=PRINCIPAL_BASIS)
    statuses = [r.status for r in res.yearly_rows]
    assert statuses.index(RowStatus.DEPLETED) == 9
    assert statuses[10:] == [RowStatus.EXHAUSTED]
    assert res.depleted
    assert res.metrics.final_value == 0.0
    assert res.metrics.final_after_tax_value == 0.0


def test_exhausted_rows_are_idempotent(make_ctx):
    prices = {"sp500": {y: (100.0 if y == 2000 else 20.0) for y in range(2000, 2011)}}
    res, _ = _run(make_ctx, years=11, rate=10.0, policy=PRINCIPAL_BASIS, prices=prices)
    rows = res.yearly_rows
    first = next(i for i, r in enumerate(rows) if r.status == RowStatus.EXHAUSTED)
    for r in rows[first:]:
        assert r.status == RowStatus.EXHAUSTED
        assert r.gross_withdrawal == 0.0
        assert r.net_withdrawal == 0.0
        assert r.end_value == 0.0
    assert rows[first - 1].status == RowStatus.DEPLETED


def test_real_data_runs():
    res = simulate_wrapper(
        default_registry().get("ftse100"),
        SimulationInput(250_000.0, 1990, 5.0, 30),
        SimulationContext(default_data()),
    )
    assert [r.year for r in res.yearly_rows] == list(range(1990, 2020))
    assert res.metrics.total_withdrawal_tax > 0
    assert res.metrics.total_holding_fees > 0
