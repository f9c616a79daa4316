"""Tests for 50/50 blends."""

from dataclasses import replace

import pytest

from pension_compare.calculators.composed import merge_status, simulate_composed
from pension_compare.calculators.results import RowStatus
from pension_compare.calculators.simulation import SimulationInput
from pension_compare.config import FeeConfig, PolicyConfig, WithdrawalBasis
from pension_compare.errors import ConfigurationError

A, D, E = RowStatus.ACTIVE, RowStatus.DEPLETED, RowStatus.EXHAUSTED
PRINCIPAL_BASIS = PolicyConfig(withdrawal_basis=WithdrawalBasis.INITIAL_PRINCIPAL)


@pytest.mark.parametrize(
    "a, b, expected",
    [(A, A, A), (A, D, D), (D, A, D), (A, E, A), (D, E, D), (D, D, D), (E, E, E)],
)
def test_merge_status(a, b, expected):
    assert merge_status([a, b]) == expected


def test_rows_sum_components(make_ctx):
    reg, ctx = make_ctx(fees=FeeConfig(), allowance=0.0)
    res = simulate_composed(reg.get("gold-sp500"), SimulationInput(100_000.0, 2000, 4.0, 6), ctx)
    gold, sp = res.components
    assert gold.initial_transaction.principal == 50_000.0
    assert sp.initial_transaction.principal == 50_000.0
    for row, g, s in zip(res.yearly_rows, gold.yearly_rows, sp.yearly_rows):
        assert row.gross_withdrawal == pytest.approx(g.gross_withdrawal + s.gross_withdrawal)
        assert row.net_withdrawal == pytest.approx(g.net_withdrawal + s.net_withdrawal)
        assert row.end_value == pytest.approx(g.end_value + s.end_value)
        assert row.components == (g, s)
        assert row.unit_price is None
    assert res.initial_transaction.tax_paid == pytest.approx(gold.initial_transaction.tax_paid)
    m = res.metrics
    assert m.final_after_tax_value == pytest.approx(gold.metrics.final_after_tax_value + sp.metrics.final_after_tax_value)
    assert m.total_value_realized == m.total_net_withdrawn + m.final_after_tax_value


def test_staggered_depletion(make_ctx):
    prices = {"gold": {y: (100.0 if y == 2000 else 50.0) for y in range(2000, 2011)}}
    reg, ctx = make_ctx(policy=PRINCIPAL_BASIS, prices=prices)
    res = simulate_composed(reg.get("gold-sp500"), SimulationInput(100_000.0, 2000, 10.0, 11), ctx)
    by_year = {r.year: r.status for r in res.yearly_rows}
    assert by_year[2004] == A
    assert by_year[2005] == D  # gold runs out
    assert by_year[2006] == A  # S&P half still paying
    assert by_year[2009] == D
    assert by_year[2010] == E
    assert res.metrics.year_depleted == 2005


def test_blends_do_not_nest(make_ctx):
    reg, ctx = make_ctx()
    nested = replace(reg.get("gold-sp500"), components=(reg.get("sp500-ftse100"), reg.get("gold")))
    with pytest.raises(ConfigurationError):
        simulate_composed(nested, SimulationInput(100_000.0, 2000, 4.0, 5), ctx)
