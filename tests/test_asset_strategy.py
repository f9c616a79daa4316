"""Tests for the asset-backed (physical gold) simulator."""

import pytest

from pension_compare.calculators.asset import simulate_asset
from pension_compare.calculators.historical import default_data
from pension_compare.calculators.registry import default_registry
from pension_compare.calculators.results import RowStatus
from pension_compare.calculators.simulation import SimulationContext, SimulationInput
from pension_compare.calculators.taxes import compute_tax
from pension_compare.config import FeeConfig, PolicyConfig, WithdrawalBasis
from pension_compare.errors import InvalidInputError, UnsupportedPeriodError

PRINCIPAL_BASIS = PolicyConfig(withdrawal_basis=WithdrawalBasis.INITIAL_PRINCIPAL)


def _run(make_ctx, years=5, rate=4.0, start=2000, **kwargs):
    reg, ctx = make_ctx(**kwargs)
    inputs = SimulationInput(100_000.0, start, rate, years)
    return simulate_asset(reg.get("gold"), inputs, ctx)


def test_initial_purchase_and_first_year(make_ctx):
    res = _run(make_ctx, fees=FeeConfig())
    init = res.initial_transaction
    assert init.tax_paid == 0.0
    assert init.purchase_fee == pytest.approx(3000.0)
    assert init.units == pytest.approx(970.0)

    row = res.yearly_rows[0]
    assert row.start_value == pytest.approx(97_000.0)
    assert row.fee == pytest.approx(679.0)  # 0.7% storage
    # 7 oz sold for storage, then 4% of the remaining 96 300
    assert row.gross_withdrawal == pytest.approx(3852.0)
    assert row.transaction_cost == pytest.approx(7 * 100 * 0.03 + 3852.0 * 0.03)
    assert row.net_withdrawal == pytest.approx(3852.0 * 0.97)
    assert row.end_units == pytest.approx(963.0 - 38.52)
    assert row.tax_paid == 0.0
    assert row.status == RowStatus.ACTIVE


def test_lump_sum_taxed_with_real_tables():
    ctx = SimulationContext(default_data())
    res = simulate_asset(default_registry().get("gold"), SimulationInput(100_000.0, 2000, 4.0, 5), ctx)
    expected = compute_tax(100_000.0, 2000, tax_free_fraction=0.25)
    assert res.initial_transaction.tax_paid == pytest.approx(expected.tax_paid)
    assert res.initial_transaction.tax_paid == pytest.approx(28400 * 0.22 + (75000 - 4385 - 28400) * 0.40)
    assert res.initial_transaction.unit_price == 177.83


def test_balance_basis_never_depletes(make_ctx):
    res = _run(make_ctx, years=11, rate=10.0)
    assert all(r.status == RowStatus.ACTIVE for r in res.yearly_rows)
    assert res.yearly_rows[1].gross_withdrawal == pytest.approx(res.yearly_rows[0].end_value * 0.10)


def test_principal_basis_depletes_then_exhausts(make_ctx):
    res = _run(make_ctx, years=11, rate=10.0, policy=PRINCIPAL_BASIS)
    statuses = [r.status for r in res.yearly_rows]
    assert statuses[:9] == [RowStatus.ACTIVE] * 9
    assert statuses[9] == RowStatus.DEPLETED
    assert statuses[10] == RowStatus.EXHAUSTED
    assert res.metrics.year_depleted == 2009
    assert res.metrics.years_with_full_withdrawal == 9
    last = res.yearly_rows[-1]
    assert (last.gross_withdrawal, last.net_withdrawal, last.end_value) == (0.0, 0.0, 0.0)


def test_units_never_negative(make_ctx):
    res = _run(make_ctx, years=11, rate=10.0, policy=PRINCIPAL_BASIS, fees=FeeConfig())
    assert all(r.end_units >= 0 and r.start_units >= 0 for r in res.yearly_rows)


def test_storage_fee_can_exhaust_holding(make_ctx):
    fees = FeeConfig(asset_transaction_percent=50.0, asset_storage_percent=60.0)
    res = _run(make_ctx, years=3, fees=fees)
    first, second = res.yearly_rows[0], res.yearly_rows[1]
    assert first.status == RowStatus.DEPLETED
    assert first.gross_withdrawal == 0.0
    assert first.end_value == 0.0
    assert second.status == RowStatus.EXHAUSTED


def test_metrics_identity(make_ctx):
    res = _run(make_ctx, years=8, fees=FeeConfig())
    m = res.metrics
    assert m.total_value_realized == m.total_net_withdrawn + m.final_after_tax_value
    assert m.final_after_tax_value == m.final_value
    assert m.remaining_tax_liability == 0.0
    assert m.total_fees == pytest.approx(m.total_holding_fees + m.total_transaction_costs)


def test_start_before_data(make_ctx):
    with pytest.raises(UnsupportedPeriodError):
        _run(make_ctx, start=1999)


def test_horizon_past_data(make_ctx):
    with pytest.raises(UnsupportedPeriodError):
        _run(make_ctx, start=2005, years=10)


@pytest.mark.parametrize("rate", [0.0, -1.0])
def test_non_positive_rate(rate):
    with pytest.raises(InvalidInputError):
        SimulationInput(100_000.0, 2000, rate, 5)


@pytest.mark.parametrize(
    "principal, rate",
    [(float("inf"), 4.0), (float("nan"), 4.0), (100_000.0, float("inf")), (True, 4.0)],
)
def test_non_finite_inputs_rejected(principal, rate):
    with pytest.raises(InvalidInputError):
        SimulationInput(principal, 2000, rate, 5)
