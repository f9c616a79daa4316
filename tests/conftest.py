"""Shared fixtures: small in-memory data providers for the simulators."""

import pytest

from pension_compare.calculators.historical import HistoricalData, TaxBand, TaxYear
from pension_compare.calculators.registry import StrategyRegistry
from pension_compare.calculators.simulation import SimulationContext
from pension_compare.config import FeeConfig, PolicyConfig

ASSETS = ("gold", "goldEtf", "sp500", "nasdaq100", "ftse100")
YEARS = range(2000, 2011)
NO_FEES = FeeConfig(asset_transaction_percent=0.0, asset_storage_percent=0.0, wrapper_management_percent=0.0)


def simple_tax_year(year, allowance=0.0):
    """20% up to 10 000 of taxable income, 40% above."""
    return TaxYear(
        year,
        allowance,
        (TaxBand("basic", 0.0, 10_000.0, 0.20), TaxBand("higher", 10_000.0, None, 0.40)),
    )


@pytest.fixture
def make_data():
    """Build a provider with flat prices for every asset; override series via ``prices``."""

    def _make(prices=None, price=100.0, years=YEARS, allowance=1_000_000.0, tax_years=None):
        series = {a: {y: price for y in years} for a in ASSETS}
        series.update(prices or {})
        if tax_years is None:
            tax_years = {y: simple_tax_year(y, allowance) for y in years}
        return HistoricalData(series, tax_years)

    return _make


@pytest.fixture
def make_ctx(make_data):
    """Return ``(registry, context)`` over a synthetic provider."""

    def _make(fees=NO_FEES, policy=PolicyConfig(), **data_kwargs):
        data = make_data(**data_kwargs)
        return StrategyRegistry(data), SimulationContext(data, fees, policy)

    return _make
