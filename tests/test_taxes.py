"""Unit tests for the taxes module.

These tests verify the progressive UK income tax calculation against the
shipped band tables (personal allowance, basic, higher and additional rates)
and the nearest-year fallback on synthetic tables.
"""

import logging
import math

import pytest

from pension_compare.calculators import taxes as tax_calc
from pension_compare.calculators.historical import HistoricalData
from pension_compare.errors import ConfigurationError, InvalidInputError

from conftest import simple_tax_year


def test_basic_rate_example():
    """£50k of income in 2024 sits entirely in the basic band after the allowance."""
    res = tax_calc.compute_tax(50000, 2024)
    assert math.isclose(res.tax_paid, 7486.0, rel_tol=1e-9)
    assert math.isclose(res.net_amount, 50000 - 7486.0, rel_tol=1e-9)


def test_pension_tax_free_share():
    """A 25% tax-free share is removed before the allowance."""
    res = tax_calc.compute_tax(50000, 2024, tax_free_fraction=0.25)
    assert math.isclose(res.tax_paid, 4986.0, rel_tol=1e-9)


def test_additional_rate_band():
    """£200k in 2024 reaches the 45% band above £125 140 of income."""
    tax = tax_calc.compute_tax(200000, 2024).tax_paid
    expected = 37700 * 0.20 + (112570 - 37700) * 0.40 + (200000 - 12570 - 112570) * 0.45
    assert tax == pytest.approx(expected)
    assert tax == pytest.approx(71175.0)


def test_historical_higher_rate_1980():
    """1980 had a 60% higher rate above £11 250 of taxable income."""
    res = tax_calc.compute_tax(100000, 1980, tax_free_fraction=0.25)
    assert res.tax_paid == pytest.approx(11250 * 0.30 + (75000 - 1375 - 11250) * 0.60)
    assert res.net_amount == pytest.approx(59200.0)


@pytest.mark.parametrize("gross", [0.0, 5000.0, 12570.0])
def test_income_within_allowance_is_untaxed(gross):
    res = tax_calc.compute_tax(gross, 2024)
    assert res.tax_paid == 0.0
    assert res.net_amount == gross


def test_negative_amount_rejected():
    with pytest.raises(InvalidInputError):
        tax_calc.compute_tax(-1.0, 2024)


def test_tax_free_fraction_out_of_range():
    with pytest.raises(InvalidInputError):
        tax_calc.compute_tax(1000.0, 2024, tax_free_fraction=1.5)


def test_deterministic():
    assert tax_calc.compute_tax(87654.32, 2003) == tax_calc.compute_tax(87654.32, 2003)


def test_nearest_year_fallback_logs_warning(caplog):
    data = HistoricalData({"gold": {2000: 1.0}}, {2000: simple_tax_year(2000), 2010: simple_tax_year(2010, 5000)})
    with caplog.at_level(logging.WARNING, logger="pension_compare.calculators.taxes"):
        res = tax_calc.compute_tax(20000, 1990, data)
    # 2000 table: no allowance, 10k at 20% then 10k at 40%
    assert res.tax_paid == pytest.approx(6000.0)
    assert "using 2000" in caplog.text


def test_fallback_after_table_uses_latest_year():
    data = HistoricalData({"gold": {2000: 1.0}}, {2000: simple_tax_year(2000), 2010: simple_tax_year(2010, 5000)})
    assert tax_calc.resolve_tax_year(2030, data).year == 2010


def test_strict_mode_fails_fast():
    data = HistoricalData({"gold": {2000: 1.0}}, {2000: simple_tax_year(2000)})
    with pytest.raises(ConfigurationError):
        tax_calc.compute_tax(20000, 1990, data, fallback=False)


def test_missing_tables_is_configuration_error():
    data = HistoricalData({"gold": {2000: 1.0}}, {})
    with pytest.raises(ConfigurationError):
        tax_calc.compute_tax(20000, 2000, data)


def test_effective_rate():
    assert tax_calc.effective_rate(0, 2024) == 0.0
    assert tax_calc.effective_rate(50000, 2024) == pytest.approx(7486.0 / 50000)
