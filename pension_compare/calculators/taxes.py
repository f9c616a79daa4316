"""Tax calculation utilities.

This module implements a simplified UK income tax calculation over the
historical band tables exposed by :mod:`historical`.  For each year the
personal allowance is applied before the progressive bands (basic, higher and,
from 2010, additional).  Pension-derived amounts may first have a tax-free
share removed (the 25% pension commencement lump sum by default); the caller
passes that share as ``tax_free_fraction``.  The personal allowance taper above
£100 000, National Insurance and Scottish rates are not modelled.

Example
-------

>>> # £50 000 taxed as income in 2024 with no tax-free share
>>> round(compute_tax(50000, 2024).tax_paid, 2)
7486.0

>>> # The same amount drawn from a pension, 25% tax free
>>> round(compute_tax(50000, 2024, tax_free_fraction=0.25).tax_paid, 2)
4986.0

Years outside the band tables fall back to the nearest year that has one and
a warning is logged.  Pass ``fallback=False`` to fail instead.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from ..errors import ConfigurationError, InvalidInputError
from .historical import HistoricalData, TaxYear, default_data

logger = logging.getLogger(__name__)


class TaxResult(NamedTuple):
    tax_paid: float
    net_amount: float


def resolve_tax_year(year: int, data: Optional[HistoricalData] = None, fallback: bool = True) -> TaxYear:
    """Return the band table for ``year``, applying the nearest-year fallback.

    Parameters
    ----------
    year : int
        Tax year requested.
    data : HistoricalData, optional
        Provider holding the band tables.  Defaults to the shipped tables.
    fallback : bool
        When False a missing year raises :class:`ConfigurationError`.
    """
    data = data or default_data()
    years = data.tax_years()
    if int(year) in years:
        return data.tax_bands_for(year)
    if not fallback or not years:
        raise ConfigurationError(f"No tax band table for {year}")
    nearest = data.nearest_tax_year(year)
    logger.warning("No tax band table for %s; using %s instead", year, nearest)
    return data.tax_bands_for(nearest)


def tax_on_taxable_income(taxable_income: float, table: TaxYear) -> float:
    """Apply the progressive bands of ``table`` to income above the allowance."""
    tax = 0.0
    remaining = taxable_income
    for band in table.bands:
        if remaining <= 0:
            break
        if taxable_income > band.start:
            amount = min(remaining, band.width)
            tax += amount * band.rate
            remaining -= amount
        else:
            break
    return tax


def compute_tax(
    gross_amount: float,
    year: int,
    data: Optional[HistoricalData] = None,
    tax_free_fraction: float = 0.0,
    fallback: bool = True,
) -> TaxResult:
    """Compute income tax on ``gross_amount`` received in ``year``.

    The tax-free share is removed first, then the personal allowance; the rest
    is taxed band by band with unused band capacity carrying to the next band.
    """
    if gross_amount < 0:
        raise InvalidInputError(f"Gross amount must not be negative, got {gross_amount}")
    if not 0.0 <= tax_free_fraction <= 1.0:
        raise InvalidInputError(f"Tax-free fraction must be within [0, 1], got {tax_free_fraction}")
    table = resolve_tax_year(year, data, fallback=fallback)
    if gross_amount == 0:
        return TaxResult(0.0, 0.0)

    taxable_gross = gross_amount * (1.0 - tax_free_fraction)
    taxable_income = max(0.0, taxable_gross - table.personal_allowance)
    tax = tax_on_taxable_income(taxable_income, table)
    return TaxResult(tax, gross_amount - tax)


def effective_rate(
    gross_amount: float,
    year: int,
    data: Optional[HistoricalData] = None,
    tax_free_fraction: float = 0.0,
    fallback: bool = True,
) -> float:
    """Tax paid as a fraction of ``gross_amount`` (0.0 for a zero amount)."""
    if gross_amount == 0:
        return 0.0
    return compute_tax(gross_amount, year, data, tax_free_fraction, fallback).tax_paid / gross_amount


__all__ = ["TaxResult", "resolve_tax_year", "tax_on_taxable_income", "compute_tax", "effective_rate"]
