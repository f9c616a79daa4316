"""Wrapper-backed strategy: index-tracking units held inside a SIPP.

The lump sum stays in the pension, so no tax is due up front.  Each year the
management fee is taken from the pot by cancelling units, the withdrawal is
raised by selling units and is taxed as income for that year with the
tax-free share applied.  Whatever is left at the end is valued as if it were
drawn as income in the final year.
"""

from __future__ import annotations

import logging
from typing import List

from .results import InitialTransaction, RowStatus, StrategyMetrics, StrategyResult, YearlyRow, exhausted_row
from .simulation import SimulationContext, SimulationInput, check_period, desired_withdrawal
from .taxes import compute_tax

logger = logging.getLogger(__name__)


def after_tax_value(value: float, year: int, ctx: SimulationContext) -> float:
    """Net of tax if ``value`` were withdrawn from the wrapper in ``year``."""
    return compute_tax(
        value,
        year,
        ctx.data,
        tax_free_fraction=ctx.policy.tax_free_fraction,
        fallback=ctx.policy.tax_year_fallback,
    ).net_amount


def simulate_wrapper(descriptor, inputs: SimulationInput, ctx: SimulationContext) -> StrategyResult:
    asset_id = descriptor.asset_id
    check_period(asset_id, inputs, ctx.data)
    logger.debug("Simulating %s from %s for %d years", descriptor.id, inputs.start_year, inputs.years)

    management = ctx.fees_for(inputs).wrapper_management_percent / 100.0
    price0 = ctx.data.price_of(asset_id, inputs.start_year)
    initial = InitialTransaction(
        principal=inputs.principal,
        tax_paid=0.0,
        purchase_fee=0.0,
        amount_invested=inputs.principal,
        unit_price=price0,
        units=inputs.principal / price0,
    )

    units = initial.units
    rows: List[YearlyRow] = []
    for year in range(inputs.start_year, inputs.end_year + 1):
        price = ctx.data.price_of(asset_id, year)
        if units <= 0:
            rows.append(exhausted_row(year, price))
            continue

        start_units = units
        start_value = units * price
        management_fee = start_value * management
        units -= management_fee / price

        gross = desired_withdrawal(inputs, ctx.policy, units * price)
        units_needed = gross / price
        status = RowStatus.ACTIVE
        if units_needed >= units:
            units_needed = units
            gross = units * price
            status = RowStatus.DEPLETED

        tax = compute_tax(
            gross,
            year,
            ctx.data,
            tax_free_fraction=ctx.policy.tax_free_fraction,
            fallback=ctx.policy.tax_year_fallback,
        )
        units = max(0.0, units - units_needed)
        rows.append(
            YearlyRow(
                year=year,
                unit_price=price,
                start_units=start_units,
                start_value=start_value,
                fee=management_fee,
                transaction_cost=0.0,
                gross_withdrawal=gross,
                tax_paid=tax.tax_paid,
                net_withdrawal=tax.net_amount,
                end_units=units,
                end_value=units * price,
                status=status,
            )
        )
        if status == RowStatus.DEPLETED:
            units = 0.0
            logger.warning("%s depleted in %s", descriptor.id, year)

    final_value = rows[-1].end_value
    metrics = StrategyMetrics.from_rows(
        initial, rows, final_after_tax_value=after_tax_value(final_value, inputs.end_year, ctx)
    )
    return StrategyResult(descriptor.id, initial, tuple(rows), metrics)


__all__ = ["after_tax_value", "simulate_wrapper"]
