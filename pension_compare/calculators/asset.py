"""Asset-backed strategy: a lump sum held as a physical asset outside a pension.

The lump sum is taken out of the pension and taxed as income in the start year
(less the tax-free share), a purchase fee is charged, and the remainder buys
units (troy ounces for gold) at the start-year price.  Each year a storage fee
is paid by selling units, then the withdrawal is raised by selling units and
paying a transaction fee on the proceeds.  Withdrawals are not taxed again.
"""

from __future__ import annotations

import logging
from typing import List

from .results import InitialTransaction, RowStatus, StrategyMetrics, StrategyResult, YearlyRow, exhausted_row
from .simulation import SimulationContext, SimulationInput, check_period, desired_withdrawal
from .taxes import compute_tax

logger = logging.getLogger(__name__)


def initial_purchase(asset_id: str, inputs: SimulationInput, ctx: SimulationContext) -> InitialTransaction:
    """Tax the lump sum, charge the purchase fee and buy units."""
    fees = ctx.fees_for(inputs)
    price = ctx.data.price_of(asset_id, inputs.start_year)
    tax = compute_tax(
        inputs.principal,
        inputs.start_year,
        ctx.data,
        tax_free_fraction=ctx.policy.tax_free_fraction,
        fallback=ctx.policy.tax_year_fallback,
    )
    purchase_fee = tax.net_amount * fees.asset_transaction_percent / 100.0
    invested = tax.net_amount - purchase_fee
    return InitialTransaction(
        principal=inputs.principal,
        tax_paid=tax.tax_paid,
        purchase_fee=purchase_fee,
        amount_invested=invested,
        unit_price=price,
        units=invested / price,
    )


def simulate_asset(descriptor, inputs: SimulationInput, ctx: SimulationContext) -> StrategyResult:
    """Run the yearly withdrawal loop for an asset held outside a wrapper.

    Parameters
    ----------
    descriptor : StrategyDescriptor
        Registry entry; ``asset_id`` selects the price series.
    inputs : SimulationInput
        Principal, start year, withdrawal rate and horizon.
    ctx : SimulationContext
        Historical data plus fee and policy configuration.

    Returns
    -------
    StrategyResult
        The initial purchase, one row per year and the aggregated metrics.
    """
    asset_id = descriptor.asset_id
    check_period(asset_id, inputs, ctx.data)
    logger.debug("Simulating %s from %s for %d years", descriptor.id, inputs.start_year, inputs.years)

    fees = ctx.fees_for(inputs)
    tx = fees.asset_transaction_percent / 100.0
    storage = fees.asset_storage_percent / 100.0

    initial = initial_purchase(asset_id, inputs, ctx)
    units = initial.units
    rows: List[YearlyRow] = []

    for year in range(inputs.start_year, inputs.end_year + 1):
        price = ctx.data.price_of(asset_id, year)
        if units <= 0:
            rows.append(exhausted_row(year, price))
            continue

        start_units = units
        start_value = units * price

        # Storage is paid by selling units net of the transaction fee.
        storage_fee = start_value * storage
        storage_units = storage_fee / (price * (1.0 - tx)) if storage_fee > 0 else 0.0
        if storage_units >= units:
            proceeds = units * price
            rows.append(
                YearlyRow(
                    year=year,
                    unit_price=price,
                    start_units=start_units,
                    start_value=start_value,
                    fee=proceeds * (1.0 - tx),
                    transaction_cost=proceeds * tx,
                    gross_withdrawal=0.0,
                    tax_paid=0.0,
                    net_withdrawal=0.0,
                    end_units=0.0,
                    end_value=0.0,
                    status=RowStatus.DEPLETED,
                )
            )
            units = 0.0
            continue
        storage_tx = storage_units * price * tx
        units -= storage_units

        gross = desired_withdrawal(inputs, ctx.policy, units * price)
        units_needed = gross / price
        status = RowStatus.ACTIVE
        if units_needed >= units:
            units_needed = units
            gross = units * price
            status = RowStatus.DEPLETED

        sale_cost = gross * tx
        units = max(0.0, units - units_needed)
        rows.append(
            YearlyRow(
                year=year,
                unit_price=price,
                start_units=start_units,
                start_value=start_value,
                fee=storage_fee,
                transaction_cost=storage_tx + sale_cost,
                gross_withdrawal=gross,
                tax_paid=0.0,
                net_withdrawal=gross - sale_cost,
                end_units=units,
                end_value=units * price,
                status=status,
            )
        )
        if status == RowStatus.DEPLETED:
            units = 0.0
            logger.warning("%s depleted in %s", descriptor.id, year)

    final_value = rows[-1].end_value
    # Held outside the pension: the remaining holding is not taxed again.
    metrics = StrategyMetrics.from_rows(initial, rows, final_after_tax_value=final_value)
    return StrategyResult(descriptor.id, initial, tuple(rows), metrics)


__all__ = ["initial_purchase", "simulate_asset"]
