"""50/50 blend of two base strategies.

The principal is split evenly at the start and each half is simulated by its
own strategy.  The blend only aggregates: combined rows sum the component rows
year by year and the status is merged with :func:`merge_status`.  Components
must be asset- or wrapper-backed; blends do not nest.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..errors import ConfigurationError
from .results import InitialTransaction, RowStatus, StrategyMetrics, StrategyResult, YearlyRow
from .simulation import SimulationContext, SimulationInput

logger = logging.getLogger(__name__)


def merge_status(statuses: Sequence[RowStatus]) -> RowStatus:
    """Exhausted once every component is exhausted; depleted in any component's
    depletion year; active otherwise.

    A blend row is not monotone: it reads active again after a depleted year
    while the other half is still paying out.
    """
    if all(s == RowStatus.EXHAUSTED for s in statuses):
        return RowStatus.EXHAUSTED
    if any(s == RowStatus.DEPLETED for s in statuses):
        return RowStatus.DEPLETED
    return RowStatus.ACTIVE


def combine_rows(rows: Sequence[YearlyRow]) -> YearlyRow:
    return YearlyRow(
        year=rows[0].year,
        unit_price=None,
        start_units=None,
        start_value=sum(r.start_value for r in rows),
        fee=sum(r.fee for r in rows),
        transaction_cost=sum(r.transaction_cost for r in rows),
        gross_withdrawal=sum(r.gross_withdrawal for r in rows),
        tax_paid=sum(r.tax_paid for r in rows),
        net_withdrawal=sum(r.net_withdrawal for r in rows),
        end_units=None,
        end_value=sum(r.end_value for r in rows),
        status=merge_status([r.status for r in rows]),
        components=tuple(rows),
    )


def combine_initial(initials: Sequence[InitialTransaction]) -> InitialTransaction:
    return InitialTransaction(
        principal=sum(i.principal for i in initials),
        tax_paid=sum(i.tax_paid for i in initials),
        purchase_fee=sum(i.purchase_fee for i in initials),
        amount_invested=sum(i.amount_invested for i in initials),
        unit_price=None,
        units=None,
    )


def simulate_composed(descriptor, inputs: SimulationInput, ctx: SimulationContext) -> StrategyResult:
    components = descriptor.components
    if len(components) != 2:
        raise ConfigurationError(f"{descriptor.id} must blend exactly two strategies")
    for component in components:
        if component.components:
            raise ConfigurationError(f"{descriptor.id} cannot blend composed strategy {component.id}")
    logger.debug("Simulating blend %s from %s", descriptor.id, inputs.start_year)

    half = replace(inputs, principal=inputs.principal / 2.0)
    results = [c.simulator(c, half, ctx) for c in components]

    rows = tuple(combine_rows(year_rows) for year_rows in zip(*(r.yearly_rows for r in results)))
    initial = combine_initial([r.initial_transaction for r in results])
    final_after_tax = sum(r.metrics.final_after_tax_value for r in results)
    metrics = StrategyMetrics.from_rows(initial, rows, final_after_tax_value=final_after_tax)
    return StrategyResult(descriptor.id, initial, rows, metrics, components=tuple(results))


__all__ = ["merge_status", "combine_rows", "combine_initial", "simulate_composed"]
