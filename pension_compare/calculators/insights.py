from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .comparison import ComparisonSummary, Crossover, StrategyOutcome


def _money(value: float) -> str:
    return f"£{value:,.0f}"


def _fee_label(outcome: "StrategyOutcome") -> str:
    d = outcome.descriptor
    kinds = {c.type.value for c in d.components} if d.components else {d.type.value}
    if kinds == {"asset"}:
        return "storage fees"
    if kinds == {"wrapper"}:
        return "management fees"
    return "storage and management fees"


def generate_insights(
    strategy1: "StrategyOutcome",
    strategy2: "StrategyOutcome",
    summary: "ComparisonSummary",
    crossover: Optional["Crossover"],
) -> List[str]:
    """Return short human-readable observations about a comparison.

    Every sentence is read straight off metrics that have already been
    computed; nothing here runs a simulation or applies tax rules.
    """
    out: List[str] = []
    outcomes = (strategy1, strategy2)

    for o in outcomes:
        m = o.metrics
        principal = o.result.initial_transaction.principal
        if m.initial_tax_paid == 0:
            out.append(f"{o.descriptor.name} paid no initial tax on the lump sum.")
        else:
            share = m.initial_tax_paid / principal * 100 if principal else 0.0
            out.append(
                f"{o.descriptor.name} paid {_money(m.initial_tax_paid)} ({share:.1f}%) "
                f"in tax up front on the lump sum."
            )

    for o in outcomes:
        if o.metrics.total_holding_fees > 0:
            out.append(
                f"{o.descriptor.name} paid {_money(o.metrics.total_holding_fees)} in {_fee_label(o)}."
            )

    tax1, tax2 = strategy1.metrics.total_tax_paid, strategy2.metrics.total_tax_paid
    if tax1 != tax2:
        lower, higher = (strategy1, strategy2) if tax1 < tax2 else (strategy2, strategy1)
        out.append(
            f"{lower.descriptor.name} paid {_money(abs(tax1 - tax2))} less tax in total "
            f"than {higher.descriptor.name}."
        )

    if crossover is not None:
        leader, other = (
            (strategy1, strategy2) if crossover.direction == "strategy1_overtakes" else (strategy2, strategy1)
        )
        out.append(
            f"{leader.descriptor.name} overtook {other.descriptor.name} in {crossover.year} "
            f"({crossover.years_from_start} years in)."
        )

    for o in outcomes:
        if o.metrics.year_depleted is not None:
            out.append(f"{o.descriptor.name} ran out of money in {o.metrics.year_depleted}.")

    if summary.winner == "tie":
        out.append(
            f"The two strategies finished within {summary.percentage_difference:.1f}% of each other."
        )
    else:
        winner, loser = (strategy1, strategy2) if summary.winner == "strategy1" else (strategy2, strategy1)
        out.append(
            f"{winner.descriptor.name} outperformed {loser.descriptor.name} by "
            f"{summary.percentage_difference:.1f}% in total value realised."
        )
    return out


__all__ = ["generate_insights"]
