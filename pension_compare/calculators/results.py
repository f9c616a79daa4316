"""Value objects produced by the simulators.

All of them are frozen dataclasses built fresh for each request.  ``to_dict``
turns any of them into plain nested dicts/lists of numbers and strings.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple


class RowStatus(str, Enum):
    ACTIVE = "active"
    DEPLETED = "depleted"
    EXHAUSTED = "exhausted"


def to_plain(obj: Any) -> Any:
    """Recursively convert dataclasses, enums and tuples into plain Python data."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_plain(getattr(obj, f.name))
            for f in fields(obj)
            if f.metadata.get("serialize", True)
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    return obj


@dataclass(frozen=True)
class InitialTransaction:
    """Year-0 conversion of the lump sum into units.

    Composed strategies report the sums of their components and leave the
    unit fields empty.
    """

    principal: float
    tax_paid: float
    purchase_fee: float
    amount_invested: float
    unit_price: Optional[float]
    units: Optional[float]

    def to_dict(self) -> dict:
        return to_plain(self)


@dataclass(frozen=True)
class YearlyRow:
    year: int
    unit_price: Optional[float]
    start_units: Optional[float]
    start_value: float
    fee: float
    transaction_cost: float
    gross_withdrawal: float
    tax_paid: float
    net_withdrawal: float
    end_units: Optional[float]
    end_value: float
    status: RowStatus
    components: Tuple["YearlyRow", ...] = ()

    def to_dict(self) -> dict:
        return to_plain(self)


def exhausted_row(year: int, unit_price: Optional[float]) -> YearlyRow:
    """Terminal row emitted for every year after depletion."""
    units = 0.0 if unit_price is not None else None
    return YearlyRow(
        year=year,
        unit_price=unit_price,
        start_units=units,
        start_value=0.0,
        fee=0.0,
        transaction_cost=0.0,
        gross_withdrawal=0.0,
        tax_paid=0.0,
        net_withdrawal=0.0,
        end_units=units,
        end_value=0.0,
        status=RowStatus.EXHAUSTED,
    )


@dataclass(frozen=True)
class StrategyMetrics:
    initial_tax_paid: float
    total_fees: float
    total_holding_fees: float
    total_transaction_costs: float
    total_withdrawal_tax: float
    total_gross_withdrawn: float
    total_net_withdrawn: float
    final_value: float
    final_after_tax_value: float
    remaining_tax_liability: float
    total_value_realized: float
    year_depleted: Optional[int]
    years_with_full_withdrawal: int

    @property
    def total_tax_paid(self) -> float:
        return self.initial_tax_paid + self.total_withdrawal_tax

    @classmethod
    def from_rows(
        cls,
        initial: InitialTransaction,
        rows: Iterable[YearlyRow],
        final_after_tax_value: float,
    ) -> "StrategyMetrics":
        rows = list(rows)
        holding = sum(r.fee for r in rows)
        transaction = initial.purchase_fee + sum(r.transaction_cost for r in rows)
        net = sum(r.net_withdrawal for r in rows)
        final_value = rows[-1].end_value if rows else initial.amount_invested
        depleted = next((r.year for r in rows if r.status == RowStatus.DEPLETED), None)
        return cls(
            initial_tax_paid=initial.tax_paid,
            total_fees=holding + transaction,
            total_holding_fees=holding,
            total_transaction_costs=transaction,
            total_withdrawal_tax=sum(r.tax_paid for r in rows),
            total_gross_withdrawn=sum(r.gross_withdrawal for r in rows),
            total_net_withdrawn=net,
            final_value=final_value,
            final_after_tax_value=final_after_tax_value,
            remaining_tax_liability=final_value - final_after_tax_value,
            total_value_realized=net + final_after_tax_value,
            year_depleted=depleted,
            years_with_full_withdrawal=sum(1 for r in rows if r.status == RowStatus.ACTIVE),
        )

    def to_dict(self) -> dict:
        out = to_plain(self)
        out["total_tax_paid"] = self.total_tax_paid
        return out


@dataclass(frozen=True)
class StrategyResult:
    strategy_id: str
    initial_transaction: InitialTransaction
    yearly_rows: Tuple[YearlyRow, ...]
    metrics: StrategyMetrics
    components: Tuple["StrategyResult", ...] = ()

    @property
    def depleted(self) -> bool:
        return self.metrics.year_depleted is not None

    def to_dict(self) -> dict:
        out = to_plain(self)
        out["metrics"] = self.metrics.to_dict()
        return out


__all__ = [
    "RowStatus",
    "InitialTransaction",
    "YearlyRow",
    "exhausted_row",
    "StrategyMetrics",
    "StrategyResult",
    "to_plain",
]
