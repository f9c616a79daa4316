"""Side-by-side comparison of two strategies.

:class:`ComparisonEngine` validates a request, runs both simulators over the
same years, lines their rows up and derives the winner, the crossover year and
a handful of insights.  Errors raised by the simulators or the tax calculator
propagate unchanged and no partial result is ever returned.

Example
-------

>>> result = compare("gold", "sp500", 100000, 2000, 4, 20)
>>> len(result.yearly_comparison)
20
>>> result.summary.winner in ("strategy1", "strategy2", "tie")
True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..config import DEFAULT_FEES, DEFAULT_LIMITS, DEFAULT_POLICY, FeeConfig, Limits, PolicyConfig
from ..errors import InvalidInputError, UnsupportedPeriodError
from .historical import HistoricalData, default_data
from .insights import generate_insights
from .registry import StrategyDescriptor, StrategyRegistry, default_registry
from .results import StrategyMetrics, StrategyResult, YearlyRow, to_plain
from .simulation import SimulationContext, SimulationInput, require_finite

logger = logging.getLogger(__name__)

# Metrics reported as strategy1 - strategy2 in the summary.
COMPARED_METRICS = (
    "initial_tax_paid",
    "total_fees",
    "total_withdrawal_tax",
    "total_gross_withdrawn",
    "total_net_withdrawn",
    "final_after_tax_value",
    "total_value_realized",
)


class Winner(str, Enum):
    STRATEGY1 = "strategy1"
    STRATEGY2 = "strategy2"
    TIE = "tie"


@dataclass(frozen=True)
class ComparisonInputs:
    strategy1_id: str
    strategy2_id: str
    principal: float
    start_year: int
    withdrawal_rate_percent: float
    years: int
    fees: FeeConfig
    withdrawal_basis: str

    @property
    def end_year(self) -> int:
        return self.start_year + self.years - 1


@dataclass(frozen=True)
class StrategyOutcome:
    descriptor: StrategyDescriptor
    result: StrategyResult

    @property
    def metrics(self) -> StrategyMetrics:
        return self.result.metrics

    def to_dict(self) -> dict:
        return {
            "descriptor": self.descriptor.to_dict(),
            "result": self.result.to_dict(),
            "metrics": self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class YearComparison:
    year: int
    strategy1_row: YearlyRow
    strategy2_row: YearlyRow
    difference: float
    asset_value_difference: float
    cumulative_net_difference: float
    cumulative_advantage: float


@dataclass(frozen=True)
class Crossover:
    year: int
    years_from_start: int
    direction: str


@dataclass(frozen=True)
class ComparisonSummary:
    winner: Winner
    winner_name: str
    difference: float
    percentage_difference: float
    comparison: Dict[str, float]


@dataclass(frozen=True)
class ComparisonResult:
    inputs: ComparisonInputs
    strategy1: StrategyOutcome
    strategy2: StrategyOutcome
    yearly_comparison: Tuple[YearComparison, ...]
    summary: ComparisonSummary
    crossover: Optional[Crossover]
    insights: Tuple[str, ...]
    synthetic_price_years: Dict[str, List[int]]

    def to_dict(self) -> dict:
        return {
            "inputs": to_plain(self.inputs),
            "strategy1": self.strategy1.to_dict(),
            "strategy2": self.strategy2.to_dict(),
            "yearly_comparison": to_plain(self.yearly_comparison),
            "summary": to_plain(self.summary),
            "crossover": to_plain(self.crossover),
            "insights": list(self.insights),
            "synthetic_price_years": to_plain(self.synthetic_price_years),
        }


# ---------- pure helpers ----------
def align_rows(rows1: Tuple[YearlyRow, ...], rows2: Tuple[YearlyRow, ...]) -> Tuple[YearComparison, ...]:
    """Zip two row sequences by year index and attach running differences."""
    out = []
    cum1 = cum2 = 0.0
    for r1, r2 in zip(rows1, rows2):
        cum1 += r1.net_withdrawal
        cum2 += r2.net_withdrawal
        out.append(
            YearComparison(
                year=r1.year,
                strategy1_row=r1,
                strategy2_row=r2,
                difference=r1.net_withdrawal - r2.net_withdrawal,
                asset_value_difference=r1.end_value - r2.end_value,
                cumulative_net_difference=cum1 - cum2,
                cumulative_advantage=(cum1 + r1.end_value) - (cum2 + r2.end_value),
            )
        )
    return tuple(out)


def find_crossover(yearly: Tuple[YearComparison, ...], start_year: int) -> Optional[Crossover]:
    """First year in which the cumulative advantage changes side.

    The advantage is cumulative net withdrawals plus end value, strategy 1
    minus strategy 2, so money already paid out counts alongside what is
    still held.  The per-year end-value gap alone is not used.  Strategy 1
    counts as ahead only while the advantage is strictly positive.
    """
    if not yearly:
        return None
    ahead = yearly[0].cumulative_advantage > 0
    for row in yearly[1:]:
        now_ahead = row.cumulative_advantage > 0
        if now_ahead != ahead:
            return Crossover(
                year=row.year,
                years_from_start=row.year - start_year,
                direction="strategy1_overtakes" if now_ahead else "strategy2_overtakes",
            )
    return None


def decide_winner(
    m1: StrategyMetrics,
    m2: StrategyMetrics,
    names: Tuple[str, str],
    tie_threshold_percent: float,
) -> ComparisonSummary:
    difference = m1.total_value_realized - m2.total_value_realized
    average = (m1.total_value_realized + m2.total_value_realized) / 2.0
    pct = abs(difference) / average * 100.0 if average > 0 else 0.0
    if pct < tie_threshold_percent:
        winner, name = Winner.TIE, "Tie"
    elif difference > 0:
        winner, name = Winner.STRATEGY1, names[0]
    else:
        winner, name = Winner.STRATEGY2, names[1]
    return ComparisonSummary(
        winner=winner,
        winner_name=name,
        difference=difference,
        percentage_difference=pct,
        comparison={k: getattr(m1, k) - getattr(m2, k) for k in COMPARED_METRICS},
    )


def cumulative_withdrawals(result: ComparisonResult) -> Dict[str, List[float]]:
    """Running totals of net withdrawals for both strategies, year by year."""
    net1 = np.array([c.strategy1_row.net_withdrawal for c in result.yearly_comparison], dtype=float)
    net2 = np.array([c.strategy2_row.net_withdrawal for c in result.yearly_comparison], dtype=float)
    return {
        "years": [c.year for c in result.yearly_comparison],
        "strategy1": np.cumsum(net1).tolist(),
        "strategy2": np.cumsum(net2).tolist(),
    }


def summary_text(result: ComparisonResult) -> str:
    i = result.inputs
    s1, s2 = result.strategy1, result.strategy2
    text = (
        f"Over {i.years} years from {i.start_year}, withdrawing {i.withdrawal_rate_percent:g}% a year "
        f"from £{i.principal:,.0f}, {s1.descriptor.name} realised £{s1.metrics.total_value_realized:,.0f} "
        f"and {s2.descriptor.name} realised £{s2.metrics.total_value_realized:,.0f}."
    )
    if result.summary.winner == Winner.TIE:
        return text + " The result is effectively a tie."
    return text + (
        f" {result.summary.winner_name} comes out ahead by £{abs(result.summary.difference):,.0f} "
        f"({result.summary.percentage_difference:.1f}%)."
    )


# ---------- engine ----------
class ComparisonEngine:
    """Runs comparisons against injected, read-only data and configuration.

    Parameters
    ----------
    data : HistoricalData, optional
        Price and tax tables.  Defaults to the shipped tables.
    registry : StrategyRegistry, optional
        Strategy catalogue.  Built from ``data`` when omitted.
    fees, policy, limits
        Default fee percentages, policy constants and input limits.
    """

    def __init__(
        self,
        data: Optional[HistoricalData] = None,
        registry: Optional[StrategyRegistry] = None,
        fees: FeeConfig = DEFAULT_FEES,
        policy: PolicyConfig = DEFAULT_POLICY,
        limits: Limits = DEFAULT_LIMITS,
    ):
        if data is None:
            data = default_data()
            registry = registry or default_registry()
        self.data = data
        self.registry = registry or StrategyRegistry(data)
        self.fees = fees
        self.policy = policy
        self.limits = limits

    def _check_limits(self, principal: float, withdrawal_rate_percent: float, years: int) -> None:
        require_finite("principal", principal)
        require_finite("withdrawal_rate_percent", withdrawal_rate_percent)
        lo, hi = self.limits.min_withdrawal_rate_percent, self.limits.max_withdrawal_rate_percent
        if not lo <= withdrawal_rate_percent <= hi:
            raise InvalidInputError(
                f"Withdrawal rate must be between {lo:g}% and {hi:g}%, got {withdrawal_rate_percent}"
            )
        if isinstance(years, int) and years < self.limits.min_years:
            raise InvalidInputError(f"years must be at least {self.limits.min_years}, got {years}")
        if not principal > 0:
            raise InvalidInputError(f"principal must be positive, got {principal}")

    def compare(
        self,
        strategy1_id: str,
        strategy2_id: str,
        principal: float,
        start_year: int,
        withdrawal_rate_percent: float,
        years: int,
        fee_config: Union[FeeConfig, Mapping[str, Optional[float]], None] = None,
    ) -> ComparisonResult:
        d1 = self.registry.get(strategy1_id)
        d2 = self.registry.get(strategy2_id)
        if strategy1_id == strategy2_id:
            raise InvalidInputError("Cannot compare a strategy with itself")
        self._check_limits(principal, withdrawal_rate_percent, years)

        inputs = SimulationInput(principal, start_year, withdrawal_rate_percent, years)
        earliest = self.registry.earliest_common_year(strategy1_id, strategy2_id)
        if start_year < earliest:
            raise UnsupportedPeriodError(
                f"{d1.short_name} and {d2.short_name} can only be compared from {earliest}"
            )
        last = self.registry.last_common_year(strategy1_id, strategy2_id)
        if inputs.end_year > last:
            raise UnsupportedPeriodError(
                f"Data ends in {last}; {years} years from {start_year} would need {inputs.end_year}"
            )

        fees = fee_config if isinstance(fee_config, FeeConfig) else self.fees.with_overrides(fee_config)
        ctx = SimulationContext(self.data, fees, self.policy)
        logger.info(
            "Comparing %s vs %s: %s from %s at %s%% for %s years",
            strategy1_id, strategy2_id, principal, start_year, withdrawal_rate_percent, years,
        )

        r1 = d1.simulator(d1, inputs, ctx)
        r2 = d2.simulator(d2, inputs, ctx)
        s1, s2 = StrategyOutcome(d1, r1), StrategyOutcome(d2, r2)

        yearly = align_rows(r1.yearly_rows, r2.yearly_rows)
        summary = decide_winner(r1.metrics, r2.metrics, (d1.name, d2.name), self.policy.tie_threshold_percent)
        crossover = find_crossover(yearly, start_year)
        insights = tuple(generate_insights(s1, s2, summary, crossover))
        synthetic = {
            d.id: sorted({y for a in d.asset_ids for y in self.data.synthetic_years(a, start_year, inputs.end_year)})
            for d in (d1, d2)
        }

        result = ComparisonResult(
            inputs=ComparisonInputs(
                strategy1_id=strategy1_id,
                strategy2_id=strategy2_id,
                principal=float(principal),
                start_year=start_year,
                withdrawal_rate_percent=float(withdrawal_rate_percent),
                years=years,
                fees=fees,
                withdrawal_basis=self.policy.withdrawal_basis.value,
            ),
            strategy1=s1,
            strategy2=s2,
            yearly_comparison=yearly,
            summary=summary,
            crossover=crossover,
            insights=insights,
            synthetic_price_years=synthetic,
        )
        logger.info("Comparison finished: winner=%s (%.2f%%)", summary.winner.value, summary.percentage_difference)
        return result


@lru_cache(maxsize=None)
def default_engine() -> ComparisonEngine:
    return ComparisonEngine()


def compare(
    strategy1_id: str,
    strategy2_id: str,
    principal: float,
    start_year: int,
    withdrawal_rate_percent: float,
    years: int,
    fee_config: Union[FeeConfig, Mapping[str, Optional[float]], None] = None,
) -> ComparisonResult:
    """Compare two strategies with the shipped data and default configuration."""
    return default_engine().compare(
        strategy1_id, strategy2_id, principal, start_year, withdrawal_rate_percent, years, fee_config
    )


__all__ = [
    "Winner",
    "ComparisonInputs",
    "StrategyOutcome",
    "YearComparison",
    "Crossover",
    "ComparisonSummary",
    "ComparisonResult",
    "COMPARED_METRICS",
    "align_rows",
    "find_crossover",
    "decide_winner",
    "cumulative_withdrawals",
    "summary_text",
    "ComparisonEngine",
    "default_engine",
    "compare",
]
