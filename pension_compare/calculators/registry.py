"""Catalogue of the strategies that can be compared.

Base strategies each track one price series from :mod:`historical`; blends pair
two of them 50/50.  A strategy's earliest year is the first year its price
series (or, for a blend, both series) has data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import InvalidInputError
from .asset import simulate_asset
from .composed import simulate_composed
from .historical import HistoricalData, default_data
from .wrapper import simulate_wrapper


class StrategyType(str, Enum):
    ASSET = "asset"
    WRAPPER = "wrapper"
    COMPOSED = "composed"


BASE_STRATEGIES: List[Dict[str, str]] = [
    {
        "id": "gold",
        "name": "Physical Gold - Outside Pension",
        "short_name": "Gold",
        "type": "asset",
        "asset_id": "gold",
        "currency": "GBP",
        "description": "Take the lump sum out of the pension, pay income tax, and hold physical gold.",
    },
    {
        "id": "goldEtf",
        "name": "Gold ETF SIPP",
        "short_name": "Gold ETF",
        "type": "wrapper",
        "asset_id": "goldEtf",
        "currency": "GBP",
        "description": "Keep the pension invested in a physically backed gold ETF inside a SIPP.",
    },
    {
        "id": "sp500",
        "name": "S&P 500 SIPP",
        "short_name": "S&P 500",
        "type": "wrapper",
        "asset_id": "sp500",
        "currency": "USD",
        "description": "Keep the pension invested in an S&P 500 tracker inside a SIPP.",
    },
    {
        "id": "nasdaq100",
        "name": "Nasdaq 100 SIPP",
        "short_name": "Nasdaq 100",
        "type": "wrapper",
        "asset_id": "nasdaq100",
        "currency": "USD",
        "description": "Keep the pension invested in a Nasdaq 100 tracker inside a SIPP.",
    },
    {
        "id": "ftse100",
        "name": "FTSE 100 SIPP",
        "short_name": "FTSE 100",
        "type": "wrapper",
        "asset_id": "ftse100",
        "currency": "GBP",
        "description": "Keep the pension invested in a FTSE 100 tracker inside a SIPP.",
    },
]

BLENDS: List[Tuple[str, str]] = [
    ("gold", "sp500"),
    ("gold", "nasdaq100"),
    ("gold", "ftse100"),
    ("sp500", "nasdaq100"),
    ("sp500", "ftse100"),
    ("nasdaq100", "ftse100"),
    ("goldEtf", "sp500"),
    ("goldEtf", "nasdaq100"),
    ("goldEtf", "ftse100"),
    ("gold", "goldEtf"),
]

DEFAULT_STRATEGY_IDS = ("gold", "sp500")

_SIMULATORS: Dict[StrategyType, Callable] = {
    StrategyType.ASSET: simulate_asset,
    StrategyType.WRAPPER: simulate_wrapper,
    StrategyType.COMPOSED: simulate_composed,
}


@dataclass(frozen=True)
class StrategyDescriptor:
    id: str
    name: str
    short_name: str
    type: StrategyType
    earliest_year: int
    currency: str
    description: str
    asset_id: Optional[str] = None
    components: Tuple["StrategyDescriptor", ...] = field(default=(), metadata={"serialize": False})
    simulator: Callable = field(default=None, compare=False, repr=False, metadata={"serialize": False})

    @property
    def asset_ids(self) -> Tuple[str, ...]:
        if self.components:
            return tuple(a for c in self.components for a in c.asset_ids)
        return (self.asset_id,)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "type": self.type.value,
            "earliest_year": self.earliest_year,
            "currency": self.currency,
            "description": self.description,
            "components": [c.id for c in self.components],
        }


def _blend(a: StrategyDescriptor, b: StrategyDescriptor) -> StrategyDescriptor:
    return StrategyDescriptor(
        id=f"{a.id}-{b.id}",
        name=f"50% {a.short_name} + 50% {b.short_name}",
        short_name=f"{a.short_name}/{b.short_name}",
        type=StrategyType.COMPOSED,
        earliest_year=max(a.earliest_year, b.earliest_year),
        currency=a.currency if a.currency == b.currency else "Mixed",
        description=f"Split the pension equally: half in {a.name}, half in {b.name}.",
        components=(a, b),
        simulator=_SIMULATORS[StrategyType.COMPOSED],
    )


class StrategyRegistry:
    """Immutable id -> descriptor catalogue built against a data provider."""

    def __init__(self, data: HistoricalData):
        catalogue: Dict[str, StrategyDescriptor] = {}
        for entry in BASE_STRATEGIES:
            kind = StrategyType(entry["type"])
            catalogue[entry["id"]] = StrategyDescriptor(
                id=entry["id"],
                name=entry["name"],
                short_name=entry["short_name"],
                type=kind,
                earliest_year=data.earliest_year_for(entry["asset_id"]),
                currency=entry["currency"],
                description=entry["description"],
                asset_id=entry["asset_id"],
                simulator=_SIMULATORS[kind],
            )
        for a, b in BLENDS:
            blend = _blend(catalogue[a], catalogue[b])
            catalogue[blend.id] = blend
        self._catalogue = catalogue
        self._last_year = {sid: data.last_common_year(*d.asset_ids) for sid, d in catalogue.items()}

    def get(self, strategy_id: str) -> StrategyDescriptor:
        try:
            return self._catalogue[strategy_id]
        except KeyError:
            raise InvalidInputError(f"Unknown strategy '{strategy_id}'") from None

    def __contains__(self, strategy_id: str) -> bool:
        return strategy_id in self._catalogue

    def list_strategies(self) -> List[StrategyDescriptor]:
        return list(self._catalogue.values())

    def available_for_year(self, year: int) -> List[StrategyDescriptor]:
        return [d for d in self._catalogue.values() if d.earliest_year <= year]

    def last_year_for(self, strategy_id: str) -> int:
        self.get(strategy_id)
        return self._last_year[strategy_id]

    def earliest_common_year(self, id1: str, id2: str) -> int:
        return max(self.get(id1).earliest_year, self.get(id2).earliest_year)

    def last_common_year(self, id1: str, id2: str) -> int:
        return min(self.last_year_for(id1), self.last_year_for(id2))

    def can_compare(self, id1: str, id2: str, start_year: Optional[int] = None) -> Tuple[bool, str, Optional[int]]:
        """Return ``(ok, reason, earliest_common_year)`` for a proposed pairing."""
        for sid in (id1, id2):
            if sid not in self._catalogue:
                return False, f"Unknown strategy '{sid}'", None
        if id1 == id2:
            return False, "Cannot compare a strategy with itself", None
        earliest = self.earliest_common_year(id1, id2)
        if start_year is not None and start_year < earliest:
            return False, f"Data for this pair starts in {earliest}", earliest
        return True, "", earliest

    def component_strategies(self, strategy_id: str) -> Tuple[StrategyDescriptor, ...]:
        """Components of a blend, or the strategy itself for a base strategy."""
        d = self.get(strategy_id)
        return d.components or (d,)

    def default_strategies(self) -> Tuple[StrategyDescriptor, StrategyDescriptor]:
        return tuple(self.get(s) for s in DEFAULT_STRATEGY_IDS)

    def grouped_for_display(self) -> Dict[str, List[StrategyDescriptor]]:
        groups: Dict[str, List[StrategyDescriptor]] = {t.value: [] for t in StrategyType}
        for d in self._catalogue.values():
            groups[d.type.value].append(d)
        return groups


@lru_cache(maxsize=None)
def default_registry() -> StrategyRegistry:
    return StrategyRegistry(default_data())


__all__ = [
    "StrategyType",
    "StrategyDescriptor",
    "StrategyRegistry",
    "BASE_STRATEGIES",
    "BLENDS",
    "DEFAULT_STRATEGY_IDS",
    "default_registry",
]
