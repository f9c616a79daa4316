"""Historical data provider.

Holds, for each supported asset, a unit price in the reporting currency (GBP)
keyed by calendar year, and for each tax year the progressive income tax bands
together with the personal allowance.  The provider is read-only: it is built
once from the JSON tables in ``data/`` and then shared by every calculation.

Exchange-traded funds that did not exist for the whole period get a synthetic
price derived from the underlying total-return index (converted from USD where
needed) and anchored to the fund's real price in the base year::

    price[y] = index[y] / index[base] * base_price_gbp * fx[base] / fx[y]

Those years are recorded so that a disclaimer can flag them; the simulators
treat synthetic and real prices identically.

Example
-------

>>> data = load_historical_data()
>>> data.price_of("gold", 2000)
177.83
>>> data.is_synthetic("sp500", 2000)
True
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import ConfigurationError, DataUnavailableError

logger = logging.getLogger(__name__)

_DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

REPORTING_CURRENCY = "GBP"


@dataclass(frozen=True)
class TaxBand:
    name: str
    start: float
    end: Optional[float]
    rate: float

    @property
    def width(self) -> float:
        return (self.end if self.end is not None else float("inf")) - self.start


@dataclass(frozen=True)
class TaxYear:
    """Personal allowance and ascending bands over taxable income for one year."""

    year: int
    personal_allowance: float
    bands: Tuple[TaxBand, ...]


class HistoricalData:
    """Read-only price and tax tables keyed by year.

    Parameters
    ----------
    prices : mapping
        ``{asset_id: {year: unit price in GBP}}``.
    tax_years : mapping
        ``{year: TaxYear}``.
    synthetic : mapping, optional
        ``{asset_id: iterable of years whose price is synthetic}``.
    """

    def __init__(
        self,
        prices: Mapping[str, Mapping[int, float]],
        tax_years: Mapping[int, TaxYear],
        synthetic: Optional[Mapping[str, Iterable[int]]] = None,
    ):
        checked: Dict[str, Mapping[int, float]] = {}
        for asset_id, series in prices.items():
            if not series:
                raise ConfigurationError(f"Price series for '{asset_id}' is empty")
            clean = {}
            for year, price in sorted((int(y), float(p)) for y, p in series.items()):
                if price <= 0:
                    raise ConfigurationError(f"Non-positive price for '{asset_id}' in {year}: {price}")
                clean[year] = price
            checked[asset_id] = MappingProxyType(clean)
        self._prices = MappingProxyType(checked)
        self._tax_years = MappingProxyType({int(y): t for y, t in sorted(tax_years.items())})
        self._synthetic = MappingProxyType(
            {a: frozenset(int(y) for y in years) for a, years in (synthetic or {}).items()}
        )

    # ---- prices ----
    def assets(self) -> Tuple[str, ...]:
        return tuple(self._prices)

    def _series(self, asset_id: str) -> Mapping[int, float]:
        try:
            return self._prices[asset_id]
        except KeyError:
            raise DataUnavailableError(f"No price series for asset '{asset_id}'") from None

    def price_of(self, asset_id: str, year: int) -> float:
        series = self._series(asset_id)
        try:
            return series[int(year)]
        except KeyError:
            raise DataUnavailableError(f"No {asset_id} price for {year}") from None

    def earliest_year_for(self, asset_id: str) -> int:
        return next(iter(self._series(asset_id)))

    def last_year_for(self, asset_id: str) -> int:
        return next(reversed(list(self._series(asset_id))))

    def last_common_year(self, *asset_ids: str) -> int:
        """Last year for which every asset in ``asset_ids`` has a price."""
        ids = asset_ids or self.assets()
        return min(self.last_year_for(a) for a in ids)

    def is_synthetic(self, asset_id: str, year: int) -> bool:
        self._series(asset_id)
        return int(year) in self._synthetic.get(asset_id, frozenset())

    def synthetic_years(self, asset_id: str, start_year: int, end_year: int) -> List[int]:
        return [y for y in range(start_year, end_year + 1) if self.is_synthetic(asset_id, y)]

    # ---- tax ----
    def tax_years(self) -> Tuple[int, ...]:
        return tuple(self._tax_years)

    def tax_bands_for(self, year: int) -> TaxYear:
        try:
            return self._tax_years[int(year)]
        except KeyError:
            raise ConfigurationError(f"No tax band table for {year}") from None

    def nearest_tax_year(self, year: int) -> int:
        """Closest year with a band table; ties resolve to the earlier year."""
        if not self._tax_years:
            raise ConfigurationError("No tax band tables are loaded")
        return min(self._tax_years, key=lambda y: (abs(y - int(year)), y))


# ---------- loading ----------
def _read_json(path: Path) -> Dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read data table {path.name}: {exc}") from exc


def _year_map(raw: Mapping[str, float]) -> Dict[int, float]:
    return {int(y): float(v) for y, v in raw.items()}


def _parse_tax_years(raw: Mapping) -> Dict[int, TaxYear]:
    tables = {}
    for year_key, entry in raw.items():
        year = int(year_key)
        bands = tuple(
            TaxBand(
                name=b.get("name", f"band{i}"),
                start=float(b["start"]),
                end=float(b["end"]) if b["end"] is not None else None,
                rate=float(b["rate"]),
            )
            for i, b in enumerate(entry["brackets"])
        )
        starts = [b.start for b in bands]
        if starts != sorted(starts):
            raise ConfigurationError(f"Tax bands for {year} are not in ascending order")
        tables[year] = TaxYear(year, float(entry["personal_allowance"]), bands)
    return tables


def synthetic_price_series(
    underlying: Mapping[int, float],
    base_year: int,
    base_price: float,
    fx: Optional[Mapping[int, float]] = None,
) -> Dict[int, float]:
    """Scale an index series so that ``base_year`` equals ``base_price``.

    When ``fx`` (GBP->USD) is given the index is treated as USD and each year is
    converted at that year's rate relative to the base year.  Years missing an
    exchange rate are left out.
    """
    if base_year not in underlying:
        raise ConfigurationError(f"Underlying series has no value for base year {base_year}")
    base_value = underlying[base_year]
    out = {}
    for year, value in underlying.items():
        price = value / base_value * base_price
        if fx is not None:
            if year not in fx or base_year not in fx:
                continue
            price *= fx[base_year] / fx[year]
        out[year] = round(price, 4)
    return out


def load_historical_data(data_dir: Optional[Path] = None) -> HistoricalData:
    """Parse the shipped JSON tables into a :class:`HistoricalData`.

    Every file is parsed into local structures first, so a failure part-way
    through leaves nothing half-initialised.
    """
    d = Path(data_dir) if data_dir is not None else _DEFAULT_DATA_DIR
    try:
        gold = _year_map(_read_json(d / "gold_prices.json")["prices"])
        fx = _year_map(_read_json(d / "exchange_rates.json")["rates"])
        indices_raw = _read_json(d / "index_returns.json")
        proxies_raw = _read_json(d / "etf_proxies.json")
        tax_raw = _read_json(d / "uk_tax_tables.json")["years"]

        indices = {k: (v["currency"], _year_map(v["values"])) for k, v in indices_raw.items()}
        base_year = int(proxies_raw["base_year"])

        prices: Dict[str, Dict[int, float]] = {"gold": gold}
        synthetic: Dict[str, List[int]] = {}
        for asset_id, proxy in proxies_raw["proxies"].items():
            underlying_id = proxy["underlying"]
            if underlying_id == "gold":
                currency, underlying = REPORTING_CURRENCY, gold
            else:
                currency, underlying = indices[underlying_id]
            series = synthetic_price_series(
                underlying,
                base_year,
                float(proxy["base_price_gbp"]),
                fx if currency == "USD" else None,
            )
            prices[asset_id] = series
            launch = int(proxy["launch_year"])
            synthetic[asset_id] = [y for y in series if y < launch]

        tax_years = _parse_tax_years(tax_raw)
    except KeyError as exc:
        raise ConfigurationError(f"Data table is missing key {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Data table has a malformed value: {exc}") from exc

    data = HistoricalData(prices, tax_years, synthetic)
    logger.info(
        "Loaded historical data: %s; %d tax years",
        ", ".join(f"{a} {data.earliest_year_for(a)}-{data.last_year_for(a)}" for a in data.assets()),
        len(tax_years),
    )
    return data


@lru_cache(maxsize=None)
def default_data() -> HistoricalData:
    """Process-wide provider built from the shipped tables, loaded on first use."""
    return load_historical_data()


__all__ = [
    "TaxBand",
    "TaxYear",
    "HistoricalData",
    "synthetic_price_series",
    "load_historical_data",
    "default_data",
    "REPORTING_CURRENCY",
]
