"""Policy constants and fee defaults.

These values are soft configuration: the comparison engine receives them at
construction and individual requests may override the fee percentages.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Mapping, Optional

from .errors import InvalidInputError


class WithdrawalBasis(str, Enum):
    """How the yearly gross withdrawal is sized."""

    REMAINING_BALANCE = "remaining_balance"
    INITIAL_PRINCIPAL = "initial_principal"


@dataclass(frozen=True)
class FeeConfig:
    """Fee percentages applied by the simulators (e.g. ``3.0`` means 3%)."""

    asset_transaction_percent: float = 3.0
    asset_storage_percent: float = 0.7
    wrapper_management_percent: float = 0.5

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise InvalidInputError(f"{f.name} must be a number, got {value!r}")
            if value < 0 or value >= 100:
                raise InvalidInputError(f"{f.name} must be within [0, 100), got {value}")

    def with_overrides(self, overrides: Optional[Mapping[str, Optional[float]]] = None) -> "FeeConfig":
        """Return a copy with ``overrides`` applied.  ``None`` values keep the default."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidInputError(f"Unknown fee setting(s): {', '.join(unknown)}")
        changes = {}
        for k, v in overrides.items():
            if v is None:
                continue
            try:
                changes[k] = float(v)
            except (TypeError, ValueError):
                raise InvalidInputError(f"{k} must be a number, got {v!r}") from None
        return replace(self, **changes)


@dataclass(frozen=True)
class PolicyConfig:
    tie_threshold_percent: float = 1.0
    # Pension commencement lump sum: share of a pension-derived amount that is tax free.
    pension_tax_free_percent: float = 25.0
    withdrawal_basis: WithdrawalBasis = WithdrawalBasis.REMAINING_BALANCE
    tax_year_fallback: bool = True

    @property
    def tax_free_fraction(self) -> float:
        return self.pension_tax_free_percent / 100.0


@dataclass(frozen=True)
class Limits:
    min_withdrawal_rate_percent: float = 1.0
    max_withdrawal_rate_percent: float = 10.0
    min_years: int = 1


# Starting values for the input form.
DEFAULT_INPUTS = {
    "principal": 500_000.0,
    "start_year": 2000,
    "withdrawal_rate_percent": 4.0,
    "years": 25,
    "strategy1_id": "gold",
    "strategy2_id": "sp500",
}

DEFAULT_FEES = FeeConfig()
DEFAULT_POLICY = PolicyConfig()
DEFAULT_LIMITS = Limits()

__all__ = [
    "WithdrawalBasis",
    "FeeConfig",
    "PolicyConfig",
    "Limits",
    "DEFAULT_INPUTS",
    "DEFAULT_FEES",
    "DEFAULT_POLICY",
    "DEFAULT_LIMITS",
]
