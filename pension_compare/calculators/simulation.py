"""Shared simulation inputs and helpers used by every strategy simulator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..config import DEFAULT_FEES, DEFAULT_POLICY, FeeConfig, PolicyConfig, WithdrawalBasis
from ..errors import InvalidInputError, UnsupportedPeriodError
from .historical import HistoricalData


def require_finite(name: str, value) -> float:
    """Return ``value`` as a float, rejecting non-numbers, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return float(value)


@dataclass(frozen=True)
class SimulationInput:
    """Validated parameters for one strategy simulation."""

    principal: float
    start_year: int
    withdrawal_rate_percent: float
    years: int
    fee_overrides: Optional[Mapping[str, Optional[float]]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.years, bool) or not isinstance(self.years, int):
            raise InvalidInputError(f"years must be an integer, got {self.years!r}")
        if isinstance(self.start_year, bool) or not isinstance(self.start_year, int):
            raise InvalidInputError(f"start_year must be an integer, got {self.start_year!r}")
        require_finite("principal", self.principal)
        require_finite("withdrawal_rate_percent", self.withdrawal_rate_percent)
        if not self.principal > 0:
            raise InvalidInputError(f"principal must be positive, got {self.principal}")
        if self.years < 1:
            raise InvalidInputError(f"years must be at least 1, got {self.years}")
        if not self.withdrawal_rate_percent > 0:
            raise InvalidInputError(
                f"withdrawal_rate_percent must be positive, got {self.withdrawal_rate_percent}"
            )

    @property
    def end_year(self) -> int:
        return self.start_year + self.years - 1

    @property
    def withdrawal_fraction(self) -> float:
        return self.withdrawal_rate_percent / 100.0


@dataclass(frozen=True)
class SimulationContext:
    """Read-only dependencies handed to the simulators."""

    data: HistoricalData
    fees: FeeConfig = DEFAULT_FEES
    policy: PolicyConfig = DEFAULT_POLICY

    def fees_for(self, inputs: SimulationInput) -> FeeConfig:
        return self.fees.with_overrides(inputs.fee_overrides)


def check_period(asset_id: str, inputs: SimulationInput, data: HistoricalData) -> None:
    """Raise :class:`UnsupportedPeriodError` unless ``asset_id`` has prices for every year."""
    earliest = data.earliest_year_for(asset_id)
    if inputs.start_year < earliest:
        raise UnsupportedPeriodError(
            f"{asset_id} data starts in {earliest}; cannot start in {inputs.start_year}"
        )
    last = data.last_year_for(asset_id)
    if inputs.end_year > last:
        raise UnsupportedPeriodError(
            f"{asset_id} data ends in {last}; a {inputs.years}-year run from "
            f"{inputs.start_year} needs {inputs.end_year}"
        )


def desired_withdrawal(inputs: SimulationInput, policy: PolicyConfig, current_value: float) -> float:
    """Gross amount to draw this year under the configured withdrawal basis."""
    if policy.withdrawal_basis == WithdrawalBasis.INITIAL_PRINCIPAL:
        return inputs.principal * inputs.withdrawal_fraction
    return current_value * inputs.withdrawal_fraction


__all__ = ["require_finite", "SimulationInput", "SimulationContext", "check_period", "desired_withdrawal"]
