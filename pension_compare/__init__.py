"""Compare ways of drawing down a pension lump sum against historical data."""

from .calculators.comparison import ComparisonEngine, ComparisonResult, compare
from .calculators.historical import HistoricalData, default_data, load_historical_data
from .calculators.registry import StrategyRegistry, default_registry
from .config import FeeConfig, Limits, PolicyConfig, WithdrawalBasis
from .errors import (
    ConfigurationError,
    DataUnavailableError,
    InvalidInputError,
    SimulationError,
    UnsupportedPeriodError,
)

__version__ = "0.1.0"

__all__ = [
    "ComparisonEngine",
    "ComparisonResult",
    "compare",
    "HistoricalData",
    "default_data",
    "load_historical_data",
    "StrategyRegistry",
    "default_registry",
    "FeeConfig",
    "Limits",
    "PolicyConfig",
    "WithdrawalBasis",
    "SimulationError",
    "InvalidInputError",
    "UnsupportedPeriodError",
    "DataUnavailableError",
    "ConfigurationError",
]
