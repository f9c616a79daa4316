"""Exception taxonomy shared by the simulation engine.

Every error raised by the calculators derives from :class:`SimulationError` so
the presentation layer can map each kind to a message without inspecting
internals.  The engine itself never catches or downgrades these errors.
"""


class SimulationError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(SimulationError, ValueError):
    """Malformed or out-of-range simulation parameters."""


class UnsupportedPeriodError(SimulationError):
    """The requested year range is not covered by a strategy's data."""


class DataUnavailableError(SimulationError, LookupError):
    """A historical data point is missing for an in-range year."""


class ConfigurationError(SimulationError):
    """Tax-band tables or shipped data files are missing or malformed."""


__all__ = [
    "SimulationError",
    "InvalidInputError",
    "UnsupportedPeriodError",
    "DataUnavailableError",
    "ConfigurationError",
]
