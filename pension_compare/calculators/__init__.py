"""Simulation and comparison engine.

The `calculators` package contains small, focused modules that each implement
one piece of the lump-sum comparison:

* ``historical`` – read-only price series and UK tax band tables keyed by year.
* ``taxes`` – progressive income tax with personal allowance and tax-free share.
* ``simulation`` / ``results`` – validated inputs and the value objects produced.
* ``asset`` / ``wrapper`` / ``composed`` – the three strategy simulators.
* ``registry`` – catalogue of comparable strategies and their earliest years.
* ``comparison`` – runs two strategies side by side and picks a winner.
* ``insights`` – plain-language observations drawn from comparison metrics.
"""

from . import historical, taxes, simulation, results, asset, wrapper, composed, registry, insights, comparison  # noqa: F401

__all__ = [
    "historical",
    "taxes",
    "simulation",
    "results",
    "asset",
    "wrapper",
    "composed",
    "registry",
    "insights",
    "comparison",
]
