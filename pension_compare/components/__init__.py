"""Expose component submodules for convenience."""

from .forms import comparison_form
from .charts import value_chart, withdrawal_chart, cumulative_chart, cost_chart
from .report import build_pdf

__all__ = [
    "comparison_form",
    "value_chart",
    "withdrawal_chart",
    "cumulative_chart",
    "cost_chart",
    "build_pdf",
]
