# components/charts.py
# Plotly chart helpers for a comparison result.
# All functions return a Plotly Figure that Streamlit can display with st.plotly_chart(...).

from typing import Sequence

import plotly.graph_objects as go
import plotly.io as pio

from ..calculators.comparison import ComparisonResult, cumulative_withdrawals

pio.templates.default = "plotly_white"

_HOVER = "%{x}<br>£%{y:,.0f}<extra></extra>"


def _layout(fig: go.Figure, title: str, yaxis_title: str = "Pounds (nominal)") -> go.Figure:
    fig.update_layout(
        title=title,
        template="plotly_white",
        height=380,
        margin=dict(l=10, r=10, t=40, b=10),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        xaxis_title="Year",
        yaxis_title=yaxis_title,
    )
    return fig


def _names(result: ComparisonResult) -> Sequence[str]:
    return result.strategy1.descriptor.short_name, result.strategy2.descriptor.short_name


# ---------- Remaining value ----------
def value_chart(result: ComparisonResult, title: str = "Remaining Value") -> go.Figure:
    """End-of-year value of each strategy, with depletion years marked."""
    years = [c.year for c in result.yearly_comparison]
    n1, n2 = _names(result)
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=years, y=[c.strategy1_row.end_value for c in result.yearly_comparison],
        mode="lines+markers", name=n1, hovertemplate=_HOVER,
    ))
    fig.add_trace(go.Scatter(
        x=years, y=[c.strategy2_row.end_value for c in result.yearly_comparison],
        mode="lines+markers", name=n2, hovertemplate=_HOVER,
    ))
    for outcome in (result.strategy1, result.strategy2):
        year = outcome.metrics.year_depleted
        if year is not None:
            fig.add_vline(x=year, line_dash="dot", line_color="#ef4444",
                          annotation_text=f"{outcome.descriptor.short_name} depleted")
    return _layout(fig, title)


# ---------- Yearly net withdrawals (grouped bars) ----------
def withdrawal_chart(result: ComparisonResult, title: str = "Net Withdrawals") -> go.Figure:
    years = [c.year for c in result.yearly_comparison]
    n1, n2 = _names(result)
    fig = go.Figure()
    fig.add_bar(x=years, y=[c.strategy1_row.net_withdrawal for c in result.yearly_comparison],
                name=n1, hovertemplate=_HOVER)
    fig.add_bar(x=years, y=[c.strategy2_row.net_withdrawal for c in result.yearly_comparison],
                name=n2, hovertemplate=_HOVER)
    fig.update_layout(barmode="group")
    return _layout(fig, title)


# ---------- Cumulative withdrawals ----------
def cumulative_chart(result: ComparisonResult, title: str = "Cumulative Net Withdrawals") -> go.Figure:
    """Running totals, with the crossover year annotated when there is one."""
    series = cumulative_withdrawals(result)
    n1, n2 = _names(result)
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=series["years"], y=series["strategy1"], mode="lines", name=n1,
                             hovertemplate=_HOVER))
    fig.add_trace(go.Scatter(x=series["years"], y=series["strategy2"], mode="lines", name=n2,
                             hovertemplate=_HOVER))
    if result.crossover is not None:
        fig.add_vline(x=result.crossover.year, line_dash="dash", line_color="#f59e0b",
                      annotation_text="Crossover")
    return _layout(fig, title)


# ---------- Cost breakdown (stacked bars) ----------
def cost_chart(result: ComparisonResult, title: str = "Tax and Fees") -> go.Figure:
    """Stacked lifetime tax and fees per strategy."""
    names = list(_names(result))
    m1, m2 = result.strategy1.metrics, result.strategy2.metrics
    fig = go.Figure()
    fig.add_bar(x=names, y=[m1.initial_tax_paid, m2.initial_tax_paid], name="Initial tax")
    fig.add_bar(x=names, y=[m1.total_withdrawal_tax, m2.total_withdrawal_tax], name="Withdrawal tax")
    fig.add_bar(x=names, y=[m1.total_holding_fees, m2.total_holding_fees], name="Storage / management")
    fig.add_bar(x=names, y=[m1.total_transaction_costs, m2.total_transaction_costs], name="Transaction costs")
    fig.update_layout(barmode="stack")
    fig = _layout(fig, title)
    fig.update_layout(xaxis_title="")
    return fig
