# app.py
import json
import logging

import pandas as pd
import streamlit as st

from pension_compare.calculators.comparison import ComparisonEngine, summary_text
from pension_compare.calculators.historical import default_data
from pension_compare.calculators.registry import default_registry
from pension_compare.components.charts import cost_chart, cumulative_chart, value_chart, withdrawal_chart
from pension_compare.components.forms import comparison_form
from pension_compare.components.report import build_pdf
from pension_compare.errors import (
    ConfigurationError,
    DataUnavailableError,
    InvalidInputError,
    SimulationError,
    UnsupportedPeriodError,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ---------- Page config ----------
st.set_page_config(
    page_title="Pension Lump Sum Comparison",
    layout="wide",
    initial_sidebar_state="auto",
)

# Hide Streamlit's default menu and footer
HIDE_STREAMLIT_STYLE = """
    <style>
        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}
    </style>
"""
st.markdown(HIDE_STREAMLIT_STYLE, unsafe_allow_html=True)

# ---------- Session boot ----------
st.session_state.setdefault("form_defaults", {})
st.session_state.setdefault("export_json", None)
st.session_state.setdefault("export_pdf_bytes", None)

ERROR_MESSAGES = {
    InvalidInputError: "Please check the inputs: {}",
    UnsupportedPeriodError: "Historical data does not cover that period. {}",
    DataUnavailableError: "A historical price is missing, so this comparison cannot be run ({}).",
    ConfigurationError: "The tax or price tables could not be loaded ({}).",
}


def _error_message(exc: SimulationError) -> str:
    for kind, template in ERROR_MESSAGES.items():
        if isinstance(exc, kind):
            return template.format(exc)
    return str(exc)


@st.cache_resource
def _engine() -> ComparisonEngine:
    return ComparisonEngine(default_data(), default_registry())


def _money(value: float) -> str:
    return f"£{value:,.0f}"


def _yearly_frame(result) -> pd.DataFrame:
    n1 = result.strategy1.descriptor.short_name
    n2 = result.strategy2.descriptor.short_name
    records = []
    for c in result.yearly_comparison:
        r1, r2 = c.strategy1_row, c.strategy2_row
        records.append({
            "Year": c.year,
            f"{n1} net": r1.net_withdrawal,
            f"{n1} value": r1.end_value,
            f"{n1} status": r1.status.value,
            f"{n2} net": r2.net_withdrawal,
            f"{n2} value": r2.end_value,
            f"{n2} status": r2.status.value,
            "Difference": c.difference,
        })
    return pd.DataFrame.from_records(records).set_index("Year")


# ---------- Inputs ----------
st.title("Pension Lump Sum: Strategy Comparison")
st.caption("Draw down a pension lump sum under two strategies using historical prices and UK tax bands.")

try:
    engine = _engine()
except ConfigurationError as exc:
    st.error(_error_message(exc))
    st.stop()

request = comparison_form(engine.registry)

try:
    result = engine.compare(**request)
except SimulationError as exc:
    st.error(_error_message(exc))
    st.stop()

# ---------- Summary ----------
st.header("Result")
s1, s2 = result.strategy1, result.strategy2
c1, c2, c3 = st.columns(3)
c1.metric(s1.descriptor.name, _money(s1.metrics.total_value_realized),
          help="Net withdrawals plus remaining value after tax.")
c2.metric(s2.descriptor.name, _money(s2.metrics.total_value_realized))
c3.metric("Winner", result.summary.winner_name, f"{result.summary.percentage_difference:.1f}%")
st.write(summary_text(result))
st.info("\n\n".join(result.insights))

# ---------- Charts ----------
left, right = st.columns(2)
with left:
    st.plotly_chart(value_chart(result), use_container_width=True)
    st.plotly_chart(cumulative_chart(result), use_container_width=True)
with right:
    st.plotly_chart(withdrawal_chart(result), use_container_width=True)
    st.plotly_chart(cost_chart(result), use_container_width=True)

# ---------- Yearly table ----------
st.subheader("Year by Year")
df = _yearly_frame(result)
money_cols = [c for c in df.columns if not c.endswith("status")]
st.dataframe(df.style.format({c: "£{:,.0f}" for c in money_cols}), use_container_width=True, height=350)

# ---------- Disclaimer ----------
synthetic = {k: v for k, v in result.synthetic_price_years.items() if v}
disclaimer = (
    "Historical results do not predict future returns. Tax uses UK income tax bands with a 25% "
    "tax-free share and ignores other income. This is not financial advice."
)
if synthetic:
    spans = ", ".join(f"{k} {v[0]}–{v[-1]}" for k, v in synthetic.items())
    disclaimer += f" Fund prices for {spans} are estimated from the underlying index before the fund launched."
st.caption(disclaimer)

# ---------- Export ----------
st.sidebar.divider()
st.sidebar.header("Export")
if st.sidebar.button("Export JSON"):
    st.session_state["export_json"] = json.dumps(result.to_dict(), indent=2)
if st.sidebar.button("Export PDF"):
    st.session_state["export_pdf_bytes"] = build_pdf(result)
if st.session_state.get("export_json"):
    st.sidebar.download_button(
        "Download JSON",
        data=st.session_state["export_json"],
        file_name="comparison.json",
        mime="application/json",
    )
if st.session_state.get("export_pdf_bytes"):
    st.sidebar.download_button(
        "Download PDF",
        data=st.session_state["export_pdf_bytes"],
        file_name="comparison.pdf",
        mime="application/pdf",
    )
