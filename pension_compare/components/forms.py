import streamlit as st

from ..calculators.registry import StrategyRegistry
from ..config import DEFAULT_FEES, DEFAULT_INPUTS, DEFAULT_LIMITS

# Stable widget keys so we can programmatically set values on load
WIDGET_KEYS = {
    "strategy1_id": "in_strategy1",
    "strategy2_id": "in_strategy2",
    "principal": "in_principal",
    "start_year": "in_start_year",
    "withdrawal_rate_percent": "in_withdrawal_rate",
    "years": "in_years",
    "asset_transaction_percent": "in_asset_transaction",
    "asset_storage_percent": "in_asset_storage",
    "wrapper_management_percent": "in_wrapper_management",
}


def _d(key, fallback):
    return st.session_state.get("form_defaults", {}).get(key, fallback)


def _strategy_select(label: str, key: str, registry: StrategyRegistry, default_id: str) -> str:
    groups = registry.grouped_for_display()
    options = [d.id for kind in ("asset", "wrapper", "composed") for d in groups[kind]]
    names = {d.id: d.name for d in registry.list_strategies()}
    default = _d(key, default_id)
    return st.sidebar.selectbox(
        label, options, index=options.index(default) if default in options else 0,
        format_func=lambda sid: names[sid], key=WIDGET_KEYS[key],
    )


def comparison_form(registry: StrategyRegistry) -> dict:
    """Sidebar inputs for a comparison.  Returns keyword arguments for ``compare``."""
    # -------- Strategies --------
    st.sidebar.header("Strategies")
    strategy1_id = _strategy_select("Strategy 1", "strategy1_id", registry, DEFAULT_INPUTS["strategy1_id"])
    strategy2_id = _strategy_select("Strategy 2", "strategy2_id", registry, DEFAULT_INPUTS["strategy2_id"])

    ok, reason, earliest = registry.can_compare(strategy1_id, strategy2_id)
    if not ok:
        st.sidebar.warning(reason)
        earliest = max(registry.get(strategy1_id).earliest_year, registry.get(strategy2_id).earliest_year)
    last = registry.last_common_year(strategy1_id, strategy2_id)

    # -------- Lump sum --------
    st.sidebar.header("Lump Sum")
    principal = st.sidebar.number_input(
        "Pension value (£)", min_value=1_000.0, step=10_000.0,
        value=float(_d("principal", DEFAULT_INPUTS["principal"])), key=WIDGET_KEYS["principal"],
        help="Value of the pension pot at the start year.",
    )
    start_year = st.sidebar.number_input(
        "Start year", min_value=earliest, max_value=last,
        value=min(max(int(_d("start_year", DEFAULT_INPUTS["start_year"])), earliest), last),
        key=WIDGET_KEYS["start_year"],
        help=f"This pair can be compared from {earliest}.",
    )
    withdrawal_rate = st.sidebar.slider(
        "Withdrawal rate (%)",
        min_value=DEFAULT_LIMITS.min_withdrawal_rate_percent,
        max_value=DEFAULT_LIMITS.max_withdrawal_rate_percent,
        value=float(_d("withdrawal_rate_percent", DEFAULT_INPUTS["withdrawal_rate_percent"])),
        step=0.5, key=WIDGET_KEYS["withdrawal_rate_percent"],
    )
    max_years = max(1, last - int(start_year) + 1)
    years = st.sidebar.number_input(
        "Years", min_value=1, max_value=max_years,
        value=min(int(_d("years", DEFAULT_INPUTS["years"])), max_years),
        key=WIDGET_KEYS["years"],
    )

    # -------- Fees --------
    with st.sidebar.expander("Fees", expanded=False):
        asset_tx = st.number_input(
            "Gold dealer spread (%)", min_value=0.0, max_value=20.0, step=0.1,
            value=_d("asset_transaction_percent", DEFAULT_FEES.asset_transaction_percent),
            key=WIDGET_KEYS["asset_transaction_percent"],
            help="Charged on each purchase and sale of physical gold.",
        )
        asset_storage = st.number_input(
            "Gold storage (% a year)", min_value=0.0, max_value=5.0, step=0.1,
            value=_d("asset_storage_percent", DEFAULT_FEES.asset_storage_percent),
            key=WIDGET_KEYS["asset_storage_percent"],
        )
        wrapper_mgmt = st.number_input(
            "SIPP and fund charges (% a year)", min_value=0.0, max_value=5.0, step=0.05,
            value=_d("wrapper_management_percent", DEFAULT_FEES.wrapper_management_percent),
            key=WIDGET_KEYS["wrapper_management_percent"],
        )

    return {
        "strategy1_id": strategy1_id,
        "strategy2_id": strategy2_id,
        "principal": float(principal),
        "start_year": int(start_year),
        "withdrawal_rate_percent": float(withdrawal_rate),
        "years": int(years),
        "fee_config": {
            "asset_transaction_percent": asset_tx,
            "asset_storage_percent": asset_storage,
            "wrapper_management_percent": wrapper_mgmt,
        },
    }
