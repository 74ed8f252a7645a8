"""
Paper-trading dashboard: quote, candles, AI analysis, simulated orders, portfolio.
Run from repo root: streamlit run dashboard/app.py
Or with a config: PAPERTRADE_CONFIG=/path/to/config.yaml streamlit run dashboard/app.py
"""

import os
from pathlib import Path

import streamlit as st

from cli.structured_log import StructuredEventLogger
from config import default_config, load_config
from portfolio_core import TimeRange, TradeRejected
from session import build_session
from views import (
    EDUCATIONAL_CONTENT,
    allocation_columns,
    chart_columns,
    estimated_total,
    money,
    position_rows,
    trade_rows,
)


def _config():
    path = Path(os.environ.get("PAPERTRADE_CONFIG", "config.yaml"))
    return load_config(path) if path.exists() else default_config()


def _session():
    if "session" not in st.session_state:
        cfg = _config()
        events = StructuredEventLogger(
            source="dashboard", enabled=cfg.alerting.structured_logs, webhook_url=cfg.alerting.webhook_url,
        )
        st.session_state.session = build_session(cfg, events=events)
        st.session_state.symbol = cfg.symbol
        st.session_state.analysis = ""
    return st.session_state.session


st.set_page_config(page_title="PaperTrade Dashboard", layout="wide")
session = _session()
cfg = session.config
ledger = session.ledger

# Header / mode
col_title, col_mode = st.columns([3, 1])
with col_title:
    st.title("PaperTrade Dashboard")
with col_mode:
    can_run_real = cfg.real_data_available or cfg.real_analysis_available
    real = st.toggle("Real mode", value=not session.mock_mode, disabled=not can_run_real,
                     help=None if can_run_real else "Set APCA_API_KEY_ID/APCA_API_SECRET_KEY or GEMINI_API_KEY to enable.")
    if real == session.mock_mode:
        session.set_mock_mode(not real)
        st.session_state.analysis = ""
    st.caption("Real mode" if not session.mock_mode else "Mock mode")

# Portfolio summary
c1, c2 = st.columns([1, 2])
with c1:
    st.metric("Total portfolio value", money(ledger.total_cost_value()))
    st.metric(f"Cash ({ledger.cash_symbol})", money(ledger.cash_balance))
with c2:
    st.subheader("Allocation")
    st.bar_chart(allocation_columns(ledger), x="symbol", y="value", height=200)

st.divider()
left, right = st.columns([2, 1])

with left:
    with st.form("search"):
        s1, s2 = st.columns([2, 1])
        with s1:
            query = st.text_input("Symbol (e.g. AAPL)", value=st.session_state.symbol)
        with s2:
            range_value = st.radio("Range", [r.value for r in TimeRange], horizontal=True,
                                   index=[r.value for r in TimeRange].index(cfg.range.value))
        reload = st.form_submit_button("Load")
        if reload:
            st.session_state.symbol = query.strip().upper() or st.session_state.symbol
            st.session_state.analysis = ""

    # Reruns reuse the accepted snapshot so an order settles at the price on screen.
    symbol = st.session_state.symbol
    with st.spinner("Loading market data..."):
        snapshot = session.market_for(symbol, TimeRange(range_value), refresh=reload)
    quote = snapshot.quote

    q1, q2, q3, q4 = st.columns(4)
    q1.metric(symbol, f"{quote.price:.2f}", f"{quote.change:+.2f} ({quote.percent_change:+.2f}%)")
    q2.metric("Open", f"{quote.open:.2f}")
    q3.metric("High / Low", f"{quote.high:.2f} / {quote.low:.2f}")
    q4.metric("Prev. close", f"{quote.previous_close:.2f}")

    st.subheader(f"{symbol} price and volume")
    columns = chart_columns(snapshot.candles)
    st.line_chart(columns, x="time", y="close", height=300)
    st.bar_chart(columns, x="time", y="volume", height=150)

    st.subheader("AI analysis")
    if st.button("Generate analysis"):
        with st.spinner("Analyzing..."):
            st.session_state.analysis = session.analyze(symbol, quote)
    st.info(st.session_state.analysis or "Generate an AI trend analysis and suggestion for the current quote.")

    with st.expander("Investing basics", expanded=False):
        for item in EDUCATIONAL_CONTENT:
            st.markdown(f"**{item['title']}**")
            st.caption(item["content"])

with right:
    st.subheader("Paper order")
    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)
    with st.form("trade"):
        action = st.radio("Side", ["BUY", "SELL"], horizontal=True)
        st.text(f"Symbol: {symbol}   Price: {quote.price:.2f}")
        quantity = st.number_input("Quantity", min_value=0.0, value=1.0, step=1.0)
        st.caption(f"Estimated total: {money(estimated_total(quote, quantity))}")
        if st.form_submit_button("Place order"):
            try:
                record = session.execute_trade(symbol, action, quantity, quote=quote)
            except TradeRejected as exc:
                st.error(f"Order rejected: {exc}")
            else:
                # Rerun so the summary above is drawn from the settled ledger.
                st.session_state.flash = (
                    f"Filled: {record.action.value} {record.quantity:g} {record.symbol} @ {record.price:.2f}"
                )
                st.rerun()

    st.subheader("Holdings")
    st.dataframe(position_rows(ledger, {symbol: quote.price}), hide_index=True, use_container_width=True)

    st.subheader("Trade history")
    history = trade_rows(ledger.trades)
    if history:
        st.dataframe(history, hide_index=True, use_container_width=True)
    else:
        st.caption("No trades yet.")
