"""
hyperbook dashboard: live order book and completed-trade history.
Run from repo root: streamlit run dashboard/app.py
Config path via HYPERBOOK_CONFIG (default config.yaml).
"""

import os

import streamlit as st

from book_core.errors import ValidationError
from book_core.orderbook import display_asks, display_bids, materialize, price_decimals
from book_core.parsing import parse_open_positions
from book_core.trades import reconstruct, summarize
from config import load_config
from data.hyperliquid import ExchangeError, HyperLiquidClient

PRECISIONS = ["0.001", "0.01", "0.1", "1"]

cfg = load_config(os.environ.get("HYPERBOOK_CONFIG", "config.yaml"))
client = HyperLiquidClient(cfg.api.info_url, timeout=cfg.api.timeout_s)

st.set_page_config(page_title="hyperbook", layout="wide")
st.title("HyperLiquid Order Book")

tab_book, tab_trades = st.tabs(["Order Book", "Completed Trades"])

with tab_book:
    try:
        coins = [a.name for a in client.get_assets()][:10]
    except (ExchangeError, ValidationError) as e:
        st.warning(f"Failed to fetch assets, using default list: {e}")
        coins = ["AVAX", "BTC", "ETH", "SOL"]

    c1, c2, c3 = st.columns([2, 1, 1])
    with c1:
        default_index = coins.index(cfg.book.coin) if cfg.book.coin in coins else 0
        coin = st.selectbox("Asset", coins, index=default_index)
    with c2:
        precision = st.selectbox("Price step", PRECISIONS, index=0)
    with c3:
        if st.button("Refresh"):
            st.rerun()

    try:
        view = materialize(client.get_order_book(coin), precision)
    except (ExchangeError, ValidationError) as e:
        st.error(f"Failed to load market data for {coin}: {e}")
        view = None

    depth = cfg.book.depth

    def _rows(rows):
        return [
            {
                "Price (USD)": f"{r.price:.{decimals}f}",
                f"Size ({coin})": f"{r.size:.2f}",
                f"Total ({coin})": f"{r.cumulative_size:.2f}",
            }
            for r in rows
        ]

    if view is not None:
        decimals = price_decimals(view.precision)
        st.dataframe(_rows(display_asks(view, depth)), hide_index=True, use_container_width=True)
        st.metric("Mid price", f"{view.mid_price:.{decimals}f}" if view.mid_price is not None else "—")
        st.dataframe(_rows(display_bids(view, depth)), hide_index=True, use_container_width=True)

with tab_trades:
    st.caption("Positions that were opened and then closed. Open positions are listed separately.")
    with st.form("trades"):
        address = st.text_input("User address", value=cfg.user_address, placeholder="0x1234...")
        submitted = st.form_submit_button("Get trades")

    if submitted:
        if not address.strip():
            st.error("Please enter a user address")
        else:
            try:
                completed = reconstruct(client.get_user_fills(address.strip()))
                positions = parse_open_positions(client.get_user_state(address.strip()))
            except (ExchangeError, ValidationError) as e:
                st.error(f"Failed to fetch trades data: {e}")
                completed, positions = None, []

            if completed is not None and not completed:
                st.info("No completed trades found for this address.")
            elif completed:
                stats = summarize(completed)
                st.subheader(f"Completed Trades ({stats.count} found)")
                st.dataframe(
                    [
                        {
                            "Coin": t.instrument,
                            "Direction": t.direction.value.upper(),
                            "Opening Time (UTC)": t.opened_at.strftime("%Y-%m-%d %H:%M:%S"),
                            "Duration": t.duration_label,
                            "Realized PnL (USD)": float(t.realized_pnl),
                        }
                        for t in completed
                    ],
                    hide_index=True,
                    use_container_width=True,
                )
                st.caption(f"Total realized PnL: ${stats.total_pnl:.2f}  Win rate: {stats.win_rate:.0%}")

            if positions:
                st.subheader(f"Open Positions ({len(positions)})")
                st.dataframe(
                    [
                        {
                            "Coin": p.instrument,
                            "Direction": p.direction.value.upper(),
                            "Size": float(abs(p.size)),
                            "Entry Price": float(p.entry_price) if p.entry_price is not None else None,
                            "Unrealized PnL (USD)": float(p.unrealized_pnl),
                        }
                        for p in positions
                    ],
                    hide_index=True,
                    use_container_width=True,
                )
