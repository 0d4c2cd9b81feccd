"""Home page with live workshop stats."""
import html

import streamlit as st

from workshop_registry.config import EVENT_DATES, EVENT_TITLE, EVENT_VENUE
from workshop_registry.ui.state import get_workshop, html_block


def _render_stat_card(label: str, value: int, accent: str = "#1b5e4e") -> str:
    """Build the HTML for one stat tile."""
    return html_block(
        f"""
        <div style="
            background: #ffffff;
            border-left: 6px solid {accent};
            border-radius: 12px;
            padding: 20px 24px;
            box-shadow: 0 6px 18px rgba(27, 94, 78, 0.12);
        ">
            <div style="color: #5f6b68; font-size: 14px; font-weight: 600;">{html.escape(label)}</div>
            <div style="color: {accent}; font-size: 40px; font-weight: 700;">{value}</div>
        </div>
        """
    )


def render_home_page() -> None:
    """Render the home page."""
    st.title("🌿 BINDS Workshop")
    st.caption(f"{EVENT_TITLE} · {EVENT_DATES} · {EVENT_VENUE}")

    stats = get_workshop().attendance.stats()

    col1, col2 = st.columns(2, gap="medium")
    with col1:
        st.markdown(_render_stat_card("Total Registered", stats.total_participants), unsafe_allow_html=True)
    with col2:
        st.markdown(_render_stat_card("Checked In", stats.checked_in, "#2e8b57"), unsafe_allow_html=True)

    st.markdown("### Attendance by session")
    if stats.total_participants == 0:
        st.info("No participants registered yet")
        return

    session_cols = st.columns(len(stats.session_counts), gap="small")
    for col, (session, count) in zip(session_cols, stats.session_counts.items()):
        with col:
            st.metric(session, count)
