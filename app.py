"""
BINDS workshop registry
Participant registration, QR ID cards and session attendance
"""
import logging

import streamlit as st

from workshop_registry.ui.attendance_page import render_attendance_page
from workshop_registry.ui.home_page import render_home_page
from workshop_registry.ui.registration_page import render_registration_page
from workshop_registry.ui.settings_page import render_settings_page
from workshop_registry.ui.state import get_config, reload_workshop

logger = logging.getLogger(__name__)

PAGES = {
    "home": ("🏠 Home", render_home_page),
    "registration": ("📝 Registration", render_registration_page),
    "attendance": ("✅ Attendance", render_attendance_page),
    "settings": ("⚙️ Settings", render_settings_page),
}


st.set_page_config(
    page_title="BINDS Workshop",
    page_icon="🌿",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def configure_logging():
    """Route application logs to stderr at the configured level."""
    logging.basicConfig(
        level=getattr(logging, get_config().log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def initialize_session_state():
    """Initialize session state defaults."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "home"

    if "auto_sync" not in st.session_state:
        st.session_state.auto_sync = False

    # Allow ?page=attendance links for the scanning desk
    if "url_params_processed" not in st.session_state:
        page = st.query_params.get("page")
        if page in PAGES:
            st.session_state.current_page = page
        st.session_state.url_params_processed = True


def apply_custom_css():
    """Apply the workshop colour scheme."""
    st.markdown("""
        <style>
        .stApp {
            background: linear-gradient(180deg, #e8f4f1 0%, #ffffff 60%);
        }

        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}

        .stButton > button {
            border-radius: 10px;
            font-weight: 600;
        }

        .stButton > button[kind="primary"] {
            background: #1b5e4e;
            color: white;
            border: none;
        }

        h1, h2, h3 {
            color: #1b5e4e;
        }
        </style>
    """, unsafe_allow_html=True)


def render_navigation():
    """Render the page navigation bar."""
    nav_cols = st.columns(len(PAGES), gap="small")

    for col, (page, (label, _)) in zip(nav_cols, PAGES.items()):
        with col:
            is_current = st.session_state.current_page == page
            if st.button(label, width="stretch", key=f"nav_{page}",
                         type="primary" if is_current else "secondary"):
                st.session_state.current_page = page
                st.rerun()


def render_current_page():
    """Render the page selected in session state."""
    try:
        page = PAGES.get(st.session_state.current_page)
        if page is None:
            st.error(f"Unknown page: {st.session_state.current_page}")
            if st.button("Back to home"):
                st.session_state.current_page = "home"
                st.rerun()
            return

        _, render = page
        render()

    except Exception as e:
        # Error boundary
        logger.exception("Unhandled exception while rendering page")
        st.error("Something went wrong, please try again")

        with st.expander("🔍 Error details"):
            st.code(str(e))

        if st.button("Back to home"):
            st.session_state.current_page = "home"
            st.rerun()


def main():
    """Application entry point."""
    try:
        configure_logging()
        initialize_session_state()
        apply_custom_css()
        render_navigation()
        render_current_page()
    except Exception as e:
        logger.exception("Unhandled exception during app execution")
        st.error("The app hit an error, please reload the page")
        st.code(str(e))

        if st.button("🔄 Reload"):
            reload_workshop()
            st.rerun()


if __name__ == "__main__":
    main()
