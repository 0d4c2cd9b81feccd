"""Streamlit session-state helpers shared by the pages."""
from textwrap import dedent
from typing import Optional

import streamlit as st

from workshop_registry.config import WorkshopConfig, load_config
from workshop_registry.services.card_service import CardRenderer
from workshop_registry.services.scan_service import ScanController
from workshop_registry.services.sync_service import SyncService
from workshop_registry.services.workshop import Workshop

FEEDBACK_KEY = "feedback"
WORKSHOP_KEY = "workshop"
SCAN_CONTROLLER_KEY = "scan_controller"
CARD_RENDERER_KEY = "card_renderer"


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Lines with four or more leading spaces would render as code blocks, so
    every line is dedented and left-stripped.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def get_config() -> WorkshopConfig:
    if "config" not in st.session_state:
        st.session_state.config = load_config()
    return st.session_state.config


def get_workshop() -> Workshop:
    """Workshop for this browser session, loaded from disk on first use."""
    if WORKSHOP_KEY not in st.session_state:
        st.session_state[WORKSHOP_KEY] = Workshop.open(get_config().data_file)
    return st.session_state[WORKSHOP_KEY]


def reload_workshop() -> None:
    """Drop cached objects so the next run re-reads the data file."""
    controller: Optional[ScanController] = st.session_state.get(SCAN_CONTROLLER_KEY)
    if controller is not None:
        controller.stop()
    st.session_state.pop(WORKSHOP_KEY, None)
    st.session_state.pop(SCAN_CONTROLLER_KEY, None)


def get_scan_controller() -> ScanController:
    controller = st.session_state.get(SCAN_CONTROLLER_KEY)
    if controller is None or controller.workshop is not get_workshop():
        controller = ScanController(get_workshop())
        st.session_state[SCAN_CONTROLLER_KEY] = controller
    return controller


def get_card_renderer() -> CardRenderer:
    if CARD_RENDERER_KEY not in st.session_state:
        st.session_state[CARD_RENDERER_KEY] = CardRenderer(logo_url=get_config().logo_url)
    return st.session_state[CARD_RENDERER_KEY]


def get_sync_service() -> SyncService:
    return SyncService.from_config(get_config())


def set_feedback(level: str, message: str) -> None:
    """Queue a message to show after the next st.rerun()."""
    st.session_state[FEEDBACK_KEY] = (level, message)


def render_feedback() -> None:
    feedback = st.session_state.get(FEEDBACK_KEY)
    if not feedback:
        return

    level, message = feedback
    if level == "success":
        st.success(message)
    elif level == "error":
        st.error(message)
    elif level == "warning":
        st.warning(message)
    else:
        st.info(message)

    del st.session_state[FEEDBACK_KEY]
