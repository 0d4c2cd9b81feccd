"""Registration page: form, ID card and participant list."""
import logging

import streamlit as st

from workshop_registry.models.participant import Participant
from workshop_registry.services.card_service import card_filename
from workshop_registry.ui.state import (
    get_card_renderer,
    get_sync_service,
    get_workshop,
    render_feedback,
    set_feedback,
)
from workshop_registry.utils.exceptions import (
    ParticipantNotFoundError,
    PersistenceError,
    SyncError,
    ValidationError,
)

logger = logging.getLogger(__name__)

LAST_REGISTERED_KEY = "last_registered_id"
DELETE_TARGET_KEY = "delete_participant_id"


def _auto_sync_participant(participant: Participant) -> None:
    if not st.session_state.get("auto_sync"):
        return
    try:
        if not get_sync_service().push_participant(participant):
            st.session_state.setdefault("sync_warnings", []).append(
                f"Auto-sync failed for {participant.id}"
            )
    except SyncError as error:
        st.session_state.setdefault("sync_warnings", []).append(str(error))


def _render_registration_form() -> None:
    st.markdown("### 📝 Register Participant")

    with st.form("registration_form", clear_on_submit=True):
        name = st.text_input("Full Name")
        email = st.text_input("Email")
        institute = st.text_input("Institute / Organization")
        submit = st.form_submit_button("Register", type="primary", width="stretch")

    if not submit:
        return

    try:
        participant = get_workshop().registry.register(name, email, institute)
    except ValidationError as error:
        st.error(f"❌ {error}")
        return
    except PersistenceError as error:
        logger.error(f"Registration not saved: {error}")
        st.error("❌ Failed to save data")
        return

    _auto_sync_participant(participant)
    st.session_state[LAST_REGISTERED_KEY] = participant.id
    set_feedback("success", f"✅ {participant.name} registered! ID: {participant.id}")
    st.rerun()


def _render_id_card(participant: Participant) -> None:
    renderer = get_card_renderer()

    st.markdown("### 🪪 ID Card")
    col1, col2 = st.columns([1, 2], gap="medium")
    with col1:
        st.image(renderer.render_preview(participant), caption=participant.id, width=150)
    with col2:
        st.markdown(f"**{participant.name}**")
        st.caption(participant.id)
        st.download_button(
            "📥 Download ID Card",
            data=renderer.card_png(participant),
            file_name=card_filename(participant),
            mime="image/png",
            key=f"download_card_preview_{participant.id}",
        )


def _render_delete_confirmation(participant_id: str) -> None:
    """Ask before deleting; nothing changes until the organizer confirms."""
    try:
        participant = get_workshop().registry.get(participant_id)
    except ParticipantNotFoundError:
        st.session_state.pop(DELETE_TARGET_KEY, None)
        return

    st.error("⚠️ Delete this participant? Their attendance will be removed too.")
    st.markdown(f"**{participant.name}** · {participant.id}")

    confirm_col, cancel_col = st.columns(2, gap="small")
    with confirm_col:
        if st.button("✅ Delete", type="primary", width="stretch", key=f"confirm_delete_{participant_id}"):
            try:
                get_workshop().registry.delete(participant_id, confirmed=True)
            except PersistenceError as error:
                logger.error(f"Deletion not saved: {error}")
                set_feedback("error", "❌ Failed to save data")
            else:
                set_feedback("success", "✅ Participant deleted")
                if st.session_state.get(LAST_REGISTERED_KEY) == participant_id:
                    st.session_state.pop(LAST_REGISTERED_KEY, None)
            st.session_state.pop(DELETE_TARGET_KEY, None)
            st.rerun()
    with cancel_col:
        if st.button("❌ Cancel", width="stretch", key=f"cancel_delete_{participant_id}"):
            st.session_state.pop(DELETE_TARGET_KEY, None)
            st.rerun()


def _render_participant_list() -> None:
    st.markdown("### 👥 Participants")

    query = st.text_input("Search by name or ID", key="participant_search")
    registry = get_workshop().registry
    participants = registry.search(query)

    if not registry.all():
        st.info("No participants registered yet")
        return
    if not participants:
        st.info("No participants found")
        return

    delete_target = st.session_state.get(DELETE_TARGET_KEY)
    if delete_target:
        _render_delete_confirmation(delete_target)

    header = st.columns([1.2, 2, 2.5, 2, 1.3, 1, 0.8])
    for col, title in zip(header, ["ID", "Name", "Email", "Institute", "Registered", "", ""]):
        col.markdown(f"**{title}**")

    for participant in participants:
        cols = st.columns([1.2, 2, 2.5, 2, 1.3, 1, 0.8])
        cols[0].markdown(f"**{participant.id}**")
        cols[1].write(participant.name)
        cols[2].write(participant.email)
        cols[3].write(participant.institute)
        cols[4].write(participant.registration_date)
        with cols[5]:
            if st.button("📥 ID", key=f"prepare_card_{participant.id}"):
                st.session_state[LAST_REGISTERED_KEY] = participant.id
                st.rerun()
        with cols[6]:
            if st.button("🗑️", key=f"delete_{participant.id}"):
                st.session_state[DELETE_TARGET_KEY] = participant.id
                st.rerun()

    st.caption(f"{len(participants)} of {len(registry.all())} participants")


def render_registration_page() -> None:
    """Render the registration page."""
    render_feedback()
    for warning in st.session_state.pop("sync_warnings", []):
        st.warning(f"⚠️ {warning}")

    _render_registration_form()

    last_id = st.session_state.get(LAST_REGISTERED_KEY)
    if last_id:
        try:
            _render_id_card(get_workshop().registry.get(last_id))
        except ParticipantNotFoundError:
            st.session_state.pop(LAST_REGISTERED_KEY, None)

    st.divider()
    _render_participant_list()
