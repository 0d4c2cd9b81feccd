"""Settings page: backup, restore, reset and webhook sync."""
import logging

import streamlit as st

from workshop_registry.services.transfer_service import (
    backup_filename,
    clear_all,
    export_json,
    import_backup,
    parse_backup,
)
from workshop_registry.ui.state import (
    get_sync_service,
    get_workshop,
    reload_workshop,
    render_feedback,
    set_feedback,
)
from workshop_registry.utils.exceptions import ImportFormatError, PersistenceError, SyncError

logger = logging.getLogger(__name__)

PENDING_IMPORT_KEY = "pending_import"
CONFIRM_CLEAR_KEY = "confirm_clear"


def _render_backup_section() -> None:
    st.markdown("### 💾 Backup")
    st.download_button(
        "📤 Export All Data (JSON)",
        data=export_json(get_workshop().state).encode("utf-8"),
        file_name=backup_filename(),
        mime="application/json",
        key="export_json",
    )


def _render_import_section() -> None:
    st.markdown("### 📥 Restore")
    uploaded = st.file_uploader("Import backup (JSON)", type=["json"], key="import_upload")

    if uploaded is not None and st.button("Read backup", key="read_backup"):
        try:
            st.session_state[PENDING_IMPORT_KEY] = parse_backup(uploaded.getvalue())
        except ImportFormatError as error:
            logger.warning(f"Rejected backup {uploaded.name}: {error}")
            st.error("❌ Invalid file format")
            return

    pending = st.session_state.get(PENDING_IMPORT_KEY)
    if pending is None:
        return

    st.warning(
        f"Import {len(pending.participants)} participants? "
        "All current data will be replaced."
    )
    confirm_col, cancel_col = st.columns(2, gap="small")
    with confirm_col:
        if st.button("✅ Import", type="primary", width="stretch", key="confirm_import"):
            st.session_state.pop(PENDING_IMPORT_KEY, None)
            try:
                import_backup(get_workshop(), pending, confirmed=True)
            except PersistenceError as error:
                logger.error(f"Import not saved: {error}")
                set_feedback("error", "❌ Failed to save data")
            else:
                set_feedback("success", "✅ Data imported!")
            reload_workshop()
            st.rerun()
    with cancel_col:
        if st.button("❌ Cancel", width="stretch", key="cancel_import"):
            st.session_state.pop(PENDING_IMPORT_KEY, None)
            st.rerun()


def _render_clear_section() -> None:
    st.markdown("### 🗑️ Reset")

    if not st.session_state.get(CONFIRM_CLEAR_KEY):
        if st.button("Clear All Data", key="clear_all"):
            st.session_state[CONFIRM_CLEAR_KEY] = True
            st.rerun()
        return

    st.error("⚠️ Delete ALL data permanently? This cannot be undone!")
    confirm_col, cancel_col = st.columns(2, gap="small")
    with confirm_col:
        if st.button("✅ Delete everything", type="primary", width="stretch", key="confirm_clear_all"):
            st.session_state.pop(CONFIRM_CLEAR_KEY, None)
            try:
                clear_all(get_workshop(), confirmed=True)
            except PersistenceError as error:
                logger.error(f"Clear not saved: {error}")
                set_feedback("error", "❌ Failed to save data")
            else:
                set_feedback("success", "✅ All data cleared")
            reload_workshop()
            st.rerun()
    with cancel_col:
        if st.button("❌ Cancel", width="stretch", key="cancel_clear_all"):
            st.session_state.pop(CONFIRM_CLEAR_KEY, None)
            st.rerun()


def _render_sync_section() -> None:
    st.markdown("### 🔄 Spreadsheet Sync")
    sync = get_sync_service()

    if sync.configured:
        st.success("🟢 Connected to webhook")
    else:
        st.error("🔴 Not Connected - Set WEBHOOK_URL")

    st.session_state["auto_sync"] = st.toggle(
        "Auto-sync new registrations and marks",
        value=st.session_state.get("auto_sync", False),
        disabled=not sync.configured,
    )

    workshop = get_workshop()
    col1, col2 = st.columns(2, gap="small")
    with col1:
        sync_participants = st.button("📤 Sync Participants", width="stretch", key="sync_participants")
    with col2:
        sync_attendance = st.button("📤 Sync Attendance", width="stretch", key="sync_attendance")

    try:
        if sync_participants:
            with st.spinner("Syncing participants..."):
                report = sync.sync_participants(workshop.registry.all())
            st.success(f"✅ Synced {report.succeeded} participants")
        elif sync_attendance:
            with st.spinner("Syncing attendance..."):
                report = sync.sync_attendance(workshop.registry.all(), workshop.state.attendance)
            st.success(f"✅ Synced {report.succeeded} attendance records")
    except SyncError as error:
        st.error(f"❌ {error}")


def render_settings_page() -> None:
    """Render the settings page."""
    render_feedback()
    st.title("⚙️ Settings")

    _render_backup_section()
    st.divider()
    _render_import_section()
    st.divider()
    _render_sync_section()
    st.divider()
    _render_clear_section()
