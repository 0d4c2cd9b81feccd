"""Attendance page: QR scanning, manual entry and the attendance sheet."""
import logging
import time
from typing import Callable, Optional

import av
import streamlit as st
from PIL import Image
from streamlit_webrtc import RTCConfiguration, WebRtcMode, webrtc_streamer

from workshop_registry.models.attendance import SESSIONS, AttendanceSheet, MarkResult
from workshop_registry.services.qr_decoder import decode_frame, decode_image
from workshop_registry.services.scan_service import QueueDecodeStream, ScanOutcome
from workshop_registry.services.transfer_service import attendance_filename, export_csv
from workshop_registry.ui.state import (
    get_scan_controller,
    get_sync_service,
    get_workshop,
    render_feedback,
    set_feedback,
)
from workshop_registry.utils.exceptions import PersistenceError, SyncError

logger = logging.getLogger(__name__)

ICE_SERVERS = [{"urls": ["stun:stun.l.google.com:19302"]}]
SCAN_STREAM_KEY = "scan_stream"
POLL_INTERVAL = 0.5

RESULT_LEVELS = {
    MarkResult.MARKED: "success",
    MarkResult.ALREADY_MARKED: "info",
    MarkResult.PARTICIPANT_NOT_FOUND: "error",
    MarkResult.NO_SESSION_SELECTED: "error",
}
RESULT_ICONS = {"success": "✅", "info": "⚠️", "error": "❌"}


def _get_stream() -> QueueDecodeStream:
    if SCAN_STREAM_KEY not in st.session_state:
        st.session_state[SCAN_STREAM_KEY] = QueueDecodeStream()
    return st.session_state[SCAN_STREAM_KEY]


def _auto_sync_attendance(outcome: ScanOutcome) -> None:
    if not st.session_state.get("auto_sync"):
        return

    participant = get_workshop().registry.find(outcome.participant_id)
    if participant is None:
        return
    try:
        if not get_sync_service().push_attendance(participant, outcome.session):
            st.session_state["sync_warning"] = f"Auto-sync failed for {participant.id}"
    except SyncError as error:
        st.session_state["sync_warning"] = str(error)


def _record(action: Callable[[], Optional[ScanOutcome]]) -> Optional[ScanOutcome]:
    """Run a mark action and queue its notification."""
    try:
        outcome = action()
    except PersistenceError as error:
        logger.error(f"Attendance not saved: {error}")
        set_feedback("error", "❌ Failed to save data")
        return None

    if outcome is None:
        return None

    level = RESULT_LEVELS.get(outcome.result, "error")
    set_feedback(level, f"{RESULT_ICONS[level]} {outcome.message}")

    if outcome.result is MarkResult.MARKED:
        _auto_sync_attendance(outcome)
    return outcome


def _render_scanner(session: str) -> bool:
    """
    Render scan controls and the camera stream.

    Returns:
        True while the page should keep polling for decoded codes
    """
    controller = get_scan_controller()
    stream = _get_stream()

    start_col, stop_col = st.columns(2, gap="small")
    with start_col:
        if not controller.scanning and st.button("📷 Start QR Scan", type="primary", width="stretch"):
            success, message = controller.start(session, stream)
            if not success:
                st.error(f"❌ {message}")
            else:
                st.rerun()
    with stop_col:
        if controller.scanning and st.button("⏹️ Stop Scan", width="stretch"):
            controller.stop()
            st.rerun()

    if not controller.scanning:
        return False

    def video_callback(frame: av.VideoFrame) -> av.VideoFrame:
        try:
            payload = decode_frame(frame.to_ndarray(format="bgr24"))
        except Exception as exc:
            stream.push_error(exc)
            return frame

        if payload:
            stream.push(payload)
        return frame

    webrtc_ctx = webrtc_streamer(
        key="qr-scanner",
        mode=WebRtcMode.SENDRECV,
        video_frame_callback=video_callback,
        media_stream_constraints={"video": {"facingMode": "environment"}, "audio": False},
        rtc_configuration=RTCConfiguration({"iceServers": ICE_SERVERS}),
        async_processing=True,
        desired_playing_state=True,
    )

    camera_error = controller.watch_camera(webrtc_ctx.state.playing)
    if camera_error:
        set_feedback("error", f"❌ {camera_error}")
        st.rerun()

    if webrtc_ctx.state.playing:
        st.caption(f"Scanning for **{controller.session}**. Hold the ID card QR code up to the camera.")
    else:
        st.warning("Connecting to the camera. Please allow camera access in the browser.")

    if _record(controller.poll) is not None:
        st.rerun()

    return controller.scanning


def _render_photo_scan(session: str) -> None:
    """Fallback for browsers without camera streaming: read the QR from a photo."""
    controller = get_scan_controller()

    photo = st.file_uploader("Or upload a photo of the ID card", type=["png", "jpg", "jpeg"], key="qr_photo")
    if photo is None or not st.button("Read QR photo", key="read_qr_photo"):
        return

    try:
        payload = decode_image(Image.open(photo))
    except (OSError, Image.DecompressionBombError) as error:
        logger.warning(f"Unreadable QR photo {photo.name}: {error}")
        payload = None

    if not payload:
        set_feedback("error", "❌ No QR code found in the photo")
    else:
        _record(lambda: controller.mark_decoded(payload, session))
    st.rerun()


def _render_manual_entry(session: str) -> None:
    controller = get_scan_controller()

    with st.form("manual_attendance_form", clear_on_submit=True):
        raw_id = st.text_input("Participant ID", placeholder="BINDS-01")
        submit = st.form_submit_button("Mark Attendance", width="stretch")

    if not submit:
        return

    _record(lambda: controller.mark_manual(raw_id, session))
    st.rerun()


def _sheet_table(sheet: AttendanceSheet) -> list:
    table = []
    for row in sheet.rows:
        record = {"ID": row.participant.id, "Name": row.participant.name}
        for session, attended in zip(sheet.sessions, row.flags):
            record[session] = "✅" if attended else "-"
        record["Total"] = row.total
        table.append(record)
    return table


def _render_attendance_sheet() -> None:
    st.markdown("### 📊 Attendance Sheet")
    sheet = get_workshop().attendance.sheet()

    if not sheet.rows:
        st.info("No participants yet")
        return

    st.dataframe(_sheet_table(sheet), hide_index=True, width="stretch")

    totals = sheet.session_totals()
    st.caption(
        " · ".join(f"{session}: {count}" for session, count in zip(sheet.sessions, totals))
        + f" · Total marks: {sheet.grand_total()}"
    )

    st.download_button(
        "📥 Download Attendance (CSV)",
        data=export_csv(sheet).encode("utf-8"),
        file_name=attendance_filename(),
        mime="text/csv",
        key="download_attendance_csv",
    )


def render_attendance_page() -> None:
    """Render the attendance page."""
    render_feedback()
    sync_warning = st.session_state.pop("sync_warning", None)
    if sync_warning:
        st.warning(f"⚠️ {sync_warning}")

    st.markdown("### ✅ Mark Attendance")
    session = st.selectbox(
        "Session",
        options=[""] + list(SESSIONS),
        format_func=lambda value: value or "Select a session",
        key="selected_session",
    )

    scan_tab, manual_tab = st.tabs(["📷 QR Scan", "⌨️ Manual Entry"])
    with scan_tab:
        polling = _render_scanner(session)
        if not polling:
            _render_photo_scan(session)
    with manual_tab:
        _render_manual_entry(session)

    st.divider()
    _render_attendance_sheet()

    if polling:
        time.sleep(POLL_INTERVAL)
        st.rerun()
