"""Attendance ledger service."""
import logging
from typing import Optional

from workshop_registry.models.attendance import (
    SESSIONS,
    AttendanceRow,
    AttendanceSheet,
    MarkResult,
    WorkshopStats,
)
from workshop_registry.models.participant import Participant
from workshop_registry.utils.exceptions import ValidationError
from workshop_registry.utils.validation import validate_session_id

logger = logging.getLogger(__name__)


class AttendanceService:
    """Marks session attendance and computes totals."""

    def __init__(self, workshop):
        self.workshop = workshop

    @property
    def _state(self):
        return self.workshop.state

    def sessions_for(self, participant_id: str) -> list:
        """Scheduled sessions a participant attended, in the order marked."""
        return [s for s in self._state.attendance.get(participant_id, []) if s in SESSIONS]

    def mark(self, participant_id: str, session: Optional[str]) -> MarkResult:
        """
        Mark a participant present for a session.

        Args:
            participant_id: Exact participant ID (as encoded in the QR code)
            session: One of SESSIONS, or empty when nothing is selected

        Returns:
            MarkResult:
            - NO_SESSION_SELECTED if session is empty
            - PARTICIPANT_NOT_FOUND if the ID is unknown (nothing is created)
            - ALREADY_MARKED if the session is already recorded
            - MARKED after appending and saving

        Raises:
            ValidationError: If session is not one of the workshop sessions
            PersistenceError: If the mark could not be saved (nothing is recorded)
        """
        if not session:
            return MarkResult.NO_SESSION_SELECTED

        is_valid, error_msg = validate_session_id(session)
        if not is_valid:
            raise ValidationError(error_msg)

        if self.workshop.registry.find(participant_id) is None:
            logger.info("Attendance scan for unknown participant %r", participant_id)
            return MarkResult.PARTICIPANT_NOT_FOUND

        if session in self._state.attendance.get(participant_id, []):
            return MarkResult.ALREADY_MARKED

        with self.workshop.transaction() as state:
            state.attendance.setdefault(participant_id, []).append(session)

        logger.info("Marked %s for %s", participant_id, session)
        return MarkResult.MARKED

    def totals_for(self, participant_id: str) -> int:
        """Number of sessions a participant attended."""
        return len(self.sessions_for(participant_id))

    def sheet(self) -> AttendanceSheet:
        """Build the attendance grid used on screen and in the CSV export."""
        rows = []
        for participant in self._state.participants:
            attended = self._state.attendance.get(participant.id, [])
            rows.append(AttendanceRow(
                participant=participant,
                flags=[session in attended for session in SESSIONS],
            ))
        return AttendanceSheet(sessions=SESSIONS, rows=rows)

    def stats(self) -> WorkshopStats:
        """Totals for the home page."""
        participants = self._state.participants
        checked_in = sum(1 for p in participants if self.sessions_for(p.id))
        session_counts = {
            session: sum(1 for p in participants if session in self._state.attendance.get(p.id, []))
            for session in SESSIONS
        }
        return WorkshopStats(
            total_participants=len(participants),
            checked_in=checked_in,
            session_counts=session_counts,
        )


def message_for(result: MarkResult, participant: Optional[Participant], session: Optional[str]) -> str:
    """Notification text for a mark result."""
    if result is MarkResult.MARKED and participant is not None:
        return f"{participant.name} marked for {session}"
    if result is MarkResult.ALREADY_MARKED:
        return "Already marked for this session"
    if result is MarkResult.PARTICIPANT_NOT_FOUND:
        return "Participant not found"
    if result is MarkResult.NO_SESSION_SELECTED:
        return "Please select a session"
    return "Attendance marked"
