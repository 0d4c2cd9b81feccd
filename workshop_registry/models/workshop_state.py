"""Workshop state container."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from workshop_registry.models.attendance import SESSIONS
from workshop_registry.models.participant import Participant
from workshop_registry.utils.exceptions import ImportFormatError
from workshop_registry.utils.validation import participant_id_number, validate_backup_data

logger = logging.getLogger(__name__)


@dataclass
class WorkshopState:
    """All participants and attendance records of the workshop."""

    participants: List[Participant] = field(default_factory=list)
    attendance: Dict[str, List[str]] = field(default_factory=dict)
    next_sequence: int = 1

    @classmethod
    def empty(cls) -> "WorkshopState":
        return cls()

    def copy(self) -> "WorkshopState":
        """Independent copy; participants are immutable so they are shared."""
        return WorkshopState(
            participants=list(self.participants),
            attendance={pid: list(sessions) for pid, sessions in self.attendance.items()},
            next_sequence=self.next_sequence,
        )

    def format_id(self, prefix: str, number: int) -> str:
        return f"{prefix}-{number:02d}"

    def allocate_id(self, prefix: str) -> str:
        """
        Reserve the next participant ID.

        The counter only moves forward, so an ID freed by a deletion is
        never handed out again.
        """
        number = max(self.next_sequence, _derived_sequence(self.participants))
        self.next_sequence = number + 1
        return self.format_id(prefix, number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participants": [p.to_dict() for p in self.participants],
            "attendance": {pid: list(sessions) for pid, sessions in self.attendance.items()},
            "nextSequence": self.next_sequence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkshopState":
        """
        Build state from stored or imported JSON.

        Raises:
            ImportFormatError: If the shape or a participant record is invalid

        Behavior:
            - Attendance for IDs that match no participant is dropped
            - Session names outside SESSIONS and repeated marks are dropped
            - Every participant gets an entry, possibly empty
        """
        validate_backup_data(data)

        try:
            participants = [Participant.from_dict(entry) for entry in data["participants"]]
        except (KeyError, ValueError) as e:
            raise ImportFormatError(f"Invalid participant record: {e}") from e

        stored_attendance = data["attendance"]
        attendance: Dict[str, List[str]] = {}
        for participant in participants:
            unique: List[str] = []
            for session in stored_attendance.get(participant.id, []):
                if session in SESSIONS and session not in unique:
                    unique.append(session)
            attendance[participant.id] = unique

        dropped = set(stored_attendance) - set(attendance)
        if dropped:
            logger.warning("Ignoring attendance for unknown participants: %s", ", ".join(sorted(dropped)))

        derived = _derived_sequence(participants)
        stored = data.get("nextSequence")
        next_sequence = stored if isinstance(stored, int) and stored > derived else derived

        return cls(participants=participants, attendance=attendance, next_sequence=next_sequence)


def _derived_sequence(participants: List[Participant]) -> int:
    highest = max((participant_id_number(p.id) for p in participants), default=0)
    return max(highest, len(participants)) + 1
