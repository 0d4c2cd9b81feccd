"""Attendance data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from workshop_registry.models.participant import Participant

SESSIONS: Tuple[str, ...] = (
    "Day1-Morning",
    "Day1-Afternoon",
    "Day2-Morning",
    "Day2-Afternoon",
    "Day3-Morning",
    "Day3-Afternoon",
)


class MarkResult(str, Enum):
    """Outcome of marking attendance for one participant and session."""

    MARKED = "marked"
    ALREADY_MARKED = "already_marked"
    PARTICIPANT_NOT_FOUND = "participant_not_found"
    NO_SESSION_SELECTED = "no_session_selected"


@dataclass
class AttendanceRow:
    """One participant's line in the attendance sheet."""

    participant: Participant
    flags: List[bool]

    @property
    def total(self) -> int:
        return sum(1 for attended in self.flags if attended)


@dataclass
class AttendanceSheet:
    """Attendance grid over the fixed sessions."""

    sessions: Tuple[str, ...] = SESSIONS
    rows: List[AttendanceRow] = field(default_factory=list)

    def session_totals(self) -> List[int]:
        """Column totals, one per session."""
        return [
            sum(1 for row in self.rows if row.flags[index])
            for index in range(len(self.sessions))
        ]

    def grand_total(self) -> int:
        return sum(row.total for row in self.rows)


@dataclass
class WorkshopStats:
    """Aggregate numbers for the home page."""

    total_participants: int
    checked_in: int
    session_counts: Dict[str, int]
