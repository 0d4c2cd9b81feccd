"""Unit tests for AttendanceService."""
import json

import pytest

from workshop_registry.models.attendance import SESSIONS, MarkResult
from workshop_registry.services.attendance_service import message_for
from workshop_registry.services.workshop import Workshop
from workshop_registry.utils.exceptions import ValidationError


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "workshop.json"


@pytest.fixture
def workshop(data_file):
    """Workshop with two registered participants."""
    workshop = Workshop.open(str(data_file))
    workshop.registry.register("Asha Rao", "asha@example.org", "APU")
    workshop.registry.register("Ravi Kumar", "ravi@example.org", "IISER")
    return workshop


class TestMark:
    """Tests for marking attendance."""

    def test_mark_records_session(self, workshop, data_file):
        """Test a first mark is stored and saved."""
        result = workshop.attendance.mark("BINDS-01", "Day1-Morning")

        assert result is MarkResult.MARKED
        assert workshop.attendance.sessions_for("BINDS-01") == ["Day1-Morning"]
        stored = json.loads(data_file.read_text(encoding="utf-8"))
        assert stored["attendance"]["BINDS-01"] == ["Day1-Morning"]

    def test_mark_twice_is_idempotent(self, workshop):
        """Test a repeated mark leaves a single entry."""
        workshop.attendance.mark("BINDS-01", "Day1-Morning")
        result = workshop.attendance.mark("BINDS-01", "Day1-Morning")

        assert result is MarkResult.ALREADY_MARKED
        assert workshop.attendance.sessions_for("BINDS-01") == ["Day1-Morning"]

    def test_mark_keeps_session_order(self, workshop):
        """Test sessions are kept in the order they were marked."""
        workshop.attendance.mark("BINDS-01", "Day2-Morning")
        workshop.attendance.mark("BINDS-01", "Day1-Afternoon")

        assert workshop.attendance.sessions_for("BINDS-01") == ["Day2-Morning", "Day1-Afternoon"]

    def test_unknown_participant_creates_nothing(self, workshop):
        """Test an unknown ID does not add an attendance entry."""
        result = workshop.attendance.mark("BINDS-99", "Day1-Morning")

        assert result is MarkResult.PARTICIPANT_NOT_FOUND
        assert "BINDS-99" not in workshop.state.attendance

    @pytest.mark.parametrize("session", ["", None])
    def test_no_session_selected(self, workshop, session):
        """Test marking without a session is refused."""
        assert workshop.attendance.mark("BINDS-01", session) is MarkResult.NO_SESSION_SELECTED
        assert workshop.attendance.sessions_for("BINDS-01") == []

    def test_unknown_session_raises(self, workshop):
        """Test a session outside the schedule is rejected."""
        with pytest.raises(ValidationError):
            workshop.attendance.mark("BINDS-01", "Day4-Morning")

    def test_missing_attendance_entry_is_created_for_known_participant(self, workshop):
        """Test a registered participant without an entry can still be marked."""
        del workshop.state.attendance["BINDS-02"]

        assert workshop.attendance.mark("BINDS-02", "Day3-Morning") is MarkResult.MARKED
        assert workshop.attendance.sessions_for("BINDS-02") == ["Day3-Morning"]


class TestTotals:
    """Tests for totals, sheet and stats."""

    def test_totals_for(self, workshop):
        """Test per-participant totals."""
        workshop.attendance.mark("BINDS-01", "Day1-Morning")
        workshop.attendance.mark("BINDS-01", "Day1-Afternoon")

        assert workshop.attendance.totals_for("BINDS-01") == 2
        assert workshop.attendance.totals_for("BINDS-02") == 0
        assert workshop.attendance.totals_for("BINDS-99") == 0

    def test_sheet_rows_follow_registration_order(self, workshop):
        """Test sheet rows and flags line up with sessions."""
        workshop.attendance.mark("BINDS-02", "Day3-Afternoon")
        sheet = workshop.attendance.sheet()

        assert [row.participant.id for row in sheet.rows] == ["BINDS-01", "BINDS-02"]
        assert sheet.sessions == SESSIONS
        assert sheet.rows[1].flags == [False, False, False, False, False, True]

    def test_sheet_totals_match_sum_of_sessions(self, workshop):
        """Test each row total equals its attended session count."""
        workshop.attendance.mark("BINDS-01", "Day1-Morning")
        workshop.attendance.mark("BINDS-01", "Day2-Morning")
        workshop.attendance.mark("BINDS-02", "Day2-Morning")
        sheet = workshop.attendance.sheet()

        for row in sheet.rows:
            assert row.total == workshop.attendance.totals_for(row.participant.id)
        assert sheet.grand_total() == 3

    def test_totals_ignore_unscheduled_sessions(self, workshop):
        """Test totals, sheet and stats agree when the state holds a stray session."""
        workshop.state.attendance["BINDS-01"] = ["Day9-Evening"]
        sheet = workshop.attendance.sheet()

        assert workshop.attendance.totals_for("BINDS-01") == 0
        assert sheet.rows[0].total == 0
        assert workshop.attendance.stats().checked_in == 0

    def test_stats(self, workshop):
        """Test home page numbers."""
        workshop.attendance.mark("BINDS-01", "Day1-Morning")
        stats = workshop.attendance.stats()

        assert stats.total_participants == 2
        assert stats.checked_in == 1
        assert stats.session_counts["Day1-Morning"] == 1
        assert stats.session_counts["Day3-Afternoon"] == 0
        assert list(stats.session_counts) == list(SESSIONS)


class TestMessageFor:
    """Tests for notification text."""

    def test_marked_message_names_participant(self, workshop):
        """Test the success message includes name and session."""
        participant = workshop.registry.find("BINDS-01")
        assert message_for(MarkResult.MARKED, participant, "Day1-Morning") == "Asha Rao marked for Day1-Morning"

    @pytest.mark.parametrize("result, text", [
        (MarkResult.ALREADY_MARKED, "Already marked for this session"),
        (MarkResult.PARTICIPANT_NOT_FOUND, "Participant not found"),
        (MarkResult.NO_SESSION_SELECTED, "Please select a session"),
    ])
    def test_other_messages(self, result, text):
        """Test the fixed messages for non-success results."""
        assert message_for(result, None, "Day1-Morning") == text
