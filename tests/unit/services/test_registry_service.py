"""Unit tests for RegistryService."""
import json
from datetime import date
from unittest.mock import patch

import pytest

from workshop_registry.services.workshop import Workshop
from workshop_registry.utils.exceptions import ParticipantNotFoundError, PersistenceError, ValidationError


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "workshop.json"


@pytest.fixture
def workshop(data_file):
    """Workshop backed by an empty temporary data file."""
    return Workshop.open(str(data_file))


def stored(data_file):
    return json.loads(data_file.read_text(encoding="utf-8"))


class TestRegister:
    """Tests for registering participants."""

    def test_register_assigns_first_id(self, workshop):
        """Test the first registration gets BINDS-01."""
        participant = workshop.registry.register("Asha Rao", "asha@example.org", "APU",
                                                 today=date(2026, 1, 29))

        assert participant.id == "BINDS-01"
        assert participant.registration_date == "29/1/2026"

    def test_register_trims_fields(self, workshop):
        """Test surrounding whitespace is removed before storing."""
        participant = workshop.registry.register("  Asha Rao ", " asha@example.org ", " APU ")

        assert participant.name == "Asha Rao"
        assert participant.email == "asha@example.org"
        assert participant.institute == "APU"

    def test_register_creates_empty_attendance(self, workshop):
        """Test a new participant starts with no sessions."""
        participant = workshop.registry.register("Asha", "asha@example.org", "APU")
        assert workshop.state.attendance[participant.id] == []

    def test_register_persists(self, workshop, data_file):
        """Test the new participant is written to disk."""
        workshop.registry.register("Asha", "asha@example.org", "APU")

        data = stored(data_file)
        assert data["participants"][0]["id"] == "BINDS-01"
        assert data["attendance"] == {"BINDS-01": []}

    def test_register_blank_field_raises(self, workshop, data_file):
        """Test blank fields are rejected without touching storage."""
        with pytest.raises(ValidationError, match="Please fill all fields"):
            workshop.registry.register("Asha", "   ", "APU")

        assert workshop.registry.all() == []
        assert not data_file.exists()

    def test_three_registrations_are_sequential(self, workshop):
        """Test IDs are handed out in registration order."""
        ids = [workshop.registry.register(name, f"{name.lower()}@example.org", "X").id
               for name in ("Asha", "Ravi", "Meera")]

        assert ids == ["BINDS-01", "BINDS-02", "BINDS-03"]

    def test_register_empty_institute_not_added(self, workshop):
        """Test an empty institute is rejected and nothing is appended."""
        with pytest.raises(ValidationError):
            workshop.registry.register("Asha", "asha@example.org", "")

        assert workshop.registry.all() == []

    def test_register_invalid_email_raises(self, workshop):
        """Test a malformed email is rejected."""
        with pytest.raises(ValidationError, match="Please enter a valid email"):
            workshop.registry.register("A", "bad-email", "X")

    def test_ids_stay_unique_after_delete(self, workshop):
        """Test deleting the newest participant never recycles its ID."""
        workshop.registry.register("Asha", "asha@example.org", "APU")
        second = workshop.registry.register("Ravi", "ravi@example.org", "APU")
        workshop.registry.delete(second.id, confirmed=True)

        third = workshop.registry.register("Meera", "meera@example.org", "APU")

        assert third.id == "BINDS-03"
        assert len({p.id for p in workshop.registry.all()}) == len(workshop.registry.all())

    def test_register_save_failure_raises_persistence_error(self, workshop):
        """Test a failed write surfaces as PersistenceError."""
        with patch("workshop_registry.services.persistence_service.save_json",
                   side_effect=IOError("Failed to write file: disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                workshop.registry.register("Asha", "asha@example.org", "APU")

        assert workshop.registry.all() == []
        assert workshop.registry.register("Asha", "asha@example.org", "APU").id == "BINDS-01"


class TestFindAndSearch:
    """Tests for lookup and search."""

    @pytest.fixture
    def populated(self, workshop):
        workshop.registry.register("Asha Rao", "asha@example.org", "APU")
        workshop.registry.register("Ravi Kumar", "ravi@example.org", "IISER")
        workshop.registry.register("Meera Rao", "meera@example.org", "NCBS")
        return workshop

    def test_find_exact_id(self, populated):
        """Test finding by exact ID."""
        assert populated.registry.find("BINDS-02").name == "Ravi Kumar"

    def test_find_unknown_returns_none(self, populated):
        """Test an unknown ID returns None."""
        assert populated.registry.find("BINDS-42") is None

    def test_find_is_exact(self, populated):
        """Test lookup does not normalize case."""
        assert populated.registry.find("binds-02") is None

    def test_get_returns_participant(self, populated):
        """Test get returns the stored record."""
        assert populated.registry.get("BINDS-01").name == "Asha Rao"

    def test_get_unknown_raises(self, populated):
        """Test get raises for an unknown ID."""
        with pytest.raises(ParticipantNotFoundError, match="BINDS-42"):
            populated.registry.get("BINDS-42")

    def test_search_by_name(self, populated):
        """Test a name fragment matches case-insensitively."""
        names = [p.name for p in populated.registry.search("rao")]
        assert names == ["Asha Rao", "Meera Rao"]

    def test_search_by_id(self, populated):
        """Test an ID fragment matches."""
        assert [p.id for p in populated.registry.search("-03")] == ["BINDS-03"]

    def test_empty_search_returns_everyone(self, populated):
        """Test an empty or blank query returns all participants."""
        assert len(populated.registry.search("")) == 3
        assert len(populated.registry.search("   ")) == 3

    def test_search_without_matches(self, populated):
        """Test a query matching nothing returns an empty list."""
        assert populated.registry.search("zzz") == []


class TestDelete:
    """Tests for deleting participants."""

    def test_delete_requires_confirmation(self, workshop):
        """Test an unconfirmed delete changes nothing."""
        participant = workshop.registry.register("Asha", "asha@example.org", "APU")

        assert workshop.registry.delete(participant.id) is False
        assert workshop.registry.find(participant.id) is not None

    def test_delete_removes_participant_and_attendance(self, workshop, data_file):
        """Test the participant and their marks are removed together."""
        participant = workshop.registry.register("Asha", "asha@example.org", "APU")
        workshop.attendance.mark(participant.id, "Day1-Morning")

        assert workshop.registry.delete(participant.id, confirmed=True) is True

        assert workshop.registry.find(participant.id) is None
        assert participant.id not in workshop.state.attendance
        assert stored(data_file)["attendance"] == {}

    def test_delete_unknown_id_still_saves(self, workshop, data_file):
        """Test deleting an unknown ID reports False and leaves data as is."""
        workshop.registry.register("Asha", "asha@example.org", "APU")

        assert workshop.registry.delete("BINDS-99", confirmed=True) is False
        assert len(stored(data_file)["participants"]) == 1
