"""Participant registry service."""
import logging
from datetime import date
from typing import List, Optional

from workshop_registry.models.participant import Participant
from workshop_registry.utils.date_utils import format_registration_date
from workshop_registry.utils.exceptions import ParticipantNotFoundError, ValidationError
from workshop_registry.utils.validation import validate_registration

logger = logging.getLogger(__name__)


class RegistryService:
    """Registers, looks up, searches and deletes participants."""

    def __init__(self, workshop):
        self.workshop = workshop

    @property
    def _state(self):
        return self.workshop.state

    def all(self) -> List[Participant]:
        """Participants in registration order."""
        return list(self._state.participants)

    def register(self, name: str, email: str, institute: str,
                 today: Optional[date] = None) -> Participant:
        """
        Register a new participant.

        Args:
            name: Participant name
            email: Participant email
            institute: Participant institute
            today: Registration date (defaults to today)

        Returns:
            Participant: The stored record with its new ID

        Raises:
            ValidationError: If a field is empty or the email is malformed
            PersistenceError: If the record could not be saved (nothing is added)
        """
        is_valid, error_msg = validate_registration(name, email, institute)
        if not is_valid:
            raise ValidationError(error_msg)

        with self.workshop.transaction() as state:
            participant = Participant(
                id=state.allocate_id(self.workshop.id_prefix),
                name=name.strip(),
                email=email.strip(),
                institute=institute.strip(),
                registration_date=format_registration_date(today),
            )
            state.participants.append(participant)
            state.attendance[participant.id] = []

        logger.info("Registered %s as %s", participant.name, participant.id)
        return participant

    def find(self, participant_id: str) -> Optional[Participant]:
        """
        Find a participant by exact ID.

        Returns:
            Participant if found, None otherwise
        """
        for participant in self._state.participants:
            if participant.id == participant_id:
                return participant
        return None

    def get(self, participant_id: str) -> Participant:
        """
        Get a participant by exact ID.

        Raises:
            ParticipantNotFoundError: If no participant has this ID
        """
        participant = self.find(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(f"Participant {participant_id} not found")
        return participant

    def search(self, query: str) -> List[Participant]:
        """
        Filter participants by name or ID.

        Args:
            query: Case-insensitive substring; empty means no filter

        Returns:
            Matching participants in registration order
        """
        if not query or not query.strip():
            return self.all()

        return [p for p in self._state.participants if p.matches(query.strip())]

    def delete(self, participant_id: str, confirmed: bool = False) -> bool:
        """
        Delete a participant and their attendance.

        Args:
            participant_id: ID to delete
            confirmed: Must be True; unconfirmed calls change nothing

        Returns:
            True if a participant was removed, False otherwise

        Behavior:
            - The attendance entry goes together with the participant
            - The state is saved even when the ID is unknown
        """
        if not confirmed:
            return False

        with self.workshop.transaction() as state:
            remaining = [p for p in state.participants if p.id != participant_id]
            removed = len(remaining) != len(state.participants)
            state.participants = remaining
            state.attendance.pop(participant_id, None)

        if removed:
            logger.info("Deleted participant %s", participant_id)
        return removed
