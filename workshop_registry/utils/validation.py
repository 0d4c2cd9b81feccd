"""Data validation utilities."""
import re
from typing import Any, Dict, Tuple

from workshop_registry.models.attendance import SESSIONS
from workshop_registry.utils.exceptions import ImportFormatError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PARTICIPANT_ID_PATTERN = re.compile(r"^[A-Z]+-(\d+)$")


def validate_email(email: str) -> Tuple[bool, str]:
    """
    Validate participant email.

    Args:
        email: Email address (already trimmed)

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if the address has a local@domain.tld shape
        - (False, "Please enter a valid email") otherwise
    """
    if not email or not EMAIL_PATTERN.match(email):
        return False, "Please enter a valid email"
    return True, ""


def validate_registration(name: str, email: str, institute: str) -> Tuple[bool, str]:
    """
    Validate registration form input.

    Args:
        name: Participant name
        email: Participant email
        institute: Participant institute

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if valid
        - (False, "Please fill all fields") if any trimmed field is empty
        - (False, "Please enter a valid email") if the email shape is wrong
    """
    fields = [name, email, institute]
    if any(value is None or not value.strip() for value in fields):
        return False, "Please fill all fields"

    return validate_email(email.strip())


def validate_session_id(session: str) -> Tuple[bool, str]:
    """Check that a session identifier is one of the fixed workshop sessions."""
    if session not in SESSIONS:
        return False, f"Unknown session: {session}"
    return True, ""


def normalize_participant_id(raw_id: str) -> str:
    """
    Normalize a typed participant ID for lookup.

    Behavior:
        - Trims leading/trailing whitespace
        - Upper-cases the ID
        - Example: " binds-07 " → "BINDS-07"
    """
    return (raw_id or "").strip().upper()


def participant_id_number(participant_id: str) -> int:
    """
    Extract the numeric suffix of a participant ID.

    Returns:
        The sequence number, or 0 if the ID does not follow PREFIX-NN
    """
    match = PARTICIPANT_ID_PATTERN.match(participant_id or "")
    if not match:
        return 0
    return int(match.group(1))


def validate_backup_data(data: Any) -> bool:
    """
    Validate the shape of a workshop backup or data file.

    Args:
        data: Parsed JSON content

    Returns:
        True if valid

    Raises:
        ImportFormatError: If validation fails with detailed message
    """
    if not isinstance(data, dict):
        raise ImportFormatError("Backup must be a JSON object")

    for field in ("participants", "attendance"):
        if field not in data:
            raise ImportFormatError(f"Missing required field: {field}")

    if not isinstance(data["participants"], list):
        raise ImportFormatError("participants must be a list")

    if not isinstance(data["attendance"], dict):
        raise ImportFormatError("attendance must be an object")

    for entry in data["participants"]:
        _validate_participant_entry(entry)

    for participant_id, sessions in data["attendance"].items():
        if not isinstance(sessions, list):
            raise ImportFormatError(f"Attendance for {participant_id} must be a list")

    return True


def _validate_participant_entry(entry: Dict[str, Any]) -> None:
    if not isinstance(entry, dict):
        raise ImportFormatError("Each participant must be an object")

    for field in ("id", "name", "email", "institute"):
        value = entry.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ImportFormatError(f"Participant is missing field: {field}")
