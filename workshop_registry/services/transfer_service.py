"""Export, import and reset of the workshop data."""
import csv
import io
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from workshop_registry.config import FILE_PREFIX, WORKSHOP_NAME
from workshop_registry.models.attendance import AttendanceSheet
from workshop_registry.models.workshop_state import WorkshopState
from workshop_registry.utils.date_utils import file_date_stamp, format_export_timestamp
from workshop_registry.utils.exceptions import ImportFormatError

logger = logging.getLogger(__name__)

CSV_IDENTITY_HEADERS = ["Participant ID", "Name", "Email", "Institute"]
CSV_TOTAL_HEADER = "Total Sessions"


def build_backup(state: WorkshopState, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Backup document: the full state plus export time and workshop label."""
    data = state.to_dict()
    return {
        "exportDate": format_export_timestamp(now),
        "workshopName": WORKSHOP_NAME,
        "participants": data["participants"],
        "attendance": data["attendance"],
        "nextSequence": data["nextSequence"],
    }


def export_json(state: WorkshopState, now: Optional[datetime] = None) -> str:
    return json.dumps(build_backup(state, now), ensure_ascii=False, indent=2)


def backup_filename(now: Optional[datetime] = None) -> str:
    return f"{FILE_PREFIX}_Backup_{file_date_stamp(now)}.json"


def parse_backup(raw: Union[str, bytes]) -> WorkshopState:
    """
    Parse an uploaded backup file.

    Args:
        raw: File content

    Returns:
        WorkshopState: The state described by the file

    Raises:
        ImportFormatError: If the content is not JSON or lacks participants/attendance
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportFormatError(f"Invalid file format: {e}") from e

    return WorkshopState.from_dict(data)


def import_backup(workshop, state: WorkshopState, confirmed: bool = False) -> bool:
    """
    Replace the workshop data with an imported state.

    No merge happens: every current participant and mark is discarded.
    Callers must reload their views afterwards.

    Returns:
        True if the state was replaced, False if not confirmed

    Raises:
        PersistenceError: If the new state could not be saved
    """
    if not confirmed:
        return False

    workshop.replace_state(state)
    logger.info("Imported %d participants", len(state.participants))
    return True


def clear_all(workshop, confirmed: bool = False) -> bool:
    """
    Delete all participants and attendance.

    Returns:
        True if the data was cleared, False if not confirmed

    Raises:
        PersistenceError: If the empty state could not be saved
    """
    if not confirmed:
        return False

    workshop.replace_state(WorkshopState.empty())
    logger.info("All workshop data cleared")
    return True


def export_csv(sheet: AttendanceSheet) -> str:
    """
    Render the attendance sheet as CSV.

    Header: Participant ID,Name,Email,Institute,<sessions>,Total Sessions
    Identity fields are quoted; attendance flags are 1/0.
    """
    buffer = io.StringIO()

    header_writer = csv.writer(buffer, lineterminator="\n")
    header_writer.writerow(CSV_IDENTITY_HEADERS + list(sheet.sessions) + [CSV_TOTAL_HEADER])

    row_writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for row in sheet.rows:
        participant = row.participant
        row_writer.writerow(
            [participant.id, participant.name, participant.email, participant.institute]
            + [1 if attended else 0 for attended in row.flags]
            + [row.total]
        )

    return buffer.getvalue()


def attendance_filename(now: Optional[datetime] = None) -> str:
    return f"{FILE_PREFIX}_Attendance_{file_date_stamp(now)}.csv"
