"""Persistence adapter for the workshop state file."""
import json
import logging
from typing import Optional

from workshop_registry.models.workshop_state import WorkshopState
from workshop_registry.services.storage_service import load_json, save_json
from workshop_registry.utils.exceptions import ImportFormatError, PersistenceError

logger = logging.getLogger(__name__)


class WorkshopStore:
    """Reads and writes the whole workshop state under one file path."""

    def __init__(self, file_path: str, backup: bool = True):
        self.file_path = file_path
        self.backup = backup
        self.last_error: Optional[PersistenceError] = None

    def load(self, default: Optional[WorkshopState] = None) -> WorkshopState:
        """
        Load workshop state from disk.

        Args:
            default: State to return when no file exists yet (empty if None)

        Returns:
            WorkshopState: Stored state, the default, or an empty state

        Behavior:
            - Missing file → default
            - Unreadable, malformed or wrongly shaped file → empty state, error logged
            - Never raises
        """
        try:
            data = load_json(self.file_path)
        except FileNotFoundError:
            return default if default is not None else WorkshopState.empty()
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading workshop data from {self.file_path}: {e}")
            return WorkshopState.empty()

        try:
            state = WorkshopState.from_dict(data)
        except ImportFormatError as e:
            logger.error(f"Stored workshop data has an invalid shape: {e}")
            return WorkshopState.empty()

        logger.debug("Loaded %d participants from %s", len(state.participants), self.file_path)
        return state

    def save(self, state: WorkshopState) -> bool:
        """
        Write the full state to disk.

        Returns:
            True on success, False if the write failed (see last_error)
        """
        try:
            save_json(self.file_path, state.to_dict(), backup=self.backup)
        except IOError as e:
            logger.error(f"Error saving workshop data: {e}")
            self.last_error = PersistenceError(str(e))
            return False

        self.last_error = None
        logger.debug("Saved workshop data to %s", self.file_path)
        return True
