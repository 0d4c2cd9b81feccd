"""Workshop container owning the in-memory state and its store."""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from workshop_registry.config import ID_PREFIX
from workshop_registry.models.workshop_state import WorkshopState
from workshop_registry.services.attendance_service import AttendanceService
from workshop_registry.services.persistence_service import WorkshopStore
from workshop_registry.services.registry_service import RegistryService
from workshop_registry.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class Workshop:
    """
    Single owner of the workshop state.

    Every mutating service call runs inside transaction(), which writes the
    whole state through the store. A failed write raises PersistenceError and
    puts the in-memory state back to what it was before the call, so memory
    and file stay in step.
    """

    def __init__(self, store: WorkshopStore, state: Optional[WorkshopState] = None,
                 id_prefix: str = ID_PREFIX):
        self.store = store
        self.state = state if state is not None else store.load()
        self.id_prefix = id_prefix
        self.registry = RegistryService(self)
        self.attendance = AttendanceService(self)

    @classmethod
    def open(cls, file_path: str) -> "Workshop":
        return cls(WorkshopStore(file_path))

    def commit(self) -> None:
        """
        Persist the current state.

        Raises:
            PersistenceError: If the store could not write the file
        """
        if not self.store.save(self.state):
            raise self.store.last_error or PersistenceError("Failed to save data")

    @contextmanager
    def transaction(self) -> Iterator[WorkshopState]:
        """
        Mutate the state and persist it as one unit.

        Yields:
            WorkshopState: The live state to change

        Raises:
            PersistenceError: If the write failed; the state is restored first
        """
        snapshot = self.state.copy()
        try:
            yield self.state
            self.commit()
        except Exception:
            self.state = snapshot
            raise

    def replace_state(self, state: WorkshopState) -> None:
        """Swap in a whole new state (import / clear) and persist it."""
        logger.info(
            "Replacing workshop state: %d → %d participants",
            len(self.state.participants),
            len(state.participants),
        )
        with self.transaction():
            self.state = state
