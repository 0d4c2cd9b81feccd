"""QR scan controller binding a selected session to a decode stream."""
import logging
import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol, Tuple, Union

from workshop_registry.models.attendance import MarkResult
from workshop_registry.services.attendance_service import message_for
from workshop_registry.utils.exceptions import CameraError
from workshop_registry.utils.validation import normalize_participant_id

logger = logging.getLogger(__name__)

ScanEvent = Union[str, Exception]

CAMERA_START_TIMEOUT = 15.0
CAMERA_ERROR_MESSAGE = "Camera access denied or not supported"


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"


@dataclass
class ScanOutcome:
    """Result of routing one ID into the attendance ledger."""

    result: Optional[MarkResult]
    message: str
    participant_id: str = ""
    session: Optional[str] = None


class DecodeStream(Protocol):
    """Cancellable source of decoded QR payloads."""

    def open(self) -> None:
        """Start delivering payloads; raises CameraError if the camera is unavailable."""

    def stop(self) -> None:
        ...

    def watch(self, playing: bool) -> None:
        """Report whether the camera is delivering frames; raises CameraError once it is overdue."""

    def events(self) -> Iterator[ScanEvent]:
        """Yield pending payloads or decode errors without blocking."""


class QueueDecodeStream:
    """
    Decode stream fed from another thread.

    The WebRTC frame callback calls push() / push_error() from its worker
    thread; the Streamlit script thread drains events() on each rerun.

    The browser reports a denied camera permission only to the page, so a
    stream that has not started playing within start_timeout seconds of
    open() counts as a camera failure.
    """

    def __init__(self, maxsize: int = 32, start_timeout: float = CAMERA_START_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic):
        self._queue: "queue.Queue[ScanEvent]" = queue.Queue(maxsize=maxsize)
        self._active = threading.Event()
        self.start_timeout = start_timeout
        self._clock = clock
        self._opened_at: Optional[float] = None
        self._started = False

    @property
    def active(self) -> bool:
        return self._active.is_set()

    def open(self) -> None:
        self._drain()
        self._opened_at = self._clock()
        self._started = False
        self._active.set()

    def stop(self) -> None:
        self._active.clear()
        self._drain()

    def watch(self, playing: bool) -> None:
        """
        Track camera start-up.

        Raises:
            CameraError: If the stream is still not playing start_timeout
                seconds after open()
        """
        if playing:
            self._started = True
            return
        if self._started or self._opened_at is None:
            return

        waited = self._clock() - self._opened_at
        if waited > self.start_timeout:
            raise CameraError(f"Camera did not start within {self.start_timeout:.0f}s")

    def push(self, payload: str) -> None:
        self._put(payload)

    def push_error(self, error: Exception) -> None:
        self._put(error)

    def events(self) -> Iterator[ScanEvent]:
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def _put(self, event: ScanEvent) -> None:
        if not self.active:
            return
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.debug("Scan queue full, dropping event")

    def _drain(self) -> None:
        for _ in self.events():
            pass


class ScanController:
    """
    Idle → Scanning → Idle state machine for QR attendance.

    Scanning needs a selected session. The first decoded payload is marked
    for that session, the stream is stopped and the controller goes back to
    idle. Decode errors while scanning are ignored.
    """

    def __init__(self, workshop):
        self.workshop = workshop
        self.state = ScanState.IDLE
        self.session: Optional[str] = None
        self.stream: Optional[DecodeStream] = None

    @property
    def scanning(self) -> bool:
        return self.state is ScanState.SCANNING

    def start(self, session: Optional[str], stream: DecodeStream) -> Tuple[bool, str]:
        """
        Enter scanning mode.

        Returns:
            Tuple of (success: bool, message: str)
            - (False, "Please select a session first") if no session chosen
            - (False, "Camera access denied or not supported") if the stream can't open
            - (True, "Scanning for <session>") on success
        """
        if not session:
            return False, "Please select a session first"

        try:
            stream.open()
        except CameraError as e:
            logger.warning(f"Camera unavailable: {e}")
            return False, CAMERA_ERROR_MESSAGE

        self.session = session
        self.stream = stream
        self.state = ScanState.SCANNING
        return True, f"Scanning for {session}"

    def watch_camera(self, playing: bool) -> Optional[str]:
        """
        Pass the camera state to the stream.

        Returns:
            An error message if the camera never started (scanning is
            stopped), None otherwise
        """
        if not self.scanning or self.stream is None:
            return None

        try:
            self.stream.watch(playing)
        except CameraError as e:
            logger.warning(f"Camera unavailable: {e}")
            self.stop()
            return CAMERA_ERROR_MESSAGE
        return None

    def poll(self) -> Optional[ScanOutcome]:
        """Process pending stream events; returns the result of a handled payload."""
        if not self.scanning or self.stream is None:
            return None

        for event in self.stream.events():
            if isinstance(event, Exception):
                self.handle_decode_error(event)
                continue
            return self.handle_payload(event)
        return None

    def handle_payload(self, payload: str) -> Optional[ScanOutcome]:
        """Mark the decoded ID for the current session and return to idle."""
        if not self.scanning:
            return None

        session = self.session
        try:
            return self._mark(payload, session)
        finally:
            self.stop()

    def handle_decode_error(self, error: Exception) -> None:
        logger.debug("QR scan error: %s", error)

    def stop(self) -> None:
        """Cancel scanning; errors from an already-stopped stream are ignored."""
        stream = self.stream
        self.stream = None
        self.state = ScanState.IDLE

        if stream is None:
            return
        try:
            stream.stop()
        except Exception as e:
            logger.info(f"Error stopping scanner: {e}")

    def mark_decoded(self, payload: str, session: Optional[str]) -> ScanOutcome:
        """Mark a payload decoded outside the live stream, such as an uploaded photo."""
        return self._mark(payload.strip(), session)

    def mark_manual(self, raw_id: str, session: Optional[str]) -> ScanOutcome:
        """
        Mark attendance from a typed ID.

        Returns:
            ScanOutcome; its result is None when the ID or session is missing
        """
        participant_id = normalize_participant_id(raw_id)
        if not participant_id or not session:
            return ScanOutcome(None, "Please enter ID and select session", participant_id, session)
        return self._mark(participant_id, session)

    def _mark(self, participant_id: str, session: Optional[str]) -> ScanOutcome:
        result = self.workshop.attendance.mark(participant_id, session)
        participant = self.workshop.registry.find(participant_id)
        return ScanOutcome(result, message_for(result, participant, session), participant_id, session)
