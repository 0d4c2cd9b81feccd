"""Outbound webhook sync to the external spreadsheet service."""
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

import httpx

from workshop_registry.config import WorkshopConfig
from workshop_registry.models.participant import Participant
from workshop_registry.utils.exceptions import SyncError

logger = logging.getLogger(__name__)

ADD_PARTICIPANT = "addParticipant"
ADD_ATTENDANCE = "addAttendance"


@dataclass
class SyncReport:
    """How many calls were made and how many the remote side acknowledged."""

    kind: str
    attempted: int = 0
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


class SyncService:
    """
    Mirrors participants and attendance marks to a webhook, one call at a time.

    The webhook accepts {"action": ..., **fields} and answers
    {"success": bool, "error"?: str}.
    """

    def __init__(self, url: str, enabled: bool = True, delay: float = 0.1, timeout: float = 30.0,
                 client: Optional[httpx.Client] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.url = url
        self.enabled = enabled
        self.delay = delay
        self.timeout = timeout
        self.client = client
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: WorkshopConfig) -> "SyncService":
        return cls(
            url=config.webhook_url,
            enabled=config.webhook_enabled,
            delay=config.sync_delay,
            timeout=config.webhook_timeout,
        )

    @property
    def configured(self) -> bool:
        return self.enabled and bool(self.url) and self.url.startswith(("http://", "https://"))

    def ensure_configured(self) -> None:
        """
        Raises:
            SyncError: If the webhook is disabled or has no usable URL
        """
        if not self.configured:
            raise SyncError("Webhook not configured. Set WEBHOOK_URL to enable sync.")

    def send(self, action: str, data: Mapping[str, Any],
             client: Optional[httpx.Client] = None) -> Dict[str, Any]:
        """
        Post one record to the webhook.

        Returns:
            The remote reply, or {"success": False, "error": ...} when the call
            failed or the reply was not JSON

        Raises:
            SyncError: If the webhook is not configured (no request is made)
        """
        self.ensure_configured()
        payload = {"action": action, **data}

        try:
            with self._client(client) as http:
                response = http.post(self.url, json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Webhook call {action} failed: {e}")
            return {"success": False, "error": str(e)}
        except ValueError as e:
            logger.error(f"Webhook reply for {action} was not JSON: {e}")
            return {"success": False, "error": "Invalid response from webhook"}

        if not isinstance(result, dict):
            return {"success": False, "error": "Invalid response from webhook"}
        if not result.get("success"):
            logger.error(f"Webhook rejected {action}: {result.get('error', 'unknown error')}")
        return result

    def push_participant(self, participant: Participant, client: Optional[httpx.Client] = None) -> bool:
        result = self.send(ADD_PARTICIPANT, participant.to_dict(), client=client)
        return bool(result.get("success"))

    def push_attendance(self, participant: Participant, session: str,
                        client: Optional[httpx.Client] = None) -> bool:
        result = self.send(
            ADD_ATTENDANCE,
            {"id": participant.id, "name": participant.name, "session": session},
            client=client,
        )
        return bool(result.get("success"))

    def sync_participants(self, participants: List[Participant]) -> SyncReport:
        """
        Send every participant, pausing between calls.

        Raises:
            SyncError: If the webhook is not configured
        """
        self.ensure_configured()
        report = SyncReport(kind="participants")

        with self._client() as http:
            for participant in participants:
                report.attempted += 1
                if self.push_participant(participant, client=http):
                    report.succeeded += 1
                self._sleep(self.delay)

        logger.info("Synced %d/%d participants", report.succeeded, report.attempted)
        return report

    def sync_attendance(self, participants: List[Participant],
                        attendance: Mapping[str, List[str]]) -> SyncReport:
        """
        Send one record per participant and marked session, pausing between calls.

        Raises:
            SyncError: If the webhook is not configured
        """
        self.ensure_configured()
        report = SyncReport(kind="attendance")

        with self._client() as http:
            for participant in participants:
                for session in attendance.get(participant.id, []):
                    report.attempted += 1
                    if self.push_attendance(participant, session, client=http):
                        report.succeeded += 1
                    self._sleep(self.delay)

        logger.info("Synced %d/%d attendance records", report.succeeded, report.attempted)
        return report

    @contextmanager
    def _client(self, client: Optional[httpx.Client] = None) -> Iterator[httpx.Client]:
        if client is not None:
            yield client
        elif self.client is not None:
            yield self.client
        else:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as owned:
                yield owned
