"""HTTP gateway to the spreadsheet-backed Apps Script endpoint.

Reads pull the whole workbook in one GET and run it through the row
normaliser.  Writes are best effort: a POST per action, never retried,
never awaited by the caller.  Local state stays authoritative for the
session and the next full reload reconciles with whatever the sheet
actually holds.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import (
    EndpointNotConfigured,
    RemoteApplicationError,
    RemoteHTTPError,
    RemotePermissionError,
    RemoteUnreachable,
    SyncError,
)
from ..models import AttendanceRecord, MeetingStatus, Member, PrayerRecord
from ..utils.settings_store import SettingsStore
from .sheet_rows import normalize_payload

log = logging.getLogger(__name__)

UPDATE_ATTENDANCE = "UPDATE_ATTENDANCE"
ADD_MEMBER = "ADD_MEMBER"
SUPPORTED_ACTIONS = (UPDATE_ATTENDANCE, ADD_MEMBER)

PERMISSION_HINT = (
    "The endpoint answered with HTML instead of JSON. Check that the script "
    "is deployed as a web app with access set to 'Anyone'."
)
UNREACHABLE_HINT = (
    "Could not reach the endpoint. Check the URL and the network connection."
)


@dataclass
class RemoteSnapshot:
    members: List[Member] = field(default_factory=list)
    attendance: List[AttendanceRecord] = field(default_factory=list)
    prayers: List[PrayerRecord] = field(default_factory=list)
    meeting_status: List[MeetingStatus] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    debug_sheets: List[str] = field(default_factory=list)
    connected_id: Optional[str] = None


class ScriptGateway:
    def __init__(self, settings: SettingsStore, timeout: Optional[float] = None, tz_name: str = "Asia/Seoul"):
        self.settings = settings
        self.timeout = timeout
        self.tz_name = tz_name
        self._outbox: "queue.Queue[Tuple[str, Dict[str, Any]]]" = queue.Queue()
        self._writer: Optional[threading.Thread] = None
        self._writer_lock = threading.Lock()

    @property
    def url(self) -> str:
        return self.settings.get_script_url()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all(self) -> RemoteSnapshot:
        url = self.url
        if not url:
            raise EndpointNotConfigured()

        log.debug("Fetching workbook from %s", url)
        try:
            response = requests.get(
                url,
                params={"t": int(time.time() * 1000)},
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            log.warning("Spreadsheet endpoint unreachable: %s", exc)
            raise RemoteUnreachable(UNREACHABLE_HINT) from exc

        log.debug(
            "Workbook response: status=%s bytes=%d", response.status_code, len(response.content)
        )
        if not 200 <= response.status_code < 300:
            raise RemoteHTTPError(response.status_code)

        content_type = response.headers.get("Content-Type", "")
        if content_type and "application/json" not in content_type.lower():
            log.error("Received non-JSON response: %s", response.text[:500])
            raise RemotePermissionError(PERMISSION_HINT)

        try:
            body = response.json()
        except ValueError as exc:
            log.error("Response body is not valid JSON: %s", response.text[:500])
            raise RemotePermissionError(PERMISSION_HINT) from exc

        if not isinstance(body, dict):
            raise RemoteApplicationError("Unexpected response shape from the endpoint.")
        if str(body.get("status", "")).lower() == "error":
            message = body.get("message") or "The endpoint reported an error."
            raise RemoteApplicationError(str(message))

        collections = normalize_payload(body, self.tz_name)
        snapshot = RemoteSnapshot(
            groups=[str(g) for g in body.get("groups") or []],
            debug_sheets=[str(s) for s in body.get("debug_sheets") or []],
            connected_id=body.get("connected_id"),
            **collections,
        )
        log.info(
            "Workbook loaded: %d members, %d attendance records, %d prayers, %d cancellations",
            len(snapshot.members),
            len(snapshot.attendance),
            len(snapshot.prayers),
            len(snapshot.meeting_status),
        )
        return snapshot

    def test_connection(self) -> Dict[str, Any]:
        """Blocking connection check used by the settings screen."""
        try:
            snapshot = self.fetch_all()
        except SyncError as exc:
            return {"ok": False, "error": str(exc), "kind": type(exc).__name__}

        result = {
            "ok": True,
            "members": len(snapshot.members),
            "attendance": len(snapshot.attendance),
            "prayers": len(snapshot.prayers),
            "meetingStatus": len(snapshot.meeting_status),
            "debugSheets": snapshot.debug_sheets,
            "connectedId": snapshot.connected_id,
        }
        if not snapshot.members:
            result["warning"] = empty_result_warning(snapshot)
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def send_action(self, action: str, payload: Dict[str, Any]) -> bool:
        if action not in SUPPORTED_ACTIONS:
            raise ValueError(f"Unsupported action: {action}")

        url = self.url
        if not url:
            log.debug("No endpoint configured; dropping %s", action)
            return False

        try:
            requests.post(
                url,
                data=_encode({"action": action, "payload": payload}),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
        except requests.RequestException:
            log.exception("Failed to send action %s", action, extra={"payload": payload})
            return False

        log.debug("Sent %s", action, extra={"payload": payload})
        return True

    def dispatch(self, action: str, payload: Dict[str, Any]) -> None:
        """Fire-and-forget ``send_action``.

        Actions are queued for one daemon writer thread, so they reach the
        endpoint in the order they were dispatched.
        """
        if action not in SUPPORTED_ACTIONS:
            raise ValueError(f"Unsupported action: {action}")
        self._outbox.put((action, payload))
        self._ensure_writer()

    def wait_for_writes(self) -> None:
        """Block until every dispatched action has been sent or dropped."""
        self._outbox.join()

    def _ensure_writer(self) -> None:
        with self._writer_lock:
            if self._writer is None or not self._writer.is_alive():
                self._writer = threading.Thread(
                    target=self._drain_outbox, name="script-gateway-writer", daemon=True
                )
                self._writer.start()

    def _drain_outbox(self) -> None:
        while True:
            action, payload = self._outbox.get()
            try:
                self.send_action(action, payload)
            except Exception:
                log.exception("Writer thread failed on %s", action, extra={"payload": payload})
            finally:
                self._outbox.task_done()


def _encode(body: Dict[str, Any]) -> bytes:
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def empty_result_warning(snapshot: RemoteSnapshot) -> str:
    sheets = ", ".join(snapshot.debug_sheets) or "none"
    return (
        "Connected, but no members were returned. Check the sheet names "
        f"(found: {sheets}; spreadsheet: {snapshot.connected_id or 'unknown'})."
    )
