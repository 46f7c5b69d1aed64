"""In-memory application state shared by routes and operations.

One ``AppState`` is built by ``create_app`` and handed to everything
that reads or mutates the collections.  It is the single source of truth
for the session: optimistic edits land here first and the remote
spreadsheet only catches up on the next full reload.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import AttendanceRecord, AttendanceType, MeetingStatus, Member, PrayerRecord

SOURCE_REMOTE = "remote"
SOURCE_DEMO = "demo"


@dataclass
class AppState:
    members: List[Member] = field(default_factory=list)
    attendance: List[AttendanceRecord] = field(default_factory=list)
    prayers: List[PrayerRecord] = field(default_factory=list)
    meeting_status: List[MeetingStatus] = field(default_factory=list)
    meeting_dates: List[str] = field(default_factory=list)
    data_source: str = SOURCE_DEMO
    last_error: Optional[str] = None
    diagnostics: Dict[str, Any] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def member_by_id(self, member_id: str) -> Optional[Member]:
        return next((m for m in self.members if m.id == member_id), None)

    def find_record(self, member_id: str, date: str) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.attendance if r.member_id == member_id and r.date == date), None
        )

    def is_canceled(self, date: str, attendance_type: AttendanceType) -> bool:
        return any(
            s.date == date and s.type == attendance_type and s.is_canceled
            for s in self.meeting_status
        )

    def replace(
        self,
        *,
        members: List[Member],
        attendance: List[AttendanceRecord],
        prayers: List[PrayerRecord],
        meeting_status: List[MeetingStatus],
        data_source: str,
        last_error: Optional[str] = None,
        diagnostics: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Swap in a freshly loaded dataset, keeping this object's identity."""
        with self.lock:
            self.members = list(members)
            self.attendance = list(attendance)
            self.prayers = list(prayers)
            self.meeting_status = list(meeting_status)
            self.data_source = data_source
            self.last_error = last_error
            self.diagnostics = dict(diagnostics or {})

    def summary(self) -> Dict[str, Any]:
        return {
            "dataSource": self.data_source,
            "lastError": self.last_error,
            "diagnostics": self.diagnostics,
            "counts": {
                "members": len(self.members),
                "attendance": len(self.attendance),
                "prayers": len(self.prayers),
                "meetingStatus": len(self.meeting_status),
            },
        }
