"""Canonical entities for members, attendance, cancellations and prayers.

Every entity serialises to the camelCase shape used by the remote
spreadsheet endpoint and by the JSON routes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class AttendanceType(str, Enum):
    WORSHIP = "예배"
    GATHERING = "집회"
    WOOL = "울모임"

    @classmethod
    def coerce(cls, value: Any) -> "AttendanceType":
        """Accept an enum member, its value (예배) or its name (WORSHIP)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Unknown attendance type: {value!r}")


ATTENDANCE_TYPES = tuple(AttendanceType)


@dataclass
class Member:
    id: str
    name: str
    group: str
    phone_number: str = ""
    role: str = ""
    status: str = ""
    special_notes: str = ""
    latest_prayer_request: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "group": self.group,
            "phoneNumber": self.phone_number,
            "role": self.role,
            "status": self.status,
            "specialNotes": self.special_notes,
            "latestPrayerRequest": self.latest_prayer_request,
        }

    def to_remote(self) -> Dict[str, Any]:
        # the remote sheet still keeps the group in two columns
        payload = self.to_dict()
        payload["wool"] = self.group
        return payload


@dataclass
class AttendanceRecord:
    id: str
    member_id: str
    date: str
    types: List[AttendanceType] = field(default_factory=list)

    def has(self, attendance_type: AttendanceType) -> bool:
        return attendance_type in self.types

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "memberId": self.member_id,
            "date": self.date,
            "types": [t.value for t in self.types],
        }


@dataclass
class MeetingStatus:
    date: str
    type: AttendanceType
    is_canceled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "type": self.type.value, "isCanceled": self.is_canceled}


@dataclass
class PrayerRecord:
    id: str
    member_id: str
    date: str
    content: str = ""
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "memberId": self.member_id,
            "date": self.date,
            "content": self.content,
            "note": self.note,
        }


@dataclass
class WeeklyStats:
    date: str
    worship_count: int = 0
    gathering_count: int = 0
    wool_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "worshipCount": self.worship_count,
            "gatheringCount": self.gathering_count,
            "woolCount": self.wool_count,
        }


@dataclass
class GroupStats:
    group_name: str
    members: int = 0
    total_worship: int = 0
    total_gathering: int = 0
    total_wool: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupName": self.group_name,
            "members": self.members,
            "totalWorship": self.total_worship,
            "totalGathering": self.total_gathering,
            "totalWool": self.total_wool,
        }
