"""Attendance toggling and member edits against the shared ``AppState``.

Every operation mutates local state first and then, still holding the
state lock, hands the change to the gateway's fire-and-forget
``dispatch``.  A failed remote write never rolls back the local edit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .errors import AttendanceError, InvalidAttendanceError, UnknownMemberError
from .integrations.script_gateway import ADD_MEMBER, UPDATE_ATTENDANCE
from .models import AttendanceRecord, AttendanceType, Member
from .state import AppState
from .utils.ids import generate_member_id, generate_record_id

log = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

EDITABLE_MEMBER_FIELDS = (
    "name",
    "group",
    "phone_number",
    "role",
    "status",
    "special_notes",
    "latest_prayer_request",
)


class Dispatcher(Protocol):
    def dispatch(self, action: str, payload: dict) -> None: ...


@dataclass
class ToggleResult:
    member_id: str
    date: str
    type: AttendanceType
    is_add: bool
    record: Optional[AttendanceRecord]

    def to_dict(self) -> dict:
        return {
            "memberId": self.member_id,
            "date": self.date,
            "type": self.type.value,
            "isAdd": self.is_add,
            "record": self.record.to_dict() if self.record else None,
        }


def _coerce_type(value: Any) -> AttendanceType:
    try:
        return AttendanceType.coerce(value)
    except ValueError as exc:
        raise InvalidAttendanceError(str(exc)) from exc


def toggle_attendance(
    state: AppState, gateway: Dispatcher, member_id: str, date: str, attendance_type: Any
) -> Optional[ToggleResult]:
    """Flip one (member, date, type) cell.

    Returns ``None`` without touching anything when that meeting is
    canceled.  Otherwise the type is added to or removed from the
    member's single record for the date; a record left without types is
    deleted.
    """
    attendance_type = _coerce_type(attendance_type)
    if not isinstance(date, str) or not _ISO_DATE.match(date):
        raise InvalidAttendanceError(f"Invalid date: {date!r}")

    with state.lock:
        if state.is_canceled(date, attendance_type):
            log.debug("Toggle ignored; %s on %s is canceled", attendance_type.value, date)
            return None
        if state.member_by_id(member_id) is None:
            raise UnknownMemberError(member_id)

        existing = state.find_record(member_id, date)
        if existing is None:
            record = AttendanceRecord(
                id=generate_record_id("a"), member_id=member_id, date=date, types=[attendance_type]
            )
            state.attendance.append(record)
            is_add = True
        elif attendance_type in existing.types:
            existing.types = [t for t in existing.types if t != attendance_type]
            is_add = False
            record = existing
            if not existing.types:
                state.attendance = [r for r in state.attendance if r is not existing]
                record = None
        else:
            existing.types = existing.types + [attendance_type]
            is_add = True
            record = existing

        payload = {
            "memberId": member_id,
            "date": date,
            "type": attendance_type.value,
            "isAdd": is_add,
        }
        # queued under the lock so remote writes keep the local order
        gateway.dispatch(UPDATE_ATTENDANCE, payload)

    log.info("Attendance %s", "added" if is_add else "removed", extra={"payload": payload})
    return ToggleResult(member_id, date, attendance_type, is_add, record)


def add_member(state: AppState, gateway: Dispatcher, name: str, group: str, phone_number: str = "") -> Member:
    name = (name or "").strip()
    group = (group or "").strip()
    if not name or not group:
        raise AttendanceError("Both name and group are required.")

    with state.lock:
        member_id = generate_member_id({m.id for m in state.members})
        member = Member(
            id=member_id,
            name=name,
            group=group,
            phone_number=(phone_number or "").strip(),
        )
        state.members.append(member)
        gateway.dispatch(ADD_MEMBER, member.to_remote())

    log.info("Member added", extra={"member_id": member_id, "group": group})
    return member


def update_member(state: AppState, member_id: str, **fields: Any) -> Member:
    unknown = set(fields) - set(EDITABLE_MEMBER_FIELDS)
    if unknown:
        raise AttendanceError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    with state.lock:
        member = state.member_by_id(member_id)
        if member is None:
            raise UnknownMemberError(member_id)
        for key, value in fields.items():
            value = "" if value is None else str(value).strip()
            if key in ("name", "group") and not value:
                raise AttendanceError(f"{key} cannot be empty.")
            setattr(member, key, value)

    log.info("Member updated", extra={"member_id": member_id, "fields": sorted(fields)})
    return member


def remove_member(state: AppState, member_id: str) -> Member:
    """Drop a member locally; attendance and prayer history are kept."""
    with state.lock:
        member = state.member_by_id(member_id)
        if member is None:
            raise UnknownMemberError(member_id)
        state.members = [m for m in state.members if m.id != member_id]

    log.warning("Member removed locally", extra={"member_id": member_id})
    return member
