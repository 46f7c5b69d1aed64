from __future__ import annotations

import pytest

from wool_attendance.attendance import add_member, remove_member, toggle_attendance, update_member
from wool_attendance.errors import AttendanceError, InvalidAttendanceError, UnknownMemberError
from wool_attendance.models import ATTENDANCE_TYPES, AttendanceType


def _records_for(state, member_id, date):
    return [r for r in state.attendance if r.member_id == member_id and r.date == date]


def test_first_toggle_creates_record_and_dispatches_add(state, gateway):
    result = toggle_attendance(state, gateway, "M1001", "2026-01-11", "예배")

    records = _records_for(state, "M1001", "2026-01-11")
    assert len(records) == 1
    assert records[0].types == [AttendanceType.WORSHIP]
    assert result.is_add is True
    assert gateway.sent == [
        {
            "action": "UPDATE_ATTENDANCE",
            "payload": {"memberId": "M1001", "date": "2026-01-11", "type": "예배", "isAdd": True},
        }
    ]


def test_repeating_toggle_deletes_record_and_dispatches_remove(state, gateway):
    toggle_attendance(state, gateway, "M1001", "2026-01-11", "예배")
    result = toggle_attendance(state, gateway, "M1001", "2026-01-11", "예배")

    assert _records_for(state, "M1001", "2026-01-11") == []
    assert result.record is None
    assert gateway.sent[-1]["payload"]["isAdd"] is False


def test_types_fold_into_single_record(state, gateway):
    for attendance_type in ATTENDANCE_TYPES:
        toggle_attendance(state, gateway, "M1001", "2026-01-11", attendance_type)

    records = _records_for(state, "M1001", "2026-01-11")
    assert len(records) == 1
    assert records[0].types == list(ATTENDANCE_TYPES)

    toggle_attendance(state, gateway, "M1001", "2026-01-11", AttendanceType.GATHERING)
    assert records[0].types == [AttendanceType.WORSHIP, AttendanceType.WOOL]


@pytest.mark.parametrize("times", [1, 2, 3, 4, 5])
def test_parity_of_toggles(state, gateway, times):
    for _ in range(times):
        toggle_attendance(state, gateway, "M1003", "2026-02-08", AttendanceType.WOOL)

    record = state.find_record("M1003", "2026-02-08")
    present = bool(record and AttendanceType.WOOL in record.types)
    assert present is (times % 2 == 1)


def test_canceled_meeting_is_a_noop(state, gateway):
    before = [r.to_dict() for r in state.attendance]

    result = toggle_attendance(state, gateway, "M1002", "2026-01-04", AttendanceType.WOOL)

    assert result is None
    assert [r.to_dict() for r in state.attendance] == before
    assert gateway.sent == []


def test_cancellation_checked_before_member_lookup(state, gateway):
    assert toggle_attendance(state, gateway, "NOPE", "2026-01-04", AttendanceType.WOOL) is None


def test_other_types_on_canceled_date_still_toggle(state, gateway):
    result = toggle_attendance(state, gateway, "M1002", "2026-01-04", AttendanceType.GATHERING)

    assert result.is_add is True
    assert state.find_record("M1002", "2026-01-04").types == [
        AttendanceType.WORSHIP,
        AttendanceType.GATHERING,
    ]


def test_no_empty_or_duplicate_records_after_mixed_toggles(state, gateway):
    sequence = [
        ("M1001", "2026-01-11", "예배"),
        ("M1001", "2026-01-11", "집회"),
        ("M1002", "2026-01-04", "예배"),
        ("M1001", "2026-01-11", "예배"),
        ("M1002", "2026-01-11", "울모임"),
        ("M1001", "2026-01-11", "집회"),
        ("M1002", "2026-01-11", "울모임"),
    ]
    for member_id, date, attendance_type in sequence:
        toggle_attendance(state, gateway, member_id, date, attendance_type)

    assert all(r.types for r in state.attendance)
    keys = [(r.member_id, r.date) for r in state.attendance]
    assert len(keys) == len(set(keys))


def test_unknown_member_is_rejected(state, gateway):
    with pytest.raises(UnknownMemberError):
        toggle_attendance(state, gateway, "M9999", "2026-01-11", "예배")
    assert gateway.sent == []


@pytest.mark.parametrize("date, attendance_type", [("2026/01/11", "예배"), ("2026-01-11", "찬양")])
def test_invalid_input_is_rejected(state, gateway, date, attendance_type):
    with pytest.raises(InvalidAttendanceError):
        toggle_attendance(state, gateway, "M1001", date, attendance_type)


def test_add_member_generates_unique_id_and_dispatches(state, gateway):
    member = add_member(state, gateway, " 정우성 ", "화평A", "010-1234-5678")

    assert member.id.startswith("M")
    assert member.id not in {"M1001", "M1002", "M1003"}
    assert state.member_by_id(member.id) is member
    assert gateway.sent[-1]["action"] == "ADD_MEMBER"
    payload = gateway.sent[-1]["payload"]
    assert payload["name"] == "정우성"
    assert payload["group"] == payload["wool"] == "화평A"


def test_add_member_requires_name_and_group(state, gateway):
    with pytest.raises(AttendanceError):
        add_member(state, gateway, "", "사랑A")
    with pytest.raises(AttendanceError):
        add_member(state, gateway, "한지민", " ")
    assert gateway.sent == []


def test_update_member_changes_group(state):
    member = update_member(state, "M1003", group="믿음B", phone_number="010-0000-0000")

    assert member.group == "믿음B"
    assert member.to_remote()["wool"] == "믿음B"


def test_update_member_rejects_unknown_fields(state):
    with pytest.raises(AttendanceError):
        update_member(state, "M1003", id="X")


def test_remove_member_keeps_history(state):
    remove_member(state, "M1002")

    assert state.member_by_id("M1002") is None
    assert state.find_record("M1002", "2026-01-04") is not None
