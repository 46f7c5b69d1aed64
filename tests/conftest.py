from __future__ import annotations

import pytest

from wool_attendance import create_app
from wool_attendance.models import AttendanceRecord, AttendanceType, MeetingStatus, Member
from wool_attendance.state import AppState
from wool_attendance.utils.meeting_dates import sundays

from .fakes import RecordingGateway


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def state() -> AppState:
    members = [
        Member(id="M1001", name="김철수1", group="사랑A"),
        Member(id="M1002", name="이영희2", group="사랑A"),
        Member(id="M1003", name="박지성1", group="소망B"),
    ]
    return AppState(
        members=members,
        attendance=[
            AttendanceRecord(id="a-1", member_id="M1002", date="2026-01-04", types=[AttendanceType.WORSHIP]),
        ],
        meeting_status=[
            MeetingStatus(date="2026-01-04", type=AttendanceType.WOOL, is_canceled=True),
        ],
        meeting_dates=sundays(2026),
    )


@pytest.fixture
def app_config(tmp_path) -> dict:
    return {
        "TESTING": True,
        "SETTINGS_FILE": str(tmp_path / "settings.json"),
        "LOG_DIR": str(tmp_path / "logs"),
        "SCRIPT_URL": "",
        "SEED_RANDOM": 7,
        "TARGET_YEAR": 2026,
        "ALLOW_MEMBER_REMOVAL": False,
    }


@pytest.fixture
def app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(app):
    return app.test_client()
