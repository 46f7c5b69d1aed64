from __future__ import annotations

from wool_attendance.models import AttendanceType
from wool_attendance.utils.data_loader import get_state


def _uncanceled_cell(state):
    """A (member, date, type) triple whose meeting is held."""
    member = state.members[0]
    for date in state.meeting_dates:
        for attendance_type in AttendanceType:
            if not state.is_canceled(date, attendance_type):
                return member.id, date, attendance_type.value
    raise AssertionError("every meeting is canceled")


def test_root_redirects_and_health(client):
    assert client.get("/").status_code == 302
    assert client.get("/healthz").data == b"ok"


def test_dashboard(client, app):
    data = client.get("/home/").get_json()
    state = get_state(app)

    assert data["dataSource"] == "demo"
    assert len(data["weekly"]) == len(state.meeting_dates)
    assert {g["groupName"] for g in data["groups"]} == set(data["groupNames"])
    assert sum(w["worshipCount"] for w in data["weekly"]) == data["totals"]["예배"]


def test_toggle_round_trip(client, app):
    state = get_state(app)
    member_id, date, attendance_type = _uncanceled_cell(state)
    before = state.find_record(member_id, date)
    was_present = bool(before and AttendanceType(attendance_type) in before.types)
    body = {"memberId": member_id, "date": date, "type": attendance_type}

    first = client.post("/attendance/toggle", json=body).get_json()
    second = client.post("/attendance/toggle", json=body).get_json()

    assert first["ok"] and second["ok"]
    assert first["isAdd"] is (not was_present)
    assert second["isAdd"] is was_present


def test_toggle_on_canceled_meeting_is_refused(client, app):
    state = get_state(app)
    canceled = state.meeting_status[0]
    body = {"memberId": state.members[0].id, "date": canceled.date, "type": canceled.type.value}
    before = [r.to_dict() for r in state.attendance]

    response = client.post("/attendance/toggle", json=body)

    assert response.status_code == 409
    assert response.get_json()["canceled"] is True
    assert [r.to_dict() for r in state.attendance] == before


def test_toggle_validation(client, app):
    state = get_state(app)
    member_id = state.members[0].id

    assert client.post("/attendance/toggle", json={"memberId": member_id, "date": "2026-01-05", "type": "예배"}).status_code == 400
    assert client.post("/attendance/toggle", json={"memberId": member_id, "date": "2026-01-11", "type": "찬양"}).status_code == 400
    assert client.post("/attendance/toggle", json={"memberId": "nobody", "date": "2026-01-11", "type": "예배"}).status_code == 404


def test_matrix_for_month_and_group(client, app):
    state = get_state(app)
    group = state.members[0].group

    data = client.get(f"/attendance/?month=1&group={group}").get_json()

    assert data["dates"] == ["2026-01-04", "2026-01-11", "2026-01-18", "2026-01-25"]
    assert {row["member"]["group"] for row in data["rows"]} == {group}
    first_sunday_wool = data["rows"][0]["cells"]["2026-01-04"]["울모임"]
    assert first_sunday_wool == {"present": False, "canceled": True}


def test_add_member_exposes_new_group(client):
    response = client.post("/manage/members", json={"name": "새신자", "group": "새가족", "phoneNumber": ""})
    assert response.status_code == 201

    data = client.get("/manage/members?sort=name").get_json()
    assert "새가족" in data["groups"]
    assert "새가족" in client.get("/home/").get_json()["groupNames"]


def test_add_member_requires_fields(client):
    assert client.post("/manage/members", json={"name": "", "group": "사랑A"}).status_code == 400


def test_edit_member(client, app):
    member_id = get_state(app).members[0].id

    response = client.patch(f"/manage/members/{member_id}", json={"specialNotes": "입원 중"})

    assert response.status_code == 200
    assert response.get_json()["member"]["specialNotes"] == "입원 중"
    assert client.patch("/manage/members/nobody", json={"name": "x"}).status_code == 404


def test_member_detail(client, app):
    state = get_state(app)
    record = state.attendance[0]

    data = client.get(f"/manage/members/{record.member_id}").get_json()

    assert data["member"]["id"] == record.member_id
    assert data["attendance"][record.date] == [t.value for t in record.types]
    assert client.get("/manage/members/nobody").status_code == 404


def test_member_removal_disabled_by_default(client, app):
    member_id = get_state(app).members[0].id
    assert client.delete(f"/manage/members/{member_id}").status_code == 403


def test_member_removal_when_enabled(client, app):
    app.config["ALLOW_MEMBER_REMOVAL"] = True
    member_id = get_state(app).members[0].id

    assert client.delete(f"/manage/members/{member_id}").status_code == 200
    assert get_state(app).member_by_id(member_id) is None


def test_manage_attendance_for_date(client):
    data = client.get("/manage/attendance?date=2026-01-04").get_json()

    assert data["canceled"] == ["울모임"]
    assert data["rows"]


def test_prayer_views(client, app):
    state = get_state(app)
    prayer = state.prayers[0]

    by_date = client.get(f"/prayers/?date={prayer.date}").get_json()
    member = state.member_by_id(prayer.member_id)
    entries = by_date["groups"][member.group]
    assert any(e["record"] and e["record"]["id"] == prayer.id for e in entries)

    timeline = client.get(f"/prayers/members?q={member.name}").get_json()["members"]
    assert any(m["member"]["id"] == member.id for m in timeline)


def test_settings_flow(client):
    assert client.get("/settings/").get_json()["scriptUrl"] == ""
    assert client.post("/settings/", json={"scriptUrl": "ftp://nope"}).status_code == 400

    response = client.post("/settings/test")
    assert response.status_code == 502
    assert response.get_json()["kind"] == "EndpointNotConfigured"

    assert client.post("/settings/", json={"scriptUrl": "https://example.test/exec"}).get_json()["ok"]
    assert client.get("/settings/").get_json()["scriptUrl"] == "https://example.test/exec"
    assert client.delete("/settings/").get_json()["scriptUrl"] == ""


def test_reload_without_url_stays_in_demo(client):
    data = client.post("/settings/reload").get_json()
    assert data["ok"] is True
    assert data["dataSource"] == "demo"


def test_non_object_json_bodies_are_rejected(client, app):
    member_id = get_state(app).members[0].id
    calls = [
        ("post", "/attendance/toggle"),
        ("post", "/manage/members"),
        ("patch", f"/manage/members/{member_id}"),
        ("post", "/settings/"),
    ]

    for method, url in calls:
        response = getattr(client, method)(url, json=["not", "an", "object"])
        assert response.status_code == 400, url
        assert response.get_json()["ok"] is False
