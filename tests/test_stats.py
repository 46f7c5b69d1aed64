from __future__ import annotations

import random

from wool_attendance.models import AttendanceRecord, AttendanceType, MeetingStatus, Member
from wool_attendance.utils.meeting_dates import sundays
from wool_attendance.utils.seed_data import build_seed_dataset
from wool_attendance.utils.stats import (
    attendance_totals,
    group_stats,
    member_attendance_map,
    member_monthly_total,
    weekly_stats,
)

W, G, WOOL = AttendanceType.WORSHIP, AttendanceType.GATHERING, AttendanceType.WOOL


def test_group_stats_counts_population_and_gatherings():
    members = [
        Member(id="M1", name="a", group="사랑A"),
        Member(id="M2", name="b", group="사랑A"),
        Member(id="M3", name="c", group="사랑A"),
        Member(id="M4", name="d", group="소망B"),
    ]
    records = [
        AttendanceRecord(id="a-1", member_id="M1", date="2026-01-04", types=[G]),
        AttendanceRecord(id="a-2", member_id="M2", date="2026-01-11", types=[G, W]),
        AttendanceRecord(id="a-3", member_id="M9", date="2026-01-11", types=[G]),
    ]

    stats = {g.group_name: g for g in group_stats(members, records)}

    assert stats["사랑A"].members == 3
    assert stats["사랑A"].total_gathering == 2
    assert stats["사랑A"].total_worship == 1
    assert stats["사랑A"].total_wool == 0
    assert stats["소망B"].to_dict() == {
        "groupName": "소망B",
        "members": 1,
        "totalWorship": 0,
        "totalGathering": 0,
        "totalWool": 0,
    }


def test_group_stats_follow_member_groups_live():
    members = [Member(id="M1", name="a", group="사랑A")]
    assert [g.group_name for g in group_stats(members, [])] == ["사랑A"]

    members.append(Member(id="M2", name="b", group="새가족"))
    assert [g.group_name for g in group_stats(members, [])] == ["사랑A", "새가족"]


def test_weekly_stats_reports_every_date_including_empty_ones():
    dates = ["2026-01-04", "2026-01-11", "2026-01-18"]
    records = [
        AttendanceRecord(id="a-1", member_id="M1", date="2026-01-04", types=[W, WOOL]),
        AttendanceRecord(id="a-2", member_id="M2", date="2026-01-04", types=[W]),
        AttendanceRecord(id="a-3", member_id="M1", date="2026-01-18", types=[G]),
    ]

    stats = weekly_stats(records, dates)

    assert [s.to_dict() for s in stats] == [
        {"date": "2026-01-04", "worshipCount": 2, "gatheringCount": 0, "woolCount": 1},
        {"date": "2026-01-11", "worshipCount": 0, "gatheringCount": 0, "woolCount": 0},
        {"date": "2026-01-18", "worshipCount": 0, "gatheringCount": 1, "woolCount": 0},
    ]


def test_weekly_totals_match_records_per_type():
    dataset = build_seed_dataset(2026, random.Random(3))
    records = dataset["attendance"]

    stats = weekly_stats(records, sundays(2026))

    assert sum(s.worship_count for s in stats) == sum(1 for r in records if W in r.types)
    assert sum(s.gathering_count for s in stats) == sum(1 for r in records if G in r.types)
    assert sum(s.wool_count for s in stats) == sum(1 for r in records if WOOL in r.types)
    assert attendance_totals(records) == {
        "예배": sum(s.worship_count for s in stats),
        "집회": sum(s.gathering_count for s in stats),
        "울모임": sum(s.wool_count for s in stats),
    }


def test_weekly_stats_without_records():
    assert [s.worship_count for s in weekly_stats([], ["2026-01-04"])] == [0]
    assert attendance_totals([]) == {"예배": 0, "집회": 0, "울모임": 0}


def test_member_monthly_total_skips_canceled_meetings():
    month = ["2026-01-04", "2026-01-11", "2026-01-18", "2026-01-25"]
    records = [
        AttendanceRecord(id="a-1", member_id="M1", date="2026-01-04", types=[WOOL]),
        AttendanceRecord(id="a-2", member_id="M1", date="2026-01-11", types=[WOOL, W]),
        AttendanceRecord(id="a-3", member_id="M1", date="2026-02-01", types=[WOOL]),
        AttendanceRecord(id="a-4", member_id="M2", date="2026-01-18", types=[WOOL]),
    ]
    canceled = [MeetingStatus(date="2026-01-04", type=WOOL, is_canceled=True)]

    assert member_monthly_total(records, canceled, "M1", WOOL, month) == 1
    assert member_monthly_total(records, [], "M1", WOOL, month) == 2
    assert member_monthly_total(records, canceled, "M1", W, month) == 1


def test_member_attendance_map():
    records = [
        AttendanceRecord(id="a-1", member_id="M1", date="2026-01-04", types=[W, G]),
        AttendanceRecord(id="a-2", member_id="M2", date="2026-01-04", types=[W]),
    ]
    assert member_attendance_map("M1", records) == {"2026-01-04": ["예배", "집회"]}
