"""Demo dataset used when no spreadsheet endpoint is reachable."""

from __future__ import annotations

import random
from typing import Dict, List, Optional

from ..models import AttendanceRecord, AttendanceType, MeetingStatus, Member, PrayerRecord
from .meeting_dates import sundays

GROUPS = ["사랑A", "사랑B", "소망A", "소망B", "믿음A", "믿음B", "화평A"]
NAMES = ["김철수", "이영희", "박지성", "최동원", "정우성", "한지민", "강동원", "송혜교", "유재석", "강호동"]
PRAYER_REQUESTS = [
    "가족의 건강을 위해 기도해주세요.",
    "이번 주 중요한 시험이 있습니다.",
    "직장 동료와의 관계 회복을 위해.",
    "새로운 사업 구상이 잘 진행되길.",
    "영적인 회복과 평안을 위해.",
    "부모님의 수술이 잘 되길.",
    "자녀의 학업 진로를 위해.",
    "전도 대상자가 마음을 열도록.",
]

# probability that a member attends a held meeting
ATTENDANCE_RATES = {
    AttendanceType.WORSHIP: 0.8,
    AttendanceType.GATHERING: 0.6,
    AttendanceType.WOOL: 0.7,
}
PRAYER_WEEKS = 10
PRAYER_RATE = 0.3


def generate_members(rng: random.Random) -> List[Member]:
    members = []
    id_counter = 1000
    for group in GROUPS:
        for i in range(rng.randint(3, 5)):
            members.append(
                Member(
                    id=f"M{id_counter}",
                    name=f"{rng.choice(NAMES)}{i + 1}",
                    group=group,
                    phone_number=f"010-{rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}",
                    role="성도",
                    status="ACTIVE",
                    special_notes="최근 이사함" if rng.random() > 0.8 else "",
                )
            )
            id_counter += 1
    return members


def generate_meeting_status(dates: List[str]) -> List[MeetingStatus]:
    planned = [(0, AttendanceType.WOOL), (3, AttendanceType.GATHERING), (4, AttendanceType.WOOL)]
    return [
        MeetingStatus(date=dates[idx], type=attendance_type, is_canceled=True)
        for idx, attendance_type in planned
        if idx < len(dates)
    ]


def generate_attendance(
    members: List[Member], dates: List[str], statuses: List[MeetingStatus], rng: random.Random
) -> List[AttendanceRecord]:
    canceled = {(s.date, s.type) for s in statuses if s.is_canceled}
    records = []
    id_counter = 1
    for date in dates:
        for member in members:
            types = [
                attendance_type
                for attendance_type, rate in ATTENDANCE_RATES.items()
                if (date, attendance_type) not in canceled and rng.random() < rate
            ]
            if types:
                records.append(
                    AttendanceRecord(id=f"a-{id_counter}", member_id=member.id, date=date, types=types)
                )
                id_counter += 1
    return records


def generate_prayers(members: List[Member], dates: List[str], rng: random.Random) -> List[PrayerRecord]:
    records = []
    id_counter = 1
    for date in dates[:PRAYER_WEEKS]:
        for member in members:
            if rng.random() < PRAYER_RATE:
                records.append(
                    PrayerRecord(
                        id=f"p-{id_counter}",
                        member_id=member.id,
                        date=date,
                        content=rng.choice(PRAYER_REQUESTS),
                    )
                )
                id_counter += 1
    return records


def build_seed_dataset(year: int, rng: Optional[random.Random] = None) -> Dict[str, list]:
    rng = rng or random.Random()
    dates = sundays(year)
    members = generate_members(rng)
    statuses = generate_meeting_status(dates)
    return {
        "members": members,
        "attendance": generate_attendance(members, dates, statuses, rng),
        "prayers": generate_prayers(members, dates, rng),
        "meeting_status": statuses,
    }
