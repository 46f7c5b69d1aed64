"""Derived statistics, always recomputed from the attendance collection."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import pandas as pd

from ..models import (
    ATTENDANCE_TYPES,
    AttendanceRecord,
    AttendanceType,
    GroupStats,
    MeetingStatus,
    Member,
    WeeklyStats,
)

TYPE_COLUMNS = [t.value for t in ATTENDANCE_TYPES]


def _exploded(records: Iterable[AttendanceRecord]) -> pd.DataFrame:
    """One row per (record, type) pair."""
    rows = [
        {"member_id": r.member_id, "date": r.date, "type": t.value}
        for r in records
        for t in r.types
    ]
    return pd.DataFrame(rows, columns=["member_id", "date", "type"])


def _count_table(df: pd.DataFrame, index_col: str, index: Sequence[str]) -> pd.DataFrame:
    if df.empty:
        counts = pd.DataFrame()
    else:
        counts = pd.crosstab(df[index_col], df["type"])
    return counts.reindex(index=list(index), columns=TYPE_COLUMNS, fill_value=0)


def weekly_stats(records: Iterable[AttendanceRecord], dates: Sequence[str]) -> List[WeeklyStats]:
    """Per meeting date, how many records hold each type.

    Cancellations are not filtered here: a canceled meeting has no records
    and simply reports zero.
    """
    counts = _count_table(_exploded(records), "date", dates)
    return [
        WeeklyStats(
            date=date,
            worship_count=int(row[AttendanceType.WORSHIP.value]),
            gathering_count=int(row[AttendanceType.GATHERING.value]),
            wool_count=int(row[AttendanceType.WOOL.value]),
        )
        for date, row in counts.iterrows()
    ]


def group_stats(members: Sequence[Member], records: Iterable[AttendanceRecord]) -> List[GroupStats]:
    """Member population and cumulative per-type attendance for each group."""
    groups = list(dict.fromkeys(m.group for m in members))
    member_df = pd.DataFrame(
        [{"member_id": m.id, "group": m.group} for m in members], columns=["member_id", "group"]
    )
    population = member_df.groupby("group")["member_id"].count()

    exploded = _exploded(records).merge(member_df, on="member_id", how="inner")
    counts = _count_table(exploded, "group", groups)

    return [
        GroupStats(
            group_name=group,
            members=int(population.get(group, 0)),
            total_worship=int(row[AttendanceType.WORSHIP.value]),
            total_gathering=int(row[AttendanceType.GATHERING.value]),
            total_wool=int(row[AttendanceType.WOOL.value]),
        )
        for group, row in counts.iterrows()
    ]


def member_monthly_total(
    records: Iterable[AttendanceRecord],
    meeting_status: Iterable[MeetingStatus],
    member_id: str,
    attendance_type: AttendanceType,
    month_dates: Iterable[str],
) -> int:
    """Count a member's attendance of one type over ``month_dates``.

    Canceled (date, type) pairs are left out so a meeting that never took
    place does not read as an absence in the member's total.
    """
    wanted = set(month_dates)
    canceled = {(s.date, s.type) for s in meeting_status if s.is_canceled}
    return sum(
        1
        for r in records
        if r.member_id == member_id
        and r.date in wanted
        and attendance_type in r.types
        and (r.date, attendance_type) not in canceled
    )


def attendance_totals(records: Iterable[AttendanceRecord]) -> Dict[str, int]:
    df = _exploded(records)
    counts = df["type"].value_counts() if not df.empty else pd.Series(dtype=int)
    return {value: int(counts.get(value, 0)) for value in TYPE_COLUMNS}


def member_attendance_map(member_id: str, records: Iterable[AttendanceRecord]) -> Dict[str, List[str]]:
    return {r.date: [t.value for t in r.types] for r in records if r.member_id == member_id}
