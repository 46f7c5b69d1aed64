"""Read-only prayer request views."""

from __future__ import annotations

from typing import Any, Dict, List

from .state import AppState


def prayers_by_date(state: AppState, date: str) -> Dict[str, List[Dict[str, Any]]]:
    """Group name -> members with a prayer record on ``date`` or standing notes."""
    records = {p.member_id: p for p in state.prayers if p.date == date}
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for member in state.members:
        bucket = grouped.setdefault(member.group, [])
        record = records.get(member.id)
        if record or member.special_notes:
            bucket.append(
                {
                    "member": member.to_dict(),
                    "record": record.to_dict() if record else None,
                }
            )
    return grouped


def prayer_timeline(state: AppState, search: str = "") -> List[Dict[str, Any]]:
    """Members matching ``search`` with their prayer history, newest first."""
    search = (search or "").strip()
    timeline = []
    for member in state.members:
        if search and search not in member.name and search not in member.group:
            continue
        history = sorted(
            (p for p in state.prayers if p.member_id == member.id),
            key=lambda p: p.date,
            reverse=True,
        )
        timeline.append({"member": member.to_dict(), "records": [p.to_dict() for p in history]})
    return timeline
