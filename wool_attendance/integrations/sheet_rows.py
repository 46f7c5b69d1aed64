"""Turn loosely structured spreadsheet rows into canonical entities.

The Apps Script endpoint hands back whatever the sheet owners typed as
column headers, so every canonical field is looked up through a small
alias table.  Headers are compared after lower-casing and removing
whitespace, underscores and hyphens.  Each helper takes a list of plain
dicts and never raises on bad data: unusable rows are skipped.
"""

from __future__ import annotations

import logging
import re
from datetime import date as _date
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
import pytz

from ..models import (
    ATTENDANCE_TYPES,
    AttendanceRecord,
    AttendanceType,
    MeetingStatus,
    Member,
    PrayerRecord,
)
from ..utils.ids import generate_member_id

log = logging.getLogger(__name__)

CHECKED_VALUES = {"true", "o", "y", "yes", "present"}

# ---------------------------------------------------------------------------
# Alias tables (priority ordered)
# ---------------------------------------------------------------------------

MEMBER_FIELDS: Dict[str, List[str]] = {
    "id": ["id", "memberid", "회원번호"],
    "name": ["name", "이름", "성명"],
    "group": ["group", "소그룹", "wool", "woolname", "울"],
    "phone_number": ["phone", "phonenumber", "연락처"],
    "role": ["role", "직분"],
    "status": ["status", "상태"],
    "special_notes": ["specialnotes", "특이사항", "notes", "메모"],
    "latest_prayer_request": ["latestprayerrequest", "기도제목"],
}

RECORD_ID = ["id", "recordid"]
RECORD_MEMBER = ["memberid", "member", "회원번호"]
RECORD_DATE = ["date", "날짜", "일자"]
RECORD_TYPES = ["types"]

TYPE_COLUMNS: Dict[AttendanceType, List[str]] = {
    AttendanceType.WORSHIP: ["예배", "worship"],
    AttendanceType.GATHERING: ["집회", "gathering"],
    AttendanceType.WOOL: ["울모임", "woolmeeting", "woolmeet"],
}

STATUS_TYPE = ["type", "종류", "모임"]
STATUS_CANCELED = ["iscanceled", "canceled", "취소"]

PRAYER_CONTENT = ["content", "prayer", "prayerrequest", "기도제목"]
PRAYER_NOTE = ["note", "비고", "특이사항", "메모"]

_LOCALE_DATE = re.compile(
    r"^(\d{4}|\d{2})\s*(?:[./\-]|년)\s*(\d{1,2})\s*(?:[./\-]|월)\s*(\d{1,2})\s*(?:\.|일)?\s*(?:\(.*\))?$"
)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")

Columns = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def _norm(s: Any) -> str:
    return re.sub(r"[\s_\-]+", "", str(s or "")).lower()


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", (value or "").strip())


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_blank(value: Any) -> bool:
    return _is_missing(value) or (isinstance(value, str) and not value.strip())


def _normalized_row(row: Dict[Any, Any]) -> Dict[str, Any]:
    """Key a row by normalised header; spellings that collide keep the first non-blank value."""
    out: Dict[str, Any] = {}
    for key, value in row.items():
        col = _norm(key)
        if col not in out or _is_blank(out[col]):
            out[col] = value
    return out


def _frame(rows: Optional[Iterable[Any]]) -> pd.DataFrame:
    records = [_normalized_row(r) for r in (rows or []) if isinstance(r, dict)]
    if not records:
        return pd.DataFrame()

    # object dtype keeps ids as typed and booleans as booleans
    return pd.DataFrame(records, dtype=object)


def _find_cols(df: pd.DataFrame, wanted_keys: List[str]) -> Columns:
    """Columns present in ``df`` for one canonical field, in alias priority."""
    columns = set(df.columns)
    found = []
    for key in wanted_keys:
        norm_key = _norm(key)
        if norm_key in columns and norm_key not in found:
            found.append(norm_key)
    return tuple(found)


def _cell(row: pd.Series, cols: Columns) -> Any:
    """First non-blank value among ``cols`` for this row."""
    for col in cols:
        value = row.get(col)
        if _is_blank(value):
            continue
        return value
    return None


def _text(row: pd.Series, cols: Columns, multiline: bool = False) -> str:
    """Cell as text. Free text keeps its line breaks; identity fields are squashed."""
    value = _cell(row, cols)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if multiline:
        return str(value).strip()
    return _clean_text(str(value))


def is_checked(value: Any) -> bool:
    """Checkbox semantics used by every boolean-ish sheet column."""
    if pd.api.types.is_bool(value):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in CHECKED_VALUES
    return False


def _local_tz(tz_name: str):
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        log.warning("Invalid timezone '%s'; defaulting to UTC", tz_name)
        return pytz.UTC


def normalize_date(value: Any, tz_name: str = "Asia/Seoul") -> Optional[str]:
    """Return ``YYYY-MM-DD`` for anything date-like, ``None`` otherwise.

    Accepts ISO dates, date/datetime objects, ISO timestamps (converted to
    the local calendar when they carry an offset) and the Korean locale
    renderings Google Sheets produces, e.g. ``26. 1. 24`` or
    ``2026년 1월 24일``.  Two digit years are taken as 20xx.
    """
    try:
        if _is_missing(value):
            return None
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(_local_tz(tz_name))
            return value.date().isoformat()
        if isinstance(value, _date):
            return value.isoformat()
        if not isinstance(value, str):
            return None

        text = value.strip()
        if not text:
            return None
        if _ISO_DATE.match(text):
            y, m, d = (int(x) for x in text.split("-"))
            _date(y, m, d)
            return text
        if _ISO_TIMESTAMP.match(text):
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(_local_tz(tz_name))
            return parsed.date().isoformat()

        match = _LOCALE_DATE.match(text)
        if not match:
            return None
        year, month, day = (int(x) for x in match.groups())
        if year < 100:
            year += 2000
        return _date(year, month, day).isoformat()
    except (ValueError, TypeError, OverflowError):
        log.debug("Unparseable date value %r", value)
        return None


def _types_from_value(value: Any) -> List[AttendanceType]:
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else re.split(r"[,/]", str(value))
    found: List[AttendanceType] = []
    for item in items:
        try:
            attendance_type = AttendanceType.coerce(item)
        except ValueError:
            continue
        if attendance_type not in found:
            found.append(attendance_type)
    return found


def _type_columns(df: pd.DataFrame) -> Dict[AttendanceType, Columns]:
    return {t: _find_cols(df, aliases) for t, aliases in TYPE_COLUMNS.items()}


# ---------------------------------------------------------------------------
# Entity builders
# ---------------------------------------------------------------------------


def normalize_members(rows: Optional[Iterable[Any]]) -> List[Member]:
    df = _frame(rows)
    if df.empty:
        return []

    cols = {name: _find_cols(df, aliases) for name, aliases in MEMBER_FIELDS.items()}
    members: List[Member] = []
    # generated ids must not collide with any id the sheet already holds
    taken = {_text(row, cols["id"]) for _, row in df.iterrows()} - {""}
    seen_ids = set()
    skipped = 0

    for _, row in df.iterrows():
        name = _text(row, cols["name"])
        if not name:
            skipped += 1
            continue

        member_id = _text(row, cols["id"])
        if not member_id:
            member_id = generate_member_id(taken)
            taken.add(member_id)
        elif member_id in seen_ids:
            log.warning("Duplicate member id %s (%s); keeping the first row", member_id, name)
            skipped += 1
            continue
        seen_ids.add(member_id)
        members.append(
            Member(
                id=member_id,
                name=name,
                group=_text(row, cols["group"]),
                phone_number=_text(row, cols["phone_number"]),
                role=_text(row, cols["role"]),
                status=_text(row, cols["status"]),
                special_notes=_text(row, cols["special_notes"], multiline=True),
                latest_prayer_request=_text(row, cols["latest_prayer_request"], multiline=True),
            )
        )

    log.debug("Normalised %d members (%d nameless or duplicate rows skipped)", len(members), skipped)
    return members


def normalize_attendance(rows: Optional[Iterable[Any]], tz_name: str = "Asia/Seoul") -> List[AttendanceRecord]:
    df = _frame(rows)
    if df.empty:
        return []

    id_col = _find_cols(df, RECORD_ID)
    member_col = _find_cols(df, RECORD_MEMBER)
    date_col = _find_cols(df, RECORD_DATE)
    types_col = _find_cols(df, RECORD_TYPES)
    type_cols = _type_columns(df)

    merged: Dict[Tuple[str, str], AttendanceRecord] = {}
    for _, row in df.iterrows():
        member_id = _text(row, member_col)
        iso = normalize_date(_cell(row, date_col), tz_name)
        if not member_id or not iso:
            continue

        types = _types_from_value(_cell(row, types_col))
        for attendance_type in ATTENDANCE_TYPES:
            col = type_cols[attendance_type]
            if col and is_checked(_cell(row, col)) and attendance_type not in types:
                types.append(attendance_type)
        if not types:
            continue

        key = (member_id, iso)
        existing = merged.get(key)
        if existing:
            existing.types.extend(t for t in types if t not in existing.types)
            continue
        merged[key] = AttendanceRecord(
            id=_text(row, id_col) or f"a-{member_id}-{iso}",
            member_id=member_id,
            date=iso,
            types=types,
        )

    return list(merged.values())


def normalize_meeting_status(rows: Optional[Iterable[Any]], tz_name: str = "Asia/Seoul") -> List[MeetingStatus]:
    """Derive the cancellation overlay.

    Configuration rows carry one checkbox per meeting type: a checked box
    means the meeting is held, anything else yields a cancellation.  Rows
    already shaped as ``{date, type, isCanceled}`` are taken as is.
    """
    df = _frame(rows)
    if df.empty:
        return []

    date_col = _find_cols(df, RECORD_DATE)
    type_col = _find_cols(df, STATUS_TYPE)
    canceled_col = _find_cols(df, STATUS_CANCELED)
    type_cols = _type_columns(df)

    statuses: List[MeetingStatus] = []
    seen = set()

    def emit(iso: str, attendance_type: AttendanceType) -> None:
        if (iso, attendance_type) in seen:
            return
        seen.add((iso, attendance_type))
        statuses.append(MeetingStatus(date=iso, type=attendance_type, is_canceled=True))

    for _, row in df.iterrows():
        iso = normalize_date(_cell(row, date_col), tz_name)
        if not iso:
            continue

        explicit_type = _cell(row, type_col)
        if explicit_type is not None:
            try:
                attendance_type = AttendanceType.coerce(explicit_type)
            except ValueError:
                continue
            if not canceled_col or is_checked(_cell(row, canceled_col)):
                emit(iso, attendance_type)
            continue

        for attendance_type in ATTENDANCE_TYPES:
            col = type_cols[attendance_type]
            if not col or not is_checked(_cell(row, col)):
                emit(iso, attendance_type)

    return statuses


def normalize_prayers(rows: Optional[Iterable[Any]], tz_name: str = "Asia/Seoul") -> List[PrayerRecord]:
    df = _frame(rows)
    if df.empty:
        return []

    id_col = _find_cols(df, RECORD_ID)
    member_col = _find_cols(df, RECORD_MEMBER)
    date_col = _find_cols(df, RECORD_DATE)
    content_col = _find_cols(df, PRAYER_CONTENT)
    note_col = _find_cols(df, PRAYER_NOTE)
    if not content_col and not note_col:
        return []

    prayers: List[PrayerRecord] = []
    for _, row in df.iterrows():
        member_id = _text(row, member_col)
        iso = normalize_date(_cell(row, date_col), tz_name)
        if not member_id or not iso:
            continue
        content = _text(row, content_col, multiline=True)
        note = _text(row, note_col, multiline=True)
        if not content and not note:
            continue
        prayers.append(
            PrayerRecord(
                id=_text(row, id_col) or f"p-{member_id}-{iso}",
                member_id=member_id,
                date=iso,
                content=content,
                note=note,
            )
        )
    return prayers


def normalize_payload(body: Dict[str, Any], tz_name: str = "Asia/Seoul") -> Dict[str, list]:
    """Normalise every collection of a remote read response."""
    attendance_rows = body.get("attendance") or []
    prayers = normalize_prayers(body.get("prayers") or [], tz_name)

    # notes typed next to the attendance checkboxes become prayer records too
    known = {(p.member_id, p.date): p for p in prayers}
    for extra in normalize_prayers(attendance_rows, tz_name):
        existing = known.get((extra.member_id, extra.date))
        if existing is None:
            extra.id = f"p-{extra.member_id}-{extra.date}"
            prayers.append(extra)
            known[(extra.member_id, extra.date)] = extra
            continue
        # fill gaps on the prayer sheet row; its own text wins
        if not existing.note:
            existing.note = extra.note
        if not existing.content:
            existing.content = extra.content

    return {
        "members": normalize_members(body.get("members") or []),
        "attendance": normalize_attendance(attendance_rows, tz_name),
        "prayers": prayers,
        "meeting_status": normalize_meeting_status(body.get("meetingStatus") or [], tz_name),
    }
