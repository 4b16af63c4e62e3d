"""Memorized range storage with SM-2 revision scheduling."""
import logging
from datetime import date, datetime
from typing import Optional, Union

from sabr_os.db import get_connection
from sabr_os.models import MemorizedRange
from sabr_os.revision import due_for_revision, new_memorization, schedule_next

logger = logging.getLogger(__name__)

_DATE_FIELDS = ("memorized_date", "last_revised_date", "next_revision_date")


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def row_to_range(row) -> MemorizedRange:
    values = {field: date.fromisoformat(row[field]) if row[field] else None for field in _DATE_FIELDS}
    return MemorizedRange(
        id=row["id"],
        surah_number=row["surah_number"],
        ayah_from=row["ayah_from"],
        ayah_to=row["ayah_to"],
        quality_rating=row["quality_rating"],
        repetition_count=row["repetition_count"],
        current_interval_days=row["current_interval_days"],
        ease_factor=row["ease_factor"],
        tajweed_notes=row["tajweed_notes"] or "",
        tafsir_notes=row["tafsir_notes"] or "",
        is_solid=bool(row["is_solid"]),
        **values,
    )


def save_range(db_path: str, memorized: MemorizedRange) -> MemorizedRange:
    """Insert a new range, returning it with its id set."""
    conn = get_connection(db_path)
    cursor = conn.execute(
        """INSERT INTO memorized_ranges (surah_number, ayah_from, ayah_to, memorized_date,
            last_revised_date, next_revision_date, quality_rating, repetition_count,
            current_interval_days, ease_factor, tajweed_notes, tafsir_notes, is_solid)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            memorized.surah_number, memorized.ayah_from, memorized.ayah_to,
            _iso(memorized.memorized_date), _iso(memorized.last_revised_date),
            _iso(memorized.next_revision_date), memorized.quality_rating,
            memorized.repetition_count, memorized.current_interval_days,
            memorized.ease_factor, memorized.tajweed_notes, memorized.tafsir_notes,
            int(memorized.is_solid),
        ),
    )
    conn.commit()
    range_id = cursor.lastrowid
    conn.close()
    memorized.id = range_id
    return memorized


def add_memorization(
    db_path: str,
    surah_number: int,
    ayah_from: int,
    ayah_to: int,
    memorized_on: Optional[date] = None,
    tajweed_notes: str = "",
    tafsir_notes: str = "",
) -> MemorizedRange:
    memorized = new_memorization(surah_number, ayah_from, ayah_to, memorized_on, tajweed_notes, tafsir_notes)
    return save_range(db_path, memorized)


def get_range(db_path: str, range_id: int) -> Optional[MemorizedRange]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM memorized_ranges WHERE id = ?", (range_id,)).fetchone()
    conn.close()
    return row_to_range(row) if row else None


def get_all_ranges(db_path: str) -> list[MemorizedRange]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM memorized_ranges ORDER BY surah_number ASC, ayah_from ASC"
    ).fetchall()
    conn.close()
    return [row_to_range(r) for r in rows]


def get_due_ranges(db_path: str, as_of: Optional[date] = None, limit: Optional[int] = None) -> list[MemorizedRange]:
    due = due_for_revision(get_all_ranges(db_path), as_of or date.today())
    return due[:limit] if limit else due


def record_revision(
    db_path: str,
    range_id: int,
    quality: int,
    occurred_at: Union[date, datetime, None] = None,
    notes: Optional[str] = None,
) -> MemorizedRange:
    """Apply one revision to a stored range and write the result back.

    Raises KeyError if the range does not exist and InvalidRating before
    anything is written.
    """
    current = get_range(db_path, range_id)
    if current is None:
        raise KeyError(f"No memorized range with id {range_id}")
    occurred_at = occurred_at or datetime.now()
    updated = schedule_next(current, quality, occurred_at)
    if notes:
        updated.tajweed_notes = notes

    conn = get_connection(db_path)
    conn.execute(
        """UPDATE memorized_ranges SET last_revised_date=?, next_revision_date=?, quality_rating=?,
            repetition_count=?, current_interval_days=?, ease_factor=?, tajweed_notes=?
        WHERE id=?""",
        (
            _iso(updated.last_revised_date), _iso(updated.next_revision_date), updated.quality_rating,
            updated.repetition_count, updated.current_interval_days, updated.ease_factor,
            updated.tajweed_notes, range_id,
        ),
    )
    conn.execute(
        "INSERT INTO revision_log (range_id, quality_rating, revised_at) VALUES (?, ?, ?)",
        (range_id, quality, occurred_at.isoformat()),
    )
    conn.commit()
    conn.close()
    logger.debug("Range %s revised with quality %s, next due %s", range_id, quality, updated.next_revision_date)
    return updated



def set_solid(db_path: str, range_id: int, solid: bool = True) -> None:
    """Mark a range as firmly memorized (or clear the mark). Scheduling is unaffected."""
    conn = get_connection(db_path)
    cursor = conn.execute(
        "UPDATE memorized_ranges SET is_solid = ? WHERE id = ?", (int(solid), range_id)
    )
    conn.commit()
    conn.close()
    if cursor.rowcount == 0:
        raise KeyError(f"No memorized range with id {range_id}")
