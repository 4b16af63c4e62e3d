"""Daily prayer log: one structured row per prayer per day."""
from datetime import date, timedelta
from typing import Optional

from sabr_os.db import get_connection
from sabr_os.models import PrayerEntry, PrayerStatus
from sabr_os.tracker import Prayer, daily_summary, parse_prayer


def _row_to_entry(row) -> PrayerEntry:
    return PrayerEntry(
        status=PrayerStatus(row["status"]),
        sunnah_before=bool(row["sunnah_before"]),
        sunnah_after=bool(row["sunnah_after"]),
        khushu=row["khushu"],
        notes=row["notes"] or "",
    )


def record_prayer(db_path: str, day: date, prayer, entry: PrayerEntry) -> None:
    """Insert or replace the entry for ``prayer`` on ``day``."""
    if not 1 <= entry.khushu <= 5:
        raise ValueError(f"khushu must be 1-5, got {entry.khushu}")
    prayer = parse_prayer(prayer)
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO prayer_entries (day, prayer, status, sunnah_before, sunnah_after, khushu, notes)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(day, prayer) DO UPDATE SET status=excluded.status,
            sunnah_before=excluded.sunnah_before, sunnah_after=excluded.sunnah_after,
            khushu=excluded.khushu, notes=excluded.notes""",
        (
            day.isoformat(), prayer.value, entry.status.value, int(entry.sunnah_before),
            int(entry.sunnah_after), entry.khushu, entry.notes,
        ),
    )
    conn.commit()
    conn.close()


def get_entry(db_path: str, day: date, prayer) -> Optional[PrayerEntry]:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM prayer_entries WHERE day = ? AND prayer = ?",
        (day.isoformat(), parse_prayer(prayer).value),
    ).fetchone()
    conn.close()
    return _row_to_entry(row) if row else None


def get_day(db_path: str, day: date) -> dict[Prayer, PrayerEntry]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM prayer_entries WHERE day = ?", (day.isoformat(),)).fetchall()
    conn.close()
    return {parse_prayer(r["prayer"]): _row_to_entry(r) for r in rows}


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def weekly_stats(db_path: str, day: Optional[date] = None) -> dict:
    """Completion percentage and points for the Monday-Sunday week containing ``day``.

    Only days that have at least one logged prayer count towards the total.
    """
    start = week_start(day or date.today())
    total = completed = points = 0
    for offset in range(7):
        entries = get_day(db_path, start + timedelta(days=offset))
        if not entries:
            continue
        summary = daily_summary(entries)
        total += summary["total"]
        completed += summary["completed"]
        points += summary["points"]
    return {
        "percentage": round(completed / total * 100) if total else 0,
        "prayers_completed": completed,
        "points": points,
    }
