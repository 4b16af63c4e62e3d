"""Daily ibadat dashboard: prayer score and memorization statistics."""
from datetime import date
from typing import Optional

from sabr_os.db import get_connection
from sabr_os.memorization import get_all_ranges
from sabr_os.prayer_log import get_day, weekly_stats
from sabr_os.revision import due_for_revision
from sabr_os.tracker import daily_summary, prayer_score


def get_score_label(score: float) -> str:
    if score >= 100:
        return "ALL PRAYED"
    elif score >= 60:
        return "GOOD"
    elif score >= 20:
        return "KEEP GOING"
    return "NOT STARTED"


def get_score_color(score: float) -> str:
    if score >= 100:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score >= 20:
        return "dark_orange"
    return "red"


def get_prayer_stats(db_path: str, day: Optional[date] = None) -> dict:
    day = day or date.today()
    entries = get_day(db_path, day)
    summary = daily_summary(entries)
    summary["score"] = prayer_score(entries)
    summary["week"] = weekly_stats(db_path, day)
    return summary


def get_memorization_stats(db_path: str, as_of: Optional[date] = None) -> dict:
    ranges = get_all_ranges(db_path)
    due = due_for_revision(ranges, as_of or date.today())
    conn = get_connection(db_path)
    revisions = conn.execute("SELECT COUNT(*) FROM revision_log").fetchone()[0]
    conn.close()
    avg_interval = (
        round(sum(r.current_interval_days for r in ranges) / len(ranges), 1) if ranges else 0.0
    )
    return {
        "ranges": len(ranges),
        "ayahs": sum(r.ayah_count for r in ranges),
        "surahs": len({r.surah_number for r in ranges}),
        "solid": sum(1 for r in ranges if r.is_solid),
        "due_today": len(due),
        "revisions_logged": revisions,
        "avg_interval_days": avg_interval,
    }
