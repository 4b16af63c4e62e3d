"""Points and completion scoring for logged prayers."""
from typing import Mapping, Union

from sabr_os.models import NaflPrayer, PrayerEntry, PrayerName, PrayerStatus

STATUS_POINTS = {
    PrayerStatus.JAMAAH: 27,
    PrayerStatus.ON_TIME: 10,
    PrayerStatus.LATE: 3,
    PrayerStatus.QADA: 3,
    PrayerStatus.MISSED: 0,
    PrayerStatus.NONE: 0,
}
NAFL_POINTS = 15
SUNNAH_POINTS = 3

COMPLETED_STATUSES = frozenset(
    {PrayerStatus.JAMAAH, PrayerStatus.ON_TIME, PrayerStatus.LATE, PrayerStatus.QADA}
)

# Rak'ahs of confirmed sunnah before/after each fard prayer
SUNNAH_RAKAHS = {
    PrayerName.FAJR: {"before": 2},
    PrayerName.DHUHR: {"before": 4, "after": 2},
    PrayerName.MAGHRIB: {"after": 2},
    PrayerName.ISHA: {"after": 2},
}

Prayer = Union[PrayerName, NaflPrayer]


def parse_prayer(value) -> Prayer:
    if isinstance(value, (PrayerName, NaflPrayer)):
        return value
    key = str(value).strip().lower()
    try:
        return PrayerName(key)
    except ValueError:
        return NaflPrayer(key)


def is_completed(entry: PrayerEntry) -> bool:
    return entry.status in COMPLETED_STATUSES


def entry_points(prayer: Prayer, entry: PrayerEntry) -> int:
    if isinstance(prayer, NaflPrayer):
        return NAFL_POINTS if is_completed(entry) else 0
    points = STATUS_POINTS[entry.status]
    sunnah = SUNNAH_RAKAHS.get(prayer, {})
    if entry.sunnah_before and "before" in sunnah:
        points += SUNNAH_POINTS
    if entry.sunnah_after and "after" in sunnah:
        points += SUNNAH_POINTS
    return points


def daily_summary(entries: Mapping[Prayer, PrayerEntry]) -> dict:
    completed = 0
    jamaah = 0
    points = 0
    for prayer, entry in entries.items():
        points += entry_points(prayer, entry)
        if isinstance(prayer, PrayerName) and is_completed(entry):
            completed += 1
            if entry.status is PrayerStatus.JAMAAH:
                jamaah += 1
    return {
        "completed": completed,
        "total": len(PrayerName),
        "points": points,
        "jamaah": jamaah,
    }


def prayer_score(entries: Mapping[Prayer, PrayerEntry]) -> int:
    """Percentage of the five fard prayers completed."""
    summary = daily_summary(entries)
    return round(summary["completed"] / summary["total"] * 100)
