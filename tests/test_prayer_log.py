# tests/test_prayer_log.py
from datetime import date

import pytest

from sabr_os.db import init_db
from sabr_os.models import NaflPrayer, PrayerEntry, PrayerName, PrayerStatus
from sabr_os.prayer_log import get_day, get_entry, record_prayer, week_start, weekly_stats

MONDAY = date(2024, 3, 11)


def test_record_and_get_entry(tmp_db):
    init_db(tmp_db)
    entry = PrayerEntry(status=PrayerStatus.JAMAAH, sunnah_before=True, khushu=5, notes="masjid")
    record_prayer(tmp_db, MONDAY, "fajr", entry)
    assert get_entry(tmp_db, MONDAY, PrayerName.FAJR) == entry
    assert get_entry(tmp_db, MONDAY, "dhuhr") is None


def test_record_prayer_replaces_existing(tmp_db):
    init_db(tmp_db)
    record_prayer(tmp_db, MONDAY, "asr", PrayerEntry(status=PrayerStatus.MISSED))
    record_prayer(tmp_db, MONDAY, "asr", PrayerEntry(status=PrayerStatus.QADA))
    day = get_day(tmp_db, MONDAY)
    assert len(day) == 1
    assert day[PrayerName.ASR].status is PrayerStatus.QADA


def test_record_prayer_rejects_bad_khushu(tmp_db):
    init_db(tmp_db)
    with pytest.raises(ValueError):
        record_prayer(tmp_db, MONDAY, "asr", PrayerEntry(khushu=0))


def test_get_day_includes_nafl(tmp_db):
    init_db(tmp_db)
    record_prayer(tmp_db, MONDAY, "tahajjud", PrayerEntry(status=PrayerStatus.ON_TIME))
    record_prayer(tmp_db, MONDAY, "isha", PrayerEntry(status=PrayerStatus.ON_TIME))
    assert set(get_day(tmp_db, MONDAY)) == {NaflPrayer.TAHAJJUD, PrayerName.ISHA}


def test_week_start():
    assert week_start(date(2024, 3, 17)) == MONDAY
    assert week_start(MONDAY) == MONDAY


def test_weekly_stats_counts_logged_days_only(tmp_db):
    init_db(tmp_db)
    for prayer in ("fajr", "dhuhr", "asr", "maghrib", "isha"):
        record_prayer(tmp_db, MONDAY, prayer, PrayerEntry(status=PrayerStatus.ON_TIME))
    record_prayer(tmp_db, date(2024, 3, 13), "fajr", PrayerEntry(status=PrayerStatus.JAMAAH))
    # previous week, ignored
    record_prayer(tmp_db, date(2024, 3, 10), "fajr", PrayerEntry(status=PrayerStatus.JAMAAH))

    stats = weekly_stats(tmp_db, date(2024, 3, 15))
    assert stats["prayers_completed"] == 6
    assert stats["percentage"] == 60
    assert stats["points"] == 50 + 27


def test_weekly_stats_empty(tmp_db):
    init_db(tmp_db)
    assert weekly_stats(tmp_db, MONDAY) == {"percentage": 0, "prayers_completed": 0, "points": 0}
