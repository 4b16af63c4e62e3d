# tests/test_memorization.py
from datetime import date, datetime

import pytest

from sabr_os.db import get_connection, init_db
from sabr_os.errors import InvalidRange, InvalidRating
from sabr_os.memorization import (
    add_memorization, get_all_ranges, get_due_ranges, get_range, record_revision, set_solid,
)


def test_add_memorization_persists(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 67, 1, 30, memorized_on=date(2024, 3, 1), tajweed_notes="idgham")
    assert saved.id is not None
    loaded = get_range(tmp_db, saved.id)
    assert loaded == saved
    assert loaded.next_revision_date == date(2024, 3, 2)
    assert loaded.tajweed_notes == "idgham"


def test_add_memorization_rejects_bad_range(tmp_db):
    init_db(tmp_db)
    with pytest.raises(InvalidRange):
        add_memorization(tmp_db, 1, 1, 8)
    assert get_all_ranges(tmp_db) == []


def test_get_range_missing(tmp_db):
    init_db(tmp_db)
    assert get_range(tmp_db, 99) is None


def test_get_all_ranges_ordered(tmp_db):
    init_db(tmp_db)
    add_memorization(tmp_db, 78, 1, 40)
    add_memorization(tmp_db, 2, 255, 257)
    add_memorization(tmp_db, 2, 1, 5)
    ranges = get_all_ranges(tmp_db)
    assert [(r.surah_number, r.ayah_from) for r in ranges] == [(2, 1), (2, 255), (78, 1)]


def test_get_due_ranges(tmp_db):
    init_db(tmp_db)
    add_memorization(tmp_db, 112, 1, 4, memorized_on=date(2024, 3, 1))
    add_memorization(tmp_db, 113, 1, 5, memorized_on=date(2024, 3, 5))
    add_memorization(tmp_db, 114, 1, 6, memorized_on=date(2024, 3, 10))
    due = get_due_ranges(tmp_db, date(2024, 3, 10))
    assert [r.surah_number for r in due] == [112, 113]
    assert len(get_due_ranges(tmp_db, date(2024, 3, 10), limit=1)) == 1


def test_record_revision_updates_and_logs(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 67, 1, 30, memorized_on=date(2024, 3, 1))
    updated = record_revision(tmp_db, saved.id, 4, occurred_at=datetime(2024, 3, 2, 7, 0))
    assert updated.next_revision_date == date(2024, 3, 3)

    loaded = get_range(tmp_db, saved.id)
    assert loaded.repetition_count == 1
    assert loaded.last_revised_date == date(2024, 3, 2)
    assert loaded.quality_rating == 4

    conn = get_connection(tmp_db)
    rows = conn.execute("SELECT * FROM revision_log").fetchall()
    conn.close()
    assert len(rows) == 1
    assert rows[0]["range_id"] == saved.id
    assert rows[0]["quality_rating"] == 4


def test_record_revision_invalid_rating_writes_nothing(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 67, 1, 30, memorized_on=date(2024, 3, 1))
    with pytest.raises(InvalidRating):
        record_revision(tmp_db, saved.id, 6)
    assert get_range(tmp_db, saved.id) == saved
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM revision_log").fetchone()[0] == 0
    conn.close()


def test_record_revision_missing_range(tmp_db):
    init_db(tmp_db)
    with pytest.raises(KeyError):
        record_revision(tmp_db, 42, 4)


def test_record_revision_notes_replace_tajweed_notes(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 67, 1, 30, tajweed_notes="old")
    record_revision(tmp_db, saved.id, 5, notes="watch the qalqalah")
    assert get_range(tmp_db, saved.id).tajweed_notes == "watch the qalqalah"


def test_set_solid_round_trip(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 36, 1, 12, memorized_on=date(2024, 3, 1))
    assert get_range(tmp_db, saved.id).is_solid is False
    set_solid(tmp_db, saved.id)
    assert get_range(tmp_db, saved.id).is_solid is True
    set_solid(tmp_db, saved.id, solid=False)
    assert get_range(tmp_db, saved.id).is_solid is False


def test_set_solid_does_not_touch_schedule(tmp_db):
    init_db(tmp_db)
    saved = add_memorization(tmp_db, 36, 1, 12, memorized_on=date(2024, 3, 1))
    set_solid(tmp_db, saved.id)
    loaded = get_range(tmp_db, saved.id)
    assert loaded.next_revision_date == saved.next_revision_date
    assert loaded.repetition_count == 0


def test_set_solid_missing_range(tmp_db):
    init_db(tmp_db)
    with pytest.raises(KeyError):
        set_solid(tmp_db, 7)
