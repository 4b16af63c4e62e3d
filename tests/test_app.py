import logging
from datetime import date, datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from sabr_os.app import (
    SessionExitRequested, current_date, render_times_table, run_revision_session,
    session_int_prompt, session_prompt, times_for, upcoming_prayer,
)
from sabr_os.db import get_connection, init_db
from sabr_os.memorization import add_memorization, get_range
from sabr_os.models import PrayerName
from sabr_os.settings import PrayerSettings, set_city, set_coordinates

LONDON_TZ = ZoneInfo("Europe/London")


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("sabr_os.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("sabr_os.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("sabr_os.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_int_prompt_raises_on_q():
    with patch("sabr_os.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("rate", choices=["1", "2", "3", "4", "5"])


def test_session_int_prompt_returns_normal_input():
    with patch("sabr_os.app.Prompt.ask", return_value="3"):
        result = session_int_prompt("rate", choices=["1", "2", "3", "4", "5"])
        assert result == 3


def test_upcoming_prayer_same_day():
    settings = PrayerSettings(city="London")
    now = datetime(2024, 1, 15, 10, 0, tzinfo=LONDON_TZ)
    projection = upcoming_prayer(settings, now)
    assert projection.prayer is PrayerName.DHUHR
    assert projection.time.date() == now.date()
    assert projection.current is PrayerName.FAJR


def test_upcoming_prayer_rolls_over_after_isha():
    settings = PrayerSettings(city="London")
    now = datetime(2024, 1, 15, 23, 0, tzinfo=LONDON_TZ)
    projection = upcoming_prayer(settings, now)
    assert projection.prayer is PrayerName.FAJR
    assert projection.time.date() == datetime(2024, 1, 16).date()
    assert projection.remaining.total_seconds() > 0


def test_render_times_table_marks_unavailable():
    settings = PrayerSettings(city="London", high_latitude_rule="none")
    times = times_for(settings, datetime(2024, 6, 1).date())
    table = render_times_table(times)
    assert table.row_count == 5
    time_cells = list(table.columns[1].cells)
    assert time_cells[0] == "[red]Not applicable[/red]"
    assert time_cells[1] != "[red]Not applicable[/red]"


def test_run_revision_session_exits_on_q(tmp_db):
    """Rate the first range, then 'q' on the second recite prompt; first revision is saved."""
    init_db(tmp_db)
    first = add_memorization(tmp_db, 112, 1, 4)
    second = add_memorization(tmp_db, 113, 1, 5)

    with patch("sabr_os.app.Prompt.ask", side_effect=["", "4", "q"]):
        with pytest.raises(SessionExitRequested):
            run_revision_session(tmp_db, [first, second])

    assert get_range(tmp_db, first.id).repetition_count == 1
    assert get_range(tmp_db, second.id).repetition_count == 0
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM revision_log").fetchone()[0] == 1
    conn.close()


def test_run_revision_session_counts_revised(tmp_db):
    init_db(tmp_db)
    ranges = [add_memorization(tmp_db, 112, 1, 4), add_memorization(tmp_db, 114, 1, 6)]
    with patch("sabr_os.app.Prompt.ask", side_effect=["", "5", "", "2"]):
        assert run_revision_session(tmp_db, ranges) == 2
    assert get_range(tmp_db, ranges[1].id).quality_rating == 2


def test_run_revision_session_nothing_due(tmp_db):
    init_db(tmp_db)
    assert run_revision_session(tmp_db, []) == 0


def test_upcoming_prayer_far_east_of_solar_time():
    """Samoa keeps UTC+13 at 172W; a morning there still sees the same day's Dhuhr."""
    settings = PrayerSettings(latitude=-13.83, longitude=-171.76, timezone="Pacific/Apia")
    now = datetime(2024, 7, 2, 10, 0, tzinfo=ZoneInfo("Pacific/Apia"))
    projection = upcoming_prayer(settings, now)
    assert projection.prayer is PrayerName.DHUHR
    assert projection.time.date() == date(2024, 7, 2)
    assert projection.current is PrayerName.FAJR
    assert projection.remaining.total_seconds() < 3 * 3600


def test_current_date_uses_location_zone(tmp_db):
    init_db(tmp_db)
    now = datetime(2024, 7, 2, 23, 30, tzinfo=timezone.utc)
    assert current_date(tmp_db, now) == date(2024, 7, 3)  # 00:30 BST

    set_coordinates(tmp_db, -13.83, -171.76, "Pacific/Apia")
    assert current_date(tmp_db, datetime(2024, 7, 2, 12, 0, tzinfo=timezone.utc)) == date(2024, 7, 3)


def test_current_date_without_location_uses_system_date(tmp_db, caplog):
    init_db(tmp_db)
    set_city(tmp_db, "Atlantis")
    now = datetime(2024, 7, 2, 12, 0, tzinfo=timezone.utc)
    with caplog.at_level(logging.WARNING):
        assert current_date(tmp_db, now) == now.astimezone().date()
    assert "Atlantis" in caplog.text


def test_run_revision_session_records_given_date(tmp_db):
    init_db(tmp_db)
    memorized = add_memorization(tmp_db, 112, 1, 4, memorized_on=date(2024, 7, 1))
    with patch("sabr_os.app.Prompt.ask", side_effect=["", "4"]):
        run_revision_session(tmp_db, [memorized], revised_on=date(2024, 7, 3))
    loaded = get_range(tmp_db, memorized.id)
    assert loaded.last_revised_date == date(2024, 7, 3)
    assert loaded.next_revision_date == date(2024, 7, 4)
