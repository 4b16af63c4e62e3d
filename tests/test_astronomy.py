# tests/test_astronomy.py
from datetime import date

from sabr_os.astronomy import SUNRISE_ALTITUDE, SolarDay, julian_day, sun_position


def test_julian_day_j2000():
    assert julian_day(date(2000, 1, 1)) == 2451544.5


def test_julian_day_handles_january_february():
    assert julian_day(date(2024, 3, 1)) - julian_day(date(2024, 2, 28)) == 2  # leap year


def test_sun_position_at_j2000():
    decl, eqt = sun_position(2451545.0)
    assert abs(decl - (-23.03)) < 0.2
    assert abs(eqt * 60 - (-3.3)) < 0.5  # minutes


def test_declination_near_zero_at_equinox():
    decl, _ = sun_position(julian_day(date(2024, 3, 20)) + 0.5)
    assert abs(decl) < 0.5


def test_transit_near_noon_at_greenwich():
    solar = SolarDay(date(2024, 6, 1), 51.5, 0.0)
    assert 11.9 < solar.transit() < 12.05


def test_sunset_after_sunrise():
    solar = SolarDay(date(2024, 6, 1), 51.5, -0.12)
    sunrise = solar.event(SUNRISE_ALTITUDE, rising=True, guess=6)
    sunset = solar.event(SUNRISE_ALTITUDE, rising=False, guess=18)
    assert sunrise < solar.transit() < sunset


def test_unreachable_altitude_returns_none():
    """Midsummer in London: the sun never gets 18 degrees below the horizon."""
    solar = SolarDay(date(2024, 6, 21), 51.5, -0.12)
    assert solar.event(-18, rising=True, guess=5) is None


def test_pole_does_not_divide_by_zero():
    solar = SolarDay(date(2024, 6, 21), 90.0, 0.0)
    assert solar.event(SUNRISE_ALTITUDE, rising=False, guess=18) is None
    assert solar.transit() is not None


def test_asr_altitude_lower_for_hanafi():
    solar = SolarDay(date(2024, 6, 1), 51.5, -0.12)
    assert solar.asr_altitude(2, 13) < solar.asr_altitude(1, 13)
