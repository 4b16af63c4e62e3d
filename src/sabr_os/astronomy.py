"""Low-precision solar position and sun-altitude event times.

Equations are the USNO approximate solar coordinates as used by PrayTimes.org:
accurate to well under a minute of time between 1950 and 2050, which is
below the one-minute rounding applied to prayer times.

All event times are returned as hours from 00:00 UTC on the given date and may
fall outside [0, 24) for longitudes far from Greenwich. None means the sun
never reaches the requested altitude on that date.
"""
import math
from datetime import date
from typing import Optional

# Apparent altitude of the sun's centre at rise/set: refraction + semi-diameter.
SUNRISE_ALTITUDE = -0.833

REFINEMENTS = 2


def dsin(d):
    return math.sin(math.radians(d))


def dcos(d):
    return math.cos(math.radians(d))


def dtan(d):
    return math.tan(math.radians(d))


def darcsin(x):
    return math.degrees(math.asin(x))


def darccos(x):
    return math.degrees(math.acos(x))


def darccot(x):
    return math.degrees(math.atan(1.0 / x))


def darctan2(y, x):
    return math.degrees(math.atan2(y, x))


def fix_angle(a: float) -> float:
    return a % 360.0


def fix_hour(h: float) -> float:
    return h % 24.0


def julian_day(day: date) -> float:
    """Julian day number at 00:00 UT of a Gregorian calendar date."""
    year, month = day.year, day.month
    if month <= 2:
        year -= 1
        month += 12
    a = year // 100
    b = 2 - a + a // 4
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day.day + b - 1524.5
    )


def sun_position(jd: float) -> tuple[float, float]:
    """Return (declination in degrees, equation of time in hours)."""
    d = jd - 2451545.0
    g = fix_angle(357.529 + 0.98560028 * d)
    q = fix_angle(280.459 + 0.98564736 * d)
    ecliptic_lon = fix_angle(q + 1.915 * dsin(g) + 0.020 * dsin(2 * g))
    obliquity = 23.439 - 0.00000036 * d

    right_ascension = darctan2(dcos(obliquity) * dsin(ecliptic_lon), dcos(ecliptic_lon)) / 15.0
    eqt = q / 15.0 - fix_hour(right_ascension)
    declination = darcsin(dsin(obliquity) * dsin(ecliptic_lon))
    return declination, eqt


class SolarDay:
    """Sun events for one date at one place.

    Internally works in local mean solar hours (``guess`` arguments); every
    public result is converted to UTC hours.
    """

    def __init__(self, day: date, latitude: float, longitude: float):
        self.day = day
        self.latitude = latitude
        self.longitude = longitude
        self._jd = julian_day(day) - longitude / (15 * 24.0)
        self._utc_shift = longitude / 15.0

    def _position(self, solar_hours: float) -> tuple[float, float]:
        return sun_position(self._jd + solar_hours / 24.0)

    def _transit_solar(self, guess: float) -> float:
        _, eqt = self._position(guess)
        return fix_hour(12 - eqt)

    def _hour_angle(self, altitude: float, guess: float) -> Optional[float]:
        decl, _ = self._position(guess)
        denominator = dcos(self.latitude) * dcos(decl)
        if abs(denominator) < 1e-12:
            return None
        cos_h = (dsin(altitude) - dsin(self.latitude) * dsin(decl)) / denominator
        if not -1.0 <= cos_h <= 1.0:
            return None
        return darccos(cos_h) / 15.0

    def _at_altitude(self, altitude: float, guess: float, rising: bool) -> Optional[float]:
        h = self._hour_angle(altitude, guess)
        if h is None:
            return None
        noon = self._transit_solar(guess)
        return noon - h if rising else noon + h

    def transit(self) -> float:
        """Solar noon: the sun crosses the local meridian."""
        t = 12.0
        for _ in range(REFINEMENTS):
            t = self._transit_solar(t)
        return t - self._utc_shift

    def event(self, altitude: float, rising: bool, guess: float) -> Optional[float]:
        """Time the sun's centre passes ``altitude`` degrees, morning or evening."""
        t = guess
        for _ in range(REFINEMENTS):
            t = self._at_altitude(altitude, t, rising)
            if t is None:
                return None
        return t - self._utc_shift

    def asr_altitude(self, shadow_factor: int, guess: float) -> float:
        """Altitude at which a shadow is ``factor`` heights longer than at noon."""
        decl, _ = self._position(guess)
        return darccot(shadow_factor + dtan(abs(self.latitude - decl)))

    def asr(self, shadow_factor: int, guess: float = 13.0) -> Optional[float]:
        t = guess
        for _ in range(REFINEMENTS):
            t = self._at_altitude(self.asr_altitude(shadow_factor, t), t, rising=False)
            if t is None:
                return None
        return t - self._utc_shift
