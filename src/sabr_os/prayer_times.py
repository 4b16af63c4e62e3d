"""Daily prayer times, manual overrides and the next-prayer countdown."""
import logging
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from sabr_os.astronomy import SUNRISE_ALTITUDE, SolarDay
from sabr_os.errors import MissingLocation, NoSolution
from sabr_os.methods import DEFAULT_METHOD, CalculationMethod, get_method
from sabr_os.models import (
    PRAYER_ORDER, HighLatitudeRule, Location, Madhab, NextPrayerProjection,
    PrayerName, PrayerTimeSet,
)

logger = logging.getLogger(__name__)

OVERRIDE_FORMATS = ("%H:%M", "%H:%M:%S")


@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


def resolve_timezone(location: Location) -> str:
    """IANA zone for a location, looked up from its coordinates if not given."""
    if location.timezone:
        return location.timezone
    name = _timezone_finder().timezone_at(lng=location.longitude, lat=location.latitude)
    if name is None:
        logger.warning("No time zone found for %s, %s; using UTC", location.latitude, location.longitude)
        return "UTC"
    return name


def _night_portions(rule: HighLatitudeRule, method: CalculationMethod) -> tuple[float, float]:
    if rule is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
        return 1 / 7, 1 / 7
    if rule is HighLatitudeRule.TWILIGHT_ANGLE:
        return method.fajr_angle / 60, (method.isha_angle or 0) / 60
    return 1 / 2, 1 / 2


def _solar_hours(
    day: date,
    location: Location,
    method: CalculationMethod,
    madhab: Madhab,
    rule: HighLatitudeRule,
) -> dict:
    """UTC hours for each prayer on ``day``; None where the sun never gets there."""
    solar = SolarDay(day, location.latitude, location.longitude)
    sunrise = solar.event(SUNRISE_ALTITUDE, rising=True, guess=6)
    sunset = solar.event(SUNRISE_ALTITUDE, rising=False, guess=18)

    fajr = solar.event(-method.fajr_angle, rising=True, guess=5)
    if method.isha_interval is not None:
        isha = sunset + method.isha_interval / 60 if sunset is not None else None
    else:
        isha = solar.event(-method.isha_angle, rising=False, guess=18)

    if rule is not HighLatitudeRule.NONE and sunrise is not None and sunset is not None:
        tomorrow = SolarDay(day + timedelta(days=1), location.latitude, location.longitude)
        next_sunrise = tomorrow.event(SUNRISE_ALTITUDE, rising=True, guess=6)
        next_sunrise = (next_sunrise if next_sunrise is not None else sunrise) + 24
        night = next_sunrise - sunset
        fajr_portion, isha_portion = _night_portions(rule, method)

        safe_fajr = sunrise - fajr_portion * night
        if fajr is None or fajr < safe_fajr:
            fajr = safe_fajr
        if method.isha_interval is None:
            safe_isha = sunset + isha_portion * night
            if isha is None or isha > safe_isha:
                isha = safe_isha

    return {
        PrayerName.FAJR: fajr,
        PrayerName.DHUHR: solar.transit(),
        PrayerName.ASR: solar.asr(madhab.shadow_factor),
        PrayerName.MAGHRIB: sunset,
        PrayerName.ISHA: isha,
    }


def _solar_date(day: date, location: Location, zone: ZoneInfo) -> date:
    """UTC date whose solar day is local ``day`` in ``zone``.

    Differs from ``day`` where the civil offset is about 12 hours or more from
    solar time, e.g. Samoa (UTC+13 at 172W).
    """
    offset = zone.utcoffset(datetime.combine(day, time(12))).total_seconds() / 3600
    return day - timedelta(days=round((offset - location.longitude / 15) / 24))


def _to_local(day: date, utc_hours: float, zone: ZoneInfo) -> datetime:
    midnight = datetime.combine(day, time(0), tzinfo=timezone.utc)
    return (midnight + timedelta(minutes=round(utc_hours * 60))).astimezone(zone)


def parse_override(value: str) -> Optional[time]:
    """Parse a user-entered "HH:MM" time of day; None if it is not one."""
    text = str(value).replace("(BST)", "").replace("(GMT)", "").strip()
    for fmt in OVERRIDE_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def apply_overrides(times: PrayerTimeSet, overrides: Optional[Mapping]) -> PrayerTimeSet:
    """Replace computed instants with the user's literal times, prayer by prayer.

    Ordering across prayers is not re-checked; an override wins even where the
    computation had no solution.
    """
    if not overrides:
        return times
    zone = ZoneInfo(times.timezone)
    values = dict(times.times)
    failures = dict(times.failures)
    overridden = set(times.overridden)
    for key, raw in overrides.items():
        if raw is None or str(raw).strip() == "":
            continue
        try:
            prayer = PrayerName.parse(key)
        except ValueError:
            logger.warning("Ignoring override for unknown prayer %r", key)
            continue
        parsed = parse_override(raw)
        if parsed is None:
            logger.warning("Ignoring invalid %s override %r", prayer.display_name, raw)
            continue
        values[prayer] = datetime.combine(times.date, parsed).replace(tzinfo=zone)
        failures.pop(prayer, None)
        overridden.add(prayer)
    return PrayerTimeSet(
        date=times.date,
        timezone=times.timezone,
        times=values,
        failures=failures,
        overridden=frozenset(overridden),
    )


def compute(
    day: date,
    location: Optional[Location],
    method=DEFAULT_METHOD,
    madhab: Madhab = Madhab.STANDARD,
    overrides: Optional[Mapping] = None,
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT,
) -> PrayerTimeSet:
    """Compute the five prayer times for ``day`` in the location's local time.

    Raises MissingLocation or UnknownMethod for unusable input. Prayers the sun
    never reaches on this date come back as None with a NoSolution in
    ``failures``; the rest of the set is still valid.
    """
    if location is None:
        raise MissingLocation("A location (coordinates or a known city) is required")
    method = get_method(method)
    madhab = Madhab(madhab)
    high_latitude_rule = HighLatitudeRule(high_latitude_rule)

    tz_name = resolve_timezone(location)
    zone = ZoneInfo(tz_name)
    solar_date = _solar_date(day, location, zone)
    hours = _solar_hours(solar_date, location, method, madhab, high_latitude_rule)

    values = {}
    failures = {}
    for prayer in PRAYER_ORDER:
        value = hours[prayer]
        if value is None:
            failures[prayer] = NoSolution(prayer, f"sun does not reach the required altitude on {day}")
            values[prayer] = None
            logger.info("%s has no solution at %s, %s on %s",
                        prayer.display_name, location.latitude, location.longitude, day)
            continue
        value += method.adjustment(prayer.value) / 60
        values[prayer] = _to_local(solar_date, value, zone)

    computed = PrayerTimeSet(date=day, timezone=tz_name, times=values, failures=failures)
    return apply_overrides(computed, overrides)


def next_prayer(times: PrayerTimeSet, now: datetime) -> Optional[NextPrayerProjection]:
    """First prayer at or after ``now``, or None once Isha has passed.

    Rolling over to the next day's Fajr is the caller's job. A naive ``now`` is
    read as local time in the set's zone.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo(times.timezone))
    current = None
    for prayer, at in times.items():
        if at is None:
            continue
        if at >= now:
            return NextPrayerProjection(prayer=prayer, time=at, remaining=at - now, current=current)
        current = prayer
    return None


def humanize_remaining(remaining: timedelta) -> str:
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
