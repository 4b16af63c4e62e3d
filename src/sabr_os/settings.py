"""User settings: key/value storage and the prayer-time settings bundle."""
import logging
from dataclasses import dataclass, field
from typing import Optional

from sabr_os.db import get_connection
from sabr_os.errors import MissingLocation
from sabr_os.methods import DEFAULT_METHOD, get_method, resolve_method
from sabr_os.models import PRAYER_ORDER, HighLatitudeRule, Location, Madhab, PrayerName

logger = logging.getLogger(__name__)

DEFAULT_CITY = "London"

# Fallback coordinates when the user picked a city but never set lat/lon.
CITY_COORDINATES = {
    "london": (51.5074, -0.1278, "Europe/London"),
    "birmingham": (52.4862, -1.8904, "Europe/London"),
    "manchester": (53.4808, -2.2426, "Europe/London"),
    "makkah": (21.4225, 39.8262, "Asia/Riyadh"),
    "madinah": (24.4672, 39.6111, "Asia/Riyadh"),
    "cairo": (30.0444, 31.2357, "Africa/Cairo"),
    "istanbul": (41.0082, 28.9784, "Europe/Istanbul"),
    "karachi": (24.8607, 67.0011, "Asia/Karachi"),
    "dhaka": (23.8103, 90.4125, "Asia/Dhaka"),
    "jakarta": (-6.2088, 106.8456, "Asia/Jakarta"),
    "kuala lumpur": (3.1390, 101.6869, "Asia/Kuala_Lumpur"),
    "dubai": (25.2048, 55.2708, "Asia/Dubai"),
    "new york": (40.7128, -74.0060, "America/New_York"),
    "toronto": (43.6532, -79.3832, "America/Toronto"),
}


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def delete_setting(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM user_settings WHERE key = ?", (key,))
    conn.commit()
    conn.close()


@dataclass
class PrayerSettings:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    city: Optional[str] = DEFAULT_CITY
    method: str = DEFAULT_METHOD
    madhab: Madhab = Madhab.STANDARD
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    overrides: dict = field(default_factory=dict)


def resolve_location(settings: PrayerSettings) -> Location:
    """Coordinates if both are set, otherwise the city table. Raises MissingLocation."""
    has_lat = settings.latitude is not None
    has_lon = settings.longitude is not None
    if has_lat and has_lon:
        return Location(settings.latitude, settings.longitude, settings.timezone, settings.city or "")
    if has_lat != has_lon:
        logger.warning("Only one of latitude/longitude is set; falling back to city")
    if settings.city:
        known = CITY_COORDINATES.get(settings.city.strip().lower())
        if known:
            lat, lon, tz = known
            return Location(lat, lon, tz, settings.city)
        raise MissingLocation(f"Unknown city {settings.city!r} and no coordinates set")
    raise MissingLocation("No coordinates or city set")


def _float_or_none(value: Optional[str]) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric coordinate %r", value)
        return None


def load_prayer_settings(db_path: str) -> PrayerSettings:
    method = resolve_method(get_setting(db_path, "calculation_method", DEFAULT_METHOD)).name

    madhab_value = get_setting(db_path, "madhab", Madhab.STANDARD.value)
    try:
        madhab = Madhab(madhab_value)
    except ValueError:
        logger.warning("Unknown madhab %r, using standard", madhab_value)
        madhab = Madhab.STANDARD

    rule_value = get_setting(db_path, "high_latitude_rule", HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value)
    try:
        rule = HighLatitudeRule(rule_value)
    except ValueError:
        logger.warning("Unknown high latitude rule %r, using middle of the night", rule_value)
        rule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT

    overrides = {}
    for prayer in PRAYER_ORDER:
        value = get_setting(db_path, f"override.{prayer.value}")
        if value:
            overrides[prayer] = value

    return PrayerSettings(
        latitude=_float_or_none(get_setting(db_path, "latitude")),
        longitude=_float_or_none(get_setting(db_path, "longitude")),
        timezone=get_setting(db_path, "timezone") or None,
        city=get_setting(db_path, "city", DEFAULT_CITY),
        method=method,
        madhab=madhab,
        high_latitude_rule=rule,
        overrides=overrides,
    )


def set_coordinates(db_path: str, latitude: float, longitude: float, timezone: str = None) -> None:
    Location(latitude, longitude)  # range check
    set_setting(db_path, "latitude", str(latitude))
    set_setting(db_path, "longitude", str(longitude))
    if timezone:
        set_setting(db_path, "timezone", timezone)
    else:
        delete_setting(db_path, "timezone")


def set_city(db_path: str, city: str) -> None:
    """Switch to a named city; clears any stored coordinates."""
    set_setting(db_path, "city", city)
    for key in ("latitude", "longitude", "timezone"):
        delete_setting(db_path, key)


def set_method(db_path: str, name: str) -> None:
    set_setting(db_path, "calculation_method", get_method(name).name)


def set_madhab(db_path: str, madhab) -> None:
    set_setting(db_path, "madhab", Madhab(madhab).value)


def set_high_latitude_rule(db_path: str, rule) -> None:
    set_setting(db_path, "high_latitude_rule", HighLatitudeRule(rule).value)


def set_override(db_path: str, prayer, value: Optional[str]) -> None:
    """Store a manual "HH:MM" time for a prayer; empty or None clears it."""
    key = f"override.{PrayerName.parse(prayer).value}"
    if value:
        set_setting(db_path, key, value.strip())
    else:
        delete_setting(db_path, key)
