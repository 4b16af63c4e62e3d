"""Data classes for prayer times, memorization records and the prayer log."""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Optional


class PrayerName(Enum):
    FAJR = "fajr"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value) -> "PrayerName":
        """Accept a member, its value or its display name ("Fajr", "fajr")."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# Fixed daily order; Enum iteration order is relied on throughout.
PRAYER_ORDER = tuple(PrayerName)


class NaflPrayer(Enum):
    """Voluntary prayers: tracked in the log, never given a computed time."""
    TAHAJJUD = "tahajjud"
    DUHA = "duha"
    WITR = "witr"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class Madhab(Enum):
    STANDARD = "standard"
    HANAFI = "hanafi"

    @property
    def shadow_factor(self) -> int:
        return 2 if self is Madhab.HANAFI else 1


class HighLatitudeRule(Enum):
    MIDDLE_OF_THE_NIGHT = "middle_of_the_night"
    SEVENTH_OF_THE_NIGHT = "seventh_of_the_night"
    TWILIGHT_ANGLE = "twilight_angle"
    NONE = "none"


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    timezone: Optional[str] = None
    city: str = ""

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class PrayerTimeSet:
    """Five prayer instants for one local calendar date.

    ``times`` holds every PrayerName in daily order; a value of None means the
    prayer could not be computed and the reason is in ``failures``.
    """
    date: date
    timezone: str
    times: Dict[PrayerName, Optional[datetime]]
    failures: Dict[PrayerName, Exception] = field(default_factory=dict)
    overridden: frozenset = frozenset()

    def __getitem__(self, prayer) -> Optional[datetime]:
        return self.times[PrayerName.parse(prayer)]

    def items(self):
        return [(p, self.times.get(p)) for p in PRAYER_ORDER]

    def is_available(self, prayer) -> bool:
        return self[prayer] is not None


def format_countdown(remaining: timedelta) -> str:
    """HH:MM:SS, never negative."""
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


@dataclass(frozen=True)
class NextPrayerProjection:
    prayer: PrayerName
    time: datetime
    remaining: timedelta
    current: Optional[PrayerName] = None

    @property
    def name(self) -> str:
        return self.prayer.display_name

    @property
    def in_window(self) -> bool:
        """True when an earlier prayer's time has started and not yet ended."""
        return self.current is not None

    @property
    def countdown(self) -> str:
        return format_countdown(self.remaining)


@dataclass
class MemorizedRange:
    surah_number: int
    ayah_from: int
    ayah_to: int
    memorized_date: Optional[date] = None
    last_revised_date: Optional[date] = None
    next_revision_date: Optional[date] = None
    quality_rating: Optional[int] = None
    repetition_count: int = 0
    current_interval_days: int = 0
    ease_factor: float = 2.5
    id: Optional[int] = None
    tajweed_notes: str = ""
    tafsir_notes: str = ""
    is_solid: bool = False  # user-confirmed as firmly memorized

    @property
    def ayah_count(self) -> int:
        return self.ayah_to - self.ayah_from + 1


@dataclass(frozen=True)
class RevisionEvent:
    range: MemorizedRange
    quality_rating: int
    occurred_at: Optional[datetime] = None


class PrayerStatus(Enum):
    NONE = "none"
    ON_TIME = "on_time"
    JAMAAH = "jamaah"
    LATE = "late"
    MISSED = "missed"
    QADA = "qada"


@dataclass
class PrayerEntry:
    status: PrayerStatus = PrayerStatus.NONE
    sunnah_before: bool = False
    sunnah_after: bool = False
    khushu: int = 3
    notes: str = ""


@dataclass(frozen=True)
class Surah:
    number: int
    name: str
    verses: int
