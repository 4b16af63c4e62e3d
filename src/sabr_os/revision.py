"""Revision scheduling for memorized Quran ranges."""
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from sabr_os.models import MemorizedRange, RevisionEvent
from sabr_os.sm2 import sm2_update, validate_quality
from sabr_os.surahs import validate_range


def _as_date(value: Union[date, datetime, None]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def new_memorization(
    surah_number: int,
    ayah_from: int,
    ayah_to: int,
    memorized_on: Optional[date] = None,
    tajweed_notes: str = "",
    tafsir_notes: str = "",
) -> MemorizedRange:
    """A freshly memorized range, first due for revision the next day."""
    validate_range(surah_number, ayah_from, ayah_to)
    memorized_on = _as_date(memorized_on)
    return MemorizedRange(
        surah_number=surah_number,
        ayah_from=ayah_from,
        ayah_to=ayah_to,
        memorized_date=memorized_on,
        next_revision_date=memorized_on + timedelta(days=1),
        tajweed_notes=tajweed_notes,
        tafsir_notes=tafsir_notes,
    )


def schedule_next(
    memorized: MemorizedRange,
    quality_rating: int,
    occurred_at: Union[date, datetime, None] = None,
) -> MemorizedRange:
    """Return a copy of ``memorized`` rescheduled after one revision.

    Raises InvalidRating for a rating outside 1-5; ``memorized`` itself is
    never modified.
    """
    validate_quality(quality_rating)
    revised_on = _as_date(occurred_at)
    updated = sm2_update(
        quality=quality_rating,
        repetitions=memorized.repetition_count,
        ease_factor=memorized.ease_factor,
        interval=memorized.current_interval_days,
    )
    return replace(
        memorized,
        quality_rating=quality_rating,
        repetition_count=updated["repetitions"],
        current_interval_days=updated["interval"],
        ease_factor=updated["ease_factor"],
        last_revised_date=revised_on,
        next_revision_date=revised_on + timedelta(days=updated["interval"]),
    )


def apply_event(event: RevisionEvent) -> MemorizedRange:
    return schedule_next(event.range, event.quality_rating, event.occurred_at)


def due_for_revision(ranges: Iterable[MemorizedRange], as_of: Optional[date] = None) -> list[MemorizedRange]:
    """Ranges due on or before ``as_of``, most overdue first."""
    as_of = _as_date(as_of)
    due = [
        r for r in ranges
        if r.next_revision_date is not None and r.next_revision_date <= as_of
    ]
    return sorted(due, key=lambda r: (r.next_revision_date, r.surah_number, r.ayah_from))


def days_overdue(memorized: MemorizedRange, as_of: Optional[date] = None) -> int:
    if memorized.next_revision_date is None:
        return 0
    return max(0, (_as_date(as_of) - memorized.next_revision_date).days)
