"""Surah catalogue used to validate memorized ayah ranges."""
import json
from functools import lru_cache
from pathlib import Path

from sabr_os.errors import InvalidRange
from sabr_os.models import Surah

CONTENT_DIR = Path(__file__).parent / "content"
TOTAL_AYAHS = 6236


@lru_cache(maxsize=1)
def all_surahs() -> tuple[Surah, ...]:
    """All 114 surahs in mushaf order, loaded from surahs.json."""
    data = json.loads((CONTENT_DIR / "surahs.json").read_text(encoding="utf-8"))
    return tuple(Surah(s["number"], s["name"], s["verses"]) for s in data["surahs"])


def get_surah(number: int) -> Surah:
    if not isinstance(number, int) or not 1 <= number <= 114:
        raise InvalidRange(f"Surah number must be 1-114, got {number!r}")
    return all_surahs()[number - 1]


def search_surahs(query: str) -> list[Surah]:
    """Match by number or case-insensitive name fragment."""
    q = query.strip().lower()
    return [s for s in all_surahs() if q in s.name.lower() or q == str(s.number)]


def validate_range(surah_number: int, ayah_from: int, ayah_to: int) -> Surah:
    surah = get_surah(surah_number)
    if not 1 <= ayah_from <= ayah_to <= surah.verses:
        raise InvalidRange(
            f"Ayah range {ayah_from}-{ayah_to} is not within {surah.name} (1-{surah.verses})"
        )
    return surah


def format_range(surah_number: int, ayah_from: int, ayah_to: int) -> str:
    surah = get_surah(surah_number)
    if ayah_from == 1 and ayah_to == surah.verses:
        return f"{surah.number}. {surah.name} (complete)"
    return f"{surah.number}. {surah.name} {ayah_from}-{ayah_to}"
