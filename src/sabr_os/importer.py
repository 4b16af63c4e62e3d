"""Bulk import of memorized ranges from JSON, YAML or CSV files."""
import csv
import json
import logging
from datetime import date
from pathlib import Path

import yaml

from sabr_os.errors import InvalidRange
from sabr_os.memorization import add_memorization

logger = logging.getLogger(__name__)


def read_records(file_path: str) -> list[dict]:
    """Read a list of range records.

    JSON/YAML may be a bare list or ``{"ranges": [...]}``; CSV needs a header row.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(path.read_text())
    elif suffix == ".csv":
        with path.open(newline="") as f:
            return list(csv.DictReader(f))
    else:
        raise ValueError(f"Unsupported file type: {suffix or path.name}")

    if isinstance(data, dict):
        data = data.get("ranges", [])
    if not isinstance(data, list):
        raise ValueError(f"{path.name} does not contain a list of ranges")
    return data


def _parse_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def import_file(db_path: str, file_path: str) -> dict:
    """Import every valid record; invalid ones are skipped and counted."""
    imported = 0
    skipped = []
    for i, record in enumerate(read_records(file_path), 1):
        try:
            add_memorization(
                db_path,
                surah_number=int(record["surah"]),
                ayah_from=int(record["ayah_from"]),
                ayah_to=int(record["ayah_to"]),
                memorized_on=_parse_date(record.get("memorized_date")),
                tajweed_notes=record.get("tajweed_notes") or "",
                tafsir_notes=record.get("tafsir_notes") or "",
            )
            imported += 1
        except (KeyError, TypeError, ValueError, InvalidRange) as e:
            logger.warning("Skipping record %d in %s: %s", i, Path(file_path).name, e)
            skipped.append(i)
    return {"filename": Path(file_path).name, "imported": imported, "skipped": skipped}
