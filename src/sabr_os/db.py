"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".sabr_os" / "sabr.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);

CREATE TABLE IF NOT EXISTS memorized_ranges (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    surah_number INTEGER NOT NULL,
    ayah_from INTEGER NOT NULL,
    ayah_to INTEGER NOT NULL,
    memorized_date TEXT,
    last_revised_date TEXT,
    next_revision_date TEXT,
    quality_rating INTEGER,
    repetition_count INTEGER DEFAULT 0,
    current_interval_days INTEGER DEFAULT 0,
    ease_factor REAL DEFAULT 2.5,
    tajweed_notes TEXT DEFAULT '',
    tafsir_notes TEXT DEFAULT '',
    is_solid INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS revision_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    range_id INTEGER NOT NULL REFERENCES memorized_ranges(id) ON DELETE CASCADE,
    quality_rating INTEGER NOT NULL,
    revised_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS prayer_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    day TEXT NOT NULL,
    prayer TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'none',
    sunnah_before INTEGER DEFAULT 0,
    sunnah_after INTEGER DEFAULT 0,
    khushu INTEGER DEFAULT 3,
    notes TEXT DEFAULT '',
    UNIQUE(day, prayer)
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
