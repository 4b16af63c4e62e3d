import pytest

from sabr_os.models import Location


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_sabr.db")
    return db_path


@pytest.fixture
def london():
    return Location(51.5, -0.12, "Europe/London", "London")
