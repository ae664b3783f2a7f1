import os
import shutil
import tempfile
from pathlib import Path


# Point the global database service at a throwaway SQLite file before any
# catalog_search module is imported.
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="catalog_search_pytest_"))

os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_SESSION_DIR / 'catalog.db'}")
os.environ.setdefault("DEBUG", "false")


def pytest_sessionfinish(session, exitstatus):
    """Cleanup temporary test files after the test session."""
    shutil.rmtree(_SESSION_DIR, ignore_errors=True)
