# tests/conftest.py
import os
import tempfile

# Settings and the engine are built at import time, so the test database and
# environment must be in place before anything from meetingpulse is imported.
_DB_DIR = tempfile.mkdtemp(prefix="meetingpulse-tests-")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_DB_DIR}/meetingpulse_test.db")
os.environ.pop("INTERNAL_API_KEY", None)
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from meetingpulse.main import create_app  # noqa: E402


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Shared TestClient fixture for all API tests.

    Startup creates the schema; tests use unique identifiers so they do not
    depend on each other's rows.
    """
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
