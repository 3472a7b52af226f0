# Make the catalog service modules ("main", "repo") importable and point
# them at a throwaway SQLite database before they are imported.
import os
import sys
import tempfile
from pathlib import Path

import pytest

SERVICE_DIR = Path(__file__).resolve().parent.parent
if str(SERVICE_DIR) not in sys.path:
    sys.path.insert(0, str(SERVICE_DIR))

_TMP = tempfile.mkdtemp(prefix="catalog-tests-")
os.environ.setdefault("CATALOG_DATABASE_URL", f"sqlite:///{_TMP}/catalog.db")


@pytest.fixture()
def api():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:  # runs the startup hook (schema + seed)
        yield c
