import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'nexus' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("USE_LOCAL_DB", "0")
os.environ.setdefault("JWT_SECRET", "test-secret")


@pytest.fixture()
def app():
    # lazy import after env configured; a fresh app means fresh in-memory stores
    from nexus.main import create_app

    return create_app()


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client):
    """Register a user and return (user_json, auth_header, token)."""
    counter = {"n": 0}

    def _register(role="entrepreneur", first_name="Ada", last_name="Lovelace", email=None, password="secret123"):
        counter["n"] += 1
        body = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email or f"user{counter['n']}@example.com",
            "password": password,
            "role": role,
        }
        r = client.post("/api/auth/register", json=body)
        assert r.status_code == 200, r.text
        data = r.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}, data["token"]

    return _register
