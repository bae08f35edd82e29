from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from kaamkar.main import app


def _register() -> dict[str, str]:
    res = TestClient(app).post(
        "/api/v1/auth/register",
        json={"email": f"user-{uuid4().hex[:12]}@example.com", "password": "Secret123!", "fullName": "Test User"},
    )
    assert res.status_code == 201
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def headers() -> dict[str, str]:
    return _register()


@pytest.fixture
def other_headers() -> dict[str, str]:
    return _register()
