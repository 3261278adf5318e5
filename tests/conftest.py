from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from forexvolcano.core.config import settings
from forexvolcano.main import create_app
from forexvolcano.store import InMemoryDocumentStore

from tests.fixtures.factories import *


class RecordingBlobHost:
    def __init__(self) -> None:
        self.uploads: dict[str, bytes] = {}

    def upload(self, path: str, payload: bytes) -> str:
        self.uploads[path] = payload
        return f"https://media.example.com/{path}"


@pytest.fixture(scope="function")
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture(scope="function")
def blob_host() -> RecordingBlobHost:
    return RecordingBlobHost()


@pytest.fixture(scope="function")
def client(
    store: InMemoryDocumentStore, blob_host: RecordingBlobHost
) -> Generator[TestClient, None, None]:
    app = create_app(store=store, blob_host=blob_host, configure_logging=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def signed_up_user(
    client: TestClient,
) -> Callable[[str], tuple[str, dict[str, str]]]:
    """Register a user through the API and return its uid and auth headers."""

    def _signed_up_user(
        username: str, password: str = "correct-horse-battery"
    ) -> tuple[str, dict[str, str]]:
        email = f"{username}@example.com"
        r = client.post(
            f"{settings.API_V1_STR}/users/signup",
            json={"email": email, "password": password, "username": username},
        )
        assert r.status_code == 200, r.text
        uid = r.json()["uid"]

        r = client.post(
            f"{settings.API_V1_STR}/login/access-token",
            data={"username": email, "password": password},
        )
        assert r.status_code == 200, r.text
        return uid, {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _signed_up_user
