# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("API_TOKEN", "test-owner-token")
os.environ.setdefault("HEARTBEAT_INTERVAL_SECONDS", "30")

from ideas_hub.api.v1 import dependencies
from ideas_hub.core.settings import Settings, settings
from ideas_hub.main import app as fastapi_app
from ideas_hub.services.broadcaster import Broadcaster
from ideas_hub.services.ideas import IdeaStore

OWNER_TOKEN = "test-owner-token"


class RecordingSink:
    """Write callable that records every message it receives."""

    def __init__(self) -> None:
        self.messages: list = []

    def __call__(self, message) -> None:
        self.messages.append(message)

    @property
    def kinds(self) -> list[str]:
        return [message.kind for message in self.messages]


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest.fixture()
def store(broadcaster: Broadcaster) -> IdeaStore:
    """A fresh store wired to the test broadcaster."""
    return IdeaStore(emit=broadcaster.publish)


@pytest.fixture()
def test_settings() -> Settings:
    """Settings with a known owner token and default access rules."""
    return settings.model_copy(
        update={"api_token": OWNER_TOKEN, "public_likes": True, "public_comments": False}
    )


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    store: IdeaStore,
    broadcaster: Broadcaster,
    test_settings: Settings,
) -> Iterator[None]:
    overrides = {
        dependencies.get_idea_store_dep: lambda: store,
        dependencies.get_broadcaster_dep: lambda: broadcaster,
        dependencies.get_settings_dep: lambda: test_settings,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def owner_token() -> str:
    return OWNER_TOKEN


@pytest.fixture()
def owner_headers(owner_token: str) -> dict[str, str]:
    """Authorization headers for the owner."""
    return {"Authorization": f"Bearer {owner_token}"}


@pytest.fixture()
def sink(broadcaster: Broadcaster) -> RecordingSink:
    """A subscriber registered on the test broadcaster."""
    recorder = RecordingSink()
    broadcaster.subscribe(recorder)
    return recorder


@pytest.fixture()
def idea(store: IdeaStore):
    """A baseline idea created directly in the store."""
    return store.create({"title": "EURUSD breakout", "symbol": "eurusd", "take": "Long above 1.10"})
