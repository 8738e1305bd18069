"""Shared fixtures for the landing service tests."""

import asyncio
from dataclasses import replace
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from landing_service.app import create_app
from landing_service.shared.config import Settings
from landing_service.shared.contact.errors import NotificationError
from landing_service.shared.contact.notifier import NotificationMessage


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeNotifier:
    """Records messages; fails when given an error, hangs when given a gate."""

    def __init__(self, error: Optional[str] = None, gate: Optional[asyncio.Event] = None):
        self.error = error
        self.gate = gate
        self.sent: List[NotificationMessage] = []

    async def send(self, message: NotificationMessage) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise NotificationError(self.error)
        self.sent.append(message)


VALID_CONTACT = {
    "name": "A",
    "email": "a@b.com",
    "subject": "S",
    "message": "M",
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    assets = tmp_path / "public"
    assets.mkdir()
    return Settings(
        submissions_file=tmp_path / "data" / "submissions.json",
        assets_dir=assets,
        notify_enabled=False,
    )


@pytest.fixture
def notify_settings(settings):
    return replace(
        settings,
        notify_enabled=True,
        smtp_user="site@example.com",
        smtp_password="secret",
        contact_to="owner@example.com",
        notify_timeout_seconds=1.0,
    )


@pytest.fixture
def client(settings, clock):
    app = create_app(settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def contact_payload():
    return dict(VALID_CONTACT)


@pytest.fixture
def fake_notifier():
    """Factory for FakeNotifier instances."""
    return FakeNotifier
