import asyncio
from typing import Any

import pytest

from crisis_alerts.alerts.coordinator import AlertCoordinator
from crisis_alerts.schemas.alert import CrisisContext


class FakeBoundary:
    """Records payloads and replies with a canned response or raises."""

    def __init__(self, response: Any = None, error: Exception | None = None):
        self.response = response if response is not None else {"email": {"id": "email-1"}, "sms": None}
        self.error = error
        self.payloads: list[dict] = []
        self.release: asyncio.Event | None = None

    async def dispatch(self, payload: dict) -> dict:
        self.payloads.append(payload)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.response


class FakeMessage:
    def __init__(self, sid: str, status: str = "queued"):
        self.sid = sid
        self.status = status


class FakeMessages:
    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.sent: list[dict] = []

    def create(self, body: str, from_: str, to: str) -> FakeMessage:
        if to in self.failing:
            raise RuntimeError(f"Unable to create record: {to} is not reachable")
        self.sent.append({"body": body, "from_": from_, "to": to})
        return FakeMessage(sid=f"SM{len(self.sent):03d}")


class FakeAccount:
    def __init__(self, client: "FakeTwilioClient"):
        self.client = client

    def fetch(self):
        self.client.fetch_calls += 1
        if self.client.verify_error is not None:
            raise self.client.verify_error
        return {"status": "active"}


class FakeApi:
    def __init__(self, client: "FakeTwilioClient"):
        self.client = client

    def accounts(self, sid: str) -> FakeAccount:
        return FakeAccount(self.client)


class FakeTwilioClient:
    def __init__(self, failing: set[str] | None = None, verify_error: Exception | None = None):
        self.messages = FakeMessages(failing)
        self.api = FakeApi(self)
        self.verify_error = verify_error
        self.fetch_calls = 0


@pytest.fixture
def context() -> CrisisContext:
    return CrisisContext(crisis_type="drought", region_name="Maharashtra", severity="high")


@pytest.fixture
def boundary() -> FakeBoundary:
    return FakeBoundary()


@pytest.fixture
def coordinator(context, boundary) -> AlertCoordinator:
    coordinator = AlertCoordinator(context, boundary)
    coordinator.forms.set_email_value("ops@example.org")
    return coordinator
