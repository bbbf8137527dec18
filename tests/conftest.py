"""Shared test fixtures for the processlink test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from processlink.async_client import AsyncProcessLinkClient
from processlink.config import ProcessLinkConfig
from processlink.credentials import StaticSecretProvider
from processlink.models import StatusEvent
from processlink.transport import AsyncUploadTransport

TEST_API_KEY = "pl_test_key_abcd1234"
TEST_SITE_ID = "site-42"


class FakeHandle:
    """Timer handle recorded by :class:`FakeScheduler`."""

    def __init__(self, delay: float, callback: Callable[..., Any], args: tuple) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback(*self.args)


class FakeScheduler:
    """Scheduler that records delayed calls instead of running them."""

    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(delay, callback, args)
        self.handles.append(handle)
        return handle


@pytest.fixture
def config() -> ProcessLinkConfig:
    """Default test configuration pointing at a local endpoint."""
    return ProcessLinkConfig(site_id=TEST_SITE_ID, api_url="https://files.test/api/upload")


@pytest.fixture
def secrets() -> StaticSecretProvider:
    return StaticSecretProvider(TEST_API_KEY)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def events() -> list[StatusEvent]:
    """Collects every status event published during a test."""
    return []


@pytest.fixture
def make_client(config, secrets, scheduler, events):
    """Factory for a client whose network is an ``httpx.MockTransport``."""

    def _make(handler, **overrides) -> AsyncProcessLinkClient:
        transport = AsyncUploadTransport(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        return AsyncProcessLinkClient(
            overrides.pop("config", config),
            overrides.pop("secrets", secrets),
            on_status=events.append,
            scheduler=scheduler,
            transport=transport,
            **overrides,
        )

    return _make
