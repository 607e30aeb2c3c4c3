"""
Shared pytest fixtures for Scooked tests.

This module provides common fixtures including:
- ManualClock: Deterministic clock whose sleeps wake only when time advances
- RecordingPresenter: Captures ticks, state changes and log lines
- InMemoryDocumentStore: Shared session document with change fan-out
- Redis mocks for gateway tests
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from scooked.errors import PersistenceError, SubscriptionError
from scooked.modules.retry import RetryExecutor
from scooked.modules.session import SessionManager
from scooked.modules.store import SessionRecord


async def settle(rounds: int = 10) -> None:
    """Let ready tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# =============================================================================
# Clock
# =============================================================================

class ManualClock:
    """
    Clock under test control.

    In the default mode sleep() suspends until advance() moves time past the
    wake-up point, so tick loops fire exactly when the test says. With
    auto_advance=True every sleep moves time forward immediately, which suits
    code that only needs its delays recorded.
    """

    def __init__(self, now_ms: int = 0, auto_advance: bool = False):
        self._now = now_ms
        self.auto_advance = auto_advance
        self.sleeps: List[float] = []
        self._sleepers: List[Tuple[int, asyncio.Future]] = []

    def now_ms(self) -> int:
        return self._now

    def set(self, now_ms: int) -> None:
        """Jump to now_ms without waking sleepers (a throttled tab)."""
        self._now = now_ms

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        delay_ms = int(round(seconds * 1000))
        if self.auto_advance:
            self._now += delay_ms
            await asyncio.sleep(0)
            return
        if delay_ms <= 0:
            await asyncio.sleep(0)
            return
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self._now + delay_ms, future))
        await future

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, future in self._sleepers if not future.done())

    async def advance(self, ms: int) -> None:
        """Move time forward by ms, waking each sleeper at its own instant."""
        await settle()
        target = self._now + ms
        while True:
            due = [(wake, f) for wake, f in self._sleepers if wake <= target and not f.done()]
            if not due:
                break
            wake = min(w for w, _ in due)
            self._now = max(self._now, wake)
            for entry in list(self._sleepers):
                entry_wake, future = entry
                if entry_wake <= self._now:
                    self._sleepers.remove(entry)
                    if not future.done():
                        future.set_result(None)
            await settle()
        self._sleepers = [(w, f) for w, f in self._sleepers if not f.done()]
        self._now = target
        await settle()


# =============================================================================
# Presenter
# =============================================================================

class RecordingPresenter:
    """Presenter that records everything it is told."""

    def __init__(self):
        self.ticks: List[int] = []
        self.states: List[Tuple[Any, Any]] = []
        self.logs: List[Tuple[str, Any]] = []

    def on_tick(self, remaining_seconds):
        self.ticks.append(remaining_seconds)

    def on_state_change(self, state, reason=None):
        self.states.append((state, reason))

    def on_log(self, message, severity):
        self.logs.append((message, severity))

    def messages(self, severity=None) -> List[str]:
        return [m for m, s in self.logs if severity is None or s == severity]


# =============================================================================
# In-memory session store
# =============================================================================

class InMemorySubscription:
    def __init__(self, backend: "InMemoryDocumentStore", on_change, on_error):
        self.backend = backend
        self.on_change = on_change
        self.on_error = on_error
        self.active = True
        self.unsubscribe_calls = 0

    async def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        self.active = False


class InMemoryDocumentStore:
    """
    One remote document shared by every gateway built on it.

    Writes fan out synchronously to all live subscriptions, the way a remote
    store pushes a snapshot to every observer of the path.
    """

    def __init__(self):
        self.document: Optional[Dict[str, int]] = None
        self.subscriptions: List[InMemorySubscription] = []
        self.puts: List[SessionRecord] = []
        self.put_attempts = 0
        self.clears = 0
        self.clear_attempts = 0
        self.fail_puts = 0
        self.fail_clears = 0

    def gateway(self) -> "InMemorySessionStore":
        return InMemorySessionStore(self)

    def snapshot(self) -> Optional[SessionRecord]:
        return SessionRecord.from_document(self.document)

    def notify(self) -> None:
        record = self.snapshot()
        for subscription in list(self.subscriptions):
            if subscription.active:
                subscription.on_change(record)

    def break_subscriptions(self, error: SubscriptionError) -> None:
        for subscription in list(self.subscriptions):
            if subscription.active:
                subscription.active = False
                subscription.on_error(error)


class InMemorySessionStore:
    """SessionStoreGateway backed by an InMemoryDocumentStore."""

    def __init__(self, backend: InMemoryDocumentStore):
        self.backend = backend

    async def put(self, record: SessionRecord) -> None:
        self.backend.put_attempts += 1
        if self.backend.fail_puts > 0:
            self.backend.fail_puts -= 1
            raise PersistenceError("simulated write failure")
        self.backend.document = record.to_document()
        self.backend.puts.append(record)
        self.backend.notify()

    async def clear_end_time(self) -> None:
        self.backend.clear_attempts += 1
        if self.backend.fail_clears > 0:
            self.backend.fail_clears -= 1
            raise PersistenceError("simulated clear failure")
        if self.backend.document is not None:
            self.backend.document.pop("endTime", None)
        self.backend.clears += 1
        self.backend.notify()

    async def fetch(self) -> Optional[SessionRecord]:
        return self.backend.snapshot()

    async def subscribe(self, on_change, on_error) -> InMemorySubscription:
        subscription = InMemorySubscription(self.backend, on_change, on_error)
        self.backend.subscriptions.append(subscription)
        on_change(self.backend.snapshot())
        return subscription


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    return ManualClock(now_ms=0)


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def backend():
    return InMemoryDocumentStore()


@pytest.fixture
def retry(clock):
    """Retry executor with zero base delay so manager tests never block on backoff."""
    return RetryExecutor(clock, max_attempts=3, delay_ms=0)


@pytest_asyncio.fixture
async def manager(clock, presenter, retry):
    """Offline session manager; tests attach a store when they need one."""
    session_manager = SessionManager(clock=clock, presenter=presenter, retry=retry)
    yield session_manager
    await session_manager.close()


@pytest_asyncio.fixture
async def online_manager(manager, backend):
    """Session manager attached to the in-memory store."""
    await manager.attach(backend.gateway())
    return manager


@pytest.fixture
def mock_redis():
    """Create a mock async Redis client with pipeline and pub/sub support."""
    redis = AsyncMock()
    redis.hgetall = AsyncMock(return_value={})

    pipeline = MagicMock()
    pipeline.execute = AsyncMock(return_value=[])
    redis.pipeline = MagicMock(return_value=pipeline)

    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()
    redis.pubsub = MagicMock(return_value=pubsub)

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
