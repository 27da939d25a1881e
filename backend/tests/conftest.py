"""Pytest fixtures for backend tests."""
import fnmatch
from typing import Any, Generator, Sequence

import pytest
from fastapi.testclient import TestClient

from phaseslot.logic.grid import build_symbol_weights
from phaseslot.logic.models import Symbol
from phaseslot.logic.phase import Phase
from phaseslot.logic.rng import RNGBase
from phaseslot.main import app
from phaseslot.redis_service import RedisService


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (run full simulations)"
    )


class MockRedis:
    """Mock Redis client for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self._last_set_ex: int | None = None

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(
        self, key: str, value: str, nx: bool = False, ex: int | None = None
    ) -> bool | None:
        if nx and key in self._store:
            return None
        self._store[key] = value
        self._last_set_ex = ex
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._store[key] = value
        return True

    async def delete(self, key: str) -> int:
        if key in self._store:
            del self._store[key]
            return 1
        return 0

    async def scan_iter(self, match: str | None = None):
        for key in list(self._store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def eval(self, script: str, numkeys: int, *args) -> int:
        """Compare-and-delete, matching RELEASE_LOCK_SCRIPT."""
        key = args[0]
        expected_value = args[1]
        if self._store.get(key) == expected_value:
            del self._store[key]
            return 1
        return 0

    async def close(self) -> None:
        pass

    def clear(self) -> None:
        self._store.clear()
        self._last_set_ex = None


class RecordingTelemetrySink:
    """Telemetry sink that keeps every event for assertions."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    def get_events(self, event_name: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_name]


class ScriptedRNG(RNGBase):
    """RNG that replays a fixed list of floats."""

    def __init__(self, values: Sequence[float]):
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        if self._index >= len(self._values):
            raise AssertionError("ScriptedRNG exhausted")
        value = self._values[self._index]
        self._index += 1
        return value


def draws_for_symbols(symbols: Sequence[Symbol], phase: Phase) -> list[float]:
    """
    Floats that make pick_weighted return each symbol in turn.

    Each float lands in the middle of the symbol's slice of the
    cumulative weight range for the phase.
    """
    weights = build_symbol_weights(phase)
    total = sum(w for _, w in weights)
    draws = []
    for symbol in symbols:
        start = 0
        for value, weight in weights:
            if value == symbol:
                if weight == 0:
                    raise ValueError(f"{symbol} has zero weight in {phase}")
                draws.append((start + weight / 2) / total)
                break
            start += weight
    return draws


def rng_for_grid(rows: Sequence[Sequence[Symbol]], phase: Phase) -> ScriptedRNG:
    """ScriptedRNG that makes generate_grid produce exactly ``rows``."""
    flat = [symbol for row in rows for symbol in row]
    return ScriptedRNG(draws_for_symbols(flat, phase))


# Grid with a single cat line on top and no other wins in any phase
TOP_CAT_GRID = (
    (Symbol.CAT, Symbol.CAT, Symbol.CAT),
    (Symbol.DOG, Symbol.BIRD, Symbol.DOG),
    (Symbol.BIRD, Symbol.DOG, Symbol.ALLIGATOR),
)

NO_WIN_GRID = (
    (Symbol.CAT, Symbol.DOG, Symbol.BIRD),
    (Symbol.DOG, Symbol.BIRD, Symbol.CAT),
    (Symbol.CAT, Symbol.ALLIGATOR, Symbol.DOG),
)


@pytest.fixture
def mock_redis() -> MockRedis:
    """Create a fresh mock Redis for each test."""
    return MockRedis()


@pytest.fixture
def redis_service_with_mock(mock_redis: MockRedis) -> Generator[RedisService, None, None]:
    """Create RedisService with mock client."""
    service = RedisService()
    service._client = mock_redis
    yield service
    mock_redis.clear()


@pytest.fixture
def fixed_clock(monkeypatch: pytest.MonkeyPatch) -> dict[str, int]:
    """
    Freeze the server clock.

    Tests move time by assigning clock["now"].
    """
    clock = {"now": 1_700_000_000_000}
    monkeypatch.setattr("phaseslot.main.now_ms", lambda: clock["now"])
    return clock


@pytest.fixture
def client_with_mock_redis(
    mock_redis: MockRedis, fixed_clock: dict[str, int]
) -> Generator[TestClient, None, None]:
    """Create TestClient with mocked Redis and frozen clock."""
    from phaseslot.redis_service import redis_service

    original_client = redis_service._client
    redis_service._client = mock_redis

    with TestClient(app) as client:
        yield client

    redis_service._client = original_client
    mock_redis.clear()


@pytest.fixture
def recording_telemetry() -> Generator[RecordingTelemetrySink, None, None]:
    """Swap the global telemetry sink for a recording one."""
    from phaseslot.telemetry import telemetry_service

    original_sink = telemetry_service.sink
    sink = RecordingTelemetrySink()
    telemetry_service.set_sink(sink)
    yield sink
    telemetry_service.set_sink(original_sink)


@pytest.fixture
def client_with_recording_telemetry(
    client_with_mock_redis: TestClient,
    recording_telemetry: RecordingTelemetrySink,
    mock_redis: MockRedis,
) -> tuple[TestClient, RecordingTelemetrySink, MockRedis]:
    """TestClient plus the telemetry recorder and the Redis mock behind it."""
    return client_with_mock_redis, recording_telemetry, mock_redis


@pytest.fixture
def script_engine(monkeypatch: pytest.MonkeyPatch):
    """
    Return a function that scripts the app engine's next grid.

    Usage: script_engine(rows, phase)
    """
    from phaseslot.main import engine

    def _script(rows: Sequence[Sequence[Symbol]], phase: Phase) -> None:
        monkeypatch.setattr(engine, "rng", rng_for_grid(rows, phase))

    return _script
