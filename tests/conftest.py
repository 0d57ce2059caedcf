"""
Pytest configuration and shared fixtures.
"""
import json
from dataclasses import replace
from typing import Any, Callable, List, Optional

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from econ_ingest.core.api_registry import SOURCE_REGISTRY, SourceConfig
from econ_ingest.core.config import reset_settings
from econ_ingest.core.models import Base
from econ_ingest.sources.registry import build_default_registry


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    env_vars = [
        "DATABASE_URL",
        "FRED_API_KEY",
        "ALPHA_VANTAGE_API_KEY",
        "BLS_API_KEY",
        "RAPIDAPI_KEY",
        "FINNHUB_API_KEY",
        "FMP_API_KEY",
        "FINANCIAL_MODELING_PREP_API_KEY",
        "SEC_USER_AGENT",
        "MAX_CONCURRENCY",
        "MAX_RETRIES",
        "RETRY_BACKOFF_FACTOR",
        "HTTP_TIMEOUT_SECONDS",
        "SCHEDULER_ENABLED",
        "SCHEDULER_TIMEZONE",
        "SYNC_JOB_TIMEOUT_SECONDS",
        "SYNC_MAX_RETRIES",
        "SYNC_RETRY_DELAY_SECONDS",
        "LOG_LEVEL",
        "RUN_INTEGRATION_TESTS",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    # Reset settings singleton
    reset_settings()

    yield

    # Reset again after test
    reset_settings()


def _memory_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    Fresh database for each test.
    """
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over one shared in-memory database."""
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def make_config():
    """Build a SourceConfig from the registry with an optional key."""

    def _make(source: str, api_key: Optional[str] = None, **overrides: Any) -> SourceConfig:
        values = {"api_key": api_key, "timeout_seconds": 5.0}
        values.update(overrides)
        return replace(SOURCE_REGISTRY[source], **values)

    return _make


class RecordingTransport:
    """
    httpx.MockTransport wrapper that records requests.

    handler receives the httpx.Request and returns either an httpx.Response
    or a JSON-serializable payload (served with status 200).
    """

    def __init__(self, handler: Callable[[httpx.Request], Any]):
        self.requests: List[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self._handler(request)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, content=json.dumps(result).encode(),
                              headers={"Content-Type": "application/json"})


@pytest.fixture
def mock_http():
    """Factory for RecordingTransport instances."""

    def _make(handler: Callable[[httpx.Request], Any]) -> RecordingTransport:
        return RecordingTransport(handler)

    return _make


@pytest.fixture
def build_adapter(registry, make_config):
    """
    Build and initialize an adapter whose HTTP traffic goes to a mock transport.

    Usage:
        adapter, transport = await build_adapter(FREDAdapter, handler, api_key="k")
    """

    async def _build(adapter_cls, handler, api_key: Optional[str] = "test-key", **config_overrides):
        transport = RecordingTransport(handler)
        config = make_config(adapter_cls.SOURCE, api_key=api_key, **config_overrides)
        adapter = adapter_cls(
            config,
            registry,
            http_options={"transport": transport.transport, "max_retries": 1},
        )
        await adapter.initialize()
        return adapter, transport

    return _build
