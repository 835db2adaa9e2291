"""
Pytest configuration and shared fixtures for Alice Mirror tests.
"""
from typing import Optional

import httpx
import pytest
from prometheus_client import CollectorRegistry

from core.config.settings import AliceSettings, RetrySettings, Settings
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from services.alice.fetcher import ResilientFetcher
from services.alice.models import RetryPolicy
from tests.mocks.mock_alice_api import SID_URL, ScriptedTransport, SleepRecorder


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def metrics():
    """Metrics collector on an isolated registry."""
    return AliceMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def make_fetcher(sleep_recorder, metrics):
    """Factory for a ResilientFetcher driven by scripted responses."""
    def _make(transport: ScriptedTransport, policy: Optional[RetryPolicy] = None) -> ResilientFetcher:
        return ResilientFetcher(
            timeout=1.0,
            policy=policy or RetryPolicy(),
            transport=httpx.MockTransport(transport),
            sleep=sleep_recorder,
            metrics=metrics,
        )
    return _make


@pytest.fixture
def make_alice_settings(tmp_path):
    """AliceSettings isolated from the working directory's token file."""
    def _make(**overrides) -> AliceSettings:
        values = {
            "sid_endpoint": SID_URL,
            "oauth_token_file": str(tmp_path / "missing.token"),
            "retry": RetrySettings(max_attempts=3, initial_backoff_ms=500),
        }
        values.update(overrides)
        return AliceSettings(**values)
    return _make


@pytest.fixture
def make_settings(make_alice_settings):
    """Full Settings with the given alice overrides, ignoring any .env file."""
    def _make(environment: str = "testing", **alice_overrides) -> Settings:
        return Settings(
            _env_file=None,
            environment=environment,
            alice=make_alice_settings(**alice_overrides),
        )
    return _make
