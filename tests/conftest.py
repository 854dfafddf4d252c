"""
Shared pytest fixtures for all test modules.

No test talks to the real API: result reads go through ScriptedFetcher and
HTTP tests patch HttpClient.request_session with a mock aiohttp session.
"""

import os

# Keep a developer's .env / shell key from leaking into "missing key" tests.
os.environ.pop("REALITY_DEFENDER_API_KEY", None)

import pytest

from realitydefender.config import Settings
from realitydefender.detection.pagination import PaginatedResultsPoller
from realitydefender.detection.polling import PollingEngine
from realitydefender.integrations.http_client import HttpClient
from tests.mocks.api_mock import FakeClock, ManualScheduler, RecordingWait


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, api_key="test-key", base_url="https://api.test")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recording_wait(clock):
    return RecordingWait(clock)


@pytest.fixture
def manual_scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def make_engine(clock, recording_wait, manual_scheduler):
    """Engine factory over a scripted fetcher, with a fake clock and no real sleeping."""

    def _make(fetcher, **kwargs):
        kwargs.setdefault("scheduler", manual_scheduler)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("wait", recording_wait)
        return PollingEngine(fetcher, **kwargs)

    return _make


@pytest.fixture
def make_pager(recording_wait):
    def _make(fetcher, **kwargs):
        kwargs.setdefault("wait", recording_wait)
        return PaginatedResultsPoller(fetcher.fetch_page, **kwargs)

    return _make


@pytest.fixture
def http(test_settings):
    return HttpClient(test_settings)
