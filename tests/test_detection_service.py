"""
Facade tests for realitydefender/services/detection_service.py.

The uploader is a MagicMock; the engine and pager are real, driven by a
scripted fetcher with waits recorded instead of slept.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from realitydefender.core.errors import DetectionTimeoutError, FetchFailedError
from realitydefender.detection.polling import PollConfig
from realitydefender.schemas.results import GetResultsOptions
from realitydefender.schemas.upload import UploadResponse
from realitydefender.services.detection_service import DetectionService
from tests.mocks.api_mock import ScriptedFetcher, page, snapshot


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def uploader():
    mock = MagicMock()
    mock.upload.return_value = UploadResponse(request_id="req-1", media_id="m-1")
    mock.upload_social_media.return_value = UploadResponse(request_id="req-1")
    return mock


@pytest.fixture
def make_service(make_engine, make_pager, uploader, test_settings, executor):
    def _make(fetcher):
        engine = make_engine(
            fetcher,
            executor=executor,
            default_config=PollConfig(polling_interval=0, max_attempts=3),
        )
        return DetectionService(uploader, engine, make_pager(fetcher), test_settings)

    return _make


def test_detect_file_uploads_then_polls(make_service, uploader):
    fetcher = ScriptedFetcher(snapshot("PROCESSING"), snapshot("MANIPULATED", score=0.8))
    service = make_service(fetcher)

    result = service.detect_file("photo.jpg")

    assert result.status == "MANIPULATED"
    uploader.upload.assert_called_once_with("photo.jpg")
    assert fetcher.calls == ["req-1", "req-1"]


def test_upload_failure_skips_polling(make_service, uploader):
    uploader.upload.side_effect = FetchFailedError("File too large to upload: big.mp4", "FILE_TOO_LARGE")
    fetcher = ScriptedFetcher(snapshot("AUTHENTIC"))
    service = make_service(fetcher)

    with pytest.raises(FetchFailedError) as exc:
        service.detect_file("big.mp4")

    assert exc.value.code == "FILE_TOO_LARGE"
    assert fetcher.calls == []


def test_detect_social_media(make_service, uploader):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))

    assert service.detect_social_media("https://x.com/a/status/1").status == "AUTHENTIC"
    uploader.upload_social_media.assert_called_once_with("https://x.com/a/status/1")


def test_detect_file_async_future_carries_timeout(make_service):
    service = make_service(ScriptedFetcher(snapshot("PROCESSING")))

    future = service.detect_file_async("photo.jpg")

    with pytest.raises(DetectionTimeoutError):
        future.result(timeout=5)


def test_check_status_is_single_fetch(make_service):
    fetcher = ScriptedFetcher(snapshot("PROCESSING"))
    service = make_service(fetcher)

    assert service.check_status("req-1").status == "PROCESSING"
    assert len(fetcher.calls) == 1


# ---------------------------------------------------------------------------
# Budget resolution
# ---------------------------------------------------------------------------


def test_both_budgets_rejected(make_service):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))
    with pytest.raises(ValueError):
        service.get_result("req-1", polling_interval=1, max_attempts=3, max_duration=10)


def test_no_arguments_uses_engine_default(make_service):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))
    assert service.poll_config() is service.engine.default_config


def test_duration_budget_resolves_to_attempts(make_service):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))
    assert service.poll_config(polling_interval=2, max_duration=10).max_attempts == 5


def test_attempt_budget_uses_configured_interval(make_service, test_settings):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))
    config = service.poll_config(max_attempts=7)
    assert config.max_attempts == 7
    assert config.polling_interval == test_settings.polling_interval_sec


def test_get_result_with_duration_bound(make_service):
    fetcher = ScriptedFetcher(snapshot("ANALYZING"))
    service = make_service(fetcher)

    with pytest.raises(DetectionTimeoutError):
        service.get_result("req-1", polling_interval=2, max_duration=4)
    assert len(fetcher.calls) == 2


# ---------------------------------------------------------------------------
# Listing and callbacks
# ---------------------------------------------------------------------------


def test_get_results_delegates_to_pager(make_service):
    listing = page("AUTHENTIC")
    service = make_service(ScriptedFetcher(listing))

    assert service.get_results(GetResultsOptions(page_number=1)) is listing


def test_get_results_async(make_service):
    service = make_service(ScriptedFetcher(page("AUTHENTIC", "MANIPULATED")))

    result = service.get_results_async().result(timeout=5)
    assert len(result.items) == 2


def test_poll_for_results_uses_configured_defaults(make_service, manual_scheduler):
    service = make_service(ScriptedFetcher(snapshot("AUTHENTIC")))
    on_result, on_error = MagicMock(), MagicMock()

    service.poll_for_results("req-1", None, None, on_result, on_error)
    manual_scheduler.run_all()

    on_result.assert_called_once()
    on_error.assert_not_called()
