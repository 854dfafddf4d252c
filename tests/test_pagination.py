"""Page listing and settling on realitydefender/detection/pagination.py."""

from datetime import date

import pytest

from realitydefender.core.errors import (
    DetectionTimeoutError,
    FetchFailedError,
    PollingInterruptedError,
)
from realitydefender.schemas.results import GetResultsOptions
from tests.mocks.api_mock import ScriptedFetcher, page, snapshot


def test_single_attempt_returns_page_verbatim(make_pager, recording_wait):
    unsettled = page("ANALYZING", "AUTHENTIC")
    fetcher = ScriptedFetcher(unsettled)
    pager = make_pager(fetcher)

    result = pager.get_results(GetResultsOptions(page_number=2, size=5, name="clip"))

    assert result is unsettled
    assert fetcher.calls == [(2, 5, "clip", None, None)]
    assert recording_wait.pauses == []


def test_defaults_apply_without_options(make_pager):
    fetcher = ScriptedFetcher(page("AUTHENTIC"))
    pager = make_pager(fetcher, default_page_size=25)

    pager.get_results()

    assert fetcher.calls == [(0, 25, None, None, None)]


def test_date_filters_are_forwarded(make_pager):
    fetcher = ScriptedFetcher(page())
    pager = make_pager(fetcher)

    pager.get_results(GetResultsOptions(start_date=date(2024, 1, 1), end_date=date(2024, 2, 1)))

    assert fetcher.calls[0][3:] == (date(2024, 1, 1), date(2024, 2, 1))


def test_refetches_until_no_item_is_analyzing(make_pager, recording_wait):
    fetcher = ScriptedFetcher(
        page("ANALYZING", "AUTHENTIC"),
        page("ANALYZING", "AUTHENTIC"),
        page("COMPLETED", "AUTHENTIC"),
    )
    pager = make_pager(fetcher)

    result = pager.get_results(GetResultsOptions(max_attempts=5, polling_interval=0.5))

    assert [item.status for item in result.items] == ["COMPLETED", "AUTHENTIC"]
    assert len(fetcher.calls) == 3
    assert recording_wait.pauses == [0.5, 0.5]


def test_processing_items_do_not_hold_the_page(make_pager):
    fetcher = ScriptedFetcher(page("PROCESSING", "QUEUED"))
    pager = make_pager(fetcher)

    pager.get_results(GetResultsOptions(max_attempts=3))

    assert len(fetcher.calls) == 1


def test_times_out_when_page_never_settles(make_pager, recording_wait):
    fetcher = ScriptedFetcher(page("ANALYZING"))
    pager = make_pager(fetcher, default_polling_interval=2.0)

    with pytest.raises(DetectionTimeoutError) as exc:
        pager.get_results(GetResultsOptions(max_attempts=3))

    assert len(fetcher.calls) == 3
    assert recording_wait.pauses == [2.0, 2.0]
    assert exc.value.attempts == 3


def test_interrupted_wait(make_pager, recording_wait):
    recording_wait.interrupt_after = 1
    fetcher = ScriptedFetcher(page("ANALYZING"))
    pager = make_pager(fetcher)

    with pytest.raises(PollingInterruptedError):
        pager.get_results(GetResultsOptions(max_attempts=4))
    assert len(fetcher.calls) == 1


def test_fetch_error_propagates_without_retry(make_pager):
    fetcher = ScriptedFetcher(page("ANALYZING"), FetchFailedError("Invalid API key", "UNAUTHORIZED", 401))
    pager = make_pager(fetcher)

    with pytest.raises(FetchFailedError) as exc:
        pager.get_results(GetResultsOptions(max_attempts=5))
    assert exc.value.code == "UNAUTHORIZED"
    assert len(fetcher.calls) == 2


def test_unexpected_error_is_wrapped(make_pager):
    pager = make_pager(ScriptedFetcher(KeyError("mediaList")))

    with pytest.raises(FetchFailedError) as exc:
        pager.get_results()
    assert exc.value.code == "RESULTS_FAILED"


def test_settles_on_the_last_allowed_fetch(make_pager, recording_wait):
    fetcher = ScriptedFetcher(
        page("ANALYZING"),
        page("ANALYZING"),
        page("COMPLETED"),
    )
    pager = make_pager(fetcher)

    result = pager.get_results(GetResultsOptions(max_attempts=3, polling_interval=0.01))

    assert result.items[0].status == "COMPLETED"
    assert result.is_settled
    assert len(fetcher.calls) == 3
    assert len(recording_wait.pauses) == 2


def test_shared_interrupter_wakes_page_polling_once(make_engine, make_pager):
    engine = make_engine(ScriptedFetcher(snapshot("AUTHENTIC")))

    def wait(event, seconds):
        engine.interrupt()
        return event.is_set()

    fetcher = ScriptedFetcher(page("ANALYZING"), page("ANALYZING"), page("AUTHENTIC"))
    pager = make_pager(fetcher, interrupter=engine.interrupter, wait=wait)

    with pytest.raises(PollingInterruptedError):
        pager.get_results(GetResultsOptions(max_attempts=5))

    # a later listing is not affected by the earlier interrupt
    quiet = make_pager(fetcher, interrupter=engine.interrupter)
    assert quiet.get_results().items[0].status == "ANALYZING"
