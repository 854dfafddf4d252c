"""
Wire-model tests: status fallback, score derivation and NOT_APPLICABLE
filtering on realitydefender/schemas.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from realitydefender.schemas import (
    DetectionResult,
    DetectionResultList,
    GetResultsOptions,
    ModelResult,
    ResultSnapshot,
)


def _document(**overrides):
    doc = {
        "requestId": "req-42",
        "name": "photo.jpg",
        "resultsSummary": {"status": "FAKE", "metadata": {"finalScore": 87.5}},
        "models": [
            {"name": "rd-img", "status": "MANIPULATED", "predictionNumber": 0.91},
            {"name": "rd-audio", "status": "NOT_APPLICABLE", "predictionNumber": None},
        ],
    }
    doc.update(overrides)
    return doc


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def test_results_summary_status_wins_and_is_normalized():
    result = DetectionResult.model_validate(_document(overallStatus="AUTHENTIC", status="QUEUED"))
    assert result.status == "MANIPULATED"


def test_overall_status_used_without_summary():
    result = DetectionResult.model_validate(
        _document(resultsSummary=None, overallStatus="AUTHENTIC", status="QUEUED")
    )
    assert result.status == "AUTHENTIC"


def test_flat_status_is_last_fallback():
    result = DetectionResult.model_validate(_document(resultsSummary=None, status="PROCESSING"))
    assert result.status == "PROCESSING"


def test_missing_status_is_unknown():
    result = DetectionResult.model_validate({"requestId": "req-1"})
    assert result.status == "UNKNOWN"


# ---------------------------------------------------------------------------
# Score
# ---------------------------------------------------------------------------


def test_score_derived_from_final_score_percentage():
    assert DetectionResult.model_validate(_document()).score == pytest.approx(0.875)


def test_explicit_score_takes_precedence():
    assert DetectionResult.model_validate(_document(score=0.3)).score == pytest.approx(0.3)


def test_score_absent_without_metadata():
    doc = _document(resultsSummary={"status": "AUTHENTIC"})
    assert DetectionResult.model_validate(doc).score is None


def test_non_numeric_prediction_is_ignored():
    model = ModelResult.model_validate({"name": "m", "status": "AUTHENTIC", "predictionNumber": {"frames": [1]}})
    assert model.confidence is None


# ---------------------------------------------------------------------------
# NOT_APPLICABLE filtering
# ---------------------------------------------------------------------------


def test_summarize_drops_not_applicable_models():
    snap = DetectionResult.model_validate(_document()).summarize()

    assert snap.request_id == "req-42"
    assert snap.status == "MANIPULATED"
    assert [m.name for m in snap.models] == ["rd-img"]
    assert snap.models[0].confidence == pytest.approx(0.91)


def test_snapshot_filters_not_applicable_on_direct_construction():
    snap = ResultSnapshot(
        request_id="r",
        status="AUTHENTIC",
        models=[
            ModelResult(name="a", status="AUTHENTIC"),
            ModelResult(name="b", status="NOT_APPLICABLE"),
        ],
    )
    assert [m.name for m in snap.models] == ["a"]


def test_snapshot_stays_filtered_after_json_round_trip():
    snap = DetectionResult.model_validate(_document()).summarize()
    restored = ResultSnapshot.model_validate_json(snap.model_dump_json(by_alias=True))

    assert restored == snap
    assert all(m.status != "NOT_APPLICABLE" for m in restored.models)


def test_null_models_become_empty_tuple():
    snap = DetectionResult.model_validate(_document(models=None)).summarize()
    assert snap.models == ()


def test_snapshot_is_immutable():
    snap = ResultSnapshot(request_id="r", status="AUTHENTIC")
    with pytest.raises(ValidationError):
        snap.status = "MANIPULATED"


# ---------------------------------------------------------------------------
# Pages and options
# ---------------------------------------------------------------------------


def test_result_list_summarizes_media_list():
    doc = {
        "totalItems": 2,
        "totalPages": 1,
        "currentPage": 0,
        "currentPageItemsCount": 2,
        "mediaList": [
            _document(requestId="a"),
            _document(requestId="b", resultsSummary={"status": "ANALYZING"}),
        ],
    }
    page = DetectionResultList.model_validate(doc).summarize()

    assert page.total_items == 2
    assert [item.request_id for item in page.items] == ["a", "b"]
    assert page.is_settled is False


def test_empty_page_is_settled():
    page = DetectionResultList.model_validate({"mediaList": None}).summarize()
    assert page.items == ()
    assert page.is_settled


def test_options_accept_timedelta_interval():
    options = GetResultsOptions(max_attempts=3, polling_interval=timedelta(milliseconds=500))
    assert options.polling_interval == pytest.approx(0.5)


def test_options_reject_negative_page():
    with pytest.raises(ValidationError):
        GetResultsOptions(page_number=-1)


def test_summary_without_status_falls_back_to_overall_status():
    doc = _document(
        resultsSummary={"metadata": {"finalScore": 50}},
        overallStatus="AUTHENTIC",
        status="QUEUED",
    )
    result = DetectionResult.model_validate(doc)

    assert result.status == "AUTHENTIC"
    assert result.score == pytest.approx(0.5)


def test_explicit_null_overall_status_falls_back_to_flat_status():
    doc = _document(resultsSummary={"status": None}, overallStatus=None, status="FAKE")
    assert DetectionResult.model_validate(doc).status == "MANIPULATED"
