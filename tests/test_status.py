"""Unit tests for realitydefender/detection/status.py."""

import pytest

from realitydefender.detection.status import (
    DetectionStatus,
    is_analyzing,
    is_transient,
    normalize_status,
)


def test_fake_is_normalized_to_manipulated():
    assert normalize_status("FAKE") == "MANIPULATED"


def test_null_status_becomes_unknown():
    assert normalize_status(None) == "UNKNOWN"


@pytest.mark.parametrize("raw", ["AUTHENTIC", "COMPLETED", "SOMETHING_NEW", "fake"])
def test_other_values_pass_through_unchanged(raw):
    assert normalize_status(raw) == raw


def test_enum_member_normalizes_to_its_value():
    assert normalize_status(DetectionStatus.ANALYZING) == "ANALYZING"


@pytest.mark.parametrize("status", ["QUEUED", "PROCESSING", "ANALYZING", "UNKNOWN", "processing", None])
def test_transient_statuses(status):
    assert is_transient(status) is True


@pytest.mark.parametrize("status", ["MANIPULATED", "AUTHENTIC", "COMPLETED", "FAILED", "FAKE", "WHATEVER"])
def test_terminal_statuses(status):
    assert is_transient(status) is False


def test_only_analyzing_holds_a_page_back():
    assert is_analyzing("ANALYZING")
    assert is_analyzing("analyzing")
    assert not is_analyzing("PROCESSING")
    assert not is_analyzing("QUEUED")
    assert not is_analyzing(None)
