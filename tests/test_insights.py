"""Headline statistics for the active subset."""

import pytest

from firecore.insights import compute_insights
from firecore.payloads import STATUS_INSUFFICIENT, STATUS_OK


def test_headline_numbers(frame):
    out = compute_insights(frame)
    assert out["status"] == STATUS_OK
    assert out["total"] == 3
    assert out["human_count"] == 2
    assert out["human_share"] == pytest.approx(2 / 3)
    assert out["top_month"] == "Jul"


def test_location_tie_resolves_to_first_seen(frame):
    assert compute_insights(frame)["top_location"] == "CA"


def test_month_tie_resolves_to_first_seen(frame_of, make_row):
    df = frame_of([make_row(month=m) for m in ("Mar", "Jul", "Jul", "Mar")])
    assert compute_insights(df)["top_month"] == "Mar"


def test_empty_subset_is_insufficient(frame):
    out = compute_insights(frame.iloc[0:0])
    assert out["status"] == STATUS_INSUFFICIENT
    assert out["total"] == 0
    assert out["human_share"] is None
    assert out["top_month"] is None
    assert out["top_location"] is None


def test_all_natural(frame_of, make_row):
    out = compute_insights(frame_of([make_row(cause="Lightning"), make_row(cause=None)]))
    assert out["human_share"] == 0.0
