from __future__ import annotations

import math

import pytest

from pte_api.services.scoring.normalize import (
    aggregate_provider_scores,
    clamp_to_90,
    clamp_to_range,
    scale_to_90,
    weighted_overall,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0),
        (math.nan, 0),
        ("not a number", 0),
        (True, 0),
        (-5, 0),
        (0, 0),
        (45.4, 45),
        (89.5, 90),
        (120, 90),
        ("72", 72),
        (math.inf, 90),
        (-math.inf, 0),
    ],
)
def test_clamp_to_90(value, expected):
    assert clamp_to_90(value) == expected


def test_clamp_to_range_handles_junk_and_bounds():
    assert clamp_to_range(None, 0, 100) == 0.0
    assert clamp_to_range(140, 0, 100) == 100.0
    assert clamp_to_range(-1, 0, 100) == 0.0
    assert clamp_to_range(55.5, 0, 100) == 55.5


def test_weighted_overall_renormalizes_over_present_keys():
    weights = {"content": 0.4, "form": 0.1, "grammar": 0.25, "vocabulary": 0.25}
    # Only content and grammar present: (80*0.4 + 60*0.25) / 0.65 = 72.3
    assert weighted_overall({"content": 80, "grammar": 60}, weights) == 72
    assert weighted_overall({}, weights) == 0
    assert weighted_overall({"unrelated": 50}, weights) == 0


def test_scale_to_90():
    assert scale_to_90(1, 2) == 45
    assert scale_to_90(3, 3) == 90
    assert scale_to_90(0, 0) == 0
    assert scale_to_90(-2, 4) == 0


def test_aggregate_means_clamps_and_merges():
    results = [
        {
            "overall": 80,
            "subscores": {"content": 90, "fluency": 70, "transcript_accuracy": 95.0},
            "rationale": "first",
            "suggestions": ["Slow down", "Stress key words"],
            "meta": {"provider": "gemini"},
        },
        {
            "overall": 100,
            "subscores": {"content": 70, "transcript_accuracy": 90.0},
            "rationale": "second",
            "suggestions": ["Slow down", "Pause at commas"],
            "meta": {"provider": "openai"},
        },
    ]
    merged = aggregate_provider_scores(results)

    assert merged["overall"] == 90
    assert merged["subscores"]["content"] == 80
    assert merged["subscores"]["fluency"] == 70
    assert merged["subscores"]["transcript_accuracy"] == 92.5
    assert merged["rationale"] == "first"
    assert merged["suggestions"] == ["Slow down", "Stress key words", "Pause at commas"]
    assert merged["meta"]["providers"] == ["gemini", "openai"]
    assert merged["meta"]["agreement"] == 10


def test_aggregate_uses_weighted_overall_when_missing():
    weights = {"content": 0.5, "fluency": 0.5}
    merged = aggregate_provider_scores(
        [
            {"subscores": {"content": 60, "fluency": 80}, "meta": {"provider": "groq"}},
            {"overall": 50, "subscores": {"content": 50, "fluency": 50}, "meta": {"provider": "openai"}},
        ],
        weights,
    )
    assert merged["overall"] == 60


def test_aggregate_rejects_empty_results():
    with pytest.raises(ValueError):
        aggregate_provider_scores([])
