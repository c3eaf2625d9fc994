from __future__ import annotations

import pytest

from conftest import FakeProvider
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator
from pte_api.services.scoring.actions import (
    check_writing_form,
    count_sentences,
    score_speaking_action,
    score_writing_action,
)

pytestmark = pytest.mark.anyio

ESSAY = " ".join(["word"] * 240) + "."


def test_count_sentences_counts_trailing_clause():
    assert count_sentences("") == 0
    assert count_sentences("One sentence only.") == 1
    assert count_sentences("First one. Second one") == 2


@pytest.mark.parametrize(
    "task_type, text, expected",
    [
        ("write_essay", ESSAY, None),
        ("write_essay", "Too short.", "requires 200-300 words"),
        ("summarize_written_text", "Cities grow because jobs attract young workers.", None),
        ("summarize_written_text", "Cities grow fast. Jobs attract young workers.", "exactly one sentence"),
        ("write_from_dictation", "anything at all", None),
    ],
)
def test_check_writing_form(task_type, text, expected):
    issue = check_writing_form(task_type, text)
    if expected is None:
        assert issue is None
    else:
        assert expected in issue


async def test_dialog_scores_are_mapped_to_speaking_traits(orchestrator):
    result = await score_speaking_action(
        orchestrator,
        type="respond_to_a_situation",
        transcript="I'm sorry, could we move the meeting to Friday?",
        situation="You missed a meeting with your tutor.",
    )
    assert result["subscores"]["content"] == 81
    assert result["subscores"]["pronunciation"] == 60
    assert result["subscores"]["fluency"] == 75
    assert result["subscores"]["relevance"] == 81
    assert result["overall"] == 72


async def test_read_aloud_adds_transcript_analysis(orchestrator):
    result = await score_speaking_action(
        orchestrator,
        type="read_aloud",
        transcript="hello world",
        prompt_text="Hello world today",
        duration_ms=1000,
    )
    assert result["overall"] == 67
    assert result["subscores"]["transcript_accuracy"] == 66.7
    assert result["words_per_minute"] == 120.0
    statuses = [entry["status"] for entry in result["transcript_analysis"]]
    assert statuses == ["correct", "correct", "omitted"]


async def test_missing_overall_uses_weighted_subscores():
    provider = FakeProvider(payloads={"speaking": {"overall": None, "content": 90, "pronunciation": 60, "fluency": 60}})
    result = await score_speaking_action(
        ScoringOrchestrator([provider]), type="describe_image", transcript="A chart"
    )
    assert result["overall"] == 70
    assert "transcript_analysis" not in result


async def test_empty_transcript_rejected(orchestrator, fake_provider):
    with pytest.raises(ValueError):
        await score_speaking_action(orchestrator, type="read_aloud", transcript="   ")
    assert fake_provider.calls == []


async def test_unknown_speaking_type_rejected(orchestrator):
    with pytest.raises(ValueError):
        await score_speaking_action(orchestrator, type="write_essay", transcript="hello")


async def test_writing_within_form_keeps_provider_scores(orchestrator):
    result = await score_writing_action(orchestrator, type="write_essay", response_text=ESSAY)
    assert result["overall"] == 71
    assert result["subscores"]["form"] == 80
    assert result["subscores"]["word_count"] == 240


async def test_writing_form_violation_zeroes_form(orchestrator):
    result = await score_writing_action(
        orchestrator, type="write_essay", response_text="Technology helps people learn."
    )
    assert result["subscores"]["form"] == 0
    assert result["suggestions"][0].startswith("Your response has 4 words")
    assert result["overall"] == 63


async def test_unknown_writing_type_rejected(orchestrator):
    with pytest.raises(ValueError):
        await score_writing_action(orchestrator, type="read_aloud", response_text="text")
