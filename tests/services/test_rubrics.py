from __future__ import annotations

import pytest

from pte_api.schemas.scoring import (
    DialogInput,
    ListeningInput,
    ReadingInput,
    SpeakingInput,
    WritingInput,
)
from pte_api.services.scoring.rubrics import (
    build_dialog_prompt,
    build_listening_explanation_prompt,
    build_read_aloud_prompt,
    build_reading_explanation_prompt,
    build_speaking_prompt,
    build_writing_prompt,
    get_default_weights,
)


def test_default_weights():
    assert get_default_weights("writing") == {
        "content": 0.4,
        "form": 0.1,
        "grammar": 0.25,
        "vocabulary": 0.25,
    }
    speaking = get_default_weights("speaking")
    assert set(speaking) == {"content", "pronunciation", "fluency"}
    assert sum(speaking.values()) == pytest.approx(1.0)
    assert set(get_default_weights("dialog")) == {"appropriateness", "politeness", "relevance"}


def test_default_weights_unknown_kind():
    with pytest.raises(ValueError):
        get_default_weights("singing")


def test_default_weights_returns_a_copy():
    get_default_weights("writing")["content"] = 0
    assert get_default_weights("writing")["content"] == 0.4


def test_speaking_prompt_contents_are_deterministic():
    data = SpeakingInput(
        type="describe_image",
        transcript="The chart shows rising sales.",
        prompt_text="Describe the chart.",
        duration_ms=32000,
    )
    prompt = build_speaking_prompt(data)
    assert prompt == build_speaking_prompt(data)
    assert "describe_image" in prompt
    assert "Describe the chart." in prompt
    assert "The chart shows rising sales." in prompt
    assert "32.0 seconds" in prompt
    assert "0-90" in prompt
    for key in ('"content"', '"pronunciation"', '"fluency"', '"overall"', '"rationale"', '"suggestions"'):
        assert key in prompt


def test_read_aloud_prompt_with_unknown_duration():
    prompt = build_read_aloud_prompt(
        SpeakingInput(type="read_aloud", transcript="hello world", prompt_text="Hello, world.")
    )
    assert "Read Aloud" in prompt
    assert "Duration: unknown" in prompt
    assert "Hello, world." in prompt


def test_writing_prompt_includes_limits_and_count():
    prompt = build_writing_prompt(
        WritingInput(type="write_essay", text="one two three", prompt_text="Discuss.", word_limit=(200, 300))
    )
    assert "Required length: 200-300 words" in prompt
    assert "(3 words)" in prompt
    for key in ('"form"', '"grammar"', '"vocabulary"', '"word_count"'):
        assert key in prompt


def test_explanation_prompts_name_the_section():
    reading = build_reading_explanation_prompt(
        ReadingInput(
            type="reading_multiple_choice_single",
            question="What is the main idea?",
            passage="Bees pollinate crops.",
            options=["Bees", "Wasps"],
            user_answer="Wasps",
            correct_answer="Bees",
        )
    )
    listening = build_listening_explanation_prompt(
        ListeningInput(type="select_missing_word", question="Pick the last word", transcript="And so we")
    )
    assert "PTE Academic reading tutor" in reading
    assert "Passage: \"Bees pollinate crops.\"" in reading
    assert "- Wasps" in reading
    assert "PTE Academic listening tutor" in listening
    assert "Audio transcript" in listening
    assert '"explanation"' in listening


def test_dialog_prompt():
    prompt = build_dialog_prompt(
        DialogInput(situation="Your neighbour is noisy.", transcript="Could you please keep it down?")
    )
    assert "Your neighbour is noisy." in prompt
    for key in ('"appropriateness"', '"politeness"', '"relevance"'):
        assert key in prompt
