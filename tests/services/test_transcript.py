from __future__ import annotations

from pte_api.services.scoring.transcript import (
    analyze_transcript,
    content_accuracy,
    tokenize,
    words_per_minute,
)


def test_tokenize_ignores_case_and_punctuation():
    assert tokenize("Hello, World! It’s fine.") == ["hello", "world", "it's", "fine"]
    assert tokenize(None) == []


def test_analyze_transcript_marks_omissions_and_insertions():
    analysis = analyze_transcript("The quick brown fox", "the quick red fox jumps")
    assert analysis == [
        {"word": "the", "status": "correct"},
        {"word": "quick", "status": "correct"},
        {"word": "brown", "status": "omitted"},
        {"word": "red", "status": "inserted"},
        {"word": "fox", "status": "correct"},
        {"word": "jumps", "status": "inserted"},
    ]


def test_content_accuracy():
    assert content_accuracy("one two three four", "one two four") == 75.0
    assert content_accuracy("", "anything") == 0.0
    assert content_accuracy("Same words.", "same words") == 100.0


def test_words_per_minute():
    assert words_per_minute("one two three four five six", 3000) == 120.0
    assert words_per_minute("anything", None) is None
    assert words_per_minute("anything", 0) is None
