"""Speaking and writing scoring flows on top of the provider orchestrator."""

import logging
import re
from typing import Optional

from pte_api.schemas.scoring import DialogInput, SpeakingInput, WritingInput
from pte_api.services.ai_service.orchestrator import ScoringOrchestrator
from pte_api.services.scoring.normalize import clamp_to_90, weighted_overall
from pte_api.services.scoring.rubrics import get_default_weights
from pte_api.services.scoring.transcript import (
    analyze_transcript,
    content_accuracy,
    words_per_minute,
)
from pte_api.utils.enums import QuestionType, SPEAKING_TYPES, WRITING_TYPES

logger = logging.getLogger(__name__)

# (min words, max words, single sentence)
WRITING_FORM_RULES: dict[str, tuple[int, int, bool]] = {
    QuestionType.summarize_written_text.value: (5, 75, True),
    QuestionType.write_essay.value: (200, 300, False),
    QuestionType.summarize_spoken_text.value: (50, 70, False),
}

_SENTENCE_END = re.compile(r"[.!?]+(?=\s|$)")


def count_words(text: str) -> int:
    return len(text.split())


def count_sentences(text: str) -> int:
    stripped = text.strip()
    if not stripped:
        return 0
    terminators = len(_SENTENCE_END.findall(stripped))
    # Trailing clause without a full stop still counts
    if not _SENTENCE_END.search(stripped[-1:] or ""):
        terminators += 1
    return max(terminators, 1)


def check_writing_form(task_type: str, text: str) -> Optional[str]:
    """Return a suggestion when the response breaks the task's form rule."""
    rule = WRITING_FORM_RULES.get(task_type)
    if rule is None:
        return None
    low, high, single_sentence = rule
    words = count_words(text)
    if words < low or words > high:
        return f"Your response has {words} words; this task requires {low}-{high} words."
    if single_sentence and count_sentences(text) != 1:
        return "Summarize the passage in exactly one sentence."
    return None


def _finalize(result: dict, weights: dict) -> dict:
    subscores = result.get("subscores") or {}
    overall = result.get("overall")
    if overall is None:
        overall = weighted_overall(subscores, weights)
    return {
        "overall": clamp_to_90(overall),
        "subscores": subscores,
        "rationale": result.get("rationale") or "",
        "suggestions": list(result.get("suggestions") or []),
        "meta": result.get("meta") or {},
    }


async def score_speaking_action(
    orchestrator: ScoringOrchestrator,
    type: str,
    transcript: str,
    prompt_text: Optional[str] = None,
    situation: Optional[str] = None,
    duration_ms: Optional[int] = None,
    audio_url: Optional[str] = None,
) -> dict:
    if not transcript or not transcript.strip():
        raise ValueError("Transcript is empty; nothing was recorded.")
    if type not in {t.value for t in SPEAKING_TYPES}:
        raise ValueError(f"Unsupported speaking task type: {type}")

    if type == QuestionType.respond_to_a_situation.value:
        raw = await orchestrator.score(
            "dialog",
            DialogInput(situation=situation or prompt_text or "", transcript=transcript),
            weights=get_default_weights("dialog"),
        )
        dialog = raw.get("subscores") or {}
        raw["subscores"] = {
            "content": dialog.get("relevance"),
            "pronunciation": dialog.get("appropriateness"),
            "fluency": dialog.get("politeness"),
            **dialog,
        }
        return _finalize(raw, get_default_weights("dialog"))

    raw = await orchestrator.score(
        "speaking",
        SpeakingInput(
            type=type,
            transcript=transcript,
            prompt_text=prompt_text,
            audio_url=audio_url,
            duration_ms=duration_ms,
        ),
        weights=get_default_weights("speaking"),
    )
    result = _finalize(raw, get_default_weights("speaking"))

    if type in (QuestionType.read_aloud.value, QuestionType.repeat_sentence.value) and prompt_text:
        result["transcript_analysis"] = analyze_transcript(prompt_text, transcript)
        result["subscores"].setdefault(
            "transcript_accuracy", content_accuracy(prompt_text, transcript)
        )
        result["words_per_minute"] = words_per_minute(transcript, duration_ms)
    return result


async def score_writing_action(
    orchestrator: ScoringOrchestrator,
    type: str,
    response_text: str,
    prompt_text: Optional[str] = None,
) -> dict:
    if not response_text or not response_text.strip():
        raise ValueError("Response text is empty.")
    if type not in {t.value for t in WRITING_TYPES}:
        raise ValueError(f"Unsupported writing task type: {type}")

    rule = WRITING_FORM_RULES.get(type)
    raw = await orchestrator.score(
        "writing",
        WritingInput(
            type=type,
            text=response_text,
            prompt_text=prompt_text,
            word_limit=(rule[0], rule[1]) if rule else None,
        ),
        weights=get_default_weights("writing"),
    )
    result = _finalize(raw, get_default_weights("writing"))
    result["subscores"]["word_count"] = count_words(response_text)

    form_issue = check_writing_form(type, response_text)
    if form_issue:
        logger.info(f"Form rule violated for {type}: {form_issue}")
        result["subscores"]["form"] = 0
        result["suggestions"].insert(0, form_issue)
        result["overall"] = weighted_overall(result["subscores"], get_default_weights("writing"))
    return result
