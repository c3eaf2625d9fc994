"""Examiner prompt builders for each PTE task family."""

import json
from pte_api.schemas.scoring import (
    DialogInput,
    ListeningInput,
    ReadingInput,
    SpeakingInput,
    WritingInput,
)

DEFAULT_WEIGHTS: dict[str, dict[str, float]] = {
    "speaking": {"content": 1 / 3, "pronunciation": 1 / 3, "fluency": 1 / 3},
    "writing": {"content": 0.4, "form": 0.1, "grammar": 0.25, "vocabulary": 0.25},
    "dialog": {"appropriateness": 1 / 3, "politeness": 1 / 3, "relevance": 1 / 3},
}

SPEAKING_CRITERIA = [
    "Content (0-90): how completely and accurately the response covers the task.",
    "Pronunciation (0-90): clarity of sounds, word stress and intelligibility, inferred from the transcript.",
    "Fluency (0-90): smooth delivery without hesitations, repetitions or false starts; natural pace around 120-150 words per minute.",
]

WRITING_CRITERIA = [
    "Content (0-90): relevance to the prompt and coverage of its main points.",
    "Form (0-90): compliance with the task's length and sentence requirements.",
    "Grammar (0-90): grammatical accuracy and range.",
    "Vocabulary (0-90): precision and range of word choice.",
]

DIALOG_CRITERIA = [
    "Appropriateness (0-90): is the tone and register right for the situation?",
    "Politeness (0-90): is the language polite and respectful?",
    "Relevance (0-90): does the response address the situation and offer a response or solution?",
]

OUTPUT_HYGIENE = """
OUTPUT HYGIENE:
- Return STRICT JSON only: no markdown, no code fences, no extra commentary.
- All scores are numbers on the PTE Academic scale from 0 to 90 unless stated otherwise.
"""


def get_default_weights(kind: str) -> dict[str, float]:
    try:
        return dict(DEFAULT_WEIGHTS[kind])
    except KeyError:
        raise ValueError(f"No default weights for scoring kind: {kind}")


def _json_contract(fields: dict) -> str:
    return json.dumps(fields, indent=2)


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def _task_label(task_type: str) -> str:
    return task_type.replace("_", " ").title()


def build_speaking_prompt(input: SpeakingInput) -> str:
    reference = f'\nReference / prompt text: "{input.prompt_text}"' if input.prompt_text else ""
    duration = (
        f"\nRecording duration: {input.duration_ms / 1000:.1f} seconds"
        if input.duration_ms
        else ""
    )
    contract = _json_contract({
        "content": "number 0-90",
        "pronunciation": "number 0-90",
        "fluency": "number 0-90",
        "overall": "number 0-90",
        "rationale": "string",
        "suggestions": ["string"],
        "transcript_accuracy": "optional number 0-100",
    })
    return f"""You are an expert PTE Academic examiner scoring a speaking task.

Task type: {_task_label(input.type)} ({input.type}){reference}
Candidate transcript: "{input.transcript}"{duration}

Score the response on:
{_numbered(SPEAKING_CRITERIA)}

Give an overall score on the 0-90 scale that reflects the three criteria.
Provide a short rationale and concrete suggestions for improvement.
{OUTPUT_HYGIENE}
OUTPUT FORMAT (STRICT JSON) with exactly these keys:
{contract}
"""


def build_read_aloud_prompt(input: SpeakingInput) -> str:
    duration = f"{input.duration_ms / 1000:.1f} seconds" if input.duration_ms else "unknown"
    contract = _json_contract({
        "content": "number 0-90",
        "pronunciation": "number 0-90",
        "fluency": "number 0-90",
        "overall": "number 0-90",
        "rationale": "string",
        "suggestions": ["string"],
    })
    return f"""You are an expert PTE Academic examiner. Score this "Read Aloud" attempt.

Task: read the text aloud as naturally and clearly as possible.
Prompt text: "{input.prompt_text or ''}"
Candidate transcript: "{input.transcript}"
Duration: {duration}

Scoring criteria:
1. Content (0-90): does the transcript match the prompt? Penalize omissions and insertions.
2. Pronunciation (0-90): inferred from transcript accuracy and phonetic likelihood.
3. Fluency (0-90): inferred from text length against duration. Target about 120-150 words per minute.
{OUTPUT_HYGIENE}
OUTPUT FORMAT (STRICT JSON) with exactly these keys:
{contract}
"""


def build_writing_prompt(input: WritingInput) -> str:
    prompt = f'\nPrompt: "{input.prompt_text}"' if input.prompt_text else ""
    limits = ""
    if input.word_limit:
        low, high = input.word_limit
        limits = f"\nRequired length: {low}-{high} words"
    word_count = len(input.text.split())
    contract = _json_contract({
        "content": "number 0-90",
        "form": "number 0-90",
        "grammar": "number 0-90",
        "vocabulary": "number 0-90",
        "overall": "number 0-90",
        "rationale": "string",
        "suggestions": ["string"],
        "word_count": "integer",
        "coherence_score": "optional number 0-100",
        "cohesion_score": "optional number 0-100",
    })
    return f"""You are an expert PTE Academic examiner scoring a writing task.

Task type: {_task_label(input.type)} ({input.type}){prompt}{limits}
Candidate response ({word_count} words):
\"\"\"
{input.text}
\"\"\"

Score the response on:
{_numbered(WRITING_CRITERIA)}

Give an overall score on the 0-90 scale that reflects the four criteria.
{OUTPUT_HYGIENE}
OUTPUT FORMAT (STRICT JSON) with exactly these keys:
{contract}
"""


def _explanation_prompt(section: str, input, source_label: str, source_text) -> str:
    options = ""
    if input.options:
        options = "\nOptions:\n" + "\n".join(f"- {opt}" for opt in input.options)
    source = f"\n{source_label}: \"{source_text}\"" if source_text else ""
    contract = _json_contract({
        "explanation": "string",
        "confidence": "number 0-100",
        "key_points": ["string"],
        "strategies": ["string"],
    })
    return f"""You are an expert PTE Academic {section} tutor.

Task type: {_task_label(input.type)} ({input.type}){source}
Question: "{input.question}"{options}
Candidate answer: {json.dumps(input.user_answer)}
Correct answer: {json.dumps(input.correct_answer)}

Explain why the correct answer is right and, if the candidate answer differs,
where the candidate went wrong. List the key points and {section} strategies
that would help next time. Confidence is your certainty in the explanation (0-100).
{OUTPUT_HYGIENE}
OUTPUT FORMAT (STRICT JSON) with exactly these keys:
{contract}
"""


def build_reading_explanation_prompt(input: ReadingInput) -> str:
    return _explanation_prompt("reading", input, "Passage", input.passage)


def build_listening_explanation_prompt(input: ListeningInput) -> str:
    return _explanation_prompt("listening", input, "Audio transcript", input.transcript)


def build_dialog_prompt(input: DialogInput) -> str:
    contract = _json_contract({
        "appropriateness": "number 0-90",
        "politeness": "number 0-90",
        "relevance": "number 0-90",
        "overall": "number 0-90",
        "rationale": "string",
        "suggestions": ["string"],
    })
    return f"""You are an expert PTE Academic examiner. Evaluate the following response to a "Respond to a Situation" question.

Situation: "{input.situation}"
Candidate response: "{input.transcript}"

Score the response on:
{_numbered(DIALOG_CRITERIA)}

Provide an overall score (0-90) based on these factors, a rationale and suggestions for improvement.
{OUTPUT_HYGIENE}
OUTPUT FORMAT (STRICT JSON) with exactly these keys:
{contract}
"""
