"""Local word-level comparison of a spoken transcript against its reference text."""

import difflib
import re

_WORD_RE = re.compile(r"[a-z0-9']+")


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    return _WORD_RE.findall(text.lower().replace("’", "'"))


def analyze_transcript(reference: str, transcript: str) -> list[dict]:
    """
    Align transcript words against the reference.

    Returns one entry per word in reading order with status ``correct``,
    ``omitted`` (in the reference but not spoken) or ``inserted`` (spoken but
    not in the reference). Substituted words appear as an omission followed
    by an insertion.
    """
    ref_words = tokenize(reference)
    said_words = tokenize(transcript)
    matcher = difflib.SequenceMatcher(a=ref_words, b=said_words, autojunk=False)

    analysis: list[dict] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            analysis.extend({"word": w, "status": "correct"} for w in ref_words[i1:i2])
            continue
        if tag in ("delete", "replace"):
            analysis.extend({"word": w, "status": "omitted"} for w in ref_words[i1:i2])
        if tag in ("insert", "replace"):
            analysis.extend({"word": w, "status": "inserted"} for w in said_words[j1:j2])
    return analysis


def content_accuracy(reference: str, transcript: str) -> float:
    """Percentage (0-100) of reference words spoken in order."""
    ref_words = tokenize(reference)
    if not ref_words:
        return 0.0
    matcher = difflib.SequenceMatcher(a=ref_words, b=tokenize(transcript), autojunk=False)
    matched = sum(block.size for block in matcher.get_matching_blocks())
    return round(100.0 * matched / len(ref_words), 1)


def words_per_minute(transcript: str, duration_ms: int | None) -> float | None:
    if not duration_ms or duration_ms <= 0:
        return None
    return round(len(tokenize(transcript)) * 60000.0 / duration_ms, 1)
