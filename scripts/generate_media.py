"""
Generate TTS audio for listening and repeat-sentence questions that have none.

For every matching question without ``question_data.audio_url`` the script:
- synthesizes the transcript (or the question text) with Gemini TTS
- stores the WAV under ``pte/media/<question_type>/<question_id>.wav``
- writes the key and an access URL back into ``question_data``

Usage:
  PYTHONPATH=. python scripts/generate_media.py --limit 20
  PYTHONPATH=. python scripts/generate_media.py --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select  # noqa: E402

from pte_api.core.logging_config import get_logger  # noqa: E402
from pte_api.db.deps import AsyncSessionLocal  # noqa: E402
from pte_api.models.pte_question import PteQuestion  # noqa: E402
from pte_api.services.media.tts import DEFAULT_SPEAKERS, AudioGenerationError, generate_audio  # noqa: E402
from pte_api.services.storage_service import generate_access_url, store_bytes  # noqa: E402
from pte_api.utils.enums import QuestionType, Section  # noqa: E402

logger = get_logger("scripts.generate_media")

MULTI_SPEAKER_TYPES = {QuestionType.summarize_group_discussion.value}


def needs_audio(question: PteQuestion) -> bool:
    if question.section != Section.listening and question.question_type != QuestionType.repeat_sentence.value:
        return False
    return not (question.question_data or {}).get("audio_url")


def script_for(question: PteQuestion) -> str:
    data = question.question_data or {}
    return data.get("transcript") or data.get("audio_script") or question.question


async def run(limit: int, dry_run: bool) -> int:
    generated = 0
    async with AsyncSessionLocal() as db:
        result = await db.execute(
            select(PteQuestion).where(PteQuestion.is_active.is_(True)).order_by(PteQuestion.created_at)
        )
        pending = [q for q in result.scalars().all() if needs_audio(q)][:limit]
        logger.info(f"{len(pending)} question(s) need audio")

        for question in pending:
            text = script_for(question)
            if dry_run:
                logger.info(f"[dry-run] {question.id} ({question.question_type}): {text[:60]}")
                continue
            speakers = DEFAULT_SPEAKERS if question.question_type in MULTI_SPEAKER_TYPES else None
            try:
                audio = await generate_audio(text, speakers=speakers)
            except AudioGenerationError as e:
                logger.error(f"Skipping {question.id}: {e}")
                continue

            key = f"pte/media/{question.question_type}/{question.id}.wav"
            await store_bytes(key=key, data=audio, content_type="audio/wav")
            # Reassign so SQLAlchemy sees the JSON change
            question.question_data = {
                **(question.question_data or {}),
                "audio_key": key,
                "audio_url": await generate_access_url(key=key) or key,
            }
            db.add(question)
            await db.commit()
            generated += 1
            logger.info(f"Stored {len(audio)} bytes for {question.id} at {key}")
    return generated


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate missing PTE question audio")
    parser.add_argument("--limit", type=int, default=50)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    count = asyncio.run(run(args.limit, args.dry_run))
    print(f"Generated audio for {count} question(s)")


if __name__ == "__main__":
    main()
