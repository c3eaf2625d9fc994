"""Text-to-speech for listening and repeat-sentence media via Gemini TTS."""

import logging
from typing import Optional, Sequence

from google import genai
from google.genai import types

from pte_api.core.config import settings
from pte_api.services.media.wav import convert_to_wav

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "Kore"
DEFAULT_SPEAKERS = (("Speaker 1", "Zephyr"), ("Speaker 2", "Puck"))

_client: Optional[genai.Client] = None


class AudioGenerationError(Exception):
    """Raised when the TTS model returns no audio."""


def get_genai_client() -> genai.Client:
    global _client
    if _client is None:
        if not settings.GOOGLE_API_KEY:
            raise AudioGenerationError("GOOGLE_API_KEY not set")
        _client = genai.Client(api_key=settings.GOOGLE_API_KEY)
    return _client


def _speech_config(
    voice: Optional[str], speakers: Optional[Sequence[tuple[str, str]]]
) -> types.SpeechConfig:
    if speakers:
        return types.SpeechConfig(
            multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
                speaker_voice_configs=[
                    types.SpeakerVoiceConfig(
                        speaker=speaker,
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name)
                        ),
                    )
                    for speaker, voice_name in speakers
                ]
            )
        )
    return types.SpeechConfig(
        voice_config=types.VoiceConfig(
            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice or DEFAULT_VOICE)
        )
    )


async def generate_audio(
    text: str,
    voice: Optional[str] = None,
    speakers: Optional[Sequence[tuple[str, str]]] = None,
    client: Optional[genai.Client] = None,
) -> bytes:
    """
    Synthesize ``text`` and return WAV bytes.

    Pass ``speakers`` as (label, voice name) pairs for multi-speaker scripts
    such as group discussions; the text should then prefix lines with the labels.
    """
    client = client or get_genai_client()
    config = types.GenerateContentConfig(
        temperature=0.3,
        response_modalities=["audio"],
        speech_config=_speech_config(voice, speakers),
    )
    stream = await client.aio.models.generate_content_stream(
        model=settings.GEMINI_MODEL_TTS,
        contents=[types.Content(role="user", parts=[types.Part.from_text(text=text)])],
        config=config,
    )
    chunks: list[bytes] = []
    mime_type = ""
    async for chunk in stream:
        if not chunk.candidates or not chunk.candidates[0].content or not chunk.candidates[0].content.parts:
            continue
        inline = chunk.candidates[0].content.parts[0].inline_data
        if inline and inline.data:
            chunks.append(inline.data)
            mime_type = mime_type or inline.mime_type or ""

    if not chunks:
        raise AudioGenerationError("No audio data in TTS response")
    raw = b"".join(chunks)
    if mime_type in ("audio/wav", "audio/x-wav"):
        return raw
    return convert_to_wav(raw, mime_type)
