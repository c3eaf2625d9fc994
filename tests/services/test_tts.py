from __future__ import annotations

from types import SimpleNamespace

import pytest

from pte_api.services.media.tts import AudioGenerationError, generate_audio

pytestmark = pytest.mark.anyio


def _chunk(data: bytes | None, mime_type: str = "audio/L16;rate=24000"):
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    part = SimpleNamespace(inline_data=inline)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class StubModels:
    def __init__(self, chunks):
        self.chunks = chunks
        self.requests = []

    async def generate_content_stream(self, **kwargs):
        self.requests.append(kwargs)

        async def _stream():
            for chunk in self.chunks:
                yield chunk

        return _stream()


def _client(chunks):
    models = StubModels(chunks)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


async def test_chunks_are_joined_into_one_wav():
    client, models = _client([_chunk(b"\x01\x02"), SimpleNamespace(candidates=[]), _chunk(b"\x03\x04")])
    wav = await generate_audio("Hello there", client=client)
    assert wav[:4] == b"RIFF"
    assert wav[44:] == b"\x01\x02\x03\x04"
    assert models.requests[0]["config"].speech_config.voice_config is not None


async def test_multi_speaker_config():
    client, models = _client([_chunk(b"\x00\x00")])
    await generate_audio("Speaker 1: Hi\nSpeaker 2: Hello", speakers=[("Speaker 1", "Zephyr"), ("Speaker 2", "Puck")], client=client)
    config = models.requests[0]["config"].speech_config.multi_speaker_voice_config
    assert [c.speaker for c in config.speaker_voice_configs] == ["Speaker 1", "Speaker 2"]


async def test_wav_output_passes_through():
    client, _ = _client([_chunk(b"RIFFdata", mime_type="audio/wav")])
    assert await generate_audio("Hi", client=client) == b"RIFFdata"


async def test_empty_stream_raises():
    client, _ = _client([_chunk(None)])
    with pytest.raises(AudioGenerationError):
        await generate_audio("Hi", client=client)
