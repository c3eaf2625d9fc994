"""Wrap raw PCM audio (as returned by Gemini TTS) in a WAV container."""

import struct
from dataclasses import dataclass


@dataclass(frozen=True)
class WavOptions:
    num_channels: int = 1
    sample_rate: int = 16000
    bits_per_sample: int = 16


def parse_mime_type(mime_type: str) -> WavOptions:
    """
    Read PCM parameters from a mime type such as ``audio/L16;rate=24000``.

    ``L<bits>`` sets the sample width, ``rate=`` and ``channels=`` parameters
    override the defaults (mono, 16 kHz, 16-bit).
    """
    file_type, *params = [part.strip() for part in (mime_type or "").split(";")]
    _, _, fmt = file_type.partition("/")
    options = {"num_channels": 1, "sample_rate": 16000, "bits_per_sample": 16}

    if fmt.upper().startswith("L") and fmt[1:].isdigit():
        options["bits_per_sample"] = int(fmt[1:])

    for param in params:
        key, _, value = param.partition("=")
        key, value = key.strip().lower(), value.strip()
        if not value.isdigit():
            continue
        if key == "rate":
            options["sample_rate"] = int(value)
        elif key == "channels":
            options["num_channels"] = int(value)

    return WavOptions(**options)


def create_wav_header(data_length: int, options: WavOptions) -> bytes:
    """Build the 44-byte RIFF/PCM header for ``data_length`` bytes of audio."""
    byte_rate = options.sample_rate * options.num_channels * options.bits_per_sample // 8
    block_align = options.num_channels * options.bits_per_sample // 8
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,  # PCM chunk size
        1,  # PCM format
        options.num_channels,
        options.sample_rate,
        byte_rate,
        block_align,
        options.bits_per_sample,
        b"data",
        data_length,
    )


def convert_to_wav(raw: bytes, mime_type: str) -> bytes:
    return create_wav_header(len(raw), parse_mime_type(mime_type)) + raw
